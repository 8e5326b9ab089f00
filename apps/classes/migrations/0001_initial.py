import django.core.validators
import django.db.models.deletion
from django.db import migrations, models

import apps.classes.models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='ClassTemplate',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('class_type', models.CharField(max_length=50)),
                ('day_of_week', models.PositiveSmallIntegerField(choices=[(0, 'Monday'), (1, 'Tuesday'), (2, 'Wednesday'), (3, 'Thursday'), (4, 'Friday'), (5, 'Saturday'), (6, 'Sunday')], validators=[django.core.validators.MaxValueValidator(6)])),
                ('start_time', models.TimeField(help_text='Local start time')),
                ('duration_minutes', models.PositiveSmallIntegerField(default=60)),
                ('capacity', models.PositiveIntegerField(default=apps.classes.models.default_capacity, validators=[django.core.validators.MinValueValidator(1)])),
                ('price', models.DecimalField(decimal_places=2, default=apps.classes.models.default_price, max_digits=8)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
            ],
            options={
                'verbose_name': 'Class template',
                'verbose_name_plural': 'Class templates',
                'ordering': ['day_of_week', 'start_time'],
            },
        ),
        migrations.CreateModel(
            name='Session',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('class_type', models.CharField(max_length=50)),
                ('date', models.DateField()),
                ('start_time', models.TimeField()),
                ('duration_minutes', models.PositiveSmallIntegerField(default=60)),
                ('capacity', models.PositiveIntegerField(default=apps.classes.models.default_capacity, validators=[django.core.validators.MinValueValidator(1)])),
                ('booked_count', models.PositiveIntegerField(default=0, editable=False)),
                ('price', models.DecimalField(decimal_places=2, default=apps.classes.models.default_price, max_digits=8)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('template', models.ForeignKey(blank=True, help_text='Empty for ad-hoc sessions', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sessions', to='classes.classtemplate')),
            ],
            options={
                'verbose_name': 'Session',
                'verbose_name_plural': 'Sessions',
                'ordering': ['date', 'start_time'],
                'indexes': [
                    models.Index(fields=['date', 'start_time'], name='session_date_time_idx'),
                    models.Index(fields=['is_active', 'date'], name='session_active_date_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('booked_count__lte', models.F('capacity'))), name='session_booked_within_capacity'),
                    models.UniqueConstraint(fields=('template', 'date'), name='session_unique_template_date'),
                ],
            },
        ),
    ]
