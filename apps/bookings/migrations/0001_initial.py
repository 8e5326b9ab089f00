import decimal

import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('classes', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Booking',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('booking_code', models.CharField(editable=False, max_length=12, unique=True)),
                ('status', models.CharField(choices=[('pending', 'Pending payment'), ('confirmed', 'Confirmed'), ('cancelled', 'Cancelled')], default='pending', max_length=16)),
                ('payment_method', models.CharField(choices=[('card', 'Card'), ('cash', 'Cash at the session')], max_length=8)),
                ('payment_reference', models.CharField(blank=True, help_text='Provider payment id for settled card payments.', max_length=128)),
                ('is_free_session', models.BooleanField(default=False)),
                ('price', models.DecimalField(decimal_places=2, default=decimal.Decimal('0.00'), help_text='Price charged at booking time.', max_digits=8)),
                ('origin', models.CharField(blank=True, help_text='Client network origin the booking came from.', max_length=64)),
                ('confirmed_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('cancellation_source', models.CharField(blank=True, choices=[('member', 'Member'), ('admin', 'Admin'), ('system', 'System')], max_length=16)),
                ('cancellation_reason', models.CharField(blank=True, max_length=255)),
                ('created_at', models.DateTimeField(default=django.utils.timezone.now, editable=False)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('member', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='bookings', to=settings.AUTH_USER_MODEL)),
                ('session', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='bookings', to='classes.session')),
            ],
            options={
                'verbose_name': 'Booking',
                'verbose_name_plural': 'Bookings',
                'ordering': ['-created_at'],
                'indexes': [
                    models.Index(fields=['status', 'created_at'], name='booking_status_created_idx'),
                    models.Index(fields=['member', 'status'], name='booking_member_status_idx'),
                    models.Index(fields=['origin', 'created_at'], name='booking_origin_created_idx'),
                ],
                'constraints': [
                    models.UniqueConstraint(condition=models.Q(('status', 'cancelled'), _negated=True), fields=('member', 'session'), name='booking_one_active_per_member_session'),
                    models.CheckConstraint(condition=models.Q(('price__gte', 0)), name='booking_price_non_negative'),
                ],
            },
        ),
    ]
