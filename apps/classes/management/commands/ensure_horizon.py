from datetime import date

from django.core.management.base import BaseCommand, CommandError

from apps.classes.services import ensure_horizon


class Command(BaseCommand):
    help = "Generate sessions from active class templates for the upcoming horizon"

    def add_arguments(self, parser):
        parser.add_argument("--days", type=int, default=None, help="Horizon length in days")
        parser.add_argument("--today", type=str, default=None, help="Start date (YYYY-MM-DD)")

    def handle(self, *args, **options):
        today = None
        if options["today"]:
            try:
                today = date.fromisoformat(options["today"])
            except ValueError as exc:
                raise CommandError(f"Invalid date: {options['today']}") from exc

        result = ensure_horizon(today=today, horizon_days=options["days"])

        self.stdout.write(
            self.style.SUCCESS(f"Created {result.created} sessions for {result.window}")
        )
        if result.failed_templates:
            self.stderr.write(
                f"Failed templates: {', '.join(str(t) for t in result.failed_templates)}"
            )
