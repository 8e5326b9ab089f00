from django.core.management.base import BaseCommand

from apps.bookings.tasks import reclaim_stale_bookings


class Command(BaseCommand):
    help = "Cancel pending bookings left unpaid for more than 24 hours and release their seats"

    def handle(self, *args, **options):
        reclaimed = reclaim_stale_bookings()
        self.stdout.write(self.style.SUCCESS(f"Reclaimed {reclaimed} stale pending bookings"))
