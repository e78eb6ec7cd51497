import logging

from django.core.management.base import BaseCommand

from booking.models import Booking
from commissions.services import create_commission

logger = logging.getLogger(__name__)

# Refunded bookings can only have come through "completed".
COMMISSIONABLE_STATUSES = (Booking.Status.COMPLETED, Booking.Status.REFUNDED)


class Command(BaseCommand):
    help = "Create the missing commission for every completed booking"

    def add_arguments(self, parser):
        parser.add_argument(
            "--dry-run",
            action="store_true",
            help="Only report the bookings that have no commission yet.",
        )

    def handle(self, *args, **options):
        missing = (
            Booking.objects.filter(status__in=COMMISSIONABLE_STATUSES, commission__isnull=True)
            .select_related("agent")
            .order_by("id")
        )
        if options["dry_run"]:
            for booking in missing:
                self.stdout.write(f"{booking.reference} ({booking.agent}) has no commission")
            self.stdout.write(self.style.WARNING(f"{missing.count()} booking(s) without commission."))
            return

        created = 0
        for booking in missing:
            commission = create_commission(booking, booking.agent)
            logger.info("Reconciled commission %s for booking %s", commission.reference, booking.reference)
            created += 1

        self.stdout.write(self.style.SUCCESS(f"Created {created} missing commission(s)."))


"""to backfill commissions (e.g. from an hourly cron), run:

python manage.py reconcile_commissions

"""
