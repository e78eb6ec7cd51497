"""Read-only guards run before bookings and payments are written.

Both checks are plain queries. Callers run them inside the transaction that
performs the write, after locking the customer (bookings) or the booking
(payments) row, so two concurrent requests cannot both pass the same guard.
"""
from datetime import timedelta
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.utils import timezone

from payments.models import Payment

from .models import Booking


def list_booking_conflicts(customer_id, destination, start_date, end_date, exclude_booking_id=None):
    """
    Active bookings of the customer for the same destination whose dates
    overlap ``[start_date, end_date]`` (both ends inclusive).
    """
    if not customer_id or not destination or not start_date or not end_date:
        return Booking.objects.none()

    qs = (
        Booking.objects.filter(
            customer_id=customer_id,
            destination=destination,
            start_date__lte=end_date,
            end_date__gte=start_date,
        )
        .exclude(status__in=Booking.INACTIVE_STATUSES)
        .select_related("customer")
        .order_by("start_date", "id")
    )
    if exclude_booking_id:
        qs = qs.exclude(pk=exclude_booking_id)
    return qs


def check_booking_conflict(customer_id, destination, start_date, end_date, exclude_booking_id=None) -> Optional[Booking]:
    return list_booking_conflicts(
        customer_id, destination, start_date, end_date, exclude_booking_id
    ).first()


def check_duplicate_payment(booking_id, amount: Decimal, window_minutes: Optional[int] = None) -> Optional[Payment]:
    if not booking_id or not amount:
        return None
    if window_minutes is None:
        window_minutes = settings.DUPLICATE_PAYMENT_WINDOW_MINUTES

    window_start = timezone.now() - timedelta(minutes=window_minutes)
    return (
        Payment.objects.filter(
            booking_id=booking_id,
            amount=amount,
            status=Payment.Status.COMPLETED,
            created_at__gte=window_start,
        )
        .order_by("created_at")
        .first()
    )
