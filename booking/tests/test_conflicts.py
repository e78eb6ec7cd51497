from datetime import date, timedelta
from decimal import Decimal

import pytest
from django.utils import timezone

from booking.conflicts import check_booking_conflict, check_duplicate_payment, list_booking_conflicts
from booking.models import Booking
from payments.models import Payment

pytestmark = pytest.mark.django_db


def test_overlapping_dates_conflict(booking, customer):
    conflict = check_booking_conflict(customer.pk, "Goa", date(2030, 3, 14), date(2030, 3, 20))
    assert conflict == booking


def test_touching_end_date_counts_as_overlap(booking, customer):
    assert check_booking_conflict(customer.pk, "Goa", date(2030, 3, 15), date(2030, 3, 18)) == booking


def test_disjoint_dates_or_other_destination_do_not_conflict(booking, customer):
    assert check_booking_conflict(customer.pk, "Goa", date(2030, 3, 16), date(2030, 3, 20)) is None
    assert check_booking_conflict(customer.pk, "Kerala", date(2030, 3, 10), date(2030, 3, 15)) is None


def test_inactive_bookings_are_ignored(booking, customer):
    Booking.objects.filter(pk=booking.pk).update(status=Booking.Status.CANCELLED)
    assert check_booking_conflict(customer.pk, "Goa", date(2030, 3, 10), date(2030, 3, 15)) is None


def test_excluded_booking_does_not_conflict_with_itself(booking, customer):
    assert check_booking_conflict(
        customer.pk, "Goa", date(2030, 3, 10), date(2030, 3, 15), exclude_booking_id=booking.pk
    ) is None


def test_missing_inputs_mean_no_conflict(booking, customer):
    assert check_booking_conflict(customer.pk, "", date(2030, 3, 10), date(2030, 3, 15)) is None
    assert check_booking_conflict(customer.pk, "Goa", None, date(2030, 3, 15)) is None


def test_list_booking_conflicts_orders_by_start_date(make_booking, customer):
    later = make_booking(start_date=date(2030, 5, 10), end_date=date(2030, 5, 12))
    earlier = make_booking(start_date=date(2030, 5, 1), end_date=date(2030, 5, 3))

    conflicts = list(list_booking_conflicts(customer.pk, "Goa", date(2030, 5, 1), date(2030, 5, 31)))
    assert conflicts == [earlier, later]


def _completed_payment(booking, amount, **extra):
    return Payment.objects.create(
        booking=booking,
        agent=booking.agent,
        customer=booking.customer,
        amount=Decimal(amount),
        method=Payment.Method.CASH,
        status=Payment.Status.COMPLETED,
        **extra,
    )


def test_duplicate_payment_inside_window(booking):
    previous = _completed_payment(booking, "500")
    assert check_duplicate_payment(booking.pk, Decimal("500")) == previous
    assert check_duplicate_payment(booking.pk, Decimal("400")) is None


def test_duplicate_payment_window_expires(booking):
    previous = _completed_payment(booking, "500")
    Payment.objects.filter(pk=previous.pk).update(
        created_at=timezone.now() - timedelta(minutes=5, seconds=1)
    )
    assert check_duplicate_payment(booking.pk, Decimal("500")) is None


def test_failed_payments_are_not_duplicates(booking):
    _completed_payment(booking, "500")
    Payment.objects.update(status=Payment.Status.FAILED)
    assert check_duplicate_payment(booking.pk, Decimal("500")) is None
