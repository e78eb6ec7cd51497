import re
from datetime import date
from decimal import Decimal

import pytest
from django.test import override_settings

from booking.models import Booking
from booking.references import next_reference


def test_reference_format():
    assert re.fullmatch(r"BK-[0-9A-Z]+-[0-9A-F]{6}", next_reference("BK"))
    assert next_reference("TXN").startswith("TXN-")


@pytest.mark.parametrize(
    "total, paid, refunded, expected",
    [
        ("1050", "0", "0", Booking.PaymentStatus.UNPAID),
        ("1050", "500", "0", Booking.PaymentStatus.PARTIALLY_PAID),
        ("1050", "1050", "0", Booking.PaymentStatus.PAID),
        ("1050", "0", "1050", Booking.PaymentStatus.REFUNDED),
        ("1050", "550", "500", Booking.PaymentStatus.PARTIALLY_PAID),
    ],
)
def test_derive_payment_status(total, paid, refunded, expected):
    assert Booking.derive_payment_status(Decimal(total), Decimal(paid), Decimal(refunded)) == expected


@pytest.mark.django_db
def test_save_recomputes_derived_fields_from_pricing(agent, customer):
    booking = Booking.objects.create(
        agent=agent,
        customer=customer,
        title="Trip",
        destination="Goa",
        start_date=date(2030, 1, 1),
        end_date=date(2030, 1, 4),
        base_price=Decimal("1000"),
        taxes=Decimal("100"),
        service_charge=Decimal("0"),
        discount=Decimal("50"),
        total_amount=Decimal("1"),
        amount_due=Decimal("2"),
    )
    booking.refresh_from_db()

    assert booking.total_amount == Decimal("1050.00")
    assert booking.amount_due == Decimal("1050.00")
    assert booking.payment_status == Booking.PaymentStatus.UNPAID
    assert booking.number_of_nights == 3
    assert booking.reference.startswith("BK-")


@pytest.mark.django_db
def test_save_with_update_fields_keeps_amount_due_consistent(booking):
    booking.amount_paid = Decimal("300")
    booking.save(update_fields=["amount_paid"])
    booking.refresh_from_db()

    assert booking.amount_due == booking.total_amount - booking.amount_paid == Decimal("750.00")
    assert booking.payment_status == Booking.PaymentStatus.PARTIALLY_PAID


def test_transition_table():
    booking = Booking(status=Booking.Status.COMPLETED)
    assert booking.can_transition_to(Booking.Status.REFUNDED)
    assert not booking.can_transition_to(Booking.Status.PENDING)
    assert not Booking(status=Booking.Status.REFUNDED).can_transition_to(Booking.Status.PENDING)
    assert Booking(status=Booking.Status.CANCELLED).can_transition_to(Booking.Status.PENDING)


@pytest.mark.django_db
@override_settings(DEFAULT_CURRENCY="INR")
def test_currency_defaults_to_configured_currency(make_booking):
    assert make_booking().currency == "INR"
    assert make_booking(destination="Kerala", currency="EUR").currency == "EUR"
