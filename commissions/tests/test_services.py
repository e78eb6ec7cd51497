from decimal import Decimal

import pytest

from booking import services as booking_services
from booking.exceptions import InvalidState, NotFound
from booking.models import Booking
from commissions import services
from commissions.models import Commission

pytestmark = pytest.mark.django_db

COMPLETE = (Booking.Status.CONFIRMED, Booking.Status.IN_PROGRESS, Booking.Status.COMPLETED)


def complete(booking):
    for new_status in COMPLETE:
        booking = booking_services.update_booking_status(booking.pk, new_status, booking.agent)
    return booking


@pytest.fixture
def commission(booking):
    return Commission.objects.get(booking=complete(booking))


@pytest.mark.parametrize(
    "amount, tier, rate",
    [
        ("0", "junior", "8"),
        ("50000", "junior", "8"),
        ("50001", "standard", "10"),
        ("200000", "standard", "10"),
        ("300000", "senior", "12"),
        ("500000", "senior", "12"),
        ("500001", "premium", "15"),
        # Between two configured ranges.
        ("50000.50", "standard", "10"),
    ],
)
def test_get_commission_tier(amount, tier, rate):
    assert services.get_commission_tier(Decimal(amount)) == (tier, Decimal(rate))


def test_compute_commission_without_bonus():
    figures = services.compute_commission(Decimal("1050.00"))
    assert figures == {
        "tier": "junior",
        "commission_rate": Decimal("8"),
        "commission_amount": Decimal("84.00"),
        "bonus_amount": Decimal("0"),
        "total_earning": Decimal("84.00"),
    }


def test_compute_commission_large_deal_bonus():
    figures = services.compute_commission(Decimal("600000"))
    assert figures["commission_amount"] == Decimal("90000.00")
    assert figures["bonus_amount"] == Decimal("9000.00")
    assert figures["total_earning"] == Decimal("99000.00")


def test_threshold_itself_earns_no_bonus():
    assert services.compute_commission(Decimal("500000"))["bonus_amount"] == Decimal("0")


def test_agent_rate_overrides_tier_rate():
    figures = services.compute_commission(Decimal("1050.00"), agent_rate=Decimal("5"))
    assert figures["tier"] == "junior"
    assert figures["commission_rate"] == Decimal("5")
    assert figures["commission_amount"] == Decimal("52.50")


def test_amounts_round_half_up():
    assert services.compute_commission(Decimal("100.0625"))["commission_amount"] == Decimal("8.01")


def test_commission_created_on_completion(commission, booking, agent):
    assert commission.agent == agent
    assert commission.booking_amount == Decimal("1050.00")
    assert commission.tier == "junior"
    assert commission.total_earning == commission.commission_amount + commission.bonus_amount
    assert commission.status == Commission.Status.PENDING
    assert commission.reference.startswith("COM-")


def test_create_commission_is_idempotent(commission, booking, agent):
    again = services.create_commission(booking, agent)
    assert again.pk == commission.pk
    assert Commission.objects.count() == 1


def test_agent_rate_is_used_when_set(make_booking, agent):
    agent.commission_rate = Decimal("20")
    agent.save(update_fields=["commission_rate"])

    commission = Commission.objects.get(booking=complete(make_booking()))

    assert commission.commission_rate == Decimal("20.00")
    assert commission.commission_amount == Decimal("210.00")


def test_approve_then_pay(commission, agent, admin_user):
    approved = services.approve_commission(commission.pk, admin_user)
    assert approved.status == Commission.Status.APPROVED
    assert approved.approved_by == admin_user
    assert approved.approved_at is not None

    paid = services.mark_commission_paid(
        commission.pk, {"payment_method": "bank_transfer", "transaction_reference": "NEFT-1"}, admin_user
    )
    assert paid.status == Commission.Status.PAID
    assert paid.paid_by == admin_user
    assert paid.transaction_reference == "NEFT-1"

    agent.refresh_from_db()
    assert agent.total_earnings == Decimal("84.00")


def test_approve_twice_is_rejected(commission, admin_user):
    services.approve_commission(commission.pk, admin_user)
    with pytest.raises(InvalidState) as excinfo:
        services.approve_commission(commission.pk, admin_user)
    assert str(excinfo.value) == "Already 'approved'"


def test_pay_requires_approval(commission, admin_user, agent):
    with pytest.raises(InvalidState):
        services.mark_commission_paid(commission.pk, None, admin_user)
    agent.refresh_from_db()
    assert agent.total_earnings == Decimal("0.00")


def test_reject(commission, admin_user):
    rejected = services.reject_commission(commission.pk, admin_user, reason="Booking disputed")
    assert rejected.status == Commission.Status.REJECTED
    assert rejected.rejection_reason == "Booking disputed"
    with pytest.raises(InvalidState):
        services.approve_commission(commission.pk, admin_user)


def test_hold_and_release_clears_approval(commission, admin_user):
    services.approve_commission(commission.pk, admin_user)
    held = services.hold_commission(commission.pk, admin_user, notes="Awaiting invoice")
    assert held.status == Commission.Status.ON_HOLD
    assert held.notes == "Awaiting invoice"
    with pytest.raises(InvalidState):
        services.mark_commission_paid(commission.pk, None, admin_user)

    released = services.release_commission(commission.pk, admin_user)
    assert released.status == Commission.Status.PENDING
    assert released.approved_by is None
    assert released.approved_at is None


def test_paid_commission_is_final(commission, admin_user):
    services.approve_commission(commission.pk, admin_user)
    services.mark_commission_paid(commission.pk, None, admin_user)
    for move in (services.reject_commission, services.hold_commission, services.release_commission):
        with pytest.raises(InvalidState):
            move(commission.pk, admin_user)


def test_unknown_commission(admin_user):
    with pytest.raises(NotFound):
        services.approve_commission(31337, admin_user)


def test_commission_summary(commission, admin_user, agent, other_agent):
    services.approve_commission(commission.pk, admin_user)

    summary = services.commission_summary(agent, can_view_all=False)

    assert summary["status_summary"] == [
        {"status": Commission.Status.APPROVED, "count": 1, "total_amount": Decimal("84.00")}
    ]
    assert [(row["year"], row["month"], row["count"]) for row in summary["monthly_summary"]] == [
        (commission.year, commission.month, 1)
    ]
    assert services.commission_summary(other_agent, can_view_all=False)["status_summary"] == []
