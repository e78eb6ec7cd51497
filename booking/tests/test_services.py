from datetime import date
from decimal import Decimal

import pytest

from booking import services
from booking.exceptions import Conflict, InvalidState, InvalidTransition, NotFound, Unauthorized
from booking.models import Booking
from commissions.models import Commission
from customers.models import Customer
from payments.services import process_payment

pytestmark = pytest.mark.django_db


def advance(booking, *statuses, actor=None):
    for new_status in statuses:
        booking = services.update_booking_status(booking.pk, new_status, actor or booking.agent)
    return booking


def test_create_booking_computes_totals_and_seeds_history(booking, agent):
    assert booking.status == Booking.Status.PENDING
    assert booking.total_amount == Decimal("1050.00")
    assert booking.amount_due == Decimal("1050.00")
    assert booking.payment_status == Booking.PaymentStatus.UNPAID

    history = list(booking.status_history.all())
    assert [(h.status, h.notes, h.changed_by) for h in history] == [
        (Booking.Status.PENDING, "Booking created", agent)
    ]
    agent.refresh_from_db()
    assert agent.total_bookings == 1


def test_create_booking_ignores_caller_total(make_booking):
    booking = make_booking(total_amount=Decimal("1.00"), amount_paid=Decimal("999"))
    assert booking.total_amount == Decimal("1050.00")
    assert booking.amount_paid == Decimal("0.00")


def test_create_booking_as_draft(make_booking):
    assert make_booking(status=Booking.Status.DRAFT).status == Booking.Status.DRAFT


def test_create_booking_rejects_non_initial_status(make_booking):
    with pytest.raises(InvalidState):
        make_booking(status=Booking.Status.CONFIRMED)


def test_create_booking_for_someone_elses_customer(booking_data, other_agent):
    with pytest.raises(NotFound):
        services.create_booking(booking_data, other_agent)


def test_create_booking_for_inactive_customer(booking_data, agent, customer):
    Customer.objects.filter(pk=customer.pk).update(is_active=False)
    with pytest.raises(NotFound):
        services.create_booking(booking_data, agent)


def test_overlapping_booking_is_rejected(booking, make_booking):
    with pytest.raises(Conflict) as excinfo:
        make_booking(start_date=date(2030, 3, 12), end_date=date(2030, 3, 18))

    assert excinfo.value.extra["reference"] == booking.reference
    assert excinfo.value.extra["start_date"] == "2030-03-10"
    assert excinfo.value.extra["end_date"] == "2030-03-15"
    assert Booking.objects.count() == 1


def test_non_overlapping_booking_is_accepted(booking, make_booking):
    second = make_booking(start_date=date(2030, 3, 16), end_date=date(2030, 3, 20))
    assert Booking.objects.count() == 2
    assert second.reference != booking.reference


def test_update_recomputes_total_and_drops_protected_fields(booking, agent):
    updated = services.update_booking(
        booking.pk,
        {"discount": Decimal("0"), "total_amount": Decimal("5"), "reference": "X", "title": "New title"},
        agent,
    )
    assert updated.total_amount == Decimal("1100.00")
    assert updated.amount_due == Decimal("1100.00")
    assert updated.reference == booking.reference
    assert updated.title == "New title"


def test_update_moving_own_dates_is_not_a_conflict(booking, agent):
    updated = services.update_booking(booking.pk, {"end_date": date(2030, 3, 17)}, agent)
    assert updated.number_of_nights == 7


def test_update_into_overlap_is_rejected(booking, make_booking, agent):
    other = make_booking(start_date=date(2030, 4, 1), end_date=date(2030, 4, 5))
    with pytest.raises(Conflict):
        services.update_booking(other.pk, {"start_date": date(2030, 3, 14)}, agent)
    other.refresh_from_db()
    assert other.start_date == date(2030, 4, 1)


def test_update_only_while_editable(booking, agent):
    advance(booking, Booking.Status.CONFIRMED)
    with pytest.raises(InvalidState):
        services.update_booking(booking.pk, {"title": "Too late"}, agent)


def test_update_by_other_agent_is_unauthorized(booking, other_agent, admin_user):
    with pytest.raises(Unauthorized):
        services.update_booking(booking.pk, {"title": "Mine now"}, other_agent)
    updated = services.update_booking(booking.pk, {"title": "Fixed by admin"}, admin_user, can_view_all=True)
    assert updated.title == "Fixed by admin"


def test_update_cannot_push_total_below_amount_paid(booking, agent):
    process_payment(booking.pk, Decimal("1000"), "cash", agent)
    with pytest.raises(InvalidState):
        services.update_booking(booking.pk, {"discount": Decimal("200")}, agent)


def test_missing_booking_is_not_found(agent):
    with pytest.raises(NotFound):
        services.update_booking_status(999999, Booking.Status.CONFIRMED, agent)


def test_illegal_transition_leaves_booking_unchanged(booking):
    booking = advance(booking, Booking.Status.CONFIRMED, Booking.Status.IN_PROGRESS, Booking.Status.COMPLETED)

    with pytest.raises(InvalidTransition) as excinfo:
        services.update_booking_status(booking.pk, Booking.Status.PENDING, booking.agent)

    assert excinfo.value.source == Booking.Status.COMPLETED
    assert excinfo.value.target == Booking.Status.PENDING
    booking.refresh_from_db()
    assert booking.status == Booking.Status.COMPLETED
    assert booking.status_history.count() == 4


@pytest.mark.parametrize(
    "source, target",
    [
        (Booking.Status.PENDING, Booking.Status.COMPLETED),
        (Booking.Status.PENDING, Booking.Status.IN_PROGRESS),
        (Booking.Status.PENDING, Booking.Status.REFUNDED),
        (Booking.Status.PENDING, "bogus"),
    ],
)
def test_transition_table_is_enforced(booking, source, target):
    with pytest.raises(InvalidTransition):
        services.update_booking_status(booking.pk, target, booking.agent)


def test_cancellation_records_metadata(booking, agent):
    cancelled = services.update_booking_status(booking.pk, Booking.Status.CANCELLED, agent, reason="Visa denied")
    assert cancelled.cancelled_by == agent
    assert cancelled.cancelled_at is not None
    assert cancelled.cancellation_reason == "Visa denied"
    assert cancelled.status_history.last().reason == "Visa denied"


def test_reopening_a_cancelled_booking_rechecks_conflicts(booking, make_booking, agent):
    services.update_booking_status(booking.pk, Booking.Status.CANCELLED, agent)
    make_booking()  # same dates, allowed now the first one is cancelled
    with pytest.raises(Conflict):
        services.update_booking_status(booking.pk, Booking.Status.PENDING, agent)


def test_completion_creates_exactly_one_commission(booking):
    booking = advance(booking, Booking.Status.CONFIRMED, Booking.Status.IN_PROGRESS, Booking.Status.COMPLETED)

    commission = Commission.objects.get(booking=booking)
    assert commission.agent == booking.agent
    assert commission.booking_amount == booking.total_amount

    advance(booking, Booking.Status.REFUNDED)
    assert Commission.objects.filter(booking=booking).count() == 1


def test_status_change_by_other_agent_is_unauthorized(booking, other_agent):
    with pytest.raises(Unauthorized):
        services.update_booking_status(booking.pk, Booking.Status.CONFIRMED, other_agent)


def test_delete_only_draft_or_cancelled(booking, make_booking, agent):
    with pytest.raises(InvalidState):
        services.delete_booking(booking.pk, agent)

    draft = make_booking(status=Booking.Status.DRAFT, destination="Kerala")
    services.delete_booking(draft.pk, agent)
    assert not Booking.objects.filter(pk=draft.pk).exists()


def test_delete_refuses_bookings_with_payments(booking, agent):
    process_payment(booking.pk, Decimal("100"), "cash", agent)
    services.update_booking_status(booking.pk, Booking.Status.CANCELLED, agent)
    with pytest.raises(InvalidState):
        services.delete_booking(booking.pk, agent)


def test_booking_stats(make_booking, agent):
    make_booking()
    cancelled = make_booking(destination="Kerala")
    services.update_booking_status(cancelled.pk, Booking.Status.CANCELLED, agent)

    stats = services.booking_stats(agent, can_view_all=False)

    by_status = {row["status"]: row for row in stats["status_breakdown"]}
    assert by_status[Booking.Status.PENDING]["count"] == 1
    assert by_status[Booking.Status.CANCELLED]["total_amount"] == Decimal("1050.00")
    assert [row["destination"] for row in stats["top_destinations"]] == ["Goa"]


def test_bookings_are_scoped_to_owner(booking, other_agent, admin_user):
    assert not services.bookings_for(other_agent, can_view_all=False).exists()
    assert list(services.bookings_for(admin_user, can_view_all=True)) == [booking]
    with pytest.raises(Unauthorized):
        services.get_booking(booking.pk, other_agent)
