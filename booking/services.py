from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from django.db import transaction
from django.db.models import Count, F, Sum
from django.utils import timezone

from commissions.services import create_commission
from customers.models import Customer
from permissions import can_act_as_owner_or_elevated
from users.models import User

from .conflicts import check_booking_conflict
from .exceptions import BookingError, Conflict, InvalidState, InvalidTransition, NotFound, Unauthorized
from .models import ZERO, Booking, BookingStatusChange
from .signals import (
    booking_cancelled,
    booking_completed,
    booking_confirmed,
    booking_created,
    booking_status_changed,
    emit,
)

logger = logging.getLogger(__name__)

# Never taken from caller input; set by the engine or derived in Booking.save().
PROTECTED_FIELDS = frozenset({
    "id", "pk", "reference", "agent", "agent_id", "customer", "customer_id", "status",
    "payment_status", "amount_paid", "amount_refunded", "amount_due", "total_amount",
    "number_of_nights", "cancelled_at", "cancelled_by", "cancellation_reason",
    "created_at", "updated_at",
})
SCHEDULE_FIELDS = frozenset({"destination", "start_date", "end_date"})


def _raise_on_conflict(customer_id, destination, start_date, end_date, exclude_booking_id=None) -> None:
    conflict = check_booking_conflict(customer_id, destination, start_date, end_date, exclude_booking_id)
    if conflict is None:
        return
    logger.warning(
        "Booking conflict for customer %s at %s: overlaps %s",
        customer_id, destination, conflict.reference,
    )
    raise Conflict(
        f"Customer already has an active booking for {conflict.destination} ({conflict.reference}) "
        f"with overlapping dates {conflict.start_date.isoformat()} - {conflict.end_date.isoformat()}",
        reference=conflict.reference,
        destination=conflict.destination,
        start_date=conflict.start_date.isoformat(),
        end_date=conflict.end_date.isoformat(),
    )


def _validate_facts(booking: Booking) -> None:
    if booking.start_date and booking.end_date and booking.end_date < booking.start_date:
        raise BookingError("End date must be on or after start date")
    if booking.total_amount < ZERO:
        raise BookingError("Discount cannot exceed the booking price", total_amount=str(booking.total_amount))
    if booking.total_amount < booking.amount_paid:
        raise InvalidState(
            "Total cannot drop below the amount already paid",
            total_amount=str(booking.total_amount),
            amount_paid=str(booking.amount_paid),
        )


def _load_for_update(booking_id) -> Booking:
    booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
    if booking is None:
        raise NotFound("Booking not found", booking_id=booking_id)
    return booking


def _check_owner(booking: Booking, actor, can_view_all: bool) -> None:
    if not can_act_as_owner_or_elevated(getattr(actor, "pk", None), can_view_all, booking.agent_id):
        raise Unauthorized("Not authorized to act on this booking", reference=booking.reference)


def create_booking(data: Dict[str, Any], agent, history_notes: str = "Booking created") -> Booking:
    """
    Create a booking for one of ``agent``'s customers.

    ``data`` holds booking fields plus ``customer`` (instance or id) and an
    optional initial ``status`` (``draft`` or ``pending``). Totals supplied by
    the caller are ignored.
    """
    data = dict(data)
    customer = data.pop("customer", None)
    customer_id = getattr(customer, "pk", customer)
    status = data.pop("status", None) or Booking.Status.PENDING
    if status not in Booking.INITIAL_STATUSES:
        raise InvalidState(f"Bookings cannot be created as '{status}'", status=status)
    fields = {k: v for k, v in data.items() if k not in PROTECTED_FIELDS}

    with transaction.atomic():
        customer = (
            Customer.objects.select_for_update()
            .filter(pk=customer_id, agent=agent, is_active=True)
            .first()
        )
        if customer is None:
            raise NotFound("Customer not found or does not belong to you", customer_id=customer_id)

        booking = Booking(agent=agent, customer=customer, status=status, **fields)
        booking.recalc_totals()
        _validate_facts(booking)
        _raise_on_conflict(customer.pk, booking.destination, booking.start_date, booking.end_date)

        booking.save()
        BookingStatusChange.objects.create(
            booking=booking, status=status, changed_by=agent, notes=history_notes
        )
        User.objects.filter(pk=agent.pk).update(total_bookings=F("total_bookings") + 1)

    logger.info("Booking %s created by %s for customer %s (%s)", booking.reference, agent, customer.pk, status)
    emit(booking_created, sender=Booking, booking=booking, actor=agent)
    return booking


def update_booking(booking_id, patch: Dict[str, Any], actor, can_view_all: bool = False) -> Booking:
    """Edit a ``draft``/``pending`` booking. Date or destination changes re-run the conflict guard."""
    fields = {k: v for k, v in patch.items() if k not in PROTECTED_FIELDS}

    with transaction.atomic():
        booking = _load_for_update(booking_id)
        _check_owner(booking, actor, can_view_all)
        if booking.status not in Booking.EDITABLE_STATUSES:
            raise InvalidState(
                f"Cannot update booking with status '{booking.status}'", status=booking.status
            )

        schedule_changed = any(
            key in SCHEDULE_FIELDS and getattr(booking, key) != value for key, value in fields.items()
        )
        for key, value in fields.items():
            setattr(booking, key, value)
        booking.recalc_totals()
        _validate_facts(booking)

        if schedule_changed:
            Customer.objects.select_for_update().filter(pk=booking.customer_id).first()
            _raise_on_conflict(
                booking.customer_id, booking.destination, booking.start_date, booking.end_date,
                exclude_booking_id=booking.pk,
            )
        booking.save()

    logger.info("Booking %s updated by %s (%s)", booking.reference, actor, ", ".join(sorted(fields)) or "no fields")
    return booking


def update_booking_status(booking_id, new_status, actor, can_view_all: bool = False, reason: str = "") -> Booking:
    """
    Move a booking along ``Booking.TRANSITIONS``.

    Reaching ``completed`` creates the agent's commission in the same
    transaction; customer aggregates follow through ``booking_completed``.
    """
    with transaction.atomic():
        booking = _load_for_update(booking_id)
        _check_owner(booking, actor, can_view_all)

        old_status = booking.status
        if not booking.can_transition_to(new_status):
            raise InvalidTransition(old_status, new_status)

        if old_status == Booking.Status.CANCELLED:
            # Reopening makes the booking active again, so it may now collide.
            Customer.objects.select_for_update().filter(pk=booking.customer_id).first()
            _raise_on_conflict(
                booking.customer_id, booking.destination, booking.start_date, booking.end_date,
                exclude_booking_id=booking.pk,
            )

        booking.status = new_status
        update_fields = ["status"]
        if new_status == Booking.Status.CANCELLED:
            booking.cancelled_at = timezone.now()
            booking.cancelled_by = actor
            booking.cancellation_reason = reason
            update_fields += ["cancelled_at", "cancelled_by", "cancellation_reason"]
        booking.save(update_fields=update_fields)
        BookingStatusChange.objects.create(
            booking=booking, status=new_status, changed_by=actor, reason=reason, notes=reason
        )

        if new_status == Booking.Status.COMPLETED:
            create_commission(booking, booking.agent)

    logger.info("Booking %s: %s -> %s by %s", booking.reference, old_status, new_status, actor)
    emit(
        booking_status_changed, sender=Booking, booking=booking,
        old_status=old_status, new_status=new_status, actor=actor,
    )
    if new_status == Booking.Status.CONFIRMED:
        emit(booking_confirmed, sender=Booking, booking=booking, actor=actor)
    elif new_status == Booking.Status.CANCELLED:
        emit(booking_cancelled, sender=Booking, booking=booking, actor=actor, reason=reason)
    elif new_status == Booking.Status.COMPLETED:
        emit(booking_completed, sender=Booking, booking=booking, actor=actor)
    return booking


def delete_booking(booking_id, actor, can_view_all: bool = False) -> None:
    with transaction.atomic():
        booking = _load_for_update(booking_id)
        _check_owner(booking, actor, can_view_all)
        if booking.status not in Booking.DELETABLE_STATUSES:
            raise InvalidState("Only draft or cancelled bookings can be deleted", status=booking.status)
        if booking.payments.exists():
            raise InvalidState("Bookings with payment records cannot be deleted", reference=booking.reference)
        reference = booking.reference
        booking.delete()

    logger.info("Booking %s deleted by %s", reference, actor)


def bookings_for(user, can_view_all: bool, agent_id=None):
    qs = Booking.objects.select_related("agent", "customer")
    if not can_view_all:
        return qs.filter(agent=user)
    if agent_id:
        return qs.filter(agent_id=agent_id)
    return qs


def get_booking(booking_id, actor, can_view_all: bool = False) -> Booking:
    booking = (
        Booking.objects.select_related("agent", "customer")
        .prefetch_related("status_history", "payments")
        .filter(pk=booking_id)
        .first()
    )
    if booking is None:
        raise NotFound("Booking not found", booking_id=booking_id)
    _check_owner(booking, actor, can_view_all)
    return booking


def booking_stats(user, can_view_all: bool, agent_id: Optional[int] = None) -> Dict[str, Any]:
    qs = bookings_for(user, can_view_all, agent_id).order_by()
    status_breakdown = (
        qs.values("status")
        .annotate(count=Count("id"), total_amount=Sum("total_amount"))
        .order_by("status")
    )
    top_destinations = (
        qs.exclude(status=Booking.Status.CANCELLED)
        .values("destination")
        .annotate(count=Count("id"), total_revenue=Sum("total_amount"))
        .order_by("-count", "destination")[:10]
    )
    return {"status_breakdown": list(status_breakdown), "top_destinations": list(top_destinations)}
