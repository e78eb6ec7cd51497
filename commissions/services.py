import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Optional, Tuple

from django.conf import settings
from django.db import IntegrityError, transaction
from django.db.models import Count, F, Sum
from django.utils import timezone

from booking.exceptions import InvalidState, NotFound
from booking.models import ZERO
from booking.signals import commission_approved, commission_created, commission_paid, emit
from users.models import User

from .models import Commission

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")


def _money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def get_commission_tier(amount: Decimal) -> Tuple[str, Decimal]:
    """First configured tier whose inclusive ``[min, max]`` range holds ``amount``."""
    for tier, lower, upper, rate in settings.COMMISSION_TIERS:
        if amount >= lower and (upper is None or amount <= upper):
            return tier, rate
    return settings.DEFAULT_COMMISSION_TIER


def compute_commission(booking_amount: Decimal, agent_rate: Optional[Decimal] = None) -> Dict[str, Any]:
    tier, tier_rate = get_commission_tier(booking_amount)
    rate = agent_rate if agent_rate is not None else tier_rate
    commission_amount = _money(booking_amount * rate / 100)
    bonus_amount = ZERO
    if booking_amount > settings.LARGE_DEAL_THRESHOLD:
        bonus_amount = _money(commission_amount * settings.LARGE_DEAL_BONUS_RATE / 100)
    return {
        "tier": tier,
        "commission_rate": rate,
        "commission_amount": commission_amount,
        "bonus_amount": bonus_amount,
        "total_earning": commission_amount + bonus_amount,
    }


def create_commission(booking, agent) -> Commission:
    """
    Commission for a completed booking. Calling it again for the same booking
    returns the existing row unchanged.
    """
    existing = Commission.objects.filter(booking=booking).first()
    if existing is not None:
        return existing

    figures = compute_commission(booking.total_amount, agent.commission_rate)
    figures.pop("total_earning")
    try:
        with transaction.atomic():
            commission = Commission.objects.create(
                agent=agent,
                booking=booking,
                booking_amount=booking.total_amount,
                **figures,
            )
    except IntegrityError:
        # Another request created it between the lookup and the insert.
        return Commission.objects.get(booking=booking)

    logger.info(
        "Commission %s created for booking %s: %s%% of %s (+%s bonus)",
        commission.reference, booking.reference, commission.commission_rate,
        commission.booking_amount, commission.bonus_amount,
    )
    emit(commission_created, sender=Commission, commission=commission)
    return commission


def _load_for_update(commission_id) -> Commission:
    commission = Commission.objects.select_for_update().select_related("agent").filter(pk=commission_id).first()
    if commission is None:
        raise NotFound("Commission not found", commission_id=commission_id)
    return commission


def _require_transition(commission: Commission, new_status: str, message: str) -> None:
    if not commission.can_transition_to(new_status):
        raise InvalidState(message, status=commission.status)


@transaction.atomic
def approve_commission(commission_id, approver) -> Commission:
    commission = _load_for_update(commission_id)
    if commission.status != Commission.Status.PENDING:
        raise InvalidState(f"Already '{commission.status}'", status=commission.status)

    commission.status = Commission.Status.APPROVED
    commission.approved_by = approver
    commission.approved_at = timezone.now()
    commission.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])
    logger.info("Commission %s approved by %s", commission.reference, approver)
    emit(commission_approved, sender=Commission, commission=commission)
    return commission


@transaction.atomic
def mark_commission_paid(commission_id, payment_details: Optional[Dict[str, Any]], approver) -> Commission:
    commission = _load_for_update(commission_id)
    if commission.status != Commission.Status.APPROVED:
        raise InvalidState("Must be approved before payment", status=commission.status)

    payment_details = payment_details or {}
    commission.status = Commission.Status.PAID
    commission.paid_at = timezone.now()
    commission.paid_by = approver
    commission.payment_method = payment_details.get("payment_method", "")
    commission.transaction_reference = payment_details.get("transaction_reference", "")
    commission.save(update_fields=[
        "status", "paid_at", "paid_by", "payment_method", "transaction_reference", "updated_at",
    ])
    User.objects.filter(pk=commission.agent_id).update(
        total_earnings=F("total_earnings") + commission.total_earning
    )
    logger.info("Commission %s paid (%s)", commission.reference, commission.total_earning)
    emit(commission_paid, sender=Commission, commission=commission)
    return commission


@transaction.atomic
def reject_commission(commission_id, approver, reason: str = "") -> Commission:
    commission = _load_for_update(commission_id)
    _require_transition(commission, Commission.Status.REJECTED, f"Cannot reject a '{commission.status}' commission")

    commission.status = Commission.Status.REJECTED
    commission.rejection_reason = reason
    commission.approved_by = approver
    commission.save(update_fields=["status", "rejection_reason", "approved_by", "updated_at"])
    logger.info("Commission %s rejected by %s", commission.reference, approver)
    return commission


@transaction.atomic
def hold_commission(commission_id, approver, notes: str = "") -> Commission:
    commission = _load_for_update(commission_id)
    _require_transition(commission, Commission.Status.ON_HOLD, f"Cannot hold a '{commission.status}' commission")

    commission.status = Commission.Status.ON_HOLD
    if notes:
        commission.notes = notes
    commission.save(update_fields=["status", "notes", "updated_at"])
    logger.info("Commission %s put on hold by %s", commission.reference, approver)
    return commission


@transaction.atomic
def release_commission(commission_id, approver) -> Commission:
    """Back to ``pending``; an approval given before the hold has to be repeated."""
    commission = _load_for_update(commission_id)
    _require_transition(commission, Commission.Status.PENDING, f"Cannot release a '{commission.status}' commission")

    commission.status = Commission.Status.PENDING
    commission.approved_by = None
    commission.approved_at = None
    commission.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])
    logger.info("Commission %s released by %s", commission.reference, approver)
    return commission


def commissions_for(user, can_view_all: bool, agent_id=None):
    qs = Commission.objects.select_related("agent", "booking")
    if not can_view_all:
        return qs.filter(agent=user)
    if agent_id:
        return qs.filter(agent_id=agent_id)
    return qs


def commission_summary(user, can_view_all: bool) -> Dict[str, Any]:
    qs = commissions_for(user, can_view_all).order_by()
    by_status = (
        qs.values("status")
        .annotate(count=Count("id"), total_amount=Sum("total_earning"))
        .order_by("status")
    )
    monthly = (
        qs.filter(status__in=[Commission.Status.APPROVED, Commission.Status.PAID])
        .values("year", "month")
        .annotate(total_earning=Sum("total_earning"), count=Count("id"))
        .order_by("-year", "-month")[:12]
    )
    return {"status_summary": list(by_status), "monthly_summary": list(monthly)}
