import logging
from decimal import Decimal

from django.db.models import F

from .models import Customer

logger = logging.getLogger(__name__)


def loyalty_points_for(amount: Decimal) -> int:
    """One point per full 100 spent."""
    return int(max(Decimal("0"), amount) // 100)


def on_booking_completed(customer_id, amount: Decimal) -> None:
    updated = Customer.objects.filter(pk=customer_id).update(
        total_trips=F("total_trips") + 1,
        total_spent=F("total_spent") + amount,
        loyalty_points=F("loyalty_points") + loyalty_points_for(amount),
    )
    if not updated:
        logger.warning("Customer %s not found while recording a completed trip", customer_id)
        return
    logger.info("Recorded completed trip for customer %s (amount=%s)", customer_id, amount)


def customers_for(user, can_view_all: bool):
    qs = Customer.objects.select_related("agent")
    if can_view_all:
        return qs
    return qs.filter(agent=user)
