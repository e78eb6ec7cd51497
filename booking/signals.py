"""Domain events emitted by the booking engine.

Handlers (customer aggregates, notifications) subscribe with ``@receiver``.
Events are sent only after the surrounding transaction commits and through
``send_robust``, so a failing handler can never undo or block the write that
produced the event.
"""
import logging

from django.db import transaction
from django.dispatch import Signal

logger = logging.getLogger(__name__)

booking_created = Signal()
booking_status_changed = Signal()
booking_confirmed = Signal()
booking_cancelled = Signal()
booking_completed = Signal()

payment_completed = Signal()
payment_failed = Signal()
payment_refunded = Signal()

commission_created = Signal()
commission_approved = Signal()
commission_paid = Signal()


def emit(signal: Signal, sender, **kwargs) -> None:
    def _send():
        for handler, response in signal.send_robust(sender=sender, **kwargs):
            if isinstance(response, Exception):
                logger.error(
                    "Handler %s failed for %s: %s",
                    getattr(handler, "__qualname__", handler),
                    sender.__name__,
                    response,
                    exc_info=response,
                )

    transaction.on_commit(_send)
