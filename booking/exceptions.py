"""Failures raised by the booking, payment and commission services.

Every failure is a ``BookingError``. Views do not catch them one by one:
``engine_exception_handler`` turns them into responses using the
``status_code``/``code`` of the class and the ``extra`` details.
"""
import logging
from typing import Any, Dict, Optional

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class BookingError(Exception):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid"

    def __init__(self, message: str, **extra: Any):
        super().__init__(message)
        self.message = message
        self.extra: Dict[str, Any] = extra


class NotFound(BookingError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class Unauthorized(BookingError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "unauthorized"


class InvalidState(BookingError):
    code = "invalid_state"


class InvalidTransition(BookingError):
    code = "invalid_transition"

    def __init__(self, source: str, target: str, message: Optional[str] = None):
        super().__init__(
            message or f"Cannot transition from '{source}' to '{target}'",
            source=source,
            target=target,
        )
        self.source = source
        self.target = target


class Conflict(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "booking_conflict"


class DuplicatePayment(BookingError):
    status_code = status.HTTP_409_CONFLICT
    code = "duplicate_payment"


class AmountExceedsDue(BookingError):
    code = "amount_exceeds_due"


class AmountExceedsOriginal(BookingError):
    code = "amount_exceeds_original"


class RefundFailed(BookingError):
    status_code = status.HTTP_502_BAD_GATEWAY
    code = "refund_failed"


def engine_exception_handler(exc, context):
    if isinstance(exc, BookingError):
        view = context.get("view")
        logger.info(
            "%s in %s: %s",
            exc.__class__.__name__,
            view.__class__.__name__ if view else "unknown view",
            exc.message,
        )
        payload = {"detail": exc.message, "code": exc.code}
        payload.update({k: v for k, v in exc.extra.items() if k not in payload})
        return Response(payload, status=exc.status_code)
    return exception_handler(exc, context)
