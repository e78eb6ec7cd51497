import logging
from decimal import Decimal
from typing import Optional

from django.conf import settings
from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from adapters import get_payment_adapter
from booking.conflicts import check_duplicate_payment
from booking.exceptions import (
    AmountExceedsDue,
    AmountExceedsOriginal,
    BookingError,
    DuplicatePayment,
    InvalidState,
    InvalidTransition,
    NotFound,
    RefundFailed,
    Unauthorized,
)
from booking.models import ZERO, Booking, BookingStatusChange
from booking.references import unique_reference
from booking.signals import (
    booking_confirmed,
    booking_status_changed,
    emit,
    payment_completed,
    payment_failed,
    payment_refunded,
)
from permissions import can_act_as_owner_or_elevated

from .models import Payment

logger = logging.getLogger(__name__)

AUTO_CONFIRM_REASON = "Auto-confirmed after full payment"


def derive_payment_type(amount: Decimal, total_amount: Decimal, amount_paid: Decimal) -> str:
    if amount == total_amount:
        return Payment.Type.FULL
    if amount_paid == ZERO:
        return Payment.Type.ADVANCE
    if amount == total_amount - amount_paid:
        return Payment.Type.BALANCE
    return Payment.Type.PARTIAL


def ledger_balance(booking: Booking) -> Decimal:
    """Charges that went through (including ones later refunded) plus the negative refund rows."""
    total = Payment.objects.filter(
        booking=booking, status__in=Payment.SETTLED_STATUSES
    ).aggregate(total=Sum("amount"))["total"]
    return total or ZERO


def _set_status(payment: Payment, new_status: str) -> None:
    if not payment.can_transition_to(new_status):
        raise InvalidTransition(payment.status, new_status)
    payment.status = new_status


def _load_booking_for_update(booking_id) -> Booking:
    booking = Booking.objects.select_for_update().filter(pk=booking_id).first()
    if booking is None:
        raise NotFound("Booking not found", booking_id=booking_id)
    return booking


def process_payment(
    booking_id,
    amount,
    method: str,
    actor,
    can_view_all: bool = False,
    *,
    source: Optional[str] = None,
    notes: str = "",
    gateway: Optional[str] = None,
) -> Payment:
    """
    Charge ``amount`` against a booking through the configured gateway.

    A declined or erroring gateway call still returns the payment, in
    ``failed`` status, and leaves the booking untouched.
    """
    amount = Decimal(str(amount))
    if amount <= ZERO:
        raise BookingError("Payment amount must be positive", amount=str(amount))
    gateway = (gateway or settings.PAYMENTS_GATEWAY).lower()

    with transaction.atomic():
        booking = _load_booking_for_update(booking_id)
        if not can_act_as_owner_or_elevated(actor.pk, can_view_all, booking.agent_id):
            raise Unauthorized("Not authorized to take payments for this booking")
        if booking.status in Booking.UNPAYABLE_STATUSES:
            raise InvalidState(f"Cannot pay for {booking.status} booking", status=booking.status)

        amount_due = booking.total_amount - booking.amount_paid
        if amount > amount_due:
            raise AmountExceedsDue(
                f"Amount exceeds due ({amount_due})",
                amount=str(amount),
                amount_due=str(amount_due),
            )

        duplicate = check_duplicate_payment(booking.pk, amount)
        if duplicate is not None:
            logger.warning(
                "Duplicate payment of %s on booking %s (previous %s)",
                amount, booking.reference, duplicate.transaction_id,
            )
            raise DuplicatePayment(
                f"A payment of {duplicate.amount} for this booking was already completed at "
                f"{duplicate.created_at.isoformat()} (TXN: {duplicate.transaction_id}). "
                f"Please wait {settings.DUPLICATE_PAYMENT_WINDOW_MINUTES} minutes before retrying.",
                transaction_id=duplicate.transaction_id,
                created_at=duplicate.created_at.isoformat(),
            )

        payment = Payment.objects.create(
            booking=booking,
            agent_id=booking.agent_id,
            customer_id=booking.customer_id,
            amount=amount,
            currency=booking.currency,
            method=method,
            payment_type=derive_payment_type(amount, booking.total_amount, booking.amount_paid),
            status=Payment.Status.PROCESSING,
            gateway=gateway,
            processed_by=actor,
            notes=notes,
        )

        try:
            adapter_resp = get_payment_adapter(gateway).charge(
                amount=str(amount),
                currency=payment.currency,
                method=method,
                metadata={"transaction_id": payment.transaction_id, "booking": booking.reference},
                source=source,
            )
        except Exception as exc:
            logger.exception("Payment adapter error for payment=%s gateway=%s", payment.transaction_id, gateway)
            adapter_resp = {"status": "FAILED", "message": "Gateway error", "error": str(exc)}

        payment.gateway_response = {k: v for k, v in adapter_resp.items() if k != "raw"}

        if adapter_resp.get("status") != "SUCCESS":
            _set_status(payment, Payment.Status.FAILED)
            payment.save(update_fields=["status", "gateway_response", "updated_at"])
            logger.info("Payment %s failed on booking %s", payment.transaction_id, booking.reference)
            emit(payment_failed, sender=Payment, payment=payment)
            return payment

        _set_status(payment, Payment.Status.COMPLETED)
        payment.receipt_number = unique_reference(Payment, "receipt_number", "RCP")
        payment.receipt_generated_at = timezone.now()
        payment.save(update_fields=[
            "status", "gateway_response", "receipt_number", "receipt_generated_at", "updated_at",
        ])

        booking.amount_paid += amount
        booking.recalc_totals()
        update_fields = ["amount_paid"]
        confirmed = False
        if booking.payment_status == Booking.PaymentStatus.PAID and booking.status == Booking.Status.PENDING:
            booking.status = Booking.Status.CONFIRMED
            update_fields.append("status")
            BookingStatusChange.objects.create(
                booking=booking,
                status=Booking.Status.CONFIRMED,
                changed_by=actor,
                reason=AUTO_CONFIRM_REASON,
            )
            confirmed = True
        booking.save(update_fields=update_fields)

    logger.info(
        "Payment %s of %s completed on booking %s (%s)",
        payment.transaction_id, amount, booking.reference, booking.payment_status,
    )
    emit(payment_completed, sender=Payment, payment=payment, booking=booking)
    if confirmed:
        logger.info("Booking %s auto-confirmed after full payment", booking.reference)
        emit(
            booking_status_changed, sender=Booking, booking=booking,
            old_status=Booking.Status.PENDING, new_status=Booking.Status.CONFIRMED, actor=actor,
        )
        emit(booking_confirmed, sender=Booking, booking=booking, actor=actor)
    return payment


def process_refund(
    payment_id,
    amount=None,
    reason: str = "",
    actor=None,
    can_view_all: bool = False,
) -> Payment:
    """
    Refund all or part of a completed payment.

    The original row only flips to ``refunded``; the money moves through a
    new negative ``refund`` row linked back to it.
    """
    with transaction.atomic():
        original = Payment.objects.filter(pk=payment_id).first()
        if original is None:
            raise NotFound("Payment not found", payment_id=payment_id)
        booking = _load_booking_for_update(original.booking_id)
        # Re-read under the booking lock so two refunds cannot both see "completed".
        original = Payment.objects.select_for_update().get(pk=original.pk)

        if not can_act_as_owner_or_elevated(getattr(actor, "pk", None), can_view_all, original.agent_id):
            raise Unauthorized("Not authorized to refund this payment")
        if original.is_refund or not original.can_transition_to(Payment.Status.REFUNDED):
            raise InvalidState("Can only refund completed payments", status=original.status)

        refund_amount = original.amount if amount in (None, "") else Decimal(str(amount))
        if refund_amount <= ZERO:
            raise BookingError("Refund amount must be positive", amount=str(refund_amount))
        if refund_amount > original.amount:
            raise AmountExceedsOriginal(
                "Refund exceeds original amount",
                amount=str(refund_amount),
                original_amount=str(original.amount),
            )

        try:
            adapter_resp = get_payment_adapter(original.gateway).refund(
                txn_ref=original.gateway_response.get("txn_ref") or original.transaction_id,
                amount=str(refund_amount),
                reason=reason or None,
            )
        except Exception as exc:
            logger.exception("Refund execution failed for payment=%s", original.transaction_id)
            raise RefundFailed(
                "The payment gateway could not process the refund",
                transaction_id=original.transaction_id,
            ) from exc

        if adapter_resp.get("status") != "SUCCESS":
            logger.error(
                "Gateway declined refund of %s for payment %s: %s",
                refund_amount, original.transaction_id, adapter_resp.get("message") or adapter_resp.get("status"),
            )
            raise RefundFailed(
                "The payment gateway did not accept the refund",
                transaction_id=original.transaction_id,
                gateway_status=adapter_resp.get("status"),
            )

        now = timezone.now()
        refund = Payment.objects.create(
            booking=booking,
            agent_id=original.agent_id,
            customer_id=original.customer_id,
            amount=-refund_amount,
            currency=original.currency,
            method=original.method,
            payment_type=Payment.Type.REFUND,
            status=Payment.Status.COMPLETED,
            gateway=original.gateway,
            gateway_response={k: v for k, v in adapter_resp.items() if k != "raw"},
            refund_of=original,
            original_transaction_id=original.transaction_id,
            refund_reason=reason,
            refunded_at=now,
            processed_by=actor,
        )

        _set_status(original, Payment.Status.REFUNDED)
        original.refunded_at = now
        original.save(update_fields=["status", "refunded_at", "updated_at"])

        booking.amount_paid -= refund_amount
        booking.amount_refunded += refund_amount
        booking.save(update_fields=["amount_paid", "amount_refunded"])

    logger.info(
        "Refunded %s of payment %s on booking %s (%s)",
        refund_amount, original.transaction_id, booking.reference, booking.payment_status,
    )
    emit(payment_refunded, sender=Payment, payment=refund, original=original, booking=booking)
    return refund


def payments_for(user, can_view_all: bool):
    qs = Payment.objects.select_related("booking", "agent", "customer", "refund_of")
    if can_view_all:
        return qs
    return qs.filter(agent=user)


def get_payment(payment_id, actor, can_view_all: bool = False) -> Payment:
    payment = payments_for(actor, True).filter(pk=payment_id).first()
    if payment is None:
        raise NotFound("Payment not found", payment_id=payment_id)
    if not can_act_as_owner_or_elevated(actor.pk, can_view_all, payment.agent_id):
        raise Unauthorized("Not authorized to view this payment")
    return payment
