"""Customer and agent notifications for booking engine events.

Handlers run after the engine's transaction has committed. A failed send is
logged and dropped; it never reaches the code that emitted the event.
"""
import logging

from django.conf import settings
from django.dispatch import receiver

from adapters import get_email_adapter, get_sms_adapter
from booking.signals import (
    booking_cancelled,
    booking_confirmed,
    commission_paid,
    payment_completed,
    payment_refunded,
)

logger = logging.getLogger(__name__)


def notify(*, email=None, phone=None, subject, message):
    if email:
        try:
            get_email_adapter(settings.NOTIFICATIONS["email"]).send_email(
                to=[email],
                subject=subject,
                html=f"<p>{message}</p>",
                text=message,
            )
        except Exception as e:
            logger.warning("Email notification failed: %s", str(e))
    if phone:
        try:
            get_sms_adapter(settings.NOTIFICATIONS["sms"]).send_sms(to=phone, message=message)
        except Exception as e:
            logger.warning("SMS notification failed: %s", str(e))


@receiver(booking_confirmed, dispatch_uid="notifications.booking_confirmed")
def on_booking_confirmed(sender, booking, **kwargs):
    customer = booking.customer
    notify(
        email=customer.email,
        phone=customer.phone,
        subject="Booking Confirmation",
        message=(
            f"Your booking {booking.reference} to {booking.destination} "
            f"({booking.start_date:%d %b %Y}) has been confirmed. "
            f"Total: {booking.currency} {booking.total_amount}"
        ),
    )


@receiver(booking_cancelled, dispatch_uid="notifications.booking_cancelled")
def on_booking_cancelled(sender, booking, reason="", **kwargs):
    message = f"Your booking {booking.reference} to {booking.destination} has been cancelled."
    if reason:
        message += f" Reason: {reason}"
    notify(email=booking.customer.email, subject="Booking Cancelled", message=message)


@receiver(payment_completed, dispatch_uid="notifications.payment_completed")
def on_payment_completed(sender, payment, booking, **kwargs):
    notify(
        email=booking.customer.email,
        subject=f"Payment Received - {payment.receipt_number}",
        message=(
            f"We received {payment.currency} {payment.amount} for booking {booking.reference}. "
            f"Receipt {payment.receipt_number}. Balance due: {booking.currency} {booking.amount_due}"
        ),
    )


@receiver(payment_refunded, dispatch_uid="notifications.payment_refunded")
def on_payment_refunded(sender, payment, original, booking, **kwargs):
    notify(
        email=booking.customer.email,
        subject="Refund Processed",
        message=(
            f"A refund of {payment.currency} {-payment.amount} for booking {booking.reference} "
            f"(transaction {original.transaction_id}) has been processed."
        ),
    )


@receiver(commission_paid, dispatch_uid="notifications.commission_paid")
def on_commission_paid(sender, commission, **kwargs):
    agent = commission.agent
    notify(
        email=agent.email,
        phone=agent.phone,
        subject=f"Commission Paid - {commission.reference}",
        message=(
            f"Your commission {commission.reference} of {commission.total_earning} "
            f"for booking {commission.booking.reference} has been paid."
        ),
    )
