from decimal import Decimal
from typing import Any, Dict, Optional

import stripe

from ..base import PaymentAdapter
from ..registry import register


def _to_minor_units(amount: str) -> int:
    return int(Decimal(amount) * 100)


@register("payments.stripe")
class StripeAdapter(PaymentAdapter):

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        stripe.api_key = self.config.get("api_key")

    def charge(
        self,
        *,
        amount: str,
        currency: str,
        method: str,
        metadata: Dict[str, Any],
        source: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Create and confirm a PaymentIntent against ``source`` (a payment method id)."""
        try:
            intent = stripe.PaymentIntent.create(
                amount=_to_minor_units(amount),
                currency=currency.lower(),
                payment_method=source,
                confirm=True,
                metadata={k: str(v) for k, v in metadata.items()},
                automatic_payment_methods={"enabled": True, "allow_redirects": "never"},
            )
        except stripe.CardError as e:
            return {
                "status": "FAILED",
                "txn_ref": None,
                "message": e.user_message or str(e),
                "raw": {"code": e.code},
            }
        except Exception as e:
            raise RuntimeError(f"Stripe charge failed: {e}") from e

        return {
            "status": "SUCCESS" if intent.status == "succeeded" else "FAILED",
            "txn_ref": intent.id,
            "amount": amount,
            "currency": currency,
            "message": intent.status,
            "raw": {"id": intent.id, "status": intent.status},
        }

    def refund(
        self,
        *,
        txn_ref: str,
        amount: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Issue a refund for a Stripe payment intent."""
        try:
            refund_params = {"payment_intent": txn_ref}
            if amount:
                refund_params["amount"] = _to_minor_units(amount)
            if reason:
                refund_params["metadata"] = {"reason": reason}

            refund = stripe.Refund.create(**refund_params)
            return {
                "refund_id": refund.id,
                "status": "SUCCESS" if refund.status in ("succeeded", "pending") else "FAILED",
                "amount": refund.amount,
                "currency": refund.currency,
                "raw": {"id": refund.id, "status": refund.status},
            }
        except Exception as e:
            raise RuntimeError(f"Stripe refund failed: {e}") from e
