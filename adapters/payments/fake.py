import random
import uuid
from typing import Any, Dict, Optional

from django.utils import timezone

from ..base import PaymentAdapter
from ..registry import register


@register("payments.fake")
class FakePaymentAdapter(PaymentAdapter):
    """Simulated gateway. Approves a charge with probability ``success_rate``."""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.success_rate = float(self.config.get("success_rate", 0.95))

    def charge(
        self,
        *,
        amount: str,
        currency: str,
        method: str,
        metadata: Dict[str, Any],
        source: Optional[str] = None,
    ) -> Dict[str, Any]:
        approved = random.random() < self.success_rate
        return {
            "status": "SUCCESS" if approved else "FAILED",
            "txn_ref": f"fake_{uuid.uuid4().hex}",
            "amount": amount,
            "currency": currency,
            "method": method,
            "message": "Payment approved" if approved else "Payment declined by simulated gateway",
            "processed_at": timezone.now().isoformat(),
            "raw": {"adapter": "fake", "mode": "charge", "metadata": metadata},
        }

    def refund(
        self,
        *,
        txn_ref: str,
        amount: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Simulate refunding a transaction"""
        return {
            "refund_id": f"fake_re_{uuid.uuid4().hex}",
            "txn_ref": txn_ref,
            "amount": amount or "full",
            "reason": reason or "Fake refund",
            "status": "SUCCESS",
            "processed_at": timezone.now().isoformat(),
            "raw": {"adapter": "fake", "mode": "refund"},
        }
