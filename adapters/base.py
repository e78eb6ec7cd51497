from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional


class AdapterBase(ABC):
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        self.config = config or {}


class PaymentAdapter(AdapterBase):
    """
    Gateway contract used by the payment processor.

    ``charge`` returns a dict with at least ``status`` (``"SUCCESS"`` or
    ``"FAILED"``) and ``txn_ref``; gateway errors are raised as exceptions.
    """

    @abstractmethod
    def charge(
        self,
        *,
        amount: str,
        currency: str,
        method: str,
        metadata: Dict[str, Any],
        source: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...

    @abstractmethod
    def refund(
        self,
        *,
        txn_ref: str,
        amount: Optional[str] = None,
        reason: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...


class EmailAdapter(AdapterBase):
    @abstractmethod
    def send_email(
        self,
        *,
        to: List[str],
        subject: str,
        html: str,
        text: Optional[str] = None,
        from_email: Optional[str] = None,
    ) -> Dict[str, Any]:
        ...


class SmsAdapter(AdapterBase):
    @abstractmethod
    def send_sms(self, *, to: str, message: str, sender_id: Optional[str] = None) -> Dict[str, Any]:
        ...
