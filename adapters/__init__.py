import logging
from importlib import import_module
from typing import Any, Dict, List

from django.conf import settings

from .base import EmailAdapter, PaymentAdapter, SmsAdapter
from .registry import all_names as _all_names
from .registry import get as _get_cls

logger = logging.getLogger(__name__)

_MODULES = (
    # Payments
    "adapters.payments.fake",
    "adapters.payments.stripe",
    # Notifications
    "adapters.notifications.fake",
    "adapters.notifications.email_sendgrid",
    "adapters.notifications.sms_twilio",
)

for _m in _MODULES:
    try:
        import_module(_m)
    except ImportError as exc:
        # Provider SDK not installed; the adapter just stays unregistered.
        logger.debug("Could not import adapter module %s: %s", _m, exc)


def _cfg(name: str) -> Dict[str, Any]:
    return getattr(settings, "ADAPTERS_CONFIG", {}).get(name.lower(), {})


# --- Payment ---
def get_payment_adapter(name: str) -> PaymentAdapter:
    return _get_cls(f"payments.{name}")(_cfg(f"payments.{name}"))


# --- Notifications ---
def get_sms_adapter(name: str) -> SmsAdapter:
    return _get_cls(f"notifications.{name}")(_cfg(f"notifications.{name}"))


def get_email_adapter(name: str) -> EmailAdapter:
    return _get_cls(f"notifications.{name}")(_cfg(f"notifications.{name}"))


def available_adapters() -> List[str]:
    return _all_names()
