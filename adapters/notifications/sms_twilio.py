import logging
from typing import Any, Dict, Optional

from twilio.rest import Client

from ..base import SmsAdapter
from ..registry import register

logger = logging.getLogger(__name__)


@register("notifications.twilio")
class TwilioSmsAdapter(SmsAdapter):
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.account_sid = self.config.get("account_sid")
        self.auth_token = self.config.get("auth_token")
        self.from_number = self.config.get("from_number")
        self._client = None
        if self.account_sid and self.auth_token:
            self._client = Client(self.account_sid, self.auth_token)

    def send_sms(self, *, to: str, message: str, sender_id: Optional[str] = None) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("Twilio client not configured. Set notifications.twilio credentials.")

        from_number = sender_id or self.from_number
        if not from_number:
            raise RuntimeError("Twilio 'from' number is not configured.")

        try:
            msg = self._client.messages.create(body=message, to=to, from_=from_number)
        except Exception as exc:
            logger.exception("Twilio send_sms failed")
            return {"status": "FAILED", "error": str(exc)}
        return {"status": "SENT", "provider_id": getattr(msg, "sid", None), "raw": {"sid": msg.sid}}
