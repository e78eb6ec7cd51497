import logging
from typing import Any, Dict, List, Optional

from ..base import EmailAdapter, SmsAdapter
from ..registry import register

logger = logging.getLogger(__name__)


@register("notifications.fake_sms")
class FakeSmsAdapter(SmsAdapter):
    def send_sms(self, *, to: str, message: str, sender_id: Optional[str] = None) -> Dict[str, Any]:
        logger.info("Fake SMS to %s: %s", to, message)
        return {"status": "SENT", "provider_id": "fake_sms_1", "raw": {"to": to, "message": message}}


@register("notifications.fake_email")
class FakeEmailAdapter(EmailAdapter):
    def send_email(self, *, to: List[str], subject: str, html: str, text: Optional[str] = None,
                   from_email: Optional[str] = None) -> Dict[str, Any]:
        logger.info("Fake email to %s: %s", ", ".join(to), subject)
        return {"status": "QUEUED", "provider_id": "fake_email_1", "raw": {"to": to, "subject": subject}}
