import logging
from typing import Any, Dict, List, Optional

import sendgrid
from sendgrid.helpers.mail import Content, Mail

from ..base import EmailAdapter
from ..registry import register

logger = logging.getLogger(__name__)


@register("notifications.sendgrid")
class SendgridEmailAdapter(EmailAdapter):
    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(config or {})
        self.api_key = self.config.get("api_key")
        self.from_email = self.config.get("from_email")
        self._client = sendgrid.SendGridAPIClient(self.api_key) if self.api_key else None

    def send_email(self, *, to: List[str], subject: str, html: str, text: Optional[str] = None,
                   from_email: Optional[str] = None) -> Dict[str, Any]:
        if not self._client:
            raise RuntimeError("SendGrid not configured. Set notifications.sendgrid api_key.")
        from_address = from_email or self.from_email
        if not from_address:
            raise RuntimeError("SendGrid 'from' email not configured.")

        message = Mail(from_email=from_address, to_emails=to, subject=subject, html_content=html)
        if text:
            message.add_content(Content("text/plain", text))
        try:
            resp = self._client.send(message)
        except Exception as exc:
            logger.exception("SendGrid send_email failed")
            return {"status": "FAILED", "error": str(exc)}
        return {
            "status": "QUEUED" if resp.status_code in (200, 202) else "FAILED",
            "provider_id": resp.headers.get("X-Message-Id") if resp.headers else None,
            "raw": {"status_code": resp.status_code},
        }
