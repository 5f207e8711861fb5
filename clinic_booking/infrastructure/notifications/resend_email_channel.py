import html
import logging
from typing import Any, Dict, Optional

import resend

from ...config import settings

logger = logging.getLogger(__name__)


def render_email(payload: Dict[str, Any]) -> str:
    body = f"<p>{html.escape(payload.get('message', ''))}</p>"
    if payload.get("meeting_link"):
        link = html.escape(payload["meeting_link"])
        body += f'<p><a href="{link}">Join the video consultation</a></p>'
    return f"<h2>{html.escape(payload.get('title', ''))}</h2>{body}"


class ResendEmailChannel:
    def __init__(self, api_key: Optional[str] = None, from_address: Optional[str] = None):
        self.api_key = api_key or settings.RESEND_API_KEY
        self.from_address = from_address or settings.EMAIL_FROM_ADDRESS

    def send(self, user_id: str, kind: str, payload: Dict[str, Any]) -> bool:
        to = payload.get("email")
        if not to:
            logger.warning(f"No e-mail address for user {user_id}, skipping e-mail")
            return False
        if not self.api_key:
            logger.error("No email service configured - RESEND_API_KEY missing")
            return False

        resend.api_key = self.api_key
        response = resend.Emails.send({
            "from": self.from_address,
            "to": [to],
            "subject": payload.get("title", "Appointment update"),
            "html": render_email(payload),
        })
        logger.info(f"Email sent via Resend to {to}: {response}")
        return True
