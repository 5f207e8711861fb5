import logging
from typing import Any, Dict, Optional

from twilio.rest import Client

from ...config import settings

logger = logging.getLogger(__name__)


class TwilioSmsChannel:
    def __init__(self, client: Optional[Client] = None, from_number: Optional[str] = None):
        self.client = client or Client(settings.TWILIO_ACCOUNT_SID, settings.TWILIO_AUTH_TOKEN)
        self.from_number = from_number or settings.TWILIO_PHONE_NUMBER

    def send(self, user_id: str, kind: str, payload: Dict[str, Any]) -> bool:
        phone = payload.get("phone")
        if not phone:
            logger.warning(f"No phone number for user {user_id}, skipping SMS")
            return False
        if not self.from_number:
            raise RuntimeError("Twilio phone number not configured")
        message = self.client.messages.create(to=phone, from_=self.from_number, body=payload.get("message", ""))
        logger.info(f"SMS {message.sid} sent to user {user_id}")
        return True
