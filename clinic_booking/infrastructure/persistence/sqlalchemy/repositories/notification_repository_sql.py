from typing import Optional
from sqlmodel import Session

from .....db.models import Notification
from .....application.ports.notifications import NotificationRepository


class SqlNotificationRepository(NotificationRepository):
    def __init__(self, session: Session):
        self.session = session

    def add(self, user_id: str, type: str, title: str, message: str, related_model: Optional[str] = None, related_id: Optional[str] = None, channel: str = "in-app") -> None:
        self.session.add(Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_model=related_model,
            related_id=related_id,
            channel=channel,
        ))
        self.session.flush()
