# clinic_booking/db/models/notifications/notification.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class Notification(SQLModel, table=True):
    __tablename__ = "notifications"
    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: str = Field(index=True)
    type: str
    title: str
    message: str
    related_model: Optional[str] = None
    related_id: Optional[str] = None
    channel: str = Field(default="in-app")
    read: bool = Field(default=False)
    created_at: datetime = Field(default_factory=datetime.utcnow)
