from typing import Any, Dict, Optional, Protocol


class NotificationRepository(Protocol):
    """In-app notification records written inside the booking transaction."""

    def add(self, user_id: str, type: str, title: str, message: str, related_model: Optional[str] = None, related_id: Optional[str] = None, channel: str = "in-app") -> None:
        ...


class NotificationDispatcher(Protocol):
    def notify(self, user_id: str, kind: str, payload: Dict[str, Any], channel: str = "in-app") -> bool:
        ...
