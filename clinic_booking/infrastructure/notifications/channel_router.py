import logging
from typing import Any, Dict, Mapping, Protocol

from ...application.ports.notifications import NotificationDispatcher

logger = logging.getLogger(__name__)


class Channel(Protocol):
    def send(self, user_id: str, kind: str, payload: Dict[str, Any]) -> bool:
        ...


class ChannelRouter(NotificationDispatcher):
    """Dispatches a notification to the channel it names."""

    def __init__(self, channels: Mapping[str, Channel]):
        self.channels = dict(channels)

    def notify(self, user_id: str, kind: str, payload: Dict[str, Any], channel: str = "in-app") -> bool:
        sender = self.channels.get(channel)
        if sender is None:
            logger.warning(f"Notification channel '{channel}' is not configured; {kind} for user {user_id} dropped")
            return False
        return sender.send(user_id, kind, payload)
