from typing import Any, Dict

from ...application.ports.unit_of_work import TransactionCoordinator


class InAppChannel:
    """Stores the notification for the user's in-app inbox, in its own transaction."""

    def __init__(self, coordinator: TransactionCoordinator):
        self.coordinator = coordinator

    def send(self, user_id: str, kind: str, payload: Dict[str, Any]) -> bool:
        with self.coordinator.transaction() as txn:
            txn.notifications.add(
                user_id,
                kind,
                payload.get("title", ""),
                payload.get("message", ""),
                payload.get("related_model"),
                payload.get("related_id"),
                channel="in-app",
            )
        return True
