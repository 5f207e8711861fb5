from typing import Optional, Dict, Any, Protocol


class AuditSink(Protocol):
    def record(self, action: str, resource: str, resource_id: Optional[str], user_id: Optional[str], details: Optional[Dict[str, Any]] = None) -> None:
        ...
