import json
import logging
from datetime import datetime
from typing import Optional, Dict, Any

from sqlmodel import Session

from ...application.ports.audit_logger import AuditSink
from ...db.models import AuditLog


class SqlAuditSink(AuditSink):
    """Appends audit rows through the caller's session, so they commit or roll back with the mutation."""

    def __init__(self, session: Session) -> None:
        self.session = session
        self._logger = logging.getLogger(__name__)

    def record(self, action: str, resource: str, resource_id: Optional[str], user_id: Optional[str], details: Optional[Dict[str, Any]] = None) -> None:
        entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "action": action,
            "resource": resource,
            "resource_id": resource_id,
            "user_id": user_id,
            "details": details or {},
        }
        self.session.add(AuditLog(
            action=action,
            resource=resource,
            resource_id=resource_id,
            user_id=user_id,
            details=json.dumps(entry["details"], default=str),
        ))
        self.session.flush()
        self._logger.info(f"AUDIT: {json.dumps(entry, default=str)}")
