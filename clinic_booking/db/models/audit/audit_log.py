# clinic_booking/db/models/audit/audit_log.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime

class AuditLog(SQLModel, table=True):
    __tablename__ = "audit_logs"
    id: Optional[int] = Field(default=None, primary_key=True)
    action: str = Field(index=True)
    resource: str
    resource_id: Optional[str] = Field(default=None, index=True)
    user_id: Optional[str] = Field(default=None, index=True)
    details: Optional[str] = Field(default=None)  # JSON document
    timestamp: datetime = Field(default_factory=datetime.utcnow, index=True)
