# clinic_booking/db/models/directory/clinic.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

class Clinic(SQLModel, table=True):
    __tablename__ = "clinics"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    name: str = Field(max_length=200)
    email: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
