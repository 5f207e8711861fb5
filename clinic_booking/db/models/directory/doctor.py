# clinic_booking/db/models/directory/doctor.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

class Doctor(SQLModel, table=True):
    __tablename__ = "doctors"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    clinic_id: Optional[str] = Field(default=None, foreign_key="clinics.id", index=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    specialization: Optional[str] = None
    email: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
