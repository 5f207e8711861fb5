# clinic_booking/db/models/directory/patient.py
from typing import Optional
from sqlmodel import SQLModel, Field
from datetime import datetime
import uuid

class Patient(SQLModel, table=True):
    __tablename__ = "patients"
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    user_id: Optional[str] = Field(default=None, index=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: Optional[str] = Field(max_length=100, default=None)
    phone: Optional[str] = Field(max_length=20, default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
