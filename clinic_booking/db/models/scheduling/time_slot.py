# clinic_booking/db/models/scheduling/time_slot.py
from typing import Optional
from sqlmodel import SQLModel, Field, Index
from datetime import date, datetime
import uuid

class TimeSlot(SQLModel, table=True):
    __tablename__ = "time_slots"
    __table_args__ = (Index("ix_time_slots_doctor_date_status", "doctor_id", "slot_date", "status"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    slot_date: date = Field(index=True)
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    status: str = Field(default="available", index=True)
    # Back-reference to the booking appointment; set only while status is "booked"
    appointment_id: Optional[str] = Field(default=None)
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)
