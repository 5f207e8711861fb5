# clinic_booking/db/models/scheduling/appointment.py
from typing import Optional, List
from sqlmodel import SQLModel, Field, Relationship, Index
from datetime import date, datetime
import uuid

class Appointment(SQLModel, table=True):
    __tablename__ = "appointments"
    __table_args__ = (Index("ix_appointments_date_status", "appointment_date", "status"),)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), primary_key=True)
    patient_id: str = Field(foreign_key="patients.id", index=True)
    doctor_id: str = Field(foreign_key="doctors.id", index=True)
    # No FK: a time slot may be deleted once freed while cancelled appointments still name it
    time_slot_id: str = Field(index=True)
    clinic_id: Optional[str] = Field(default=None, foreign_key="clinics.id", index=True)
    appointment_date: date
    start_time: str  # HH:MM
    end_time: str  # HH:MM
    type: str = Field(default="virtual")
    status: str = Field(default="scheduled", index=True)
    reason_for_visit: str
    notes: Optional[str] = None
    is_virtual: bool = Field(default=True)
    meeting_link: Optional[str] = None
    meeting_event_id: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
    updated_at: datetime = Field(default_factory=datetime.utcnow)

    # Relationships
    reminders: List["AppointmentReminder"] = Relationship(
        back_populates="appointment",
        sa_relationship_kwargs={"cascade": "all, delete-orphan"},
    )


class AppointmentReminder(SQLModel, table=True):
    __tablename__ = "appointment_reminders"
    id: Optional[int] = Field(default=None, primary_key=True)
    appointment_id: str = Field(foreign_key="appointments.id", index=True)
    channel: str  # email | sms | in-app
    sent_at: datetime = Field(default_factory=datetime.utcnow)
    status: str = Field(default="sent")

    appointment: Optional[Appointment] = Relationship(back_populates="reminders")
