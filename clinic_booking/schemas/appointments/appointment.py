# clinic_booking/schemas/appointments/appointment.py
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from datetime import date, datetime

from ...application.statuses import AppointmentStatus, AppointmentType


class AppointmentCreate(BaseModel):
    model_config = ConfigDict(extra="forbid", use_enum_values=True, validate_default=True)

    patient_id: str = Field(min_length=1)
    doctor_id: str = Field(min_length=1)
    time_slot_id: str = Field(min_length=1)
    clinic_id: Optional[str] = None
    type: AppointmentType = AppointmentType.VIRTUAL
    reason_for_visit: str = Field(min_length=1)
    notes: Optional[str] = None
    # Defaults to True for "virtual" appointments when omitted
    is_virtual: Optional[bool] = None


class AppointmentUpdate(BaseModel):
    """Closed set of fields an appointment update may carry; anything else is rejected."""

    model_config = ConfigDict(extra="forbid", use_enum_values=True)

    status: Optional[AppointmentStatus] = None
    cancel_reason: Optional[str] = None
    notes: Optional[str] = None
    type: Optional[AppointmentType] = None
    reason_for_visit: Optional[str] = Field(default=None, min_length=1)
    is_virtual: Optional[bool] = None
    time_slot_id: Optional[str] = Field(default=None, min_length=1)


class AppointmentCancel(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reason: Optional[str] = None


class ParticipantResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    first_name: str
    last_name: str
    email: Optional[str] = None
    phone: Optional[str] = None


class ReminderResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    channel: str
    sent_at: datetime
    status: str


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    patient_id: str
    doctor_id: str
    time_slot_id: str
    clinic_id: Optional[str] = None
    appointment_date: date
    start_time: str
    end_time: str
    type: str
    status: str
    reason_for_visit: str
    notes: Optional[str] = None
    is_virtual: bool
    meeting_link: Optional[str] = None
    cancel_reason: Optional[str] = None
    cancelled_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    reminders: List[ReminderResponse] = []
    patient: Optional[ParticipantResponse] = None
    doctor: Optional[ParticipantResponse] = None


class AppointmentListResponse(BaseModel):
    items: List[AppointmentResponse]
    total: int
    total_pages: int
    current_page: int
