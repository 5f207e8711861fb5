# clinic_booking/schemas/time_slots/time_slot.py
from pydantic import BaseModel, ConfigDict, Field
from typing import Optional
from datetime import date, datetime

HHMM_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class TimeSlotCreate(BaseModel):
    model_config = ConfigDict(extra="forbid")

    doctor_id: str = Field(min_length=1)
    slot_date: date
    start_time: str = Field(pattern=HHMM_PATTERN)  # HH:MM
    end_time: str = Field(pattern=HHMM_PATTERN)  # HH:MM
    status: str = Field(default="available", pattern=r"^(available|blocked)$")


class TimeSlotResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    doctor_id: str
    slot_date: date
    start_time: str
    end_time: str
    status: str
    appointment_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
