# Schemas package (re-export feature modules for stable imports)
from .appointments.appointment import (
    AppointmentCreate,
    AppointmentUpdate,
    AppointmentCancel,
    AppointmentResponse,
    AppointmentListResponse,
    ParticipantResponse,
    ReminderResponse,
)
from .time_slots.time_slot import TimeSlotCreate, TimeSlotResponse
from .common.common import MessageResponse, SweepResponse

__all__ = [
    "AppointmentCreate",
    "AppointmentUpdate",
    "AppointmentCancel",
    "AppointmentResponse",
    "AppointmentListResponse",
    "ParticipantResponse",
    "ReminderResponse",
    "TimeSlotCreate",
    "TimeSlotResponse",
    "MessageResponse",
    "SweepResponse",
]
