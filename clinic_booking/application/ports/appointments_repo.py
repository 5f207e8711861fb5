from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple
from datetime import datetime, date

from .directory import PersonDto


@dataclass
class ReminderDto:
    channel: str
    sent_at: datetime
    status: str


@dataclass
class AppointmentDto:
    id: str
    patient_id: str
    doctor_id: str
    time_slot_id: str
    clinic_id: Optional[str]
    appointment_date: date
    start_time: str
    end_time: str
    type: str
    status: str
    reason_for_visit: str
    notes: Optional[str]
    is_virtual: bool
    meeting_link: Optional[str]
    meeting_event_id: Optional[str]
    cancel_reason: Optional[str]
    cancelled_at: Optional[datetime]
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime
    reminders: List[ReminderDto] = field(default_factory=list)
    patient: Optional[PersonDto] = None
    doctor: Optional[PersonDto] = None

    @property
    def starts_at(self) -> datetime:
        return datetime.combine(self.appointment_date, datetime.strptime(self.start_time, "%H:%M").time())

    def has_reminder(self, channel: str) -> bool:
        return any(r.channel == channel and r.status in ("sent", "delivered") for r in self.reminders)


@dataclass
class AppointmentFilters:
    status: Optional[str] = None
    type: Optional[str] = None
    doctor_id: Optional[str] = None
    patient_id: Optional[str] = None
    clinic_id: Optional[str] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    search: Optional[str] = None
    sort: str = "date"
    order: str = "desc"


@dataclass
class AppointmentPage:
    items: List[AppointmentDto]
    total: int
    total_pages: int
    current_page: int


class AppointmentsRepository(Protocol):
    def get(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def get_for_update(self, appointment_id: str) -> Optional[AppointmentDto]:
        ...

    def add(self, values: Dict[str, Any]) -> AppointmentDto:
        ...

    def update(self, appointment_id: str, values: Dict[str, Any]) -> AppointmentDto:
        ...

    def delete(self, appointment_id: str) -> None:
        ...

    def find(self, filters: AppointmentFilters, offset: int, limit: int) -> Tuple[List[AppointmentDto], int]:
        ...

    def list_upcoming_for_patient(self, patient_id: str, today: date) -> List[AppointmentDto]:
        ...

    def list_upcoming_for_doctor(self, doctor_id: str, today: date) -> List[AppointmentDto]:
        ...

    def list_for_clinic_on(self, clinic_id: str, day: date) -> List[AppointmentDto]:
        ...

    def list_scheduled_between(self, start_date: date, end_date: date) -> List[AppointmentDto]:
        ...

    def add_reminder(self, appointment_id: str, channel: str, sent_at: datetime, status: str) -> None:
        ...
