from dataclasses import dataclass
from typing import List, Optional, Protocol
from datetime import datetime, date


@dataclass
class TimeSlotDto:
    id: str
    doctor_id: str
    slot_date: date
    start_time: str
    end_time: str
    status: str
    appointment_id: Optional[str]
    created_at: datetime
    updated_at: datetime


class SlotRepository(Protocol):
    def get(self, slot_id: str) -> Optional[TimeSlotDto]:
        ...

    def get_for_update(self, slot_id: str) -> Optional[TimeSlotDto]:
        """Read the slot inside the current transaction, locking its row where the store supports it."""
        ...

    def add(self, doctor_id: str, slot_date: date, start_time: str, end_time: str, status: str) -> TimeSlotDto:
        ...

    def set_state(self, slot_id: str, status: str, appointment_id: Optional[str]) -> TimeSlotDto:
        ...

    def delete(self, slot_id: str) -> None:
        ...

    def list_for_doctor_on(self, doctor_id: str, slot_date: date) -> List[TimeSlotDto]:
        ...

    def list_available(self, doctor_id: str, start_date: date, end_date: date) -> List[TimeSlotDto]:
        ...
