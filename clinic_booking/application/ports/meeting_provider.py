from dataclasses import dataclass
from typing import Any, Dict, Optional, Protocol

from .appointments_repo import AppointmentDto


@dataclass
class MeetingDto:
    event_id: str
    meet_link: str


class MeetingProvider(Protocol):
    def create_meeting(self, organizer_id: str, appointment: AppointmentDto, tokens: Optional[Dict[str, Any]] = None) -> MeetingDto:
        ...

    def update_meeting(self, organizer_id: str, appointment: AppointmentDto) -> MeetingDto:
        ...

    def delete_meeting(self, organizer_id: str, event_id: str) -> None:
        ...
