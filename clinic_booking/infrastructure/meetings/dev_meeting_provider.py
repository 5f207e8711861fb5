import logging
import secrets
import uuid
from typing import Any, Dict, Optional

from ...application.ports.appointments_repo import AppointmentDto
from ...application.ports.meeting_provider import MeetingDto, MeetingProvider

logger = logging.getLogger(__name__)


def _meet_code() -> str:
    letters = "abcdefghijklmnopqrstuvwxyz"
    return "-".join("".join(secrets.choice(letters) for _ in range(n)) for n in (3, 4, 3))


class DevMeetingProvider(MeetingProvider):
    """Hands out Meet-shaped links without calling Google. For local development."""

    def create_meeting(self, organizer_id: str, appointment: AppointmentDto, tokens: Optional[Dict[str, Any]] = None) -> MeetingDto:
        meeting = MeetingDto(event_id=f"dev_{uuid.uuid4().hex}", meet_link=f"https://meet.google.com/{_meet_code()}")
        logger.info(f"Dev meeting {meeting.event_id} created for appointment {appointment.id}")
        return meeting

    def update_meeting(self, organizer_id: str, appointment: AppointmentDto) -> MeetingDto:
        return MeetingDto(event_id=appointment.meeting_event_id or "", meet_link=appointment.meeting_link or "")

    def delete_meeting(self, organizer_id: str, event_id: str) -> None:
        logger.info(f"Dev meeting {event_id} deleted")
