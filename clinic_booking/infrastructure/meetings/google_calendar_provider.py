"""
Google Calendar meeting provider
Creates, moves and deletes calendar events carrying a Google Meet conference
"""
import logging
import uuid
from datetime import datetime, timedelta
from typing import Any, Dict, Optional

import httpx

from ...application.ports.appointments_repo import AppointmentDto
from ...application.ports.meeting_provider import MeetingDto, MeetingProvider
from ...exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

GOOGLE_TOKEN_URL = "https://oauth2.googleapis.com/token"
GOOGLE_CALENDAR_API = "https://www.googleapis.com/calendar/v3"


class GoogleCalendarMeetingProvider(MeetingProvider):
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        calendar_id: str = "primary",
        timezone: str = "UTC",
        timeout: float = 5.0,
        http: Optional[httpx.Client] = None,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.refresh_token = refresh_token
        self.calendar_id = calendar_id
        self.timezone = timezone
        self.http = http or httpx.Client(timeout=timeout)
        self._access_token: Optional[str] = None
        self._expires_at = datetime.min

    def _token(self, tokens: Optional[Dict[str, Any]] = None) -> str:
        if tokens and tokens.get("access_token"):
            return tokens["access_token"]
        # Refresh when expired or about to expire (within 5 minutes)
        if self._access_token and self._expires_at > datetime.utcnow() + timedelta(minutes=5):
            return self._access_token

        refresh_token = (tokens or {}).get("refresh_token") or self.refresh_token
        if not refresh_token:
            raise ExternalServiceError("Google Calendar is not connected")
        response = self.http.post(
            GOOGLE_TOKEN_URL,
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "refresh_token": refresh_token,
                "grant_type": "refresh_token",
            },
        )
        if response.status_code != 200:
            raise ExternalServiceError(f"Google token refresh failed: {response.text}")
        payload = response.json()
        if not payload.get("access_token"):
            raise ExternalServiceError("No access token in Google refresh response")
        self._access_token = payload["access_token"]
        self._expires_at = datetime.utcnow() + timedelta(seconds=payload.get("expires_in", 3600))
        logger.info("Google Calendar token refreshed")
        return self._access_token

    def _event_body(self, appointment: AppointmentDto) -> Dict[str, Any]:
        day = appointment.appointment_date.isoformat()
        patient = appointment.patient.full_name if appointment.patient else "Patient"
        body: Dict[str, Any] = {
            "summary": f"Appointment with {patient}",
            "description": appointment.reason_for_visit,
            "start": {"dateTime": f"{day}T{appointment.start_time}:00", "timeZone": self.timezone},
            "end": {"dateTime": f"{day}T{appointment.end_time}:00", "timeZone": self.timezone},
        }
        if appointment.patient and appointment.patient.email:
            body["attendees"] = [{"email": appointment.patient.email}]
        return body

    def create_meeting(self, organizer_id: str, appointment: AppointmentDto, tokens: Optional[Dict[str, Any]] = None) -> MeetingDto:
        body = self._event_body(appointment)
        body["conferenceData"] = {
            "createRequest": {
                "requestId": str(uuid.uuid4()),
                "conferenceSolutionKey": {"type": "hangoutsMeet"},
            }
        }
        response = self.http.post(
            f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events",
            params={"conferenceDataVersion": 1, "sendUpdates": "all"},
            headers={"Authorization": f"Bearer {self._token(tokens)}"},
            json=body,
        )
        if response.status_code not in (200, 201):
            raise ExternalServiceError(f"Failed to create calendar event: {response.text}")
        event = response.json()
        logger.info(f"Google Calendar event {event.get('id')} created for appointment {appointment.id}")
        return MeetingDto(event_id=event["id"], meet_link=event.get("hangoutLink", ""))

    def update_meeting(self, organizer_id: str, appointment: AppointmentDto) -> MeetingDto:
        response = self.http.patch(
            f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events/{appointment.meeting_event_id}",
            params={"sendUpdates": "all"},
            headers={"Authorization": f"Bearer {self._token()}"},
            json=self._event_body(appointment),
        )
        if response.status_code != 200:
            raise ExternalServiceError(f"Failed to update calendar event: {response.text}")
        event = response.json()
        return MeetingDto(event_id=event["id"], meet_link=event.get("hangoutLink", appointment.meeting_link or ""))

    def delete_meeting(self, organizer_id: str, event_id: str) -> None:
        response = self.http.delete(
            f"{GOOGLE_CALENDAR_API}/calendars/{self.calendar_id}/events/{event_id}",
            params={"sendUpdates": "all"},
            headers={"Authorization": f"Bearer {self._token()}"},
        )
        # 410 means the event is already gone
        if response.status_code not in (200, 204, 404, 410):
            raise ExternalServiceError(f"Failed to delete calendar event: {response.text}")
        logger.info(f"Google Calendar event {event_id} deleted")
