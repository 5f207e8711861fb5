import json
from datetime import date, datetime

import httpx

from clinic_booking.application.ports.appointments_repo import AppointmentDto
from clinic_booking.application.ports.directory import PersonDto
from clinic_booking.infrastructure.meetings.dev_meeting_provider import DevMeetingProvider
from clinic_booking.infrastructure.meetings.google_calendar_provider import GoogleCalendarMeetingProvider


def appointment(**overrides):
    data = dict(
        id="appt-1", patient_id="p1", doctor_id="d1", time_slot_id="s1", clinic_id=None,
        appointment_date=date(2030, 1, 10), start_time="10:00", end_time="10:30",
        type="virtual", status="scheduled", reason_for_visit="Checkup", notes=None,
        is_virtual=True, meeting_link=None, meeting_event_id=None, cancel_reason=None,
        cancelled_at=None, created_by="user-admin", created_at=datetime(2030, 1, 1), updated_at=datetime(2030, 1, 1),
        patient=PersonDto(id="p1", first_name="John", last_name="Doe", email="john@example.test"),
    )
    data.update(overrides)
    return AppointmentDto(**data)


def test_dev_provider_issues_meet_links():
    meeting = DevMeetingProvider().create_meeting("user-doc", appointment())
    assert meeting.event_id.startswith("dev_")
    assert meeting.meet_link.startswith("https://meet.google.com/")


def test_google_provider_creates_conference_event():
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(200, json={"access_token": "tok", "expires_in": 3600})
        return httpx.Response(200, json={"id": "evt-9", "hangoutLink": "https://meet.google.com/xyz-abcd-efg"})

    provider = GoogleCalendarMeetingProvider(
        client_id="cid", client_secret="secret", refresh_token="refresh",
        http=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    meeting = provider.create_meeting("user-doc", appointment())

    assert (meeting.event_id, meeting.meet_link) == ("evt-9", "https://meet.google.com/xyz-abcd-efg")
    event_request = requests[-1]
    assert event_request.headers["Authorization"] == "Bearer tok"
    assert event_request.url.params["conferenceDataVersion"] == "1"
    sent = json.loads(event_request.content)
    assert sent["start"]["dateTime"] == "2030-01-10T10:00:00"
    assert sent["conferenceData"]["createRequest"]["conferenceSolutionKey"] == {"type": "hangoutsMeet"}


def test_google_provider_treats_missing_event_as_deleted():
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "oauth2.googleapis.com":
            return httpx.Response(200, json={"access_token": "tok"})
        return httpx.Response(410)

    provider = GoogleCalendarMeetingProvider(
        client_id="cid", client_secret="secret", refresh_token="refresh",
        http=httpx.Client(transport=httpx.MockTransport(handler)),
    )
    provider.delete_meeting("user-doc", "evt-9")
