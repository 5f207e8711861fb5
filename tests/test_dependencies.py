from datetime import datetime, timedelta
from zoneinfo import ZoneInfoNotFoundError

import pytest

from clinic_booking import dependencies
from clinic_booking.config import Settings
from clinic_booking.dependencies import build_meeting_provider, clinic_clock
from clinic_booking.infrastructure.meetings.dev_meeting_provider import DevMeetingProvider
from clinic_booking.infrastructure.meetings.google_calendar_provider import GoogleCalendarMeetingProvider

TOKYO_OFFSET = timedelta(hours=9)


def close_to(actual, expected, tolerance=timedelta(seconds=5)):
    return abs(actual - expected) < tolerance


def test_clinic_clock_reads_local_wall_time():
    now = clinic_clock("Asia/Tokyo")()
    assert now.tzinfo is None
    assert close_to(now, datetime.utcnow() + TOKYO_OFFSET)


def test_clinic_clock_in_utc_matches_utcnow():
    assert close_to(clinic_clock("UTC")(), datetime.utcnow())


def test_unknown_timezone_is_rejected():
    with pytest.raises(ZoneInfoNotFoundError):
        clinic_clock("Mars/Olympus_Mons")


@pytest.mark.parametrize("factory", [
    dependencies.get_appointments_service,
    dependencies.get_reminder_sweeper,
    dependencies.get_no_show_sweeper,
], ids=["appointments", "reminders", "no-shows"])
def test_services_run_on_clinic_time(monkeypatch, factory):
    monkeypatch.setattr(dependencies.settings, "CLINIC_TIMEZONE", "Asia/Tokyo")
    built = factory()
    assert close_to(built.clock(), datetime.utcnow() + TOKYO_OFFSET)


def test_google_provider_uses_configured_timeout():
    config = Settings(MEETING_PROVIDER="google", GOOGLE_API_TIMEOUT_SECONDS=2.5, CLINIC_TIMEZONE="Europe/Lisbon")
    provider = build_meeting_provider(config)
    assert isinstance(provider, GoogleCalendarMeetingProvider)
    assert provider.http.timeout.read == 2.5
    assert provider.http.timeout.connect == 2.5
    assert provider.timezone == "Europe/Lisbon"


def test_dev_and_disabled_providers():
    assert isinstance(build_meeting_provider(Settings(MEETING_PROVIDER="dev")), DevMeetingProvider)
    assert build_meeting_provider(Settings(MEETING_PROVIDER="none")) is None
