# Wiring of services to their infrastructure, overridable in tests via app.dependency_overrides
import logging
from datetime import datetime
from functools import lru_cache
from typing import Callable, Optional
from zoneinfo import ZoneInfo

from .config import Settings, settings
from .database import engine
from .application.ports.meeting_provider import MeetingProvider
from .application.ports.notifications import NotificationDispatcher
from .application.ports.unit_of_work import TransactionCoordinator
from .application.services.appointments_service import AppointmentsService
from .application.services.no_show_sweeper import NoShowSweeper
from .application.services.reminder_sweeper import ReminderSweeper
from .application.services.slot_reservation import SlotReservation
from .application.services.time_slots_service import TimeSlotsService
from .infrastructure.meetings.dev_meeting_provider import DevMeetingProvider
from .infrastructure.meetings.google_calendar_provider import GoogleCalendarMeetingProvider
from .infrastructure.notifications.channel_router import ChannelRouter
from .infrastructure.notifications.in_app_channel import InAppChannel
from .infrastructure.notifications.resend_email_channel import ResendEmailChannel
from .infrastructure.notifications.twilio_sms_channel import TwilioSmsChannel
from .infrastructure.persistence.sqlalchemy.unit_of_work import SqlTransactionCoordinator

logger = logging.getLogger(__name__)


def build_meeting_provider(config: Settings) -> Optional[MeetingProvider]:
    provider = config.MEETING_PROVIDER.lower()
    if provider == "google":
        return GoogleCalendarMeetingProvider(
            client_id=config.GOOGLE_CLIENT_ID,
            client_secret=config.GOOGLE_CLIENT_SECRET,
            refresh_token=config.GOOGLE_REFRESH_TOKEN,
            calendar_id=config.GOOGLE_CALENDAR_ID,
            timezone=config.CLINIC_TIMEZONE,
            timeout=config.GOOGLE_API_TIMEOUT_SECONDS,
        )
    if provider == "dev":
        return DevMeetingProvider()
    if provider != "none":
        logger.warning(f"Unknown MEETING_PROVIDER '{config.MEETING_PROVIDER}', virtual appointments get no meeting")
    return None


def clinic_clock(timezone: str) -> Callable[[], datetime]:
    """Current wall time in the clinic's zone, naive like stored slot times."""
    zone = ZoneInfo(timezone)

    def now() -> datetime:
        return datetime.now(zone).replace(tzinfo=None)

    return now


def build_notifier(coordinator: TransactionCoordinator, config: Settings) -> NotificationDispatcher:
    channels = {"in-app": InAppChannel(coordinator)}
    if config.RESEND_API_KEY:
        channels["email"] = ResendEmailChannel(config.RESEND_API_KEY, config.EMAIL_FROM_ADDRESS)
    if config.TWILIO_ACCOUNT_SID and config.TWILIO_AUTH_TOKEN:
        channels["sms"] = TwilioSmsChannel(from_number=config.TWILIO_PHONE_NUMBER)
    logger.info(f"Notification channels enabled: {sorted(channels)}")
    return ChannelRouter(channels)


@lru_cache()
def get_coordinator() -> TransactionCoordinator:
    return SqlTransactionCoordinator(engine)


@lru_cache()
def get_meeting_provider() -> Optional[MeetingProvider]:
    return build_meeting_provider(settings)


@lru_cache()
def get_notifier() -> NotificationDispatcher:
    return build_notifier(get_coordinator(), settings)


def get_appointments_service() -> AppointmentsService:
    return AppointmentsService(
        coordinator=get_coordinator(),
        reservation=SlotReservation(),
        meetings=get_meeting_provider(),
        notifier=get_notifier(),
        clock=clinic_clock(settings.CLINIC_TIMEZONE),
    )


def get_time_slots_service() -> TimeSlotsService:
    return TimeSlotsService(coordinator=get_coordinator(), reservation=SlotReservation())


def get_reminder_sweeper() -> ReminderSweeper:
    return ReminderSweeper(
        coordinator=get_coordinator(),
        notifier=get_notifier(),
        channels=settings.reminder_channels_list,
        window_hours=settings.REMINDER_WINDOW_HOURS,
        clock=clinic_clock(settings.CLINIC_TIMEZONE),
    )


def get_no_show_sweeper() -> NoShowSweeper:
    return NoShowSweeper(
        appointments=get_appointments_service(),
        grace_minutes=settings.NO_SHOW_GRACE_MINUTES,
        clock=clinic_clock(settings.CLINIC_TIMEZONE),
    )
