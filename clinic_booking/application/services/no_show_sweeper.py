import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from .appointments_service import AppointmentsService, SYSTEM_ACTOR
from ..statuses import AppointmentStatus
from ...schemas.appointments.appointment import AppointmentUpdate

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.utcnow()


@dataclass
class NoShowSweeper:
    """Marks scheduled appointments as no-show once their start is past the grace period."""

    appointments: AppointmentsService
    grace_minutes: int = 30
    clock: Callable[[], datetime] = _utcnow

    def handle_no_show_appointments(self) -> int:
        now = self.clock()
        cutoff = now - timedelta(minutes=self.grace_minutes)

        with self.appointments.coordinator.transaction() as txn:
            candidates = txn.appointments.list_scheduled_between((now - timedelta(days=1)).date(), now.date())
        overdue = [a for a in candidates if a.starts_at < cutoff]

        marked = 0
        for appt in overdue:
            try:
                self.appointments.update_appointment(
                    appt.id, AppointmentUpdate(status=AppointmentStatus.NO_SHOW), SYSTEM_ACTOR
                )
                marked += 1
            except Exception as e:
                logger.error(f"Failed to mark appointment {appt.id} as no-show: {e}")

        logger.info(f"No-show sweep finished: {marked} appointments marked")
        return marked
