import dataclasses
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, List

from ..ports.appointments_repo import AppointmentDto
from ..ports.notifications import NotificationDispatcher
from ..ports.unit_of_work import TransactionCoordinator

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.utcnow()


@dataclass
class ReminderSweeper:
    """Sends reminders for scheduled appointments starting within the window.

    A reminder is recorded on the appointment only once the channel accepted
    it, so a failed channel is retried on the next run and a delivered one is
    never sent twice. ``clock`` gives the clinic's local wall time.
    """

    coordinator: TransactionCoordinator
    notifier: NotificationDispatcher
    channels: List[str] = field(default_factory=lambda: ["email", "in-app"])
    window_hours: int = 24
    clock: Callable[[], datetime] = _utcnow

    def schedule_appointment_reminders(self) -> int:
        now = self.clock()
        window_end = now + timedelta(hours=self.window_hours)

        with self.coordinator.transaction() as txn:
            candidates = txn.appointments.list_scheduled_between(now.date(), window_end.date())
            due = [
                dataclasses.replace(
                    a,
                    patient=txn.directory.get_patient(a.patient_id),
                    doctor=txn.directory.get_doctor(a.doctor_id),
                )
                for a in candidates
                if now <= a.starts_at <= window_end
            ]

        reminded = 0
        for appt in due:
            try:
                if self._remind(appt):
                    reminded += 1
            except Exception as e:
                logger.error(f"Failed to send reminders for appointment {appt.id}: {e}")

        logger.info(f"Reminder sweep finished: {reminded} of {len(due)} due appointments reminded")
        return reminded

    def _remind(self, appt: AppointmentDto) -> bool:
        if appt.patient is None:
            logger.error(f"Appointment {appt.id} references missing patient {appt.patient_id}")
            return False

        payload = self._payload(appt)
        sent_any = False
        for channel in self.channels:
            if appt.has_reminder(channel):
                continue
            try:
                delivered = self.notifier.notify(appt.patient.recipient_id, "reminder", payload, channel=channel)
            except Exception as e:
                logger.error(f"Reminder via {channel} failed for appointment {appt.id}: {e}")
                continue
            if not delivered:
                logger.warning(f"Reminder via {channel} was not delivered for appointment {appt.id}")
                continue

            with self.coordinator.transaction() as txn:
                txn.appointments.add_reminder(appt.id, channel, datetime.utcnow(), "sent")
            sent_any = True
        return sent_any

    def _payload(self, appt: AppointmentDto) -> dict:
        doctor_name = f"Dr. {appt.doctor.last_name}" if appt.doctor else "your doctor"
        when = f"{appt.appointment_date.isoformat()} at {appt.start_time}"
        message = f"Reminder: you have an appointment with {doctor_name} on {when}"
        if appt.is_virtual and appt.meeting_link:
            message += f". Join online: {appt.meeting_link}"
        return {
            "title": "Appointment Reminder",
            "message": message,
            "email": appt.patient.email,
            "phone": appt.patient.phone,
            "related_model": "Appointment",
            "related_id": appt.id,
            "meeting_link": appt.meeting_link,
        }
