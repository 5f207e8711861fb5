import dataclasses
import logging
import math
import uuid
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterator, List, Optional, Tuple

from ..ports.appointments_repo import AppointmentDto, AppointmentFilters, AppointmentPage
from ..ports.directory import PersonDto
from ..ports.meeting_provider import MeetingDto, MeetingProvider
from ..ports.notifications import NotificationDispatcher
from ..ports.unit_of_work import TransactionCoordinator, UnitOfWork
from ..statuses import AppointmentStatus, RESCHEDULABLE, ensure_transition
from ..validation import is_valid_id, validate_id
from .best_effort import best_effort
from .slot_reservation import SlotReservation
from ...exceptions import InvalidTransitionError, NotFoundError, ValidationError
from ...schemas.appointments.appointment import AppointmentCreate, AppointmentUpdate

logger = logging.getLogger(__name__)

SYSTEM_ACTOR = "system"
DEFAULT_CANCEL_REASON = "No reason provided"
MAX_PAGE_SIZE = 100


def _utcnow() -> datetime:
    return datetime.utcnow()


def notification_content(event: str, appt: AppointmentDto, patient: Optional[PersonDto], doctor: Optional[PersonDto]) -> Tuple[str, str, str]:
    """Title plus the patient-facing and doctor-facing message for an appointment event."""
    when = f"{appt.appointment_date.isoformat()} at {appt.start_time}"
    doctor_name = f"Dr. {doctor.last_name}" if doctor else "your doctor"
    patient_name = patient.full_name if patient else "a patient"

    if event == "created":
        return (
            "Appointment Scheduled",
            f"Your appointment with {doctor_name} has been scheduled for {when}",
            f"New appointment with {patient_name} scheduled for {when}",
        )
    if event == AppointmentStatus.CANCELLED.value:
        reason = appt.cancel_reason or DEFAULT_CANCEL_REASON
        return (
            "Appointment Cancelled",
            f"Your appointment with {doctor_name} on {when} has been cancelled. Reason: {reason}",
            f"Appointment with {patient_name} on {when} has been cancelled. Reason: {reason}",
        )
    if event == "rescheduled":
        return (
            "Appointment Rescheduled",
            f"Your appointment with {doctor_name} has been moved to {when}",
            f"Appointment with {patient_name} has been moved to {when}",
        )
    if event == AppointmentStatus.CHECKED_IN.value:
        return (
            "Checked In",
            f"You are checked in for your appointment with {doctor_name}",
            f"{patient_name} has checked in for the appointment at {appt.start_time}",
        )
    if event == AppointmentStatus.COMPLETED.value:
        return (
            "Appointment Completed",
            f"Your appointment with {doctor_name} has been completed",
            f"Appointment with {patient_name} has been marked as completed",
        )
    if event == AppointmentStatus.NO_SHOW.value:
        return (
            "Missed Appointment",
            f"You missed your appointment with {doctor_name} on {when}",
            f"{patient_name} did not show up for the appointment on {when}",
        )
    return (
        "Appointment Updated",
        f"Your appointment with {doctor_name} on {when} has been updated",
        f"Appointment with {patient_name} on {when} has been updated",
    )


@dataclass
class AppointmentsService:
    """Creates, updates, cancels and deletes appointments.

    Every mutation runs inside one transaction from ``coordinator`` which
    covers the slot change, the appointment row, the audit entry and the
    in-app notification records. Calls to the meeting provider and the
    notification dispatcher are best-effort: a failure is logged and the
    booking outcome stands. A meeting created inside a transaction that
    then aborts is deleted again.

    ``clock`` returns the clinic's local wall time, naive like the slot
    dates and HH:MM times it is compared with.
    """

    coordinator: TransactionCoordinator
    reservation: SlotReservation
    meetings: Optional[MeetingProvider] = None
    notifier: Optional[NotificationDispatcher] = None
    clock: Callable[[], datetime] = _utcnow

    # -- mutations ---------------------------------------------------------

    def create_appointment(self, data: AppointmentCreate, actor_user_id: str) -> AppointmentDto:
        validate_id(data.patient_id, "patient_id")
        validate_id(data.doctor_id, "doctor_id")
        validate_id(data.time_slot_id, "time_slot_id")
        if data.clinic_id:
            validate_id(data.clinic_id, "clinic_id")

        appointment_id = str(uuid.uuid4())
        with self._discarding_meetings_on_abort() as created_meetings, self.coordinator.transaction() as txn:
            patient = txn.directory.get_patient(data.patient_id)
            if not patient:
                raise NotFoundError("Patient not found")
            doctor = txn.directory.get_doctor(data.doctor_id)
            if not doctor:
                raise NotFoundError("Doctor not found")
            if data.clinic_id and not txn.directory.get_clinic(data.clinic_id):
                raise NotFoundError("Clinic not found")

            slot = self.reservation.reserve(txn, data.time_slot_id, appointment_id)
            if slot.doctor_id != data.doctor_id:
                raise ValidationError("Time slot does not belong to the selected doctor")

            is_virtual = data.is_virtual if data.is_virtual is not None else data.type == "virtual"
            appt = txn.appointments.add({
                "id": appointment_id,
                "patient_id": data.patient_id,
                "doctor_id": data.doctor_id,
                "time_slot_id": slot.id,
                "clinic_id": data.clinic_id or doctor.clinic_id,
                "appointment_date": slot.slot_date,
                "start_time": slot.start_time,
                "end_time": slot.end_time,
                "type": data.type,
                "status": AppointmentStatus.SCHEDULED.value,
                "reason_for_visit": data.reason_for_visit,
                "notes": data.notes,
                "is_virtual": is_virtual,
                "created_by": actor_user_id,
            })

            if appt.is_virtual:
                # The provider call runs while this transaction holds the write lock;
                # the HTTP client timeout (GOOGLE_API_TIMEOUT_SECONDS) bounds how long.
                appt = self._attach_meeting(txn, doctor, appt, created_meetings)

            txn.audit.record("create", "appointment", appt.id, actor_user_id, {
                "patient_id": appt.patient_id,
                "doctor_id": appt.doctor_id,
                "time_slot_id": appt.time_slot_id,
                "date": appt.appointment_date.isoformat(),
                "start_time": appt.start_time,
            })
            self._record_notifications(txn, "created", appt, patient, doctor)

        logger.info(f"Appointment {appointment_id} created for patient {data.patient_id} with doctor {data.doctor_id}")
        created = self.get_appointment_by_id(appointment_id) or appt
        self._send_email(patient, "created", created, doctor)
        return created

    def update_appointment(self, appointment_id: str, patch: AppointmentUpdate, actor_user_id: str) -> AppointmentDto:
        validate_id(appointment_id, "appointment_id")
        changes = patch.model_dump(exclude_unset=True)
        if not changes:
            raise ValidationError("No fields to update")
        if "time_slot_id" in changes and changes["time_slot_id"] is not None:
            validate_id(changes["time_slot_id"], "time_slot_id")

        new_status = changes.get("status")
        if "status" in changes and new_status is None:
            raise ValidationError("status cannot be null")
        if "cancel_reason" in changes and new_status != AppointmentStatus.CANCELLED.value:
            raise ValidationError("cancel_reason is only accepted when cancelling")

        meeting_to_delete: Optional[str] = None
        with self._discarding_meetings_on_abort() as created_meetings, self.coordinator.transaction() as txn:
            current = txn.appointments.get_for_update(appointment_id)
            if not current:
                raise NotFoundError("Appointment not found")

            values: Dict[str, Any] = {}
            if new_status is not None:
                ensure_transition(current.status, new_status)
                values["status"] = new_status
                if new_status == AppointmentStatus.CANCELLED.value:
                    values["cancelled_at"] = _utcnow()
                    values["cancel_reason"] = changes.get("cancel_reason") or DEFAULT_CANCEL_REASON

            for key in ("notes", "type", "reason_for_visit"):
                if key in changes and changes[key] is not None:
                    values[key] = changes[key]

            new_slot_id = changes.get("time_slot_id")
            rescheduled = new_slot_id is not None and new_slot_id != current.time_slot_id
            if rescheduled:
                if new_status == AppointmentStatus.CANCELLED.value:
                    raise ValidationError("An appointment cannot be rescheduled and cancelled in the same update")
                if current.status not in {s.value for s in RESCHEDULABLE}:
                    raise InvalidTransitionError(
                        current.status, current.status, f"Cannot reschedule an appointment that is {current.status}"
                    )
                self.reservation.release(txn, current.time_slot_id, current.id)
                new_slot = self.reservation.reserve(txn, new_slot_id, current.id)
                if new_slot.doctor_id != current.doctor_id:
                    raise ValidationError("Time slot does not belong to the appointment's doctor")
                values.update({
                    "time_slot_id": new_slot.id,
                    "appointment_date": new_slot.slot_date,
                    "start_time": new_slot.start_time,
                    "end_time": new_slot.end_time,
                })
            elif new_status == AppointmentStatus.CANCELLED.value:
                self.reservation.release(txn, current.time_slot_id, current.id)

            toggled_virtual = changes.get("is_virtual")
            if toggled_virtual is not None and toggled_virtual != current.is_virtual:
                values["is_virtual"] = toggled_virtual
                if not toggled_virtual and current.meeting_event_id:
                    meeting_to_delete = current.meeting_event_id
                    values.update({"meeting_link": None, "meeting_event_id": None})

            updated = txn.appointments.update(appointment_id, values)

            patient = txn.directory.get_patient(updated.patient_id)
            doctor = txn.directory.get_doctor(updated.doctor_id)

            if (
                toggled_virtual
                and not updated.meeting_event_id
                and updated.status != AppointmentStatus.CANCELLED.value
                and doctor
            ):
                updated = self._attach_meeting(txn, doctor, updated, created_meetings)
            if updated.status == AppointmentStatus.CANCELLED.value and updated.meeting_event_id:
                meeting_to_delete = updated.meeting_event_id

            txn.audit.record("update", "appointment", appointment_id, actor_user_id, {
                "updated_fields": sorted(values.keys()),
                "previous_status": current.status,
                "new_status": updated.status,
                "rescheduled": rescheduled,
            })

        logger.info(f"Appointment {appointment_id} updated: {sorted(values.keys())}")

        organizer = doctor.recipient_id if doctor else updated.doctor_id
        if meeting_to_delete and self.meetings:
            best_effort("meeting deletion", self.meetings.delete_meeting, organizer, meeting_to_delete)
        elif rescheduled and updated.meeting_event_id and self.meetings:
            best_effort("meeting update", self.meetings.update_meeting, organizer, updated)

        if new_status is not None and new_status != current.status:
            event = new_status
        elif rescheduled:
            event = "rescheduled"
        else:
            event = "updated"
        self._dispatch(event, updated, patient, doctor)
        if event == AppointmentStatus.CANCELLED.value:
            self._send_email(patient, event, updated, doctor)

        return self.get_appointment_by_id(appointment_id) or updated

    def cancel_appointment(self, appointment_id: str, actor_user_id: str, reason: Optional[str] = None) -> AppointmentDto:
        patch = AppointmentUpdate(status=AppointmentStatus.CANCELLED, cancel_reason=reason)
        return self.update_appointment(appointment_id, patch, actor_user_id)

    def delete_appointment(self, appointment_id: str, actor_user_id: str) -> bool:
        validate_id(appointment_id, "appointment_id")
        with self.coordinator.transaction() as txn:
            current = txn.appointments.get_for_update(appointment_id)
            if not current:
                return False
            if current.status != AppointmentStatus.CANCELLED.value:
                self.reservation.release(txn, current.time_slot_id, current.id)
            txn.appointments.delete(appointment_id)
            txn.audit.record("delete", "appointment", appointment_id, actor_user_id, {
                "patient_id": current.patient_id,
                "doctor_id": current.doctor_id,
                "date": current.appointment_date.isoformat(),
                "status": current.status,
            })
            doctor = txn.directory.get_doctor(current.doctor_id)

        logger.info(f"Appointment {appointment_id} deleted by {actor_user_id}")
        if current.meeting_event_id and self.meetings:
            organizer = doctor.recipient_id if doctor else current.doctor_id
            best_effort("meeting deletion", self.meetings.delete_meeting, organizer, current.meeting_event_id)
        return True

    # -- reads -------------------------------------------------------------

    def get_appointment_by_id(self, appointment_id: str) -> Optional[AppointmentDto]:
        if not is_valid_id(appointment_id):
            return None
        with self.coordinator.transaction() as txn:
            appt = txn.appointments.get(appointment_id)
            if not appt:
                return None
            return self._hydrate(txn, appt)

    def get_all_appointments(self, filters: AppointmentFilters, page: int = 1, limit: int = 10) -> AppointmentPage:
        if page < 1:
            raise ValidationError("page must be at least 1")
        if limit < 1 or limit > MAX_PAGE_SIZE:
            raise ValidationError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
        for name in ("doctor_id", "patient_id", "clinic_id"):
            value = getattr(filters, name)
            if value:
                validate_id(value, name)
        if filters.start_date and filters.end_date and filters.start_date > filters.end_date:
            raise ValidationError("start_date must not be after end_date")

        with self.coordinator.transaction() as txn:
            items, total = txn.appointments.find(filters, (page - 1) * limit, limit)
            items = [self._hydrate(txn, a) for a in items]
        return AppointmentPage(
            items=items,
            total=total,
            total_pages=math.ceil(total / limit) if total else 0,
            current_page=page,
        )

    def get_patient_upcoming_appointments(self, patient_id: str) -> List[AppointmentDto]:
        validate_id(patient_id, "patient_id")
        with self.coordinator.transaction() as txn:
            rows = txn.appointments.list_upcoming_for_patient(patient_id, self.clock().date())
            return [dataclasses.replace(a, doctor=txn.directory.get_doctor(a.doctor_id)) for a in rows]

    def get_doctor_upcoming_appointments(self, doctor_id: str) -> List[AppointmentDto]:
        validate_id(doctor_id, "doctor_id")
        with self.coordinator.transaction() as txn:
            rows = txn.appointments.list_upcoming_for_doctor(doctor_id, self.clock().date())
            return [dataclasses.replace(a, patient=txn.directory.get_patient(a.patient_id)) for a in rows]

    def get_clinic_today_appointments(self, clinic_id: str) -> List[AppointmentDto]:
        validate_id(clinic_id, "clinic_id")
        with self.coordinator.transaction() as txn:
            rows = txn.appointments.list_for_clinic_on(clinic_id, self.clock().date())
            return [self._hydrate(txn, a) for a in rows]

    # -- helpers -----------------------------------------------------------

    def _hydrate(self, txn: UnitOfWork, appt: AppointmentDto) -> AppointmentDto:
        return dataclasses.replace(
            appt,
            patient=txn.directory.get_patient(appt.patient_id),
            doctor=txn.directory.get_doctor(appt.doctor_id),
        )

    @contextmanager
    def _discarding_meetings_on_abort(self) -> Iterator[List[Tuple[str, str]]]:
        """Yield a list collecting (organizer_id, event_id) of meetings created in the
        enclosed transaction; they are deleted again if the transaction aborts."""
        created: List[Tuple[str, str]] = []
        try:
            yield created
        except Exception:
            for organizer_id, event_id in created:
                best_effort("meeting deletion", self.meetings.delete_meeting, organizer_id, event_id)
            raise

    def _attach_meeting(self, txn: UnitOfWork, doctor: PersonDto, appt: AppointmentDto, created: List[Tuple[str, str]]) -> AppointmentDto:
        if self.meetings is None:
            return appt
        meeting: Optional[MeetingDto] = best_effort(
            "meeting creation", self.meetings.create_meeting, doctor.recipient_id, appt
        )
        if not meeting:
            return appt
        created.append((doctor.recipient_id, meeting.event_id))
        return txn.appointments.update(appt.id, {
            "meeting_link": meeting.meet_link,
            "meeting_event_id": meeting.event_id,
        })

    def _record_notifications(self, txn: UnitOfWork, event: str, appt: AppointmentDto, patient: PersonDto, doctor: PersonDto) -> None:
        title, patient_message, doctor_message = notification_content(event, appt, patient, doctor)
        txn.notifications.add(patient.recipient_id, "appointment", title, patient_message, "Appointment", appt.id)
        txn.notifications.add(doctor.recipient_id, "appointment", title, doctor_message, "Appointment", appt.id)

    def _dispatch(self, event: str, appt: AppointmentDto, patient: Optional[PersonDto], doctor: Optional[PersonDto]) -> None:
        if self.notifier is None:
            logger.warning(f"No notification dispatcher configured; '{event}' notification for appointment {appt.id} not sent")
            return
        title, patient_message, doctor_message = notification_content(event, appt, patient, doctor)
        for person, message in ((patient, patient_message), (doctor, doctor_message)):
            if person is None:
                continue
            payload = {
                "title": title,
                "message": message,
                "related_model": "Appointment",
                "related_id": appt.id,
            }
            delivered = best_effort(
                "appointment notification", self.notifier.notify, person.recipient_id, "appointment", payload,
                fallback=False,
            )
            if not delivered:
                logger.warning(f"Notification '{event}' for appointment {appt.id} was not delivered to {person.recipient_id}")

    def _send_email(self, patient: Optional[PersonDto], event: str, appt: AppointmentDto, doctor: Optional[PersonDto]) -> None:
        if self.notifier is None or patient is None or not patient.email:
            return
        title, patient_message, _ = notification_content(event, appt, patient, doctor)
        payload = {
            "title": title,
            "message": patient_message,
            "email": patient.email,
            "related_model": "Appointment",
            "related_id": appt.id,
            "meeting_link": appt.meeting_link,
        }
        delivered = best_effort(
            "appointment email", self.notifier.notify, patient.recipient_id, "appointment", payload,
            channel="email", fallback=False,
        )
        if not delivered:
            logger.warning(f"Appointment e-mail for {appt.id} was not delivered to {patient.email}")
