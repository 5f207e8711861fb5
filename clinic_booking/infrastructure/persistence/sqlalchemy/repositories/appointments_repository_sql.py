from typing import Any, Dict, List, Optional, Tuple
from datetime import date, datetime
from sqlalchemy import asc, desc, func, or_
from sqlalchemy.orm import selectinload
from sqlmodel import Session, col, select

from .....db.models import Appointment, AppointmentReminder, Doctor, Patient
from .....application.ports.appointments_repo import (
    AppointmentsRepository,
    AppointmentDto,
    AppointmentFilters,
    ReminderDto,
)
from .....application.statuses import UPCOMING


class SqlAppointmentsRepository(AppointmentsRepository):
    def __init__(self, session: Session):
        self.session = session

    def _appt_to_dto(self, a: Appointment) -> AppointmentDto:
        return AppointmentDto(
            id=a.id,
            patient_id=a.patient_id,
            doctor_id=a.doctor_id,
            time_slot_id=a.time_slot_id,
            clinic_id=a.clinic_id,
            appointment_date=a.appointment_date,
            start_time=a.start_time,
            end_time=a.end_time,
            type=a.type,
            status=a.status,
            reason_for_visit=a.reason_for_visit,
            notes=a.notes,
            is_virtual=a.is_virtual,
            meeting_link=a.meeting_link,
            meeting_event_id=a.meeting_event_id,
            cancel_reason=a.cancel_reason,
            cancelled_at=a.cancelled_at,
            created_by=a.created_by,
            created_at=a.created_at,
            updated_at=a.updated_at,
            reminders=[ReminderDto(channel=r.channel, sent_at=r.sent_at, status=r.status) for r in a.reminders],
        )

    def _select(self):
        return select(Appointment).options(selectinload(Appointment.reminders))

    def _load(self, appointment_id: str, lock: bool = False) -> Optional[Appointment]:
        stmt = self._select().where(Appointment.id == appointment_id)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.session.exec(stmt).first()

    def get(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self._load(appointment_id)
        return self._appt_to_dto(a) if a else None

    def get_for_update(self, appointment_id: str) -> Optional[AppointmentDto]:
        a = self._load(appointment_id, lock=True)
        return self._appt_to_dto(a) if a else None

    def add(self, values: Dict[str, Any]) -> AppointmentDto:
        appt = Appointment(**values)
        self.session.add(appt)
        self.session.flush()
        self.session.refresh(appt)
        return self._appt_to_dto(appt)

    def update(self, appointment_id: str, values: Dict[str, Any]) -> AppointmentDto:
        a = self._load(appointment_id)
        for key, value in values.items():
            setattr(a, key, value)
        a.updated_at = datetime.utcnow()
        self.session.add(a)
        self.session.flush()
        return self._appt_to_dto(a)

    def delete(self, appointment_id: str) -> None:
        a = self._load(appointment_id)
        if not a:
            return
        self.session.delete(a)
        self.session.flush()

    def find(self, filters: AppointmentFilters, offset: int, limit: int) -> Tuple[List[AppointmentDto], int]:
        stmt = select(Appointment)
        if filters.status:
            stmt = stmt.where(Appointment.status == filters.status)
        if filters.type:
            stmt = stmt.where(Appointment.type == filters.type)
        if filters.doctor_id:
            stmt = stmt.where(Appointment.doctor_id == filters.doctor_id)
        if filters.patient_id:
            stmt = stmt.where(Appointment.patient_id == filters.patient_id)
        if filters.clinic_id:
            stmt = stmt.where(Appointment.clinic_id == filters.clinic_id)
        if filters.start_date:
            stmt = stmt.where(Appointment.appointment_date >= filters.start_date)
        if filters.end_date:
            stmt = stmt.where(Appointment.appointment_date <= filters.end_date)
        if filters.search:
            term = f"%{filters.search}%"
            stmt = (
                stmt.join(Patient, col(Patient.id) == col(Appointment.patient_id))
                .join(Doctor, col(Doctor.id) == col(Appointment.doctor_id))
                .where(or_(
                    col(Appointment.reason_for_visit).ilike(term),
                    col(Patient.first_name).ilike(term),
                    col(Patient.last_name).ilike(term),
                    col(Doctor.first_name).ilike(term),
                    col(Doctor.last_name).ilike(term),
                ))
            )

        total = self.session.exec(select(func.count()).select_from(stmt.subquery())).one()

        direction = asc if filters.order == "asc" else desc
        if filters.sort == "created_at":
            keys = [Appointment.created_at]
        elif filters.sort == "status":
            keys = [Appointment.status]
        else:
            keys = [Appointment.appointment_date, Appointment.start_time]
        rows = self.session.exec(
            stmt.options(selectinload(Appointment.reminders))
            .order_by(*[direction(k) for k in keys])
            .offset(offset)
            .limit(limit)
        ).all()
        return [self._appt_to_dto(r) for r in rows], int(total)

    def list_upcoming_for_patient(self, patient_id: str, today: date) -> List[AppointmentDto]:
        rows = self.session.exec(
            self._select()
            .where(Appointment.patient_id == patient_id)
            .where(Appointment.appointment_date >= today)
            .where(col(Appointment.status).in_(UPCOMING))
            .order_by(Appointment.appointment_date, Appointment.start_time)
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_upcoming_for_doctor(self, doctor_id: str, today: date) -> List[AppointmentDto]:
        rows = self.session.exec(
            self._select()
            .where(Appointment.doctor_id == doctor_id)
            .where(Appointment.appointment_date >= today)
            .where(col(Appointment.status).in_(UPCOMING))
            .order_by(Appointment.appointment_date, Appointment.start_time)
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_for_clinic_on(self, clinic_id: str, day: date) -> List[AppointmentDto]:
        rows = self.session.exec(
            self._select()
            .where(Appointment.clinic_id == clinic_id)
            .where(Appointment.appointment_date == day)
            .where(col(Appointment.status).in_(UPCOMING + ("in-progress",)))
            .order_by(Appointment.start_time)
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def list_scheduled_between(self, start_date: date, end_date: date) -> List[AppointmentDto]:
        rows = self.session.exec(
            self._select()
            .where(Appointment.status == "scheduled")
            .where(Appointment.appointment_date >= start_date)
            .where(Appointment.appointment_date <= end_date)
            .order_by(Appointment.appointment_date, Appointment.start_time)
        ).all()
        return [self._appt_to_dto(r) for r in rows]

    def add_reminder(self, appointment_id: str, channel: str, sent_at: datetime, status: str) -> None:
        self.session.add(AppointmentReminder(
            appointment_id=appointment_id,
            channel=channel,
            sent_at=sent_at,
            status=status,
        ))
        self.session.flush()
