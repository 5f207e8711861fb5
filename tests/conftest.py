from dataclasses import dataclass, field
from datetime import date, datetime
from typing import List, Optional, Set

import pytest
from sqlmodel import Session

from clinic_booking.application.ports.meeting_provider import MeetingDto
from clinic_booking.application.services.appointments_service import AppointmentsService
from clinic_booking.application.services.slot_reservation import SlotReservation
from clinic_booking.database import create_db_and_tables, make_engine
from clinic_booking.db.models import Clinic, Doctor, Patient, TimeSlot
from clinic_booking.infrastructure.persistence.sqlalchemy.unit_of_work import SqlTransactionCoordinator


class FakeMeetings:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.created = []
        self.updated = []
        self.deleted = []

    def create_meeting(self, organizer_id, appointment, tokens=None):
        if self.fail:
            raise RuntimeError("calendar unavailable")
        self.created.append(appointment.id)
        return MeetingDto(event_id=f"evt-{len(self.created)}", meet_link="https://meet.google.com/abc-defg-hij")

    def update_meeting(self, organizer_id, appointment):
        self.updated.append(appointment.meeting_event_id)
        return MeetingDto(event_id=appointment.meeting_event_id, meet_link=appointment.meeting_link)

    def delete_meeting(self, organizer_id, event_id):
        self.deleted.append(event_id)


@dataclass
class Sent:
    user_id: str
    kind: str
    payload: dict
    channel: str


class FakeNotifier:
    def __init__(self):
        self.sent: List[Sent] = []
        self.undelivered_channels: Set[str] = set()
        self.raise_for: Set[str] = set()

    def notify(self, user_id, kind, payload, channel="in-app"):
        if payload.get("related_id") in self.raise_for:
            raise RuntimeError("channel exploded")
        if channel in self.undelivered_channels:
            return False
        self.sent.append(Sent(user_id, kind, payload, channel))
        return True

    def of_kind(self, kind, channel=None):
        return [s for s in self.sent if s.kind == kind and (channel is None or s.channel == channel)]


class Clock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@dataclass
class Directory:
    clinic_id: str
    doctor_id: str
    other_doctor_id: str
    patient_id: str
    patient_user_id: str
    doctor_user_id: str
    extra: dict = field(default_factory=dict)


@pytest.fixture
def engine(tmp_path):
    # File-backed so that concurrent transactions go through the real database lock
    eng = make_engine(f"sqlite:///{tmp_path / 'booking.db'}")
    create_db_and_tables(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def coordinator(engine):
    return SqlTransactionCoordinator(engine)


@pytest.fixture
def directory(engine) -> Directory:
    clinic = Clinic(name="Riverside Clinic", email="front@riverside.test")
    doctor = Doctor(user_id="user-doc", clinic_id=clinic.id, first_name="Ana", last_name="Silva", email="ana@riverside.test")
    other = Doctor(user_id="user-doc-2", clinic_id=clinic.id, first_name="Tom", last_name="Reed")
    patient = Patient(user_id="user-pat", first_name="John", last_name="Doe", email="john@example.test", phone="+15550001111")
    with Session(engine) as s:
        s.add(clinic)
        s.commit()
        s.add_all([doctor, other, patient])
        ids = Directory(
            clinic_id=clinic.id,
            doctor_id=doctor.id,
            other_doctor_id=other.id,
            patient_id=patient.id,
            patient_user_id="user-pat",
            doctor_user_id="user-doc",
        )
        s.commit()
    return ids


def add_slot(engine, doctor_id: str, day: date, start: str = "10:00", end: str = "10:30", status: str = "available") -> str:
    slot = TimeSlot(doctor_id=doctor_id, slot_date=day, start_time=start, end_time=end, status=status)
    slot_id = slot.id
    with Session(engine) as s:
        s.add(slot)
        s.commit()
    return slot_id


def get_slot(engine, slot_id: str) -> Optional[TimeSlot]:
    with Session(engine) as s:
        slot = s.get(TimeSlot, slot_id)
        if slot:
            s.expunge(slot)
        return slot


@pytest.fixture
def meetings():
    return FakeMeetings()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def clock():
    return Clock(datetime(2030, 1, 10, 9, 0))


@pytest.fixture
def service(coordinator, meetings, notifier, clock):
    return AppointmentsService(
        coordinator=coordinator,
        reservation=SlotReservation(),
        meetings=meetings,
        notifier=notifier,
        clock=clock,
    )
