import uuid
from datetime import date

import pytest
from pydantic import ValidationError as SchemaValidationError
from sqlmodel import Session, select

from clinic_booking.application.services.slot_reservation import SlotReservation
from clinic_booking.application.services.time_slots_service import TimeSlotsService
from clinic_booking.db.models import AuditLog
from clinic_booking.exceptions import ConflictError, NotFoundError, ValidationError
from clinic_booking.schemas.appointments.appointment import AppointmentCreate
from clinic_booking.schemas.time_slots.time_slot import TimeSlotCreate

DAY = date(2030, 1, 10)


@pytest.fixture
def slots(coordinator):
    return TimeSlotsService(coordinator=coordinator, reservation=SlotReservation())


def slot(directory, start, end, **overrides):
    data = dict(doctor_id=directory.doctor_id, slot_date=DAY, start_time=start, end_time=end)
    data.update(overrides)
    return TimeSlotCreate(**data)


def test_create_slot_is_available_and_audited(engine, slots, directory):
    created = slots.create_time_slot(slot(directory, "09:00", "09:30"), "user-admin")
    assert created.status == "available"
    assert slots.get_time_slot(created.id).start_time == "09:00"
    with Session(engine) as s:
        audits = s.exec(select(AuditLog)).all()
    assert [(a.action, a.resource, a.resource_id) for a in audits] == [("create", "timeslot", created.id)]


def test_overlapping_slot_conflicts(slots, directory):
    slots.create_time_slot(slot(directory, "09:00", "10:00"), "user-admin")
    with pytest.raises(ConflictError):
        slots.create_time_slot(slot(directory, "09:30", "10:30"), "user-admin")


def test_adjacent_slots_and_other_doctors_do_not_overlap(slots, directory):
    slots.create_time_slot(slot(directory, "09:00", "10:00"), "user-admin")
    slots.create_time_slot(slot(directory, "10:00", "10:30"), "user-admin")
    slots.create_time_slot(slot(directory, "09:00", "10:00", doctor_id=directory.other_doctor_id), "user-admin")


def test_end_must_follow_start(slots, directory):
    with pytest.raises(ValidationError):
        slots.create_time_slot(slot(directory, "10:00", "09:00"), "user-admin")


def test_malformed_time_is_rejected_by_schema(directory):
    with pytest.raises(SchemaValidationError):
        slot(directory, "9am", "10:00")


def test_unknown_doctor(slots, directory):
    with pytest.raises(NotFoundError):
        slots.create_time_slot(slot(directory, "09:00", "09:30", doctor_id=str(uuid.uuid4())), "user-admin")


def test_list_available_skips_blocked_and_booked(slots, service, directory):
    free = slots.create_time_slot(slot(directory, "09:00", "09:30"), "user-admin")
    blocked = slots.create_time_slot(slot(directory, "10:00", "10:30"), "user-admin")
    booked = slots.create_time_slot(slot(directory, "11:00", "11:30"), "user-admin")
    slots.block_time_slot(blocked.id, "user-admin")
    service.create_appointment(AppointmentCreate(
        patient_id=directory.patient_id,
        doctor_id=directory.doctor_id,
        time_slot_id=booked.id,
        reason_for_visit="Checkup",
    ), "user-admin")

    available = slots.list_available_slots(directory.doctor_id, DAY, DAY)
    assert [s.id for s in available] == [free.id]


def test_blocked_slot_can_be_unblocked(slots, directory):
    created = slots.create_time_slot(slot(directory, "09:00", "09:30", status="blocked"), "user-admin")
    assert slots.unblock_time_slot(created.id, "user-admin").status == "available"


def test_booked_slot_cannot_be_blocked_or_deleted(slots, service, directory):
    created = slots.create_time_slot(slot(directory, "09:00", "09:30"), "user-admin")
    service.create_appointment(AppointmentCreate(
        patient_id=directory.patient_id,
        doctor_id=directory.doctor_id,
        time_slot_id=created.id,
        reason_for_visit="Checkup",
    ), "user-admin")

    with pytest.raises(ConflictError):
        slots.block_time_slot(created.id, "user-admin")
    with pytest.raises(ConflictError):
        slots.delete_time_slot(created.id, "user-admin")
    assert slots.get_time_slot(created.id).status == "booked"


def test_delete_slot(slots, directory):
    created = slots.create_time_slot(slot(directory, "09:00", "09:30"), "user-admin")
    assert slots.delete_time_slot(created.id, "user-admin") is True
    assert slots.get_time_slot(created.id) is None
    assert slots.delete_time_slot(created.id, "user-admin") is False
