import uuid
from datetime import date

import pytest

from clinic_booking.application.services.slot_reservation import SlotReservation
from clinic_booking.exceptions import ConflictError, NotFoundError

from conftest import add_slot, get_slot

DAY = date(2030, 1, 10)


def test_reserve_available_slot_books_it(engine, coordinator, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    appt_id = str(uuid.uuid4())
    with coordinator.transaction() as txn:
        out = SlotReservation().reserve(txn, slot_id, appt_id)
    assert out.status == "booked"
    slot = get_slot(engine, slot_id)
    assert slot.status == "booked"
    assert slot.appointment_id == appt_id


@pytest.mark.parametrize("status", ["booked", "blocked"])
def test_reserve_unavailable_slot_conflicts(engine, coordinator, directory, status):
    slot_id = add_slot(engine, directory.doctor_id, DAY, status=status)
    with pytest.raises(ConflictError):
        with coordinator.transaction() as txn:
            SlotReservation().reserve(txn, slot_id, str(uuid.uuid4()))
    assert get_slot(engine, slot_id).status == status


def test_reserve_missing_slot(coordinator):
    with pytest.raises(NotFoundError):
        with coordinator.transaction() as txn:
            SlotReservation().reserve(txn, str(uuid.uuid4()), str(uuid.uuid4()))


def test_release_frees_booked_slot(engine, coordinator, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    appt_id = str(uuid.uuid4())
    reservation = SlotReservation()
    with coordinator.transaction() as txn:
        reservation.reserve(txn, slot_id, appt_id)
    with coordinator.transaction() as txn:
        reservation.release(txn, slot_id, appt_id)
    slot = get_slot(engine, slot_id)
    assert slot.status == "available"
    assert slot.appointment_id is None


def test_release_leaves_slot_held_by_another_appointment(engine, coordinator, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    holder = str(uuid.uuid4())
    reservation = SlotReservation()
    with coordinator.transaction() as txn:
        reservation.reserve(txn, slot_id, holder)
        reservation.release(txn, slot_id, str(uuid.uuid4()))
    slot = get_slot(engine, slot_id)
    assert slot.status == "booked"
    assert slot.appointment_id == holder


def test_release_of_unbooked_slot_is_noop(engine, coordinator, directory):
    available = add_slot(engine, directory.doctor_id, DAY, "09:00", "09:30")
    blocked = add_slot(engine, directory.doctor_id, DAY, "11:00", "11:30", status="blocked")
    with coordinator.transaction() as txn:
        SlotReservation().release(txn, available)
        SlotReservation().release(txn, blocked)
    assert get_slot(engine, available).status == "available"
    assert get_slot(engine, blocked).status == "blocked"


def test_block_and_unblock(engine, coordinator, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    reservation = SlotReservation()
    with coordinator.transaction() as txn:
        reservation.block(txn, slot_id)
    assert get_slot(engine, slot_id).status == "blocked"
    with coordinator.transaction() as txn:
        reservation.unblock(txn, slot_id)
    assert get_slot(engine, slot_id).status == "available"


def test_block_booked_slot_conflicts(engine, coordinator, directory):
    slot_id = add_slot(engine, directory.doctor_id, DAY)
    with coordinator.transaction() as txn:
        SlotReservation().reserve(txn, slot_id, str(uuid.uuid4()))
    with pytest.raises(ConflictError):
        with coordinator.transaction() as txn:
            SlotReservation().block(txn, slot_id)
    assert get_slot(engine, slot_id).status == "booked"
