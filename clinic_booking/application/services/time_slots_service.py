import logging
from dataclasses import dataclass
from datetime import date
from typing import List, Optional

from ..ports.slot_repo import TimeSlotDto
from ..ports.unit_of_work import TransactionCoordinator
from ..statuses import SlotStatus
from ..validation import is_valid_id, validate_id, validate_time_range
from .slot_reservation import SlotReservation
from ...exceptions import ConflictError, NotFoundError, ValidationError
from ...schemas.time_slots.time_slot import TimeSlotCreate

logger = logging.getLogger(__name__)


@dataclass
class TimeSlotsService:
    coordinator: TransactionCoordinator
    reservation: SlotReservation

    def create_time_slot(self, data: TimeSlotCreate, actor_user_id: str) -> TimeSlotDto:
        validate_id(data.doctor_id, "doctor_id")
        validate_time_range(data.start_time, data.end_time)
        if data.status not in (SlotStatus.AVAILABLE.value, SlotStatus.BLOCKED.value):
            raise ValidationError("A new time slot must be available or blocked")

        with self.coordinator.transaction() as txn:
            if not txn.directory.get_doctor(data.doctor_id):
                raise NotFoundError("Doctor not found")
            for existing in txn.slots.list_for_doctor_on(data.doctor_id, data.slot_date):
                # HH:MM strings compare chronologically
                if existing.start_time < data.end_time and data.start_time < existing.end_time:
                    raise ConflictError(
                        f"Time slot overlaps with an existing slot ({existing.start_time}-{existing.end_time})"
                    )
            slot = txn.slots.add(data.doctor_id, data.slot_date, data.start_time, data.end_time, data.status)
            txn.audit.record("create", "timeslot", slot.id, actor_user_id, {
                "doctor_id": slot.doctor_id,
                "date": slot.slot_date.isoformat(),
                "start_time": slot.start_time,
                "end_time": slot.end_time,
            })
        logger.info(f"Time slot {slot.id} created for doctor {data.doctor_id}")
        return slot

    def get_time_slot(self, slot_id: str) -> Optional[TimeSlotDto]:
        if not is_valid_id(slot_id):
            return None
        with self.coordinator.transaction() as txn:
            return txn.slots.get(slot_id)

    def list_available_slots(self, doctor_id: str, start_date: date, end_date: date) -> List[TimeSlotDto]:
        validate_id(doctor_id, "doctor_id")
        if start_date > end_date:
            raise ValidationError("start_date must not be after end_date")
        with self.coordinator.transaction() as txn:
            return txn.slots.list_available(doctor_id, start_date, end_date)

    def block_time_slot(self, slot_id: str, actor_user_id: str) -> TimeSlotDto:
        validate_id(slot_id, "time_slot_id")
        with self.coordinator.transaction() as txn:
            slot = self.reservation.block(txn, slot_id)
            txn.audit.record("update", "timeslot", slot_id, actor_user_id, {"status": slot.status})
        return slot

    def unblock_time_slot(self, slot_id: str, actor_user_id: str) -> TimeSlotDto:
        validate_id(slot_id, "time_slot_id")
        with self.coordinator.transaction() as txn:
            slot = self.reservation.unblock(txn, slot_id)
            txn.audit.record("update", "timeslot", slot_id, actor_user_id, {"status": slot.status})
        return slot

    def delete_time_slot(self, slot_id: str, actor_user_id: str) -> bool:
        validate_id(slot_id, "time_slot_id")
        with self.coordinator.transaction() as txn:
            slot = txn.slots.get_for_update(slot_id)
            if not slot:
                return False
            if slot.status == SlotStatus.BOOKED.value:
                raise ConflictError("Cannot delete a booked time slot")
            txn.slots.delete(slot_id)
            txn.audit.record("delete", "timeslot", slot_id, actor_user_id, {
                "doctor_id": slot.doctor_id,
                "date": slot.slot_date.isoformat(),
            })
        return True
