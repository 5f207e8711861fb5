import logging
from typing import Optional

from ..ports.slot_repo import TimeSlotDto
from ..ports.unit_of_work import UnitOfWork
from ..statuses import SlotStatus
from ...exceptions import ConflictError, NotFoundError

logger = logging.getLogger(__name__)


class SlotReservation:
    """State machine for a doctor's time slot.

    ``available -> booked -> available`` is driven by appointment booking,
    ``available <-> blocked`` by staff. All reads happen through
    ``get_for_update`` inside the caller's transaction, so two reservations of
    the same slot are serialized by the store and only one can observe it
    available.
    """

    def _load(self, txn: UnitOfWork, slot_id: str) -> TimeSlotDto:
        slot = txn.slots.get_for_update(slot_id)
        if not slot:
            raise NotFoundError("Time slot not found")
        return slot

    def reserve(self, txn: UnitOfWork, slot_id: str, appointment_id: str) -> TimeSlotDto:
        slot = self._load(txn, slot_id)
        if slot.status != SlotStatus.AVAILABLE.value:
            raise ConflictError(f"Time slot is already {slot.status}")
        logger.info(f"Reserving slot {slot_id} for appointment {appointment_id}")
        return txn.slots.set_state(slot_id, SlotStatus.BOOKED.value, appointment_id)

    def release(self, txn: UnitOfWork, slot_id: str, appointment_id: Optional[str] = None) -> TimeSlotDto:
        """Free a booked slot. Releasing a slot that is not booked changes nothing.

        When ``appointment_id`` is given, a slot booked by another appointment is left alone.
        """
        slot = self._load(txn, slot_id)
        if slot.status != SlotStatus.BOOKED.value:
            return slot
        if appointment_id is not None and slot.appointment_id not in (None, appointment_id):
            logger.warning(
                f"Slot {slot_id} is booked by appointment {slot.appointment_id}, not {appointment_id}; leaving it booked"
            )
            return slot
        logger.info(f"Releasing slot {slot_id} from appointment {slot.appointment_id}")
        return txn.slots.set_state(slot_id, SlotStatus.AVAILABLE.value, None)

    def block(self, txn: UnitOfWork, slot_id: str) -> TimeSlotDto:
        slot = self._load(txn, slot_id)
        if slot.status == SlotStatus.BLOCKED.value:
            return slot
        if slot.status == SlotStatus.BOOKED.value:
            raise ConflictError("Cannot block a booked time slot")
        return txn.slots.set_state(slot_id, SlotStatus.BLOCKED.value, None)

    def unblock(self, txn: UnitOfWork, slot_id: str) -> TimeSlotDto:
        slot = self._load(txn, slot_id)
        if slot.status != SlotStatus.BLOCKED.value:
            return slot
        return txn.slots.set_state(slot_id, SlotStatus.AVAILABLE.value, None)
