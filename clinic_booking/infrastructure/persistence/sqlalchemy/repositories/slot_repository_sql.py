from typing import List, Optional
from datetime import date, datetime
from sqlmodel import Session, select

from .....db.models import TimeSlot
from .....application.ports.slot_repo import SlotRepository, TimeSlotDto


class SqlSlotRepository(SlotRepository):
    def __init__(self, session: Session):
        self.session = session

    def _to_dto(self, s: TimeSlot) -> TimeSlotDto:
        return TimeSlotDto(
            id=s.id,
            doctor_id=s.doctor_id,
            slot_date=s.slot_date,
            start_time=s.start_time,
            end_time=s.end_time,
            status=s.status,
            appointment_id=s.appointment_id,
            created_at=s.created_at,
            updated_at=s.updated_at,
        )

    def _load(self, slot_id: str, lock: bool = False) -> Optional[TimeSlot]:
        stmt = select(TimeSlot).where(TimeSlot.id == slot_id)
        if lock:
            stmt = stmt.with_for_update().execution_options(populate_existing=True)
        return self.session.exec(stmt).first()

    def get(self, slot_id: str) -> Optional[TimeSlotDto]:
        s = self._load(slot_id)
        return self._to_dto(s) if s else None

    def get_for_update(self, slot_id: str) -> Optional[TimeSlotDto]:
        s = self._load(slot_id, lock=True)
        return self._to_dto(s) if s else None

    def add(self, doctor_id: str, slot_date: date, start_time: str, end_time: str, status: str) -> TimeSlotDto:
        s = TimeSlot(
            doctor_id=doctor_id,
            slot_date=slot_date,
            start_time=start_time,
            end_time=end_time,
            status=status,
        )
        self.session.add(s)
        self.session.flush()
        return self._to_dto(s)

    def set_state(self, slot_id: str, status: str, appointment_id: Optional[str]) -> TimeSlotDto:
        s = self._load(slot_id)
        s.status = status
        s.appointment_id = appointment_id
        s.updated_at = datetime.utcnow()
        self.session.add(s)
        self.session.flush()
        return self._to_dto(s)

    def delete(self, slot_id: str) -> None:
        s = self._load(slot_id)
        if not s:
            return
        self.session.delete(s)
        self.session.flush()

    def list_for_doctor_on(self, doctor_id: str, slot_date: date) -> List[TimeSlotDto]:
        rows = self.session.exec(
            select(TimeSlot)
            .where(TimeSlot.doctor_id == doctor_id)
            .where(TimeSlot.slot_date == slot_date)
            .order_by(TimeSlot.start_time)
        ).all()
        return [self._to_dto(r) for r in rows]

    def list_available(self, doctor_id: str, start_date: date, end_date: date) -> List[TimeSlotDto]:
        rows = self.session.exec(
            select(TimeSlot)
            .where(TimeSlot.doctor_id == doctor_id)
            .where(TimeSlot.slot_date >= start_date)
            .where(TimeSlot.slot_date <= end_date)
            .where(TimeSlot.status == "available")
            .order_by(TimeSlot.slot_date, TimeSlot.start_time)
        ).all()
        return [self._to_dto(r) for r in rows]
