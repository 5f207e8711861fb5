from typing import List
from fastapi import APIRouter, Depends, HTTPException
from datetime import date

from ..auth import get_current_user
from ..dependencies import get_time_slots_service
from ..application.services.time_slots_service import TimeSlotsService
from ..schemas.common.common import MessageResponse
from ..schemas.time_slots.time_slot import TimeSlotCreate, TimeSlotResponse

router = APIRouter(prefix="/time-slots", tags=["Time Slots"])


@router.post("/", response_model=TimeSlotResponse, status_code=201)
def create_time_slot(
    slot_data: TimeSlotCreate,
    current_user: str = Depends(get_current_user),
    slot_service: TimeSlotsService = Depends(get_time_slots_service),
):
    return TimeSlotResponse.model_validate(slot_service.create_time_slot(slot_data, current_user))


@router.get("/available", response_model=List[TimeSlotResponse])
def list_available_slots(
    doctor_id: str,
    start_date: date,
    end_date: date,
    current_user: str = Depends(get_current_user),
    slot_service: TimeSlotsService = Depends(get_time_slots_service),
):
    slots = slot_service.list_available_slots(doctor_id, start_date, end_date)
    return [TimeSlotResponse.model_validate(s) for s in slots]


@router.get("/{slot_id}", response_model=TimeSlotResponse)
def get_time_slot(
    slot_id: str,
    current_user: str = Depends(get_current_user),
    slot_service: TimeSlotsService = Depends(get_time_slots_service),
):
    slot = slot_service.get_time_slot(slot_id)
    if not slot:
        raise HTTPException(status_code=404, detail="Time slot not found")
    return TimeSlotResponse.model_validate(slot)


@router.post("/{slot_id}/block", response_model=TimeSlotResponse)
def block_time_slot(
    slot_id: str,
    current_user: str = Depends(get_current_user),
    slot_service: TimeSlotsService = Depends(get_time_slots_service),
):
    return TimeSlotResponse.model_validate(slot_service.block_time_slot(slot_id, current_user))


@router.post("/{slot_id}/unblock", response_model=TimeSlotResponse)
def unblock_time_slot(
    slot_id: str,
    current_user: str = Depends(get_current_user),
    slot_service: TimeSlotsService = Depends(get_time_slots_service),
):
    return TimeSlotResponse.model_validate(slot_service.unblock_time_slot(slot_id, current_user))


@router.delete("/{slot_id}", response_model=MessageResponse)
def delete_time_slot(
    slot_id: str,
    current_user: str = Depends(get_current_user),
    slot_service: TimeSlotsService = Depends(get_time_slots_service),
):
    if not slot_service.delete_time_slot(slot_id, current_user):
        raise HTTPException(status_code=404, detail="Time slot not found")
    return MessageResponse(message="Time slot deleted successfully")
