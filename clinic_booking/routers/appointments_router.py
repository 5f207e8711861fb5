from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
import logging
from datetime import date

from ..auth import get_current_user
from ..dependencies import get_appointments_service
from ..exceptions import BookingError
from ..application.ports.appointments_repo import AppointmentFilters
from ..application.services.appointments_service import AppointmentsService
from ..application.statuses import AppointmentStatus, AppointmentType
from ..schemas.appointments.appointment import (
    AppointmentCancel,
    AppointmentCreate,
    AppointmentListResponse,
    AppointmentResponse,
    AppointmentUpdate,
)
from ..schemas.common.common import MessageResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/appointments", tags=["Appointments"])


@router.post("/", response_model=AppointmentResponse, status_code=201)
def create_appointment(
    appointment_data: AppointmentCreate,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = appt_service.create_appointment(appointment_data, current_user)
        return AppointmentResponse.model_validate(appt)
    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error booking appointment: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to book appointment")


@router.get("/", response_model=AppointmentListResponse)
def list_appointments(
    status: Optional[AppointmentStatus] = None,
    type: Optional[AppointmentType] = None,
    doctor_id: Optional[str] = None,
    patient_id: Optional[str] = None,
    clinic_id: Optional[str] = None,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    search: Optional[str] = None,
    sort: str = Query("date", pattern="^(date|created_at|status)$"),
    order: str = Query("desc", pattern="^(asc|desc)$"),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    filters = AppointmentFilters(
        status=status.value if status else None,
        type=type.value if type else None,
        doctor_id=doctor_id,
        patient_id=patient_id,
        clinic_id=clinic_id,
        start_date=start_date,
        end_date=end_date,
        search=search,
        sort=sort,
        order=order,
    )
    result = appt_service.get_all_appointments(filters, page=page, limit=limit)
    return AppointmentListResponse(
        items=[AppointmentResponse.model_validate(a) for a in result.items],
        total=result.total,
        total_pages=result.total_pages,
        current_page=result.current_page,
    )


@router.get("/patients/{patient_id}/upcoming", response_model=List[AppointmentResponse])
def patient_upcoming(
    patient_id: str,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [AppointmentResponse.model_validate(a) for a in appt_service.get_patient_upcoming_appointments(patient_id)]


@router.get("/doctors/{doctor_id}/upcoming", response_model=List[AppointmentResponse])
def doctor_upcoming(
    doctor_id: str,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [AppointmentResponse.model_validate(a) for a in appt_service.get_doctor_upcoming_appointments(doctor_id)]


@router.get("/clinics/{clinic_id}/today", response_model=List[AppointmentResponse])
def clinic_today(
    clinic_id: str,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    return [AppointmentResponse.model_validate(a) for a in appt_service.get_clinic_today_appointments(clinic_id)]


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
    appointment_id: str,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    appt = appt_service.get_appointment_by_id(appointment_id)
    if not appt:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return AppointmentResponse.model_validate(appt)


@router.patch("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
    appointment_id: str,
    patch: AppointmentUpdate,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    try:
        appt = appt_service.update_appointment(appointment_id, patch, current_user)
        return AppointmentResponse.model_validate(appt)
    except (HTTPException, BookingError):
        raise
    except Exception as e:
        logger.error(f"Error updating appointment {appointment_id}: {str(e)}")
        raise HTTPException(status_code=500, detail="Failed to update appointment")


@router.post("/{appointment_id}/cancel", response_model=AppointmentResponse)
def cancel_appointment(
    appointment_id: str,
    body: Optional[AppointmentCancel] = None,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    reason = body.reason if body else None
    appt = appt_service.cancel_appointment(appointment_id, current_user, reason=reason)
    return AppointmentResponse.model_validate(appt)


@router.delete("/{appointment_id}", response_model=MessageResponse)
def delete_appointment(
    appointment_id: str,
    current_user: str = Depends(get_current_user),
    appt_service: AppointmentsService = Depends(get_appointments_service),
):
    if not appt_service.delete_appointment(appointment_id, current_user):
        raise HTTPException(status_code=404, detail="Appointment not found")
    return MessageResponse(message="Appointment deleted successfully")
