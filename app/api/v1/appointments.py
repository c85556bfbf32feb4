# ============================================================================
# FILE: app/api/v1/appointments.py
# Staff edits - thin HTTP layer; changes are mirrored to the calendar
# ============================================================================
from fastapi import APIRouter, Depends, HTTPException, Path, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_calendar_gateway
from app.config.database import get_db
from app.schemas.appointments import (
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentResponse,
    AppointmentUpdate,
)
from app.services.appointment.appointment_service import AppointmentService
from app.services.calendar.base import CalendarGateway
from app.services.exceptions import CalendarGatewayError

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentResponse, status_code=status.HTTP_201_CREATED)
def create_appointment(
        data: AppointmentCreate,
        db: Session = Depends(get_db),
        calendar: CalendarGateway = Depends(get_calendar_gateway),
):
    """Book an appointment and create the matching calendar event"""
    return AppointmentService.create_appointment(db, data, calendar)


@router.get("/{appointment_id}", response_model=AppointmentResponse)
def get_appointment(
        appointment_id: int = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db),
):
    appointment = AppointmentService.get_appointment(db, appointment_id)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


@router.put("/{appointment_id}", response_model=AppointmentResponse)
def update_appointment(
        data: AppointmentUpdate,
        appointment_id: int = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db),
        calendar: CalendarGateway = Depends(get_calendar_gateway),
):
    appointment = AppointmentService.update_appointment(db, appointment_id, data, calendar)
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


@router.patch("/{appointment_id}/time", response_model=AppointmentResponse)
def reschedule_appointment(
        data: AppointmentReschedule,
        appointment_id: int = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db),
        calendar: CalendarGateway = Depends(get_calendar_gateway),
):
    appointment = AppointmentService.reschedule_appointment(
        db, appointment_id, data.start_time, data.duration_minutes, calendar
    )
    if not appointment:
        raise HTTPException(status_code=404, detail="Appointment not found")
    return appointment


@router.delete("/{appointment_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_appointment(
        appointment_id: int = Path(..., description="The appointment ID"),
        db: Session = Depends(get_db),
        calendar: CalendarGateway = Depends(get_calendar_gateway),
):
    try:
        deleted = AppointmentService.delete_appointment(db, appointment_id, calendar)
    except CalendarGatewayError as e:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Could not delete the calendar event: {e}",
        )

    if not deleted:
        raise HTTPException(status_code=404, detail="Appointment not found")
