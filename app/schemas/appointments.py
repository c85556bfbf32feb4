# app/schemas/appointments.py
from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.appointment import (
    AppointmentStatus,
    AttendanceStatus,
    ServiceCategory,
    SyncStatus,
)


class AppointmentCreate(BaseModel):
    """Appointment booked directly by staff"""
    client_name: Optional[str] = Field(None, max_length=255)
    client_phone: Optional[str] = Field(None, max_length=32)
    service: str = Field(..., min_length=1, max_length=255, description="e.g. Hair Cut, Beard Shaping")
    start_time: datetime = Field(..., description="Naive values are read as business local time")
    duration_minutes: int = Field(30, ge=1)
    status: AppointmentStatus = AppointmentStatus.SCHEDULED
    notes: Optional[str] = None


class AppointmentUpdate(BaseModel):
    """Full edit of an appointment; pushed back to the remote event"""
    client_name: Optional[str] = Field(None, max_length=255)
    client_phone: Optional[str] = Field(None, max_length=32)
    service: str = Field(..., min_length=1, max_length=255)
    start_time: datetime
    duration_minutes: int = Field(30, ge=1)
    status: AppointmentStatus
    attendance_status: AttendanceStatus = AttendanceStatus.PENDING
    notes: Optional[str] = None


class AppointmentReschedule(BaseModel):
    start_time: datetime
    duration_minutes: int = Field(..., ge=1)


class AppointmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    external_event_id: Optional[str] = None
    client_name: Optional[str] = None
    client_phone: Optional[str] = None
    service: str
    service_category: ServiceCategory
    start_time: datetime
    duration_minutes: int
    status: AppointmentStatus
    attendance_status: AttendanceStatus
    notes: Optional[str] = None
    sync_status: SyncStatus
    last_sync_error: Optional[str] = None
    reminder_sent_at: Optional[datetime] = None
