# ============================================================================
# app/api/v1/appointments.py
# Booking surface - thin HTTP layer over the booking engine
# ============================================================================
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import CurrentUser, get_booking_service, get_current_user
from app.config.database import get_db
from app.models.appointment import AppointmentStatus
from app.schemas.booking import AppointmentCreate, AppointmentRead, AppointmentReschedule
from app.services.appointment.appointment_query_service import AppointmentQueryService
from app.services.booking.booking_service import BookingService

router = APIRouter(prefix="/appointments", tags=["appointments"])


@router.post("", response_model=AppointmentRead, status_code=status.HTTP_201_CREATED)
def book_appointment(
        data: AppointmentCreate,
        current_user: CurrentUser = Depends(get_current_user),
        booking: BookingService = Depends(get_booking_service)
):
    """
    Book a slot for the calling user.
    409 when the slot is already taken: pick another slot rather than retry.
    """
    return booking.book(
        client_id=current_user.user_id,
        provider_id=data.provider_id,
        service_id=data.service_id,
        slot_id=data.slot_id,
        notes=data.notes,
    )


@router.get("", response_model=List[AppointmentRead])
def list_appointments(
        status: Optional[AppointmentStatus] = Query(None, description="Filter by status (pending, confirmed, cancelled)"),
        start_date: Optional[date] = Query(None, description="Filter appointments on or after this date"),
        end_date: Optional[date] = Query(None, description="Filter appointments on or before this date"),
        skip: int = Query(0, ge=0, description="Number of records to skip"),
        limit: int = Query(50, ge=1, le=100, description="Number of records to return"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    """
    Appointments of the caller, newest first.
    Clients see their bookings, providers the bookings on their slots.
    """
    return AppointmentQueryService.list_appointments_by_user(
        db=db,
        user_id=current_user.user_id,
        role=current_user.role,
        status=status.value if status else None,
        start_date=start_date,
        end_date=end_date,
        skip=skip,
        limit=limit
    )


@router.get("/{appointment_id}", response_model=AppointmentRead)
def get_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        db: Session = Depends(get_db)
):
    return AppointmentQueryService.get_appointment_for_user(db, appointment_id, current_user.user_id)


@router.delete("/{appointment_id}", response_model=AppointmentRead)
def cancel_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        reason: Optional[str] = Query(None, max_length=500),
        current_user: CurrentUser = Depends(get_current_user),
        booking: BookingService = Depends(get_booking_service)
):
    """Cancel an appointment; its slot becomes bookable immediately."""
    return booking.cancel(appointment_id, requester_id=current_user.user_id, reason=reason)


@router.post("/{appointment_id}/reschedule", response_model=AppointmentRead)
def reschedule_appointment(
        data: AppointmentReschedule,
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        booking: BookingService = Depends(get_booking_service)
):
    """
    Move the appointment to another slot of the same provider and service.
    Returns the new appointment; on failure the original booking is kept.
    """
    return booking.reschedule(appointment_id, new_slot_id=data.slot_id, requester_id=current_user.user_id)


@router.post("/{appointment_id}/confirm", response_model=AppointmentRead)
def confirm_appointment(
        appointment_id: UUID = Path(..., description="The appointment ID"),
        current_user: CurrentUser = Depends(get_current_user),
        booking: BookingService = Depends(get_booking_service)
):
    return booking.confirm(appointment_id, requester_id=current_user.user_id)
