# ============================================================================
# app/services/appointment/appointment_service.py
# ============================================================================
"""Appointment store - writes only, always inside the caller's transaction"""
import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import or_, select, update
from sqlalchemy.orm import Session

from app.core.exceptions import ForbiddenError, NotFoundError
from app.models.appointment import Appointment, AppointmentStatus
from app.models.provider import Provider
from app.models.time_slot import TimeSlot

logger = logging.getLogger(__name__)


class AppointmentService:
    """Handles appointment operations"""

    @staticmethod
    def create_appointment(
            db: Session,
            client_id: UUID,
            slot_id: UUID,
            service_id: UUID,
            provider_id: UUID,
            status: AppointmentStatus = AppointmentStatus.CONFIRMED,
            notes: Optional[str] = None,
    ) -> Appointment:
        """Insert an appointment for a slot, snapshotting the slot's window"""
        slot = db.get(TimeSlot, slot_id)
        if not slot:
            raise NotFoundError("Slot not found")

        appointment = Appointment(
            client_id=client_id,
            time_slot_id=slot_id,
            service_id=service_id,
            provider_id=provider_id,
            appointment_date=slot.day,
            start_time=slot.start_time,
            end_time=slot.end_time,
            status=status.value,
            notes=notes,
        )

        db.add(appointment)
        db.flush()
        return appointment

    @staticmethod
    def cancel_appointment(
            db: Session,
            appointment_id: UUID,
            requester_id: Optional[UUID] = None,
            reason: Optional[str] = None,
    ) -> Appointment:
        """
        Mark an active appointment cancelled (the row is kept for audit).

        With ``requester_id`` the update only matches when the requester is
        the client or the owning provider's user. Exactly one concurrent
        caller can cancel a given appointment.

        Raises:
            NotFoundError: missing, or already cancelled
            ForbiddenError: requester is neither client nor provider
        """
        conditions = [
            Appointment.id == appointment_id,
            Appointment.status != AppointmentStatus.CANCELLED.value,
        ]
        if requester_id is not None:
            conditions.append(
                or_(
                    Appointment.client_id == requester_id,
                    Appointment.provider_id.in_(
                        select(Provider.id).where(Provider.user_id == requester_id)
                    ),
                )
            )

        result = db.execute(
            update(Appointment)
            .where(*conditions)
            .values(
                status=AppointmentStatus.CANCELLED.value,
                cancelled_at=datetime.now(timezone.utc),
                cancellation_reason=reason,
            )
            .execution_options(synchronize_session=False)
        )

        appointment = db.query(Appointment).populate_existing().filter(
            Appointment.id == appointment_id
        ).first()

        if result.rowcount == 1:
            return appointment

        if appointment is None:
            raise NotFoundError("Appointment not found")
        if requester_id is not None and not AppointmentService.is_party(db, appointment, requester_id):
            raise ForbiddenError("Only the client or the provider can cancel this appointment")
        raise NotFoundError("Appointment not found or already cancelled")

    @staticmethod
    def is_party(db: Session, appointment: Appointment, user_id: UUID) -> bool:
        """True when the user is the appointment's client or its provider"""
        if appointment.client_id == user_id:
            return True
        provider = db.get(Provider, appointment.provider_id)
        return provider is not None and provider.user_id == user_id
