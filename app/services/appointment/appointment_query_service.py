# ============================================================================
# app/services/appointment/appointment_query_service.py
# Pure read logic - no FastAPI dependencies
# ============================================================================
from sqlalchemy.orm import Session
from datetime import date
from typing import List, Optional
from uuid import UUID

from app.core.exceptions import NotFoundError
from app.models.appointment import Appointment
from app.models.provider import Provider, UserRole
from app.services.appointment.appointment_service import AppointmentService


class AppointmentQueryService:
    """Read side for appointments, scoped to the caller."""

    @staticmethod
    def list_appointments_by_user(
            db: Session,
            user_id: UUID,
            role: UserRole,
            status: Optional[str] = None,
            start_date: Optional[date] = None,
            end_date: Optional[date] = None,
            skip: int = 0,
            limit: int = 50
    ) -> List[Appointment]:
        """
        Appointments where the user is the client (client role) or the
        owning provider (provider role), newest first.
        """
        query = db.query(Appointment)

        if role == UserRole.PROVIDER:
            provider = db.query(Provider).filter(Provider.user_id == user_id).first()
            if not provider:
                return []
            query = query.filter(Appointment.provider_id == provider.id)
        else:
            query = query.filter(Appointment.client_id == user_id)

        if status:
            query = query.filter(Appointment.status == status)
        if start_date:
            query = query.filter(Appointment.appointment_date >= start_date)
        if end_date:
            query = query.filter(Appointment.appointment_date <= end_date)

        return query.order_by(
            Appointment.created_at.desc(), Appointment.id.desc()
        ).offset(skip).limit(limit).all()

    @staticmethod
    def get_appointment_for_user(
            db: Session,
            appointment_id: UUID,
            user_id: UUID
    ) -> Appointment:
        """Single appointment, visible only to its client and provider."""
        appointment = db.get(Appointment, appointment_id)

        if not appointment or not AppointmentService.is_party(db, appointment, user_id):
            raise NotFoundError("Appointment not found or you don't have access to it")

        return appointment
