# ============================================================================
# app/services/booking/booking_service.py
# Booking engine - the only writer of slot availability and appointments
# ============================================================================
"""
Transactional booking lifecycle.

Every public operation runs as a single database transaction:

- book:       conditional slot claim + appointment insert
- cancel:     conditional appointment cancel + slot release
- reschedule: cancel + release + claim + insert, all or nothing
- confirm:    pending -> confirmed by the owning provider

The slot claim is one ``UPDATE ... WHERE is_available = true`` statement, so
for any slot at most one concurrent booking can commit. Events are
published only after the transaction commits.
"""
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.transactions import unit_of_work
from app.models.appointment import Appointment, AppointmentStatus
from app.models.provider import Provider
from app.models.time_slot import TimeSlot
from app.services.appointment.appointment_service import AppointmentService
from app.services.notification.notification_service import (
    APPOINTMENT_BOOKED,
    APPOINTMENT_CANCELLED,
    APPOINTMENT_CONFIRMED,
    LocalBroadcaster,
)
from app.services.slot.slot_service import SlotService

logger = logging.getLogger(__name__)

SLOT_TAKEN = "slot already booked"


class BookingService:
    """Books, cancels, reschedules and confirms appointments"""

    def __init__(
            self,
            db: Session,
            notifier: LocalBroadcaster,
            auto_confirm: Optional[bool] = None,
    ):
        self.db = db
        self.notifier = notifier
        if auto_confirm is None:
            auto_confirm = get_settings().AUTO_CONFIRM_APPOINTMENTS
        self.initial_status = AppointmentStatus.CONFIRMED if auto_confirm else AppointmentStatus.PENDING

    # ── Public operations ───────────────────────────────────────────────

    def book(
            self,
            client_id: UUID,
            provider_id: UUID,
            service_id: UUID,
            slot_id: UUID,
            notes: Optional[str] = None,
    ) -> Appointment:
        """
        Book a free slot for a client.

        Raises:
            NotFoundError: the slot does not exist
            ForbiddenError: the slot belongs to another provider
            ValidationError: the slot is for a different service
            ConflictError: the slot is already booked
            TransientStoreError: lock/statement timeout, retry later
        """
        with unit_of_work(self.db, "book", SLOT_TAKEN):
            appointment = self._book_in_tx(client_id, provider_id, service_id, slot_id, notes)

        logger.info(f"Appointment booked {appointment.id} on slot {slot_id} for client {client_id}")
        self._publish(APPOINTMENT_BOOKED, appointment)
        return appointment

    def cancel(
            self,
            appointment_id: UUID,
            requester_id: UUID,
            reason: Optional[str] = None,
    ) -> Appointment:
        """
        Cancel an appointment and free its slot in the same transaction.

        A second cancel of the same appointment raises NotFoundError and
        never releases the slot twice.
        """
        with unit_of_work(self.db, "cancel"):
            appointment = self._cancel_in_tx(appointment_id, requester_id, reason)

        logger.info(f"Appointment cancelled {appointment_id} by {requester_id}")
        self._publish(APPOINTMENT_CANCELLED, appointment)
        return appointment

    def reschedule(
            self,
            appointment_id: UUID,
            new_slot_id: UUID,
            requester_id: UUID,
    ) -> Appointment:
        """
        Move an appointment to another slot of the same provider and service.

        Cancel-old and book-new share one transaction: if the new slot
        cannot be claimed the original appointment and slot are untouched.

        Returns:
            The new appointment
        """
        with unit_of_work(self.db, "reschedule", SLOT_TAKEN):
            old = self._cancel_in_tx(appointment_id, requester_id, reason="Rescheduled")
            if old.time_slot_id == new_slot_id:
                raise ValidationError("Appointment is already booked on this slot")

            new = self._book_in_tx(
                client_id=old.client_id,
                provider_id=old.provider_id,
                service_id=old.service_id,
                slot_id=new_slot_id,
                notes=old.notes,
            )

        logger.info(f"Appointment {appointment_id} rescheduled to {new.id} on slot {new_slot_id}")
        self._publish(APPOINTMENT_CANCELLED, old)
        self._publish(APPOINTMENT_BOOKED, new)
        return new

    def confirm(self, appointment_id: UUID, requester_id: UUID) -> Appointment:
        """Owning provider moves a pending appointment to confirmed."""
        with unit_of_work(self.db, "confirm"):
            result = self.db.execute(
                update(Appointment)
                .where(
                    Appointment.id == appointment_id,
                    Appointment.status == AppointmentStatus.PENDING.value,
                    Appointment.provider_id.in_(
                        select(Provider.id).where(Provider.user_id == requester_id)
                    ),
                )
                .values(status=AppointmentStatus.CONFIRMED.value)
                .execution_options(synchronize_session=False)
            )

            appointment = self.db.query(Appointment).populate_existing().filter(
                Appointment.id == appointment_id
            ).first()

            if result.rowcount != 1:
                if appointment is None:
                    raise NotFoundError("Appointment not found")
                provider = self.db.get(Provider, appointment.provider_id)
                if provider is None or provider.user_id != requester_id:
                    raise ForbiddenError("Only the provider can confirm this appointment")
                raise ConflictError(f"Cannot confirm a {appointment.status} appointment")

        logger.info(f"Appointment confirmed {appointment_id}")
        self._publish(APPOINTMENT_CONFIRMED, appointment)
        return appointment

    # ── Transaction steps (no commit) ───────────────────────────────────

    def _book_in_tx(
            self,
            client_id: UUID,
            provider_id: UUID,
            service_id: UUID,
            slot_id: UUID,
            notes: Optional[str] = None,
    ) -> Appointment:
        if not SlotService.claim_slot(self.db, slot_id, provider_id, service_id):
            self._raise_unclaimable(slot_id, provider_id, service_id)

        return AppointmentService.create_appointment(
            self.db,
            client_id=client_id,
            slot_id=slot_id,
            service_id=service_id,
            provider_id=provider_id,
            status=self.initial_status,
            notes=notes,
        )

    def _cancel_in_tx(
            self,
            appointment_id: UUID,
            requester_id: UUID,
            reason: Optional[str] = None,
    ) -> Appointment:
        appointment = AppointmentService.cancel_appointment(
            self.db, appointment_id, requester_id=requester_id, reason=reason
        )
        if appointment.time_slot_id is not None:
            SlotService.set_availability(self.db, appointment.time_slot_id, True)
        return appointment

    def _raise_unclaimable(self, slot_id: UUID, provider_id: UUID, service_id: UUID) -> None:
        """Work out why the conditional claim matched nothing"""
        slot = self.db.query(TimeSlot).populate_existing().filter(TimeSlot.id == slot_id).first()

        if slot is None:
            raise NotFoundError("Slot not found")
        if slot.provider_id != provider_id:
            raise ForbiddenError("Slot does not belong to this provider")
        if slot.service_id != service_id:
            raise ValidationError("Slot is not offered for this service")

        logger.warning(f"Booking conflict on slot {slot_id}")
        raise ConflictError(SLOT_TAKEN)

    def _publish(self, event_type: str, appointment: Appointment) -> None:
        self.notifier.publish(event_type, appointment.to_dict())
