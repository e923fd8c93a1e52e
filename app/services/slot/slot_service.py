# ============================================================================
# app/services/slot/slot_service.py
# Slot store - provider-managed time windows
# ============================================================================
"""Service for managing provider time slots"""
import logging
from datetime import date, time
from typing import List, Optional
from uuid import UUID

from sqlalchemy import and_, delete, update
from sqlalchemy.orm import Session

from app.config.settings import get_settings
from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.transactions import unit_of_work
from app.models.provider import Provider
from app.models.service import Service
from app.models.time_slot import TimeSlot

logger = logging.getLogger(__name__)


def _minutes(value: time) -> int:
    return value.hour * 60 + value.minute


class SlotService:
    """Handles time slot operations"""

    # ── Provider-facing writes (each commits its own transaction) ───────

    @staticmethod
    def create_slot(
            db: Session,
            provider_id: UUID,
            service_id: UUID,
            day: date,
            start_time: time,
            end_time: time,
    ) -> TimeSlot:
        """
        Create an available slot.

        Raises:
            ValidationError: start is not before end, or the length does not
                match the service duration while that rule is enforced
            NotFoundError: unknown service
            ForbiddenError: the service belongs to another provider
            ConflictError: identical or overlapping window already exists
        """
        SlotService._validate_window(start_time, end_time)

        with unit_of_work(db, "create_slot", "An identical slot already exists."):
            SlotService._check_service(db, provider_id, service_id, start_time, end_time)

            duplicate = db.query(TimeSlot.id).filter(
                TimeSlot.provider_id == provider_id,
                TimeSlot.day == day,
                TimeSlot.start_time == start_time,
                TimeSlot.end_time == end_time,
            ).first()
            if duplicate:
                raise ConflictError("An identical slot already exists.")

            SlotService._check_overlap(db, provider_id, day, start_time, end_time)

            slot = TimeSlot(
                provider_id=provider_id,
                service_id=service_id,
                day=day,
                start_time=start_time,
                end_time=end_time,
                is_available=True,
            )
            db.add(slot)
            db.flush()

        db.refresh(slot)
        logger.info(f"Slot created {slot.id} for provider {provider_id} on {day} {start_time}-{end_time}")
        return slot

    @staticmethod
    def update_slot(
            db: Session,
            slot_id: UUID,
            provider_id: UUID,
            start_time: time,
            end_time: time,
            service_id: UUID,
    ) -> TimeSlot:
        """Move or re-assign a slot that nobody has booked yet."""
        SlotService._validate_window(start_time, end_time)

        with unit_of_work(db, "update_slot", "An identical slot already exists."):
            slot = SlotService._get_owned_slot(db, slot_id, provider_id)
            if not slot.is_available:
                raise ConflictError("Cannot update a booked slot")

            SlotService._check_service(db, provider_id, service_id, start_time, end_time)
            SlotService._check_overlap(db, provider_id, slot.day, start_time, end_time, exclude_id=slot_id)

            # Guarded by is_available so a concurrent booking wins
            result = db.execute(
                update(TimeSlot)
                .where(TimeSlot.id == slot_id, TimeSlot.is_available.is_(True))
                .values(start_time=start_time, end_time=end_time, service_id=service_id)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError("Cannot update a booked slot")

        slot = db.get(TimeSlot, slot_id)
        logger.info(f"Slot updated {slot_id}: {start_time}-{end_time}")
        return slot

    @staticmethod
    def delete_slot(db: Session, slot_id: UUID, provider_id: UUID) -> dict:
        """
        Remove an unbooked slot and return what it looked like.

        Cancelled appointments keep their own date/time snapshot; their slot
        link is cleared by the foreign key.
        """
        with unit_of_work(db, "delete_slot"):
            slot = SlotService._get_owned_slot(db, slot_id, provider_id)
            snapshot = slot.to_dict()

            result = db.execute(
                delete(TimeSlot)
                .where(TimeSlot.id == slot_id, TimeSlot.is_available.is_(True))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError("Cannot delete a booked slot")

        logger.info(f"Slot deleted {slot_id}")
        return snapshot

    # ── Reads ───────────────────────────────────────────────────────────

    @staticmethod
    def get_slot(db: Session, slot_id: UUID) -> TimeSlot:
        slot = db.get(TimeSlot, slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        return slot

    @staticmethod
    def list_slots_by_provider(db: Session, provider_id: UUID) -> List[TimeSlot]:
        """All slots of a provider, ordered by day then start time. Fresh query each call."""
        if not db.get(Provider, provider_id):
            raise NotFoundError("Provider not found")

        return db.query(TimeSlot).filter(
            TimeSlot.provider_id == provider_id
        ).order_by(TimeSlot.day.asc(), TimeSlot.start_time.asc()).all()

    @staticmethod
    def search_available_slots(
            db: Session,
            provider_id: Optional[UUID] = None,
            service_id: Optional[UUID] = None,
            day: Optional[date] = None,
            limit: int = 10,
            offset: int = 0,
    ) -> List[TimeSlot]:
        """Bookable slots matching the filters."""
        query = db.query(TimeSlot).filter(TimeSlot.is_available.is_(True))

        if provider_id:
            query = query.filter(TimeSlot.provider_id == provider_id)
        if service_id:
            query = query.filter(TimeSlot.service_id == service_id)
        if day:
            query = query.filter(TimeSlot.day == day)

        return query.order_by(
            TimeSlot.day.asc(), TimeSlot.start_time.asc()
        ).offset(offset).limit(limit).all()

    # ── Booking-engine internals (flush only; caller owns the transaction) ──

    @staticmethod
    def claim_slot(db: Session, slot_id: UUID, provider_id: UUID, service_id: UUID) -> bool:
        """
        Atomically flip an available slot to unavailable.

        Single conditional UPDATE: of any number of concurrent callers, only
        one can match ``is_available = true``. Returns False when nothing
        matched (missing, foreign, other service, or already taken).
        """
        result = db.execute(
            update(TimeSlot)
            .where(
                TimeSlot.id == slot_id,
                TimeSlot.provider_id == provider_id,
                TimeSlot.service_id == service_id,
                TimeSlot.is_available.is_(True),
            )
            .values(is_available=False)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    @staticmethod
    def set_availability(db: Session, slot_id: UUID, available: bool) -> bool:
        """
        Set ``is_available`` on a slot.

        Returns True if the flag changed, False if it already had that value.

        Raises:
            NotFoundError: the slot does not exist
        """
        result = db.execute(
            update(TimeSlot)
            .where(TimeSlot.id == slot_id, TimeSlot.is_available.is_(not available))
            .values(is_available=available)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 1:
            return True

        if db.query(TimeSlot.id).filter(TimeSlot.id == slot_id).first() is None:
            raise NotFoundError("Slot not found")
        return False

    # ── Helpers ─────────────────────────────────────────────────────────

    @staticmethod
    def _validate_window(start_time: time, end_time: time) -> None:
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time")

    @staticmethod
    def _check_service(
            db: Session,
            provider_id: UUID,
            service_id: UUID,
            start_time: time,
            end_time: time,
    ) -> Service:
        service = db.get(Service, service_id)
        if not service:
            raise NotFoundError("Service not found")
        if service.provider_id != provider_id:
            raise ForbiddenError("Service belongs to another provider")

        length = _minutes(end_time) - _minutes(start_time)
        if get_settings().ENFORCE_SERVICE_DURATION and length != service.duration_minutes:
            raise ValidationError(
                f"Slot length {length}m does not match service duration {service.duration_minutes}m"
            )
        return service

    @staticmethod
    def _check_overlap(
            db: Session,
            provider_id: UUID,
            day: date,
            start_time: time,
            end_time: time,
            exclude_id: Optional[UUID] = None,
    ) -> None:
        query = db.query(TimeSlot.id).filter(
            TimeSlot.provider_id == provider_id,
            TimeSlot.day == day,
            and_(TimeSlot.start_time < end_time, TimeSlot.end_time > start_time),
        )
        if exclude_id:
            query = query.filter(TimeSlot.id != exclude_id)

        if query.first():
            raise ConflictError("Slot overlaps with an existing slot.")

    @staticmethod
    def _get_owned_slot(db: Session, slot_id: UUID, provider_id: UUID) -> TimeSlot:
        slot = db.get(TimeSlot, slot_id)
        if not slot:
            raise NotFoundError("Slot not found")
        if slot.provider_id != provider_id:
            raise ForbiddenError("Slot belongs to another provider")
        return slot
