# app/services/availability/availability_service.py
"""
Provider weekly availability - recurring working hours per weekday.
Informational for clients browsing a provider; bookable capacity is still
the provider's time slots.
"""
import logging
from datetime import time
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError, ValidationError
from app.core.transactions import unit_of_work
from app.models.availability import ProviderAvailability
from app.models.provider import Provider

logger = logging.getLogger(__name__)


class AvailabilityService:

    @staticmethod
    def create_availability(
            db: Session,
            provider_id: UUID,
            day_of_week: int,
            start_time: time,
            end_time: time
    ) -> ProviderAvailability:
        """
        Add a working-hours window for one weekday.

        Raises:
            ValidationError: day outside 0-6 or start not before end
            ConflictError: overlaps another window on the same weekday
        """
        AvailabilityService._validate(day_of_week, start_time, end_time)

        with unit_of_work(db, "create_availability"):
            AvailabilityService._check_overlap(db, provider_id, day_of_week, start_time, end_time)

            availability = ProviderAvailability(
                provider_id=provider_id,
                day_of_week=day_of_week,
                start_time=start_time,
                end_time=end_time,
            )
            db.add(availability)
            db.flush()

        db.refresh(availability)
        logger.info(f"Availability created {availability.id} for provider {provider_id}: "
                    f"{availability.day_name} {start_time}-{end_time}")
        return availability

    @staticmethod
    def list_by_provider(db: Session, provider_id: UUID) -> List[ProviderAvailability]:
        """Windows ordered by weekday then start time"""
        if not db.get(Provider, provider_id):
            raise NotFoundError("Provider not found")

        return db.query(ProviderAvailability).filter(
            ProviderAvailability.provider_id == provider_id
        ).order_by(
            ProviderAvailability.day_of_week.asc(), ProviderAvailability.start_time.asc()
        ).all()

    @staticmethod
    def update_availability(
            db: Session,
            availability_id: UUID,
            provider_id: UUID,
            day_of_week: int,
            start_time: time,
            end_time: time
    ) -> ProviderAvailability:
        AvailabilityService._validate(day_of_week, start_time, end_time)

        with unit_of_work(db, "update_availability"):
            availability = AvailabilityService._get_owned(db, availability_id, provider_id)
            AvailabilityService._check_overlap(
                db, provider_id, day_of_week, start_time, end_time, exclude_id=availability_id
            )

            availability.day_of_week = day_of_week
            availability.start_time = start_time
            availability.end_time = end_time

        db.refresh(availability)
        logger.info(f"Availability updated {availability_id}")
        return availability

    @staticmethod
    def delete_availability(db: Session, availability_id: UUID, provider_id: UUID) -> dict:
        with unit_of_work(db, "delete_availability"):
            availability = AvailabilityService._get_owned(db, availability_id, provider_id)
            snapshot = availability.to_dict()
            db.delete(availability)

        logger.info(f"Availability deleted {availability_id}")
        return snapshot

    # ── Helpers ─────────────────────────────────────────────────────────

    @staticmethod
    def _validate(day_of_week: int, start_time: time, end_time: time) -> None:
        if not 0 <= day_of_week <= 6:
            raise ValidationError("day_of_week must be between 0 (Monday) and 6 (Sunday)")
        if start_time >= end_time:
            raise ValidationError("Start time must be before end time")

    @staticmethod
    def _check_overlap(
            db: Session,
            provider_id: UUID,
            day_of_week: int,
            start_time: time,
            end_time: time,
            exclude_id: Optional[UUID] = None
    ) -> None:
        query = db.query(ProviderAvailability.id).filter(
            ProviderAvailability.provider_id == provider_id,
            ProviderAvailability.day_of_week == day_of_week,
            ProviderAvailability.start_time < end_time,
            ProviderAvailability.end_time > start_time,
        )
        if exclude_id:
            query = query.filter(ProviderAvailability.id != exclude_id)

        if query.first():
            raise ConflictError("Availability overlaps an existing window on that day")

    @staticmethod
    def _get_owned(db: Session, availability_id: UUID, provider_id: UUID) -> ProviderAvailability:
        availability = db.get(ProviderAvailability, availability_id)
        if not availability:
            raise NotFoundError("Availability not found")
        if availability.provider_id != provider_id:
            raise ForbiddenError("Availability belongs to another provider")
        return availability
