# app/services/catalog/service_catalog_service.py
"""
Service catalog - what providers offer.
Slots and appointments reference services for display and duration.
"""
import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from app.core.transactions import unit_of_work
from app.models.provider import Provider
from app.models.service import Service
from app.models.time_slot import TimeSlot

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = ("name", "description", "price", "duration_minutes")


class ServiceCatalogService:
    """CRUD for provider services"""

    @staticmethod
    def create_service(
            db: Session,
            provider_id: UUID,
            name: str,
            duration_minutes: int,
            price: float = 0,
            description: Optional[str] = None
    ) -> Service:
        with unit_of_work(db, "create_service"):
            service = Service(
                provider_id=provider_id,
                name=name,
                description=description,
                price=Decimal(str(price)),
                duration_minutes=duration_minutes,
            )
            db.add(service)
            db.flush()

        db.refresh(service)
        logger.info(f"Created service {service.id}: {service.name}")
        return service

    @staticmethod
    def get_service(db: Session, service_id: UUID) -> Service:
        service = db.get(Service, service_id)
        if not service:
            raise NotFoundError("Service not found")
        return service

    @staticmethod
    def get_service_summary(db: Session, service_id: UUID) -> Dict[str, Any]:
        """Catalog lookup used for denormalized display fields"""
        service = ServiceCatalogService.get_service(db, service_id)
        return {
            "provider_id": service.provider_id,
            "duration_minutes": service.duration_minutes,
        }

    @staticmethod
    def list_services(
            db: Session,
            q: Optional[str] = None,
            provider_id: Optional[UUID] = None,
            skip: int = 0,
            limit: int = 50
    ) -> List[Service]:
        """Services, optionally filtered by provider and a search term
        matched against service name and provider display name."""
        query = db.query(Service).join(Provider, Service.provider_id == Provider.id)

        if provider_id:
            query = query.filter(Service.provider_id == provider_id)
        if q:
            pattern = f"%{q.lower()}%"
            query = query.filter(or_(
                func.lower(Service.name).like(pattern),
                func.lower(Provider.display_name).like(pattern),
            ))

        return query.order_by(Service.name.asc(), Service.id.asc()).offset(skip).limit(limit).all()

    @staticmethod
    def update_service(
            db: Session,
            service_id: UUID,
            provider_id: UUID,
            changes: Dict[str, Any]
    ) -> Service:
        with unit_of_work(db, "update_service"):
            service = ServiceCatalogService._get_owned(db, service_id, provider_id)

            for field in UPDATABLE_FIELDS:
                if field in changes and changes[field] is not None:
                    value = changes[field]
                    if field == "price":
                        value = Decimal(str(value))
                    setattr(service, field, value)

        db.refresh(service)
        logger.info(f"Updated service {service_id}")
        return service

    @staticmethod
    def delete_service(db: Session, service_id: UUID, provider_id: UUID) -> Dict[str, Any]:
        """
        Delete a service nobody schedules against any more.

        Raises:
            ConflictError: slots still reference the service
        """
        with unit_of_work(db, "delete_service", "Service is still referenced"):
            service = ServiceCatalogService._get_owned(db, service_id, provider_id)

            slot_count = db.query(func.count(TimeSlot.id)).filter(
                TimeSlot.service_id == service_id
            ).scalar()
            if slot_count:
                raise ConflictError(
                    f"Service still has {slot_count} time slot(s); delete them first"
                )

            snapshot = service.to_dict()
            db.delete(service)

        logger.info(f"Deleted service {service_id}")
        return snapshot

    @staticmethod
    def _get_owned(db: Session, service_id: UUID, provider_id: UUID) -> Service:
        service = db.get(Service, service_id)
        if not service:
            raise NotFoundError("Service not found")
        if service.provider_id != provider_id:
            raise ForbiddenError("Service belongs to another provider")
        return service
