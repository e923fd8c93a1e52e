# app/services/provider/provider_service.py
"""Provider profiles"""
import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy.orm import Session, selectinload

from app.core.exceptions import ConflictError, NotFoundError
from app.core.transactions import unit_of_work
from app.models.provider import Provider

logger = logging.getLogger(__name__)


class ProviderService:

    @staticmethod
    def create_profile(
            db: Session,
            user_id: UUID,
            display_name: str,
            bio: Optional[str] = None
    ) -> Provider:
        """One profile per user; a second attempt is a conflict."""
        with unit_of_work(db, "create_provider", "Provider profile already exists"):
            if ProviderService.get_by_user(db, user_id):
                raise ConflictError("Provider profile already exists")

            provider = Provider(user_id=user_id, display_name=display_name, bio=bio)
            db.add(provider)
            db.flush()

        db.refresh(provider)
        logger.info(f"Provider profile created {provider.id} for user {user_id}")
        return provider

    @staticmethod
    def update_profile(
            db: Session,
            provider: Provider,
            display_name: Optional[str] = None,
            bio: Optional[str] = None
    ) -> Provider:
        with unit_of_work(db, "update_provider"):
            if display_name is not None:
                provider.display_name = display_name
            if bio is not None:
                provider.bio = bio

        db.refresh(provider)
        return provider

    @staticmethod
    def get_provider(db: Session, provider_id: UUID) -> Provider:
        provider = db.query(Provider).options(
            selectinload(Provider.services)
        ).filter(Provider.id == provider_id).first()

        if not provider:
            raise NotFoundError("Provider not found")
        return provider

    @staticmethod
    def get_by_user(db: Session, user_id: UUID) -> Optional[Provider]:
        return db.query(Provider).filter(Provider.user_id == user_id).first()

    @staticmethod
    def list_providers(db: Session, skip: int = 0, limit: int = 50) -> List[Provider]:
        return db.query(Provider).options(
            selectinload(Provider.services)
        ).order_by(Provider.display_name.asc()).offset(skip).limit(limit).all()
