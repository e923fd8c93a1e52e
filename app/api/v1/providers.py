# app/api/v1/providers.py
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import CurrentUser, get_current_provider, get_current_user, require_provider_role
from app.config.database import get_db
from app.models.provider import Provider
from app.schemas.catalog import ProviderCreate, ProviderRead, ProviderUpdate
from app.services.provider.provider_service import ProviderService

router = APIRouter(prefix="/providers", tags=["providers"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=ProviderRead, status_code=status.HTTP_201_CREATED)
def create_provider_profile(
        data: ProviderCreate,
        current_user: CurrentUser = Depends(require_provider_role),
        db: Session = Depends(get_db)
):
    """Create the public profile for the calling provider user."""
    return ProviderService.create_profile(
        db,
        user_id=current_user.user_id,
        display_name=data.display_name,
        bio=data.bio,
    )


@router.get("", response_model=List[ProviderRead])
def list_providers(
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        db: Session = Depends(get_db)
):
    return ProviderService.list_providers(db, skip=skip, limit=limit)


@router.get("/me", response_model=ProviderRead)
def get_my_profile(provider: Provider = Depends(get_current_provider)):
    return provider


@router.put("/me", response_model=ProviderRead)
def update_my_profile(
        data: ProviderUpdate,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db)
):
    return ProviderService.update_profile(db, provider, display_name=data.display_name, bio=data.bio)


@router.get("/{provider_id}", response_model=ProviderRead)
def get_provider(provider_id: UUID, db: Session = Depends(get_db)):
    return ProviderService.get_provider(db, provider_id)
