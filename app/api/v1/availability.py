# ============================================================================
# app/api/v1/availability.py
# ============================================================================
"""
Provider weekly availability endpoints.

POST   /availability               - add a weekday window (provider)
GET    /availability/{provider_id} - a provider's windows, Monday first
PUT    /availability/{id}          - replace a window (owner)
DELETE /availability/{id}          - remove a window (owner)
"""
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_provider, get_current_user
from app.config.database import get_db
from app.models.provider import Provider
from app.schemas.availability import AvailabilityRead, AvailabilityWrite
from app.services.availability.availability_service import AvailabilityService

router = APIRouter(prefix="/availability", tags=["availability"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=AvailabilityRead, status_code=status.HTTP_201_CREATED)
def create_availability(
        data: AvailabilityWrite,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db),
):
    return AvailabilityService.create_availability(
        db,
        provider_id=provider.id,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
    )


@router.get("/{provider_id}", response_model=List[AvailabilityRead])
def list_availability(provider_id: UUID, db: Session = Depends(get_db)):
    return AvailabilityService.list_by_provider(db, provider_id)


@router.put("/{availability_id}", response_model=AvailabilityRead)
def update_availability(
        availability_id: UUID,
        data: AvailabilityWrite,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db),
):
    return AvailabilityService.update_availability(
        db,
        availability_id=availability_id,
        provider_id=provider.id,
        day_of_week=data.day_of_week,
        start_time=data.start_time,
        end_time=data.end_time,
    )


@router.delete("/{availability_id}")
def delete_availability(
        availability_id: UUID,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db),
):
    deleted = AvailabilityService.delete_availability(db, availability_id, provider.id)
    return {"message": "Availability deleted", "data": deleted}
