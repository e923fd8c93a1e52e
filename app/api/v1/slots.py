# ============================================================================
# app/api/v1/slots.py
# ============================================================================
"""
Slots API endpoints.

GET  /slots               - bookable slots (search)
GET  /slots/{provider_id} - every slot of a provider, by day then start time
POST /slots               - publish a slot (provider)
PUT/DELETE /slots/{id}    - change or remove an unbooked slot (provider)
"""
from datetime import date
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_provider, get_current_user
from app.config.database import get_db
from app.models.provider import Provider
from app.schemas.booking import SlotCreate, SlotRead, SlotUpdate
from app.services.slot.slot_service import SlotService

router = APIRouter(prefix="/slots", tags=["slots"], dependencies=[Depends(get_current_user)])


@router.get("", response_model=List[SlotRead])
def search_available_slots(
        provider_id: Optional[UUID] = Query(None, alias="providerId"),
        service_id: Optional[UUID] = Query(None, alias="serviceId"),
        day: Optional[date] = None,
        limit: int = Query(10, ge=1, le=100),
        offset: int = Query(0, ge=0),
        db: Session = Depends(get_db),
):
    return SlotService.search_available_slots(
        db,
        provider_id=provider_id,
        service_id=service_id,
        day=day,
        limit=limit,
        offset=offset,
    )


@router.get("/{provider_id}", response_model=List[SlotRead])
def list_provider_slots(provider_id: UUID, db: Session = Depends(get_db)):
    return SlotService.list_slots_by_provider(db, provider_id)


@router.post("", response_model=SlotRead, status_code=status.HTTP_201_CREATED)
def create_slot(
        data: SlotCreate,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db),
):
    return SlotService.create_slot(
        db,
        provider_id=provider.id,
        service_id=data.service_id,
        day=data.day,
        start_time=data.start_time,
        end_time=data.end_time,
    )


@router.put("/{slot_id}", response_model=SlotRead)
def update_slot(
        slot_id: UUID,
        data: SlotUpdate,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db),
):
    return SlotService.update_slot(
        db,
        slot_id=slot_id,
        provider_id=provider.id,
        start_time=data.start_time,
        end_time=data.end_time,
        service_id=data.service_id,
    )


@router.delete("/{slot_id}")
def delete_slot(
        slot_id: UUID,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db),
):
    deleted = SlotService.delete_slot(db, slot_id=slot_id, provider_id=provider.id)
    return {"message": "Slot deleted", "data": deleted}
