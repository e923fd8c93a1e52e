# app/api/v1/services.py
"""
Service Management API Endpoints
Handles CRUD operations for provider services
"""
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_provider, get_current_user
from app.config.database import get_db
from app.models.provider import Provider
from app.schemas.catalog import ServiceCreate, ServiceRead, ServiceUpdate
from app.services.catalog.service_catalog_service import ServiceCatalogService

router = APIRouter(prefix="/services", tags=["services"], dependencies=[Depends(get_current_user)])


@router.post("", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
def create_service(
        service_data: ServiceCreate,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db)
):
    return ServiceCatalogService.create_service(
        db,
        provider_id=provider.id,
        name=service_data.name,
        description=service_data.description,
        price=service_data.price,
        duration_minutes=service_data.duration_minutes,
    )


@router.get("", response_model=List[ServiceRead])
def list_services(
        q: Optional[str] = Query(None, max_length=100, description="Search service or provider name"),
        provider_id: Optional[UUID] = Query(None, alias="providerId"),
        skip: int = Query(0, ge=0),
        limit: int = Query(50, ge=1, le=100),
        db: Session = Depends(get_db)
):
    return ServiceCatalogService.list_services(db, q=q, provider_id=provider_id, skip=skip, limit=limit)


@router.get("/{service_id}", response_model=ServiceRead)
def get_service(service_id: UUID, db: Session = Depends(get_db)):
    return ServiceCatalogService.get_service(db, service_id)


@router.put("/{service_id}", response_model=ServiceRead)
def update_service(
        service_id: UUID,
        service_data: ServiceUpdate,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db)
):
    return ServiceCatalogService.update_service(
        db,
        service_id=service_id,
        provider_id=provider.id,
        changes=service_data.model_dump(exclude_unset=True),
    )


@router.delete("/{service_id}")
def delete_service(
        service_id: UUID,
        provider: Provider = Depends(get_current_provider),
        db: Session = Depends(get_db)
):
    """Fails with 409 while time slots still use the service."""
    deleted = ServiceCatalogService.delete_service(db, service_id=service_id, provider_id=provider.id)
    return {"message": "Service deleted", "data": deleted}
