"""
Pydantic schemas for providers and their services
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ============================================================================
# Services
# ============================================================================

class ServiceCreate(BaseModel):
    """Request model for creating a service"""
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = None
    price: float = Field(0, ge=0)
    duration_minutes: int = Field(
        ...,
        gt=0,
        le=24 * 60,
        validation_alias=AliasChoices("duration_minutes", "durationMinutes"),
        description="Duration in minutes",
    )


class ServiceUpdate(BaseModel):
    """Request model for updating a service"""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    duration_minutes: Optional[int] = Field(
        None,
        gt=0,
        le=24 * 60,
        validation_alias=AliasChoices("duration_minutes", "durationMinutes"),
    )


class ServiceRead(BaseModel):
    """Response model for service data"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider_id: UUID
    name: str
    description: Optional[str] = None
    price: float
    duration_minutes: int
    formatted_duration: str
    created_at: datetime
    updated_at: datetime


# ============================================================================
# Providers
# ============================================================================

class ProviderCreate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices("display_name", "displayName"),
    )
    bio: Optional[str] = None


class ProviderUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    display_name: Optional[str] = Field(
        None,
        min_length=1,
        max_length=200,
        validation_alias=AliasChoices("display_name", "displayName"),
    )
    bio: Optional[str] = None


class ProviderRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    display_name: str
    bio: Optional[str] = None
    created_at: datetime
    services: List[ServiceRead] = Field(default_factory=list)
