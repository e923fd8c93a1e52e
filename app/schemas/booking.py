"""
Pydantic schemas for slots, appointments and booking requests
"""
from datetime import date, datetime, time
from typing import Optional
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


# ============================================================================
# Slots
# ============================================================================

class SlotCreate(BaseModel):
    """Provider request to publish a slot"""
    model_config = ConfigDict(populate_by_name=True)

    service_id: UUID = Field(validation_alias=AliasChoices("service_id", "serviceId"))
    day: date
    start_time: time = Field(validation_alias=AliasChoices("start_time", "startTime"))
    end_time: time = Field(validation_alias=AliasChoices("end_time", "endTime"))


class SlotUpdate(BaseModel):
    """New window or service for an unbooked slot; the day never changes"""
    model_config = ConfigDict(populate_by_name=True)

    service_id: UUID = Field(validation_alias=AliasChoices("service_id", "serviceId"))
    start_time: time = Field(validation_alias=AliasChoices("start_time", "startTime"))
    end_time: time = Field(validation_alias=AliasChoices("end_time", "endTime"))


class SlotRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider_id: UUID
    service_id: UUID
    day: date
    start_time: time
    end_time: time
    is_available: bool


# ============================================================================
# Appointments
# ============================================================================

class AppointmentCreate(BaseModel):
    """Booking intent: which provider's slot, for which service"""
    model_config = ConfigDict(populate_by_name=True)

    provider_id: UUID = Field(validation_alias=AliasChoices("provider_id", "providerId"))
    service_id: UUID = Field(validation_alias=AliasChoices("service_id", "serviceId"))
    slot_id: UUID = Field(validation_alias=AliasChoices("slot_id", "slotId"))
    notes: Optional[str] = Field(None, max_length=1000)


class AppointmentReschedule(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    slot_id: UUID = Field(validation_alias=AliasChoices("slot_id", "slotId"))


class AppointmentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    client_id: UUID
    time_slot_id: Optional[UUID] = None
    service_id: UUID
    provider_id: UUID
    appointment_date: date
    start_time: time
    end_time: time
    status: str
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    cancelled_at: Optional[datetime] = None
    cancellation_reason: Optional[str] = None
