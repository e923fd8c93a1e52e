"""
Pydantic schemas for provider weekly availability
"""
from datetime import time
from uuid import UUID

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class AvailabilityWrite(BaseModel):
    """Create or replace one weekday window"""
    model_config = ConfigDict(populate_by_name=True)

    day_of_week: int = Field(
        ...,
        ge=0,
        le=6,
        validation_alias=AliasChoices("day_of_week", "dayOfWeek"),
        description="0=Monday, 6=Sunday",
    )
    start_time: time = Field(validation_alias=AliasChoices("start_time", "startTime"))
    end_time: time = Field(validation_alias=AliasChoices("end_time", "endTime"))


class AvailabilityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    provider_id: UUID
    day_of_week: int
    day_name: str
    start_time: time
    end_time: time
