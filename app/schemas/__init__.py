# app/schemas/__init__.py
from .booking import (
    SlotCreate,
    SlotUpdate,
    SlotRead,
    AppointmentCreate,
    AppointmentReschedule,
    AppointmentRead
)

from .availability import (
    AvailabilityWrite,
    AvailabilityRead
)

from .catalog import (
    ServiceCreate,
    ServiceUpdate,
    ServiceRead,
    ProviderCreate,
    ProviderUpdate,
    ProviderRead
)

__all__ = [
    "SlotCreate",
    "SlotUpdate",
    "SlotRead",
    "AppointmentCreate",
    "AppointmentReschedule",
    "AppointmentRead",
    "ServiceCreate",
    "ServiceUpdate",
    "ServiceRead",
    "ProviderCreate",
    "ProviderUpdate",
    "ProviderRead",
    "AvailabilityWrite",
    "AvailabilityRead",
]
