# app/models/__init__.py
from .base import Base
from .provider import Provider, UserRole
from .service import Service
from .time_slot import TimeSlot
from .appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from .availability import ProviderAvailability

__all__ = [
    "Base",
    "Provider",
    "UserRole",
    "Service",
    "TimeSlot",
    "Appointment",
    "AppointmentStatus",
    "ACTIVE_STATUSES",
    "ProviderAvailability",
]
