# ===== app/models/appointment.py =====
from sqlalchemy import Column, String, Text, Date, DateTime, ForeignKey, Index, Time, Uuid, text
import enum
import uuid
from .base import Base, utcnow


class AppointmentStatus(str, enum.Enum):
    """Lifecycle of an appointment. Rows are never deleted, only cancelled."""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = (AppointmentStatus.PENDING.value, AppointmentStatus.CONFIRMED.value)


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # References (service/provider are denormalized from the slot for display)
    client_id = Column(Uuid, nullable=False, index=True)
    time_slot_id = Column(Uuid, ForeignKey("time_slots.id", ondelete="SET NULL"), nullable=True)
    service_id = Column(Uuid, ForeignKey("services.id"), nullable=False)
    provider_id = Column(Uuid, ForeignKey("providers.id"), nullable=False, index=True)

    # Snapshot of the booked window, kept after the slot is gone
    appointment_date = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    status = Column(String(20), nullable=False, default=AppointmentStatus.CONFIRMED.value)
    notes = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)
    cancelled_at = Column(DateTime(timezone=True), nullable=True)
    cancellation_reason = Column(Text, nullable=True)

    __table_args__ = (
        # At most one non-cancelled appointment per slot
        Index(
            "uq_appointments_active_slot",
            "time_slot_id",
            unique=True,
            postgresql_where=text("status <> 'cancelled'"),
            sqlite_where=text("status <> 'cancelled'"),
        ),
        Index("ix_appointments_client_created", "client_id", "created_at"),
    )

    def __repr__(self):
        return f"<Appointment(id={self.id}, slot={self.time_slot_id}, status={self.status})>"

    @property
    def is_active(self) -> bool:
        return self.status != AppointmentStatus.CANCELLED.value

    def to_dict(self):
        """Convert to dictionary for API responses and event payloads"""
        return {
            "id": str(self.id),
            "client_id": str(self.client_id),
            "time_slot_id": str(self.time_slot_id) if self.time_slot_id else None,
            "service_id": str(self.service_id),
            "provider_id": str(self.provider_id),
            "appointment_date": self.appointment_date.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
            "cancelled_at": self.cancelled_at.isoformat() if self.cancelled_at else None,
            "cancellation_reason": self.cancellation_reason,
        }
