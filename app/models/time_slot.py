# ===== app/models/time_slot.py =====
from sqlalchemy import (
    Column, Boolean, Date, DateTime, ForeignKey, Index, Time, UniqueConstraint, CheckConstraint, Uuid
)
from sqlalchemy.orm import relationship
import uuid
from app.models.base import Base, utcnow


class TimeSlot(Base):
    """
    A provider-defined bookable window for one service.

    ``is_available`` is true exactly when no non-cancelled appointment
    references the slot; only the booking engine flips it.
    """
    __tablename__ = "time_slots"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    provider_id = Column(Uuid, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)
    service_id = Column(Uuid, ForeignKey("services.id"), nullable=False, index=True)

    day = Column(Date, nullable=False)
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    is_available = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    service = relationship("Service")

    __table_args__ = (
        UniqueConstraint(
            "provider_id", "day", "start_time", "end_time",
            name="uq_time_slots_provider_window",
        ),
        CheckConstraint("start_time < end_time", name="ck_time_slots_start_before_end"),
        Index("ix_time_slots_provider_day_start", "provider_id", "day", "start_time"),
        Index("ix_time_slots_available_day", "is_available", "day"),
    )

    def __repr__(self):
        return f"<TimeSlot(id={self.id}, day={self.day}, start={self.start_time}, available={self.is_available})>"

    @property
    def duration_minutes(self) -> int:
        start = self.start_time.hour * 60 + self.start_time.minute
        end = self.end_time.hour * 60 + self.end_time.minute
        return end - start

    def to_dict(self):
        return {
            "id": str(self.id),
            "provider_id": str(self.provider_id),
            "service_id": str(self.service_id),
            "day": self.day.isoformat(),
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
            "is_available": self.is_available,
        }
