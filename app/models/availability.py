# ===== app/models/availability.py =====
from sqlalchemy import Column, Integer, Time, DateTime, ForeignKey, Index, CheckConstraint, Uuid
import uuid
from app.models.base import Base, utcnow

DAY_NAMES = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


class ProviderAvailability(Base):
    """Recurring weekly working hours a provider publishes slots within"""
    __tablename__ = "provider_availabilities"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    provider_id = Column(Uuid, ForeignKey("providers.id", ondelete="CASCADE"), nullable=False)

    day_of_week = Column(Integer, nullable=False)  # 0=Monday, 6=Sunday
    start_time = Column(Time, nullable=False)
    end_time = Column(Time, nullable=False)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_provider_availabilities_start_before_end"),
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="ck_provider_availabilities_day_of_week"),
        Index("ix_provider_availabilities_provider_day", "provider_id", "day_of_week", "start_time"),
    )

    def __repr__(self):
        return f"<ProviderAvailability(provider={self.provider_id}, day={self.day_of_week}, {self.start_time}-{self.end_time})>"

    @property
    def day_name(self) -> str:
        return DAY_NAMES[self.day_of_week]

    def to_dict(self):
        return {
            "id": str(self.id),
            "provider_id": str(self.provider_id),
            "day_of_week": self.day_of_week,
            "day_name": self.day_name,
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }
