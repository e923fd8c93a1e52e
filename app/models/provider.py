# app/models/provider.py
"""
Provider Model - the public profile of a user who offers services.
Owns services and time slots; identity itself lives with the auth provider.
"""
from sqlalchemy import Column, String, DateTime, Text, Uuid
from sqlalchemy.orm import relationship
import enum
import uuid
from app.models.base import Base, utcnow


class UserRole(str, enum.Enum):
    """Role claimed by an authenticated caller."""
    CLIENT = "client"      # Books appointments
    PROVIDER = "provider"  # Publishes services and slots


class Provider(Base):
    __tablename__ = "providers"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # One profile per authenticated user (the token subject)
    user_id = Column(Uuid, nullable=False, unique=True, index=True)

    display_name = Column(String(200), nullable=False)
    bio = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    services = relationship(
        "Service",
        back_populates="provider",
        order_by="Service.name",
    )

    def __repr__(self):
        return f"<Provider(id={self.id}, display_name={self.display_name})>"

    def to_dict(self, include_services=False):
        """Convert to dictionary for API responses"""
        data = {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "display_name": self.display_name,
            "bio": self.bio,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }
        if include_services:
            data["services"] = [service.to_dict() for service in self.services]
        return data
