"""
User, Attendee and Organizer models.

Each attribute becomes a column. A User is created once at registration and
owns exactly one profile row: an Attendee when role is "attendee", an
Organizer when role is "organizer".

to_dict() returns the JSON shape used by the API (camelCase keys). The
password hash is never part of it.
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship

from eventos.database.db_connection import Base


class Role(str, enum.Enum):
    ATTENDEE = "attendee"
    ORGANIZER = "organizer"


def _new_id() -> str:
    return str(uuid.uuid4())


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("role IN ('attendee', 'organizer')", name="ck_users_role"),
    )

    id = Column(String(36), primary_key=True, default=_new_id)
    email = Column(String(255), unique=True, nullable=False, index=True)
    user_name = Column(String(100), unique=True, nullable=False, index=True)
    password = Column(String(255), nullable=False)  # hashed password
    name = Column(String(200), nullable=False)
    role = Column(String(20), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    attendee = relationship("Attendee", back_populates="user", uselist=False)
    organizer = relationship("Organizer", back_populates="user", uselist=False)

    def to_dict(self, include_profiles: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "email": self.email,
            "userName": self.user_name,
            "name": self.name,
            "role": self.role,
            "createdAt": _iso(self.created_at),
        }
        if include_profiles:
            data["attendee"] = self.attendee.to_dict() if self.attendee else None
            data["organizer"] = self.organizer.to_dict() if self.organizer else None
        return data

    def claims(self) -> Dict[str, str]:
        """Identity claims carried by issued tokens."""
        return {
            "sub": self.id,
            "email": self.email,
            "userName": self.user_name,
            "role": self.role,
        }


class Attendee(Base):
    __tablename__ = "attendees"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    phone = Column(String(50))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user = relationship("User", back_populates="attendee")

    def to_dict(self, include_user: bool = False) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "phone": self.phone,
            "createdAt": _iso(self.created_at),
        }
        if include_user:
            data["user"] = self.user.to_dict() if self.user else None
        return data


class Organizer(Base):
    __tablename__ = "organizers"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(36), ForeignKey("users.id"), unique=True, nullable=False)
    name = Column(String(200), nullable=False)
    organization = Column(String(200))
    phone = Column(String(50))
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)

    user = relationship("User", back_populates="organizer")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "organization": self.organization,
            "phone": self.phone,
            "createdAt": _iso(self.created_at),
        }


# Profile table per role; anything not listed here is not a persisted role.
PROFILE_MODELS = {
    Role.ATTENDEE.value: Attendee,
    Role.ORGANIZER.value: Organizer,
}
