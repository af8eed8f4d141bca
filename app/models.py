# app/models.py
import enum
from datetime import timezone

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    JSON,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship, validates

from .db import Base
from .utils import new_id, utcnow


class UserRole(str, enum.Enum):
    PROVIDER = "PROVIDER"
    SEEKER = "SEEKER"


class FarmlandStatus(str, enum.Enum):
    PUBLIC = "PUBLIC"
    PRIVATE = "PRIVATE"


# API name -> column attribute
FACILITY_COLUMNS = {
    "shed": "shed",
    "toilet": "toilet",
    "water": "water",
    "electricity": "electricity",
    "signal5g": "signal_5g",
    "signal4g": "signal_4g",
    "parking": "parking",
}


def _aware(v):
    if v is None:
        return None
    return v if v.tzinfo else v.replace(tzinfo=timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True, default=new_id)
    email = Column(String(255), unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)
    name = Column(String(100), nullable=True)
    phone = Column(String(30), nullable=True)
    profile_image = Column(Text, nullable=True)  # URL or base64 data URI
    role = Column(Enum(UserRole, name="user_role"), nullable=False, default=UserRole.SEEKER)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    farmlands = relationship("Farmland", back_populates="provider")
    favorites = relationship("Favorite", back_populates="user", cascade="all, delete-orphan")

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role={self.role})>"


class Farmland(Base):
    __tablename__ = "farmlands"

    # time-prefixed ids: descending id order is newest-first
    id = Column(String, primary_key=True, index=True, default=new_id)
    name = Column(String(200), nullable=True)
    prefecture = Column(String(50), nullable=False, index=True)
    city = Column(String(100), nullable=False, index=True)
    address = Column(String(255), nullable=False)

    area = Column(Float, nullable=False)  # square meters
    price = Column(Float, nullable=True)  # monthly rent; NULL = negotiable

    available_from = Column(DateTime(timezone=True), nullable=False)
    available_to = Column(DateTime(timezone=True), nullable=True)

    description = Column(Text, nullable=True)
    latitude = Column(Float, nullable=True)
    longitude = Column(Float, nullable=True)
    images = Column(JSON, nullable=False, default=list)

    shed = Column(Boolean, nullable=False, default=False)
    toilet = Column(Boolean, nullable=False, default=False)
    water = Column(Boolean, nullable=False, default=False)
    electricity = Column(Boolean, nullable=False, default=False)
    signal_5g = Column(Boolean, nullable=False, default=False)
    signal_4g = Column(Boolean, nullable=False, default=False)
    parking = Column(Boolean, nullable=False, default=False)

    status = Column(
        Enum(FarmlandStatus, name="farmland_status"),
        nullable=False,
        default=FarmlandStatus.PUBLIC,
        index=True,
    )

    provider_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    provider = relationship("User", back_populates="farmlands")
    favorites = relationship("Favorite", back_populates="farmland", cascade="all, delete-orphan")

    @validates("area")
    def _positive_area(self, _, v):
        if v is None or v <= 0:
            raise ValueError("area must be greater than 0")
        return v

    @validates("available_from", "available_to")
    def _tz(self, _, v):
        return _aware(v)

    @property
    def facilities(self) -> dict[str, bool]:
        return {key: bool(getattr(self, attr)) for key, attr in FACILITY_COLUMNS.items()}

    @facilities.setter
    def facilities(self, value: dict[str, bool] | None) -> None:
        value = value or {}
        for key, attr in FACILITY_COLUMNS.items():
            setattr(self, attr, bool(value.get(key, False)))

    def __repr__(self):
        return f"<Farmland(id={self.id}, prefecture='{self.prefecture}', city='{self.city}', area={self.area})>"


class Favorite(Base):
    __tablename__ = "favorites"
    __table_args__ = (UniqueConstraint("user_id", "farmland_id", name="uq_favorite_user_farmland"),)

    id = Column(String, primary_key=True, index=True, default=new_id)
    user_id = Column(String, ForeignKey("users.id"), nullable=False, index=True)
    farmland_id = Column(String, ForeignKey("farmlands.id"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    user = relationship("User", back_populates="favorites")
    farmland = relationship("Farmland", back_populates="favorites")
