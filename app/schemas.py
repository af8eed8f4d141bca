# app/schemas.py
import re
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from app.models import FarmlandStatus, UserRole
from app.utils import to_aware_utc


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    class Config:
        alias_generator = to_camel
        populate_by_name = True
        from_attributes = True


# ---------- listings ----------

class Facilities(CamelModel):
    shed: bool = False
    toilet: bool = False
    water: bool = False
    electricity: bool = False
    signal5g: bool = False
    signal4g: bool = False
    parking: bool = False

    # wire names are the field names ("signal5g", not "signal5G")
    class Config:
        alias_generator = None
        extra = "forbid"


class ProviderSummary(CamelModel):
    id: str
    name: Optional[str] = None
    email: str


class ListingOut(CamelModel):
    id: str
    name: Optional[str] = None
    prefecture: str
    city: str
    address: str
    area: float
    price: Optional[float] = None
    description: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    available_from: datetime
    available_to: Optional[datetime] = None
    images: List[str] = Field(default_factory=list)
    facilities: Facilities = Field(default_factory=Facilities)
    status: FarmlandStatus
    provider: Optional[ProviderSummary] = None


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class ListingPage(CamelModel):
    data: List[ListingOut]
    pagination: Pagination


class FarmlandCreate(CamelModel):
    name: Optional[str] = None
    prefecture: str = Field(..., min_length=2)
    city: str = Field(..., min_length=2)
    address: str = Field(..., min_length=3)
    area: float = Field(..., gt=0)
    price: Optional[float] = Field(None, ge=0)
    available_from: datetime
    available_to: Optional[datetime] = None
    description: Optional[str] = None
    latitude: Optional[float] = Field(None, ge=-90, le=90)
    longitude: Optional[float] = Field(None, ge=-180, le=180)
    images: Optional[List[str]] = None
    facilities: Optional[Facilities] = None

    @field_validator("available_from", "available_to", mode="before")
    @classmethod
    def _parse_ts(cls, v: Any):
        if v in (None, ""):
            return None
        return to_aware_utc(v)

    @model_validator(mode="after")
    def _period_order(self):
        if self.available_to is not None and self.available_to < self.available_from:
            raise ValueError("availableTo must not be earlier than availableFrom")
        return self


class FarmlandCreated(BaseModel):
    message: str
    farmland: ListingOut


# ---------- favorites ----------

class FavoriteCreate(CamelModel):
    farmland_id: str = Field(..., min_length=1)


class FavoriteListingOut(ListingOut):
    favorite_id: str
    favorited_at: datetime


class FavoriteList(BaseModel):
    data: List[FavoriteListingOut]
    total: int


class FavoriteStatus(CamelModel):
    is_favorite: bool
    favorite_id: Optional[str] = None


# ---------- users ----------

class UserCreate(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=8)
    name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole


class UserOut(CamelModel):
    id: str
    email: str
    name: Optional[str] = None
    phone: Optional[str] = None
    profile_image: Optional[str] = None
    role: UserRole


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenOut(CamelModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


class TokenData(BaseModel):
    sub: Optional[str] = None
    role: Optional[UserRole] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=1)
    phone: Optional[str] = None
    profile_image: Optional[str] = None


class PasswordChange(CamelModel):
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8)
    confirm_password: str

    @field_validator("new_password")
    @classmethod
    def _strength(cls, v: str) -> str:
        if not re.search(r"[A-Z]", v):
            raise ValueError("must contain at least one uppercase letter")
        if not re.search(r"[a-z]", v):
            raise ValueError("must contain at least one lowercase letter")
        if not re.search(r"[0-9]", v):
            raise ValueError("must contain at least one digit")
        return v

    @model_validator(mode="after")
    def _confirmed(self):
        if self.new_password != self.confirm_password:
            raise ValueError("confirmPassword does not match newPassword")
        return self
