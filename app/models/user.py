"""
User-related Pydantic models for request/response validation
"""
from dataclasses import dataclass
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional, Literal
from datetime import datetime


# Enums
UserType = Literal["landlord", "tenant", "agent"]
LISTING_ROLES = ("landlord", "agent")


# Request Models
class UserRegister(BaseModel):
    """User registration request"""
    full_name: str = Field(..., min_length=2)
    phone_number: str
    user_type: UserType
    email: Optional[EmailStr] = None
    id_number: Optional[str] = None


class UserLogin(BaseModel):
    """User login request"""
    phone_number: str


class UserUpdate(BaseModel):
    """User profile update request (phone number is immutable)"""
    full_name: Optional[str] = None
    email: Optional[EmailStr] = None


# Response Models
class UserResponse(BaseModel):
    """Public user projection"""
    id: str
    full_name: str
    phone_number: str
    email: Optional[str] = None
    user_type: UserType
    is_verified: bool = False
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True, extra="ignore")


class UnlockedProperty(BaseModel):
    property: Optional[dict] = None
    unlocked_at: Optional[datetime] = None
    transaction_id: str


class ProfileResponse(BaseModel):
    """Authenticated user profile with related listings"""
    user: UserResponse
    properties: list[dict] = []
    favorites: list[str] = []
    unlocked_properties: list[UnlockedProperty] = []


class AuthResponse(BaseModel):
    """Authentication response"""
    user: UserResponse
    token: str
    token_type: str = "bearer"
    expires_in: int


@dataclass(frozen=True)
class Viewer:
    """
    Identity of whoever is making a request.

    ``user`` is the stored user record, or None for an anonymous visitor.
    """

    user: Optional[dict] = None

    @classmethod
    def anonymous(cls) -> "Viewer":
        return cls(None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def id(self) -> Optional[str]:
        return self.user["id"] if self.user else None

    @property
    def role(self) -> Optional[str]:
        return self.user.get("user_type") if self.user else None
