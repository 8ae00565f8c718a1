"""
Property-related Pydantic models
"""
from pydantic import BaseModel, Field, field_validator
from typing import Optional, Literal


# Enums
PropertyType = Literal["bedsitter", "studio", "apartment", "1-bedroom", "2-bedroom", "3-bedroom", "commercial"]
Amenity = Literal["water", "electricity", "parking", "security", "furnished", "WiFi", "gym", "swimming pool"]
VisitorPolicy = Literal["allowed", "restricted"]


class PropertyRules(BaseModel):
    """House rules"""
    pets: bool = False
    children: bool = True
    visitors: VisitorPolicy = "allowed"
    deposit_months: int = Field(1, ge=0)


class PropertyRulesUpdate(BaseModel):
    """Partial rules update"""
    pets: Optional[bool] = None
    children: Optional[bool] = None
    visitors: Optional[VisitorPolicy] = None
    deposit_months: Optional[int] = Field(None, ge=0)


def _clean_list(values: Optional[list[str]]) -> Optional[list[str]]:
    if values is None:
        return None
    cleaned = []
    for value in values:
        value = value.strip()
        if value and value not in cleaned:
            cleaned.append(value)
    return cleaned


# Request Models
class PropertyCreate(BaseModel):
    """Create property request"""
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    area: Optional[str] = None
    nearby: list[str] = []
    property_type: PropertyType
    price: float = Field(..., ge=0)
    amenities: list[Amenity] = []
    rules: PropertyRules = PropertyRules()
    contact_person: Optional[str] = None
    contact_phone: Optional[str] = None

    @field_validator("title", "description", "location")
    @classmethod
    def not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("area", "contact_person", "contact_phone")
    @classmethod
    def strip_optional(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("nearby", "amenities")
    @classmethod
    def dedupe(cls, values: list[str]) -> list[str]:
        return _clean_list(values)


class PropertyUpdate(BaseModel):
    """Update property request (owner-mutable fields only)"""
    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = Field(None, min_length=1)
    area: Optional[str] = None
    nearby: Optional[list[str]] = None
    property_type: Optional[PropertyType] = None
    price: Optional[float] = Field(None, ge=0)
    amenities: Optional[list[Amenity]] = None
    rules: Optional[PropertyRulesUpdate] = None
    contact_person: Optional[str] = Field(None, min_length=1)
    contact_phone: Optional[str] = Field(None, min_length=1)
    is_active: Optional[bool] = None

    @field_validator("title", "description", "location", "contact_person", "contact_phone")
    @classmethod
    def not_blank(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("area")
    @classmethod
    def strip_area(cls, value: Optional[str]) -> Optional[str]:
        return value.strip() if value is not None else None

    @field_validator("nearby", "amenities")
    @classmethod
    def dedupe(cls, values: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_list(values)


class ImageCreate(BaseModel):
    """Add image request"""
    url: str
    is_primary: bool = False
