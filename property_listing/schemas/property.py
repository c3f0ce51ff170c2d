from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import ConfigDict, Field, field_validator

from .common import CamelModel


class PropertyFields(CamelModel):
    """Stored shape of a listing, without the checks applied to request bodies."""

    title: str
    type: str
    price: float
    state: str
    city: str
    area_sq_ft: float
    bedrooms: int
    bathrooms: int
    amenities: List[str] = []
    furnished: str = ""
    available_from: str = ""
    listed_by: str = ""
    tags: List[str] = []
    color_theme: str = ""
    rating: float = 0.0
    is_verified: bool = False
    listing_type: str = ""
    location: str = ""
    area: float = 0.0
    features: List[str] = []
    status: str = ""
    description: str = ""


class PropertyCreate(PropertyFields):
    title: str = Field(..., min_length=1)
    type: str = Field(..., min_length=1)
    price: float = Field(..., ge=0)
    state: str = Field(..., min_length=1)
    city: str = Field(..., min_length=1)
    area_sq_ft: float = Field(..., ge=0)
    bedrooms: int = Field(..., ge=0)
    bathrooms: int = Field(..., ge=0)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "title": "Sunny 2BHK near the lake",
                "type": "Apartment",
                "price": 4500000,
                "state": "Karnataka",
                "city": "Bangalore",
                "areaSqFt": 1150,
                "bedrooms": 2,
                "bathrooms": 2,
                "amenities": ["pool", "gym"],
                "furnished": "Semi",
                "tags": ["lake-view"],
                "isVerified": True,
                "listingType": "sale",
            }
        }
    )


class PropertyUpdate(CamelModel):
    """Partial update; only fields present in the request body are written."""

    title: Optional[str] = Field(None, min_length=1)
    type: Optional[str] = Field(None, min_length=1)
    price: Optional[float] = Field(None, ge=0)
    state: Optional[str] = Field(None, min_length=1)
    city: Optional[str] = Field(None, min_length=1)
    area_sq_ft: Optional[float] = Field(None, ge=0)
    bedrooms: Optional[int] = Field(None, ge=0)
    bathrooms: Optional[int] = Field(None, ge=0)
    amenities: Optional[List[str]] = None
    furnished: Optional[str] = None
    available_from: Optional[str] = None
    listed_by: Optional[str] = None
    tags: Optional[List[str]] = None
    color_theme: Optional[str] = None
    rating: Optional[float] = None
    is_verified: Optional[bool] = None
    listing_type: Optional[str] = None
    location: Optional[str] = None
    area: Optional[float] = None
    features: Optional[List[str]] = None
    status: Optional[str] = None
    description: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_unset=True, exclude_none=True)


class PropertyRead(PropertyFields):
    id: UUID
    created_by: UUID
    created_at: datetime
    updated_at: datetime

    @field_validator("amenities", "features", "tags", mode="before")
    @classmethod
    def none_as_empty_list(cls, v):
        return [] if v is None else v

    @field_validator(
        "furnished", "available_from", "listed_by", "color_theme",
        "listing_type", "location", "status", "description",
        mode="before",
    )
    @classmethod
    def none_as_empty_string(cls, v):
        return "" if v is None else v

    @field_validator("rating", "area", mode="before")
    @classmethod
    def none_as_zero(cls, v):
        return 0.0 if v is None else v
