# hive_api/modules/properties/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Literal, Optional

from pydantic import AnyHttpUrl, Field

from hive_api.core.schemas import CamelModel


class PropertyCreate(CamelModel):
    title: str = Field(min_length=5)
    description: str = Field(min_length=20)
    price: Decimal = Field(gt=0)
    price_type: Literal["sale", "rent", "event"]
    property_type: Literal["apartment", "house", "commercial", "event_hall"]
    location: str = Field(min_length=5)
    bedrooms: Optional[int] = Field(default=None, ge=0)
    bathrooms: int = Field(ge=1)
    parking_spaces: Optional[int] = Field(default=None, ge=0)
    area: int = Field(ge=1)
    image_url: AnyHttpUrl
    images: List[AnyHttpUrl] = []
    amenities: List[str] = []


class PropertyOut(CamelModel):
    id: str
    title: str
    description: str
    price: Decimal
    price_type: str
    property_type: str
    location: str
    bedrooms: Optional[int] = None
    bathrooms: Optional[int] = None
    parking_spaces: Optional[int] = None
    area: Optional[int] = None
    image_url: str
    images: List[str] = []
    amenities: List[str] = []
    agency_name: str
    agency_id: str
    agency_logo: Optional[str] = None
    status: str
    featured: bool
    views: int
    created_by: Optional[str] = None
    created_at: datetime


class ViewsOut(CamelModel):
    id: str
    views: int
