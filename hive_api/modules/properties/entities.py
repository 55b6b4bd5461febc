# hive_api/modules/properties/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from hive_api.modules.users.entities import new_id
from hive_api.utils.dates import utcnow

PRICE_TYPES = ("sale", "rent", "event")
PROPERTY_TYPES = ("apartment", "house", "commercial", "event_hall")
PROPERTY_STATUSES = ("available", "sold", "rented", "unavailable")


@dataclass(kw_only=True)
class Property:
    id: str = field(default_factory=new_id)
    title: str
    description: str
    price: Decimal
    price_type: str
    property_type: str
    location: str
    bedrooms: int | None = None
    bathrooms: int | None = None
    parking_spaces: int | None = None
    area: int | None = None
    image_url: str
    images: list[str] = field(default_factory=list)
    amenities: list[str] = field(default_factory=list)
    agency_name: str
    agency_id: str
    agency_logo: str | None = None
    status: str = "available"
    featured: bool = False
    views: int = 0
    created_by: str | None = None
    created_at: datetime = field(default_factory=utcnow)
