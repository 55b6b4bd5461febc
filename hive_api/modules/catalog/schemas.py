from decimal import Decimal
from typing import List, Optional

from hive_api.core.schemas import CamelModel


class CategoryOut(CamelModel):
    id: str
    name: str
    icon: str
    slug: str
    audience: str
    provider_count: int
    subcategories: List[str] = []


class PlanOut(CamelModel):
    id: str
    name: str
    type: str
    price: Decimal
    features: List[str] = []
    target_audience: str
    popular: bool


class ServiceProviderOut(CamelModel):
    """Cartão público do prestador (sem documento nem e-mail)."""

    id: str
    name: str
    document_type: str
    speciality: str
    description: str
    location: str
    city: Optional[str] = None
    state: Optional[str] = None
    categories: List[str] = []
    subcategories: List[str] = []
    profile_image_url: Optional[str] = None
    portfolio_images: List[str] = []
    phone_number: Optional[str] = None
    business_hours: Optional[str] = None
    plan_type: str
    verified: bool
    rating: Decimal
    review_count: int
