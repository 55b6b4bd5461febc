# hive_api/modules/users/schemas.py
from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import EmailStr, Field

from hive_api.core.schemas import CamelModel


class UserOut(CamelModel):
    """Visão AuthUser; campos de prestador ficam nulos para viewers."""

    id: str
    email: str
    name: str
    user_type: str
    is_active: bool
    profile_image_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    business_hours: Optional[str] = None
    created_at: datetime

    # prestador
    document_type: Optional[str] = None
    document_number: Optional[str] = None
    speciality: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    categories: List[str] = []
    subcategories: List[str] = []
    portfolio_images: List[str] = []
    plan_type: Optional[str] = None
    plan_status: Optional[str] = None
    documents_verified: Optional[bool] = None
    is_verified: Optional[bool] = None
    rating: Optional[Decimal] = None
    review_count: Optional[int] = None
    completion_percentage: Optional[int] = None


class UserEnvelope(CamelModel):
    success: bool = True
    user: UserOut


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(default=None, min_length=2)
    email: Optional[EmailStr] = None
    profile_image_url: Optional[str] = None
    phone_number: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    business_hours: Optional[str] = None
    # só prestador
    speciality: Optional[str] = None
    description: Optional[str] = None
    location: Optional[str] = None
    document_type: Optional[str] = Field(default=None, pattern="^(CPF|CNPJ)$")
    document_number: Optional[str] = None
    portfolio_images: Optional[List[str]] = Field(default=None, max_length=10)


class CategoriesUpdate(CamelModel):
    category_ids: List[str] = Field(min_length=1)


class ProviderProfileUpdate(CamelModel):
    category_id: str
    subcategories: List[str] = Field(min_length=1)
    biography: str = Field(min_length=20)
    profile_image: Optional[str] = None
    portfolio_images: List[str] = []
