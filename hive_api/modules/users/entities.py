# hive_api/modules/users/entities.py
from __future__ import annotations

from dataclasses import dataclass, field, fields
from decimal import Decimal
from typing import ClassVar, Union
from uuid import uuid4
from datetime import datetime

from hive_api.utils.dates import utcnow

VIEWER = "viewer"
PROVIDER = "provider"

DOCUMENT_TYPES = ("CPF", "CNPJ")
PLAN_TYPES = ("A", "B")
PLAN_STATUSES = ("inactive", "pending", "active")

REAL_ESTATE_CATEGORY = "imobiliaria"
MAX_SUBCATEGORIES = 3
MAX_PORTFOLIO_IMAGES = 10


def new_id() -> str:
    return str(uuid4())


@dataclass(kw_only=True)
class UserRecord:
    """Campos comuns a qualquer conta."""

    user_type: ClassVar[str]

    id: str = field(default_factory=new_id)
    email: str
    password_hash: str
    name: str
    is_active: bool = True
    profile_image_url: str | None = None
    phone_number: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    zip_code: str | None = None
    business_hours: str | None = None
    created_at: datetime = field(default_factory=utcnow)

    @property
    def is_provider(self) -> bool:
        return self.user_type == PROVIDER


@dataclass(kw_only=True)
class Viewer(UserRecord):
    user_type: ClassVar[str] = VIEWER


@dataclass(kw_only=True)
class Provider(UserRecord):
    user_type: ClassVar[str] = PROVIDER

    document_type: str
    document_number: str
    speciality: str = ""
    description: str = ""
    location: str = ""
    categories: list[str] = field(default_factory=list)
    subcategories: list[str] = field(default_factory=list)
    portfolio_images: list[str] = field(default_factory=list)
    plan_type: str = "A"
    plan_status: str = "pending"
    documents_verified: bool = False
    verified: bool = False
    rating: Decimal = Decimal("0")
    review_count: int = 0

    @property
    def is_real_estate(self) -> bool:
        return REAL_ESTATE_CATEGORY in self.categories

    @property
    def has_active_plan(self) -> bool:
        return self.plan_status == "active"


AuthUser = Union[Viewer, Provider]

# atributos que só existem no prestador
PROVIDER_ONLY_FIELDS = tuple(
    f.name for f in fields(Provider) if f.name not in {g.name for g in fields(UserRecord)}
)


def shared_fields(user: UserRecord) -> dict:
    """Campos de UserRecord, usados na promoção viewer -> provider."""
    return {
        "id": user.id,
        "email": user.email,
        "password_hash": user.password_hash,
        "name": user.name,
        "is_active": user.is_active,
        "profile_image_url": user.profile_image_url,
        "phone_number": user.phone_number,
        "address": user.address,
        "city": user.city,
        "state": user.state,
        "zip_code": user.zip_code,
        "business_hours": user.business_hours,
        "created_at": user.created_at,
    }
