# hive_api/modules/catalog/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal


@dataclass(kw_only=True)
class ServiceCategory:
    slug: str
    name: str
    icon: str
    audience: str = "CPF"            # CPF | CNPJ
    provider_count: int = 0
    subcategories: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return self.slug


@dataclass(kw_only=True)
class Plan:
    type: str                        # A | B
    name: str
    price: Decimal
    features: list[str] = field(default_factory=list)
    target_audience: str = "CPF"
    popular: bool = False

    @property
    def id(self) -> str:
        return self.type
