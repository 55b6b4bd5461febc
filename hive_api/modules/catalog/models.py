from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import JSON, String, Integer, Boolean, Numeric
from hive_api.db.base import Base

class ServiceCategory(Base):
    __tablename__ = "service_categories"

    slug: Mapped[str] = mapped_column(String(60), primary_key=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    icon: Mapped[str] = mapped_column(String(60), nullable=False)
    audience: Mapped[str] = mapped_column(String(4), nullable=False, default="CPF")  # CPF | CNPJ
    provider_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    subcategories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)


class Plan(Base):
    __tablename__ = "plans"

    type: Mapped[str] = mapped_column(String(1), primary_key=True)  # A | B
    name: Mapped[str] = mapped_column(String(60), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    features: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    target_audience: Mapped[str] = mapped_column(String(4), nullable=False)
    popular: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
