from decimal import Decimal

from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy import JSON, String, Boolean, ForeignKey, Integer, Numeric, Text
from hive_api.db.base import Base, TimestampMixin

class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    email: Mapped[str] = mapped_column(String(200), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    user_type: Mapped[str] = mapped_column(String(20), nullable=False, default="viewer")  # viewer | provider
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    profile_image_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(30), nullable=True)
    address: Mapped[str | None] = mapped_column(String(300), nullable=True)
    city: Mapped[str | None] = mapped_column(String(120), nullable=True)
    state: Mapped[str | None] = mapped_column(String(60), nullable=True)
    zip_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    business_hours: Mapped[str | None] = mapped_column(String(200), nullable=True)


class UserProfile(Base, TimestampMixin):
    """Atributos de prestador (1:1 com users)."""
    __tablename__ = "user_profiles"

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), primary_key=True
    )
    document_type: Mapped[str] = mapped_column(String(4), nullable=False)       # CPF | CNPJ
    document_number: Mapped[str] = mapped_column(String(14), nullable=False)
    speciality: Mapped[str] = mapped_column(String(200), nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    location: Mapped[str] = mapped_column(String(300), nullable=False, default="")
    categories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    subcategories: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    portfolio_images: Mapped[list] = mapped_column(JSON, nullable=False, default=list)
    plan_type: Mapped[str] = mapped_column(String(1), nullable=False, default="A")
    plan_status: Mapped[str] = mapped_column(String(20), nullable=False, default="pending")
    documents_verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    rating: Mapped[Decimal] = mapped_column(Numeric(3, 2), nullable=False, default=0)
    review_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
