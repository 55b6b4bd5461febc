# hive_api/modules/auth/schemas.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import EmailStr, Field, field_validator, model_validator

from hive_api.core.schemas import CamelModel
from hive_api.modules.users.schemas import UserOut
from hive_api.utils.br import DOCUMENT_LENGTHS, only_digits


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(min_length=6)


class RegisterRequest(CamelModel):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)


class ProviderData(CamelModel):
    document_type: Literal["CPF", "CNPJ"]
    document_number: str
    speciality: str = Field(min_length=5)
    description: str = Field(min_length=20)
    location: str = Field(min_length=5)
    categories: List[str] = Field(min_length=1)
    phone: str = Field(min_length=10)
    plan_type: Literal["A", "B"]

    @field_validator("document_number")
    @classmethod
    def _digits_only(cls, v: str) -> str:
        digits = only_digits(v)
        if len(digits) not in DOCUMENT_LENGTHS.values():
            raise ValueError("Documento deve ter 11 dígitos (CPF) ou 14 dígitos (CNPJ)")
        return digits

    @model_validator(mode="after")
    def _document_matches_type(self):
        expected = DOCUMENT_LENGTHS[self.document_type]
        if len(self.document_number) != expected:
            raise ValueError(f"{self.document_type} deve ter {expected} dígitos")
        return self


class RegisterProviderRequest(ProviderData):
    name: str = Field(min_length=2)
    email: EmailStr
    password: str = Field(min_length=6)


class UpgradeRequest(ProviderData):
    name: Optional[str] = Field(default=None, min_length=2)


class AuthOut(CamelModel):
    success: bool = True
    user: UserOut
    session_token: str


class MeOut(CamelModel):
    user: UserOut
