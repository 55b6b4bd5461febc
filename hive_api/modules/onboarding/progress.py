# hive_api/modules/onboarding/progress.py
"""Progresso do cadastro do prestador.

Nada aqui é persistido: os passos são recalculados a partir dos campos
atuais do perfil a cada leitura.
"""
from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

from hive_api.modules.users.entities import REAL_ESTATE_CATEGORY, Provider

MIN_PROPERTIES_FOR_STEP = 3


@dataclass(frozen=True)
class ProfileStep:
    id: str
    title: str
    description: str
    weight: int
    required: bool
    completed: bool


@dataclass(frozen=True)
class ProfileProgress:
    percentage: int
    steps: list[ProfileStep]
    next_step: Optional[ProfileStep]
    threshold: int

    @property
    def is_complete(self) -> bool:
        return self.percentage >= self.threshold

    @property
    def dashboard_view(self) -> str:
        return "management" if self.is_complete else "checklist"


def _filled(*values) -> bool:
    for v in values:
        if isinstance(v, str):
            if not v.strip():
                return False
        elif not v:
            return False
    return True


def needs_properties_step(provider: Provider) -> bool:
    return provider.plan_type == "B" and REAL_ESTATE_CATEGORY in provider.categories


def profile_steps(provider: Provider, property_count: int = 0) -> list[ProfileStep]:
    p = provider
    steps = [
        ProfileStep(
            id="basic-info",
            title="Informações Básicas",
            description="Nome, foto de perfil e informações de contato",
            weight=20,
            required=True,
            completed=_filled(p.name, p.profile_image_url, p.email),
        ),
        ProfileStep(
            id="address",
            title="Endereço Completo",
            description="Localização para facilitar encontros com clientes",
            weight=15,
            required=True,
            completed=_filled(p.address, p.city, p.state, p.zip_code),
        ),
        ProfileStep(
            id="documents",
            title="Documentação",
            description="CPF verificado" if p.plan_type == "A" else "CNPJ e documentos empresariais",
            weight=20,
            required=True,
            completed=_filled(p.document_type, p.document_number, p.documents_verified),
        ),
        ProfileStep(
            id="categories",
            title="Categorias de Serviços",
            description="Especialize-se em áreas específicas",
            weight=25,
            required=True,
            completed=len(p.categories) > 0,
        ),
        ProfileStep(
            id="portfolio",
            title="Portfólio e Biografia",
            description="Mostre seus trabalhos e conte sua história",
            weight=20,
            required=False,
            completed=_filled(p.description) and len(p.portfolio_images) > 0,
        ),
    ]
    if needs_properties_step(p):
        steps.append(
            ProfileStep(
                id="properties",
                title="Cadastro de Imóveis",
                description=f"Adicione pelo menos {MIN_PROPERTIES_FOR_STEP} imóveis ao seu portfólio",
                weight=10,
                required=False,
                completed=property_count >= MIN_PROPERTIES_FOR_STEP,
            )
        )
    return steps


def completion_percentage(steps: list[ProfileStep]) -> int:
    total = sum(s.weight for s in steps)
    if total == 0:
        return 0
    done = sum(s.weight for s in steps if s.completed)
    ratio = Decimal(100 * done) / Decimal(total)
    return int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def compute_progress(provider: Provider, property_count: int = 0, threshold: int = 80) -> ProfileProgress:
    steps = profile_steps(provider, property_count)
    next_step = next((s for s in steps if not s.completed), None)
    return ProfileProgress(
        percentage=completion_percentage(steps),
        steps=steps,
        next_step=next_step,
        threshold=threshold,
    )
