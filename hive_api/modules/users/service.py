# hive_api/modules/users/service.py
from __future__ import annotations

import logging
from typing import Optional

from hive_api.core.config import settings
from hive_api.core.errors import (
    InvalidState,
    NotFound,
    PolicyViolation,
    Unauthorized,
    ValidationError,
    field_error,
)
from hive_api.core.security import hash_password, verify_password
from hive_api.modules.auth.schemas import ProviderData, RegisterProviderRequest, RegisterRequest
from hive_api.modules.onboarding.progress import compute_progress
from hive_api.modules.users.entities import (
    MAX_PORTFOLIO_IMAGES,
    MAX_SUBCATEGORIES,
    REAL_ESTATE_CATEGORY,
    AuthUser,
    Provider,
    Viewer,
    shared_fields,
)
from hive_api.modules.users.schemas import ProfileUpdate, ProviderProfileUpdate, UserOut
from hive_api.storage.base import Storage
from hive_api.utils.br import normalize_document, normalize_phone
from hive_api.utils.dates import utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Email ou senha incorretos"

# documento esperado para cada plano quando o pareamento é obrigatório
PLAN_DOCUMENT = {"A": "CPF", "B": "CNPJ"}


def _clean_email(email: str) -> str:
    return (email or "").strip().lower()


async def _check_categories(storage: Storage, slugs: list[str], field: str = "categories") -> list[str]:
    unknown = [s for s in slugs if await storage.get_category(s) is None]
    if unknown:
        raise ValidationError(
            "Categoria inválida",
            [field_error(field, f"Categoria desconhecida: {s}") for s in unknown],
        )
    # remove duplicadas mantendo a ordem
    return list(dict.fromkeys(slugs))


def _check_plan_pairing(data: ProviderData) -> None:
    if not settings.ENFORCE_DOCUMENT_PLAN_PAIRING:
        return
    expected = PLAN_DOCUMENT[data.plan_type]
    if data.document_type != expected:
        raise PolicyViolation(f"O plano {data.plan_type} exige {expected}")


async def register_viewer(storage: Storage, data: RegisterRequest) -> Viewer:
    user = Viewer(
        email=_clean_email(data.email),
        password_hash=hash_password(data.password),
        name=data.name.strip(),
    )
    user = await storage.add_user(user)
    logger.info("Novo usuário viewer id=%s", user.id)
    return user


async def register_provider(storage: Storage, data: RegisterProviderRequest) -> Provider:
    _check_plan_pairing(data)
    categories = await _check_categories(storage, data.categories)
    user = Provider(
        email=_clean_email(data.email),
        password_hash=hash_password(data.password),
        name=data.name.strip(),
        phone_number=normalize_phone(data.phone),
        document_type=data.document_type,
        document_number=data.document_number,
        speciality=data.speciality,
        description=data.description,
        location=data.location,
        categories=categories,
        plan_type=data.plan_type,
        plan_status="pending",
    )
    user = await storage.add_user(user)
    logger.info("Novo prestador id=%s plano=%s", user.id, user.plan_type)
    return user


async def authenticate(storage: Storage, email: str, password: str) -> AuthUser:
    user = await storage.get_user_by_email(_clean_email(email))
    if user is None or not verify_password(password, user.password_hash):
        logger.warning("Falha de login para %s", _clean_email(email))
        raise Unauthorized(INVALID_CREDENTIALS)
    if not user.is_active:
        logger.warning("Login de conta desativada %s", user.email)
        raise Unauthorized("Conta desativada")
    return user


async def _has_current_subscription(storage: Storage, user_id: str, plan_type: str) -> bool:
    now = utcnow()
    return any(
        s.plan_type == plan_type and s.is_current(now)
        for s in await storage.list_subscriptions(user_id)
    )


async def upgrade_to_provider(storage: Storage, user_id: str, data: ProviderData) -> Provider:
    """Promove um viewer a prestador.

    O plano nasce ``pending``, ou ``active`` quando o usuário já pagou uma
    assinatura vigente do mesmo plano. O chamador é quem atualiza a sessão
    com o usuário devolvido.
    """
    user = await storage.get_user(user_id)
    if user is None:
        raise NotFound("Usuário não encontrado")
    if isinstance(user, Provider):
        raise InvalidState("Usuário já é prestador")
    _check_plan_pairing(data)
    categories = await _check_categories(storage, data.categories)

    base = shared_fields(user)
    name = getattr(data, "name", None)
    if name:
        base["name"] = name.strip()
    base["phone_number"] = normalize_phone(data.phone)
    provider = Provider(
        **base,
        document_type=data.document_type,
        document_number=data.document_number,
        speciality=data.speciality,
        description=data.description,
        location=data.location,
        categories=categories,
        plan_type=data.plan_type,
        plan_status="pending",
    )
    provider = await storage.save_user(provider)
    # consulta depois de gravar: um pagamento confirmado a partir daqui já
    # encontra o prestador e ativa o plano sozinho
    if await _has_current_subscription(storage, user_id, provider.plan_type):
        provider = await _write(storage, user_id, {"plan_status": "active"})
    logger.info(
        "Usuário %s promovido a prestador (plano %s, %s)", user_id, provider.plan_type, provider.plan_status
    )
    return provider


async def _write(storage: Storage, user_id: str, changes: dict) -> AuthUser:
    updated = await storage.update_user(user_id, changes)
    if updated is None:
        raise NotFound("Usuário não encontrado")
    return updated


def _given(value):
    """Valor a gravar, ou None quando ausente ou em branco."""
    if isinstance(value, str):
        value = value.strip()
        return value or None
    return value


async def update_profile(storage: Storage, user: AuthUser, data: ProfileUpdate) -> AuthUser:
    current = await storage.get_user(user.id)
    if current is None:
        raise NotFound("Usuário não encontrado")

    changes = {}
    if data.email is not None:
        changes["email"] = _clean_email(data.email)
    for attr in ("name", "profile_image_url", "address", "city", "state", "zip_code", "business_hours"):
        value = _given(getattr(data, attr))
        if value is not None:
            changes[attr] = value
    if data.phone_number:
        changes["phone_number"] = normalize_phone(data.phone_number)

    if isinstance(current, Provider):
        for attr in ("speciality", "description", "location"):
            value = _given(getattr(data, attr))
            if value is not None:
                changes[attr] = value
        if data.document_type or data.document_number:
            doc_type = data.document_type or current.document_type
            number = normalize_document(doc_type, data.document_number or current.document_number)
            if number is None:
                raise ValidationError(
                    "Documento inválido",
                    [field_error("documentNumber", f"{doc_type} com tamanho inválido")],
                )
            if (doc_type, number) != (current.document_type, current.document_number):
                # documento trocado precisa ser verificado de novo
                changes.update(document_type=doc_type, document_number=number, documents_verified=False)
        if data.portfolio_images is not None:
            changes["portfolio_images"] = list(data.portfolio_images)

    if not changes:
        return current
    return await _write(storage, current.id, changes)


async def update_categories(storage: Storage, provider: Provider, category_ids: list[str]) -> Provider:
    if not category_ids:
        raise ValidationError("Selecione ao menos uma categoria", [field_error("categoryIds", "vazio")])
    current = await storage.get_user(provider.id)
    if not isinstance(current, Provider):
        raise NotFound("Prestador não encontrado")
    categories = await _check_categories(storage, category_ids, field="categoryIds")
    logger.info("Categorias atualizadas prestador=%s %s", current.id, categories)
    return await _write(storage, current.id, {"categories": categories})


async def update_provider_profile(
    storage: Storage, provider: Provider, data: ProviderProfileUpdate
) -> Provider:
    current = await storage.get_user(provider.id)
    if not isinstance(current, Provider):
        raise NotFound("Prestador não encontrado")

    category = await storage.get_category(data.category_id)
    if category is None:
        raise ValidationError("Categoria inválida", [field_error("categoryId", "Categoria desconhecida")])
    if category.audience == "CNPJ" and current.plan_type != "B":
        raise PolicyViolation("Categoria disponível apenas para o plano B (CNPJ)")

    subcategories = list(dict.fromkeys(data.subcategories))
    if len(subcategories) > MAX_SUBCATEGORIES:
        raise PolicyViolation(f"Selecione no máximo {MAX_SUBCATEGORIES} subcategorias")
    unknown = [s for s in subcategories if s not in category.subcategories]
    if unknown:
        raise ValidationError(
            "Subcategoria inválida",
            [field_error("subcategories", f"Subcategoria desconhecida: {s}") for s in unknown],
        )
    if len(data.portfolio_images) > MAX_PORTFOLIO_IMAGES:
        raise ValidationError(
            "Portfólio muito grande",
            [field_error("portfolioImages", f"Máximo de {MAX_PORTFOLIO_IMAGES} imagens")],
        )

    changes = {
        "categories": [category.slug],
        "subcategories": subcategories,
        "description": data.biography.strip(),
    }
    if data.profile_image:
        changes["profile_image_url"] = data.profile_image
    if data.portfolio_images:
        changes["portfolio_images"] = list(data.portfolio_images)
    return await _write(storage, current.id, changes)


async def property_count(storage: Storage, user: AuthUser) -> int:
    if isinstance(user, Provider) and user.is_real_estate:
        return await storage.count_properties_by_owner(user.id)
    return 0


async def build_user_view(storage: Storage, user: AuthUser) -> UserOut:
    out = UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        user_type=user.user_type,
        is_active=user.is_active,
        profile_image_url=user.profile_image_url,
        phone_number=user.phone_number,
        address=user.address,
        city=user.city,
        state=user.state,
        zip_code=user.zip_code,
        business_hours=user.business_hours,
        created_at=user.created_at,
    )
    if isinstance(user, Provider):
        progress = compute_progress(
            user, await property_count(storage, user), settings.ONBOARDING_COMPLETE_THRESHOLD
        )
        out = out.model_copy(update=dict(
            document_type=user.document_type,
            document_number=user.document_number,
            speciality=user.speciality,
            description=user.description,
            location=user.location,
            categories=list(user.categories),
            subcategories=list(user.subcategories),
            portfolio_images=list(user.portfolio_images),
            plan_type=user.plan_type,
            plan_status=user.plan_status,
            documents_verified=user.documents_verified,
            is_verified=user.verified,
            rating=user.rating,
            review_count=user.review_count,
            completion_percentage=progress.percentage,
        ))
    return out


async def get_public_provider(storage: Storage, provider_id: str) -> Optional[Provider]:
    user = await storage.get_user(provider_id)
    if not isinstance(user, Provider) or not user.is_active:
        return None
    return user
