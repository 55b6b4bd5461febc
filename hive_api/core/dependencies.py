# hive_api/core/dependencies.py
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from hive_api.core.config import settings
from hive_api.core.errors import Forbidden, Unauthorized
from hive_api.core.sessions import SessionStore
from hive_api.integrations.stripe_client import StripeClient
from hive_api.modules.subscriptions.service import settle_subscriptions
from hive_api.modules.users.entities import REAL_ESTATE_CATEGORY, AuthUser, Provider
from hive_api.storage.base import Storage

logger = logging.getLogger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def get_storage(request: Request) -> Storage:
    return request.app.state.storage


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_payment_gateway() -> StripeClient:
    return StripeClient(
        api_key=settings.STRIPE_SECRET_KEY,
        base_url=settings.STRIPE_API_BASE,
        timeout=settings.STRIPE_TIMEOUT_SECONDS,
    )


@dataclass
class AuthContext:
    token: str
    user: AuthUser


async def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
) -> AuthContext:
    token = credentials.credentials if credentials else None
    entry = sessions.get(token)
    if entry is None:
        raise Unauthorized("Não autenticado")

    # sempre relê o usuário: a cópia da sessão pode estar defasada
    user = await storage.get_user(entry.user_id)
    if user is None or not user.is_active:
        # conta removida ou desativada: derruba todas as sessões dela
        dropped = sessions.delete_for_user(entry.user_id)
        logger.info("Sessões encerradas para usuário inativo %s: %d", entry.user_id, dropped)
        raise Unauthorized("Sessão inválida")
    user = await settle_subscriptions(storage, user)
    sessions.update(entry.token, user)
    return AuthContext(token=entry.token, user=user)


async def require_provider(ctx: AuthContext = Depends(require_auth)) -> AuthContext:
    if not isinstance(ctx.user, Provider):
        raise Forbidden("Acesso restrito a prestadores de serviço")
    return ctx


async def require_real_estate_provider(ctx: AuthContext = Depends(require_provider)) -> AuthContext:
    # categoria antes do status do plano
    if REAL_ESTATE_CATEGORY not in ctx.user.categories:
        raise Forbidden("Acesso restrito a prestadores da categoria imobiliária")
    if ctx.user.plan_status != "active":
        raise Forbidden("Plano inativo: conclua o pagamento para cadastrar imóveis")
    return ctx


async def require_business_plan(ctx: AuthContext = Depends(require_provider)) -> AuthContext:
    if ctx.user.plan_type != "B":
        raise Forbidden("Recurso disponível apenas no plano B")
    return ctx
