import json
import logging
from typing import List

from fastapi import APIRouter, Depends, Request, status

from hive_api.core.config import settings
from hive_api.core.dependencies import AuthContext, get_payment_gateway, get_sessions, get_storage, require_auth
from hive_api.core.errors import NotFound, Unauthorized, ValidationError
from hive_api.core.sessions import SessionStore
from hive_api.integrations.stripe_client import verify_stripe_signature
from hive_api.modules.users import service as users
from hive_api.storage.base import Storage
from hive_api.utils.dates import utcnow
from . import service
from .schemas import (
    CheckoutOut,
    ConfirmPaymentOut,
    ConfirmPaymentRequest,
    CreateSubscriptionRequest,
    CurrentSubscriptionOut,
    EligibilityOut,
    SubscriptionEnvelope,
    SubscriptionOut,
    WebhookAck,
)

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/create-subscription", response_model=CheckoutOut)
async def create_subscription(
    payload: CreateSubscriptionRequest,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
    gateway=Depends(get_payment_gateway),
):
    checkout = await service.start_checkout(storage, gateway, ctx.user, payload.plan_type)
    return CheckoutOut.model_validate(checkout)


@router.post("/subscriptions/confirm", response_model=ConfirmPaymentOut)
async def confirm_subscription(
    payload: ConfirmPaymentRequest,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
    sessions: SessionStore = Depends(get_sessions),
    gateway=Depends(get_payment_gateway),
):
    subscription = await service.confirm_payment(storage, gateway, ctx.user, payload.payment_intent_id)
    # devolve o usuário relido para o cliente ver o planStatus novo
    user = await storage.get_user(ctx.user.id)
    if user is None:
        raise NotFound("Usuário não encontrado")
    sessions.update(ctx.token, user)
    return ConfirmPaymentOut(
        subscription=SubscriptionOut.model_validate(subscription),
        user=await users.build_user_view(storage, user),
    )


@router.get("/subscriptions", response_model=List[SubscriptionOut])
async def list_subscriptions(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    return [SubscriptionOut.model_validate(s) for s in await storage.list_subscriptions(ctx.user.id)]


@router.get("/subscriptions/current", response_model=CurrentSubscriptionOut)
async def current_subscription(ctx: AuthContext = Depends(require_auth), storage: Storage = Depends(get_storage)):
    valid, subscription, can_cancel = await service.current_subscription(storage, ctx.user)
    return CurrentSubscriptionOut(
        valid=valid,
        subscription=SubscriptionOut.model_validate(subscription) if subscription else None,
        can_cancel=can_cancel,
    )


@router.get("/subscriptions/{subscription_id}/cancellation-eligibility", response_model=EligibilityOut)
async def cancellation_eligibility(
    subscription_id: str,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    subscription = await service.get_owned_subscription(storage, ctx.user, subscription_id)
    eligible, reason = service.cancellation_eligibility(subscription, utcnow())
    return EligibilityOut(
        eligible=eligible, reason=reason, cancellation_deadline=subscription.cancellation_deadline
    )


@router.post("/subscriptions/{subscription_id}/cancel", response_model=SubscriptionEnvelope)
async def cancel_subscription(
    subscription_id: str,
    ctx: AuthContext = Depends(require_auth),
    storage: Storage = Depends(get_storage),
):
    subscription = await service.cancel_subscription(storage, ctx.user, subscription_id)
    return SubscriptionEnvelope(subscription=SubscriptionOut.model_validate(subscription))


@router.post("/webhooks/stripe", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def stripe_webhook(request: Request, storage: Storage = Depends(get_storage)):
    payload = await request.body()
    secret = settings.STRIPE_WEBHOOK_SECRET
    if secret:
        ok = verify_stripe_signature(
            payload,
            request.headers.get("stripe-signature"),
            secret,
            tolerance=settings.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
        )
        if not ok:
            logger.warning("Webhook Stripe com assinatura inválida")
            raise Unauthorized("Assinatura do webhook inválida")
    else:
        logger.warning("STRIPE_WEBHOOK_SECRET não configurado; webhook aceito sem verificação")

    try:
        event = json.loads(payload or b"{}")
    except ValueError as exc:
        raise ValidationError("JSON inválido") from exc
    if not isinstance(event, dict):
        raise ValidationError("Evento inválido")

    event_type = event.get("type")
    intent = (event.get("data") or {}).get("object") or {}
    intent_id = intent.get("id")
    logger.info("Webhook Stripe %s intent=%s", event_type, intent_id)

    if not intent_id:
        return WebhookAck(event=event_type)
    if event_type == "payment_intent.succeeded":
        await service.apply_payment_success(storage, intent_id)
        return WebhookAck(event=event_type, handled=True)
    if event_type == "payment_intent.payment_failed":
        await service.apply_payment_failure(storage, intent_id)
        return WebhookAck(event=event_type, handled=True)
    return WebhookAck(event=event_type)
