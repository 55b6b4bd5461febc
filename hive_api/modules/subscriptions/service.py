# hive_api/modules/subscriptions/service.py
"""Ciclo de vida da assinatura.

pending (pagamento criado) -> active -> cancellation_pending -> cancelled,
ou active renovada por um novo pagamento do mesmo plano. Não há agendador:
assinaturas vencidas são encerradas quando o usuário é lido de novo.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Optional

from hive_api.core.config import settings
from hive_api.core.errors import ExternalServiceError, NotFound, PolicyViolation
from hive_api.integrations.stripe_client import PaymentGatewayError
from hive_api.modules.catalog.entities import Plan
from hive_api.modules.notifications import entities as notification_types
from hive_api.modules.notifications.service import notify
from hive_api.modules.subscriptions.entities import (
    ACTIVE,
    CANCELLATION_PENDING,
    CANCELLED,
    PAYMENT_FAILED,
    PAYMENT_SUCCEEDED,
    Payment,
    Subscription,
)
from hive_api.modules.users.entities import AuthUser, Provider
from hive_api.storage.base import Storage
from hive_api.utils.dates import utcnow

logger = logging.getLogger(__name__)


def billing_period() -> timedelta:
    return timedelta(days=settings.BILLING_PERIOD_DAYS)


def cancellation_grace() -> timedelta:
    return timedelta(days=settings.CANCELLATION_GRACE_DAYS)


def to_cents(amount: Decimal) -> int:
    return int((amount * 100).to_integral_value())


@dataclass
class Checkout:
    client_secret: Optional[str]
    payment_intent_id: str
    amount: Decimal
    currency: str
    plan_type: str


async def get_plan_or_404(storage: Storage, plan_type: str) -> Plan:
    plan = await storage.get_plan(plan_type)
    if plan is None:
        raise NotFound("Plano não encontrado")
    return plan


async def start_checkout(storage: Storage, gateway, user: AuthUser, plan_type: str) -> Checkout:
    """Cria o PaymentIntent e só então registra o pagamento pendente."""
    plan = await get_plan_or_404(storage, plan_type)
    currency = settings.CURRENCY.lower()
    try:
        intent = await gateway.create_payment_intent(
            amount=to_cents(plan.price),
            currency=currency,
            metadata={"userId": user.id, "planType": plan.type},
        )
    except PaymentGatewayError as exc:
        logger.error("Falha ao criar PaymentIntent user=%s plano=%s: %s", user.id, plan.type, exc.code)
        raise ExternalServiceError(
            "Não foi possível iniciar o pagamento. Nenhuma cobrança foi registrada; tente novamente."
        ) from exc

    payment = Payment(
        user_id=user.id,
        plan_type=plan.type,
        amount=plan.price,
        currency=currency,
        payment_intent_id=intent["id"],
    )
    await storage.add_payment(payment)
    logger.info("PaymentIntent %s criado user=%s plano=%s", intent["id"], user.id, plan.type)
    return Checkout(
        client_secret=intent.get("client_secret"),
        payment_intent_id=intent["id"],
        amount=plan.price,
        currency=currency,
        plan_type=plan.type,
    )


async def _activate_plan(storage: Storage, user_id: str, plan_type: str) -> None:
    # viewers ainda não têm plano; a promoção consulta a assinatura vigente
    await storage.update_user(user_id, {"plan_status": "active", "plan_type": plan_type})


async def apply_payment_success(
    storage: Storage, payment_intent_id: str, now: Optional[datetime] = None
) -> Optional[Subscription]:
    """Idempotente por payment_intent_id; reentregas devolvem a assinatura já criada."""
    now = now or utcnow()
    payment = await storage.claim_payment(payment_intent_id, PAYMENT_SUCCEEDED)
    if payment is None:
        existing = await storage.get_payment(payment_intent_id)
        if existing is None:
            logger.warning("Pagamento desconhecido %s ignorado", payment_intent_id)
            return None
        logger.info("Confirmação repetida para %s (status=%s)", payment_intent_id, existing.status)
        if existing.subscription_id:
            return await storage.get_subscription(existing.subscription_id)
        return None

    plan = await storage.get_plan(payment.plan_type)
    plan_name = plan.name if plan else f"Plano {payment.plan_type}"
    subscriptions = await storage.list_subscriptions(payment.user_id)
    current = next(
        (s for s in subscriptions if s.plan_type == payment.plan_type and s.is_current(now)),
        None,
    )
    if current is not None:
        current.end_date = max(current.end_date, now) + billing_period()
        current.status = ACTIVE
        current.auto_renew = True
        current.cancelled_at = None
        current.payment_intent_id = payment_intent_id
        current.updated_at = now
        subscription = await storage.save_subscription(current)
        logger.info("Assinatura %s renovada até %s", subscription.id, subscription.end_date.isoformat())
    else:
        subscription = await storage.add_subscription(Subscription(
            user_id=payment.user_id,
            plan_type=payment.plan_type,
            plan_name=plan_name,
            status=ACTIVE,
            start_date=now,
            end_date=now + billing_period(),
            cancellation_deadline=now + cancellation_grace(),
            price=payment.amount,
            auto_renew=True,
            payment_intent_id=payment_intent_id,
            created_at=now,
            updated_at=now,
        ))
        logger.info("Assinatura %s ativada user=%s plano=%s", subscription.id, payment.user_id, payment.plan_type)

    payment.subscription_id = subscription.id
    payment.paid_at = now
    await storage.save_payment(payment)
    await _activate_plan(storage, payment.user_id, payment.plan_type)
    await notify(
        storage,
        payment.user_id,
        notification_types.SUBSCRIPTION,
        "Assinatura ativa",
        f"Seu plano {plan_name} está ativo até {subscription.end_date:%d/%m/%Y}.",
        related_id=subscription.id,
    )
    return subscription


async def apply_payment_failure(storage: Storage, payment_intent_id: str) -> Optional[Payment]:
    payment = await storage.claim_payment(payment_intent_id, PAYMENT_FAILED)
    if payment is None:
        logger.info("Falha de pagamento %s já tratada ou desconhecida", payment_intent_id)
        return None
    logger.warning("Pagamento %s recusado user=%s", payment_intent_id, payment.user_id)
    await notify(
        storage,
        payment.user_id,
        notification_types.PAYMENT,
        "Pagamento recusado",
        "Não conseguimos confirmar seu pagamento. Tente novamente com outro meio de pagamento.",
        related_id=payment_intent_id,
    )
    return payment


async def confirm_payment(
    storage: Storage, gateway, user: AuthUser, payment_intent_id: str, now: Optional[datetime] = None
) -> Subscription:
    payment = await storage.get_payment(payment_intent_id)
    if payment is None or payment.user_id != user.id:
        raise NotFound("Pagamento não encontrado")
    if payment.status == PAYMENT_SUCCEEDED and payment.subscription_id:
        subscription = await storage.get_subscription(payment.subscription_id)
        if subscription is not None:
            return subscription

    try:
        intent = await gateway.retrieve_payment_intent(payment_intent_id)
    except PaymentGatewayError as exc:
        logger.error("Falha ao consultar PaymentIntent %s: %s", payment_intent_id, exc.code)
        raise ExternalServiceError("Não foi possível consultar o pagamento. Tente novamente.") from exc

    if intent.get("status") != "succeeded":
        raise PolicyViolation("Pagamento ainda não confirmado")
    subscription = await apply_payment_success(storage, payment_intent_id, now=now)
    if subscription is None:
        raise PolicyViolation("Pagamento ainda não confirmado")
    return subscription


async def get_owned_subscription(storage: Storage, user: AuthUser, subscription_id: str) -> Subscription:
    subscription = await storage.get_subscription(subscription_id)
    if subscription is None or subscription.user_id != user.id:
        raise NotFound("Assinatura não encontrada")
    return subscription


def cancellation_eligibility(subscription: Subscription, now: datetime) -> tuple[bool, Optional[str]]:
    if subscription.status == CANCELLATION_PENDING:
        return False, "Cancelamento já solicitado"
    if subscription.status == CANCELLED:
        return False, "Assinatura já cancelada"
    if now > subscription.cancellation_deadline:
        return False, f"Período de cancelamento de {settings.CANCELLATION_GRACE_DAYS} dias já expirou"
    return True, None


async def cancel_subscription(
    storage: Storage, user: AuthUser, subscription_id: str, now: Optional[datetime] = None
) -> Subscription:
    now = now or utcnow()
    subscription = await get_owned_subscription(storage, user, subscription_id)
    if subscription.status in (CANCELLATION_PENDING, CANCELLED):
        return subscription
    if now > subscription.cancellation_deadline:
        raise PolicyViolation(
            f"O período de cancelamento de {settings.CANCELLATION_GRACE_DAYS} dias já expirou. "
            "A assinatura será renovada automaticamente e um cancelamento posterior "
            "só terá efeito ao fim do período vigente."
        )

    subscription.status = CANCELLATION_PENDING
    subscription.cancelled_at = now
    subscription.auto_renew = False
    subscription.updated_at = now
    subscription = await storage.save_subscription(subscription)
    logger.info("Cancelamento solicitado assinatura=%s user=%s", subscription.id, user.id)
    await notify(
        storage,
        user.id,
        notification_types.SUBSCRIPTION,
        "Cancelamento solicitado",
        f"Seu plano continua ativo até {subscription.end_date:%d/%m/%Y}.",
        related_id=subscription.id,
    )
    return subscription


async def settle_subscriptions(storage: Storage, user: AuthUser, now: Optional[datetime] = None) -> AuthUser:
    """Encerra assinaturas vencidas e desativa o plano se nada mais vale."""
    now = now or utcnow()
    subscriptions = await storage.list_subscriptions(user.id)
    changed = False
    for s in subscriptions:
        if s.status in (ACTIVE, CANCELLATION_PENDING) and now > s.end_date:
            s.status = CANCELLED
            s.auto_renew = False
            s.updated_at = now
            await storage.save_subscription(s)
            changed = True
            logger.info("Assinatura %s encerrada ao fim do período", s.id)

    if changed and isinstance(user, Provider) and user.plan_status == "active":
        if not any(s.is_current(now) for s in subscriptions):
            user = await storage.update_user(user.id, {"plan_status": "inactive"}) or user
    return user


async def current_subscription(
    storage: Storage, user: AuthUser, now: Optional[datetime] = None
) -> tuple[bool, Optional[Subscription], bool]:
    """(valid, subscription, can_cancel) para a assinatura vigente mais recente."""
    now = now or utcnow()
    for s in await storage.list_subscriptions(user.id):
        if s.is_current(now):
            return True, s, s.can_cancel(now)
    return False, None, False
