# hive_api/modules/subscriptions/entities.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from hive_api.modules.users.entities import new_id
from hive_api.utils.dates import utcnow

ACTIVE = "active"
CANCELLATION_PENDING = "cancellation_pending"
CANCELLED = "cancelled"

PAYMENT_PENDING = "pending"
PAYMENT_SUCCEEDED = "succeeded"
PAYMENT_FAILED = "failed"


@dataclass(kw_only=True)
class Subscription:
    id: str = field(default_factory=new_id)
    user_id: str
    plan_type: str
    plan_name: str
    status: str = ACTIVE
    start_date: datetime
    end_date: datetime
    cancellation_deadline: datetime
    price: Decimal
    auto_renew: bool = True
    payment_intent_id: str | None = None
    cancelled_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def is_current(self, now: datetime) -> bool:
        """Dá acesso ao plano: ativa ou com cancelamento pendente até end_date."""
        return self.status in (ACTIVE, CANCELLATION_PENDING) and now <= self.end_date

    def can_cancel(self, now: datetime) -> bool:
        return self.status == ACTIVE and now <= self.cancellation_deadline


@dataclass(kw_only=True)
class Payment:
    id: str = field(default_factory=new_id)
    user_id: str
    plan_type: str
    amount: Decimal
    currency: str
    payment_intent_id: str
    status: str = PAYMENT_PENDING
    subscription_id: str | None = None
    paid_at: datetime | None = None
    created_at: datetime = field(default_factory=utcnow)
