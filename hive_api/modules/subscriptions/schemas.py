from datetime import datetime
from decimal import Decimal
from typing import Literal, Optional

from hive_api.core.schemas import CamelModel
from hive_api.modules.users.schemas import UserOut


class CreateSubscriptionRequest(CamelModel):
    plan_type: Literal["A", "B"]


class CheckoutOut(CamelModel):
    client_secret: Optional[str] = None
    payment_intent_id: str
    amount: Decimal
    currency: str
    plan_type: str


class ConfirmPaymentRequest(CamelModel):
    payment_intent_id: str


class SubscriptionOut(CamelModel):
    id: str
    user_id: str
    plan_type: str
    plan_name: str
    status: str
    start_date: datetime
    end_date: datetime
    cancellation_deadline: datetime
    price: Decimal
    auto_renew: bool
    cancelled_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class SubscriptionEnvelope(CamelModel):
    success: bool = True
    subscription: SubscriptionOut


class ConfirmPaymentOut(SubscriptionEnvelope):
    user: UserOut


class CurrentSubscriptionOut(CamelModel):
    valid: bool
    subscription: Optional[SubscriptionOut] = None
    can_cancel: bool


class EligibilityOut(CamelModel):
    eligible: bool
    reason: Optional[str] = None
    cancellation_deadline: datetime


class WebhookAck(CamelModel):
    received: bool = True
    event: Optional[str] = None
    handled: bool = False
