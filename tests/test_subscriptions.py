from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from hive_api.core.errors import ExternalServiceError, NotFound, PolicyViolation
from hive_api.modules.subscriptions import service
from hive_api.modules.subscriptions.entities import ACTIVE, CANCELLATION_PENDING, CANCELLED
from hive_api.modules.users.entities import Provider, Viewer
from hive_api.storage.memory import MemoryStorage
from hive_api.storage.seed import seed_catalog

from helpers import FakeGateway

pytestmark = pytest.mark.anyio

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
async def storage():
    s = MemoryStorage()
    await seed_catalog(s)
    return s


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
async def agency(storage):
    return await storage.add_user(Provider(
        email="agency@example.com",
        password_hash="x",
        name="Premium Imóveis",
        document_type="CNPJ",
        document_number="12345678000123",
        categories=["imobiliaria"],
        plan_type="B",
        plan_status="pending",
    ))


async def subscribe(storage, gateway, user, plan_type="B", now=NOW):
    checkout = await service.start_checkout(storage, gateway, user, plan_type)
    gateway.succeed(checkout.payment_intent_id)
    return await service.apply_payment_success(storage, checkout.payment_intent_id, now=now)


class TestCheckout:
    async def test_records_pending_payment(self, storage, gateway, agency):
        checkout = await service.start_checkout(storage, gateway, agency, "B")
        assert checkout.amount == Decimal("59.00")
        assert checkout.currency == "brl"
        assert checkout.client_secret == "pi_test_1_secret_abc"
        assert gateway.intents["pi_test_1"]["amount"] == 5900
        assert gateway.intents["pi_test_1"]["metadata"] == {"userId": agency.id, "planType": "B"}

        payment = await storage.get_payment(checkout.payment_intent_id)
        assert payment.status == "pending"
        assert payment.user_id == agency.id

    async def test_gateway_failure_records_nothing(self, storage, gateway, agency):
        gateway.fail = True
        with pytest.raises(ExternalServiceError):
            await service.start_checkout(storage, gateway, agency, "B")
        assert await storage.get_payment("pi_test_1") is None
        assert await storage.list_subscriptions(agency.id) == []
        assert (await storage.get_user(agency.id)).plan_status == "pending"

    async def test_unknown_plan(self, storage, gateway, agency):
        with pytest.raises(NotFound):
            await service.start_checkout(storage, gateway, agency, "Z")


class TestPaymentSuccess:
    async def test_creates_subscription_and_activates_plan(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        assert sub.status == ACTIVE
        assert sub.start_date == NOW
        assert sub.end_date == NOW + timedelta(days=30)
        assert sub.cancellation_deadline == NOW + timedelta(days=7)
        assert sub.plan_name == "HIVE GOLD"
        assert sub.price == Decimal("59.00")

        user = await storage.get_user(agency.id)
        assert user.plan_status == "active"
        notes = await storage.list_notifications(agency.id)
        assert [n.type for n in notes] == ["subscription"]

    async def test_redelivery_is_idempotent(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        again = await service.apply_payment_success(storage, sub.payment_intent_id, now=NOW + timedelta(hours=1))
        assert again.id == sub.id
        assert again.end_date == sub.end_date
        assert len(await storage.list_subscriptions(agency.id)) == 1
        assert len(await storage.list_notifications(agency.id)) == 1

    async def test_unknown_intent_is_ignored(self, storage):
        assert await service.apply_payment_success(storage, "pi_unknown", now=NOW) is None

    async def test_failed_payment_cannot_succeed_later(self, storage, gateway, agency):
        checkout = await service.start_checkout(storage, gateway, agency, "B")
        failed = await service.apply_payment_failure(storage, checkout.payment_intent_id)
        assert failed.status == "failed"
        assert await service.apply_payment_success(storage, checkout.payment_intent_id, now=NOW) is None
        assert await storage.list_subscriptions(agency.id) == []
        assert (await storage.get_user(agency.id)).plan_status == "pending"

    async def test_renewal_extends_current_subscription(self, storage, gateway, agency):
        first = await subscribe(storage, gateway, agency, now=NOW)
        renewed = await subscribe(storage, gateway, agency, now=NOW + timedelta(days=20))
        assert renewed.id == first.id
        assert renewed.end_date == NOW + timedelta(days=60)
        assert renewed.status == ACTIVE

    async def test_other_plan_starts_new_subscription(self, storage, gateway, agency):
        first = await subscribe(storage, gateway, agency, "B", now=NOW)
        second = await subscribe(storage, gateway, agency, "A", now=NOW + timedelta(days=1))
        assert second.id != first.id
        assert (await storage.get_user(agency.id)).plan_type == "A"


class TestConfirmPayment:
    async def test_not_yet_succeeded(self, storage, gateway, agency):
        checkout = await service.start_checkout(storage, gateway, agency, "B")
        with pytest.raises(PolicyViolation):
            await service.confirm_payment(storage, gateway, agency, checkout.payment_intent_id, now=NOW)

    async def test_confirms_and_is_repeatable(self, storage, gateway, agency):
        checkout = await service.start_checkout(storage, gateway, agency, "B")
        gateway.succeed(checkout.payment_intent_id)
        sub = await service.confirm_payment(storage, gateway, agency, checkout.payment_intent_id, now=NOW)
        again = await service.confirm_payment(storage, gateway, agency, checkout.payment_intent_id, now=NOW)
        assert sub.id == again.id

    async def test_someone_elses_payment(self, storage, gateway, agency):
        checkout = await service.start_checkout(storage, gateway, agency, "B")
        intruder = await storage.add_user(Viewer(email="x@example.com", password_hash="x", name="Intruso"))
        with pytest.raises(NotFound):
            await service.confirm_payment(storage, gateway, intruder, checkout.payment_intent_id)

    async def test_gateway_down(self, storage, gateway, agency):
        checkout = await service.start_checkout(storage, gateway, agency, "B")
        gateway.fail = True
        with pytest.raises(ExternalServiceError):
            await service.confirm_payment(storage, gateway, agency, checkout.payment_intent_id)


class TestCancellationWindow:
    async def test_cancel_at_exact_deadline(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        deadline = sub.cancellation_deadline
        eligible, reason = service.cancellation_eligibility(sub, deadline)
        assert eligible and reason is None

        cancelled = await service.cancel_subscription(storage, agency, sub.id, now=deadline)
        assert cancelled.status == CANCELLATION_PENDING
        assert cancelled.cancelled_at == deadline
        assert cancelled.auto_renew is False

    async def test_one_microsecond_late(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        late = sub.cancellation_deadline + timedelta(microseconds=1)
        eligible, reason = service.cancellation_eligibility(sub, late)
        assert not eligible
        assert reason == "Período de cancelamento de 7 dias já expirou"
        with pytest.raises(PolicyViolation):
            await service.cancel_subscription(storage, agency, sub.id, now=late)
        assert (await storage.get_subscription(sub.id)).status == ACTIVE

    async def test_cancel_twice_is_idempotent(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        first = await service.cancel_subscription(storage, agency, sub.id, now=NOW + timedelta(days=1))
        second = await service.cancel_subscription(storage, agency, sub.id, now=NOW + timedelta(days=2))
        assert second.status == CANCELLATION_PENDING
        assert second.cancelled_at == first.cancelled_at
        titles = [n.title for n in await storage.list_notifications(agency.id)]
        assert titles.count("Cancelamento solicitado") == 1

        eligible, reason = service.cancellation_eligibility(second, NOW + timedelta(days=2))
        assert not eligible
        assert reason == "Cancelamento já solicitado"

    async def test_cannot_cancel_someone_elses(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        other = await storage.add_user(Viewer(email="x@example.com", password_hash="x", name="Outro"))
        with pytest.raises(NotFound):
            await service.cancel_subscription(storage, other, sub.id, now=NOW)


class TestSettlement:
    async def test_pending_cancellation_keeps_access_until_end(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        await service.cancel_subscription(storage, agency, sub.id, now=NOW + timedelta(days=1))

        user = await service.settle_subscriptions(storage, await storage.get_user(agency.id), now=sub.end_date)
        assert user.plan_status == "active"
        valid, current, can_cancel = await service.current_subscription(storage, user, now=sub.end_date)
        assert valid and current.id == sub.id and not can_cancel

    async def test_after_end_date_plan_goes_inactive(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        await service.cancel_subscription(storage, agency, sub.id, now=NOW + timedelta(days=1))

        after = sub.end_date + timedelta(microseconds=1)
        user = await service.settle_subscriptions(storage, await storage.get_user(agency.id), now=after)
        assert user.plan_status == "inactive"
        assert (await storage.get_user(agency.id)).plan_status == "inactive"
        assert (await storage.get_subscription(sub.id)).status == CANCELLED

        valid, current, _ = await service.current_subscription(storage, user, now=after)
        assert not valid and current is None
        eligible, reason = service.cancellation_eligibility(await storage.get_subscription(sub.id), after)
        assert reason == "Assinatura já cancelada"

    async def test_expired_active_subscription_is_settled(self, storage, gateway, agency):
        sub = await subscribe(storage, gateway, agency)
        after = sub.end_date + timedelta(days=1)
        user = await service.settle_subscriptions(storage, await storage.get_user(agency.id), now=after)
        assert user.plan_status == "inactive"
        assert (await storage.get_subscription(sub.id)).status == CANCELLED

    async def test_nothing_to_settle(self, storage, agency):
        user = await service.settle_subscriptions(storage, agency, now=NOW)
        assert user.plan_status == "pending"
