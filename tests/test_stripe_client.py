import hashlib
import hmac
from urllib.parse import parse_qs

import httpx
import pytest

from hive_api.integrations.stripe_client import PaymentGatewayError, StripeClient, verify_stripe_signature

SECRET = "whsec_test"
PAYLOAD = b'{"type":"payment_intent.succeeded"}'


def signature(payload, timestamp, secret=SECRET):
    signed = f"{timestamp}.".encode() + payload
    return hmac.new(secret.encode(), signed, hashlib.sha256).hexdigest()


class TestVerifyStripeSignature:
    def test_valid(self):
        header = f"t=1700000000,v1={signature(PAYLOAD, 1700000000)}"
        assert verify_stripe_signature(PAYLOAD, header, SECRET, now=1700000010)

    def test_any_v1_may_match(self):
        header = f"t=1700000000,v1=deadbeef,v1={signature(PAYLOAD, 1700000000)}"
        assert verify_stripe_signature(PAYLOAD, header, SECRET, now=1700000000)

    def test_tampered_payload(self):
        header = f"t=1700000000,v1={signature(PAYLOAD, 1700000000)}"
        assert not verify_stripe_signature(PAYLOAD + b" ", header, SECRET, now=1700000000)

    def test_wrong_secret(self):
        header = f"t=1700000000,v1={signature(PAYLOAD, 1700000000, 'other')}"
        assert not verify_stripe_signature(PAYLOAD, header, SECRET, now=1700000000)

    def test_outside_tolerance(self):
        header = f"t=1700000000,v1={signature(PAYLOAD, 1700000000)}"
        assert not verify_stripe_signature(PAYLOAD, header, SECRET, tolerance=300, now=1700000301)

    @pytest.mark.parametrize("header", [None, "", "v1=abc", "t=abc,v1=abc", "t=1700000000"])
    def test_malformed_header(self, header):
        assert not verify_stripe_signature(PAYLOAD, header, SECRET, now=1700000000)


def client_for(handler, api_key="sk_test_123"):
    return StripeClient(api_key, base_url="https://stripe.test/v1", transport=httpx.MockTransport(handler))


@pytest.mark.anyio
class TestStripeClient:
    async def test_create_payment_intent_posts_form(self):
        seen = {}

        def handler(request):
            seen["auth"] = request.headers["authorization"]
            seen["url"] = str(request.url)
            seen["form"] = parse_qs(request.content.decode())
            return httpx.Response(200, json={"id": "pi_1", "client_secret": "pi_1_secret", "status": "requires_payment_method"})

        intent = await client_for(handler).create_payment_intent(
            amount=5900, currency="brl", metadata={"userId": "u1", "planType": "B"}
        )
        assert intent["id"] == "pi_1"
        assert seen["auth"] == "Bearer sk_test_123"
        assert seen["url"] == "https://stripe.test/v1/payment_intents"
        assert seen["form"]["amount"] == ["5900"]
        assert seen["form"]["currency"] == ["brl"]
        assert seen["form"]["metadata[planType]"] == ["B"]

    async def test_retrieve(self):
        def handler(request):
            assert request.url.path == "/v1/payment_intents/pi_9"
            return httpx.Response(200, json={"id": "pi_9", "status": "succeeded"})

        intent = await client_for(handler).retrieve_payment_intent("pi_9")
        assert intent["status"] == "succeeded"

    async def test_http_error(self):
        def handler(request):
            return httpx.Response(402, json={"error": {"message": "card_declined"}})

        with pytest.raises(PaymentGatewayError) as exc:
            await client_for(handler).create_payment_intent(amount=100, currency="brl")
        assert exc.value.code == "create_payment_intent_failed"
        assert exc.value.data["_status_code"] == 402

    async def test_timeout(self):
        def handler(request):
            raise httpx.ReadTimeout("too slow", request=request)

        with pytest.raises(PaymentGatewayError) as exc:
            await client_for(handler).retrieve_payment_intent("pi_1")
        assert exc.value.code == "retrieve_payment_intent_failed_timeout"

    async def test_missing_key(self):
        def handler(request):
            raise AssertionError("não deveria chamar a API")

        with pytest.raises(PaymentGatewayError) as exc:
            await client_for(handler, api_key="").retrieve_payment_intent("pi_1")
        assert exc.value.code == "not_configured"
