# hive_api/integrations/stripe_client.py
from __future__ import annotations

import hashlib
import hmac
import logging
import time
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class PaymentGatewayError(RuntimeError):
    def __init__(self, code: str, data: Any = None):
        super().__init__(code)
        self.code = code
        self.data = data


class StripeClient:
    """Cliente mínimo da API REST do Stripe (PaymentIntents)."""

    def __init__(self, api_key: str, base_url: str = "https://api.stripe.com/v1", timeout: float = 20.0,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._headers = {
            "accept": "application/json",
            "authorization": f"Bearer {self.api_key}",
        }

    async def _request(self, method: str, path: str, code: str, data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        if not self.api_key:
            raise PaymentGatewayError("not_configured", {"error": "STRIPE_SECRET_KEY ausente"})
        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                r = await client.request(method, f"{self.base_url}{path}", data=data, headers=self._headers)
        except httpx.TimeoutException as exc:
            logger.warning("Stripe %s: timeout", code)
            raise PaymentGatewayError(f"{code}_timeout", {"error": str(exc)}) from exc
        except httpx.HTTPError as exc:
            logger.warning("Stripe %s: falha de rede %s", code, exc)
            raise PaymentGatewayError(code, {"error": str(exc)}) from exc

        try:
            body = r.json()
        except ValueError:
            body = {"error": r.text}
        if r.status_code >= 400:
            body = body if isinstance(body, dict) else {"error": body}
            body["_status_code"] = r.status_code
            logger.warning("Stripe %s: HTTP %s", code, r.status_code)
            raise PaymentGatewayError(code, body)
        if not isinstance(body, dict) or "id" not in body:
            raise PaymentGatewayError(code, {"error": "resposta inesperada"})
        return body

    async def create_payment_intent(self, *, amount: int, currency: str,
                                    metadata: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        """amount em centavos."""
        payload: Dict[str, Any] = {
            "amount": amount,
            "currency": currency,
            "automatic_payment_methods[enabled]": "true",
        }
        for k, v in (metadata or {}).items():
            payload[f"metadata[{k}]"] = v
        return await self._request("POST", "/payment_intents", "create_payment_intent_failed", payload)

    async def retrieve_payment_intent(self, payment_intent_id: str) -> Dict[str, Any]:
        return await self._request("GET", f"/payment_intents/{payment_intent_id}", "retrieve_payment_intent_failed")


def verify_stripe_signature(
    payload: bytes,
    header: Optional[str],
    secret: str,
    tolerance: int = 300,
    now: Optional[int] = None,
) -> bool:
    """Confere o cabeçalho Stripe-Signature ("t=...,v1=...")."""
    if not header or not secret:
        return False
    timestamp: Optional[str] = None
    signatures: list[str] = []
    for part in header.split(","):
        key, _, value = part.strip().partition("=")
        if key == "t":
            timestamp = value
        elif key == "v1":
            signatures.append(value)
    if not timestamp or not signatures or not timestamp.isdigit():
        return False

    if tolerance and abs((now if now is not None else int(time.time())) - int(timestamp)) > tolerance:
        return False

    signed = timestamp.encode("utf-8") + b"." + payload
    expected = hmac.new(secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()
    return any(hmac.compare_digest(expected, s) for s in signatures)
