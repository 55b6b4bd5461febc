"""
Pytest fixtures for the Hive API tests.
"""

import os

# hashes rápidos e storage em memória antes de importar o app
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("STORAGE_BACKEND", "memory")

import anyio
import pytest
from fastapi.testclient import TestClient

from hive_api.core.config import settings
from hive_api.core.dependencies import get_payment_gateway, get_sessions, get_storage
from hive_api.core.sessions import SessionStore
from hive_api.db.session import make_engine, make_sessionmaker
from hive_api.main import app
from hive_api.storage.database import DatabaseStorage
from hive_api.storage.memory import MemoryStorage
from hive_api.storage.seed import seed_catalog

from helpers import API, PROVIDER_PAYLOAD, FakeGateway, bearer


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def storage():
    """Seeded in-memory storage."""
    s = MemoryStorage()
    anyio.run(seed_catalog, s)
    return s


@pytest.fixture
def sessions():
    return SessionStore()


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def client(storage, sessions, gateway, monkeypatch):
    """TestClient wired to fresh storage, sessions and a fake gateway."""
    monkeypatch.setattr(settings, "STRIPE_WEBHOOK_SECRET", "")
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_sessions] = lambda: sessions
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def register_viewer(client):
    """Registers a viewer and returns (token, user json)."""

    def _register(email="viewer@example.com", name="Ana Viewer", password="secret123"):
        r = client.post(f"{API}/auth/register", json={"name": name, "email": email, "password": password})
        assert r.status_code == 201, r.text
        body = r.json()
        return body["sessionToken"], body["user"]

    return _register


@pytest.fixture
def register_provider(client):
    """Registers a provider (defaults: CNPJ, plan B, imobiliaria) and returns (token, user json)."""

    def _register(**overrides):
        payload = {**PROVIDER_PAYLOAD, **overrides}
        r = client.post(f"{API}/auth/register-provider", json=payload)
        assert r.status_code == 201, r.text
        body = r.json()
        return body["sessionToken"], body["user"]

    return _register


@pytest.fixture
def pay_plan(client, gateway):
    """Runs checkout and delivers a payment_intent.succeeded webhook."""

    def _pay(token, plan_type="B"):
        r = client.post(f"{API}/create-subscription", json={"planType": plan_type}, headers=bearer(token))
        assert r.status_code == 200, r.text
        intent_id = r.json()["paymentIntentId"]
        gateway.succeed(intent_id)
        event = {"type": "payment_intent.succeeded", "data": {"object": {"id": intent_id, "status": "succeeded"}}}
        r = client.post(f"{API}/webhooks/stripe", json=event)
        assert r.status_code == 200, r.text
        return intent_id

    return _pay


@pytest.fixture
async def db_storage(tmp_path):
    """DatabaseStorage on a throwaway sqlite file."""
    engine = make_engine(f"sqlite+aiosqlite:///{(tmp_path / 'test.db').as_posix()}")
    s = DatabaseStorage(make_sessionmaker(engine), engine=engine)
    await s.create_all()
    await seed_catalog(s)
    yield s
    await s.close()
