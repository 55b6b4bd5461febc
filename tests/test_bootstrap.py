import pytest
from fastapi.testclient import TestClient

from hive_api.core.config import Settings
from hive_api.main import app
from hive_api.modules.users.service import authenticate
from hive_api.storage.database import DatabaseStorage
from hive_api.storage.factory import build_storage
from hive_api.storage.memory import MemoryStorage
from hive_api.storage.seed import DEMO_PASSWORD, seed_catalog, seed_demo_data

from helpers import API


class TestSettings:
    def test_rejects_unknown_backend(self):
        with pytest.raises(RuntimeError):
            Settings(STORAGE_BACKEND="redis").check()

    def test_production_database_needs_url(self):
        with pytest.raises(RuntimeError):
            Settings(ENVIRONMENT="prod", STORAGE_BACKEND="database", DATABASE_URL=None).check()

    def test_defaults_are_valid(self):
        cfg = Settings(STORAGE_BACKEND="memory")
        cfg.check()
        assert cfg.CANCELLATION_GRACE_DAYS == 7
        assert cfg.ONBOARDING_COMPLETE_THRESHOLD == 80


@pytest.mark.anyio
class TestStorageFactory:
    async def test_memory(self):
        storage = await build_storage(Settings(STORAGE_BACKEND="memory"))
        assert isinstance(storage, MemoryStorage)

    async def test_database(self, tmp_path):
        url = f"sqlite+aiosqlite:///{(tmp_path / 'factory.db').as_posix()}"
        storage = await build_storage(Settings(STORAGE_BACKEND="database", DATABASE_URL=url))
        try:
            assert isinstance(storage, DatabaseStorage)
            assert await seed_catalog(storage) == 16
        finally:
            await storage.close()


@pytest.mark.anyio
class TestDemoData:
    async def test_seed_is_idempotent(self):
        storage = MemoryStorage()
        await seed_catalog(storage)
        await seed_demo_data(storage)
        await seed_demo_data(storage)

        agency = await storage.get_user_by_email("imobiliaria@test.com")
        assert agency.plan_status == "active"
        featured = await storage.list_properties(featured=True)
        assert len(featured) == 4
        assert {p.created_by for p in featured} == {agency.id}

        user = await authenticate(storage, "viewer@test.com", DEMO_PASSWORD)
        assert user.user_type == "viewer"


class TestLifespan:
    def test_app_starts_with_seeded_catalog(self):
        with TestClient(app) as client:
            assert len(client.get(f"{API}/plans").json()) == 2
            assert client.get(f"{API}/auth/me").status_code == 401
