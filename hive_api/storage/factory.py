# hive_api/storage/factory.py
import logging

from hive_api.core.config import Settings
from hive_api.storage.base import Storage
from hive_api.storage.memory import MemoryStorage

logger = logging.getLogger(__name__)


async def build_storage(cfg: Settings) -> Storage:
    backend = (cfg.STORAGE_BACKEND or "memory").lower().strip()
    if backend == "database":
        from hive_api.db.session import make_engine, make_sessionmaker
        from hive_api.storage.database import DatabaseStorage

        engine = make_engine(cfg.DATABASE_URL)
        storage = DatabaseStorage(make_sessionmaker(engine), engine=engine)
        await storage.create_all()
        logger.info("Storage: banco de dados (%s)", engine.url.get_backend_name())
        return storage
    logger.info("Storage: memória")
    return MemoryStorage()
