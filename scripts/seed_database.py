# scripts/seed_database.py
import sys
import asyncio
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from hive_api.core.config import settings
from hive_api.db.session import make_engine, make_sessionmaker
from hive_api.storage.database import DatabaseStorage
from hive_api.storage.seed import DEMO_PASSWORD, seed_catalog, seed_demo_data

async def main():
    engine = make_engine(settings.DATABASE_URL)
    storage = DatabaseStorage(make_sessionmaker(engine), engine=engine)
    try:
        await storage.create_all()
        created = await seed_catalog(storage)
        print(f"Catálogo: {created} registros novos")

        answer = input("Criar contas e imóveis de demonstração? [s/N] ").strip().lower()
        if answer in ("s", "sim", "y"):
            await seed_demo_data(storage)
            print(f"Dados de demonstração criados (senha {DEMO_PASSWORD})")
    finally:
        await storage.close()

if __name__ == "__main__":
    asyncio.run(main())
