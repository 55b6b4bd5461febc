# hive_api/db/session.py
import sys, asyncio
if sys.platform.startswith("win"):
    asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())

from pathlib import Path
from typing import Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine, async_sessionmaker


def resolve_database_url(url: Optional[str]) -> str:
    if url:
        return url
    data_dir = Path(__file__).resolve().parents[2] / "data"
    data_dir.mkdir(parents=True, exist_ok=True)
    db_file = data_dir / "hive.db"
    # usar caminho POSIX para o SQLAlchemy
    return f"sqlite+aiosqlite:///{db_file.as_posix()}"


def make_engine(url: Optional[str] = None) -> AsyncEngine:
    return create_async_engine(resolve_database_url(url), echo=False)


def make_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
