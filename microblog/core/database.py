from typing import AsyncIterator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from microblog.core.config import settings
from microblog.models.activitypub import Base

engine: AsyncEngine = create_async_engine(settings.DATABASE_URL, future=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

def configure_engine(url: str) -> None:
    """Point the module-level engine and session factory at another database."""
    global engine, SessionLocal
    engine = create_async_engine(url, future=True)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

def get_session_factory() -> async_sessionmaker:
    return SessionLocal

async def init_db(bind: Optional[AsyncEngine] = None) -> None:
    async with (bind or engine).begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

async def get_db() -> AsyncIterator[AsyncSession]:
    async with SessionLocal() as session:
        yield session
