"""Async engine, session factory and schema bootstrap."""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel

from nestplan.core.config import get_settings

settings = get_settings()


def _engine_kwargs(database_url: str) -> dict:
    # aiosqlite has no connection pool to size
    if database_url.startswith("sqlite"):
        return {}
    return {"pool_size": settings.db_pool_size, "max_overflow": settings.db_max_overflow}


engine = create_async_engine(
    settings.database_url,
    echo=settings.sql_echo,
    **_engine_kwargs(settings.database_url),
)

# Objects stay readable after commit; routers build responses from them
async_session_factory = sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, committed by the router."""
    async with async_session_factory() as session:
        yield session


async def init_db() -> None:
    """Create every NestPlan table that does not exist yet."""
    import nestplan.models  # noqa: F401  registers tables on SQLModel.metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
