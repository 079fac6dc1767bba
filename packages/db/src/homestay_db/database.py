# This project was developed with assistance from AI tools.
"""
Async engine, session factory and declarative base.

``SessionLocal`` is a module global so tests can rebind it to a
container-backed engine before the app handles its first request.
"""

import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import db_settings

logger = logging.getLogger(__name__)

Base = declarative_base()

engine = create_async_engine(
    db_settings.DATABASE_URL,
    echo=db_settings.SQL_ECHO,
    pool_pre_ping=True,
)

SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


class DatabaseService:
    """Owns an engine for lifecycle and health operations."""

    def __init__(self, engine: AsyncEngine):
        self._engine = engine

    async def health_check(self) -> bool:
        """Return True when a trivial query round-trips."""
        try:
            async with self._engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception:
            logger.warning("Database health check failed", exc_info=True)
            return False

    async def dispose(self) -> None:
        await self._engine.dispose()


db_service = DatabaseService(engine=engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yield a session, closing it afterwards."""
    async with SessionLocal() as session:
        yield session


async def get_db_service() -> DatabaseService:
    return db_service
