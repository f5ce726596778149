"""
Async Postgres access for the match cache and imported documents.

The engine is created on first use so importing the app (Vercel cold start,
tests) never opens a connection.
"""
import logging
import os
import ssl
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase
from sqlalchemy.pool import NullPool

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for campaign, creator, application and match tables."""
    pass


_engine: Optional[AsyncEngine] = None
_session_maker: Optional[async_sessionmaker] = None


def _connect_args(raw_url: str) -> dict:
    """asyncpg options for providers whose URL asks for sslmode=require."""
    from relacollab.config import needs_ssl

    if not needs_ssl(raw_url):
        return {}
    # Managed Postgres poolers present certificates asyncpg can't verify
    context = ssl.create_default_context()
    context.check_hostname = False
    context.verify_mode = ssl.CERT_NONE
    return {"ssl": context}


def get_engine() -> AsyncEngine:
    global _engine
    if _engine is None:
        from relacollab.config import get_settings
        settings = get_settings()

        engine_kwargs = {
            "echo": settings.debug,
            "connect_args": _connect_args(settings.database_url_raw),
        }
        if os.environ.get("VERCEL"):
            # Each invocation is short-lived; don't keep connections around
            engine_kwargs["poolclass"] = NullPool
        else:
            engine_kwargs["pool_pre_ping"] = True

        _engine = create_async_engine(settings.database_url, **engine_kwargs)
    return _engine


def get_session_maker() -> async_sessionmaker:
    global _session_maker
    if _session_maker is None:
        _session_maker = async_sessionmaker(get_engine(), class_=AsyncSession, expire_on_commit=False)
    return _session_maker


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request, rolled back if the request fails."""
    async with get_session_maker()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db() -> None:
    """Create missing tables (local development; deployments run Alembic)."""
    import relacollab.models  # noqa: F401

    async with get_engine().begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"🗄️  Tables ready: {', '.join(sorted(Base.metadata.tables))}")


async def dispose_engine() -> None:
    """Close pooled connections (end of app lifespan or a CLI script)."""
    global _engine, _session_maker
    if _engine is not None:
        await _engine.dispose()
    _engine = None
    _session_maker = None
