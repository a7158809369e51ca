from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Optional
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from synergy_crm.config import settings

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


# =====================================================
# ENGINE & SESSION FACTORY
# =====================================================

# SQLite connections must not outlive the event loop that opened them
_engine_options = {"poolclass": NullPool} if settings.database_url.startswith("sqlite") else {}

engine = create_async_engine(
    settings.database_url,
    echo=False,  # Set to True for SQL query logging
    future=True,
    **_engine_options
)

Base = declarative_base()

AsyncSessionFactory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False
)


async def connect_database():
    """Check that the database answers before serving requests."""
    try:
        async with engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info(f"✅ Connected to database ({engine.dialect.name})")
    except Exception as e:
        logger.error(f"❌ Failed to connect to database: {str(e)}")
        raise


async def close_database():
    """Dispose of the connection pool."""
    try:
        await engine.dispose()
        logger.info("✅ Database connection closed")
    except Exception as e:
        logger.error(f"❌ Error closing database connection: {str(e)}")


async def create_tables():
    """Create every table registered on Base."""
    import synergy_crm.models  # noqa: F401  registers the tables

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("📊 Database tables ensured")


async def drop_tables():
    import synergy_crm.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


# =====================================================
# SESSIONS
# =====================================================

def get_session_direct() -> AsyncSession:
    """Session with the service credential (no caller identity attached)."""
    return AsyncSessionFactory()


@asynccontextmanager
async def get_session(user_id: Optional[str] = None) -> AsyncIterator[AsyncSession]:
    """
    Session for one unit of work.

    With a user_id the caller's identity is published as a transaction-local
    setting so row-level security policies can scope what the caller sees.
    Without one the session runs with the service credential.
    """
    async with AsyncSessionFactory() as session:
        if user_id is not None and engine.dialect.name == "postgresql":
            await session.execute(
                text("SELECT set_config(:setting, :value, true)"),
                {"setting": settings.rls_claim_setting, "value": str(user_id)}
            )
        yield session
