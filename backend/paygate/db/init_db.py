"""
Database Engine Setup

Builds the async engine and session factory for the transaction store and
creates the schema at startup.
"""
import logging

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from .models import Base

logger = logging.getLogger(__name__)


def create_engine(database_url: str) -> AsyncEngine:
    """
    Create the async engine for the configured store endpoint.

    SQLite connections get WAL journaling and a busy timeout so that
    concurrent request handlers do not trip over database locks.
    """
    is_sqlite = database_url.startswith("sqlite")

    engine_kwargs = {"echo": False, "pool_pre_ping": True}
    if is_sqlite:
        engine_kwargs["connect_args"] = {
            "timeout": 30,  # 30 second timeout for lock acquisition
            "check_same_thread": False
        }
    else:
        engine_kwargs["pool_recycle"] = 3600

    engine = create_async_engine(database_url, **engine_kwargs)

    if is_sqlite:
        @event.listens_for(engine.sync_engine, "connect")
        def _set_sqlite_pragmas(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA busy_timeout=30000")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()

    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker:
    """Create async session factory bound to the engine."""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False
    )


async def initialize_database(engine: AsyncEngine) -> None:
    """
    Create all tables if they do not exist.

    Called from the FastAPI lifespan handler before the first request.
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Database initialized at {engine.url.render_as_string(hide_password=True)}")
