# backend/core/database.py

from typing import AsyncGenerator

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

from .config import get_settings
from .query_logger import setup_query_logging

Base = declarative_base()


def build_engine(database_url: str) -> AsyncEngine:
    """Create an async engine with pool settings suited to the driver."""
    settings = get_settings()
    engine_kwargs = {
        "echo": settings.log_sql_queries,
        "pool_pre_ping": True,
    }

    if database_url.startswith("sqlite"):
        engine_kwargs["connect_args"] = {"check_same_thread": False}
        if database_url.endswith(":memory:") or database_url.endswith("://"):
            engine_kwargs["poolclass"] = StaticPool
    else:
        engine_kwargs["pool_size"] = settings.db_pool_size
        engine_kwargs["max_overflow"] = settings.db_max_overflow

    engine = create_async_engine(database_url, **engine_kwargs)

    if database_url.startswith("sqlite"):

        @event.listens_for(engine.sync_engine, "connect")
        def enable_sqlite_foreign_keys(dbapi_conn, connection_record):
            cursor = dbapi_conn.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    setup_query_logging(engine)
    return engine


def build_sessionmaker(bind: AsyncEngine) -> async_sessionmaker:
    return async_sessionmaker(bind=bind, expire_on_commit=False, autoflush=False)


engine = build_engine(get_settings().database_url)

AsyncSessionLocal = build_sessionmaker(engine)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    async with AsyncSessionLocal() as db:
        yield db


async def init_models(bind: AsyncEngine = engine) -> None:
    """Create every table registered on Base (local bootstrap and tests)."""
    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
