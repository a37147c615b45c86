"""
Async Database Configuration
"""
from datetime import datetime, timezone
from typing import AsyncIterator, Dict
from urllib.parse import parse_qs, urlparse, urlunparse

from fastapi import Request
from sqlalchemy import BigInteger, Integer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base

# Create declarative base
Base = declarative_base()

# BIGSERIAL on Postgres, INTEGER PRIMARY KEY (rowid alias) on SQLite
BigIntPK = BigInteger().with_variant(Integer, "sqlite")


def _split_ssl_args(database_url: str):
    # asyncpg doesn't support psycopg2-style query parameters
    if not database_url.startswith("postgresql+asyncpg://"):
        return database_url, {}

    parsed = urlparse(database_url)
    query_params = parse_qs(parsed.query)
    sslmode = query_params.pop("sslmode", [None])[0]
    database_url = urlunparse(parsed._replace(query=""))

    connect_args: Dict[str, bool] = {}
    if sslmode in ("require", "prefer", "allow", "verify-ca", "verify-full"):
        connect_args["ssl"] = True
    elif sslmode == "disable":
        connect_args["ssl"] = False
    return database_url, connect_args


class Database:
    """Owns the engine and session factory for one application instance."""

    def __init__(self, database_url: str, *, echo: bool = False, **engine_kwargs):
        url, connect_args = _split_ssl_args(database_url)
        if url.startswith("postgresql+asyncpg://"):
            engine_kwargs.setdefault("pool_size", 10)
            engine_kwargs.setdefault("max_overflow", 20)
            engine_kwargs.setdefault("pool_pre_ping", True)
            engine_kwargs.setdefault("pool_recycle", 300)
        if connect_args:
            engine_kwargs.setdefault("connect_args", connect_args)

        self.engine = create_async_engine(url, echo=echo, **engine_kwargs)
        self.sessionmaker = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def create_all(self) -> None:
        import digitalhub.models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """Dependency to get async database session"""
    database: Database = request.app.state.database
    async with database.sessionmaker() as session:
        try:
            yield session
        finally:
            await session.close()


def utcnow() -> datetime:
    """Naive UTC timestamp, the form every DateTime column stores."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
