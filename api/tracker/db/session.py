"""Async engine, session factory and read-snapshot helpers."""

from __future__ import annotations

from typing import AsyncIterator

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from tracker.core.config import settings

engine = create_async_engine(settings.database_url, future=True, pool_pre_ping=True)
async_session = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_session() -> AsyncIterator[AsyncSession]:
    """Yield a session scoped to one request."""
    async with async_session() as session:
        yield session


async def begin_read_snapshot(session: AsyncSession) -> None:
    """Pin the session's next transaction to a consistent snapshot.

    Only PostgreSQL honours REPEATABLE READ here; SQLite transactions are
    already serializable, so the call only starts the transaction there.
    A session that already ran a statement keeps its isolation level, so
    request sessions are pinned in ``get_db`` before authentication.
    """
    if session.in_transaction():
        return
    bind = session.get_bind()
    if bind.dialect.name == "postgresql":
        await session.connection(execution_options={"isolation_level": settings.snapshot_isolation_level})
    else:
        await session.connection()
