"""Request sessions read from one snapshot, pinned before authentication."""

from __future__ import annotations

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from tracker.core.config import settings
from tracker.db.session import begin_read_snapshot
from tracker.main import app
from tracker.tests.utils import add_list, add_list_item, add_movie, add_user, auth_headers


class _RecordingSession:
    """Stands in for a fresh PostgreSQL session and records connection options."""

    def __init__(self, *, in_transaction: bool = False) -> None:
        self._in_transaction = in_transaction
        self.connection_options: list[dict | None] = []

    def in_transaction(self) -> bool:
        return self._in_transaction

    def get_bind(self):
        return SimpleNamespace(dialect=SimpleNamespace(name="postgresql"))

    async def connection(self, execution_options=None):
        self.connection_options.append(execution_options)


@pytest.mark.asyncio
async def test_fresh_postgres_session_requests_snapshot_isolation():
    session = _RecordingSession()

    await begin_read_snapshot(session)

    assert session.connection_options == [{"isolation_level": settings.snapshot_isolation_level}]


@pytest.mark.asyncio
async def test_session_with_open_transaction_is_left_alone():
    session = _RecordingSession(in_transaction=True)

    await begin_read_snapshot(session)

    assert session.connection_options == []


@pytest.mark.asyncio
async def test_request_session_is_pinned_before_the_user_lookup(session, monkeypatch):
    user = await add_user(session)
    user_list = await add_list(session, user)
    await add_list_item(session, user_list, await add_movie(session, "Pinned"))
    await session.commit()

    request_sessions = async_sessionmaker(session.bind, expire_on_commit=False, class_=AsyncSession)

    async def _request_session():
        async with request_sessions() as request_session:
            yield request_session

    pinned: list[bool] = []

    async def _recording_snapshot(db: AsyncSession) -> None:
        pinned.append(db.in_transaction())
        await begin_read_snapshot(db)

    monkeypatch.setattr("tracker.api.deps.get_session", _request_session)
    monkeypatch.setattr("tracker.api.deps.begin_read_snapshot", _recording_snapshot)

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        response = await client.get(f"/api/lists/{user_list.id}/items", headers=auth_headers(user))

    assert response.status_code == 200
    assert [entry["media_item"]["title"] for entry in response.json()] == ["Pinned"]
    # Called once, on a session that had not yet run any statement.
    assert pinned == [False]
