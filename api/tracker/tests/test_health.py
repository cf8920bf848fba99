"""Health endpoint aggregate telemetry."""

from __future__ import annotations

import pytest

from tracker.main import _summarize_aggregates
from tracker.services.view_assembler import clamp_episode_counts


@pytest.mark.asyncio
async def test_health_is_ok_without_inconsistencies(client, clean_aggregate_monitor):
    response = await client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "aggregates": {"kinds": {}, "issues": []}}


@pytest.mark.asyncio
async def test_clamped_counts_degrade_health(client, clean_aggregate_monitor):
    await clamp_episode_counts(3, 5, target="season", target_id="season-1")

    response = await client.get("/api/health")

    body = response.json()
    assert body["status"] == "degraded"
    [issue] = body["aggregates"]["issues"]
    assert issue["kind"] == "negative_unseen_episodes_count"
    assert issue["reason"] == "clamped_values"
    assert issue["count"] == 1
    assert issue["last_target_id"] == "season-1"
    assert issue["last_observed"] == -2


@pytest.mark.asyncio
async def test_health_reads_monitor_snapshot(client, monkeypatch):
    async def fake_snapshot():
        return {"negative_unseen_episodes_count": {"count": 4, "last_target_id": "x", "last_observed": -3}}

    monkeypatch.setattr("tracker.main.aggregate_monitor.snapshot", fake_snapshot)

    response = await client.get("/health")

    assert response.json()["status"] == "degraded"
    assert response.json()["aggregates"]["issues"][0]["count"] == 4


def test_zero_counts_are_not_reported_as_issues():
    summary = _summarize_aggregates({"negative_unseen_episodes_count": {"count": 0}})
    assert summary["issues"] == []
