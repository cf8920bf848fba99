"""Tracking for aggregate invariant violations found while assembling views."""

from __future__ import annotations

import asyncio
import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime
from typing import Any, DefaultDict

from tracker.utils.datetime import utcnow

logger = logging.getLogger("tracker.services.aggregates")


@dataclass
class InconsistentAggregate:
    """A derived value that broke an invariant and was clamped."""
    kind: str
    target: str
    target_id: str
    observed: int
    clamped_to: int


@dataclass
class InconsistencyMetrics:
    """Counters for one kind of inconsistency."""
    count: int = 0
    last_target_id: str | None = None
    last_observed: int | None = None
    last_seen_at: datetime | None = None


class AggregateMonitor:
    """Count clamped aggregates so /health can surface data drift."""
    def __init__(self) -> None:
        self._metrics: DefaultDict[str, InconsistencyMetrics] = defaultdict(InconsistencyMetrics)
        self._lock = asyncio.Lock()

    async def record(self, event: InconsistentAggregate, *, context: dict[str, Any] | None = None) -> None:
        """Record a clamped value and emit a structured warning."""
        async with self._lock:
            metrics = self._metrics[event.kind]
            metrics.count += 1
            metrics.last_target_id = event.target_id
            metrics.last_observed = event.observed
            metrics.last_seen_at = utcnow()
            payload = {
                "event": "inconsistent_aggregate",
                "kind": event.kind,
                "target": event.target,
                "target_id": event.target_id,
                "observed": event.observed,
                "clamped_to": event.clamped_to,
                "count": metrics.count,
                "context": context or {},
            }
        logger.warning(json.dumps(payload))

    async def snapshot(self) -> dict[str, Any]:
        """Return a serializable snapshot of recorded inconsistencies."""
        async with self._lock:
            return {
                kind: {
                    "count": metrics.count,
                    "last_target_id": metrics.last_target_id,
                    "last_observed": metrics.last_observed,
                    "last_seen_at": metrics.last_seen_at.isoformat() if metrics.last_seen_at else None,
                }
                for kind, metrics in self._metrics.items()
            }

    async def reset(self) -> None:
        """Drop all recorded counters."""
        async with self._lock:
            self._metrics.clear()


aggregate_monitor = AggregateMonitor()
