"""FastAPI application entrypoint and health reporting utilities.

Invariants:
- Aggregate inconsistencies degrade health but never fail requests.
"""

import logging
from typing import Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tracker.api.router import api_router
from tracker.core.config import settings
from tracker.services.aggregate_monitor import aggregate_monitor

LOG_FORMAT = "%(asctime)s %(name)s [%(levelname)s] %(message)s"


def _configure_logging() -> None:
    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT, force=True)


_configure_logging()

app = FastAPI(title=settings.app_name)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.include_router(api_router, prefix=settings.api_prefix)


def _summarize_aggregates(snapshot: dict[str, Any]) -> dict[str, Any]:
    """Condense aggregate monitor state into health-friendly telemetry."""
    issues: list[dict[str, Any]] = []
    for kind, metrics in snapshot.items():
        count = int(metrics.get("count") or 0)
        if count:
            issues.append(
                {
                    "kind": kind,
                    "reason": "clamped_values",
                    "count": count,
                    "last_target_id": metrics.get("last_target_id"),
                    "last_observed": metrics.get("last_observed"),
                }
            )
    return {"kinds": snapshot, "issues": issues}


@app.get("/health", tags=["internal"])
@app.get(f"{settings.api_prefix}/health", tags=["internal"])
async def health() -> dict[str, Any]:
    """Return health status with aggregate consistency telemetry."""
    snapshot = await aggregate_monitor.snapshot()
    telemetry = _summarize_aggregates(snapshot)
    status = "ok" if not telemetry["issues"] else "degraded"
    return {"status": status, "aggregates": telemetry}
