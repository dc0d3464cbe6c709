"""Periodic WebSocket push of the latest monitoring results."""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from fastapi import FastAPI

from alpha_monitor.reporting import result_to_dict

log = structlog.get_logger(__name__)


def build_snapshot(app: FastAPI) -> dict[str, Any]:
    """Collect session status and the latest result of every pair."""
    orchestrator = app.state.orchestrator
    return {
        "type": "snapshot",
        "status": orchestrator.get_status(),
        "results": [result_to_dict(r) for r in orchestrator.state.latest_results.values()],
    }


async def dashboard_update_loop(app: FastAPI) -> None:
    """Push a snapshot every update interval until cancelled by the lifespan.

    Ticks without connected clients skip building the snapshot.
    """
    interval = getattr(app.state, "update_interval", 5)
    hub = app.state.hub
    last_pass = None

    log.info("dashboard_update_loop_started", interval=interval)

    while True:
        try:
            await asyncio.sleep(interval)
            if not hub.connections:
                continue

            # Only push when a new pass has completed since the last push
            pass_count = app.state.orchestrator.state.pass_count
            if pass_count == last_pass:
                continue
            last_pass = pass_count

            await hub.broadcast(build_snapshot(app))
        except asyncio.CancelledError:
            break
        except Exception:
            log.exception("dashboard_update_error")
