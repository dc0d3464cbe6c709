"""WebSocket hub pushing monitoring snapshots to dashboard clients.

A client may narrow the pairs it receives by sending
``{"subscribe": ["KOGEUSDT", ...]}``; ``{"subscribe": []}`` resets to all
pairs. Pairs match by raw id or display name, case-insensitively.
"""

from __future__ import annotations

import json
from typing import Any

import structlog
from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from alpha_monitor.dashboard.update_loop import build_snapshot

log = structlog.get_logger(__name__)

router = APIRouter()


def _filter_results(snapshot: dict[str, Any], pairs: set[str] | None) -> dict[str, Any]:
    if not pairs:
        return snapshot
    results = [
        r
        for r in snapshot.get("results", [])
        if r["pair"].upper() in pairs or r["display_name"].upper() in pairs
    ]
    return {**snapshot, "results": results}


class DashboardHub:
    """Tracks WebSocket clients and their pair filters."""

    def __init__(self) -> None:
        # websocket -> subscribed pairs (upper-cased), None for all pairs
        self.connections: dict[WebSocket, set[str] | None] = {}

    async def connect(self, ws: WebSocket) -> None:
        await ws.accept()
        self.connections[ws] = None
        log.info("dashboard_ws_connected", total=len(self.connections))

    def disconnect(self, ws: WebSocket) -> None:
        self.connections.pop(ws, None)
        log.info("dashboard_ws_disconnected", total=len(self.connections))

    def subscribe(self, ws: WebSocket, pairs: list[str]) -> None:
        """Restrict a client to ``pairs``; an empty list means all pairs."""
        if ws in self.connections:
            self.connections[ws] = {p.upper() for p in pairs} or None

    async def send_snapshot(self, ws: WebSocket, snapshot: dict[str, Any]) -> None:
        await ws.send_text(json.dumps(_filter_results(snapshot, self.connections.get(ws))))

    async def broadcast(self, snapshot: dict[str, Any]) -> None:
        """Send the snapshot to every client, dropping connections that fail."""
        for ws in list(self.connections):
            try:
                await self.send_snapshot(ws, snapshot)
            except Exception:
                self.connections.pop(ws, None)
                log.warning("dashboard_ws_broadcast_error", remaining=len(self.connections))


@router.websocket("/ws")
async def websocket_endpoint(websocket: WebSocket) -> None:
    """Accept a client, push the current snapshot, then handle subscriptions."""
    hub: DashboardHub = websocket.app.state.hub
    has_results = getattr(websocket.app.state, "orchestrator", None) is not None

    await hub.connect(websocket)
    try:
        if has_results:
            await hub.send_snapshot(websocket, build_snapshot(websocket.app))
        while True:
            message = await websocket.receive_text()
            try:
                pairs = json.loads(message)["subscribe"]
            except (ValueError, KeyError, TypeError):
                log.debug("dashboard_ws_message_ignored", message=message[:100])
                continue
            if not isinstance(pairs, list):
                continue
            hub.subscribe(websocket, [str(p) for p in pairs])
            if has_results:
                await hub.send_snapshot(websocket, build_snapshot(websocket.app))
    except WebSocketDisconnect:
        hub.disconnect(websocket)
