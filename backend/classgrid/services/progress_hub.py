from __future__ import annotations

import asyncio
import logging
from collections import defaultdict

from anyio import from_thread
from fastapi import WebSocket

from classgrid.schemas.timetable import ProgressEvent

logger = logging.getLogger(__name__)


class ProgressHub:
    """Websocket subscribers grouped by generation run id."""

    def __init__(self) -> None:
        self._connections: dict[str, set[WebSocket]] = defaultdict(set)
        self._lock = asyncio.Lock()

    async def connect(self, run_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        async with self._lock:
            self._connections[run_id].add(websocket)

    async def disconnect(self, run_id: str, websocket: WebSocket) -> None:
        async with self._lock:
            sockets = self._connections.get(run_id)
            if not sockets:
                return
            sockets.discard(websocket)
            if not sockets:
                self._connections.pop(run_id, None)

    def subscriber_count(self, run_id: str) -> int:
        return len(self._connections.get(run_id, ()))

    async def publish(self, run_id: str, payload: dict) -> None:
        async with self._lock:
            sockets = list(self._connections.get(run_id, set()))

        if not sockets:
            return

        stale: list[WebSocket] = []
        for websocket in sockets:
            try:
                await websocket.send_json(payload)
            except Exception:  # pragma: no cover - network/runtime dependent
                stale.append(websocket)

        if stale:
            async with self._lock:
                active = self._connections.get(run_id, set())
                for socket in stale:
                    active.discard(socket)
                if not active:
                    self._connections.pop(run_id, None)
            logger.debug("Removed %d stale progress websocket(s) for run %s", len(stale), run_id)


progress_hub = ProgressHub()


def publish_progress(event: ProgressEvent) -> None:
    """Push a progress event from worker-thread code; never raises."""
    try:
        from_thread.run(progress_hub.publish, event.run_id, event.to_payload())
    except Exception:  # pragma: no cover - runtime environment dependent
        logger.debug("Unable to push progress event for run %s", event.run_id, exc_info=True)
