from __future__ import annotations

import time
from typing import Awaitable, Callable, Optional

from app.domain.common.validation import require_room_code, require_session_id
from app.domain.engine import RoomEngine
from app.transport.protocols import OutRoomView

DisconnectProbe = Callable[[], Awaitable[bool]]


class SyncCoordinator:
    """
    Version-aware long poll.
    Returns as soon as the room moved past `since_version` (or a timed transition fired),
    otherwise waits on the room's condition in `interval_sec` slices until `timeout_sec`.
    """

    def __init__(
        self,
        engine: RoomEngine,
        *,
        timeout_sec: float = 20.0,
        interval_sec: float = 0.9,
        monotonic: Callable[[], float] = time.monotonic,
    ) -> None:
        self.engine = engine
        self.timeout_sec = timeout_sec
        self.interval_sec = interval_sec
        self._monotonic = monotonic

    async def sync(
        self,
        room_code: str,
        session_id: str,
        since_version: int,
        is_disconnected: Optional[DisconnectProbe] = None,
    ) -> OutRoomView:
        code = require_room_code(room_code)
        pid = require_session_id(session_id)
        deadline = self._monotonic() + self.timeout_sec

        while True:
            view, transitioned = await self.engine.settle(code, pid)
            if since_version <= 0 or view.version > since_version or transitioned:
                return view

            remaining = deadline - self._monotonic()
            if remaining <= 0:
                return view
            if is_disconnected is not None and await is_disconnected():
                return view

            # A commit between settle and wait is picked up after at most one interval
            await self.engine.notifier.wait(code, min(self.interval_sec, remaining))
