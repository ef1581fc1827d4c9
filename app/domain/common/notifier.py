from __future__ import annotations

import asyncio
from typing import Dict


class RoomNotifier:
    """
    Per-room asyncio.Condition signalled after every committed snapshot write.
    Long-poll waiters block on it instead of sleeping.

    A condition only exists while someone waits on it, so rooms that expire in
    the store leave nothing behind. A commit that lands between a waiter's last
    read and its wait() is not seen by that wait; callers bound each wait by a
    short interval and re-read afterwards.
    """

    def __init__(self) -> None:
        self._conditions: Dict[str, asyncio.Condition] = {}
        self._waiters: Dict[str, int] = {}

    async def notify(self, room_code: str) -> None:
        cond = self._conditions.get(room_code)
        if cond is None:
            return
        async with cond:
            cond.notify_all()

    async def wait(self, room_code: str, timeout: float) -> bool:
        """Block until the room is notified or `timeout` seconds pass. Returns True if notified."""
        cond = self._conditions.setdefault(room_code, asyncio.Condition())
        self._waiters[room_code] = self._waiters.get(room_code, 0) + 1
        try:
            async with cond:
                try:
                    await asyncio.wait_for(cond.wait(), timeout=timeout)
                    return True
                except asyncio.TimeoutError:
                    return False
        finally:
            self._waiters[room_code] -= 1
            if self._waiters[room_code] == 0:
                self._waiters.pop(room_code, None)
                if self._conditions.get(room_code) is cond:
                    self._conditions.pop(room_code, None)

    async def discard(self, room_code: str) -> None:
        """Wake everyone one last time and forget the room."""
        cond = self._conditions.pop(room_code, None)
        if cond is None:
            return
        async with cond:
            cond.notify_all()
