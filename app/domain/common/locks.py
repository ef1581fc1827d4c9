from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class RoomLocks:
    """
    One asyncio.Lock per room code, held across read -> compute -> write.
    Entries are refcounted and dropped once nobody holds or waits on them.
    """

    def __init__(self) -> None:
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, room_code: str) -> AsyncIterator[None]:
        lock = self._locks.setdefault(room_code, asyncio.Lock())
        self._users[room_code] = self._users.get(room_code, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._users[room_code] -= 1
            if self._users[room_code] == 0:
                self._users.pop(room_code, None)
                self._locks.pop(room_code, None)
