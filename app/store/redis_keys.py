# app/store/redis_keys.py
from __future__ import annotations

from dataclasses import dataclass

ROOM_PREFIX = "room:"


@dataclass(frozen=True)
class RK:
    """
    Redis key builder for room-scoped keys.
    A room is a single JSON snapshot; nothing else is stored per room.
    """
    room_code: str

    def room(self) -> str:
        return f"{ROOM_PREFIX}{self.room_code}"  # STRING (RoomSnapshot JSON)

    @staticmethod
    def scan_pattern() -> str:
        return f"{ROOM_PREFIX}*"

    @staticmethod
    def code_from_key(key: str) -> str | None:
        if not key.startswith(ROOM_PREFIX):
            return None
        code = key[len(ROOM_PREFIX):]
        # snapshot keys only: room:<code>
        if not code or ":" in code:
            return None
        return code
