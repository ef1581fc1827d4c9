from __future__ import annotations

from typing import Dict, Optional

from app.store.models import RoomSnapshot


class MemoryRepo:
    """
    In-process room store for development and tests.
    Keeps deep copies so callers never share a live snapshot with the store.
    """

    def __init__(self) -> None:
        self._rooms: Dict[str, RoomSnapshot] = {}

    async def ping(self) -> bool:
        return True

    async def get(self, room_code: str) -> Optional[RoomSnapshot]:
        room = self._rooms.get(room_code)
        return room.model_copy(deep=True) if room is not None else None

    async def put(self, room: RoomSnapshot) -> None:
        self._rooms[room.code] = room.model_copy(deep=True)

    async def delete(self, room_code: str) -> None:
        self._rooms.pop(room_code, None)

    async def list_codes(self) -> list[str]:
        return sorted(self._rooms)
