from __future__ import annotations

from typing import Optional

from redis.asyncio import Redis

from app.store.redis_keys import RK
from app.store.models import RoomSnapshot


class RedisRepo:
    """
    Whole-snapshot room store.
    Serialization of concurrent writers is the engine's job (per-room lock);
    this class only does get / put / delete.
    """

    def __init__(self, r: Redis, room_ttl_sec: int = 1800):
        self.r = r
        self.room_ttl_sec = room_ttl_sec

    def _dec(self, x):
        """Decode redis bytes -> str; pass through str/None safely."""
        if x is None:
            return None
        if isinstance(x, (bytes, bytearray)):
            return x.decode("utf-8")
        return x

    async def ping(self) -> bool:
        return bool(await self.r.ping())

    async def get(self, room_code: str) -> Optional[RoomSnapshot]:
        raw = await self.r.get(RK(room_code).room())
        if not raw:
            return None
        return RoomSnapshot.model_validate_json(self._dec(raw))

    async def put(self, room: RoomSnapshot) -> None:
        # SET with EX refreshes the TTL on every committed mutation
        await self.r.set(RK(room.code).room(), room.model_dump_json(), ex=self.room_ttl_sec)

    async def delete(self, room_code: str) -> None:
        await self.r.delete(RK(room_code).room())

    async def list_codes(self) -> list[str]:
        codes: list[str] = []
        cursor = 0
        while True:
            cursor, keys = await self.r.scan(cursor=cursor, match=RK.scan_pattern(), count=200)
            for k in keys:
                code = RK.code_from_key(self._dec(k))
                if code:
                    codes.append(code)
            if cursor == 0:
                break
        return sorted(set(codes))
