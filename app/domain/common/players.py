from __future__ import annotations

from typing import List, Optional

from app.store.models import PlayerStore, RoomSnapshot


def sorted_players(room: RoomSnapshot) -> List[PlayerStore]:
    """Stable roster order: longest tenure first, pid breaks ties."""
    return sorted(room.players.values(), key=lambda p: (p.joined_at, p.pid))


def longest_tenured(room: RoomSnapshot) -> Optional[PlayerStore]:
    players = sorted_players(room)
    return players[0] if players else None
