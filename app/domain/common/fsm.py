# app/domain/common/fsm.py
from __future__ import annotations

from app.domain.common.errors import Conflict
from app.domain.common.types import Phase
from app.store.models import RoomSnapshot


def can_transition_to(current: Phase, target: Phase) -> bool:
    """
    Validate phase transitions.
    results -> discussion|voting is "play again"; any phase may fall back to lobby.
    """
    transitions: dict[Phase, list[Phase]] = {
        "lobby": ["discussion", "voting"],
        "discussion": ["voting", "lobby"],
        "voting": ["results", "lobby"],
        "results": ["lobby", "discussion", "voting"],
    }
    return target in transitions.get(current, [])


def move_to(room: RoomSnapshot, target: Phase) -> None:
    if not can_transition_to(room.phase, target):
        raise Conflict("BAD_STATE", f"Cannot move from {room.phase} to {target}.")
    room.phase = target
    if target == "lobby":
        room.round = None
