# app/domain/common/validation.py
from __future__ import annotations

from typing import Optional

from app.domain.common.errors import Forbidden, ValidationFailed
from app.store.models import PlayerStore, RoomSnapshot

MAX_NAME_LENGTH = 24


def is_host(player: Optional[PlayerStore], room: RoomSnapshot) -> bool:
    """Check if player is the room host."""
    return player is not None and room.host_pid == player.pid


def is_member(room: RoomSnapshot, pid: str) -> bool:
    return pid in room.players


def require_session_id(session_id: Optional[str]) -> str:
    value = (session_id or "").strip()
    if not value:
        raise ValidationFailed("NO_PID", "Missing session id.")
    return value


def require_room_code(room_code: Optional[str]) -> str:
    value = normalize_room_code(room_code or "")
    if not value:
        raise ValidationFailed("NO_ROOM_CODE", "Room code is required.")
    return value


def require_display_name(raw: Optional[str]) -> str:
    value = sanitize_display_name(raw or "")
    if not value:
        raise ValidationFailed("NO_NAME", "Display name is required.")
    return value


def require_member(room: RoomSnapshot, pid: str) -> PlayerStore:
    player = room.players.get(pid)
    if player is None:
        raise Forbidden("NOT_IN_ROOM", "You are not in this room.")
    return player


def require_host(room: RoomSnapshot, pid: str) -> None:
    if not is_host(room.players.get(pid), room):
        raise Forbidden("NOT_HOST", "Only the room host can perform this action.")


def normalize_room_code(room_code: str) -> str:
    return room_code.strip().upper()


def sanitize_display_name(raw: str) -> str:
    return raw.strip()[:MAX_NAME_LENGTH]


def sanitize_password(raw: Optional[str]) -> Optional[str]:
    if not raw:
        return None
    value = raw.strip()
    return value or None
