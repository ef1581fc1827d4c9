from __future__ import annotations

import logging
from typing import Optional

from app.catalog.registry import GameSummary
from app.domain.common.context import ActionContext
from app.domain.common.errors import Conflict, Forbidden
from app.domain.common.fsm import move_to
from app.domain.common.end_round import finalize_round
from app.domain.common.players import longest_tenured
from app.domain.common.validation import is_member
from app.domain.helpers.voting import have_all_players_voted
from app.store.models import PlayerStore, RoomSettingsStore, RoomSnapshot
from app.transport.protocols import InLeaveRoom

logger = logging.getLogger(__name__)


def build_new_room(
    *,
    code: str,
    game: GameSummary,
    pid: str,
    name: str,
    password: Optional[str],
    language: Optional[str],
    ts: int,
) -> RoomSnapshot:
    """Fresh lobby with the creator as its only player and host."""
    settings = RoomSettingsStore()
    if language:
        settings.language = language
    return RoomSnapshot(
        code=code,
        game_id=game.id,
        host_pid=pid,
        password=password,
        created_at=ts,
        updated_at=ts,
        version=1,
        phase="lobby",
        settings=settings,
        players={pid: PlayerStore(pid=pid, name=name, joined_at=ts, score=0)},
        round=None,
    )


def handle_join(*, room: RoomSnapshot, pid: str, name: str, password: Optional[str], ctx: ActionContext) -> None:
    """
    Join:
    - password must match when the room has one
    - an existing member only gets their display name updated (any phase)
    - newcomers are accepted in the lobby only
    """
    if room.password and room.password != password:
        raise Forbidden("BAD_PASSWORD", "Incorrect room password.")

    existing = room.players.get(pid)
    if existing is not None:
        existing.name = name
        return

    if room.phase != "lobby":
        raise Conflict("ROUND_IN_PROGRESS", "Round already in progress. Join after results.")

    room.players[pid] = PlayerStore(pid=pid, name=name, joined_at=ctx.ts, score=0)


def handle_leave(*, room: RoomSnapshot, pid: str, msg: InLeaveRoom, ctx: ActionContext) -> None:
    """
    Leave deletes the player entry outright.
    The caller deletes the room when nobody is left.
    """
    if not is_member(room, pid):
        return

    del room.players[pid]
    if not room.players:
        return

    if room.host_pid == pid:
        successor = longest_tenured(room)
        room.host_pid = successor.pid
        logger.info("room %s host left, handing over to %s", room.code, successor.pid)

    if room.phase != "lobby" and len(room.players) < ctx.game.min_players:
        move_to(room, "lobby")
        return

    if room.phase == "voting" and room.round is not None and not room.round.revealed and have_all_players_voted(room):
        finalize_round(room, ctx.game)
