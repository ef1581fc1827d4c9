from __future__ import annotations

from app.domain.common.context import ActionContext
from app.domain.common.errors import Conflict
from app.domain.common.fsm import move_to
from app.domain.common.validation import require_host
from app.domain.helpers.dealing import swap_assignment
from app.store.models import RoomSnapshot
from app.transport.protocols import InEndDiscussion, InExtendDiscussion, InSwapCard

MIN_EXTEND_SEC = 15
MAX_EXTEND_SEC = 300


def _require_discussion(room: RoomSnapshot) -> None:
    if room.phase != "discussion" or room.round is None:
        raise Conflict("BAD_STATE", "Discussion is not active.")


def handle_end_discussion(*, room: RoomSnapshot, pid: str, msg: InEndDiscussion, ctx: ActionContext) -> None:
    require_host(room, pid)
    _require_discussion(room)
    move_to(room, "voting")


def handle_extend_discussion(*, room: RoomSnapshot, pid: str, msg: InExtendDiscussion, ctx: ActionContext) -> None:
    require_host(room, pid)
    _require_discussion(room)
    seconds = min(MAX_EXTEND_SEC, max(MIN_EXTEND_SEC, int(msg.seconds)))
    room.round.discussion_ends_at += seconds * 1000


def handle_swap_card(*, room: RoomSnapshot, pid: str, msg: InSwapCard, ctx: ActionContext) -> None:
    if not ctx.game.supports_imposters:
        raise Conflict("NOT_SUPPORTED", "Card swaps are not available in this game.")
    if room.phase != "discussion" or room.round is None:
        raise Conflict("BAD_STATE", "Cards can only be swapped during discussion.")
    swap_assignment(rnd=room.round, pid=pid, deck=ctx.deck(room.settings.language), rng=ctx.rng)
    room.recent_fact_ids = list(room.round.used_fact_ids)
