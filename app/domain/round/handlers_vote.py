from __future__ import annotations

from app.domain.common.context import ActionContext
from app.domain.common.end_round import finalize_round
from app.domain.common.errors import Conflict, Forbidden, NotFound
from app.domain.common.validation import require_host
from app.domain.helpers.voting import have_all_players_voted
from app.store.models import RoomSnapshot
from app.transport.protocols import InAnswerTrueFalse, InCastVote, InRevealResults


def _require_voting(room: RoomSnapshot) -> None:
    if room.phase != "voting" or room.round is None:
        raise Conflict("BAD_STATE", "Voting is not active.")


def _finalize_if_complete(room: RoomSnapshot, ctx: ActionContext) -> None:
    if have_all_players_voted(room):
        finalize_round(room, ctx.game)


def handle_cast_vote(*, room: RoomSnapshot, pid: str, msg: InCastVote, ctx: ActionContext) -> None:
    if not ctx.game.supports_imposters:
        raise Conflict("NOT_SUPPORTED", "This game uses true/false answers, not votes.")
    _require_voting(room)

    if msg.target_pid not in room.players:
        raise NotFound("TARGET_NOT_FOUND", "Vote target not found.")
    if msg.target_pid == pid:
        raise Forbidden("SELF_VOTE", "You cannot vote for yourself.")

    room.round.votes[pid] = msg.target_pid
    _finalize_if_complete(room, ctx)


def handle_answer_true_false(*, room: RoomSnapshot, pid: str, msg: InAnswerTrueFalse, ctx: ActionContext) -> None:
    if ctx.game.supports_imposters:
        raise Conflict("NOT_SUPPORTED", "This game uses votes, not true/false answers.")
    _require_voting(room)

    room.round.votes[pid] = msg.answer
    _finalize_if_complete(room, ctx)


def handle_reveal_results(*, room: RoomSnapshot, pid: str, msg: InRevealResults, ctx: ActionContext) -> None:
    require_host(room, pid)
    if room.phase != "voting":
        raise Conflict("BAD_STATE", "Results can only be revealed during voting.")
    finalize_round(room, ctx.game)
