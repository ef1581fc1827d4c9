from __future__ import annotations

import logging

from app.domain.common.context import ActionContext
from app.domain.common.errors import Conflict
from app.domain.common.fsm import move_to
from app.domain.common.validation import require_host
from app.domain.helpers.dealing import deal_imposter_round, deal_true_false_round
from app.store.models import RoomSnapshot, RoundStore
from app.transport.protocols import InBackToLobby, InPlayAgain, InStartRound, InUpdateSettings

logger = logging.getLogger(__name__)

MIN_DISCUSSION_MINUTES = 1
MAX_DISCUSSION_MINUTES = 5


def compute_max_imposters(room: RoomSnapshot, ctx: ActionContext) -> int:
    by_players = max(1, len(room.players) - 2)
    return max(1, min(by_players, ctx.game.max_imposters))


def clamp_discussion_minutes(value: int) -> int:
    return min(MAX_DISCUSSION_MINUTES, max(MIN_DISCUSSION_MINUTES, int(value)))


def clamp_imposters(room: RoomSnapshot, ctx: ActionContext, value: int) -> int:
    return min(compute_max_imposters(room, ctx), max(1, int(value)))


def handle_update_settings(*, room: RoomSnapshot, pid: str, msg: InUpdateSettings, ctx: ActionContext) -> None:
    require_host(room, pid)
    if room.phase != "lobby":
        raise Conflict("BAD_STATE", "Settings can only be changed in the lobby.")

    room.settings.discussion_minutes = clamp_discussion_minutes(msg.discussion_minutes)
    room.settings.imposters = clamp_imposters(room, ctx, msg.imposters)
    if msg.language is not None:
        room.settings.language = msg.language


def start_round(room: RoomSnapshot, ctx: ActionContext) -> None:
    """
    Deal a fresh round and enter discussion (or voting for games without one).
    Round numbers and the recent-use set live on the room, so they survive lobby returns.
    """
    game = ctx.game
    if len(room.players) < game.min_players:
        raise Conflict("NOT_ENOUGH_PLAYERS", f"At least {game.min_players} players are required to start.")

    recent = list(room.recent_fact_ids)

    player_ids = list(room.players)
    deck = ctx.deck(room.settings.language)

    if game.supports_imposters:
        imposters = clamp_imposters(room, ctx, room.settings.imposters)
        room.settings.imposters = imposters
        dealt = deal_imposter_round(
            player_ids=player_ids,
            imposter_count=imposters,
            deck=deck,
            recent=recent,
            rng=ctx.rng,
        )
    else:
        dealt = deal_true_false_round(player_ids=player_ids, deck=deck, recent=recent, rng=ctx.rng)

    room.round = RoundStore(
        round_no=room.last_round_no + 1,
        used_fact_ids=dealt.used_fact_ids,
        assignments=dealt.assignments,
        swaps_used={},
        discussion_ends_at=ctx.ts + room.settings.discussion_minutes * 60_000 if game.has_discussion else 0,
        votes={},
        correct_answer=dealt.correct_answer,
        revealed=False,
        result=None,
    )
    room.last_round_no = room.round.round_no
    room.recent_fact_ids = list(dealt.used_fact_ids)
    move_to(room, "discussion" if game.has_discussion else "voting")
    logger.info("room %s round %s started with %d players", room.code, room.round.round_no, len(player_ids))


def handle_start_round(*, room: RoomSnapshot, pid: str, msg: InStartRound, ctx: ActionContext) -> None:
    require_host(room, pid)
    if room.phase != "lobby":
        raise Conflict("BAD_STATE", "You can only start from the lobby.")
    start_round(room, ctx)


def handle_play_again(*, room: RoomSnapshot, pid: str, msg: InPlayAgain, ctx: ActionContext) -> None:
    require_host(room, pid)
    if room.phase not in ("results", "lobby"):
        raise Conflict("BAD_STATE", "Finish this round before starting a new one.")
    start_round(room, ctx)


def handle_back_to_lobby(*, room: RoomSnapshot, pid: str, msg: InBackToLobby, ctx: ActionContext) -> None:
    require_host(room, pid)
    if room.phase != "results":
        raise Conflict("BAD_STATE", "You can only return to lobby after results.")
    move_to(room, "lobby")
