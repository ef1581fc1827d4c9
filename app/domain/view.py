from __future__ import annotations

from typing import Optional

from app.catalog.registry import GameSummary, get_game
from app.domain.common.players import sorted_players
from app.domain.common.types import GameId
from app.domain.helpers.dealing import SWAP_LIMIT_PER_ROUND
from app.store.models import RoomSettingsStore, RoomSnapshot
from app.transport.protocols import OutPublicPlayer, OutPublicRound, OutRoomView

CLOSED_ROOM_MESSAGE = "This room has closed."


def _public_round(room: RoomSnapshot, viewer_pid: str, game: GameSummary) -> Optional[OutPublicRound]:
    rnd = room.round
    if rnd is None:
        return None

    assignment = rnd.assignments.get(viewer_pid)
    my_vote = rnd.votes.get(viewer_pid)
    out = OutPublicRound(
        round_no=rnd.round_no,
        discussion_ends_at=rnd.discussion_ends_at if room.phase == "discussion" else None,
        my_card=assignment.card if assignment else None,
        my_role=assignment.role if assignment else None,
        my_category=assignment.category if assignment else None,
        my_swaps_remaining=(
            max(0, SWAP_LIMIT_PER_ROUND - rnd.swaps_used.get(viewer_pid, 0))
            if assignment and game.supports_imposters
            else 0
        ),
        my_vote=my_vote if game.supports_imposters else None,
        my_answer=my_vote if not game.supports_imposters else None,
    )

    # Hidden information leaves the server only once the round is revealed
    if room.phase == "results" and rnd.result is not None:
        result = rnd.result
        out.correct_answer = result.correct_answer
        out.imposters = list(result.imposters)
        out.votes = dict(result.votes)
        out.vote_counts = dict(result.vote_counts)
        out.cards = {pid: a.model_copy(deep=True) for pid, a in result.cards.items()}
        out.facts = result.facts.model_copy(deep=True)
    return out


def build_room_view(room: RoomSnapshot, viewer_pid: str, game: GameSummary) -> OutRoomView:
    """
    Project a snapshot for one viewer.
    Non-members see the public roster only; members additionally see their own card.
    """
    players = sorted_players(room)
    show_voted = room.phase in ("voting", "results")
    rnd = room.round

    public_players = [
        OutPublicPlayer(
            pid=p.pid,
            name=p.name,
            score=p.score,
            is_host=room.host_pid == p.pid,
            has_voted=bool(show_voted and rnd is not None and rnd.votes.get(p.pid)),
        )
        for p in players
    ]

    common = dict(
        room_code=room.code,
        game_id=room.game_id,
        language=room.settings.language,
        version=room.version,
        phase=room.phase,
        settings=room.settings.model_copy(),
        min_players=game.min_players,
        players=public_players,
        host_pid=room.host_pid,
        requires_password=bool(room.password),
    )

    if viewer_pid not in room.players:
        message = (
            "Enter your name to join this room."
            if room.phase == "lobby"
            else "A round is in progress. Join when the lobby opens."
        )
        return OutRoomView(joined=False, me_pid=None, can_start=False, round=None, message=message, **common)

    enough = len(players) >= game.min_players
    message = None
    if room.phase == "lobby" and not enough:
        message = f"Need at least {game.min_players} players to start."

    return OutRoomView(
        joined=True,
        me_pid=viewer_pid,
        can_start=room.host_pid == viewer_pid and room.phase == "lobby" and enough,
        round=_public_round(room, viewer_pid, game),
        message=message,
        **common,
    )


def build_closed_room_view(room_code: str, game_id: GameId = "fact-or-fake") -> OutRoomView:
    game = get_game(game_id)
    settings = RoomSettingsStore()
    return OutRoomView(
        joined=False,
        room_code=room_code,
        game_id=game_id,
        language=settings.language,
        version=0,
        phase="lobby",
        settings=settings,
        min_players=game.min_players if game else 0,
        players=[],
        host_pid=None,
        me_pid=None,
        can_start=False,
        requires_password=False,
        round=None,
        message=CLOSED_ROOM_MESSAGE,
    )
