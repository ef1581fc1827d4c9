from __future__ import annotations

from app.catalog.registry import GameSummary
from app.domain.common.end_round import finalize_round
from app.domain.common.fsm import move_to
from app.domain.helpers.voting import have_all_players_voted
from app.store.models import RoomSnapshot


def apply_automatic_transitions(room: RoomSnapshot, game: GameSummary, ts: int) -> bool:
    """
    Time- and completion-driven phase advancement.
    Safe on an already settled snapshot (returns False, touches nothing). Never raises.
    """
    rnd = room.round
    if rnd is None:
        return False

    changed = False

    if room.phase == "discussion" and ts >= rnd.discussion_ends_at:
        move_to(room, "voting")
        changed = True

    if room.phase == "voting" and not rnd.revealed and have_all_players_voted(room):
        finalize_round(room, game)
        changed = True

    return changed
