from __future__ import annotations

from typing import Dict

from app.store.models import RoomSnapshot


def build_vote_counts(votes: Dict[str, str]) -> Dict[str, int]:
    counts: Dict[str, int] = {}
    for target in votes.values():
        counts[target] = counts.get(target, 0) + 1
    return counts


def have_all_players_voted(room: RoomSnapshot) -> bool:
    """
    Every *current* player has a recorded vote/answer.
    Votes left behind by departed players are ignored.
    """
    if room.round is None or not room.players:
        return False
    votes = room.round.votes
    return all(votes.get(pid) for pid in room.players)
