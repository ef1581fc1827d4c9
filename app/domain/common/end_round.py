from __future__ import annotations

import logging
import math
from typing import Dict, List

from app.catalog.models import FactCard
from app.catalog.registry import GameSummary
from app.domain.common.errors import Conflict
from app.domain.common.fsm import move_to
from app.domain.common.players import sorted_players
from app.domain.helpers.dealing import assignment_to_card
from app.domain.helpers.voting import build_vote_counts
from app.store.models import RoomSnapshot, RoundFactsStore, RoundResultStore, RoundStore

logger = logging.getLogger(__name__)


def _round_facts(rnd: RoundStore) -> RoundFactsStore:
    seen: Dict[str, FactCard] = {}
    for a in rnd.assignments.values():
        if a.fact_id not in seen:
            seen[a.fact_id] = assignment_to_card(a)
    cards = list(seen.values())
    return RoundFactsStore(
        real=[c for c in cards if c.kind == "real"],
        fake=[c for c in cards if c.kind == "fake"],
    )


def finalize_round(room: RoomSnapshot, game: GameSummary) -> RoundResultStore:
    """
    Score the round, freeze its RoundResult and move to results.
    Imposter game:
      - each non-imposter who voted for any imposter: +1
      - each imposter with fewer than ceil(players/2) votes against: +1
    True/false game:
      - each player whose answer matches the correct answer: +1
    A round can be finalized once; a second attempt is a Conflict.
    """
    rnd = room.round
    if rnd is None:
        raise Conflict("NO_ROUND", "No active round to reveal.")
    if rnd.revealed:
        raise Conflict("ALREADY_REVEALED", "Results were already revealed for this round.")

    players = sorted_players(room)
    vote_counts = build_vote_counts(rnd.votes)
    imposters: List[str] = []

    if game.supports_imposters:
        imposters = [pid for pid, a in rnd.assignments.items() if a.role == "imposter"]
        imposter_set = set(imposters)

        for p in players:
            vote = rnd.votes.get(p.pid)
            if vote and p.pid not in imposter_set and vote in imposter_set:
                p.score += 1

        survival_threshold = math.ceil(len(players) / 2)
        for imposter_pid in imposters:
            if vote_counts.get(imposter_pid, 0) < survival_threshold and imposter_pid in room.players:
                room.players[imposter_pid].score += 1
    else:
        for p in players:
            if rnd.correct_answer and rnd.votes.get(p.pid) == rnd.correct_answer:
                p.score += 1

    result = RoundResultStore(
        votes=dict(rnd.votes),
        vote_counts=vote_counts,
        imposters=imposters,
        correct_answer=rnd.correct_answer,
        cards={pid: a.model_copy(deep=True) for pid, a in rnd.assignments.items()},
        facts=_round_facts(rnd),
    )
    rnd.revealed = True
    rnd.result = result
    move_to(room, "results")

    logger.info("room %s round %s finalized (votes=%d)", room.code, rnd.round_no, len(rnd.votes))
    return result
