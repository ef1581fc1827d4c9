from __future__ import annotations

import random
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from app.catalog.models import FactCard, FactDeck
from app.domain.common.errors import CapacityError, Conflict
from app.domain.common.types import Answer, Role
from app.store.models import AssignmentStore, RoundStore

SWAP_LIMIT_PER_ROUND = 2

_QUOTES = re.compile(r"[\"'`“”„‘’«»]")
_NON_ALNUM = re.compile(r"[\W_]+")


def conflict_key(text: Optional[str]) -> str:
    """
    Loose textual fingerprint used to spot a fake card whose cover story
    (or correction) is a near copy of a real card dealt in the same round.
    """
    value = (text or "").lower()
    value = _QUOTES.sub("", value)
    return _NON_ALNUM.sub(" ", value).strip()


def conflict_keys(text: Optional[str], correction: Optional[str] = None) -> Set[str]:
    keys = {conflict_key(text), conflict_key(correction)}
    keys.discard("")
    return keys


def _card_keys(card: FactCard) -> Set[str]:
    return conflict_keys(card.text, card.correction)


def _assignment_keys(a: AssignmentStore) -> Set[str]:
    return conflict_keys(a.card, a.fact_correction)


def to_assignment(card: FactCard, role: Role) -> AssignmentStore:
    return AssignmentStore(
        role=role,
        card=card.text,
        fact_id=card.id,
        category=card.category,
        fact_kind=card.kind,
        fact_correction=card.correction,
        fact_metadata=card.metadata.model_copy(deep=True),
    )


def assignment_to_card(a: AssignmentStore) -> FactCard:
    return FactCard(
        id=a.fact_id,
        category=a.category,
        text=a.card,
        kind=a.fact_kind,
        correction=a.fact_correction,
        metadata=a.fact_metadata.model_copy(deep=True),
    )


def _draw(
    pool: Sequence[FactCard],
    count: int,
    recent: Set[str],
    rng: random.Random,
    *,
    what: str,
) -> Tuple[List[FactCard], bool]:
    """
    Draw `count` distinct cards, preferring ids outside `recent`.
    Returns (cards, drew_from_fresh_pool).
    """
    if count <= 0:
        return [], True
    fresh = [c for c in pool if c.id not in recent]
    if len(fresh) >= count:
        return rng.sample(fresh, count), True
    if len(pool) < count:
        raise CapacityError(
            "NOT_ENOUGH_FACTS",
            f"Not enough {what} facts to deal this round (need {count}, have {len(pool)}).",
        )
    return rng.sample(list(pool), count), False


def _next_used(recent: Iterable[str], dealt: Iterable[str], fresh: bool) -> List[str]:
    # A fallback to the full pool starts a new recent-use window
    used: List[str] = list(recent) if fresh else []
    for fact_id in dealt:
        if fact_id not in used:
            used.append(fact_id)
    return used


@dataclass
class DealtRound:
    assignments: Dict[str, AssignmentStore]
    used_fact_ids: List[str]
    correct_answer: Optional[Answer] = None


def deal_imposter_round(
    *,
    player_ids: Sequence[str],
    imposter_count: int,
    deck: FactDeck,
    recent: Iterable[str],
    rng: random.Random,
) -> DealtRound:
    """
    Imposters get fake cards, everyone else a real card.
    No fact id repeats within the round and no real card shares a conflict key
    with any dealt fake card.
    """
    recent_ids = set(recent)
    order = list(player_ids)
    rng.shuffle(order)
    imposter_ids = order[:imposter_count]
    truth_ids = order[imposter_count:]

    fakes, fresh_fakes = _draw(deck.fake_facts, len(imposter_ids), recent_ids, rng, what="fake")

    fake_ids = {c.id for c in fakes}
    blocked: Set[str] = set()
    for c in fakes:
        blocked |= _card_keys(c)
    real_pool = [c for c in deck.real_facts if c.id not in fake_ids and not (_card_keys(c) & blocked)]

    reals, fresh_reals = _draw(real_pool, len(truth_ids), recent_ids, rng, what="conflict-free real")

    assignments: Dict[str, AssignmentStore] = {}
    for pid, card in zip(imposter_ids, fakes):
        assignments[pid] = to_assignment(card, "imposter")
    for pid, card in zip(truth_ids, reals):
        assignments[pid] = to_assignment(card, "truth")

    dealt = [c.id for c in fakes] + [c.id for c in reals]
    return DealtRound(
        assignments=assignments,
        used_fact_ids=_next_used(recent, dealt, fresh_fakes and fresh_reals),
    )


def deal_true_false_round(
    *,
    player_ids: Sequence[str],
    deck: FactDeck,
    recent: Iterable[str],
    rng: random.Random,
) -> DealtRound:
    """Everyone sees the same card; the answer is whether it is real."""
    pool = list(deck.real_facts) + list(deck.fake_facts)
    cards, fresh = _draw(pool, 1, set(recent), rng, what="true/false")
    card = cards[0]
    return DealtRound(
        assignments={pid: to_assignment(card, "truth") for pid in player_ids},
        used_fact_ids=_next_used(recent, [card.id], fresh),
        correct_answer="true" if card.kind == "real" else "false",
    )


def swap_assignment(*, rnd: RoundStore, pid: str, deck: FactDeck, rng: random.Random) -> AssignmentStore:
    """
    Replace `pid`'s card with an unused, conflict-free card of the same kind.
    Raises Conflict when the swap limit is spent or nothing compatible is left;
    the round is untouched in that case.
    """
    current = rnd.assignments.get(pid)
    if current is None:
        raise Conflict("NO_CARD", "You have no card this round.")

    used = rnd.swaps_used.get(pid, 0)
    if used >= SWAP_LIMIT_PER_ROUND:
        raise Conflict("SWAP_LIMIT", f"You can swap at most {SWAP_LIMIT_PER_ROUND} times per round.")

    assigned_ids: Set[str] = set()
    blocked: Set[str] = set()
    for other_pid, a in rnd.assignments.items():
        assigned_ids.add(a.fact_id)
        if other_pid == pid or a.fact_kind == current.fact_kind:
            continue
        blocked |= _assignment_keys(a)

    used_ids = set(rnd.used_fact_ids)
    pool = deck.fake_facts if current.fact_kind == "fake" else deck.real_facts
    candidates = [
        c for c in pool
        if c.id not in assigned_ids and c.id not in used_ids and not (_card_keys(c) & blocked)
    ]
    if not candidates:
        raise Conflict("NO_SWAP_CANDIDATE", "No other compatible card is available.")

    card = rng.choice(candidates)
    replacement = to_assignment(card, current.role)
    rnd.assignments[pid] = replacement
    rnd.swaps_used[pid] = used + 1
    rnd.used_fact_ids.append(card.id)
    return replacement
