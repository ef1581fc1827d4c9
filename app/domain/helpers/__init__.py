from __future__ import annotations

from .dealing import deal_imposter_round, deal_true_false_round, swap_assignment
from .voting import build_vote_counts, have_all_players_voted

__all__ = [
    "deal_imposter_round",
    "deal_true_false_round",
    "swap_assignment",
    "build_vote_counts",
    "have_all_players_voted",
]
