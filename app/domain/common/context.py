from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Protocol

from app.catalog.models import FactDeck
from app.catalog.registry import GameSummary


class FactSource(Protocol):
    def get_facts(self, game_id: str, language: str) -> FactDeck: ...


@dataclass
class ActionContext:
    """Everything a handler needs besides the snapshot itself."""
    game: GameSummary
    catalog: FactSource
    ts: int             # epoch ms, fixed for the whole engine call
    rng: random.Random

    def deck(self, language: str) -> FactDeck:
        return self.catalog.get_facts(self.game.id, language)
