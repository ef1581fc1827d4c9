# app/catalog/registry.py
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel

from app.domain.common.types import GameId


class GameSummary(BaseModel):
    id: GameId
    title: str
    description: str
    min_players: int
    max_imposters: int
    supports_imposters: bool
    has_discussion: bool


GAMES: List[GameSummary] = [
    GameSummary(
        id="fact-or-fake",
        title="Fact or Fake",
        description="Find the player with fake information before votes are locked.",
        min_players=3,
        max_imposters=3,
        supports_imposters=True,
        has_discussion=True,
    ),
    GameSummary(
        id="true-or-false",
        title="True or False",
        description="Everyone sees the same statement. Decide together whether it is true.",
        min_players=2,
        max_imposters=1,
        supports_imposters=False,
        has_discussion=False,
    ),
]


def list_games() -> List[GameSummary]:
    return list(GAMES)


def get_game(game_id: str) -> Optional[GameSummary]:
    for game in GAMES:
        if game.id == game_id:
            return game
    return None
