from __future__ import annotations

from .facts import FactCatalog, load_default_catalog
from .models import FactCard, FactCardMetadata, FactDeck
from .registry import GameSummary, get_game, list_games

__all__ = [
    "FactCatalog",
    "load_default_catalog",
    "FactCard",
    "FactCardMetadata",
    "FactDeck",
    "GameSummary",
    "get_game",
    "list_games",
]
