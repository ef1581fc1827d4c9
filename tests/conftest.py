"""
Shared fixtures: an in-memory store, a hand-built fact deck and a controllable clock.
"""

import random

import pytest

from app.catalog.models import FactCard, FactDeck
from app.domain.engine import RoomEngine
from app.store.memory_repo import MemoryRepo


class FakeCatalog:
    def __init__(self, deck: FactDeck):
        self.deck = deck
        self.calls = []

    def get_facts(self, game_id, language):
        self.calls.append((game_id, language))
        return self.deck


class Clock:
    def __init__(self, now: int = 1_700_000_000_000):
        self.now = now

    def __call__(self) -> int:
        return self.now

    def advance(self, ms: int) -> None:
        self.now += ms


@pytest.fixture
def deck() -> FactDeck:
    return FactDeck(
        real_facts=[
            FactCard(
                id=f"r{i:02d}",
                category="Science",
                text=f"Real statement number {i} about the world.",
                kind="real",
            )
            for i in range(1, 13)
        ],
        fake_facts=[
            FactCard(
                id=f"f{i:02d}",
                category="Myths",
                text=f"Made up claim number {i} about the world.",
                kind="fake",
                correction=f"Actual correction number {i} for the claim.",
            )
            for i in range(1, 7)
        ],
    )


@pytest.fixture
def catalog(deck) -> FakeCatalog:
    return FakeCatalog(deck)


@pytest.fixture
def make_catalog():
    return FakeCatalog


@pytest.fixture
def clock() -> Clock:
    return Clock()


@pytest.fixture
def repo() -> MemoryRepo:
    return MemoryRepo()


@pytest.fixture
def engine(repo, catalog, clock) -> RoomEngine:
    return RoomEngine(repo, catalog, clock=clock, rng=random.Random(7))
