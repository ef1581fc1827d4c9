from __future__ import annotations

from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from app.catalog.models import FactCard, FactCardMetadata
from app.domain.common.types import Answer, FactKind, GameId, Language, Phase, Role


class PlayerStore(BaseModel):
    pid: str                            # = session id
    name: str
    joined_at: int
    score: int = 0


class RoomSettingsStore(BaseModel):
    discussion_minutes: int = 2
    imposters: int = 1
    language: Language = "en"


class AssignmentStore(BaseModel):
    role: Role
    card: str
    fact_id: str
    category: str
    fact_kind: FactKind
    fact_correction: Optional[str] = None
    fact_metadata: FactCardMetadata = Field(default_factory=FactCardMetadata)


class RoundFactsStore(BaseModel):
    real: List[FactCard] = Field(default_factory=list)
    fake: List[FactCard] = Field(default_factory=list)


class RoundResultStore(BaseModel):
    """Frozen at reveal time; never edited afterwards."""
    votes: Dict[str, str]
    vote_counts: Dict[str, int]
    imposters: List[str]
    correct_answer: Optional[Answer] = None
    cards: Dict[str, AssignmentStore]
    facts: RoundFactsStore


class RoundStore(BaseModel):
    round_no: int
    used_fact_ids: List[str] = Field(default_factory=list)
    assignments: Dict[str, AssignmentStore] = Field(default_factory=dict)
    swaps_used: Dict[str, int] = Field(default_factory=dict)
    discussion_ends_at: int = 0         # epoch ms, only meaningful in discussion
    votes: Dict[str, str] = Field(default_factory=dict)   # pid -> target pid | "true" | "false"
    correct_answer: Optional[Answer] = None
    revealed: bool = False
    result: Optional[RoundResultStore] = None


class RoomSnapshot(BaseModel):
    code: str
    game_id: GameId
    host_pid: str
    password: Optional[str] = None
    created_at: int
    updated_at: int
    version: int = 1
    phase: Phase = "lobby"
    settings: RoomSettingsStore = Field(default_factory=RoomSettingsStore)
    players: Dict[str, PlayerStore] = Field(default_factory=dict)
    round: Optional[RoundStore] = None
    # Room-lifetime round bookkeeping, kept across returns to lobby
    last_round_no: int = 0
    recent_fact_ids: List[str] = Field(default_factory=list)
