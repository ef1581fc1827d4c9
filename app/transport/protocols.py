# app/transport/protocols.py
from __future__ import annotations

from typing import Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

from app.domain.common.types import Answer, GameId, Language, Phase, Role
from app.store.models import AssignmentStore, RoomSettingsStore, RoundFactsStore


# =========================
# Incoming (Client -> Server)
# =========================

class InCreateRoom(BaseModel):
    session_id: str
    display_name: str = Field(max_length=200)
    game_id: GameId = "fact-or-fake"
    password: Optional[str] = None
    language: Optional[Language] = None


class InJoinRoom(BaseModel):
    session_id: str
    room_code: str
    display_name: str = Field(max_length=200)
    password: Optional[str] = None


class InBase(BaseModel):
    type: str


# ---- Lobby ----

class InUpdateSettings(InBase):
    type: Literal["update_settings"] = "update_settings"
    discussion_minutes: int
    imposters: int
    language: Optional[Language] = None


class InStartRound(InBase):
    type: Literal["start_round"] = "start_round"


class InPlayAgain(InBase):
    type: Literal["play_again"] = "play_again"


class InBackToLobby(InBase):
    type: Literal["back_to_lobby"] = "back_to_lobby"


# ---- Discussion ----

class InEndDiscussion(InBase):
    type: Literal["end_discussion"] = "end_discussion"


class InExtendDiscussion(InBase):
    type: Literal["extend_discussion"] = "extend_discussion"
    seconds: int = 30


class InSwapCard(InBase):
    type: Literal["swap_card"] = "swap_card"


# ---- Voting ----

class InCastVote(InBase):
    type: Literal["cast_vote"] = "cast_vote"
    target_pid: str = Field(min_length=1)


class InAnswerTrueFalse(InBase):
    type: Literal["answer_true_false"] = "answer_true_false"
    answer: Answer


class InRevealResults(InBase):
    type: Literal["reveal_results"] = "reveal_results"


# ---- Lifecycle ----

class InLeaveRoom(InBase):
    type: Literal["leave_room"] = "leave_room"


# Closed set of room actions, discriminated by "type"
RoomAction = Union[
    InUpdateSettings,
    InStartRound,
    InPlayAgain,
    InBackToLobby,
    InEndDiscussion,
    InExtendDiscussion,
    InSwapCard,
    InCastVote,
    InAnswerTrueFalse,
    InRevealResults,
    InLeaveRoom,
]


class InAction(BaseModel):
    session_id: str
    action: RoomAction = Field(discriminator="type")


# =========================
# Outgoing (Server -> Client)
# =========================

class OutBase(BaseModel):
    type: str


class OutError(OutBase):
    type: Literal["error"] = "error"
    code: str
    kind: str = "validation"
    message: str


class OutPublicPlayer(BaseModel):
    pid: str
    name: str
    score: int
    is_host: bool
    has_voted: bool


class OutPublicRound(BaseModel):
    round_no: int
    discussion_ends_at: Optional[int] = None
    my_card: Optional[str] = None
    my_role: Optional[Role] = None
    my_category: Optional[str] = None
    my_swaps_remaining: int = 0
    my_vote: Optional[str] = None
    my_answer: Optional[Answer] = None
    # results only
    correct_answer: Optional[Answer] = None
    imposters: Optional[List[str]] = None
    votes: Optional[Dict[str, str]] = None
    vote_counts: Optional[Dict[str, int]] = None
    cards: Optional[Dict[str, AssignmentStore]] = None
    facts: Optional[RoundFactsStore] = None


class OutRoomView(OutBase):
    type: Literal["room_view"] = "room_view"
    joined: bool
    room_code: str
    game_id: GameId
    language: Language
    version: int
    phase: Phase
    settings: RoomSettingsStore
    min_players: int
    players: List[OutPublicPlayer] = Field(default_factory=list)
    host_pid: Optional[str] = None
    me_pid: Optional[str] = None
    can_start: bool = False
    requires_password: bool = False
    round: Optional[OutPublicRound] = None
    message: Optional[str] = None

