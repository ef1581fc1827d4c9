# app/domain/common/types.py
from __future__ import annotations

from typing import Literal

GameId = Literal["fact-or-fake", "true-or-false"]
Language = Literal["en", "ru"]

Phase = Literal["lobby", "discussion", "voting", "results"]

Role = Literal["truth", "imposter"]
FactKind = Literal["real", "fake"]
Answer = Literal["true", "false"]
