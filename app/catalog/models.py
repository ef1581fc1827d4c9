# app/catalog/models.py
from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from app.domain.common.types import FactKind

QualityTier = Literal["curated", "generated"]
SourceType = Literal["manual_seed", "book_extract", "wikidata", "wikipedia", "reference_site"]
VerificationStatus = Literal["draft", "verified"]


class FactSourceRef(BaseModel):
    name: str
    url: str


class FactCardMetadata(BaseModel):
    """Editorial metadata. The engine never reads it, only passes it through."""
    quality_tier: QualityTier = "curated"
    source_type: SourceType = "manual_seed"
    verification_status: VerificationStatus = "verified"
    family_friendly: bool = True
    reviewed_at: str = ""
    verified_at: Optional[str] = None
    source: Optional[FactSourceRef] = None
    tags: List[str] = Field(default_factory=list)
    notes: Optional[str] = None


class FactCard(BaseModel):
    id: str
    category: str
    text: str
    kind: FactKind
    correction: Optional[str] = None
    metadata: FactCardMetadata = Field(default_factory=FactCardMetadata)


class FactDeck(BaseModel):
    real_facts: List[FactCard] = Field(default_factory=list)
    fake_facts: List[FactCard] = Field(default_factory=list)
