# app/catalog/facts.py
from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

from app.catalog.models import FactCard, FactCardMetadata, FactDeck, FactSourceRef
from app.catalog.registry import get_game
from app.domain.common.types import FactKind, Language

DEFAULT_CORPUS = Path(__file__).resolve().parent / "data" / "fact_or_fake.json"

CURATED_REVIEWED_AT = "2025-01-15"

# Editorial limits per language (min, max characters)
_TEXT_BOUNDS: Dict[str, Tuple[int, int]] = {"en": (12, 220), "ru": (10, 260)}

_CYRILLIC = re.compile(r"[А-Яа-яЁё]")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,.;:!?])")
_REPEATED_PUNCT = re.compile(r"([,.;:!?])\1+")
_MULTI_SPACE = re.compile(r"\s{2,}")
_REFERENCE_MARK = re.compile(r"(\[[^\]]{1,40}\])|(…)")


def normalize_fact_text(text: str) -> str:
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _REPEATED_PUNCT.sub(r"\1", text)
    text = _MULTI_SPACE.sub(" ", text)
    return text.strip()


def _normalize_tag(tag: str) -> str:
    return re.sub(r"\s+", "-", tag.strip().lower())


def _unique_tags(tags: Iterable[str]) -> List[str]:
    out: List[str] = []
    for t in tags:
        n = _normalize_tag(t)
        if n and n not in out:
            out.append(n)
    return out


def _bilingual(value: Any) -> Optional[Dict[str, str]]:
    if not isinstance(value, dict):
        return None
    en, ru = value.get("en"), value.get("ru")
    if not isinstance(en, str) or not isinstance(ru, str):
        return None
    if not en.strip() or not ru.strip():
        return None
    return {"en": en, "ru": ru}


def _passes_editorial_filter(text: str, language: str) -> bool:
    trimmed = normalize_fact_text(text)
    lo, hi = _TEXT_BOUNDS[language]
    if len(trimmed) < lo or len(trimmed) > hi:
        return False
    if _REFERENCE_MARK.search(trimmed):
        return False
    return True


def is_publishable(row: Dict[str, Any], kind: FactKind) -> bool:
    """
    Publishability rules carried over from the curation pipeline.
    A row that fails any rule is dropped silently at load time.
    """
    fact_id = row.get("id")
    if not isinstance(fact_id, str) or not fact_id.strip():
        return False

    category = _bilingual(row.get("category"))
    text = _bilingual(row.get("text"))
    if category is None or text is None:
        return False
    if not _CYRILLIC.search(category["ru"]) or not _CYRILLIC.search(text["ru"]):
        return False
    if normalize_fact_text(text["en"]).lower() == normalize_fact_text(text["ru"]).lower():
        return False
    if not _passes_editorial_filter(text["en"], "en") or not _passes_editorial_filter(text["ru"], "ru"):
        return False

    if kind == "fake":
        correction = _bilingual(row.get("correction"))
        if correction is None or not _CYRILLIC.search(correction["ru"]):
            return False
        if not _passes_editorial_filter(correction["en"], "en") or not _passes_editorial_filter(correction["ru"], "ru"):
            return False

    return True


def _metadata_for(row: Dict[str, Any], kind: FactKind) -> FactCardMetadata:
    source = row.get("source")
    source_ref = FactSourceRef(**source) if isinstance(source, dict) else None
    category_tag = row["category"]["en"]
    kind_tag = "myth" if kind == "fake" else "fact"
    return FactCardMetadata(
        quality_tier="curated",
        source_type="wikipedia" if source_ref else "manual_seed",
        verification_status="verified",
        family_friendly=True,
        reviewed_at=CURATED_REVIEWED_AT,
        verified_at=CURATED_REVIEWED_AT,
        source=source_ref,
        tags=_unique_tags([*row.get("tags", []), category_tag, kind_tag, "family-friendly"]),
    )


def _to_card(row: Dict[str, Any], kind: FactKind, language: Language) -> FactCard:
    correction = row.get("correction") if kind == "fake" else None
    return FactCard(
        id=row["id"].strip(),
        category=row["category"][language],
        text=normalize_fact_text(row["text"][language]),
        kind=kind,
        correction=normalize_fact_text(correction[language]) if correction else None,
        metadata=_metadata_for(row, kind),
    )


def _dedupe(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    seen: set[str] = set()
    out: List[Dict[str, Any]] = []
    for r in rows:
        key = r["id"].strip()
        if key in seen:
            continue
        seen.add(key)
        out.append(r)
    return out


class FactCatalog:
    """
    Read-only fact catalog.
    Shared across rooms; localized decks are built once per language and cached.
    """

    def __init__(self, real_rows: List[Dict[str, Any]], fake_rows: List[Dict[str, Any]]) -> None:
        self._real_rows = _dedupe([r for r in real_rows if is_publishable(r, "real")])
        self._fake_rows = _dedupe([r for r in fake_rows if is_publishable(r, "fake")])
        self._decks: Dict[str, FactDeck] = {}

    @classmethod
    def from_file(cls, path: Path) -> "FactCatalog":
        payload = json.loads(path.read_text(encoding="utf-8"))
        real_rows = payload.get("real_facts") or []
        fake_rows = payload.get("fake_facts") or []
        return cls(list(real_rows), list(fake_rows))

    @property
    def real_count(self) -> int:
        return len(self._real_rows)

    @property
    def fake_count(self) -> int:
        return len(self._fake_rows)

    def get_facts(self, game_id: str, language: Language) -> FactDeck:
        # Both games draw from the same corpus
        if get_game(game_id) is None:
            return FactDeck()

        deck = self._decks.get(language)
        if deck is None:
            deck = FactDeck(
                real_facts=[_to_card(r, "real", language) for r in self._real_rows],
                fake_facts=[_to_card(r, "fake", language) for r in self._fake_rows],
            )
            self._decks[language] = deck
        return deck


def load_default_catalog() -> FactCatalog:
    return FactCatalog.from_file(DEFAULT_CORPUS)
