# File: site_kb/aggregator.py
"""site_kb.aggregator: Сведение результатов извлечения по всем страницам одного обхода."""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple
from urllib.parse import urlsplit

from site_kb.extractor.models import (
    ContactInfo,
    ExtractionResult,
    OpeningHoursEntry,
    PageExtraction,
    ServiceEntry,
)

CONTACT_URL_WEIGHTS: Sequence[Tuple[Tuple[str, ...], int]] = (
    (("kontakt", "contact"), 3),
    (("impressum", "legal"), 2),
)
ROOT_WEIGHT = 1
RAW_TEXT_SEPARATOR = "\n\n"


def contact_score(url: str) -> int:
    """URL-based preference for contact candidates: contact > legal > site root."""
    lowered = url.lower()
    score = sum(weight for needles, weight in CONTACT_URL_WEIGHTS if any(n in lowered for n in needles))
    try:
        path = urlsplit(url).path
    except ValueError:
        path = None
    if path in ("", "/"):
        score += ROOT_WEIGHT
    return score


def _pick_contact(extractions: Iterable[PageExtraction]) -> Optional[ContactInfo]:
    best: Optional[ContactInfo] = None
    best_score = -1
    for extraction in extractions:
        if extraction.contact is None:
            continue
        score = contact_score(extraction.url)
        # strict ">" keeps the first candidate on ties
        if score > best_score:
            best, best_score = extraction.contact, score
    return best


def _unique_hours(extractions: Iterable[PageExtraction]) -> List[OpeningHoursEntry]:
    unique: dict[Tuple[str, str, str], OpeningHoursEntry] = {}
    for extraction in extractions:
        for entry in extraction.opening_hours:
            unique.setdefault(entry.key, entry)
    return list(unique.values())


def _unique_services(extractions: Iterable[PageExtraction]) -> List[ServiceEntry]:
    unique: dict[str, ServiceEntry] = {}
    for extraction in extractions:
        for service in extraction.services:
            unique.setdefault(service.key, service)
    return list(unique.values())


def _raw_text(extractions: Iterable[PageExtraction]) -> Optional[str]:
    texts = [e.summary.full_text for e in extractions if e.summary.full_text]
    return RAW_TEXT_SEPARATOR.join(texts) if texts else None


def aggregate_extractions(extractions: Sequence[PageExtraction]) -> ExtractionResult:
    """Собирает извлечения всех страниц в один ExtractionResult."""
    return ExtractionResult(
        pages=[extraction.summary for extraction in extractions],
        contact=_pick_contact(extractions),
        opening_hours=_unique_hours(extractions),
        services=_unique_services(extractions),
        raw_text=_raw_text(extractions),
    )


__all__ = ["aggregate_extractions", "contact_score"]
