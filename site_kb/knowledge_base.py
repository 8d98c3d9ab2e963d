# File: site_kb/knowledge_base.py
"""site_kb.knowledge_base: the final document handed to prompt generation.

:func:`build_knowledge_base` is a pure assembly step. It stamps the source
URL and generation time onto the aggregated extraction and derives one page
entry per crawled page. The result is frozen; ``to_dict()`` / ``json()`` give
the camelCase wire format.
"""
from __future__ import annotations

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional, Tuple
from urllib.parse import urlsplit

from site_kb.extractor.models import (
    ContactInfo,
    ExtractionResult,
    OpeningHoursEntry,
    PageSummary,
    ServiceEntry,
)

PageType = Literal["home", "subpage", "faq", "contact", "other"]

_HOME_PATHS = frozenset({"", "/index", "/index.html", "/index.php", "/start", "/startseite", "/home"})
_CONTACT_MARKERS = ("kontakt", "contact", "impressum", "anfahrt")
_FAQ_MARKERS = ("faq", "haeufige-fragen", "haufige-fragen", "fragen")


@dataclass(frozen=True, slots=True)
class KnowledgeBaseSection:
    content: str
    heading: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"content": self.content}
        if self.heading is not None:
            data["heading"] = self.heading
        return data


@dataclass(frozen=True, slots=True)
class KnowledgeBasePage:
    url: str
    type: PageType
    title: Optional[str] = None
    sections: Tuple[KnowledgeBaseSection, ...] = ()
    main_text_snippet: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"url": self.url}
        if self.title is not None:
            data["title"] = self.title
        data["type"] = self.type
        data["sections"] = [section.to_dict() for section in self.sections]
        if self.main_text_snippet is not None:
            data["mainTextSnippet"] = self.main_text_snippet
        return data


@dataclass(frozen=True, slots=True)
class KnowledgeBase:
    source_url: str
    generated_at: str
    pages: Tuple[KnowledgeBasePage, ...] = ()
    contact: Optional[ContactInfo] = None
    opening_hours: Tuple[OpeningHoursEntry, ...] = ()
    services: Tuple[ServiceEntry, ...] = ()
    raw_text_concat: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "sourceUrl": self.source_url,
            "generatedAt": self.generated_at,
            "pages": [page.to_dict() for page in self.pages],
            "contact": self.contact.to_dict() if self.contact is not None else None,
            "openingHours": [entry.to_dict() for entry in self.opening_hours],
            "services": [service.to_dict() for service in self.services],
        }
        if self.raw_text_concat is not None:
            data["rawTextConcat"] = self.raw_text_concat
        return data

    def json(self, *, pretty: bool = False) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False, indent=2 if pretty else None)


def detect_page_type(url: str, source_url: str) -> PageType:
    """Classify a page by its URL path relative to the crawl root."""
    root = source_url.rstrip("/").lower()
    lowered = url.lower()
    if lowered.startswith(root):
        path = lowered[len(root):] or "/"
    else:
        try:
            path = urlsplit(lowered).path or "/"
        except ValueError:
            return "other"
    path = path.split("?", 1)[0].split("#", 1)[0] or "/"

    if path.rstrip("/") in _HOME_PATHS:
        return "home"
    if any(marker in path for marker in _CONTACT_MARKERS):
        return "contact"
    if any(marker in path for marker in _FAQ_MARKERS):
        return "faq"
    return "subpage"


def _page_entry(summary: PageSummary, source_url: str) -> KnowledgeBasePage:
    content = (summary.full_text or "").strip()
    sections = (KnowledgeBaseSection(content=content, heading=summary.title),) if content else ()
    return KnowledgeBasePage(
        url=summary.url,
        type=detect_page_type(summary.url, source_url),
        title=summary.title,
        sections=sections,
        main_text_snippet=summary.preview,
    )


def _with_raw(entry: OpeningHoursEntry) -> OpeningHoursEntry:
    if entry.raw:
        return entry
    return OpeningHoursEntry(
        day=entry.day, opens=entry.opens, closes=entry.closes, raw=f"{entry.day} {entry.opens}-{entry.closes}"
    )


def build_knowledge_base(
    source_url: str,
    extraction: ExtractionResult,
    *,
    generated_at: Optional[datetime] = None,
) -> KnowledgeBase:
    """Assemble the knowledge base; *extraction* is left untouched."""
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat().replace("+00:00", "Z")
    return KnowledgeBase(
        source_url=source_url,
        generated_at=stamp,
        pages=tuple(_page_entry(summary, source_url) for summary in extraction.pages),
        contact=extraction.contact,
        opening_hours=tuple(_with_raw(entry) for entry in extraction.opening_hours),
        services=tuple(extraction.services),
        raw_text_concat=extraction.raw_text,
    )


__all__ = [
    "KnowledgeBase",
    "KnowledgeBasePage",
    "KnowledgeBaseSection",
    "build_knowledge_base",
    "detect_page_type",
]
