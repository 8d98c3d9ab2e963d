# site_kb/crawler/models.py
"""
Data models for the site_kb crawler.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

DEFAULT_MAX_DEPTH = 2
DEFAULT_MAX_PAGES = 25


@dataclass(frozen=True, slots=True)
class CrawlOptions:
    """Depth and page budget of one crawl; both bounds are enforced independently."""

    max_depth: int = DEFAULT_MAX_DEPTH
    max_pages: int = DEFAULT_MAX_PAGES

    def __post_init__(self) -> None:
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.max_pages < 1:
            raise ValueError(f"max_pages must be >= 1, got {self.max_pages}")


@dataclass(frozen=True, slots=True)
class QueueItem:
    url: str
    depth: int


@dataclass(frozen=True, slots=True)
class CrawledPage:
    """A successfully fetched HTML page."""

    url: str
    depth: int
    html: str


@dataclass(frozen=True, slots=True)
class CrawlError:
    """A URL whose fetch failed; recorded once, never retried within a run."""

    url: str
    message: str

    def to_dict(self) -> Dict[str, Any]:
        return {"url": self.url, "error": self.message}


@dataclass(slots=True)
class CrawlResult:
    """Pages and per-URL errors of one crawl invocation."""

    pages: List[CrawledPage] = field(default_factory=list)
    errors: List[CrawlError] = field(default_factory=list)

    @property
    def urls(self) -> List[str]:
        return [page.url for page in self.pages]
