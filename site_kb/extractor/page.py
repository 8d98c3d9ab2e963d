# site_kb/extractor/page.py
"""Per-page content extraction: summary plus structured facts."""
from __future__ import annotations

import re
from typing import Iterable, List, Optional, Sequence

from site_kb.crawler.models import CrawledPage
from site_kb.extractor.contact import extract_contact
from site_kb.extractor.models import PageExtraction, PageSummary
from site_kb.extractor.opening_hours import extract_opening_hours
from site_kb.extractor.services import extract_services
from site_kb.logger import get_logger
from site_kb.parser.html_parser import block_lines, page_title, readable_lines, sanitize_html

PREVIEW_LINES = 6
PREVIEW_MAX_CHARS = 800
MIN_PROSE_LENGTH = 20
LONG_LINE_LENGTH = 40

_SENTENCE_PUNCTUATION_RE = re.compile(r"[.!?]")

log = get_logger("extractor")


def looks_like_prose(line: str) -> bool:
    """At least 20 chars with sentence punctuation, or simply longer than 40."""
    if len(line) > LONG_LINE_LENGTH:
        return True
    return len(line) >= MIN_PROSE_LENGTH and bool(_SENTENCE_PUNCTUATION_RE.search(line))


def _truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return f"{text[:limit].rstrip()}…"


def summarize_page(url: str, title: Optional[str], lines: Sequence[str]) -> PageSummary:
    """Preview and full text start at the first prose-like line (or the first line)."""
    if not lines:
        return PageSummary(url=url, title=title)
    start = next((i for i, line in enumerate(lines) if looks_like_prose(line)), 0)
    body = lines[start:]
    preview = _truncate(" ".join(body[:PREVIEW_LINES]), PREVIEW_MAX_CHARS)
    return PageSummary(url=url, title=title, preview=preview, full_text=" ".join(body))


def extract_page(page: CrawledPage) -> PageExtraction:
    """Parse one crawled page into its summary, contact, hours and services."""
    soup = sanitize_html(page.html)
    text_lines = readable_lines(soup)
    body_lines = block_lines(soup.body if soup.body is not None else soup)

    extraction = PageExtraction(
        summary=summarize_page(page.url, page_title(soup), [line.text for line in text_lines]),
        contact=extract_contact(soup, body_lines),
        opening_hours=tuple(extract_opening_hours(body_lines)),
        services=tuple(extract_services(text_lines)),
    )
    log.debug(
        "Extracted %s: contact=%s, %d hours, %d services",
        page.url,
        extraction.contact is not None,
        len(extraction.opening_hours),
        len(extraction.services),
    )
    return extraction


def extract_pages(pages: Iterable[CrawledPage]) -> List[PageExtraction]:
    return [extract_page(page) for page in pages]


__all__ = ["extract_page", "extract_pages", "looks_like_prose", "summarize_page"]
