# === FILE: site_kb/parser/html_parser.py ===
"""HTML cleanup and readable-text helpers.

Everything downstream (contact details, opening hours, services, page
summaries) works on one of two text views of a sanitised document:

* :func:`readable_lines`: whitelisted content tags (headings, paragraphs,
  list items, anchors) from the main content area, filtered for code,
  consent banners and "read more" links. This is the prose view.
* :func:`block_lines`: the whole body flattened block by block, with table
  rows kept on one line. This is the "body text" view used for regex-driven
  fact extraction, where addresses and hours often live in ``<div>``, ``<td>``
  or ``<br>``-separated markup.
"""
from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass
from typing import List, Optional

from bs4 import BeautifulSoup
from bs4.element import NavigableString, PreformattedString, Tag

__all__: Sequence[str] = (
    "TextLine",
    "sanitize_html",
    "normalize_text",
    "looks_like_code",
    "looks_like_consent",
    "readable_lines",
    "extract_readable_text",
    "block_lines",
    "page_title",
)

BLOCKED_TAGS: tuple[str, ...] = (
    "script", "style", "noscript", "template", "iframe",
    "svg", "canvas", "video", "audio", "source", "track",
)
CONTENT_SELECTORS = "h1, h2, h3, h4, p, li, a"
MAIN_SELECTORS = "main, article, [role='main']"
HEADING_TAGS = frozenset({"h1", "h2", "h3", "h4", "h5", "h6"})

MIN_LINE_LENGTH = 3
MAX_LINE_LENGTH = 1200
MIN_ANCHOR_LENGTH = 8

_BLOCK_LEVEL = frozenset(
    {
        "address", "article", "aside", "blockquote", "body", "br", "dd", "details", "dialog",
        "div", "dl", "dt", "fieldset", "figcaption", "figure", "footer", "form", "h1", "h2",
        "h3", "h4", "h5", "h6", "header", "hr", "li", "main", "nav", "ol", "p", "pre",
        "section", "summary", "table", "tbody", "tfoot", "thead", "tr", "ul",
    }
)
_CELL_TAGS = frozenset({"td", "th"})

_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden", re.IGNORECASE)
_WHITESPACE_RE = re.compile(r"\s+")
_CODE_RES = (
    re.compile(r"[{}<>]"),
    re.compile(r"=>|[\w\]\)]\s*[+\-*/]?=\s*[\w'\"\[({]"),
    re.compile(r"[\w$]\((?:[^()]{0,80})\)\s*[;{]"),
    re.compile(r"\b(?:function|const|let|var)\s+[\w$]+\s*[=(]"),
    re.compile(r"\bfunction\s*\(|\breturn\s+[\w$]+\s*;|document\.|window\.|querySelector|new\s+URL"),
    re.compile(r";\s*$"),
    re.compile(r"[A-Za-z0-9+/]{60,}={0,2}"),
)
_CONSENT_RE = re.compile(r"cookie|consent|einwilligung|gdpr|dsgvo|recaptcha", re.IGNORECASE)
_READ_MORE_RE = re.compile(
    r"^(?:mehr|mehr erfahren|mehr lesen|weiter|weiterlesen|jetzt kaufen|details|"
    r"read more|learn more|more|continue reading)\W*$",
    re.IGNORECASE,
)


@dataclass(frozen=True, slots=True)
class TextLine:
    """One readable line and the tag it came from.

    ``wraps_link`` marks an ``li``/``p`` whose whole text is a single link,
    ``in_nav`` a line inside ``<nav>`` or ``<header>``.
    """

    text: str
    tag: str
    wraps_link: bool = False
    in_nav: bool = False

    @property
    def is_heading(self) -> bool:
        return self.tag in HEADING_TAGS

    @property
    def is_link(self) -> bool:
        return self.tag == "a" or self.wraps_link


def normalize_text(text: str) -> str:
    """Collapse whitespace (NBSP included) and trim."""
    return _WHITESPACE_RE.sub(" ", text.replace("\u00a0", " ")).strip()


def looks_like_code(line: str) -> bool:
    """Brackets, assignments, call syntax, JS keywords or long base64-like runs."""
    stripped = line.strip()
    return bool(stripped) and any(pattern.search(stripped) for pattern in _CODE_RES)


def looks_like_consent(line: str) -> bool:
    return bool(_CONSENT_RE.search(line))


def sanitize_html(html: str) -> BeautifulSoup:
    """Parse *html* and drop non-content and hidden elements."""
    soup = BeautifulSoup(html, "html.parser")
    for element in soup(list(BLOCKED_TAGS)):
        element.decompose()
    for element in soup.select("[hidden], [aria-hidden='true'], [style]"):
        if element.decomposed:
            continue
        style = element.get("style")
        is_hidden = element.has_attr("hidden") or element.get("aria-hidden") == "true"
        if is_hidden or (isinstance(style, str) and _HIDDEN_STYLE_RE.search(style)):
            element.decompose()
    return soup


def _content_roots(soup: BeautifulSoup) -> List[Tag]:
    roots = soup.select(MAIN_SELECTORS)
    if roots:
        return roots
    return [soup.body if soup.body is not None else soup]


def _wraps_single_link(element: Tag, text: str) -> bool:
    if element.name == "a":
        return False
    anchors = element.find_all("a")
    return len(anchors) == 1 and normalize_text(anchors[0].get_text(" ")) == text


def _accept_line(line: TextLine) -> bool:
    if not MIN_LINE_LENGTH <= len(line.text) <= MAX_LINE_LENGTH:
        return False
    if looks_like_code(line.text) or looks_like_consent(line.text):
        return False
    if line.is_link and (len(line.text) < MIN_ANCHOR_LENGTH or _READ_MORE_RE.match(line.text)):
        return False
    return True


def readable_lines(soup: BeautifulSoup) -> List[TextLine]:
    """Readable, de-duplicated lines (case-insensitive, first seen wins)."""
    lines: List[TextLine] = []
    seen: set[str] = set()
    for root in _content_roots(soup):
        for element in root.select(CONTENT_SELECTORS):
            text = normalize_text(element.get_text(" "))
            if not text:
                continue
            line = TextLine(
                text=text,
                tag=element.name,
                wraps_link=_wraps_single_link(element, text),
                in_nav=element.find_parent(["nav", "header"]) is not None,
            )
            if not _accept_line(line):
                continue
            key = text.lower()
            if key in seen:
                continue
            seen.add(key)
            lines.append(line)
    return lines


def extract_readable_text(soup: BeautifulSoup) -> List[str]:
    return [line.text for line in readable_lines(soup)]


def block_lines(root: Optional[Tag]) -> List[str]:
    """Flatten *root* into text lines: block elements and ``<br>`` break lines,
    cells of one table row share a line."""
    if root is None:
        return []
    lines: List[str] = []
    buffer: List[str] = []

    def flush() -> None:
        text = normalize_text("".join(buffer))
        buffer.clear()
        if text:
            lines.append(text)

    def walk(node: Tag) -> None:
        for child in node.children:
            if isinstance(child, PreformattedString):
                continue
            if isinstance(child, NavigableString):
                buffer.append(str(child))
            elif isinstance(child, Tag):
                if child.name in _BLOCK_LEVEL:
                    flush()
                    walk(child)
                    flush()
                elif child.name in _CELL_TAGS:
                    buffer.append(" ")
                    walk(child)
                    buffer.append(" ")
                else:
                    walk(child)

    walk(root)
    flush()
    return lines


def page_title(soup: BeautifulSoup) -> Optional[str]:
    title = soup.find("title")
    if not isinstance(title, Tag):
        return None
    return normalize_text(title.get_text()) or None
