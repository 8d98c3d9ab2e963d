# site_kb/extractor/services.py
"""
Services / offerings listed below a "Leistungen" or "Services" heading.

The heading is the anchor; the lines after it (until the next heading or the
end of a bounded window) are service names when they look like short labels.
A longer sentence right after a name becomes its description.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

from site_kb.extractor.models import ServiceEntry
from site_kb.parser.html_parser import TextLine

ANCHOR_RE = re.compile(
    r"\b(?:leistungen|leistungsspektrum|leistungsangebot|services|service|angebote|"
    r"unser angebot|our services|what we do|was wir bieten)\b",
    re.IGNORECASE,
)
MAX_ANCHOR_LENGTH = 60
WINDOW = 15

MIN_NAME_LENGTH = 4
MAX_NAME_LENGTH = 80
MAX_NAME_WORDS = 6
MIN_DESCRIPTION_LENGTH = 25
MAX_DESCRIPTION_LENGTH = 220

_TIME_RE = re.compile(r"\b\d{1,2}[:.]\d{2}\b")
_URL_RE = re.compile(r"https?://|www\.|\S+@\S+\.\w+", re.IGNORECASE)
_NAV_LEGAL_RE = re.compile(
    r"^(?:home|startseite|kontakt|contact|impressum|imprint|datenschutz|privacy|agb|"
    r"über uns|about( us)?|jobs|karriere|careers?|login|anmelden|suche|search|news|blog|"
    r"faq|anfahrt|mehr|mehr erfahren|weiter|details|read more|learn more|zurück|back|"
    r"menü|menu|alle leistungen|all services)\b",
    re.IGNORECASE,
)


def is_anchor(line: TextLine) -> bool:
    # a link or menu item labelled "Leistungen" is navigation, not a section
    if line.is_link or line.in_nav or len(line.text) > MAX_ANCHOR_LENGTH:
        return False
    return bool(ANCHOR_RE.search(line.text))


def _heading_level(line: TextLine) -> Optional[int]:
    return int(line.tag[1]) if line.is_heading else None


def _ends_section(line: TextLine, anchor: TextLine) -> bool:
    if is_anchor(line):
        return True
    level = _heading_level(line)
    if level is None:
        return False
    anchor_level = _heading_level(anchor)
    return anchor_level is None or level <= anchor_level or not is_plausible_service_name(line.text)


def is_plausible_service_name(text: str) -> bool:
    if not MIN_NAME_LENGTH <= len(text) <= MAX_NAME_LENGTH:
        return False
    if len(text.split()) > MAX_NAME_WORDS:
        return False
    if _TIME_RE.search(text) or _URL_RE.search(text) or _NAV_LEGAL_RE.match(text):
        return False
    return True


def _description(line: Optional[TextLine]) -> Optional[str]:
    if line is None or line.is_heading or is_anchor(line):
        return None
    if not MIN_DESCRIPTION_LENGTH <= len(line.text) <= MAX_DESCRIPTION_LENGTH:
        return None
    if is_plausible_service_name(line.text):
        return None
    return line.text


def extract_services(lines: Sequence[TextLine]) -> List[ServiceEntry]:
    """Services after every anchor heading, de-duplicated case-insensitively."""
    services: List[ServiceEntry] = []
    seen: set[str] = set()
    index = 0
    while index < len(lines):
        if not is_anchor(lines[index]):
            index += 1
            continue
        anchor = lines[index]
        position = index + 1
        end = min(len(lines), position + WINDOW)
        while position < end:
            line = lines[position]
            if _ends_section(line, anchor):
                break
            position += 1
            if not is_plausible_service_name(line.text):
                continue
            following = lines[position] if position < len(lines) else None
            description = _description(following)
            if description is not None:
                position += 1
            entry = ServiceEntry(name=line.text, description=description)
            if entry.key not in seen:
                seen.add(entry.key)
                services.append(entry)
        index = position
    return services


__all__ = ["extract_services", "is_anchor", "is_plausible_service_name"]
