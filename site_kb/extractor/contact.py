# site_kb/extractor/contact.py
"""
Contact details: e-mail, phone, website, postal address and company name.

Each fact has its own finder; links (``mailto:``, ``tel:``) win over text
matches. :func:`extract_contact` combines them and collapses an all-empty
result to ``None``.
"""
from __future__ import annotations

import re
from typing import List, NamedTuple, Optional, Sequence
from urllib.parse import unquote

from bs4 import BeautifulSoup
from bs4.element import Tag

from site_kb.errors import ParseError
from site_kb.extractor.models import ContactInfo
from site_kb.parser.html_parser import normalize_text
from site_kb.utils import host_of

__all__: Sequence[str] = (
    "extract_contact",
    "find_email",
    "find_phone",
    "find_website",
    "find_address",
    "find_company_name",
    "is_plausible_phone",
    "is_plausible_name",
)

EMAIL_RE = re.compile(r"[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}", re.IGNORECASE)
_ASSET_SUFFIX_RE = re.compile(r"\.(?:png|jpe?g|gif|webp|svg)$", re.IGNORECASE)

PHONE_CANDIDATE_RE = re.compile(r"(?:\+|\()?\d[\d \t/().\-–]{4,}\d")
_BARE_NUMBER_RE = re.compile(r"\d{4,6}")
_YEAR_RANGE_RE = re.compile(r"(?:19|20)\d{2}\s*[-–]\s*(?:19|20)\d{2}")
PHONE_SHAPES = (
    re.compile(r"^(?:\+|00)[1-9]\d{0,2}[\s/\-]*\(?\d"),  # +49 221 ..., 0049 ...
    re.compile(r"\d{2,6}\s*/\s*\d{2,}"),  # 0221 / 123456
    re.compile(r"\d{2,6}\s*[-–]\s*\d{2,}"),  # 0221-123456
    re.compile(r"^\(\d{2,6}\)\s*\d"),  # (0221) 123456
)
MIN_TEL_LINK_DIGITS = 5
MIN_PHONE_DIGITS = 6
MAX_PHONE_DIGITS = 15

POSTAL_CODE_RE = re.compile(r"\b(\d{5})\b")
_PHONE_LINE_RE = re.compile(r"\b(?:tel|telefon|fon|fax|phone|mobil|mobile|handy)\b", re.IGNORECASE)
_LEGAL_LINE_RE = re.compile(
    r"impressum|angaben gem|§|\btmg\b|verantwortlich|handelsregister|registergericht|"
    r"\bhrb?\b|ust-?id|umsatzsteuer|steuernummer|geschäftsführ|vertreten durch|"
    r"copyright|©|datenschutz|haftung",
    re.IGNORECASE,
)
_ADDRESS_LABELS = frozenset(
    {"kontakt", "contact", "anschrift", "adresse", "address", "postanschrift", "so finden sie uns"}
)
MAX_ADDRESS_LINE = 120
MIN_STREET_LENGTH = 5
MAX_CITY_LENGTH = 60

GENERIC_NAMES = frozenset(
    {
        "kontakt", "contact", "contact us", "kontaktieren sie uns", "impressum", "imprint",
        "datenschutz", "datenschutzerklärung", "privacy", "privacy policy", "jobs", "karriere",
        "career", "careers", "agb", "home", "startseite", "menü", "menu", "navigation",
        "leistungen", "unsere leistungen", "services", "our services", "service", "angebote",
        "über uns", "about", "about us", "news", "aktuelles", "blog", "faq", "anfahrt",
        "öffnungszeiten", "opening hours", "login", "suche", "search", "team", "referenzen",
        "galerie", "gallery", "downloads", "newsletter", "seite nicht gefunden", "404",
    }
)
_GENERIC_FIRST_WORDS = frozenset(
    {"willkommen", "welcome", "herzlich", "unsere", "unser", "our", "ihr", "ihre", "your", "cookie"}
)
MIN_NAME_LENGTH = 3
MAX_NAME_LENGTH = 80


class Address(NamedTuple):
    street_address: Optional[str]
    postal_code: Optional[str]
    city: Optional[str]


# --------------------------------------------------------------------------- #
# e-mail / phone / website                                                    #
# --------------------------------------------------------------------------- #


def _hrefs(soup: BeautifulSoup) -> List[str]:
    hrefs: List[str] = []
    for tag in soup.find_all("a", href=True):
        href = tag.get("href") if isinstance(tag, Tag) else None
        if isinstance(href, str) and href.strip():
            hrefs.append(href.strip())
    return hrefs


def find_email(soup: BeautifulSoup, lines: Sequence[str]) -> Optional[str]:
    """First ``mailto:`` target, else the first e-mail-shaped token in the text."""
    for href in _hrefs(soup):
        if not href.lower().startswith("mailto:"):
            continue
        target = unquote(href[len("mailto:"):].split("?", 1)[0]).split(",", 1)[0].strip()
        if EMAIL_RE.fullmatch(target):
            return target
    for line in lines:
        for match in EMAIL_RE.finditer(line):
            if not _ASSET_SUFFIX_RE.search(match.group()):
                return match.group()
    return None


def is_plausible_phone(candidate: str) -> bool:
    """Reject numbers that are more likely postal codes, prices, dates or years."""
    text = candidate.strip()
    digits = re.sub(r"\D", "", text)
    if _BARE_NUMBER_RE.fullmatch(text) or "." in text:
        return False
    if not MIN_PHONE_DIGITS <= len(digits) <= MAX_PHONE_DIGITS:
        return False
    if _YEAR_RANGE_RE.fullmatch(text):
        return False
    return any(shape.search(text) for shape in PHONE_SHAPES)


def find_phone(soup: BeautifulSoup, lines: Sequence[str]) -> Optional[str]:
    """First ``tel:`` link with enough digits, else a plausible number from the text."""
    for href in _hrefs(soup):
        if not href.lower().startswith("tel:"):
            continue
        number = normalize_text(unquote(href[len("tel:"):]))
        if len(re.sub(r"\D", "", number)) >= MIN_TEL_LINK_DIGITS:
            return number
    for line in lines:
        for match in PHONE_CANDIDATE_RE.finditer(line):
            candidate = match.group().strip(" \t-–/")
            if is_plausible_phone(candidate):
                return candidate
    return None


def find_website(soup: BeautifulSoup) -> Optional[str]:
    """The first absolute http(s) link with a valid host."""
    for href in _hrefs(soup):
        if not href.lower().startswith(("http://", "https://")):
            continue
        try:
            host_of(href)
        except ParseError:
            continue
        return href
    return None


# --------------------------------------------------------------------------- #
# postal address                                                              #
# --------------------------------------------------------------------------- #


def _is_address_noise(line: str) -> bool:
    return bool(_LEGAL_LINE_RE.search(line)) or line.lower().rstrip(" :") in _ADDRESS_LABELS


def _city_after(text: str) -> Optional[str]:
    city = text.split(",", 1)[0].strip(" \t,;|-–")
    if not city or len(city) > MAX_CITY_LENGTH or not re.search(r"[^\W\d_]", city):
        return None
    return city


def _street_before(text: str) -> Optional[str]:
    street = text.rstrip(" \t,;|-–").rsplit(",", 1)[-1].strip()
    if len(street) < MIN_STREET_LENGTH or _is_address_noise(street):
        return None
    return street


def find_address(lines: Sequence[str]) -> Address:
    """Postal code, city and street around the first line with a 5-digit token."""
    for index, line in enumerate(lines):
        if len(line) > MAX_ADDRESS_LINE or _PHONE_LINE_RE.search(line):
            continue
        match = POSTAL_CODE_RE.search(line)
        if match is None:
            continue
        street = _street_before(line[: match.start()])
        if street is None:
            for previous in reversed(lines[:index]):
                if MIN_STREET_LENGTH <= len(previous) <= MAX_ADDRESS_LINE and not _is_address_noise(previous):
                    street = previous
                    break
        return Address(street, match.group(1), _city_after(line[match.end():]))
    return Address(None, None, None)


# --------------------------------------------------------------------------- #
# company name                                                                #
# --------------------------------------------------------------------------- #


def is_plausible_name(text: str) -> bool:
    if not MIN_NAME_LENGTH <= len(text) <= MAX_NAME_LENGTH:
        return False
    lowered = text.lower().strip(" !?.:")
    if lowered in GENERIC_NAMES:
        return False
    words = re.findall(r"\w+", lowered)
    if not words or words[0] in _GENERIC_FIRST_WORDS:
        return False
    return "@" not in text and "://" not in text


def find_company_name(soup: BeautifulSoup) -> Optional[str]:
    for heading in soup.find_all(["h1", "h2"]):
        text = normalize_text(heading.get_text(" "))
        if is_plausible_name(text):
            return text
    return None


def extract_contact(soup: BeautifulSoup, lines: Sequence[str]) -> Optional[ContactInfo]:
    """Contact candidate of one page, or ``None`` when nothing was found.

    *soup* must be sanitised; *lines* is its block-level body text.
    """
    address = find_address(lines)
    contact = ContactInfo(
        name_or_company=find_company_name(soup),
        street_address=address.street_address,
        postal_code=address.postal_code,
        city=address.city,
        phone=find_phone(soup, lines),
        email=find_email(soup, lines),
        website=find_website(soup),
    )
    if contact.is_empty():
        return None
    return contact
