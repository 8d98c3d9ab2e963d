# site_kb/extractor/models.py
"""
Records produced by the content extractor and the aggregator.

Every fact is optional: fields are ``None`` when nothing plausible was found.
The camelCase ``to_dict()`` shapes are the knowledge-base wire format.
"""
from __future__ import annotations

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Optional, Tuple

# attribute name -> JSON key
_CONTACT_KEYS: Dict[str, str] = {
    "name_or_company": "nameOrCompany",
    "email": "email",
    "phone": "phone",
    "street_address": "streetAddress",
    "postal_code": "postalCode",
    "city": "city",
    "country": "country",
    "website": "website",
}


def _compact(data: Dict[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in data.items() if value is not None}


@dataclass(frozen=True, slots=True)
class ContactInfo:
    """Partial contact record; see :meth:`is_empty` for the collapse rule."""

    name_or_company: Optional[str] = None
    street_address: Optional[str] = None
    postal_code: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    website: Optional[str] = None
    country: Optional[str] = None

    def is_empty(self) -> bool:
        return all(not getattr(self, f.name) for f in fields(self))

    def to_dict(self) -> Dict[str, Any]:
        return _compact({_CONTACT_KEYS[f.name]: getattr(self, f.name) for f in fields(self)})


@dataclass(frozen=True, slots=True)
class OpeningHoursEntry:
    day: str
    opens: str
    closes: str
    raw: Optional[str] = None

    @property
    def key(self) -> Tuple[str, str, str]:
        return (self.day, self.opens, self.closes)

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"day": self.day, "opens": self.opens, "closes": self.closes, "raw": self.raw})


@dataclass(frozen=True, slots=True)
class ServiceEntry:
    name: str
    description: Optional[str] = None

    @property
    def key(self) -> str:
        return self.name.casefold()

    def to_dict(self) -> Dict[str, Any]:
        return _compact({"name": self.name, "description": self.description})


@dataclass(frozen=True, slots=True)
class PageSummary:
    """Title, teaser and full readable text of one page."""

    url: str
    title: Optional[str] = None
    preview: Optional[str] = None
    full_text: Optional[str] = None


@dataclass(frozen=True, slots=True)
class PageExtraction:
    """Everything the extractor found on a single page."""

    summary: PageSummary
    contact: Optional[ContactInfo] = None
    opening_hours: Tuple[OpeningHoursEntry, ...] = ()
    services: Tuple[ServiceEntry, ...] = ()

    @property
    def url(self) -> str:
        return self.summary.url


@dataclass(slots=True)
class ExtractionResult:
    """Aggregated extraction of one crawl."""

    pages: List[PageSummary] = field(default_factory=list)
    contact: Optional[ContactInfo] = None
    opening_hours: List[OpeningHoursEntry] = field(default_factory=list)
    services: List[ServiceEntry] = field(default_factory=list)
    raw_text: Optional[str] = None
