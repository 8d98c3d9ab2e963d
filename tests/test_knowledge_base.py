# File: tests/test_knowledge_base.py
import json
from datetime import datetime, timezone

import pytest

from site_kb.extractor.models import ContactInfo, ExtractionResult, OpeningHoursEntry, PageSummary, ServiceEntry
from site_kb.knowledge_base import build_knowledge_base, detect_page_type

SOURCE = "https://example.com"
STAMP = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://example.com", "home"),
        ("https://example.com/", "home"),
        ("https://example.com/index.html", "home"),
        ("https://example.com/kontakt", "contact"),
        ("https://example.com/de/impressum/", "contact"),
        ("https://example.com/faq", "faq"),
        ("https://example.com/leistungen/heizung", "subpage"),
        ("https://other.example.org/", "home"),
    ],
)
def test_detect_page_type(url, expected):
    assert detect_page_type(url, SOURCE) == expected


def test_knowledge_base_dict_shape():
    extraction = ExtractionResult(
        pages=[
            PageSummary(url="https://example.com/", title="Start", preview="Willkommen.", full_text="Willkommen. Mehr Text."),
            PageSummary(url="https://example.com/leer"),
        ],
        contact=ContactInfo(name_or_company="Bäckerei Schmidt", city="Köln"),
        opening_hours=[OpeningHoursEntry("Montag", "09:00", "17:00")],
        services=[ServiceEntry("Beratung", "Persönlich vor Ort")],
        raw_text="Willkommen. Mehr Text.",
    )
    kb = build_knowledge_base(SOURCE, extraction, generated_at=STAMP)
    data = kb.to_dict()

    assert data["sourceUrl"] == SOURCE
    assert data["generatedAt"] == "2024-05-01T12:00:00Z"
    assert data["contact"] == {"nameOrCompany": "Bäckerei Schmidt", "city": "Köln"}
    assert data["openingHours"] == [
        {"day": "Montag", "opens": "09:00", "closes": "17:00", "raw": "Montag 09:00-17:00"}
    ]
    assert data["services"] == [{"name": "Beratung", "description": "Persönlich vor Ort"}]
    assert data["rawTextConcat"] == "Willkommen. Mehr Text."
    assert data["pages"][0] == {
        "url": "https://example.com/",
        "title": "Start",
        "type": "home",
        "sections": [{"content": "Willkommen. Mehr Text.", "heading": "Start"}],
        "mainTextSnippet": "Willkommen.",
    }
    assert data["pages"][1] == {"url": "https://example.com/leer", "type": "subpage", "sections": []}


def test_missing_contact_serialises_as_null_and_raw_text_is_omitted():
    kb = build_knowledge_base(SOURCE, ExtractionResult(), generated_at=STAMP)
    data = json.loads(kb.json())
    assert data["contact"] is None
    assert "rawTextConcat" not in data
    assert data["pages"] == [] and data["openingHours"] == [] and data["services"] == []


def test_json_keeps_umlauts_and_can_be_pretty():
    kb = build_knowledge_base(SOURCE, ExtractionResult(contact=ContactInfo(city="Köln")), generated_at=STAMP)
    assert "Köln" in kb.json()
    assert kb.json(pretty=True).startswith("{\n  ")


def test_generated_at_defaults_to_now_in_utc():
    kb = build_knowledge_base(SOURCE, ExtractionResult())
    assert kb.generated_at.endswith("Z")
    assert datetime.fromisoformat(kb.generated_at.replace("Z", "+00:00")).tzinfo is not None
