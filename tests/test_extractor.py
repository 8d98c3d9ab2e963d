# File: tests/test_extractor.py
"""Эвристики извлечения: читаемый текст, контакты, часы работы, услуги, сводка страницы."""
from __future__ import annotations

import pytest
from bs4 import BeautifulSoup
from conftest import html_page

from site_kb.crawler.models import CrawledPage
from site_kb.extractor.contact import (
    extract_contact,
    find_address,
    find_email,
    find_phone,
    find_website,
    is_plausible_name,
    is_plausible_phone,
)
from site_kb.extractor.models import ContactInfo, OpeningHoursEntry, ServiceEntry
from site_kb.extractor.opening_hours import extract_opening_hours, parse_hours_line
from site_kb.extractor.page import extract_page, summarize_page
from site_kb.extractor.services import extract_services
from site_kb.parser.html_parser import (
    TextLine,
    block_lines,
    extract_readable_text,
    looks_like_code,
    page_title,
    readable_lines,
    sanitize_html,
)

BAKERY_HTML = """
<html><head><title>Bäckerei Schmidt – Kontakt</title></head><body>
<main>
  <h1>Bäckerei Schmidt</h1>
  <p>Frisches Brot und Brötchen jeden Morgen aus unserer Backstube.</p>
  <h2>Öffnungszeiten</h2>
  <p>Mo-Fr 06:30-18:00</p>
  <p>Sa 07:00-13:00</p>
  <h2>Unsere Leistungen</h2>
  <ul><li>Hochzeitstorten</li><li>Partyservice</li></ul>
</main>
<footer><p>Musterstraße 12, 50667 Köln</p><p>Tel: +49 221 123456</p></footer>
</body></html>
"""


def soup_and_lines(body: str):
    soup = sanitize_html(html_page(body))
    return soup, block_lines(soup.body)


# --------------------------------------------------------------------------- #
#                               Readable text                                 #
# --------------------------------------------------------------------------- #


def test_readable_lines_filter_noise():
    html = """
    <html><head><title>T</title><script>var x = 1;</script></head><body>
    <nav><a href="/">Startseite der Firma</a></nav>
    <main>
      <h1>Bäckerei Schmidt</h1>
      <p>Frisches Brot jeden Tag aus unserer Backstube in Köln.</p>
      <p>function init() { return 1; }</p>
      <p>Wir verwenden Cookies für die Analyse.</p>
      <a href="/mehr">Mehr</a>
      <a href="/x">weiterlesen</a>
      <p style="display: none">Versteckter Text hier</p>
      <p hidden>Auch versteckt</p>
      <div aria-hidden="true"><p>Nur für Screenreader verborgen</p></div>
      <p>FRISCHES BROT jeden Tag aus unserer Backstube in Köln.</p>
      <p>OK</p>
    </main></body></html>
    """
    lines = readable_lines(sanitize_html(html))
    assert lines == [
        TextLine("Bäckerei Schmidt", "h1"),
        TextLine("Frisches Brot jeden Tag aus unserer Backstube in Köln.", "p"),
    ]


def test_readable_lines_fall_back_to_body():
    soup = sanitize_html(html_page("<p>Ein Absatz ohne main-Element.</p>"))
    assert extract_readable_text(soup) == ["Ein Absatz ohne main-Element."]


def test_link_only_list_items_follow_anchor_rules():
    soup = sanitize_html(
        html_page(
            '<ul><li><a href="/mehr">Mehr</a></li><li><a href="/x">Weiterlesen</a></li>'
            "<li>Mehr als 20 Jahre Erfahrung im Handwerk</li></ul>"
            '<p>Ein Absatz mit <a href="/x">Link</a> im Text.</p>'
        )
    )
    assert extract_readable_text(soup) == [
        "Mehr als 20 Jahre Erfahrung im Handwerk",
        "Ein Absatz mit Link im Text.",
    ]


def test_menu_lines_are_marked():
    soup = sanitize_html(html_page('<nav><ul><li><a href="/team">Unser Team</a></li></ul></nav>'))
    assert readable_lines(soup)[0] == TextLine("Unser Team", "li", wraps_link=True, in_nav=True)


@pytest.mark.parametrize(
    "line,expected",
    [
        ("const a = 5;", True),
        ("window.dataLayer.push(arguments)", True),
        ("if (x) { y(); }", True),
        ("Öffnungszeiten: Mo-Fr 09:00-18:00", False),
        ("Wir freuen uns auf Ihren Besuch!", False),
    ],
)
def test_looks_like_code(line, expected):
    assert looks_like_code(line) is expected


def test_block_lines_keep_table_rows_together():
    soup = sanitize_html(
        html_page("<table><tr><td>Montag</td><td>09:00 - 17:00</td></tr><tr><td>Dienstag</td><td>geschlossen</td></tr></table>")
    )
    assert block_lines(soup.body) == ["Montag 09:00 - 17:00", "Dienstag geschlossen"]


def test_page_title():
    assert page_title(sanitize_html(BAKERY_HTML)) == "Bäckerei Schmidt – Kontakt"
    assert page_title(sanitize_html("<p>kein Titel</p>")) is None


# --------------------------------------------------------------------------- #
#                                  Contact                                    #
# --------------------------------------------------------------------------- #


def test_extract_contact_from_typical_page():
    soup, lines = soup_and_lines(
        '<header><a href="https://www.baeckerei-schmidt.de/">Start</a></header>'
        "<h1>Bäckerei Schmidt GmbH</h1>"
        "<div>Musterstraße 12<br>50667 Köln</div>"
        "<p>Tel: 0221 / 123456</p>"
        '<p>E-Mail: <a href="mailto:info@baeckerei-schmidt.de">Schreiben Sie uns</a></p>'
    )
    assert extract_contact(soup, lines) == ContactInfo(
        name_or_company="Bäckerei Schmidt GmbH",
        street_address="Musterstraße 12",
        postal_code="50667",
        city="Köln",
        phone="0221 / 123456",
        email="info@baeckerei-schmidt.de",
        website="https://www.baeckerei-schmidt.de/",
    )


def test_empty_contact_collapses_to_none():
    soup, lines = soup_and_lines("<p>Nur ein kurzer Text ohne Angaben.</p>")
    assert extract_contact(soup, lines) is None


def test_contact_to_dict_is_camel_case_and_compact():
    contact = ContactInfo(name_or_company="Schmidt", postal_code="50667")
    assert contact.to_dict() == {"nameOrCompany": "Schmidt", "postalCode": "50667"}
    assert ContactInfo().is_empty()


def test_tel_link_wins_over_text():
    soup, lines = soup_and_lines('<p>Fax 0221-999999</p><a href="tel:+49%20221%20123456">Anrufen</a>')
    assert find_phone(soup, lines) == "+49 221 123456"


def test_website_is_the_first_absolute_link():
    soup = BeautifulSoup(
        '<a href="/intern">Intern</a><a href="http://[broken">Kaputt</a>'
        '<a href="https://www.facebook.com/acme">Facebook</a><a href="https://acme.de/">Acme</a>',
        "html.parser",
    )
    assert find_website(soup) == "https://www.facebook.com/acme"
    assert find_website(BeautifulSoup('<a href="/nur/relativ">x</a>', "html.parser")) is None


def test_email_from_text_skips_image_names():
    soup, lines = soup_and_lines("<p>logo@2x.png</p><p>Schreiben Sie an kontakt@example.de</p>")
    assert find_email(soup, lines) == "kontakt@example.de"


@pytest.mark.parametrize(
    "candidate,expected",
    [
        ("+49 221 1234567", True),
        ("0221-123456", True),
        ("(0221) 123456", True),
        ("0221 / 123456", True),
        ("50667", False),
        ("123456", False),
        ("12.05.2024", False),
        ("2019-2024", False),
        ("1234 5678", False),
    ],
)
def test_is_plausible_phone(candidate, expected):
    assert is_plausible_phone(candidate) is expected


def test_address_on_one_line():
    address = find_address(["Bäckerei Schmidt, Musterstraße 12, 50667 Köln, Deutschland"])
    assert address == ("Musterstraße 12", "50667", "Köln")


def test_address_skips_phone_lines_and_uses_previous_line():
    address = find_address(["Fax: 0221 12345", "Hauptstr. 5", "10115 Berlin"])
    assert address == ("Hauptstr. 5", "10115", "Berlin")


def test_no_address():
    assert find_address(["Keine Adresse hier"]) == (None, None, None)


@pytest.mark.parametrize(
    "text,expected",
    [
        ("Bäckerei Schmidt", True),
        ("Kontakt", False),
        ("Willkommen bei uns", False),
        ("info@example.de", False),
        ("AB", False),
    ],
)
def test_is_plausible_name(text, expected):
    assert is_plausible_name(text) is expected


# --------------------------------------------------------------------------- #
#                               Opening hours                                 #
# --------------------------------------------------------------------------- #


def test_single_day_line():
    assert parse_hours_line("Montag 09:00-17:00") == [
        OpeningHoursEntry(day="Montag", opens="09:00", closes="17:00", raw="Montag 09:00-17:00")
    ]


def test_several_day_groups_on_one_line():
    entries = parse_hours_line("Mo-Fr 9:00 - 18:00, Sa 10:00 - 14:00")
    assert [(e.day, e.opens, e.closes) for e in entries] == [
        ("Mo-Fr", "09:00", "18:00"),
        ("Sa", "10:00", "14:00"),
    ]


def test_days_without_own_times_share_the_next_group():
    entries = parse_hours_line("Mo und Di 08:00-12:00")
    assert [(e.day, e.opens, e.closes) for e in entries] == [("Mo, Di", "08:00", "12:00")]


@pytest.mark.parametrize(
    "line,expected",
    [
        ("Öffnungszeiten: 09:00-18:00 Uhr, Montag bis Freitag", ("Montag bis Freitag", "09:00", "18:00")),
        ("MO-FR 09:00-17:00", ("MO-FR", "09:00", "17:00")),
        ("SA. 8:30 - 12:00", ("SA.", "08:30", "12:00")),
    ],
)
def test_time_first_and_upper_case_lines(line, expected):
    assert [e.key for e in extract_opening_hours([line])] == [expected]


@pytest.mark.parametrize(
    "line",
    ["Seit 1998 für Sie da", "Montag bis Freitag geöffnet", "Termin um 10:00 vereinbaren", "x" * 130 + " Mo 09:00-10:00"],
)
def test_lines_without_hours(line):
    assert parse_hours_line(line) == []


def test_opening_hours_deduplicated():
    entries = extract_opening_hours(
        ["Montag 09:00-17:00", "Montag 09:00-17:00 (Termine nach Vereinbarung)", "Dienstag 09:00-17:00"]
    )
    assert [e.key for e in entries] == [("Montag", "09:00", "17:00"), ("Dienstag", "09:00", "17:00")]
    assert entries[0].raw == "Montag 09:00-17:00"


# --------------------------------------------------------------------------- #
#                                 Services                                    #
# --------------------------------------------------------------------------- #


def test_services_below_heading():
    soup = sanitize_html(html_page("<h2>Unsere Leistungen</h2><ul><li>Beratung</li><li>Reparatur</li></ul>"))
    assert extract_services(readable_lines(soup)) == [ServiceEntry("Beratung"), ServiceEntry("Reparatur")]


def test_services_with_descriptions_end_at_next_section():
    soup = sanitize_html(
        html_page(
            "<h2>Leistungen</h2>"
            "<h3>Heizungsbau</h3><p>Planung und Einbau moderner Heizungsanlagen für Ihr Zuhause.</p>"
            "<h3>Sanitär</h3><p>Bäder aus einer Hand, von der Planung bis zur Fertigstellung.</p>"
            "<h2>Kontakt</h2><p>Rufen Sie uns gerne an</p>"
        )
    )
    assert extract_services(readable_lines(soup)) == [
        ServiceEntry("Heizungsbau", "Planung und Einbau moderner Heizungsanlagen für Ihr Zuhause."),
        ServiceEntry("Sanitär", "Bäder aus einer Hand, von der Planung bis zur Fertigstellung."),
    ]


def test_navigation_links_are_not_anchors():
    lines = [TextLine("Unsere Leistungen", "a"), TextLine("Impressum und Datenschutz", "a")]
    assert extract_services(lines) == []


def test_site_menu_does_not_produce_services():
    menu = "".join(
        f'<li><a href="/{slug}">{label}</a></li>'
        for slug, label in [
            ("", "Startseite"),
            ("leistungen", "Leistungen"),
            ("referenzen", "Referenzen"),
            ("team", "Unser Team"),
            ("kontakt", "Kontakt"),
        ]
    )
    html = html_page(
        f"<nav><ul>{menu}</ul></nav><h1>Acme GmbH</h1>"
        "<p>Wir sind Ihr Partner für Haustechnik in Berlin.</p>"
    )
    extraction = extract_page(CrawledPage(url="https://acme.de/", depth=0, html=html))
    assert list(extraction.services) == []


def test_linked_services_below_heading():
    soup = sanitize_html(
        html_page(
            "<h2>Leistungen</h2><ul>"
            '<li><a href="/heizung">Heizungsbau</a></li><li><a href="/bad">Sanitärinstallation</a></li>'
            "</ul>"
        )
    )
    assert [s.name for s in extract_services(readable_lines(soup))] == ["Heizungsbau", "Sanitärinstallation"]


def test_services_deduplicated_case_insensitively():
    lines = [
        TextLine("Leistungen", "h2"),
        TextLine("Beratung", "li"),
        TextLine("Services", "h2"),
        TextLine("BERATUNG", "li"),
        TextLine("Montage", "li"),
    ]
    assert [s.name for s in extract_services(lines)] == ["Beratung", "Montage"]


# --------------------------------------------------------------------------- #
#                               Page summary                                  #
# --------------------------------------------------------------------------- #


def test_summary_starts_at_first_prose_line():
    lines = ["Menü", "Start", "Willkommen bei der Bäckerei Schmidt in Köln.", "Brot", "Kuchen"]
    summary = summarize_page("https://example.com/", "Titel", lines)
    assert summary.preview == "Willkommen bei der Bäckerei Schmidt in Köln. Brot Kuchen"
    assert summary.full_text == summary.preview
    assert summary.title == "Titel"


def test_summary_without_prose_uses_first_line():
    summary = summarize_page("https://example.com/", None, ["Kurz", "Auch kurz"])
    assert summary.preview == "Kurz Auch kurz"


def test_summary_preview_is_capped():
    summary = summarize_page("https://example.com/", None, ["Wort " * 200])
    assert summary.preview.endswith("…")
    assert len(summary.preview) <= 801
    assert len(summary.full_text) > 800


def test_summary_of_empty_page():
    summary = summarize_page("https://example.com/leer", None, [])
    assert summary.preview is None and summary.full_text is None


def test_extract_page_end_to_end():
    extraction = extract_page(CrawledPage(url="https://example.com/kontakt", depth=1, html=BAKERY_HTML))

    assert extraction.url == "https://example.com/kontakt"
    assert extraction.summary.title == "Bäckerei Schmidt – Kontakt"
    assert extraction.summary.preview.startswith("Frisches Brot und Brötchen")
    assert extraction.contact == ContactInfo(
        name_or_company="Bäckerei Schmidt",
        street_address="Musterstraße 12",
        postal_code="50667",
        city="Köln",
        phone="+49 221 123456",
    )
    assert [(e.day, e.opens, e.closes) for e in extraction.opening_hours] == [
        ("Mo-Fr", "06:30", "18:00"),
        ("Sa", "07:00", "13:00"),
    ]
    assert [s.name for s in extraction.services] == ["Hochzeitstorten", "Partyservice"]


def test_block_lines_ignore_comments():
    soup = BeautifulSoup("<body><!-- 12345 Geheim --><p>Sichtbar</p></body>", "html.parser")
    assert block_lines(soup.body) == ["Sichtbar"]
