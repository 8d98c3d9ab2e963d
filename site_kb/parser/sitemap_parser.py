# File: site_kb/parser/sitemap_parser.py
"""site_kb.parser.sitemap_parser: Модуль для парсинга sitemap.xml и извлечения URL."""

from __future__ import annotations

from typing import List

from lxml import etree

from site_kb.logger import get_logger

log = get_logger("sitemap")


def parse_sitemap(xml_content: str) -> List[str]:
    """Разбирает XML sitemap (или sitemap index) и возвращает URL из тегов <loc>.

    Парсер работает в режиме recover: битый XML не приводит к исключению,
    а возвращает то, что удалось разобрать (или пустой список).

    Пример:
    ```python
    from site_kb.parser.sitemap_parser import parse_sitemap

    with open('sitemap.xml', encoding='utf-8') as f:
        content = f.read()
    urls = parse_sitemap(content)
    ```
    """
    if not xml_content or not xml_content.strip():
        return []
    parser = etree.XMLParser(ns_clean=True, recover=True, resolve_entities=False, no_network=True)
    try:
        root = etree.fromstring(xml_content.strip().encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError as exc:
        log.debug("Unparseable sitemap: %s", exc)
        return []
    if root is None:
        return []
    locs = root.findall(".//{*}loc")
    return [loc.text.strip() for loc in locs if loc.text and loc.text.strip()]
