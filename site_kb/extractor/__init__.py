# File: site_kb/extractor/__init__.py
"""site_kb.extractor: эвристическое извлечение контактов, часов работы и услуг со страниц."""

from site_kb.extractor.page import extract_page, extract_pages, summarize_page

__all__ = ["extract_page", "extract_pages", "summarize_page"]
