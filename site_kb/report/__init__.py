# File: site_kb/report/__init__.py
"""site_kb.report: Сохранение базы знаний в файлы (JSON и текст) для CLI и тестов."""

from __future__ import annotations

from site_kb.report.json_report import render_json
from site_kb.report.text_report import render_text

__all__ = ["render_json", "render_text"]
