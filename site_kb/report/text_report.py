# File: site_kb/report/text_report.py
"""site_kb.report.text_report: Текстовая версия базы знаний через шаблон Jinja2."""

from __future__ import annotations

from pathlib import Path
from typing import Optional, Union

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from site_kb.knowledge_base import KnowledgeBase

DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"
TEMPLATE_NAME = "knowledge_base.txt.j2"


def _environment(template_dir: Union[Path, str]) -> Environment:
    # plain text output, so no autoescaping
    return Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )


def to_plain_text(kb: KnowledgeBase, template_dir: Union[Path, str, None] = None) -> str:
    """Рендерит базу знаний в читаемый текст (Kontakt, Öffnungszeiten, Leistungen, Seiten)."""
    env = _environment(template_dir or DEFAULT_TEMPLATE_DIR)
    return env.get_template(TEMPLATE_NAME).render(kb=kb)


def render_text(
    kb: KnowledgeBase,
    template_dir: Optional[Union[Path, str]],
    output_path: Union[Path, str],
) -> Path:
    """Рендерит текстовую базу знаний из шаблона и сохраняет её по указанному пути.

    Args:
        kb: объект KnowledgeBase.
        template_dir: директория с шаблоном ``knowledge_base.txt.j2``;
            None означает шаблон из пакета.
        output_path: путь к итоговому .txt-файлу.

    Returns:
        Path до сохранённого файла.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(to_plain_text(kb, template_dir), encoding="utf-8")
    return output_path
