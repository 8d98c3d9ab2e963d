# site_kb/report/json_report.py

"""
Генерация JSON-файла базы знаний.

Сериализация объекта KnowledgeBase в файл (camelCase, как в to_dict()).
"""
import json
from pathlib import Path

from site_kb.knowledge_base import KnowledgeBase


def render_json(kb: KnowledgeBase, output_path: Path | str, *, pretty: bool = True) -> Path:
    """
    Сохраняет базу знаний kb в формате JSON по указанному пути.

    :param kb: объект KnowledgeBase
    :param output_path: путь к JSON-файлу
    :param pretty: отступ 2, иначе компактная строка
    :return: Path сохранённого файла

    Пример:
    ```python
    from site_kb.report.json_report import render_json
    path = render_json(result.knowledge_base, 'out/kb.json')
    ```
    """
    output = Path(output_path)
    output.parent.mkdir(parents=True, exist_ok=True)

    with output.open('w', encoding='utf-8') as f:
        json.dump(kb.to_dict(), f, ensure_ascii=False, indent=2 if pretty else None)

    return output
