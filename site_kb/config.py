# === FILE: site_kb/config.py ===
"""
Модуль для загрузки и валидации конфигурации краулера site_kb.
Используется Pydantic для описания схемы и проверки данных.
"""
from __future__ import annotations

import errno
import json
from pathlib import Path
from typing import Any, Callable, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from site_kb.crawler.models import DEFAULT_MAX_DEPTH, DEFAULT_MAX_PAGES, CrawlOptions

DEFAULT_USER_AGENT = "SiteKBCrawler/0.1 (+knowledge-base builder)"


class CrawlerConfig(BaseModel):
    """Конфигурация HTTP-клиента и бюджетов обхода, передаётся в краулер явно."""
    model_config = ConfigDict(extra="forbid", frozen=True)

    max_depth: int = Field(DEFAULT_MAX_DEPTH, ge=0, description="Максимальная глубина обхода ссылок.")
    max_pages: int = Field(DEFAULT_MAX_PAGES, ge=1, description="Жесткий лимит по числу страниц.")
    timeout: float = Field(15.0, gt=0, description="Таймаут на один запрос (секунд).")
    max_redirects: int = Field(5, ge=0, description="Максимум переходов по редиректам.")
    user_agent: str = Field(DEFAULT_USER_AGENT, min_length=1, description="Заголовок User-Agent.")
    concurrency: int = Field(4, ge=1, le=32, description="Число одновременных запросов в стратегии.")
    sitemap_max_nesting: int = Field(
        5, ge=0, description="Максимальная вложенность sitemap-index файлов."
    )

    @field_validator("user_agent", mode="before")
    def _strip_user_agent(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    def options(
        self, max_depth: Optional[int] = None, max_pages: Optional[int] = None
    ) -> CrawlOptions:
        """Бюджет обхода: значения запроса перекрывают значения конфига."""
        return CrawlOptions(
            max_depth=self.max_depth if max_depth is None else max_depth,
            max_pages=self.max_pages if max_pages is None else max_pages,
        )


DEFAULT_CONFIG_PATH = Path("configs/default.yaml")


def _parse_yaml(text: str) -> Any:
    try:
        return yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ValueError(f"Неправильный YAML: {exc}") from exc


def _parse_json(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Неправильный JSON: {exc}") from exc


_PARSERS: dict[str, Callable[[str], Any]] = {
    ".yaml": _parse_yaml,
    ".yml": _parse_yaml,
    ".json": _parse_json,
}


def _read_mapping(path: Path) -> dict[str, Any]:
    """Содержимое файла конфига как словарь; пустой файл даёт {}."""
    parser = _PARSERS.get(path.suffix.lower())
    if parser is None:
        raise ValueError(f"Неподдерживаемый формат конфига {path.suffix!r} ({path})")
    data = parser(path.read_text(encoding="utf-8"))
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError(f"{path}: ожидался mapping верхнего уровня, получено {type(data).__name__}")
    return data


def load_config(path: Union[str, Path, None] = None) -> CrawlerConfig:
    """
    Читает YAML или JSON и возвращает проверенный объект CrawlerConfig.
    Без пути использует configs/default.yaml, если он есть, иначе значения по умолчанию.
    Явно указанный, но отсутствующий файл приводит к FileNotFoundError,
    ошибки схемы приходят как pydantic.ValidationError.
    """
    if path is None:
        if not DEFAULT_CONFIG_PATH.is_file():
            return CrawlerConfig()
        source = DEFAULT_CONFIG_PATH
    else:
        source = Path(path).expanduser()
        if not source.is_file():
            raise FileNotFoundError(errno.ENOENT, "Файл конфигурации не найден", str(source))
    return CrawlerConfig(**_read_mapping(source))


__all__ = ["CrawlerConfig", "DEFAULT_CONFIG_PATH", "DEFAULT_USER_AGENT", "load_config"]
