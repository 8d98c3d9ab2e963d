# File: site_kb/utils.py
"""site_kb.utils: Утилиты для канонизации URL, проверки хоста и глубины пути."""

from __future__ import annotations

import re
from typing import Collection, List, Sequence
from urllib.parse import urlsplit, urlunsplit

from site_kb.errors import ParseError
from site_kb.logger import logger

__all__: Sequence[str] = (
    "normalize_url",
    "same_host",
    "host_of",
    "origin_of",
    "path_depth",
    "is_too_deep",
    "is_likely_file",
    "ensure_protocol",
    "remove_duplicates",
)

#: Расширения, которые не являются HTML-страницами и не обходятся.
FILE_EXTENSIONS: frozenset[str] = frozenset(
    {
        "pdf",
        "jpg", "jpeg", "png", "gif", "webp", "svg", "bmp", "ico", "tif", "tiff", "avif",
        "zip", "rar", "7z", "gz", "tar",
        "mp3", "wav", "ogg", "m4a", "flac",
        "mp4", "webm", "mov", "avi", "mkv", "m4v",
        "kml",
    }
)

_SCHEME_RE = re.compile(r"^[a-z][a-z0-9+.-]*://", re.IGNORECASE)


def _lower_host(netloc: str) -> str:
    userinfo, sep, hostport = netloc.rpartition("@")
    return f"{userinfo}{sep}{hostport.lower()}"


def _sort_query(query: str) -> str:
    pairs = [p for p in query.split("&") if p]
    pairs.sort(key=lambda pair: pair.partition("=")[0])
    return "&".join(pairs)


def normalize_url(url: str) -> str:
    """Канонизирует URL для дедупликации.

    Порядок правил: убрать фрагмент, привести схему и хост к нижнему регистру,
    убрать завершающий слеш у не-корневого пути, отсортировать параметры
    запроса по ключу. При ошибке разбора возвращает вход без изменений.
    """
    try:
        parts = urlsplit(url.strip())
    except ValueError:
        logger.debug("Cannot parse URL for normalization: %r", url)
        return url
    if not parts.scheme or not parts.netloc:
        return url

    path = parts.path.rstrip("/") or "/"
    normalized = urlunsplit(
        (parts.scheme.lower(), _lower_host(parts.netloc), path, _sort_query(parts.query), "")
    )
    return normalized


def host_of(url: str) -> str:
    """Возвращает ``host[:port]`` в нижнем регистре или бросает :class:`ParseError`."""
    try:
        parts = urlsplit(url.strip())
        # .port validates the numeric part of netloc
        _ = parts.port
    except ValueError as exc:
        raise ParseError(f"Malformed URL {url!r}: {exc}") from exc
    if not parts.netloc or not parts.hostname:
        raise ParseError(f"URL has no host: {url!r}")
    return parts.netloc.rpartition("@")[2].lower()


def origin_of(url: str) -> str:
    """Возвращает origin (``scheme://host[:port]``) или бросает :class:`ParseError`."""
    host = host_of(url)
    scheme = urlsplit(url.strip()).scheme.lower()
    if scheme not in ("http", "https"):
        raise ParseError(f"Unsupported scheme in {url!r}")
    return f"{scheme}://{host}"


def same_host(url: str, host_or_origin: str) -> bool:
    """Проверяет, что URL принадлежит тому же хосту (с портом), что и *host_or_origin*."""
    reference = host_or_origin if _SCHEME_RE.match(host_or_origin) else f"//{host_or_origin}"
    try:
        return host_of(url) == host_of(reference)
    except ParseError:
        return False


def path_depth(url: str) -> int:
    """Число непустых сегментов пути."""
    return len([segment for segment in urlsplit(url).path.split("/") if segment])


def is_too_deep(url: str, max_depth: int) -> bool:
    """``path_depth(url) > max_depth``; при ошибке разбора возвращает False."""
    try:
        return path_depth(url) > max_depth
    except ValueError:
        return False


def is_likely_file(url: str) -> bool:
    """Грубая проверка по расширению: PDF, изображения, архивы, аудио и видео."""
    try:
        path = urlsplit(url).path.lower()
    except ValueError:
        return False
    _, dot, ext = path.rpartition(".")
    return bool(dot) and "/" not in ext and ext in FILE_EXTENSIONS


def ensure_protocol(url: str) -> str:
    """Добавляет ``https://``, если у адреса нет схемы."""
    trimmed = url.strip()
    if not trimmed or _SCHEME_RE.match(trimmed):
        return trimmed
    return f"https://{trimmed.lstrip('/')}"


def remove_duplicates(urls: Collection[str]) -> List[str]:
    """Удаляет дубликаты из списка URL, сохраняя порядок."""
    unique = list(dict.fromkeys(urls))
    removed = len(urls) - len(unique)
    if removed:
        logger.debug("Removed %d duplicate URLs", removed)
    return unique
