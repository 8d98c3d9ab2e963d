# site_kb/crawler/fetcher.py
"""
Fetcher module: retrieves raw HTML/XML for one URL with timeout, redirect and
user-agent policy taken from :class:`~site_kb.config.CrawlerConfig`.

No retries happen here: a failed fetch surfaces as :class:`FetchError` and the
calling strategy records it.
"""
from __future__ import annotations

import asyncio
from dataclasses import dataclass
from types import TracebackType
from typing import Optional, Type

from aiohttp import ClientError, ClientSession, ClientTimeout, TooManyRedirects

from site_kb.config import CrawlerConfig
from site_kb.errors import FetchError
from site_kb.logger import get_logger

log = get_logger("fetcher")

_TEXT_MIME_MARKERS = ("html", "xml", "text/")


@dataclass(frozen=True, slots=True)
class FetchedDocument:
    """Body of a response together with the URL it was finally served from."""

    url: str
    final_url: str
    text: str


def _is_text_mime(content_type: str) -> bool:
    mime = content_type.split(";", 1)[0].strip().lower()
    # servers without Content-Type are given the benefit of the doubt
    return not mime or any(marker in mime for marker in _TEXT_MIME_MARKERS)


class HtmlFetcher:
    """Fetches text documents over HTTP(S).

    Either pass an open :class:`aiohttp.ClientSession` (caller keeps ownership)
    or use the fetcher as an async context manager, which then opens and closes
    its own session::

        async with HtmlFetcher(config) as fetcher:
            html = await fetcher.fetch("https://example.com/")
    """

    def __init__(self, config: CrawlerConfig, session: Optional[ClientSession] = None) -> None:
        self.config = config
        self.session = session
        self._owns_session = session is None
        self._timeout = ClientTimeout(total=config.timeout)

    async def __aenter__(self) -> HtmlFetcher:
        if self.session is None:
            self.session = ClientSession(
                timeout=self._timeout,
                headers={"User-Agent": self.config.user_agent},
                raise_for_status=False,
            )
            self._owns_session = True
        return self

    async def __aexit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        await self.close()

    async def close(self) -> None:
        if self._owns_session and self.session is not None and not self.session.closed:
            await self.session.close()

    async def fetch(self, url: str) -> str:
        """Return the decoded body of *url* or raise :class:`FetchError`."""
        document = await self.fetch_document(url)
        return document.text

    async def fetch_document(self, url: str) -> FetchedDocument:
        """Like :meth:`fetch` but also reports the post-redirect URL."""
        if self.session is None:
            raise RuntimeError("Session not initialized")
        try:
            async with self.session.get(
                url,
                allow_redirects=True,
                max_redirects=self.config.max_redirects,
                timeout=self._timeout,
                headers={"User-Agent": self.config.user_agent},
            ) as resp:
                if not 200 <= resp.status < 300:
                    raise FetchError(url, f"HTTP {resp.status}")
                content_type = resp.headers.get("Content-Type", "")
                if not _is_text_mime(content_type):
                    raise FetchError(url, f"non-text content type {content_type!r}")
                text = await resp.text(errors="replace")
                final_url = str(resp.url)
        except FetchError:
            log.debug("Fetch rejected: %s", url)
            raise
        except asyncio.TimeoutError as exc:
            raise FetchError(url, f"timeout after {self.config.timeout:g} s") from exc
        except TooManyRedirects as exc:
            raise FetchError(url, f"more than {self.config.max_redirects} redirects") from exc
        except ClientError as exc:
            raise FetchError(url, f"{type(exc).__name__}: {exc}") from exc
        except ValueError as exc:
            # yarl rejects some malformed URLs before any request is made
            raise FetchError(url, f"invalid URL: {exc}") from exc

        log.debug("Fetched %s (%d chars)", url, len(text))
        return FetchedDocument(url=url, final_url=final_url, text=text)


__all__ = ["FetchedDocument", "HtmlFetcher"]
