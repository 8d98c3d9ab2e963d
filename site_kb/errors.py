# site_kb/errors.py
"""Exception hierarchy shared by the crawler and the extraction pipeline."""
from __future__ import annotations


class SiteKBError(Exception):
    """Base class for every error raised by site_kb."""


class FetchError(SiteKBError):
    """A single URL could not be retrieved as text.

    Raised by :class:`~site_kb.crawler.fetcher.HtmlFetcher` for timeouts,
    non-2xx responses, network failures, redirect loops and non-text bodies.
    Crawl strategies record it as a :class:`~site_kb.crawler.models.CrawlError`
    and carry on.
    """

    def __init__(self, url: str, reason: str) -> None:
        self.url = url
        self.reason = reason
        super().__init__(f"Could not fetch {url}: {reason}")


class ParseError(SiteKBError, ValueError):
    """Input that cannot be turned into something usable, e.g. a start URL without a host."""
