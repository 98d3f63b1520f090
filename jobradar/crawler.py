"""Browser-rendered crawl collaborator used by scrape sources."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol, Sequence

from jobradar.config import get_env
from jobradar.errors import ConfigError
from jobradar.log import get_logger

log = get_logger(__name__)


@dataclass(frozen=True)
class CrawlPage:
    content: str
    source_url: str


@dataclass(frozen=True)
class CrawlResult:
    status: str
    pages: list[CrawlPage] = field(default_factory=list)


class Crawler(Protocol):
    def start_and_wait(self, url: str, max_pages: int, formats: Sequence[str]) -> CrawlResult:
        ...


class HyperbrowserCrawler:
    """Crawls through the Hyperbrowser API (``HYPERBROWSER_API_KEY``)."""

    def __init__(self, api_key: str | None = None) -> None:
        self.api_key = api_key or get_env("HYPERBROWSER_API_KEY")
        if not self.api_key:
            raise ConfigError("HYPERBROWSER_API_KEY environment variable is required")
        self._client = None

    def _get_client(self):
        if self._client is None:
            from hyperbrowser import Hyperbrowser

            self._client = Hyperbrowser(api_key=self.api_key)
        return self._client

    def start_and_wait(self, url: str, max_pages: int, formats: Sequence[str]) -> CrawlResult:
        from hyperbrowser.models import ScrapeOptions, StartCrawlJobParams

        params = StartCrawlJobParams(
            url=url,
            max_pages=max_pages,
            scrape_options=ScrapeOptions(formats=list(formats)),
        )
        result = self._get_client().crawl.start_and_wait(params)

        pages: list[CrawlPage] = []
        for page in result.data or []:
            content = getattr(page, "markdown", None) or getattr(page, "html", None)
            if not content:
                continue
            page_url = getattr(page, "url", None) or url
            pages.append(CrawlPage(content=content, source_url=page_url))
        log.debug("Crawled %s: %s, %d page(s) with content", url, result.status, len(pages))
        return CrawlResult(status=str(result.status or "completed"), pages=pages)
