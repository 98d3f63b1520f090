"""Scrape sources — job boards rendered and crawled by a headless browser."""
from __future__ import annotations

from urllib.parse import parse_qsl, quote, urlencode, urlsplit, urlunsplit

from jobradar.crawler import Crawler, HyperbrowserCrawler
from jobradar.errors import SourceFetchError
from jobradar.log import get_logger
from jobradar.models import JobListing, JobSource, SearchOptions
from jobradar.sources.base import SourceAdapter
from jobradar.sources.extract import MAX_LISTINGS_PER_PAGE, TitlePredicate, extract_page, is_job_title

log = get_logger(__name__)

CRAWL_FORMATS = ("markdown", "html")
MAX_SEARCH_KEYWORDS = 3


def build_search_url(source: JobSource, keywords: list[str] | None, location: str | None = None) -> str:
    """Base URL, with the top keywords swapped into ``keyword_param`` and
    the location into ``location_param``.

    Other query parameters keep their order; a replaced parameter keeps its
    position, a new one is appended.
    """
    kws = [k.strip() for k in keywords or [] if k and k.strip()][:MAX_SEARCH_KEYWORDS]
    overrides: dict[str, str] = {}
    if source.keyword_param and kws:
        overrides[source.keyword_param] = " ".join(kws)
    if source.location_param and location and location.strip():
        overrides[source.location_param] = location.strip()
    if not overrides:
        return source.base_url

    parts = urlsplit(source.base_url)
    query: list[tuple[str, str]] = []
    for key, value in parse_qsl(parts.query, keep_blank_values=True):
        if key in overrides:
            value = overrides.pop(key)
        query.append((key, value))
    query.extend(overrides.items())
    return urlunsplit(parts._replace(query=urlencode(query, quote_via=quote)))


class ScrapeAdapter(SourceAdapter):
    def __init__(
        self,
        crawler: Crawler | None = None,
        is_title: TitlePredicate = is_job_title,
    ) -> None:
        self._crawler = crawler
        self.is_title = is_title

    @property
    def crawler(self) -> Crawler:
        if self._crawler is None:
            self._crawler = HyperbrowserCrawler()
        return self._crawler

    def fetch(self, source: JobSource, options: SearchOptions) -> list[JobListing]:
        url = build_search_url(source, options.keywords, options.location)
        result = self.crawler.start_and_wait(url, max_pages=source.max_pages, formats=CRAWL_FORMATS)
        if str(result.status).lower() == "failed":
            raise SourceFetchError(source.name, f"crawl of {url} failed")

        log.info("[%s] crawl %s, %d page(s)", source.name, result.status, len(result.pages))
        jobs: list[JobListing] = []
        for page in result.pages:
            page_jobs = extract_page(
                page.content,
                page.source_url or source.base_url,
                source.name,
                self.is_title,
            )
            jobs.extend(page_jobs[:MAX_LISTINGS_PER_PAGE])
        return jobs
