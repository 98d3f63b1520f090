"""RSS/Atom feed sources (e.g. We Work Remotely category feeds)."""
from __future__ import annotations

import feedparser
import requests

from jobradar.errors import SourceFetchError
from jobradar.log import get_logger
from jobradar.models import JobListing, JobSource, SearchOptions
from jobradar.retry import retry
from jobradar.sources.api import USER_AGENT
from jobradar.sources.base import SourceAdapter
from jobradar.sources.extract import DESCRIPTION_CHARS, NO_DESCRIPTION, is_remote, keyword_filter, strip_tags

log = get_logger(__name__)

FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml;q=0.9, */*;q=0.8"


def parse_items(content: bytes | str) -> tuple[list[dict[str, str]], bool]:
    """``title``/``link``/``description`` for every entry, and whether the
    payload was recognised as a feed at all.

    Takes the raw bytes so the feed's own encoding declaration wins.
    """
    parsed = feedparser.parse(content)
    if parsed.get("bozo"):
        log.debug("Feed parsed leniently: %s", parsed.get("bozo_exception"))
    items = [
        {
            "title": (e.get("title") or "").strip(),
            "link": (e.get("link") or "").strip(),
            "description": e.get("summary") or e.get("description") or "",
        }
        for e in parsed.entries
    ]
    return items, bool(parsed.get("version"))


def split_company_title(raw_title: str, fallback_company: str) -> tuple[str, str]:
    """``"Acme: Backend Engineer"`` → ``("Acme", "Backend Engineer")``."""
    if ":" in raw_title:
        company, title = raw_title.split(":", 1)
        if company.strip() and title.strip():
            return company.strip(), title.strip()
    return fallback_company, raw_title.strip()


def items_to_listings(items: list[dict[str, str]], source: JobSource) -> list[JobListing]:
    jobs: list[JobListing] = []
    for item in items:
        raw_title = strip_tags(item.get("title", ""))
        if not raw_title:
            continue
        company, title = split_company_title(raw_title, source.name)
        description = strip_tags(item.get("description", ""))
        jobs.append(JobListing(
            title=title,
            company=company,
            url=item.get("link", "").strip() or source.base_url,
            description=description[:DESCRIPTION_CHARS] or NO_DESCRIPTION,
            source_name=source.name,
            remote=True if is_remote(f"{source.base_url} {description}") else None,
        ))
    return jobs


class FeedAdapter(SourceAdapter):
    def __init__(self, session: requests.Session | None = None, timeout: float = 15) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    @retry(max_attempts=2, base_delay=1.5, retryable=(requests.RequestException, OSError))
    def _get_content(self, url: str) -> bytes:
        r = self.session.get(
            url,
            headers={"User-Agent": USER_AGENT, "Accept": FEED_ACCEPT},
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.content

    def fetch(self, source: JobSource, options: SearchOptions) -> list[JobListing]:
        items, is_feed = parse_items(self._get_content(source.base_url))
        if not items and not is_feed:
            raise SourceFetchError(source.name, "response is not an RSS or Atom feed")
        jobs = items_to_listings(items, source)
        log.debug("[%s] %d feed item(s)", source.name, len(jobs))
        return keyword_filter(jobs, options.keywords)
