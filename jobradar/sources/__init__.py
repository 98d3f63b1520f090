from __future__ import annotations

import requests

from .base import SourceAdapter
from .api import ApiAdapter
from .feed import FeedAdapter
from .scrape import ScrapeAdapter

from jobradar.crawler import Crawler
from jobradar.log import get_logger
from jobradar.models import SourceKind

log = get_logger(__name__)

__all__ = [
    "SourceAdapter", "ApiAdapter", "FeedAdapter", "ScrapeAdapter",
    "get_adapters",
]


def get_adapters(crawler: Crawler | None = None, session=None) -> dict[SourceKind, SourceAdapter]:
    """One adapter per source kind, sharing an HTTP session.

    The crawler is only created when a scrape source actually runs.
    """
    session = session or requests.Session()
    adapters: dict[SourceKind, SourceAdapter] = {
        SourceKind.SCRAPE: ScrapeAdapter(crawler),
        SourceKind.API: ApiAdapter(session),
        SourceKind.FEED: FeedAdapter(session),
    }
    log.debug("Registered adapters: %s", ", ".join(k.value for k in adapters))
    return adapters
