"""Concurrent fan-out over configured sources with cache, quota and dedup."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from jobradar.cache import ResponseCache, make_cache_key
from jobradar.config import CACHE_TTL_SECONDS
from jobradar.log import ProgressSink, emit, get_logger
from jobradar.models import JobListing, JobSource, SearchOptions, SourceKind
from jobradar.quota import QuotaTracker
from jobradar.sources import SourceAdapter, get_adapters

log = get_logger(__name__)


@dataclass
class SourceResult:
    """Outcome of one source worker; failures are data, not exceptions."""

    source: JobSource
    listings: list[JobListing] = field(default_factory=list)
    error: Exception | None = None
    cached: bool = False
    skipped: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None and not self.skipped


def dedupe_jobs(jobs: Iterable[JobListing]) -> list[JobListing]:
    """First occurrence of each (company, title) wins; order is preserved."""
    seen: set[str] = set()
    unique: list[JobListing] = []
    for job in jobs:
        key = job.dedup_key
        if key in seen:
            continue
        seen.add(key)
        unique.append(job)
    return unique


def select_sources(sources: Sequence[JobSource], include: list[str] | None) -> list[JobSource]:
    if not include:
        return list(sources)
    wanted = [inc.lower() for inc in include if inc]
    return [s for s in sources if any(inc in s.name.lower() for inc in wanted)]


class Aggregator:
    def __init__(
        self,
        sources: Sequence[JobSource],
        cache: ResponseCache,
        quota: QuotaTracker,
        adapters: dict[SourceKind, SourceAdapter] | None = None,
        cache_ttl: float = CACHE_TTL_SECONDS,
        max_workers: int | None = None,
        strict_quota: bool = False,
    ) -> None:
        self.sources = list(sources)
        self.cache = cache
        self.quota = quota
        self.adapters = adapters if adapters is not None else get_adapters()
        self.cache_ttl = cache_ttl
        self.max_workers = max_workers
        self.strict_quota = strict_quota

    def _run_source(
        self,
        source: JobSource,
        options: SearchOptions,
        progress: ProgressSink | None,
    ) -> SourceResult:
        name = source.name
        key = make_cache_key(name, {"keywords": list(options.keywords or []), "location": options.location})

        cached, hit = self.cache.get(key)
        if hit:
            emit(progress, f"[CACHE] Using cached results for {name} ({len(cached)} jobs)", log)
            return SourceResult(source, list(cached), cached=True)

        status = self.quota.check_and_reserve(name) if self.strict_quota else self.quota.check(name)
        if not status.allowed:
            emit(progress, f"[QUOTA] Daily limit reached for {name}, skipping", log)
            return SourceResult(source, skipped=True)

        emit(progress, f"[CRAWL] Starting {name}... ({status.remaining} calls left today)", log)
        try:
            adapter = self.adapters[source.kind]
            listings = adapter.fetch(source, options)
        except Exception as exc:
            emit(progress, f"[ERROR] Failed to fetch {name}: {str(exc) or type(exc).__name__}", log)
            log.debug("Source %s failed", name, exc_info=True)
            return SourceResult(source, error=exc)

        self.cache.set(key, list(listings), self.cache_ttl)
        if not self.strict_quota:
            self.quota.increment(name)
        emit(progress, f"[PARSE] Extracted {len(listings)} jobs from {name}", log)
        return SourceResult(source, list(listings))

    def collect_results(
        self,
        progress: ProgressSink | None = None,
        options: SearchOptions | None = None,
    ) -> list[SourceResult]:
        """Run every selected source and wait for all of them to settle."""
        options = options or SearchOptions()
        selected = select_sources(self.sources, options.include_sources)
        emit(progress, f"[CRAWL] Starting collection from {len(selected)} source(s)...", log)
        if not selected:
            return []

        workers = self.max_workers or len(selected)
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="source") as pool:
            futures = [pool.submit(self._run_source, s, options, progress) for s in selected]
            # Results in configured order, independent of completion order.
            return [f.result() for f in futures]

    def collect(
        self,
        progress: ProgressSink | None = None,
        options: SearchOptions | None = None,
    ) -> list[JobListing]:
        results = self.collect_results(progress, options)
        raw = [job for r in results for job in r.listings]
        unique = dedupe_jobs(raw)
        emit(progress, f"[COMPLETE] Total unique jobs found: {len(unique)} (from {len(raw)} raw)", log)
        return unique
