"""
Job aggregation and matching pipeline.

Runs: collect (all sources, concurrently) → pre-filter → batch score → report.
"""
from __future__ import annotations

import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

from jobradar.aggregator import Aggregator
from jobradar.cache import ResponseCache
from jobradar.config import CACHE_MAX_ENTRIES, QUOTA_PATH, ensure_dirs, load_sources
from jobradar.crawler import Crawler
from jobradar.llm import OpenAIReasoningClient, ReasoningClient
from jobradar.log import ProgressSink, emit, get_logger
from jobradar.models import CandidateProfile, JobMatch, JobSource, SearchOptions
from jobradar.prefilter import prefilter_jobs
from jobradar.quota import QuotaTracker
from jobradar.report import build_match_report, write_match_report
from jobradar.scorer import BatchScorer
from jobradar.sources import get_adapters

log = get_logger(__name__)

_shared_cache: ResponseCache | None = None
_shared_cache_lock = threading.Lock()


def shared_cache() -> ResponseCache:
    """Process-wide cache used by :func:`run` when none is injected."""
    global _shared_cache
    with _shared_cache_lock:
        if _shared_cache is None:
            _shared_cache = ResponseCache(max_entries=CACHE_MAX_ENTRIES)
        return _shared_cache


@dataclass
class PipelineResult:
    jobs_found: int
    filtered_count: int
    matches: list[JobMatch] = field(default_factory=list)
    report_path: Path | None = None


def default_keywords(candidate: CandidateProfile) -> list[str]:
    """Search keywords: core skills, then desired roles."""
    keywords = list(candidate.core_skills or candidate.skills[:5])
    if candidate.preferences:
        keywords.extend(candidate.preferences.desired_roles)
    return list(dict.fromkeys(k for k in keywords if k))


def run(
    candidate: CandidateProfile,
    *,
    sources: Sequence[JobSource] | None = None,
    options: SearchOptions | None = None,
    progress: ProgressSink | None = None,
    client: ReasoningClient | None = None,
    crawler: Crawler | None = None,
    cache: ResponseCache | None = None,
    quota: QuotaTracker | None = None,
    scorer: BatchScorer | None = None,
    write_report: bool = True,
) -> PipelineResult:
    """Collect, filter and score jobs for one candidate.

    An empty result (nothing found, nothing relevant) is returned normally;
    a scoring failure raises :class:`~jobradar.errors.ScoringError`.
    """
    sources = list(sources) if sources is not None else load_sources()
    if options is None:
        options = SearchOptions(keywords=default_keywords(candidate), location=candidate.location)
    if write_report:
        ensure_dirs()

    aggregator = Aggregator(
        sources,
        cache=cache if cache is not None else shared_cache(),
        quota=quota or QuotaTracker.for_sources(sources, QUOTA_PATH),
        adapters=get_adapters(crawler),
    )
    jobs = aggregator.collect(progress, options)

    filtered = prefilter_jobs(candidate, jobs)
    emit(progress, f"[FILTER] Pre-filtered to {len(filtered)} relevant jobs from {len(jobs)} total", log)

    matches: list[JobMatch] = []
    if filtered:
        scorer = scorer or BatchScorer(client or OpenAIReasoningClient())
        matches = scorer.score(candidate, filtered, progress)

    report_path = None
    if write_report:
        content = build_match_report(matches, jobs_found=len(jobs), filtered=len(filtered))
        report_path = write_match_report(content)

    log.info(
        "Run complete — found=%d, filtered=%d, matches=%d",
        len(jobs), len(filtered), len(matches),
    )
    return PipelineResult(
        jobs_found=len(jobs),
        filtered_count=len(filtered),
        matches=matches,
        report_path=report_path,
    )
