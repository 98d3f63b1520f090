"""JSON API sources (RemoteOK, Remotive and similar public job APIs).

Docs: https://remoteok.com/api, https://remotive.com/api/remote-jobs
"""
from __future__ import annotations

from typing import Any

import requests

from jobradar.errors import SourceFetchError
from jobradar.log import get_logger
from jobradar.models import JobListing, JobSource, SearchOptions
from jobradar.retry import retry
from jobradar.sources.base import SourceAdapter
from jobradar.sources.extract import is_remote, keyword_filter, strip_tags

log = get_logger(__name__)

USER_AGENT = "jobradar/0.1 (+https://github.com/jobradar)"
DESCRIPTION_CHARS = 500

# Candidate field names per JobListing attribute, most specific first.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "title": ("position", "title", "job_title", "jobTitle", "name"),
    "company": ("company_name", "companyName", "company", "employer_name", "employer"),
    "url": ("url", "apply_url", "applyUrl", "job_url", "redirect_url", "link"),
    "description": ("description", "job_description", "summary", "snippet"),
    "location": ("candidate_required_location", "location", "job_location", "jobGeo"),
    "remote": ("remote", "is_remote", "remote_ok"),
}

_RECORD_KEYS = ("jobs", "results", "data")


def _first(hit: dict[str, Any], attr: str) -> Any:
    for key in _FIELD_ALIASES[attr]:
        value = hit.get(key)
        if value not in (None, "", [], {}):
            return value
    return None


def _as_text(value: Any) -> str:
    if isinstance(value, dict):
        value = value.get("display_name") or value.get("name") or ""
    return str(value or "").strip()


def extract_records(data: Any) -> list[dict]:
    """The list of job records inside an API payload."""
    if isinstance(data, list):
        return [d for d in data if isinstance(d, dict)]
    if isinstance(data, dict):
        for key in _RECORD_KEYS:
            if isinstance(data.get(key), list):
                return [d for d in data[key] if isinstance(d, dict)]
    return []


def map_record(hit: dict[str, Any], source: JobSource) -> JobListing | None:
    """Map one source-specific record onto a JobListing; None if unusable."""
    title = _as_text(_first(hit, "title"))
    company = _as_text(_first(hit, "company"))
    if not title or not company:
        return None

    tags = [t for t in hit.get("tags") or [] if isinstance(t, str)]
    description = strip_tags(_as_text(_first(hit, "description")))[:DESCRIPTION_CHARS]
    if tags:
        description = f"{description} {' '.join(tags)}".strip()

    location = _as_text(_first(hit, "location")) or None
    remote_raw = _first(hit, "remote")
    if isinstance(remote_raw, bool):
        remote: bool | None = remote_raw
    else:
        remote = True if is_remote(location or "") else None

    return JobListing(
        title=title,
        company=company,
        url=_as_text(_first(hit, "url")) or source.base_url,
        description=description,
        source_name=source.name,
        location=location,
        remote=remote,
    )


class ApiAdapter(SourceAdapter):
    def __init__(self, session: requests.Session | None = None, timeout: float = 15) -> None:
        self.session = session or requests.Session()
        self.timeout = timeout

    @retry(max_attempts=2, base_delay=1.5, retryable=(requests.RequestException, OSError))
    def _get(self, url: str, params: dict) -> requests.Response:
        r = self.session.get(url, params=params, headers={"User-Agent": USER_AGENT}, timeout=self.timeout)
        r.raise_for_status()
        return r

    def fetch(self, source: JobSource, options: SearchOptions) -> list[JobListing]:
        keywords = [k for k in options.keywords or [] if k and k.strip()]
        params: dict = {}
        if source.keyword_param and keywords:
            params[source.keyword_param] = " ".join(keywords[:3])
        if source.location_param and options.location:
            params[source.location_param] = options.location

        r = self._get(source.base_url, params)
        # Decoding errors are not retried.
        try:
            data = r.json()
        except ValueError as exc:
            raise SourceFetchError(source.name, f"invalid JSON: {exc}") from exc

        jobs: list[JobListing] = []
        for hit in extract_records(data):
            job = map_record(hit, source)
            if job is not None:
                jobs.append(job)
        log.debug("[%s] %d record(s) mapped", source.name, len(jobs))

        if not source.keyword_param:
            jobs = keyword_filter(jobs, keywords)
        return jobs
