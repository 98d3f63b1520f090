"""Shared fakes for the pipeline tests."""
from __future__ import annotations

import json
import os
import threading
from typing import Callable, Sequence

os.environ.setdefault("JOBRADAR_LOG_FILE", "0")

import pytest

from jobradar.crawler import CrawlPage, CrawlResult
from jobradar.models import (
    CandidatePreferences,
    CandidateProfile,
    JobListing,
    JobSource,
    SearchOptions,
    SourceKind,
)
from jobradar.sources.base import SourceAdapter


def make_job(
    title: str,
    company: str = "ACME",
    description: str = "",
    source: str = "dummy",
    **kwargs,
) -> JobListing:
    return JobListing(
        title=title,
        company=company,
        url=kwargs.pop("url", f"https://jobs.example/{company}/{title}".replace(" ", "-")),
        description=description,
        source_name=source,
        **kwargs,
    )


class FakeCrawler:
    def __init__(self, pages: list[CrawlPage] | None = None, status: str = "completed") -> None:
        self.pages = pages or []
        self.status = status
        self.calls: list[tuple[str, int, tuple]] = []

    def start_and_wait(self, url: str, max_pages: int, formats: Sequence[str]) -> CrawlResult:
        self.calls.append((url, max_pages, tuple(formats)))
        return CrawlResult(status=self.status, pages=list(self.pages))


class FakeReasoningClient:
    """Replies with a canned payload, or builds one from the prompt."""

    def __init__(self, reply: str | Callable[[str, str], str] | None = None) -> None:
        self.reply = reply if reply is not None else json.dumps({"matches": []})
        self.calls: list[tuple[str, str, bool, float]] = []
        self._lock = threading.Lock()

    def complete(self, system_prompt: str, user_prompt: str, *, json_mode: bool = True,
                 temperature: float = 0.3) -> str:
        with self._lock:
            self.calls.append((system_prompt, user_prompt, json_mode, temperature))
        if callable(self.reply):
            return self.reply(system_prompt, user_prompt)
        return self.reply


class StaticAdapter(SourceAdapter):
    """Returns preset listings per source name, or raises a preset error."""

    def __init__(self, by_source: dict[str, list[JobListing] | Exception]) -> None:
        self.by_source = by_source
        self.calls: list[str] = []
        self._lock = threading.Lock()

    def fetch(self, source: JobSource, options: SearchOptions) -> list[JobListing]:
        with self._lock:
            self.calls.append(source.name)
        outcome = self.by_source[source.name]
        if isinstance(outcome, Exception):
            raise outcome
        return list(outcome)


def api_source(name: str, **kwargs) -> JobSource:
    return JobSource(name=name, base_url=f"https://{name.lower()}.example/api", kind=SourceKind.API, **kwargs)


@pytest.fixture
def candidate() -> CandidateProfile:
    return CandidateProfile(
        name="Pat",
        headline="Frontend Engineer",
        skills=["React", "TypeScript", "GraphQL"],
        core_skills=["React"],
        years_experience=6,
        experience_level="senior",
        top_projects=["Design system"],
        location="Berlin",
        preferences=CandidatePreferences(desired_roles=["Frontend Engineer"], remote_only=True),
    )
