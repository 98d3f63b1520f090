"""Data models for sources, listings, candidates and matches."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceKind(str, Enum):
    SCRAPE = "scrape"
    API = "api"
    FEED = "feed"


DEFAULT_DAILY_QUOTA = 100


@dataclass(frozen=True)
class JobSource:
    name: str
    base_url: str
    kind: SourceKind
    daily_quota: int = DEFAULT_DAILY_QUOTA
    max_pages: int = 10
    # Query parameter that carries keywords; None means no server-side search.
    keyword_param: str | None = None
    # Query parameter that carries the candidate location, if the source takes one.
    location_param: str | None = None


@dataclass(frozen=True)
class SearchOptions:
    include_sources: list[str] | None = None
    keywords: list[str] | None = None
    location: str | None = None


@dataclass(frozen=True)
class JobListing:
    title: str
    company: str
    url: str
    description: str
    source_name: str
    location: str | None = None
    remote: bool | None = None

    @property
    def dedup_key(self) -> str:
        return dedup_key(self.company, self.title)


_WS = re.compile(r"\s+")


def dedup_key(company: str, title: str) -> str:
    """Case- and whitespace-insensitive identity of a (company, title) pair."""
    return f"{_WS.sub('', company.lower())}-{_WS.sub('', title.lower())}"


@dataclass(frozen=True)
class CandidatePreferences:
    desired_roles: list[str] = field(default_factory=list)
    remote_only: bool = False
    company_size_preference: str = "any"


EXPERIENCE_LEVELS = ("entry", "mid", "senior", "staff", "principal")


def derive_experience_level(years: float) -> str:
    if years < 2:
        return "entry"
    if years < 5:
        return "mid"
    if years < 10:
        return "senior"
    if years < 15:
        return "staff"
    return "principal"


@dataclass(frozen=True)
class CandidateProfile:
    """Read-only candidate input, produced outside this package."""

    skills: list[str]
    core_skills: list[str] = field(default_factory=list)
    years_experience: int = 0
    experience_level: str = ""
    top_projects: list[str] = field(default_factory=list)
    name: str | None = None
    headline: str | None = None
    location: str | None = None
    preferences: CandidatePreferences | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CandidateProfile":
        skills = [str(s) for s in data.get("skills") or []]
        core = [str(s) for s in data.get("core_skills") or []] or skills[:5]
        years = int(data.get("years_experience") or 0)
        prefs_raw = data.get("preferences")
        prefs = None
        if isinstance(prefs_raw, dict):
            prefs = CandidatePreferences(
                desired_roles=list(prefs_raw.get("desired_roles") or []),
                remote_only=bool(prefs_raw.get("remote_only", False)),
                company_size_preference=prefs_raw.get("company_size_preference") or "any",
            )
        level = data.get("experience_level") or ""
        if level not in EXPERIENCE_LEVELS:
            level = derive_experience_level(years)
        return cls(
            skills=skills,
            core_skills=core[:5],
            years_experience=years,
            experience_level=level,
            top_projects=[str(p) for p in data.get("top_projects") or []],
            name=data.get("name") or None,
            headline=data.get("headline") or None,
            location=data.get("location") or None,
            preferences=prefs,
        )


@dataclass(frozen=True)
class ScoreBreakdown:
    skill_match: float
    experience_match: float
    project_match: float
    preference_match: float

    def to_dict(self) -> dict[str, float]:
        return {
            "skillMatch": self.skill_match,
            "experienceMatch": self.experience_match,
            "projectMatch": self.project_match,
            "preferenceMatch": self.preference_match,
        }


@dataclass(frozen=True)
class JobMatch:
    title: str
    company: str
    url: str
    score: float
    pitch: str
    required_skills: list[str] = field(default_factory=list)
    nice_to_have_skills: list[str] = field(default_factory=list)
    missing_skills: list[str] = field(default_factory=list)
    score_breakdown: ScoreBreakdown | None = None
    location: str | None = None
    remote: bool | None = None
    source_name: str | None = None
    experience_required: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "company": self.company,
            "url": self.url,
            "score": self.score,
            "scoreBreakdown": self.score_breakdown.to_dict() if self.score_breakdown else None,
            "requiredSkills": list(self.required_skills),
            "niceToHaveSkills": list(self.nice_to_have_skills),
            "missingSkills": list(self.missing_skills),
            "experienceRequired": self.experience_required,
            "pitch": self.pitch,
            "location": self.location,
            "remote": self.remote,
            "source": self.source_name,
        }
