"""Batch scoring of listings against a candidate via the reasoning call."""
from __future__ import annotations

import json
import math
from typing import Any

from jobradar.errors import ScoringError
from jobradar.llm import ReasoningClient
from jobradar.log import ProgressSink, emit, get_logger
from jobradar.models import CandidateProfile, JobListing, JobMatch, ScoreBreakdown

log = get_logger(__name__)

BATCH_SIZE = 20
MAX_RESULTS = 50
MIN_SCORE = 30.0

# (field, ceiling) for each part of the breakdown
BREAKDOWN_LIMITS: tuple[tuple[str, float], ...] = (
    ("skillMatch", 40),
    ("experienceMatch", 30),
    ("projectMatch", 20),
    ("preferenceMatch", 10),
)

SYSTEM_PROMPT = """You are an expert technical recruiter analyzing job-candidate fit. Provide detailed scoring with breakdown.

Return JSON:
{
  "matches": [
    {
      "title": "exact job title",
      "company": "exact company name",
      "url": "exact URL",
      "score": number (0-100),
      "scoreBreakdown": {
        "skillMatch": number (0-40, how well skills align),
        "experienceMatch": number (0-30, experience level fit),
        "projectMatch": number (0-20, relevant project experience),
        "preferenceMatch": number (0-10, location/remote/company preferences)
      },
      "requiredSkills": ["must-have skills for this role"],
      "niceToHaveSkills": ["preferred but not required skills"],
      "missingSkills": ["critical skills candidate lacks"],
      "experienceRequired": "experience level (e.g., '3-5 years', 'Senior')",
      "pitch": "one compelling sentence for application"
    }
  ]
}

Scoring guidelines:
- skillMatch (40): Core technical skills alignment
- experienceMatch (30): Years + seniority level match
- projectMatch (20): Relevant project/domain experience
- preferenceMatch (10): Location, remote, company size fit

Only return jobs with total score >= 30. Be honest about skill gaps."""


def build_candidate_summary(candidate: CandidateProfile) -> str:
    core = candidate.core_skills or candidate.skills[:5]
    lines = [
        f"Name: {candidate.name or 'Anonymous'}",
        f"Headline: {candidate.headline or 'Professional'}",
        f"Experience: {candidate.years_experience} years ({candidate.experience_level or 'mid'} level)",
        f"Core Skills: {', '.join(core)}",
        f"All Skills: {', '.join(candidate.skills)}",
        f"Top Projects: {', '.join(candidate.top_projects)}",
        f"Location: {candidate.location or 'Not specified'}",
    ]
    prefs = candidate.preferences
    if prefs is not None:
        if prefs.remote_only:
            lines.append("Preference: Remote only")
        if prefs.desired_roles:
            lines.append(f"Desired Roles: {', '.join(prefs.desired_roles)}")
        if prefs.company_size_preference and prefs.company_size_preference != "any":
            lines.append(f"Company Size: {prefs.company_size_preference}")
    return "\n".join(lines)


def build_job_list(jobs: list[JobListing]) -> str:
    blocks = []
    for i, job in enumerate(jobs, 1):
        blocks.append(
            f"{i}. {job.title} at {job.company}\n"
            f"URL: {job.url}\n"
            f"Description: {job.description}\n"
            f"Location: {job.location or 'Not specified'}\n"
            f"Remote: {'Yes' if job.remote else 'No'}"
        )
    return "\n\n".join(blocks)


def build_user_prompt(candidate: CandidateProfile, jobs: list[JobListing]) -> str:
    return f"Candidate:\n{build_candidate_summary(candidate)}\n\nJobs:\n{build_job_list(jobs)}"


def _number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    try:
        n = float(value)
    except (TypeError, ValueError):
        return None
    return n if math.isfinite(n) else None


def _clamp(value: float, low: float, high: float) -> float:
    return min(high, max(low, value))


def _str_list(value: Any) -> list[str]:
    if not isinstance(value, list):
        return []
    return [str(v) for v in value if v not in (None, "")]


def _breakdown(raw: Any) -> ScoreBreakdown | None:
    if not isinstance(raw, dict):
        return None
    parts = []
    for name, ceiling in BREAKDOWN_LIMITS:
        n = _number(raw.get(name))
        parts.append(_clamp(n, 0, ceiling) if n is not None else 0.0)
    return ScoreBreakdown(*parts)


def parse_matches(
    content: str,
    jobs: list[JobListing],
    min_score: float = MIN_SCORE,
) -> list[JobMatch]:
    """Turn one reasoning reply into matches for the given chunk of jobs."""
    try:
        response = json.loads(content)
    except (TypeError, ValueError) as exc:
        raise ScoringError(f"Unparseable scoring response: {exc}") from exc
    if not isinstance(response, dict):
        raise ScoringError("Scoring response is not a JSON object")
    raw_matches = response.get("matches") or []
    if not isinstance(raw_matches, list):
        raise ScoringError("Scoring response 'matches' is not a list")

    originals = {(j.title, j.company): j for j in reversed(jobs)}
    matches: list[JobMatch] = []
    for raw in raw_matches:
        if not isinstance(raw, dict):
            log.warning("Skipping non-object match entry: %r", raw)
            continue
        score = _number(raw.get("score"))
        if score is None:
            log.warning("Skipping match without numeric score: %r", raw.get("title"))
            continue
        if score < min_score:
            continue

        title = str(raw.get("title") or "")
        company = str(raw.get("company") or "")
        original = originals.get((title, company))
        matches.append(JobMatch(
            title=title,
            company=company,
            url=str(raw.get("url") or (original.url if original else "")),
            score=_clamp(score, 0, 100),
            score_breakdown=_breakdown(raw.get("scoreBreakdown")),
            required_skills=_str_list(raw.get("requiredSkills")),
            nice_to_have_skills=_str_list(raw.get("niceToHaveSkills")),
            missing_skills=_str_list(raw.get("missingSkills")),
            experience_required=raw.get("experienceRequired") or None,
            pitch=str(raw.get("pitch") or "Great fit for this role"),
            location=original.location if original else None,
            remote=original.remote if original else None,
            source_name=original.source_name if original else None,
        ))
    return matches


def rank_matches(matches: list[JobMatch], max_results: int = MAX_RESULTS) -> list[JobMatch]:
    """Score descending; equal scores keep their accumulated order."""
    return sorted(matches, key=lambda m: -m.score)[:max_results]


class BatchScorer:
    def __init__(
        self,
        client: ReasoningClient,
        batch_size: int = BATCH_SIZE,
        max_results: int = MAX_RESULTS,
        min_score: float = MIN_SCORE,
        temperature: float = 0.3,
    ) -> None:
        if batch_size < 1:
            raise ValueError("batch_size must be at least 1")
        self.client = client
        self.batch_size = batch_size
        self.max_results = max_results
        self.min_score = min_score
        self.temperature = temperature

    def _score_chunk(self, candidate: CandidateProfile, jobs: list[JobListing]) -> list[JobMatch]:
        try:
            content = self.client.complete(
                SYSTEM_PROMPT,
                build_user_prompt(candidate, jobs),
                json_mode=True,
                temperature=self.temperature,
            )
        except ScoringError:
            raise
        except Exception as exc:
            raise ScoringError(f"Reasoning call failed: {exc}") from exc
        return parse_matches(content, jobs, self.min_score)

    def score(
        self,
        candidate: CandidateProfile,
        jobs: list[JobListing],
        progress: ProgressSink | None = None,
    ) -> list[JobMatch]:
        if not jobs:
            return []

        chunks = [jobs[i:i + self.batch_size] for i in range(0, len(jobs), self.batch_size)]
        matches: list[JobMatch] = []
        for n, chunk in enumerate(chunks, 1):
            emit(progress, f"[LLM] Processing batch {n}/{len(chunks)}...", log)
            try:
                matches.extend(self._score_chunk(candidate, chunk))
            except ScoringError as exc:
                emit(progress, f"[ERROR] Failed to analyze job matches: {exc}", log)
                raise

        ranked = rank_matches(matches, self.max_results)
        emit(progress, f"[LLM] Found {len(ranked)} quality matches", log)
        return ranked
