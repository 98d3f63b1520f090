"""Cheap skill-overlap filter applied before the costly scoring step."""
from __future__ import annotations

from jobradar.log import get_logger
from jobradar.models import CandidateProfile, JobListing

log = get_logger(__name__)


def _normalize(skills: list[str]) -> list[str]:
    return [s.lower().strip() for s in skills if s and s.strip()]


def prefilter_jobs(candidate: CandidateProfile, jobs: list[JobListing]) -> list[JobListing]:
    """Drop jobs that mention none of the candidate's skills.

    Deliberately permissive: one core-skill hit or one hit among all skills
    keeps the job. A candidate without skills keeps nothing.
    """
    skills = _normalize(candidate.skills)
    core = _normalize(candidate.core_skills)
    if not skills and not core:
        log.info("Candidate has no skills, nothing to score")
        return []

    kept: list[JobListing] = []
    for job in jobs:
        job_text = f"{job.title} {job.description}".lower()
        core_hits = sum(1 for s in core if s in job_text)
        any_hits = sum(1 for s in skills if s in job_text)
        if core_hits >= 1 or any_hits >= 1:
            kept.append(job)

    log.info("Pre-filtered to %d relevant jobs from %d total", len(kept), len(jobs))
    return kept
