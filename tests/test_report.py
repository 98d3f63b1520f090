from __future__ import annotations

from jobradar.models import JobMatch, ScoreBreakdown
from jobradar.report import (
    build_match_report,
    format_matches_for_export,
    generate_outreach_email,
    write_match_report,
)


def _match(title: str = "Frontend Engineer", score: float = 82, **kwargs) -> JobMatch:
    defaults = dict(
        company="Acme",
        url="https://www.remoteok.com/jobs/1",
        pitch="Your design-system work maps directly to this role.",
        required_skills=["React", "TypeScript"],
        missing_skills=["Svelte"],
        score_breakdown=ScoreBreakdown(35, 25, 15, 7),
        location="Berlin",
        remote=True,
        source_name="RemoteOK",
    )
    defaults.update(kwargs)
    return JobMatch(title=title, score=score, **defaults)


def test_report_lists_top_matches_and_table() -> None:
    report = build_match_report([_match(), _match("Staff Engineer", 64)], jobs_found=120, filtered=40)
    assert report.startswith("# Job Match Report")
    assert "**120** jobs found | **40** passed pre-filter | **2** matches" in report
    assert "### Frontend Engineer @ Acme" in report
    assert "skills 35/40" in report
    assert "Berlin (remote)" in report
    assert "[Remoteok](https://www.remoteok.com/jobs/1)" in report
    assert "| 2 | Staff Engineer | Acme |" in report


def test_report_without_matches() -> None:
    report = build_match_report([], jobs_found=3, filtered=0)
    assert "_No matches scored 30 or above._" in report
    assert "Quick Reference" not in report


def test_write_match_report(tmp_path) -> None:
    path = write_match_report("# hi", reports_dir=tmp_path)
    assert path.name.startswith("matches_") and path.suffix == ".md"
    assert path.read_text(encoding="utf-8") == "# hi"


def test_export_summary(candidate) -> None:
    exported = format_matches_for_export([_match(score=80), _match("Other", 65)], candidate)
    assert exported["summary"] == {"totalMatches": 2, "averageScore": 72, "topScore": 80}
    first = exported["matches"][0]
    assert first["scoreBreakdown"]["skillMatch"] == 35
    assert first["source"] == "RemoteOK"
    assert "exportDate" in first
    assert exported["candidate"]["name"] == "Pat"


def test_export_summary_when_empty(candidate) -> None:
    assert format_matches_for_export([], candidate)["summary"] == {
        "totalMatches": 0, "averageScore": 0, "topScore": 0,
    }


def test_outreach_email(candidate) -> None:
    email = generate_outreach_email(_match(), candidate)
    assert email.startswith("Subject: Application for Frontend Engineer at Acme")
    assert "6 years of experience" in email
    assert "React, TypeScript, GraphQL" in email
    assert "Design system" in email
    assert email.rstrip().endswith("Pat")
