"""Markdown match report, JSON export summary and outreach email drafts."""
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from jobradar.config import REPORTS_DIR
from jobradar.log import get_logger
from jobradar.models import CandidateProfile, JobMatch

log = get_logger(__name__)

TOP_N = 15


def _short_url_label(url: str) -> str:
    host = (urlparse(url).hostname or "").replace("www.", "")
    parts = host.split(".")
    return parts[0].capitalize() if parts and parts[0] else "Link"


def _cut(text: str, n: int) -> str:
    return text[:n] + ("…" if len(text) > n else "")


def _where(m: JobMatch) -> str:
    loc = m.location or ("Remote" if m.remote else "—")
    if m.remote and m.location and "remote" not in m.location.lower():
        loc += " (remote)"
    return loc


def build_match_report(matches: list[JobMatch], *, jobs_found: int, filtered: int) -> str:
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    lines: list[str] = [f"# Job Match Report — {date}", ""]
    lines.append(
        f"**{jobs_found}** jobs found | **{filtered}** passed pre-filter | **{len(matches)}** matches"
    )
    lines.append("")

    top = matches[:TOP_N]
    if not top:
        lines.append("_No matches scored 30 or above._")
        lines.append("")
        return "\n".join(lines)

    lines.append("## Top Matches")
    lines.append("")
    for m in top:
        lines.append(f"### {m.title} @ {m.company}")
        lines.append(f"- **Score:** {m.score:.0f}/100")
        if m.score_breakdown:
            b = m.score_breakdown
            lines.append(
                f"- **Breakdown:** skills {b.skill_match:.0f}/40, experience {b.experience_match:.0f}/30, "
                f"projects {b.project_match:.0f}/20, preferences {b.preference_match:.0f}/10"
            )
        lines.append(f"- **Location:** {_where(m)}")
        if m.experience_required:
            lines.append(f"- **Experience:** {m.experience_required}")
        if m.required_skills:
            lines.append(f"- **Required:** {', '.join(m.required_skills[:6])}")
        if m.missing_skills:
            lines.append(f"- **Gaps:** {', '.join(m.missing_skills[:4])}")
        lines.append(f"- **Pitch:** {m.pitch}")
        if m.url:
            lines.append(f"- **Apply:** [{_short_url_label(m.url)}]({m.url})")
        lines.append("")

    lines.append("---")
    lines.append("")
    lines.append("## Quick Reference")
    lines.append("")
    lines.append("| # | Role | Company | Location | Score | Source | Apply |")
    lines.append("|--:|------|---------|----------|------:|--------|-------|")
    for i, m in enumerate(top, 1):
        link = f"[{_short_url_label(m.url)}]({m.url})" if m.url else "—"
        lines.append(
            f"| {i} | {_cut(m.title, 40)} | {_cut(m.company, 22)} | {_cut(_where(m), 18)} "
            f"| {m.score:.0f} | {m.source_name or '—'} | {link} |"
        )
    lines.append("")

    log.info("Built match report: %d matches", len(matches))
    return "\n".join(lines)


def write_match_report(content: str, reports_dir: Path | None = None) -> Path:
    reports_dir = reports_dir or REPORTS_DIR
    reports_dir.mkdir(parents=True, exist_ok=True)
    date = datetime.now(timezone.utc).strftime("%Y-%m-%d")
    path = reports_dir / f"matches_{date}.md"
    path.write_text(content, encoding="utf-8")
    log.info("Report written → %s", path)
    return path


def format_matches_for_export(matches: list[JobMatch], candidate: CandidateProfile) -> dict[str, Any]:
    exported_at = datetime.now(timezone.utc).isoformat()
    scores = [m.score for m in matches]
    return {
        "candidate": {
            "name": candidate.name,
            "headline": candidate.headline,
            "yearsExperience": candidate.years_experience,
            "skills": list(candidate.skills),
        },
        "matches": [{**m.to_dict(), "exportDate": exported_at} for m in matches],
        "summary": {
            "totalMatches": len(matches),
            "averageScore": round(sum(scores) / len(scores)) if scores else 0,
            "topScore": max(scores) if scores else 0,
        },
    }


def generate_outreach_email(match: JobMatch, candidate: CandidateProfile) -> str:
    skills = ", ".join(candidate.skills[:5])
    achievements = ""
    if candidate.top_projects:
        achievements = (
            "Some of my notable achievements include: "
            f"{', '.join(candidate.top_projects[:2])}.\n\n"
        )
    return f"""Subject: Application for {match.title} at {match.company}

Dear Hiring Manager,

I am writing to express my strong interest in the {match.title} position at {match.company}.

{match.pitch} With {candidate.years_experience} years of experience and expertise in {skills}, I believe I would be a valuable addition to your team.

{achievements}I would welcome the opportunity to discuss how my background and skills align with your team's needs. Thank you for your consideration.

Best regards,
{candidate.name or 'Candidate'}"""
