"""Heuristic extraction of job listings from crawled pages.

Every function here is pure: ``(content, page_url, source_name) -> listings``.
The title classifier is passed in as a predicate so a source can swap it.
"""
from __future__ import annotations

import html as _html
import re
from typing import Callable, Iterable
from urllib.parse import urljoin

from jobradar.models import JobListing

TitlePredicate = Callable[[str], bool]

MAX_LISTINGS_PER_PAGE = 20
DESCRIPTION_CHARS = 200
NO_DESCRIPTION = "No description available"

JOB_TITLE_KEYWORDS: tuple[str, ...] = (
    "engineer", "developer", "designer", "manager", "analyst", "specialist",
    "consultant", "architect", "lead", "senior", "junior", "intern",
    "frontend", "backend", "fullstack", "devops", "qa", "data",
    "product", "marketing", "sales", "support", "operations",
)


def is_job_title(text: str) -> bool:
    low = (text or "").lower()
    return any(kw in low for kw in JOB_TITLE_KEYWORDS)


# ── Shared text helpers ──────────────────────────────────────────────────

_MD_LINK = re.compile(r"\[([^\]]+)\]\(([^)]+)\)")
_MD_HEADING = re.compile(r"^#{1,6}\s*(.+)$")
_MD_SYNTAX = re.compile(r"[*_\[\]()#`>]")
_TAG = re.compile(r"<[^>]*>")
_WS = re.compile(r"\s+")
_REMOTE = re.compile(r"remote|anywhere|distributed|work from home", re.IGNORECASE)

_LOCATION_PATTERNS = (
    re.compile(r"\b(?:location|based in|office)\b[\s:]*([^\n\r|]{1,50})", re.IGNORECASE),
    re.compile(
        r"\b(remote|san francisco|new york|london|berlin|toronto|seattle|austin"
        r"|boston|chicago|los angeles|miami|denver)\b",
        re.IGNORECASE,
    ),
)
_HTML_LOCATION = re.compile(r"(?:location|based|office)[^>]*>([^<]+)<", re.IGNORECASE)


def strip_markdown(text: str) -> str:
    text = _MD_LINK.sub(r"\1", text or "")
    text = _MD_SYNTAX.sub("", text)
    return _WS.sub(" ", text).strip()


def strip_tags(markup: str) -> str:
    return _WS.sub(" ", _html.unescape(_TAG.sub(" ", markup or ""))).strip()


def is_remote(text: str) -> bool:
    return bool(_REMOTE.search(text or ""))


def extract_location(text: str) -> str | None:
    """First location-looking phrase in free text, or None."""
    for pattern in _LOCATION_PATTERNS:
        m = pattern.search(text or "")
        if m:
            found = strip_markdown(m.group(1))
            if found:
                return found
    return None


def resolve_url(url: str, page_url: str) -> str:
    url = (url or "").strip()
    if not url:
        return page_url
    return urljoin(page_url, url)


def keyword_filter(listings: Iterable[JobListing], keywords: list[str] | None) -> list[JobListing]:
    """Keep listings whose title or description mentions any keyword."""
    items = list(listings)
    kws = [k.lower() for k in keywords or [] if k and k.strip()]
    if not kws:
        return items
    return [
        j for j in items
        if any(k in f"{j.title} {j.description}".lower() for k in kws)
    ]


# ── Markdown ─────────────────────────────────────────────────────────────

_COMPANY_LOOKAHEAD = 4
_CONTEXT_LINES = 10


def _title_candidate(line: str) -> tuple[str, str | None] | None:
    """(title text, link url) if the line is a heading or carries a link."""
    heading = _MD_HEADING.match(line)
    link = _MD_LINK.search(line)
    if heading:
        inner = _MD_LINK.search(heading.group(1))
        if inner:
            return inner.group(1).strip(), inner.group(2).strip()
        return strip_markdown(heading.group(1)), None
    if link:
        return link.group(1).strip(), link.group(2).strip()
    return None


def _find_company(lines: list[str], start: int, is_title: TitlePredicate) -> str | None:
    for raw in lines[start:start + _COMPANY_LOOKAHEAD]:
        line = raw.strip()
        if not line:
            continue
        if line.startswith(("#", "*", "-")):
            continue
        company = strip_markdown(line)
        if 1 < len(company) < 50 and not is_title(company):
            return company
    return None


def extract_markdown(
    content: str,
    page_url: str,
    source_name: str,
    is_title: TitlePredicate = is_job_title,
) -> list[JobListing]:
    lines = content.split("\n")
    jobs: list[JobListing] = []
    current: dict | None = None

    def flush() -> None:
        if current and current.get("title") and current.get("company"):
            jobs.append(JobListing(source_name=source_name, **current))

    for i, raw in enumerate(lines):
        candidate = _title_candidate(raw.strip())
        if candidate is None or not is_title(candidate[0]):
            continue

        flush()
        title, link = candidate
        window = " ".join(ln.strip() for ln in lines[i:i + _CONTEXT_LINES])
        desc_lines = [
            ln.strip() for ln in lines[i + 1:i + _CONTEXT_LINES]
            if ln.strip() and not ln.strip().startswith("#")
        ]
        description = strip_markdown(" ".join(desc_lines))[:DESCRIPTION_CHARS]
        current = {
            "title": title,
            "company": _find_company(lines, i + 1, is_title),
            "url": resolve_url(link or "", page_url),
            "description": description or NO_DESCRIPTION,
            "remote": is_remote(window),
            "location": extract_location(window),
        }

    flush()
    return jobs


# ── HTML ─────────────────────────────────────────────────────────────────

_HTML_FLAGS = re.IGNORECASE | re.DOTALL

# (pattern, first group is a link)
_HTML_PATTERNS: tuple[tuple[re.Pattern, bool], ...] = (
    (re.compile(r"<a[^>]*href=[\"']([^\"']+)[\"'][^>]*>.*?<h[1-6][^>]*>([^<]+)</h[1-6]>.*?</a>", _HTML_FLAGS), True),
    (re.compile(r"<div[^>]*job[^>]*>.*?<h[1-6][^>]*>([^<]+)</h[1-6]>.*?company[^>]*>([^<]+)<.*?</div>", _HTML_FLAGS), False),
    (re.compile(r"<article[^>]*>.*?<h[1-6][^>]*>([^<]+)</h[1-6]>.*?<span[^>]*>([^<]+)</span>.*?</article>", _HTML_FLAGS), False),
    (re.compile(r"<div[^>]*role[^>]*>.*?<h[1-6][^>]*>([^<]+)</h[1-6]>.*?<span[^>]*>([^<]+)</span>.*?</div>", _HTML_FLAGS), False),
)
_HTML_HEADING = re.compile(r"<h[1-6][^>]*>([^<]{10,100})</h[1-6]>", re.IGNORECASE)

_COMPANY_NEAR_TITLE = (
    re.compile(r"company:\s*([^\n\r<]{1,50})", re.IGNORECASE),
    re.compile(r"\bat\s+([A-Z][a-zA-Z\s&.]{2,30})"),
    re.compile(r"\b([A-Z][a-zA-Z]{2,}(?:\s+[A-Z][a-zA-Z]*)*)\s+(?:is|seeks|hiring)\b"),
)


def _company_near(content: str, title: str) -> str | None:
    idx = content.lower().find(title.lower())
    if idx == -1:
        return None
    window = strip_tags(content[max(0, idx - 200):idx + len(title) + 200])
    for pattern in _COMPANY_NEAR_TITLE:
        m = pattern.search(window)
        if m:
            company = m.group(1).strip()
            if 2 < len(company) < 40:
                return company
    return None


def _description_near(content: str, title: str) -> str:
    idx = content.lower().find(title.lower())
    if idx == -1:
        return NO_DESCRIPTION
    text = strip_tags(content[idx:idx + 500])
    if len(text) > DESCRIPTION_CHARS:
        return text[:DESCRIPTION_CHARS] + "..."
    return text


def extract_html(
    content: str,
    page_url: str,
    source_name: str,
    is_title: TitlePredicate = is_job_title,
) -> list[JobListing]:
    jobs: list[JobListing] = []
    remote = is_remote(content)
    loc_match = _HTML_LOCATION.search(content)
    location = _html.unescape(loc_match.group(1)).strip() if loc_match else None

    for pattern, has_link in _HTML_PATTERNS:
        for m in pattern.finditer(content):
            if has_link:
                url = resolve_url(m.group(1), page_url)
                title = _html.unescape(m.group(2)).strip()
                company = _company_near(content, title)
            else:
                url = page_url
                title = _html.unescape(m.group(1)).strip()
                company = _html.unescape(m.group(2)).strip()
            if len(title) <= 3 or not is_title(title):
                continue
            jobs.append(JobListing(
                title=title,
                company=company or source_name,
                url=url,
                description=_description_near(content, title),
                source_name=source_name,
                remote=remote,
                location=location,
            ))

    if not jobs:
        for heading in _HTML_HEADING.findall(content)[:10]:
            title = _html.unescape(heading).strip()
            if title and is_title(title):
                jobs.append(JobListing(
                    title=title,
                    company=source_name,
                    url=page_url,
                    description=f"Job posting from {source_name}",
                    source_name=source_name,
                ))

    return jobs


def looks_like_html(content: str) -> bool:
    low = content.lower()
    return "<html" in low or "<!doctype" in low


def extract_page(
    content: str,
    page_url: str,
    source_name: str,
    is_title: TitlePredicate = is_job_title,
) -> list[JobListing]:
    """Dispatch on content format and cap the per-page result."""
    if not content:
        return []
    if looks_like_html(content):
        jobs = extract_html(content, page_url, source_name, is_title)
    else:
        jobs = extract_markdown(content, page_url, source_name, is_title)
    return jobs[:MAX_LISTINGS_PER_PAGE]
