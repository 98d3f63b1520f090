"""Load env, source and candidate configuration."""
from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from jobradar.errors import ConfigError
from jobradar.log import get_logger
from jobradar.models import CandidateProfile, JobSource, SourceKind

log = get_logger(__name__)

load_dotenv()

PROJECT_ROOT: Path = Path(__file__).resolve().parent.parent
CONFIG_DIR: Path = PROJECT_ROOT / "config"
PROFILE_PATH: Path = CONFIG_DIR / "profile.yaml"
SOURCES_PATH: Path = CONFIG_DIR / "sources.yaml"
REPORTS_DIR: Path = PROJECT_ROOT / "reports"
DATA_DIR: Path = Path(os.environ.get("JOBRADAR_DATA_DIR", PROJECT_ROOT / "data"))
QUOTA_PATH: Path = DATA_DIR / "quota.json"

CACHE_TTL_SECONDS = 2 * 60 * 60
CACHE_MAX_ENTRIES = 50

# Stricter ceilings for boards prone to bot detection.
DAILY_QUOTAS: dict[str, int] = {
    "LinkedIn Jobs": 20,
    "Indeed": 30,
    "Google Jobs": 25,
}

DEFAULT_SOURCES: tuple[JobSource, ...] = (
    JobSource(
        name="Work at a Startup",
        base_url="https://www.workatastartup.com/jobs",
        kind=SourceKind.SCRAPE,
        max_pages=10,
    ),
    JobSource(
        name="LinkedIn Jobs",
        base_url=(
            "https://www.linkedin.com/jobs/search/"
            "?keywords=software%20engineer&location=United%20States&f_TPR=r86400"
        ),
        kind=SourceKind.SCRAPE,
        daily_quota=DAILY_QUOTAS["LinkedIn Jobs"],
        max_pages=5,
        keyword_param="keywords",
        location_param="location",
    ),
    JobSource(
        name="RemoteOK",
        base_url="https://remoteok.com/api",
        kind=SourceKind.API,
    ),
    JobSource(
        name="Remotive",
        base_url="https://remotive.com/api/remote-jobs",
        kind=SourceKind.API,
        keyword_param="search",
    ),
    JobSource(
        name="We Work Remotely",
        base_url="https://weworkremotely.com/categories/remote-programming-jobs.rss",
        kind=SourceKind.FEED,
    ),
)


def get_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default).strip()


def ensure_dirs() -> None:
    for d in (REPORTS_DIR, DATA_DIR):
        d.mkdir(parents=True, exist_ok=True)


def _read_yaml(path: Path) -> Any:
    try:
        with open(path, "r", encoding="utf-8") as f:
            return yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Invalid YAML in {path}: {exc}") from exc


def parse_source(entry: dict[str, Any]) -> JobSource:
    """Build a :class:`JobSource` from one ``sources.yaml`` entry."""
    try:
        name = str(entry["name"])
        url = str(entry["url"])
    except (KeyError, TypeError) as exc:
        raise ConfigError(f"Source entry needs 'name' and 'url': {entry!r}") from exc
    try:
        kind = SourceKind(str(entry.get("kind", "")).lower())
    except ValueError as exc:
        raise ConfigError(f"Unknown source kind for {name}: {entry.get('kind')!r}") from exc
    return JobSource(
        name=name,
        base_url=url,
        kind=kind,
        daily_quota=int(entry.get("daily_quota") or DAILY_QUOTAS.get(name, 100)),
        max_pages=int(entry.get("max_pages") or 10),
        keyword_param=entry.get("keyword_param") or None,
        location_param=entry.get("location_param") or None,
    )


def load_sources(path: Path | None = None) -> list[JobSource]:
    """Configured sources, falling back to :data:`DEFAULT_SOURCES`."""
    path = path or SOURCES_PATH
    if not path.exists():
        return list(DEFAULT_SOURCES)

    data = _read_yaml(path) or {}
    entries = data.get("sources") if isinstance(data, dict) else data
    if not isinstance(entries, list) or not entries:
        raise ConfigError(f"{path} must define a non-empty 'sources' list")

    sources = [parse_source(e) for e in entries]
    names = [s.name for s in sources]
    if len(set(names)) != len(names):
        raise ConfigError(f"Duplicate source names in {path}")
    log.info("Loaded %d source(s) from %s", len(sources), path.name)
    return sources


def load_candidate(path: Path | None = None) -> CandidateProfile:
    path = path or PROFILE_PATH
    if not path.exists():
        raise ConfigError(f"No candidate profile at {path}")
    data = _read_yaml(path)
    if not isinstance(data, dict):
        raise ConfigError(f"{path} must contain a mapping")
    # Accept the nested layout written by older profile files.
    if isinstance(data.get("profile"), dict):
        merged = dict(data["profile"])
        merged.setdefault("preferences", data.get("preferences"))
        data = merged
    return CandidateProfile.from_dict(data)
