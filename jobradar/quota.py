"""Per-source daily call quotas persisted to a JSON file with file locking."""
from __future__ import annotations

import fcntl
import json
import threading
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Iterable

from jobradar.log import get_logger
from jobradar.models import DEFAULT_DAILY_QUOTA, JobSource

log = get_logger(__name__)


def utc_today() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d")


@dataclass(frozen=True)
class QuotaStatus:
    allowed: bool
    remaining: int


def _lock(f, exclusive: bool = True) -> None:
    """Advisory file lock (Unix fcntl)."""
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_EX if exclusive else fcntl.LOCK_SH)
    except (OSError, AttributeError):
        pass


def _unlock(f) -> None:
    try:
        fcntl.flock(f.fileno(), fcntl.LOCK_UN)
    except (OSError, AttributeError):
        pass


class QuotaTracker:
    """Soft daily ceilings on paid or rate-limited fetches.

    Records are ``{source: {"count": n, "date": "YYYY-MM-DD"}}``. A record
    stamped with another day counts as zero, so quotas reset at the UTC day
    boundary without an explicit reset call.
    """

    def __init__(
        self,
        path: Path,
        limits: dict[str, int] | None = None,
        default_limit: int = DEFAULT_DAILY_QUOTA,
        today: Callable[[], str] = utc_today,
    ) -> None:
        self.path = Path(path)
        self.limits = dict(limits or {})
        self.default_limit = default_limit
        self._today = today
        self._lock = threading.Lock()
        self._records = self._load()

    @classmethod
    def for_sources(cls, sources: Iterable[JobSource], path: Path, **kwargs) -> "QuotaTracker":
        return cls(path, limits={s.name: s.daily_quota for s in sources}, **kwargs)

    def limit_for(self, source_name: str) -> int:
        return self.limits.get(source_name, self.default_limit)

    def _load(self) -> dict[str, dict]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                _lock(f, exclusive=False)
                data = json.load(f)
                _unlock(f)
        except (OSError, ValueError) as exc:
            log.error("Error loading quota file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            log.error("Ignoring malformed quota file %s", self.path)
            return {}
        return data

    def _save(self) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w", encoding="utf-8") as f:
                _lock(f)
                json.dump(self._records, f, indent=2)
                _unlock(f)
        except OSError as exc:
            log.error("Error saving quota file %s: %s", self.path, exc)

    def _used_today(self, source_name: str) -> int:
        record = self._records.get(source_name)
        if not isinstance(record, dict) or record.get("date") != self._today():
            return 0
        try:
            return int(record.get("count", 0))
        except (TypeError, ValueError):
            return 0

    def _status(self, source_name: str) -> QuotaStatus:
        limit = self.limit_for(source_name)
        used = self._used_today(source_name)
        return QuotaStatus(allowed=used < limit, remaining=max(0, limit - used))

    def _bump(self, source_name: str) -> None:
        self._records[source_name] = {
            "count": self._used_today(source_name) + 1,
            "date": self._today(),
        }
        self._save()

    def check(self, source_name: str) -> QuotaStatus:
        with self._lock:
            return self._status(source_name)

    def increment(self, source_name: str) -> None:
        with self._lock:
            self._bump(source_name)
        log.debug("Quota %s: %d/%d used today", source_name,
                  self._used_today(source_name), self.limit_for(source_name))

    def check_and_reserve(self, source_name: str) -> QuotaStatus:
        """Atomically take one unit of quota if any is left.

        ``remaining`` reflects the state after the reservation.
        """
        with self._lock:
            status = self._status(source_name)
            if not status.allowed:
                return status
            self._bump(source_name)
            return QuotaStatus(allowed=True, remaining=status.remaining - 1)

    def stats(self) -> dict[str, dict]:
        with self._lock:
            return {name: dict(rec) for name, rec in self._records.items()}
