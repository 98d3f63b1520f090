"""Tests for the persisted per-source daily quota."""
from __future__ import annotations

import json

from jobradar.models import JobSource, SourceKind
from jobradar.quota import QuotaStatus, QuotaTracker


class Today:
    def __init__(self, day: str = "2026-01-15") -> None:
        self.day = day

    def __call__(self) -> str:
        return self.day


def test_fresh_source_has_full_quota(tmp_path) -> None:
    tracker = QuotaTracker(tmp_path / "quota.json", limits={"LinkedIn Jobs": 20})
    assert tracker.check("LinkedIn Jobs") == QuotaStatus(allowed=True, remaining=20)
    assert tracker.check("Unknown").remaining == 100


def test_limit_reached_then_reset_next_day(tmp_path) -> None:
    today = Today()
    tracker = QuotaTracker(tmp_path / "quota.json", limits={"LinkedIn Jobs": 20}, today=today)

    for _ in range(20):
        tracker.increment("LinkedIn Jobs")
    assert tracker.check("LinkedIn Jobs") == QuotaStatus(allowed=False, remaining=0)

    today.day = "2026-01-16"
    assert tracker.check("LinkedIn Jobs") == QuotaStatus(allowed=True, remaining=20)


def test_check_is_read_only(tmp_path) -> None:
    tracker = QuotaTracker(tmp_path / "quota.json", limits={"A": 2})
    for _ in range(5):
        tracker.check("A")
    assert tracker.check("A").remaining == 2
    assert not (tmp_path / "quota.json").exists()


def test_counts_persist_across_instances(tmp_path) -> None:
    path = tmp_path / "quota.json"
    today = Today()
    first = QuotaTracker(path, limits={"A": 5}, today=today)
    first.increment("A")
    first.increment("A")

    second = QuotaTracker(path, limits={"A": 5}, today=today)
    assert second.check("A").remaining == 3

    on_disk = json.loads(path.read_text(encoding="utf-8"))
    assert on_disk == {"A": {"count": 2, "date": "2026-01-15"}}


def test_increment_on_new_day_restarts_count(tmp_path) -> None:
    today = Today()
    tracker = QuotaTracker(tmp_path / "quota.json", limits={"A": 5}, today=today)
    tracker.increment("A")
    tracker.increment("A")

    today.day = "2026-01-16"
    tracker.increment("A")
    assert tracker.stats()["A"] == {"count": 1, "date": "2026-01-16"}


def test_corrupt_file_is_treated_as_empty(tmp_path) -> None:
    path = tmp_path / "quota.json"
    path.write_text("{not json", encoding="utf-8")
    tracker = QuotaTracker(path, limits={"A": 3})
    assert tracker.check("A") == QuotaStatus(allowed=True, remaining=3)


def test_check_and_reserve_stops_at_limit(tmp_path) -> None:
    tracker = QuotaTracker(tmp_path / "quota.json", limits={"A": 2})
    assert tracker.check_and_reserve("A") == QuotaStatus(allowed=True, remaining=1)
    assert tracker.check_and_reserve("A") == QuotaStatus(allowed=True, remaining=0)
    assert tracker.check_and_reserve("A") == QuotaStatus(allowed=False, remaining=0)
    assert tracker.stats()["A"]["count"] == 2


def test_for_sources_uses_each_source_limit(tmp_path) -> None:
    sources = [
        JobSource("LinkedIn Jobs", "https://linkedin.example", SourceKind.SCRAPE, daily_quota=20),
        JobSource("RemoteOK", "https://remoteok.example", SourceKind.API),
    ]
    tracker = QuotaTracker.for_sources(sources, tmp_path / "quota.json")
    assert tracker.limit_for("LinkedIn Jobs") == 20
    assert tracker.limit_for("RemoteOK") == 100
