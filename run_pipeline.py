#!/usr/bin/env python3
"""Entry point: aggregate jobs and rank them against config/profile.yaml."""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent))

from jobradar.config import PROFILE_PATH, load_candidate
from jobradar.errors import ConfigError, ScoringError
from jobradar.log import get_logger
from jobradar.models import SearchOptions

log = get_logger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Aggregate job postings and rank them for a candidate.")
    parser.add_argument("--profile", type=Path, default=PROFILE_PATH, help="Candidate profile YAML")
    parser.add_argument("--sources", nargs="*", default=None, help="Only crawl sources whose name contains these")
    parser.add_argument("--keywords", nargs="*", default=None, help="Override search keywords")
    parser.add_argument("--location", default=None, help="Override the profile location for location-aware sources")
    parser.add_argument("--export", type=Path, default=None, help="Write matches as JSON to this path")
    parser.add_argument("--no-report", action="store_true", help="Skip writing the Markdown report")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if not args.profile.exists():
        print()
        print(f"  No profile found at {args.profile}.")
        print("  Copy config/profile.example.yaml to config/profile.yaml and edit it.")
        print()
        return 1

    from jobradar.pipeline import default_keywords, run
    from jobradar.report import format_matches_for_export

    try:
        candidate = load_candidate(args.profile)
        options = SearchOptions(
            include_sources=args.sources or None,
            keywords=args.keywords if args.keywords is not None else default_keywords(candidate),
            location=args.location or candidate.location,
        )
        result = run(candidate, options=options, progress=print, write_report=not args.no_report)
    except ConfigError as exc:
        log.error("Configuration error: %s", exc)
        return 1
    except ScoringError as exc:
        log.error("Scoring failed, no ranking was produced: %s", exc)
        return 2

    if args.export:
        args.export.write_text(
            json.dumps(format_matches_for_export(result.matches, candidate), indent=2),
            encoding="utf-8",
        )
        log.info("Exported %d matches → %s", len(result.matches), args.export)

    log.info("  Jobs found: %d", result.jobs_found)
    log.info("  Passed pre-filter: %d", result.filtered_count)
    log.info("  Matches: %d", len(result.matches))
    if result.report_path:
        log.info("  Report: %s", result.report_path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
