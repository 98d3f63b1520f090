"""Exceptions raised by the aggregation and matching pipeline."""
from __future__ import annotations


class JobRadarError(Exception):
    """Base class for all pipeline errors."""


class ConfigError(JobRadarError):
    """Missing credentials or an invalid configuration file."""


class SourceFetchError(JobRadarError):
    """A single source could not be fetched or parsed.

    The aggregator recovers from these: the source contributes zero listings
    and the failure is reported on the progress channel.
    """

    def __init__(self, source_name: str, message: str) -> None:
        super().__init__(f"{source_name}: {message}")
        self.source_name = source_name
        self.message = message


class ScoringError(JobRadarError):
    """The reasoning call failed or returned something unusable.

    Fatal to the whole scoring run; no partial matches are returned.
    """
