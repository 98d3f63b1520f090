from abc import ABC, abstractmethod

from jobradar.models import JobListing, JobSource, SearchOptions


class SourceAdapter(ABC):
    """Fetches and normalizes listings for one kind of source.

    Implementations raise on failure; the aggregator isolates the error.
    """

    @abstractmethod
    def fetch(self, source: JobSource, options: SearchOptions) -> list[JobListing]:
        pass
