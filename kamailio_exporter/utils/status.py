"""Collector scrape status enumeration."""

from enum import Enum


class ScrapeStatus(Enum):
    """Outcome of one collector run within a poll cycle."""

    SUCCESS = "success"
    NO_DATA = "no_data"
    ERROR = "error"

    def to_gauge(self) -> float:
        """
        Convert status to the value of the success meta-metric.

        Returns:
            float: 1.0 for SUCCESS, 0.0 otherwise
        """
        return {
            ScrapeStatus.SUCCESS: 1.0,
            ScrapeStatus.NO_DATA: 0.0,
            ScrapeStatus.ERROR: 0.0,
        }[self]
