"""Client for user defined metrics published by Kamailio over HTTP."""

import logging
from typing import List

import httpx
from prometheus_client.metrics_core import Metric
from prometheus_client.parser import text_string_to_metric_families


class UserMetricsClient:
    """Fetch and parse a Prometheus text exposition from a URL."""

    def __init__(self, url: str, timeout: float, logger: logging.Logger):
        """
        Initialize user metrics client.

        Args:
            url: HTTP(S) URL serving the text exposition format
            timeout: Request timeout in seconds
            logger: Logger instance
        """
        self.url = url
        self.timeout = timeout
        self.logger = logger.getChild(self.__class__.__name__)

    async def fetch(self) -> List[Metric]:
        """
        Query the URL and parse the returned metric families.

        Failures are logged and yield no families.

        Returns:
            List[Metric]: Parsed families, empty on any failure
        """
        try:
            async with httpx.AsyncClient() as client:
                response = await client.get(self.url, timeout=self.timeout, follow_redirects=True)
        except httpx.TimeoutException:
            self.logger.error(f"Timed out querying user defined metrics at {self.url}")
            return []
        except httpx.RequestError as e:
            self.logger.error(f"Failed to query user defined metrics: {e}")
            return []

        if response.status_code != 200:
            self.logger.error(f"Requesting user defined metrics returned status code {response.status_code}")
            return []

        try:
            return list(text_string_to_metric_families(response.text))
        except ValueError as e:
            self.logger.error(f"Failed to parse user defined metrics: {e}")
            return []
