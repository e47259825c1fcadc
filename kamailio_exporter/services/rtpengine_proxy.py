"""Passthrough of rtpengine's own metrics endpoint."""

import logging
from dataclasses import dataclass

import httpx

DEFAULT_RTPENGINE_METRICS_URL = "http://127.0.0.1:9901/metrics"


@dataclass
class ProxyResponse:
    """Status line and body to hand back to the HTTP client."""

    status: str
    body: bytes


class RtpengineMetricsProxy:
    """
    Fetch rtpengine's metrics page and return it unchanged.

    The upstream body is passed through as is. An unreachable upstream is
    reported as 503, a failure while reading its body as 500.
    """

    def __init__(self, url: str, timeout: float, logger: logging.Logger):
        """
        Initialize proxy.

        Args:
            url: rtpengine metrics URL
            timeout: Request timeout in seconds
            logger: Logger instance
        """
        self.url = url
        self.timeout = timeout
        self.logger = logger.getChild(self.__class__.__name__)

    def fetch(self) -> ProxyResponse:
        try:
            with httpx.Client(timeout=self.timeout) as client:
                with client.stream("GET", self.url) as response:
                    try:
                        body = response.read()
                    except httpx.HTTPError as e:
                        self.logger.warning(f"Failed to read response from rtpengine: {e}")
                        return ProxyResponse(
                            "500 Internal Server Error",
                            f"Failed to read response from rtpengine: {e}\n".encode("utf-8"),
                        )
        except httpx.HTTPError as e:
            self.logger.warning(f"Failed to connect to rtpengine: {e}")
            return ProxyResponse(
                "503 Service Unavailable",
                f"Failed to connect to rtpengine: {e}\n".encode("utf-8"),
            )
        return ProxyResponse("200 OK", body)
