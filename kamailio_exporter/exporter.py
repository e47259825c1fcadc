"""Prometheus exposition: custom collector, WSGI app and HTTP server."""

import asyncio
import logging
import re
from socketserver import ThreadingMixIn
from typing import Dict, Iterable, List, Optional, Tuple
from wsgiref.simple_server import WSGIRequestHandler, WSGIServer, make_server

from prometheus_client import CollectorRegistry as MetricsRegistry
from prometheus_client import Info, make_wsgi_app
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily
from prometheus_client.metrics_core import Metric

from .config.models import ExporterConfig
from .config.settings import VERSION
from .orchestrator import Scraper
from .services.rtpengine_proxy import RtpengineMetricsProxy
from .services.user_metrics import UserMetricsClient
from .utils.errors import ConnectError
from .utils.metrics import SCRAPE_DURATION, SCRAPE_SUCCESS, MetricPoint, ScrapeResult, ValueKind

METRIC_NAME_RE = re.compile(r"^[a-zA-Z_:][a-zA-Z0-9_:]*$")

LANDING_PAGE = """<html>
<head><title>Kamailio Exporter</title></head>
<body>
<h1>Kamailio Exporter</h1>
<p>Prometheus Exporter for Kamailio servers</p>
<p>Version: {version}</p>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def build_families(points: Iterable[MetricPoint], logger: logging.Logger) -> List[Metric]:
    """
    Group metric points into Prometheus metric families.

    Points sharing a metric name end up in one family. Families with a name
    Prometheus would reject, or whose points disagree on the metric type, are
    skipped with a warning.

    Args:
        points: Points of one poll cycle
        logger: Logger instance

    Returns:
        List[Metric]: One family per valid metric name, in first-seen order
    """
    families: Dict[str, Optional[Metric]] = {}
    kinds: Dict[str, ValueKind] = {}

    for point in points:
        descriptor = point.descriptor
        name = descriptor.name

        if name not in families:
            if not METRIC_NAME_RE.match(name):
                logger.warning(f"Skipping metric with invalid name: {name!r}")
                families[name] = None
                continue
            family_class = CounterMetricFamily if point.kind == ValueKind.COUNTER else GaugeMetricFamily
            try:
                families[name] = family_class(name, descriptor.help, labels=list(descriptor.label_names))
            except ValueError as e:
                logger.warning(f"Skipping metric {name!r}: {e}")
                families[name] = None
                continue
            kinds[name] = point.kind

        family = families[name]
        if family is None:
            continue
        if kinds[name] != point.kind:
            logger.warning(f"Skipping {point.kind.value} sample of {kinds[name].value} metric {name!r}")
            continue
        family.add_metric(list(point.label_values), point.value)

    return [family for family in families.values() if family is not None]


class KamailioCollector:
    """
    prometheus_client custom collector running one poll cycle per scrape.

    Each scrape opens its own Kamailio connection, so concurrent HTTP scrapes
    never share state.
    """

    def __init__(
        self,
        scraper: Scraper,
        logger: logging.Logger,
        user_metrics: Optional[UserMetricsClient] = None
    ):
        """
        Initialize collector.

        Args:
            scraper: Poll cycle orchestrator
            logger: Logger instance
            user_metrics: Optional client for user defined metrics
        """
        self.scraper = scraper
        self.logger = logger
        self.user_metrics = user_metrics
        # Result of the most recent poll cycle, None if Kamailio was unreachable
        self.last_result: Optional[ScrapeResult] = None

    def describe(self) -> List[Metric]:
        """Families always present in a successful scrape."""
        return [
            GaugeMetricFamily(SCRAPE_DURATION.name, SCRAPE_DURATION.help, labels=list(SCRAPE_DURATION.label_names)),
            GaugeMetricFamily(SCRAPE_SUCCESS.name, SCRAPE_SUCCESS.help, labels=list(SCRAPE_SUCCESS.label_names)),
        ]

    def collect(self) -> Iterable[Metric]:
        result, user_families = asyncio.run(self._gather())
        self.last_result = result
        if result is not None:
            yield from build_families(result.all_points(), self.logger)
        yield from user_families

    async def _gather(self) -> Tuple[Optional[ScrapeResult], List[Metric]]:
        result = None
        try:
            result = await self.scraper.scrape()
        except ConnectError as e:
            self.logger.error(f"Can not connect to kamailio: {e}")

        user_families: List[Metric] = []
        if self.user_metrics is not None:
            user_families = await self.user_metrics.fetch()
        return result, user_families


def create_registry(collector: KamailioCollector) -> MetricsRegistry:
    """Metrics registry holding the Kamailio collector and the build info."""
    registry = MetricsRegistry()
    registry.register(collector)
    Info("kamailio_exporter_build", "Kamailio exporter build information", registry=registry).info(
        {"version": VERSION}
    )
    return registry


def create_collector(config: ExporterConfig, collectors: Dict, logger: logging.Logger) -> KamailioCollector:
    """
    Wire scraper and user metrics client into a Kamailio collector.

    Args:
        config: Exporter configuration
        collectors: Instantiated collectors by name
        logger: Logger instance

    Returns:
        KamailioCollector: Collector ready to be registered
    """
    scraper = Scraper(collectors, config.kamailio.rpc_uri, config.kamailio.timeout_seconds, logger)
    user_metrics = None
    if config.web.custom_metrics_url:
        logger.info(f"Appending user defined metrics from {config.web.custom_metrics_url}")
        user_metrics = UserMetricsClient(config.web.custom_metrics_url, config.kamailio.timeout_seconds, logger)
    return KamailioCollector(scraper, logger, user_metrics)


def create_rtp_proxy(config: ExporterConfig, logger: logging.Logger) -> Optional[RtpengineMetricsProxy]:
    """rtpengine metrics proxy, or None when no rtp metrics path is configured."""
    if not config.web.rtp_metrics_path:
        return None
    logger.info(
        f"Enabling rtp metrics at {config.web.rtp_metrics_path} from {config.web.rtpengine_metrics_url}"
    )
    return RtpengineMetricsProxy(config.web.rtpengine_metrics_url, config.kamailio.timeout_seconds, logger)


def _http_response(start_response, status: str, headers: List[Tuple[str, str]], body: bytes):
    start_response(status, headers)
    return [body]


def create_app(
    registry: MetricsRegistry,
    metrics_path: str = "/metrics",
    rtp_metrics_path: Optional[str] = None,
    rtp_proxy: Optional[RtpengineMetricsProxy] = None
):
    """
    WSGI app serving metrics, a landing page on ``/`` and 404 elsewhere.

    When both ``rtp_metrics_path`` and ``rtp_proxy`` are given, that path
    serves rtpengine's own metrics page.
    """
    metrics_app = make_wsgi_app(registry)
    landing_page = LANDING_PAGE.format(version=VERSION, metrics_path=metrics_path).encode("utf-8")

    def app(environ, start_response):
        path = environ.get("PATH_INFO", "/")

        if path == metrics_path:
            return metrics_app(environ, start_response)

        if rtp_proxy is not None and path == rtp_metrics_path:
            proxied = rtp_proxy.fetch()
            return _http_response(
                start_response,
                proxied.status,
                [("Content-Type", "text/plain; charset=utf-8")],
                proxied.body,
            )

        if path == "/":
            return _http_response(
                start_response,
                "200 OK",
                [("Content-Type", "text/html; charset=utf-8")],
                landing_page,
            )

        return _http_response(
            start_response,
            "404 Not Found",
            [("Content-Type", "text/plain; charset=utf-8")],
            b"not found\n",
        )

    return app


class ThreadingWSGIServer(ThreadingMixIn, WSGIServer):
    """WSGI server handling each request in its own thread."""

    daemon_threads = True


class _LoggingRequestHandler(WSGIRequestHandler):
    logger = logging.getLogger("kamailio_exporter.http")

    def log_message(self, format, *args):
        self.logger.debug(f"{self.address_string()} {format % args}")


def create_server(app, address: str, port: int) -> WSGIServer:
    """Bind a threaded WSGI server for ``app``."""
    return make_server(address, port, app, server_class=ThreadingWSGIServer, handler_class=_LoggingRequestHandler)
