"""Poll cycle orchestration: one session, every collector, per-collector outcome."""

import logging
import time
from typing import Callable, Dict

from .collectors.base import BaseCollector
from .services.session import open_session
from .utils.errors import NoDataError
from .utils.metrics import MetricSink, ScrapeOutcome, ScrapeResult
from .utils.status import ScrapeStatus


class Scraper:
    """
    Run the instantiated collectors against one Kamailio connection.

    Collectors run one after another on the same session and must not depend
    on each other's order. A failing collector is logged and reported through
    its success meta-metric; the others still run. Only a failure to connect
    aborts the cycle.
    """

    def __init__(
        self,
        collectors: Dict[str, BaseCollector],
        uri: str,
        timeout: float,
        logger: logging.Logger,
        session_factory: Callable = open_session
    ):
        """
        Initialize scraper.

        Args:
            collectors: Collector name -> instance, read-only after startup
            uri: Kamailio BINRPC endpoint
            timeout: Deadline in seconds for the whole cycle
            logger: Logger instance
            session_factory: Async context manager factory ``(uri, timeout)``
        """
        self.collectors = dict(collectors)
        self.uri = uri
        self.timeout = timeout
        self.logger = logger
        self.session_factory = session_factory

    async def scrape(self) -> ScrapeResult:
        """
        Execute one poll cycle.

        Returns:
            ScrapeResult: Points of every successful collector plus one outcome
            per collector

        Raises:
            ConnectError: If Kamailio cannot be reached; no collector runs
        """
        result = ScrapeResult()
        async with self.session_factory(self.uri, self.timeout) as session:
            for name, collector in self.collectors.items():
                sink = MetricSink()
                outcome = await self._execute(name, collector, session, sink)
                if outcome.status != ScrapeStatus.ERROR:
                    result.points.extend(sink.points)
                result.outcomes.append(outcome)
        return result

    async def _execute(self, name: str, collector: BaseCollector, session, sink: MetricSink) -> ScrapeOutcome:
        begin = time.perf_counter()
        try:
            await collector.update(session, sink)
        except NoDataError as e:
            duration = time.perf_counter() - begin
            self.logger.debug(
                f"Collector '{name}' returned no data: {e}",
                extra={"collector": name, "duration_seconds": duration}
            )
            return ScrapeOutcome(name, duration, ScrapeStatus.NO_DATA, str(e))
        except Exception as e:
            duration = time.perf_counter() - begin
            self.logger.error(
                f"Collector '{name}' failed: {e}",
                extra={"collector": name, "duration_seconds": duration}
            )
            return ScrapeOutcome(name, duration, ScrapeStatus.ERROR, str(e))

        duration = time.perf_counter() - begin
        self.logger.debug(
            f"Collector '{name}' succeeded",
            extra={"collector": name, "duration_seconds": duration}
        )
        return ScrapeOutcome(name, duration, ScrapeStatus.SUCCESS)
