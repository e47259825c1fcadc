"""Tests for the poll cycle orchestrator."""

from contextlib import asynccontextmanager

import pytest

from kamailio_exporter.collectors.base import BaseCollector
from kamailio_exporter.orchestrator import Scraper
from kamailio_exporter.utils.errors import ConnectError, NoDataError, ProtocolError
from kamailio_exporter.utils.metrics import MetricDescriptor
from kamailio_exporter.utils.status import ScrapeStatus

from conftest import FakeSession, session_factory

UP = MetricDescriptor.build("test", "up", "Test gauge")


class GaugeCollector(BaseCollector):
    """Emits one gauge, then optionally fails."""

    def __init__(self, value, error=None):
        self.value = value
        self.error = error
        self.sessions = []

    async def update(self, session, sink):
        self.sessions.append(session)
        sink.gauge(UP, self.value)
        if self.error is not None:
            raise self.error


def meta(result, metric):
    return {
        p.label_values[0]: p.value
        for p in result.all_points()
        if p.descriptor.name == f"kamailio_scrape_collector_{metric}"
    }


@pytest.mark.asyncio
async def test_failing_collector_does_not_stop_others(logger):
    collectors = {
        "first": GaugeCollector(1),
        "second": GaugeCollector(2, ProtocolError("bad packet")),
        "third": GaugeCollector(3),
    }
    session = FakeSession()
    factory = session_factory(session)
    scraper = Scraper(collectors, "tcp://127.0.0.1:2049", 2.0, logger, session_factory=factory)

    result = await scraper.scrape()

    assert [p.value for p in result.points] == [1.0, 3.0]
    assert meta(result, "success") == {"first": 1.0, "second": 0.0, "third": 1.0}
    assert set(meta(result, "duration_seconds")) == {"first", "second", "third"}
    assert all(v >= 0 for v in meta(result, "duration_seconds").values())
    assert [o.status for o in result.outcomes] == [ScrapeStatus.SUCCESS, ScrapeStatus.ERROR, ScrapeStatus.SUCCESS]
    assert result.outcomes[1].error == "bad packet"
    assert factory.opened == [("tcp://127.0.0.1:2049", 2.0)]
    assert all(c.sessions == [session] for c in collectors.values())


@pytest.mark.asyncio
async def test_no_data_keeps_points_and_reports_failure(logger):
    collectors = {"empty": GaugeCollector(5, NoDataError("empty reply"))}
    scraper = Scraper(collectors, "tcp://127.0.0.1:2049", 2.0, logger, session_factory=session_factory(FakeSession()))

    result = await scraper.scrape()

    assert result.outcomes[0].status == ScrapeStatus.NO_DATA
    assert [p.value for p in result.points] == [5.0]
    assert meta(result, "success") == {"empty": 0.0}


@pytest.mark.asyncio
async def test_connect_error_aborts_cycle(logger):
    collector = GaugeCollector(1)

    @asynccontextmanager
    async def unreachable(uri, timeout):
        raise ConnectError("connection refused")
        yield

    scraper = Scraper({"first": collector}, "tcp://127.0.0.1:1", 1.0, logger, session_factory=unreachable)

    with pytest.raises(ConnectError):
        await scraper.scrape()
    assert collector.sessions == []


@pytest.mark.asyncio
async def test_no_collectors(logger):
    scraper = Scraper({}, "tcp://127.0.0.1:2049", 1.0, logger, session_factory=session_factory(FakeSession()))

    result = await scraper.scrape()

    assert result.points == []
    assert result.outcomes == []
