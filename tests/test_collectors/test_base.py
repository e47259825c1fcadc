"""Tests for BaseCollector class."""

import pytest

from kamailio_exporter.collectors.base import BaseCollector
from kamailio_exporter.utils.errors import FaultError, NoDataError, TypeMismatchError
from kamailio_exporter.utils.status import ScrapeStatus

from conftest import FakeSession, int_, str_, struct


class MockCollector(BaseCollector):
    """Mock collector for testing BaseCollector functionality."""

    async def update(self, session, sink):
        """Mock update method."""
        pass


class TestBaseCollector:
    """Test suite for BaseCollector."""

    def test_logger_is_child_of_parent(self, kamailio_config, logger):
        collector = MockCollector(kamailio_config, logger)

        assert collector.logger.name == "test.MockCollector"
        assert collector.config is kamailio_config

    @pytest.mark.asyncio
    async def test_fetch_returns_records(self, kamailio_config, logger):
        session = FakeSession({"core.psa": [int_(1), int_(2)]})

        records = await MockCollector(kamailio_config, logger).fetch(session, "core.psa")

        assert [r.as_int() for r in records] == [1, 2]
        assert session.requests == [("core.psa",)]

    @pytest.mark.asyncio
    async def test_fetch_propagates_errors(self, kamailio_config, logger):
        collector = MockCollector(kamailio_config, logger)

        with pytest.raises(FaultError):
            await collector.fetch(FakeSession({"tls.info": FaultError(500, "not found")}), "tls.info")
        with pytest.raises(NoDataError):
            await collector.fetch(FakeSession(), "tls.info")

    @pytest.mark.asyncio
    async def test_fetch_struct(self, kamailio_config, logger):
        collector = MockCollector(kamailio_config, logger)
        session = FakeSession({
            "core.runinfo": [struct(("uptime_secs", int_(5)))],
            "core.tcp_info": [str_("disabled")],
        })

        record = await collector.fetch_struct(session, "core.runinfo")

        assert record.get("uptime_secs").as_int() == 5
        with pytest.raises(TypeMismatchError):
            await collector.fetch_struct(session, "core.tcp_info")


def test_status_to_gauge():
    """Only a successful collector reports 1."""
    assert ScrapeStatus.SUCCESS.to_gauge() == 1.0
    assert ScrapeStatus.NO_DATA.to_gauge() == 0.0
    assert ScrapeStatus.ERROR.to_gauge() == 0.0
