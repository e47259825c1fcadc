"""Tests for the collector registry."""

import pytest

from kamailio_exporter.collectors.base import BaseCollector
from kamailio_exporter.collectors.registry import CollectorDescriptor, CollectorRegistry, default_registry

ALL_COLLECTORS = [
    "stats.fetch",
    "pkg.stats",
    "dispatcher.list",
    "tls.info",
    "core.tcp_info",
    "rtpengine.show",
    "tm.stats",
    "sl.stats",
    "htable.listTables",
    "htable.stats",
    "core.psa",
    "core.runinfo",
    "dlg.profile_get_size",
    "dlg.stats_active",
]


class DummyCollector(BaseCollector):
    async def update(self, session, sink):
        pass


def small_registry():
    return CollectorRegistry([
        CollectorDescriptor("one", True, DummyCollector),
        CollectorDescriptor("two", False, DummyCollector),
    ])


def test_default_registry_holds_every_collector():
    registry = default_registry()
    assert registry.names == ALL_COLLECTORS
    assert registry.enabled_names() == ALL_COLLECTORS


def test_overrides_take_precedence_over_defaults():
    registry = small_registry()

    assert registry.enabled_names() == ["one"]
    assert registry.enabled_names({"one": False, "two": True}) == ["two"]


def test_unknown_override_is_rejected():
    with pytest.raises(ValueError, match="unknown collector"):
        small_registry().enabled_names({"does.not_exist": True})


def test_duplicate_registration_is_rejected():
    registry = small_registry()
    with pytest.raises(ValueError):
        registry.register(CollectorDescriptor("one", True, DummyCollector))


def test_build_once_then_frozen(kamailio_config, logger):
    registry = small_registry()

    collectors = registry.build(kamailio_config, logger, {"two": True})

    assert list(collectors) == ["one", "two"]
    assert collectors["two"].name == "two"
    assert collectors["one"].config is kamailio_config
    assert registry.built
    assert registry.collectors == collectors

    with pytest.raises(RuntimeError):
        registry.build(kamailio_config, logger)
    with pytest.raises(RuntimeError):
        registry.register(CollectorDescriptor("three", True, DummyCollector))


def test_collectors_before_build():
    with pytest.raises(RuntimeError):
        small_registry().collectors


def test_default_registry_builds_all(kamailio_config, logger):
    collectors = default_registry().build(kamailio_config, logger, {"rtpengine.show": False})

    assert "rtpengine.show" not in collectors
    assert len(collectors) == len(ALL_COLLECTORS) - 1
    assert all(isinstance(c, BaseCollector) for c in collectors.values())
