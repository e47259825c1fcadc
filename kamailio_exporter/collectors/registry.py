"""Registry of known collector kinds and their default enablement."""

import logging
import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Mapping, Optional

from .base import BaseCollector

CollectorFactory = Callable[[object, logging.Logger], BaseCollector]


@dataclass(frozen=True)
class CollectorDescriptor:
    """A collector kind that can be instantiated at startup."""

    name: str
    default_enabled: bool
    factory: CollectorFactory


class CollectorRegistry:
    """
    Known collector kinds, instantiated once.

    Descriptors are registered up front. ``build`` turns the enabled subset
    into collector instances exactly once; afterwards the registry is frozen
    and the instance table is only read.
    """

    def __init__(self, descriptors: Iterable[CollectorDescriptor] = ()):
        self._descriptors: Dict[str, CollectorDescriptor] = {}
        self._instances: Optional[Dict[str, BaseCollector]] = None
        self._lock = threading.Lock()
        for descriptor in descriptors:
            self.register(descriptor)

    def register(self, descriptor: CollectorDescriptor) -> None:
        """
        Add a collector kind.

        Raises:
            RuntimeError: If the registry has already been built
            ValueError: If the name is already registered
        """
        with self._lock:
            if self._instances is not None:
                raise RuntimeError("collector registry is frozen after build")
            if descriptor.name in self._descriptors:
                raise ValueError(f"collector already registered: {descriptor.name}")
            self._descriptors[descriptor.name] = descriptor

    @property
    def names(self) -> List[str]:
        return list(self._descriptors)

    @property
    def built(self) -> bool:
        return self._instances is not None

    def enabled_names(self, overrides: Optional[Mapping[str, bool]] = None) -> List[str]:
        """
        Names of the collectors that would be instantiated.

        Args:
            overrides: Collector name -> enabled, taking precedence over defaults

        Raises:
            ValueError: If an override names an unknown collector
        """
        overrides = dict(overrides or {})
        unknown = sorted(set(overrides) - set(self._descriptors))
        if unknown:
            raise ValueError(f"unknown collector(s): {', '.join(unknown)}")
        return [
            name for name, descriptor in self._descriptors.items()
            if overrides.get(name, descriptor.default_enabled)
        ]

    def build(
        self,
        config: object,
        logger: logging.Logger,
        overrides: Optional[Mapping[str, bool]] = None
    ) -> Dict[str, BaseCollector]:
        """
        Instantiate the enabled collectors.

        Args:
            config: Configuration handed to every factory
            logger: Parent logger for the collectors
            overrides: Collector name -> enabled

        Returns:
            Dict[str, BaseCollector]: Collector name -> instance

        Raises:
            RuntimeError: If called a second time
            ValueError: If an override names an unknown collector
        """
        with self._lock:
            if self._instances is not None:
                raise RuntimeError("collector registry has already been built")
            instances = {}
            for name in self.enabled_names(overrides):
                collector = self._descriptors[name].factory(config, logger)
                collector.name = name
                instances[name] = collector
            self._instances = instances
            logger.info(f"Enabled collectors: {', '.join(instances) or 'none'}")
            return dict(instances)

    @property
    def collectors(self) -> Dict[str, BaseCollector]:
        """
        The instantiated collectors.

        Raises:
            RuntimeError: If build has not run yet
        """
        if self._instances is None:
            raise RuntimeError("collector registry has not been built")
        return dict(self._instances)


def default_registry() -> CollectorRegistry:
    """A registry holding every collector shipped with the exporter."""
    from .core_collector import CorePsaCollector, CoreRuninfoCollector
    from .dialog_collector import DlgProfileGetSizeCollector, DlgStatsActiveCollector
    from .dispatcher_collector import DispatcherListCollector
    from .htable_collector import HtableListTablesCollector, HtableStatsCollector
    from .pkg_collector import PkgStatsCollector
    from .rtpengine_collector import RtpengineCollector
    from .stats_collector import StatsFetchCollector
    from .tcp_collector import CoreTcpInfoCollector, TlsInfoCollector
    from .transaction_collector import SlStatsCollector, TmStatsCollector

    return CollectorRegistry([
        CollectorDescriptor("stats.fetch", True, StatsFetchCollector),
        CollectorDescriptor("pkg.stats", True, PkgStatsCollector),
        CollectorDescriptor("dispatcher.list", True, DispatcherListCollector),
        CollectorDescriptor("tls.info", True, TlsInfoCollector),
        CollectorDescriptor("core.tcp_info", True, CoreTcpInfoCollector),
        CollectorDescriptor("rtpengine.show", True, RtpengineCollector),
        CollectorDescriptor("tm.stats", True, TmStatsCollector),
        CollectorDescriptor("sl.stats", True, SlStatsCollector),
        CollectorDescriptor("htable.listTables", True, HtableListTablesCollector),
        CollectorDescriptor("htable.stats", True, HtableStatsCollector),
        CollectorDescriptor("core.psa", True, CorePsaCollector),
        CollectorDescriptor("core.runinfo", True, CoreRuninfoCollector),
        CollectorDescriptor("dlg.profile_get_size", True, DlgProfileGetSizeCollector),
        CollectorDescriptor("dlg.stats_active", True, DlgStatsActiveCollector),
    ])
