"""Dispatcher (load balancer) destinations collector."""

from ..parsers.dispatcher import parse_dispatcher_targets
from ..services.session import Session
from ..utils.metrics import MetricDescriptor, MetricSink
from .base import BaseCollector

TARGET_LABELS = ("set_id", "destination", "set_name")


def _target_metric(name: str, help: str) -> MetricDescriptor:
    return MetricDescriptor.build("dispatcher_list", name, help, TARGET_LABELS)


TARGET = _target_metric("target", "Target status.")
LATENCY_AVG = _target_metric("target_latency_avg", "Target Latency Average.")
LATENCY_STD = _target_metric("target_latency_std", "Target Latency standard deviation.")
LATENCY_EST = _target_metric("target_latency_est", "Target Latency estimation.")
LATENCY_MAX = _target_metric("target_latency_max", "Target Latency maximum.")
LATENCY_TIMEOUT = _target_metric("target_latency_timeout", "Target Latency timeouts.")
WEIGHT = _target_metric("target_weight", "Target Weight.")
RWEIGHT = _target_metric("target_rweight", "Target rweight.")
PRIORITY = _target_metric("target_priority", "Target Priority.")


class DispatcherListCollector(BaseCollector):
    """Status, latency and weights of every dispatcher destination."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        """
        Parse ``dispatcher.list`` and emit one series per destination.

        Raises:
            StructureError: If the reply does not have the dispatcher shape
        """
        records = await self.fetch(session, "dispatcher.list")
        targets = parse_dispatcher_targets(records)
        dispatcher_map = self.config.dispatcher_map

        for target in targets:
            labels = (str(target.set_id), target.uri, dispatcher_map.get(target.set_id, ""))
            sink.gauge(TARGET, target.status, *labels)
            sink.gauge(LATENCY_AVG, target.latency_avg, *labels)
            sink.gauge(LATENCY_STD, target.latency_std, *labels)
            sink.gauge(LATENCY_EST, target.latency_est, *labels)
            sink.gauge(LATENCY_MAX, target.latency_max, *labels)
            sink.gauge(LATENCY_TIMEOUT, target.latency_timeout, *labels)
            sink.gauge(PRIORITY, target.priority, *labels)
            sink.gauge(WEIGHT, target.weight, *labels)
            sink.gauge(RWEIGHT, target.rweight, *labels)

        self.logger.debug(f"Parsed {len(targets)} dispatcher targets")
