"""Transaction (``tm.stats``) and stateless reply (``sl.stats``) collectors."""

import re

from ..services.session import Session
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, struct_items
from .base import BaseCollector

# Reply code keys, e.g. "200", "6xx" or "xxx"
CODE_PATTERN = re.compile(r"^[0-9x]{3}$")

TM_CODES = MetricDescriptor.build("tm_stats", "codes_total", "Per-code counters.", ("code",))
TM_COUNTERS = {
    "total": MetricDescriptor.build("tm_stats", "total", "Total transactions."),
    "total_local": MetricDescriptor.build("tm_stats", "local_total", "Total local transactions."),
    "rpl_received": MetricDescriptor.build("tm_stats", "rpl_received_total", "Number of reply received."),
    "rpl_generated": MetricDescriptor.build("tm_stats", "rpl_generated_total", "Number of reply generated."),
    "rpl_sent": MetricDescriptor.build("tm_stats", "rpl_sent_total", "Number of reply sent."),
    "created": MetricDescriptor.build("tm_stats", "created_total", "Created transactions."),
    "freed": MetricDescriptor.build("tm_stats", "freed_total", "Freed transactions."),
    "delayed_free": MetricDescriptor.build("tm_stats", "delayed_free_total", "Delayed free transactions."),
}
TM_GAUGES = {
    "current": MetricDescriptor.build("tm_stats", "current", "Current transactions."),
    "waiting": MetricDescriptor.build("tm_stats", "waiting", "Waiting transactions."),
}

SL_CODES = MetricDescriptor.build("sl_stats", "codes_total", "Per-code counters.", ("code",))


class TmStatsCollector(BaseCollector):
    """Per-code counters plus transaction counters and gauges."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "tm.stats")

        for record in records:
            for item in struct_items(record):
                value = int_value(item.value)
                if CODE_PATTERN.match(item.key):
                    sink.counter(TM_CODES, value, item.key)
                elif item.key in TM_COUNTERS:
                    sink.counter(TM_COUNTERS[item.key], value)
                elif item.key in TM_GAUGES:
                    sink.gauge(TM_GAUGES[item.key], value)


class SlStatsCollector(BaseCollector):
    """Per-code counters of stateless replies."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "sl.stats")

        for record in records:
            for item in struct_items(record):
                if CODE_PATTERN.match(item.key):
                    sink.counter(SL_CODES, int_value(item.value), item.key)
