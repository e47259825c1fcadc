"""TCP and TLS connection collectors (``core.tcp_info`` and ``tls.info``)."""

from ..services.session import Session
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, struct_fields, struct_items
from .base import BaseCollector

TCP_READERS = MetricDescriptor.build("", "tcp_readers", "TCP readers")
TCP_MAX_CONNECTIONS = MetricDescriptor.build("", "tcp_max_connections", "TCP connection limit")
TLS_MAX_CONNECTIONS = MetricDescriptor.build("", "tls_max_connections", "TLS connection limit")
TLS_CONNECTIONS = MetricDescriptor.build("", "tls_connections", "Opened TLS connections")

TLS_OPENED = MetricDescriptor.build("tls", "opened_connections", "TLS Opened Connections")
TLS_MAX = MetricDescriptor.build("tls", "max_connections", "TLS connection limit")
TLS_CLEAR_TEXT_QUEUED = MetricDescriptor.build(
    "tls", "clear_text_write_queued_bytes", "TLS clear text bytes queued for writing"
)


class CoreTcpInfoCollector(BaseCollector):
    """Gauges from ``core.tcp_info``; only keys present in the reply are exposed."""

    GAUGES = {
        "readers": TCP_READERS,
        "max_connections": TCP_MAX_CONNECTIONS,
        "max_tls_connections": TLS_MAX_CONNECTIONS,
        "opened_tls_connections": TLS_CONNECTIONS,
    }

    async def update(self, session: Session, sink: MetricSink) -> None:
        record = await self.fetch_struct(session, "core.tcp_info")
        for item in struct_items(record):
            descriptor = self.GAUGES.get(item.key)
            if descriptor is not None:
                sink.gauge(descriptor, int_value(item.value))


class TlsInfoCollector(BaseCollector):
    """Gauges from ``tls.info``, one set per reply record."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "tls.info")
        for record in records:
            fields = struct_fields(record)
            sink.gauge(TLS_OPENED, int_value(fields.get("opened_connections")))
            sink.gauge(TLS_MAX, int_value(fields.get("max_connections")))
            sink.gauge(TLS_CLEAR_TEXT_QUEUED, int_value(fields.get("clear_text_write_queued_bytes")))
