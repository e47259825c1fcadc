"""Private (per-process) memory collector."""

from ..services.session import Session
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, struct_fields
from .base import BaseCollector

PKGMEM_USED = MetricDescriptor.build("", "pkgmem_used", "Private memory used", ("entry",))
PKGMEM_FREE = MetricDescriptor.build("", "pkgmem_free", "Private memory free", ("entry",))
PKGMEM_REAL = MetricDescriptor.build("", "pkgmem_real", "Private memory real used", ("entry",))
PKGMEM_SIZE = MetricDescriptor.build("", "pkgmem_size", "Private memory total size", ("entry",))
PKGMEM_FRAGS = MetricDescriptor.build("", "pkgmem_frags", "Private memory total frags", ("entry",))


class PkgStatsCollector(BaseCollector):
    """One set of gauges per Kamailio process (``pkg.stats``)."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "pkg.stats")

        for record in records:
            fields = struct_fields(record)
            entry = str(int_value(fields.get("entry")))
            sink.gauge(PKGMEM_USED, int_value(fields.get("used")), entry)
            sink.gauge(PKGMEM_FREE, int_value(fields.get("free")), entry)
            sink.gauge(PKGMEM_REAL, int_value(fields.get("real_used")), entry)
            sink.gauge(PKGMEM_SIZE, int_value(fields.get("total_size")), entry)
            sink.gauge(PKGMEM_FRAGS, int_value(fields.get("total_frags")), entry)
