"""Core process and runtime collectors (``core.psa`` and ``core.runinfo``)."""

from ..services.session import Session
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, str_value, struct_fields
from .base import BaseCollector

PROCESS_STATUS = MetricDescriptor.build(
    "", "core_process_status", "Status of each process running in Kamailio",
    ("index", "pid", "rank", "description"),
)
UPTIME = MetricDescriptor.build("", "core_uptime", "Uptime in seconds", ("version", "compiled", "compiler"))


class CorePsaCollector(BaseCollector):
    """One status gauge per Kamailio process."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "core.psa")

        for record in records:
            fields = struct_fields(record)
            sink.gauge(
                PROCESS_STATUS,
                int_value(fields.get("status")),
                str(int_value(fields.get("index"))),
                str(int_value(fields.get("pid"))),
                str(int_value(fields.get("rank"))),
                str_value(fields.get("description")),
            )


class CoreRuninfoCollector(BaseCollector):
    """Uptime, labelled with the version and build information."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        record = await self.fetch_struct(session, "core.runinfo")
        fields = struct_fields(record)
        sink.gauge(
            UPTIME,
            int_value(fields.get("uptime_secs")),
            str_value(fields.get("version")),
            str_value(fields.get("compiled")),
            str_value(fields.get("compiler")),
        )
