"""Hash table collectors (``htable.listTables`` and ``htable.stats``)."""

from ..services.session import Session
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, str_value, struct_fields
from .base import BaseCollector

AUTO_EXPIRE = MetricDescriptor.build(
    "htable", "auto_expire_seconds",
    "Time in seconds to delete an item from a hash table if no update was done to it", ("name",),
)
UPDATE_EXPIRE = MetricDescriptor.build("htable", "update_expire_status", "Update Expire status", ("name",))
DMQ_REPLICATE = MetricDescriptor.build("htable", "dmq_replicate_status", "DMQ Replicate status", ("name",))
DB_MODE = MetricDescriptor.build("htable", "db_mode_status", "Htable write back to db table", ("name", "dbtable"))

SLOTS = MetricDescriptor.build("htable", "slots_total", "Number of slots in the htable", ("name",))
ITEMS = MetricDescriptor.build("htable", "items_total", "Total number of items stored in the htable", ("name",))
ITEMS_MIN = MetricDescriptor.build("htable", "items_per_slots_min", "Min number of items per slot in the htable", ("name",))
ITEMS_MAX = MetricDescriptor.build("htable", "items_per_slots_max", "Max number of items per slot in the htable", ("name",))


class HtableListTablesCollector(BaseCollector):
    """Configuration flags of every hash table."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "htable.listTables")

        for record in records:
            fields = struct_fields(record)
            name = str_value(fields.get("name"))
            sink.gauge(AUTO_EXPIRE, int_value(fields.get("expire")), name)
            sink.gauge(DB_MODE, int_value(fields.get("dbmode")), name, str_value(fields.get("dbtable")))
            sink.gauge(DMQ_REPLICATE, int_value(fields.get("dmqreplicate")), name)
            sink.gauge(UPDATE_EXPIRE, int_value(fields.get("updateexpire")), name)


class HtableStatsCollector(BaseCollector):
    """Slot and item counts of every hash table."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "htable.stats")

        for record in records:
            fields = struct_fields(record)
            name = str_value(fields.get("name"))
            sink.gauge(SLOTS, int_value(fields.get("slots")), name)
            sink.gauge(ITEMS, int_value(fields.get("all")), name)
            sink.gauge(ITEMS_MIN, int_value(fields.get("min")), name)
            sink.gauge(ITEMS_MAX, int_value(fields.get("max")), name)
