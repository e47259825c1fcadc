"""Collector for the generic ``stats.fetch all`` statistics."""

from ..mapping.engine import apply_mappings, build_stat_table, scripted_mappings
from ..mapping.stat_table import STAT_MAPPINGS
from ..services.session import Session
from ..utils.metrics import MetricSink
from .base import BaseCollector


class StatsFetchCollector(BaseCollector):
    """
    Expose well-known core/module statistics and user defined ``script.`` stats.

    Stats of modules that are not loaded are simply missing from the reply
    and produce no sample.
    """

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "stats.fetch", "all")
        table = build_stat_table(records)

        static_count = apply_mappings(table, STAT_MAPPINGS, sink, self.logger)
        scripted_count = apply_mappings(table, scripted_mappings(table), sink, self.logger)

        self.logger.debug(
            f"Converted {len(table)} stats: {static_count} well-known, {scripted_count} scripted"
        )
