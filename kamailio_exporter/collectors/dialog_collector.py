"""Dialog module collectors."""

from ..services.session import Session
from ..utils.errors import NoDataError
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, struct_items
from .base import BaseCollector

PROFILE_SIZE = MetricDescriptor.build(
    "dlg_profile_get_size", "dialog", "Current number of dialogs belonging to a profile.", ("profile",)
)

ACTIVE_GAUGES = {
    "starting": MetricDescriptor.build("dlg_stats_active", "starting", "Dialog starting."),
    "connecting": MetricDescriptor.build("dlg_stats_active", "connecting", "Dialog connecting."),
    "answering": MetricDescriptor.build("dlg_stats_active", "answering", "Dialog answering."),
    "ongoing": MetricDescriptor.build("dlg_stats_active", "ongoing", "Dialog ongoing."),
    "all": MetricDescriptor.build("dlg_stats_active", "all", "Dialog all."),
}


class DlgProfileGetSizeCollector(BaseCollector):
    """Dialog count of each configured dialog profile."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        """
        Query ``dlg.profile_get_size`` once per profile.

        Raises:
            NoDataError: If no dialog profiles are configured
        """
        profiles = self.config.dialog_profiles
        if not profiles:
            raise NoDataError("no dialog profiles configured")

        for profile in profiles:
            records = await self.fetch(session, "dlg.profile_get_size", profile)
            sink.gauge(PROFILE_SIZE, int_value(records[0]), profile)


class DlgStatsActiveCollector(BaseCollector):
    """Active dialogs by state."""

    async def update(self, session: Session, sink: MetricSink) -> None:
        records = await self.fetch(session, "dlg.stats_active")

        for record in records:
            for item in struct_items(record):
                descriptor = ACTIVE_GAUGES.get(item.key)
                if descriptor is not None:
                    sink.gauge(descriptor, int_value(item.value))
