"""RTPEngine relay status collector."""

from ..services.session import Session
from ..utils.errors import NoDataError
from ..utils.metrics import MetricDescriptor, MetricSink
from ..utils.records import int_value, str_value, struct_fields
from .base import BaseCollector

RTPENGINE_ENABLED = MetricDescriptor.build(
    "", "rtpengine_enabled", "rtpengine connection status", ("url", "set", "index", "weight")
)


def _int_label(fields, key: str) -> str:
    """Integer field rendered as a label value, empty when absent."""
    return str(int_value(fields[key])) if key in fields else ""


class RtpengineCollector(BaseCollector):
    """
    Expose whether each configured rtpengine instance is enabled.

    Kamailio reports a ``disabled`` flag; the gauge is its inverse.
    """

    async def update(self, session: Session, sink: MetricSink) -> None:
        """
        Query ``rtpengine.show all``.

        Raises:
            NoDataError: If every record is empty (rtpengine module unused)
        """
        records = await self.fetch(session, "rtpengine.show", "all")

        seen = 0
        for record in records:
            fields = struct_fields(record)
            if not fields:
                self.logger.debug("rtpengine.show all returned an empty record, rtpengine is probably disabled")
                continue
            seen += 1

            url = str_value(fields.get("url"))
            if not url:
                self.logger.error("No valid url found for rtpengine, skipping rtpengine_enabled")
                continue

            enabled = 0 if int_value(fields.get("disabled")) == 1 else 1
            sink.gauge(
                RTPENGINE_ENABLED,
                enabled,
                url,
                _int_label(fields, "set"),
                _int_label(fields, "index"),
                _int_label(fields, "weight"),
            )

        if not seen:
            raise NoDataError("rtpengine.show all: no rtpengine instances")
