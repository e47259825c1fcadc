"""Metric data structures shared by collectors and the exposition layer."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Sequence, Tuple

from .status import ScrapeStatus

# Exporter namespace.
NAMESPACE = "kamailio"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty name parts with underscores."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


class ValueKind(Enum):
    """How a sample should be typed when exposed."""

    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricDescriptor:
    """Name, help text and label names of one metric."""

    name: str
    help: str
    label_names: Tuple[str, ...] = ()

    @classmethod
    def build(cls, subsystem: str, name: str, help: str, label_names: Sequence[str] = ()) -> "MetricDescriptor":
        return cls(build_fq_name(NAMESPACE, subsystem, name), help, tuple(label_names))


@dataclass(frozen=True)
class MetricPoint:
    """A single sample produced by a collector."""

    descriptor: MetricDescriptor
    kind: ValueKind
    value: float
    label_values: Tuple[str, ...] = ()

    def __post_init__(self):
        """Reject label values that do not line up with the descriptor."""
        if len(self.label_values) != len(self.descriptor.label_names):
            raise ValueError(
                f"{self.descriptor.name}: expected {len(self.descriptor.label_names)} "
                f"label values, got {len(self.label_values)}"
            )


class MetricSink:
    """Buffer that a collector writes its points into during one update."""

    def __init__(self):
        self._points: List[MetricPoint] = []

    def gauge(self, descriptor: MetricDescriptor, value: float, *label_values: str) -> None:
        self.add(MetricPoint(descriptor, ValueKind.GAUGE, float(value), tuple(label_values)))

    def counter(self, descriptor: MetricDescriptor, value: float, *label_values: str) -> None:
        self.add(MetricPoint(descriptor, ValueKind.COUNTER, float(value), tuple(label_values)))

    def add(self, point: MetricPoint) -> None:
        self._points.append(point)

    @property
    def points(self) -> List[MetricPoint]:
        return list(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def __iter__(self) -> Iterator[MetricPoint]:
        return iter(self._points)


SCRAPE_DURATION = MetricDescriptor.build(
    "scrape", "collector_duration_seconds",
    "kamailio_exporter: Duration of a collector scrape.", ("collector",),
)
SCRAPE_SUCCESS = MetricDescriptor.build(
    "scrape", "collector_success",
    "kamailio_exporter: Whether a collector succeeded.", ("collector",),
)


@dataclass
class ScrapeOutcome:
    """Timing and result of one collector within a poll cycle."""

    collector_name: str
    duration_seconds: float
    status: ScrapeStatus
    error: str = ""

    def meta_points(self) -> List[MetricPoint]:
        """Duration and success meta-metrics for this collector."""
        labels = (self.collector_name,)
        return [
            MetricPoint(SCRAPE_DURATION, ValueKind.GAUGE, self.duration_seconds, labels),
            MetricPoint(SCRAPE_SUCCESS, ValueKind.GAUGE, self.status.to_gauge(), labels),
        ]


@dataclass
class ScrapeResult:
    """Everything one poll cycle produced."""

    points: List[MetricPoint] = field(default_factory=list)
    outcomes: List[ScrapeOutcome] = field(default_factory=list)

    def all_points(self) -> List[MetricPoint]:
        """Domain points followed by the meta-metrics of every collector."""
        result = list(self.points)
        for outcome in self.outcomes:
            result.extend(outcome.meta_points())
        return result
