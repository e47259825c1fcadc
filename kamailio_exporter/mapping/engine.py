"""Conversion of the flat ``stats.fetch`` table into metric points.

Two paths feed the sink:

* static: a fixed list of StatMapping entries, one point per entry whose key
  is present and parseable;
* scripted: keys under the ``script.`` namespace are user defined in the
  Kamailio routing script. Their metric name and kind are derived from the
  key itself, and a new descriptor is built for each key on every call.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence

from ..utils.errors import ValueParseError
from ..utils.metrics import NAMESPACE, MetricDescriptor, MetricPoint, MetricSink, ValueKind, build_fq_name
from ..utils.records import Record, RecordType

SCRIPT_PREFIX = "script."
COUNTER_SUFFIXES = ("_total", "_seconds", "_bytes")

StatTable = Dict[str, str]


@dataclass(frozen=True)
class StatMapping:
    """Maps one stat key to one point of a metric."""

    stat_key: str
    descriptor: MetricDescriptor
    label_value: Optional[str]
    kind: ValueKind

    @property
    def label_values(self) -> tuple:
        return () if self.label_value is None else (self.label_value,)


def build_stat_table(records: Sequence[Record]) -> StatTable:
    """
    Flatten a ``stats.fetch all`` reply into key -> raw value.

    Only the first record is used and it must be a struct. String values are
    kept as they are, numeric values are rendered as text, anything else is
    left out.

    Raises:
        TypeMismatchError: If the first record is not a struct
    """
    table: StatTable = {}
    if not records:
        return table
    for item in records[0].as_struct_items():
        if item.value.type == RecordType.STR:
            table[item.key] = item.value.value
        elif item.value.type in (RecordType.INT, RecordType.DOUBLE):
            table[item.key] = str(item.value.value)
    return table


def parse_stat_value(key: str, raw: str) -> float:
    """
    Parse a raw stat value.

    Raises:
        ValueParseError: If ``raw`` is not a number
    """
    try:
        return float(raw)
    except (TypeError, ValueError):
        raise ValueParseError(f"stat {key}: cannot parse {raw!r} as a number") from None


def convert_stat(table: StatTable, mapping: StatMapping, sink: MetricSink, logger: logging.Logger) -> bool:
    """
    Emit the point for one mapping entry.

    Returns:
        bool: True if a point was emitted. Absent keys and unparseable values
        emit nothing.
    """
    raw = table.get(mapping.stat_key)
    if raw is None:
        return False
    try:
        value = parse_stat_value(mapping.stat_key, raw)
    except ValueParseError as e:
        logger.debug(f"Skipping stat: {e}")
        return False
    sink.add(MetricPoint(mapping.descriptor, mapping.kind, value, mapping.label_values))
    return True


def apply_mappings(
    table: StatTable,
    mappings: Iterable[StatMapping],
    sink: MetricSink,
    logger: logging.Logger
) -> int:
    """Run every mapping entry against ``table``; returns the number of points emitted."""
    return sum(1 for mapping in mappings if convert_stat(table, mapping, sink, logger))


def scripted_kind(name: str) -> ValueKind:
    """Counter for names ending in _total, _seconds or _bytes, else gauge."""
    return ValueKind.COUNTER if name.endswith(COUNTER_SUFFIXES) else ValueKind.GAUGE


def scripted_mapping(key: str) -> Optional[StatMapping]:
    """Mapping entry for a ``script.`` key, or None for any other key."""
    if not key.startswith(SCRIPT_PREFIX):
        return None
    name = key[len(SCRIPT_PREFIX):].lower()
    descriptor = MetricDescriptor(build_fq_name(NAMESPACE, "", name), f"Scripted metric {name}")
    return StatMapping(key, descriptor, None, scripted_kind(name))


def scripted_mappings(table: StatTable) -> List[StatMapping]:
    """Mapping entries for every scripted key in ``table``."""
    return [m for m in (scripted_mapping(key) for key in table) if m is not None]
