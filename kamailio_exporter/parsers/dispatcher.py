"""Parser for the nested ``dispatcher.list`` reply.

Shape::

    RECORDS
      SET
        ID        int
        TARGETS
          DEST
            URI       str
            FLAGS     str
            PRIORITY  int
            ATTRS     {BODY str, WEIGHT int, RWEIGHT int, SOCKET str}
            LATENCY   {AVG, STD, EST, MAX, TIMEOUT: double}

Unknown keys are ignored at every level. A known structural key holding the
wrong kind of record fails the whole parse; leaf values inside ATTRS and
LATENCY fall back to zero instead.
"""

from dataclasses import dataclass
from typing import List, Sequence

from ..utils.errors import StructureError, TypeMismatchError
from ..utils.records import Record, StructItem, float_value, int_value, str_value

ACTIVE_PROBING_FLAGS = "AP"


@dataclass
class DispatcherTarget:
    """One destination of a dispatcher set."""

    set_id: int
    uri: str = ""
    flags: str = ""
    priority: int = 0
    body: str = ""
    weight: int = 0
    rweight: int = 0
    socket: str = ""
    latency_avg: float = 0.0
    latency_std: float = 0.0
    latency_est: float = 0.0
    latency_max: float = 0.0
    latency_timeout: float = 0.0

    @property
    def status(self) -> int:
        """1 if the destination is active and probing, else 0."""
        return 1 if self.flags == ACTIVE_PROBING_FLAGS else 0


def _items(item: StructItem) -> List[StructItem]:
    try:
        return item.value.as_struct_items()
    except TypeMismatchError as e:
        raise StructureError(f"dispatcher.list: {item.key} must be a struct: {e}") from e


def _int(item: StructItem) -> int:
    try:
        return item.value.as_int()
    except TypeMismatchError as e:
        raise StructureError(f"dispatcher.list: {item.key} must be an int: {e}") from e


def _str(item: StructItem) -> str:
    try:
        return item.value.as_str()
    except TypeMismatchError as e:
        raise StructureError(f"dispatcher.list: {item.key} must be a string: {e}") from e


def parse_dispatcher_targets(records: Sequence[Record]) -> List[DispatcherTarget]:
    """
    Flatten a ``dispatcher.list`` reply into its destinations.

    Args:
        records: Top-level reply records; non-struct records are ignored

    Returns:
        List[DispatcherTarget]: Every destination of every set, in reply order

    Raises:
        StructureError: If a set has no ID or a structural key has the wrong type
    """
    targets = []
    for record in records:
        try:
            items = record.as_struct_items()
        except TypeMismatchError:
            continue
        for item in items:
            if item.key == "RECORDS":
                targets.extend(_parse_sets(_items(item)))
    return targets


def _parse_sets(items: List[StructItem]) -> List[DispatcherTarget]:
    targets = []
    for item in items:
        if item.key == "SET":
            targets.extend(_parse_set(_items(item)))
    return targets


def _parse_set(items: List[StructItem]) -> List[DispatcherTarget]:
    set_id = None
    destinations: List[StructItem] = []
    for item in items:
        if item.key == "ID":
            set_id = _int(item)
        elif item.key == "TARGETS":
            destinations = _items(item)

    if set_id is None:
        raise StructureError("dispatcher.list: missing set ID")

    return [
        _parse_destination(set_id, _items(item))
        for item in destinations
        if item.key == "DEST"
    ]


def _parse_destination(set_id: int, props: List[StructItem]) -> DispatcherTarget:
    target = DispatcherTarget(set_id=set_id)
    for prop in props:
        if prop.key == "URI":
            target.uri = _str(prop)
        elif prop.key == "FLAGS":
            target.flags = _str(prop)
        elif prop.key == "PRIORITY":
            target.priority = _int(prop)
        elif prop.key == "ATTRS":
            _parse_attributes(target, _items(prop))
        elif prop.key == "LATENCY":
            _parse_latency(target, _items(prop))
    return target


def _parse_attributes(target: DispatcherTarget, attrs: List[StructItem]) -> None:
    for attr in attrs:
        if attr.key == "BODY":
            target.body = str_value(attr.value)
        elif attr.key == "WEIGHT":
            target.weight = int_value(attr.value)
        elif attr.key == "RWEIGHT":
            target.rweight = int_value(attr.value)
        elif attr.key == "SOCKET":
            target.socket = str_value(attr.value)


def _parse_latency(target: DispatcherTarget, latency: List[StructItem]) -> None:
    for attr in latency:
        if attr.key == "AVG":
            target.latency_avg = float_value(attr.value)
        elif attr.key == "STD":
            target.latency_std = float_value(attr.value)
        elif attr.key == "EST":
            target.latency_est = float_value(attr.value)
        elif attr.key == "MAX":
            target.latency_max = float_value(attr.value)
        elif attr.key == "TIMEOUT":
            target.latency_timeout = float_value(attr.value)
