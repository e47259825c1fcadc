"""Decoded BINRPC values.

A reply is a sequence of records. Each record is an integer, a string, a
double or a struct; a struct is an ordered list of key/value items whose
values are records again. Keys inside a struct are not guaranteed to be
unique, so lookups by key return the first match.
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional, Tuple, Union

from .errors import TypeMismatchError


class RecordType(IntEnum):
    """BINRPC record type codes (low nibble of the record header)."""

    INT = 0
    STR = 1
    DOUBLE = 2
    STRUCT = 3
    ARRAY = 4
    AVP = 5
    BYTES = 6


@dataclass(frozen=True)
class StructItem:
    """One key/value member of a struct record."""

    key: str
    value: "Record"


@dataclass(frozen=True)
class Record:
    """A single decoded value."""

    type: RecordType
    value: Union[int, str, float, Tuple[StructItem, ...]]

    @classmethod
    def from_int(cls, value: int) -> "Record":
        return cls(RecordType.INT, value)

    @classmethod
    def from_str(cls, value: str) -> "Record":
        return cls(RecordType.STR, value)

    @classmethod
    def from_float(cls, value: float) -> "Record":
        return cls(RecordType.DOUBLE, value)

    @classmethod
    def from_items(cls, items) -> "Record":
        """Build a struct from StructItems or (key, Record) pairs."""
        return cls(
            RecordType.STRUCT,
            tuple(item if isinstance(item, StructItem) else StructItem(*item) for item in items),
        )

    def _expect(self, expected: RecordType) -> None:
        if self.type != expected:
            raise TypeMismatchError(expected.name.lower(), self.type.name.lower())

    def as_int(self) -> int:
        self._expect(RecordType.INT)
        return self.value

    def as_str(self) -> str:
        self._expect(RecordType.STR)
        return self.value

    def as_float(self) -> float:
        self._expect(RecordType.DOUBLE)
        return self.value

    def as_struct_items(self) -> List[StructItem]:
        self._expect(RecordType.STRUCT)
        return list(self.value)

    def get(self, key: str) -> Optional["Record"]:
        """
        Look up a struct member by key.

        Args:
            key: Member name

        Returns:
            The value of the first member named ``key``, or None

        Raises:
            TypeMismatchError: If this record is not a struct
        """
        for item in self.as_struct_items():
            if item.key == key:
                return item.value
        return None


# Tolerant accessors: a missing or mistyped field degrades to a default.

def int_value(record: Optional[Record], default: int = 0) -> int:
    if record is None:
        return default
    try:
        return record.as_int()
    except TypeMismatchError:
        return default


def str_value(record: Optional[Record], default: str = "") -> str:
    if record is None:
        return default
    try:
        return record.as_str()
    except TypeMismatchError:
        return default


def float_value(record: Optional[Record], default: float = 0.0) -> float:
    if record is None:
        return default
    try:
        return record.as_float()
    except TypeMismatchError:
        return default


def struct_items(record: Optional[Record]) -> List[StructItem]:
    if record is None:
        return []
    try:
        return record.as_struct_items()
    except TypeMismatchError:
        return []


def struct_fields(record: Optional[Record]) -> Dict[str, Record]:
    """Struct members by key. The first member wins for duplicate keys."""
    fields: Dict[str, Record] = {}
    for item in struct_items(record):
        fields.setdefault(item.key, item.value)
    return fields
