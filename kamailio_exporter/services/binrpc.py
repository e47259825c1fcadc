"""BINRPC packet encoding and decoding.

Packet layout::

    byte 0      magic (high nibble, 0xA) | version (low nibble, 1)
    byte 1      message type (high nibble) | (len_len - 1) << 2 | (cookie_len - 1)
    len_len     big-endian body length
    cookie_len  big-endian cookie
    body        sequence of records

Record header byte: ``flag << 7 | size << 4 | type``. With flag 0, ``size``
is the payload length (0-7). With flag 1, ``size`` is the number of bytes of
a big-endian payload length that follows. A struct starts with a zero-length
struct record and ends with the marker ``1 << 7 | type``; its members are an
AVP record holding the key followed by the value record. Doubles travel as
integers scaled by 1000.
"""

from dataclasses import dataclass
from typing import List, Tuple

from ..utils.errors import FaultError, ProtocolError, TruncatedError
from ..utils.records import Record, RecordType, StructItem

BINRPC_MAGIC = 0xA
BINRPC_VERSION = 1

MSG_REQUEST = 0
MSG_REPLY = 1
MSG_FAULT = 3

FIXED_HEADER_SIZE = 2
MAX_COOKIE = 0xFFFFFFFF
# Deepest struct nesting accepted in a reply
MAX_NESTING = 32


def int_size(value: int) -> int:
    """Minimum number of bytes needed to encode ``value`` (0 for zero)."""
    value &= MAX_COOKIE
    size = 0
    while value:
        size += 1
        value >>= 8
    return size


def _encode_uint(value: int, size: int) -> bytes:
    return (value & ((1 << (8 * size)) - 1)).to_bytes(size, "big") if size else b""


def encode_record(record_type: RecordType, payload: bytes) -> bytes:
    """Frame ``payload`` as a record of the given type."""
    length = len(payload)
    if length <= 7:
        return bytes([(length << 4) | record_type]) + payload
    len_len = int_size(length)
    return bytes([0x80 | (len_len << 4) | record_type]) + _encode_uint(length, len_len) + payload


def encode_int(value: int) -> bytes:
    return encode_record(RecordType.INT, _encode_uint(value, int_size(value)))


def encode_str(value: str) -> bytes:
    return encode_record(RecordType.STR, value.encode("utf-8") + b"\0")


def encode_value(record: Record) -> bytes:
    """Encode a Record, recursing into structs."""
    if record.type == RecordType.INT:
        return encode_int(record.value)
    if record.type == RecordType.STR:
        return encode_str(record.value)
    if record.type == RecordType.DOUBLE:
        return encode_record(RecordType.DOUBLE, _encode_uint(int(record.value * 1000), int_size(int(record.value * 1000))))
    if record.type == RecordType.STRUCT:
        parts = [bytes([RecordType.STRUCT])]
        for item in record.value:
            parts.append(encode_record(RecordType.AVP, item.key.encode("utf-8") + b"\0"))
            parts.append(encode_value(item.value))
        parts.append(bytes([0x80 | RecordType.STRUCT]))
        return b"".join(parts)
    raise ProtocolError(f"cannot encode record type {record.type!r}")


def encode_packet(msg_type: int, body: bytes, cookie: int) -> bytes:
    """Prefix ``body`` with a BINRPC header."""
    len_len = max(int_size(len(body)), 1)
    cookie_len = max(int_size(cookie), 1)
    header = bytes([
        (BINRPC_MAGIC << 4) | BINRPC_VERSION,
        (msg_type << 4) | ((len_len - 1) << 2) | (cookie_len - 1),
    ])
    return header + _encode_uint(len(body), len_len) + _encode_uint(cookie, cookie_len) + body


def encode_request(cookie: int, command: str, *params: str) -> bytes:
    """Build a request packet for ``command`` with string parameters."""
    body = encode_str(command) + b"".join(encode_str(p) for p in params)
    return encode_packet(MSG_REQUEST, body, cookie)


@dataclass(frozen=True)
class PacketHeader:
    """Decoded fixed and variable header fields."""

    msg_type: int
    body_length: int
    cookie: int
    size: int


def parse_fixed_header(data: bytes) -> Tuple[int, int, int]:
    """
    Parse the two fixed header bytes.

    Args:
        data: At least the first two bytes of a packet

    Returns:
        Tuple of (message type, length-field size, cookie-field size)

    Raises:
        TruncatedError: If fewer than two bytes are given
        ProtocolError: If magic or version do not match
    """
    if len(data) < FIXED_HEADER_SIZE:
        raise TruncatedError(f"header needs {FIXED_HEADER_SIZE} bytes, got {len(data)}")
    magic, version = data[0] >> 4, data[0] & 0x0F
    if magic != BINRPC_MAGIC:
        raise ProtocolError(f"bad magic {magic:#x}")
    if version != BINRPC_VERSION:
        raise ProtocolError(f"unsupported protocol version {version}")
    return data[1] >> 4, ((data[1] >> 2) & 0x03) + 1, (data[1] & 0x03) + 1


def decode_header(data: bytes) -> PacketHeader:
    """Decode the full packet header from the start of ``data``."""
    msg_type, len_len, cookie_len = parse_fixed_header(data)
    size = FIXED_HEADER_SIZE + len_len + cookie_len
    if len(data) < size:
        raise TruncatedError(f"header needs {size} bytes, got {len(data)}")
    body_length = int.from_bytes(data[FIXED_HEADER_SIZE:FIXED_HEADER_SIZE + len_len], "big")
    cookie = int.from_bytes(data[FIXED_HEADER_SIZE + len_len:size], "big")
    return PacketHeader(msg_type, body_length, cookie, size)


class _BodyReader:
    """Cursor over a packet body."""

    def __init__(self, data: bytes):
        self.data = data
        self.pos = 0

    def at_end(self) -> bool:
        return self.pos >= len(self.data)

    def take(self, count: int) -> bytes:
        if self.pos + count > len(self.data):
            raise TruncatedError(
                f"record needs {count} bytes at offset {self.pos}, only {len(self.data) - self.pos} left"
            )
        chunk = self.data[self.pos:self.pos + count]
        self.pos += count
        return chunk

    def read_header(self) -> Tuple[bool, RecordType, int]:
        """Return (end marker?, type, payload length) of the next record."""
        byte = self.take(1)[0]
        flag, size, code = byte >> 7, (byte >> 4) & 0x07, byte & 0x0F
        try:
            record_type = RecordType(code)
        except ValueError:
            raise ProtocolError(f"unknown record type {code} at offset {self.pos - 1}") from None
        if flag and size == 0 and record_type in (RecordType.STRUCT, RecordType.ARRAY):
            return True, record_type, 0
        if flag:
            return False, record_type, int.from_bytes(self.take(size), "big")
        return False, record_type, size


def _decode_int(payload: bytes) -> int:
    return int.from_bytes(payload, "big", signed=len(payload) == 4)


def _decode_str(payload: bytes) -> str:
    if payload.endswith(b"\0"):
        payload = payload[:-1]
    return payload.decode("utf-8", errors="replace")


def _read_value(reader: _BodyReader, depth: int = 0) -> Record:
    end, record_type, length = reader.read_header()
    if end:
        raise ProtocolError(f"unexpected {record_type.name.lower()} end marker at offset {reader.pos - 1}")
    payload = reader.take(length)

    if record_type == RecordType.INT:
        return Record.from_int(_decode_int(payload))
    if record_type == RecordType.STR:
        return Record.from_str(_decode_str(payload))
    if record_type == RecordType.DOUBLE:
        return Record.from_float(_decode_int(payload) / 1000.0)
    if record_type == RecordType.STRUCT:
        if depth >= MAX_NESTING:
            raise ProtocolError(f"struct nesting deeper than {MAX_NESTING} levels at offset {reader.pos}")
        return Record.from_items(_read_struct_items(reader, depth + 1))
    raise ProtocolError(f"unsupported record type {record_type.name.lower()}")


def _read_struct_items(reader: _BodyReader, depth: int) -> List[StructItem]:
    items = []
    while True:
        end, record_type, length = reader.read_header()
        if end:
            if record_type != RecordType.STRUCT:
                raise ProtocolError(f"{record_type.name.lower()} end marker inside struct")
            return items
        if record_type != RecordType.AVP:
            raise ProtocolError(f"expected struct member name, got {record_type.name.lower()} record")
        key = _decode_str(reader.take(length))
        items.append(StructItem(key, _read_value(reader, depth)))


def decode_body(body: bytes) -> List[Record]:
    """
    Decode all records of a packet body.

    Args:
        body: Packet body bytes (header already stripped)

    Returns:
        List[Record]: Top-level records in wire order

    Raises:
        TruncatedError: If a record runs past the end of the body
        ProtocolError: If the body contains unknown or unsupported records
    """
    reader = _BodyReader(body)
    records = []
    while not reader.at_end():
        records.append(_read_value(reader))
    return records


def raise_for_fault(records: List[Record]) -> None:
    """Turn the records of a fault reply into a FaultError."""
    code = records[0].value if records and records[0].type == RecordType.INT else -1
    message = next((r.value for r in records if r.type == RecordType.STR), "")
    raise FaultError(code, message)


def decode_packet(data: bytes) -> Tuple[PacketHeader, List[Record]]:
    """
    Decode a complete packet held in memory.

    Raises:
        TruncatedError: If ``data`` is shorter than the declared length
        ProtocolError: For any other malformation
    """
    header = decode_header(data)
    end = header.size + header.body_length
    if len(data) < end:
        raise TruncatedError(f"packet declares {header.body_length} body bytes, got {len(data) - header.size}")
    return header, decode_body(data[header.size:end])
