"""One BINRPC connection per poll cycle, bounded by a single deadline."""

import asyncio
import logging
import random
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Tuple
from urllib.parse import urlparse

from . import binrpc
from ..utils.errors import (
    ConnectError,
    CookieMismatchError,
    DeadlineExceededError,
    NoDataError,
    ProtocolError,
    TransportError,
    TruncatedError,
)
from ..utils.records import Record

logger = logging.getLogger(__name__)

SUPPORTED_SCHEMES = ("tcp", "unix")


def parse_endpoint(uri: str) -> Tuple[str, str, Optional[int]]:
    """
    Split an endpoint URI into its parts.

    Args:
        uri: ``tcp://host:port`` or ``unix:///path/to/socket``

    Returns:
        Tuple of (scheme, host or socket path, port or None)

    Raises:
        ValueError: If the scheme is unsupported or a part is missing
    """
    parsed = urlparse(uri)
    if parsed.scheme == "tcp":
        if not parsed.hostname or parsed.port is None:
            raise ValueError(f"tcp endpoint needs host and port: {uri}")
        return "tcp", parsed.hostname, parsed.port
    if parsed.scheme == "unix":
        path = parsed.path or parsed.netloc
        if not path:
            raise ValueError(f"unix endpoint needs a socket path: {uri}")
        return "unix", path, None
    raise ValueError(f"unsupported endpoint scheme '{parsed.scheme}' (expected tcp or unix)")


class Session:
    """
    Sequential request/reply exchange over one open stream.

    Every read and write is bounded by the same deadline. Once the deadline
    passes, or the stream fails, the session is unusable and every further
    request raises.
    """

    def __init__(self, reader: asyncio.StreamReader, writer: asyncio.StreamWriter, deadline: float):
        self._reader = reader
        self._writer = writer
        self._deadline = deadline
        self._expired = False
        self._broken = False

    def remaining(self) -> float:
        """Seconds left until the deadline (never negative)."""
        return max(0.0, self._deadline - asyncio.get_running_loop().time())

    async def _bounded(self, func, *args):
        if self._expired:
            raise DeadlineExceededError("session deadline already exceeded")
        if self._broken:
            raise TransportError("session stream is broken")
        remaining = self.remaining()
        if remaining <= 0:
            self._expired = True
            raise DeadlineExceededError("session deadline exceeded")
        try:
            return await asyncio.wait_for(func(*args), timeout=remaining)
        except asyncio.TimeoutError:
            self._expired = True
            raise DeadlineExceededError("session deadline exceeded") from None
        except asyncio.IncompleteReadError as e:
            self._broken = True
            raise TruncatedError(f"stream closed after {len(e.partial)} of {e.expected} bytes") from e
        except OSError as e:
            self._broken = True
            raise TransportError(f"stream error: {e}") from e

    async def _send(self, packet: bytes) -> None:
        self._writer.write(packet)
        await self._writer.drain()

    async def request(self, command: str, *args: str) -> List[Record]:
        """
        Send one command and return the decoded reply records.

        Args:
            command: Remote command name (e.g. "stats.fetch")
            *args: String parameters

        Returns:
            List[Record]: Top-level reply records

        Raises:
            NoDataError: If the reply is well-formed but empty
            FaultError: If the server answers with a fault
            ProtocolError: On cookie mismatch, truncation, bad framing or deadline
        """
        cookie = random.getrandbits(32)
        await self._bounded(self._send, binrpc.encode_request(cookie, command, *args))

        fixed = await self._bounded(self._reader.readexactly, binrpc.FIXED_HEADER_SIZE)
        try:
            _, len_len, cookie_len = binrpc.parse_fixed_header(fixed)
        except ProtocolError:
            # framing is lost, later replies cannot be located
            self._broken = True
            raise
        rest = await self._bounded(self._reader.readexactly, len_len + cookie_len)
        header = binrpc.decode_header(fixed + rest)
        body = await self._bounded(self._reader.readexactly, header.body_length)

        if header.cookie != cookie:
            raise CookieMismatchError(cookie, header.cookie)

        records = binrpc.decode_body(body)
        if header.msg_type == binrpc.MSG_FAULT:
            binrpc.raise_for_fault(records)
        if header.msg_type != binrpc.MSG_REPLY:
            raise ProtocolError(f"unexpected message type {header.msg_type} in reply")
        if not records:
            raise NoDataError(f"{command}: empty reply")
        return records

    async def close(self) -> None:
        self._writer.close()
        try:
            await self._writer.wait_closed()
        except OSError as e:
            logger.debug(f"Error while closing session: {e}")


async def _connect(uri: str) -> Tuple[asyncio.StreamReader, asyncio.StreamWriter]:
    scheme, target, port = parse_endpoint(uri)
    if scheme == "tcp":
        return await asyncio.open_connection(target, port)
    return await asyncio.open_unix_connection(target)


@asynccontextmanager
async def open_session(uri: str, timeout: float) -> AsyncIterator[Session]:
    """
    Open a session for one poll cycle.

    The connect itself is bounded by ``timeout``; the remaining exchange gets
    its own deadline of ``timeout`` seconds starting once the connection is
    established. The stream is closed on every exit path.

    Args:
        uri: Endpoint URI (``tcp://host:port`` or ``unix:///path``)
        timeout: Seconds

    Raises:
        ConnectError: If the endpoint is invalid or cannot be reached in time
    """
    try:
        reader, writer = await asyncio.wait_for(_connect(uri), timeout=timeout)
    except ValueError as e:
        raise ConnectError(str(e)) from e
    except asyncio.TimeoutError:
        raise ConnectError(f"timed out connecting to {uri}") from None
    except OSError as e:
        raise ConnectError(f"cannot connect to {uri}: {e}") from e

    session = Session(reader, writer, asyncio.get_running_loop().time() + timeout)
    try:
        yield session
    finally:
        await session.close()
