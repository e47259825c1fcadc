"""Shared pytest configuration and fixtures."""

from contextlib import asynccontextmanager
from typing import Dict, List, Tuple, Union

import pytest

from kamailio_exporter.config.models import KamailioConfig
from kamailio_exporter.utils.errors import NoDataError
from kamailio_exporter.utils.logger import setup_logger
from kamailio_exporter.utils.records import Record


def int_(value: int) -> Record:
    return Record.from_int(value)


def str_(value: str) -> Record:
    return Record.from_str(value)


def double(value: float) -> Record:
    return Record.from_float(value)


def struct(*pairs: Tuple[str, Record]) -> Record:
    return Record.from_items(pairs)


class FakeSession:
    """
    Session stand-in answering commands from canned replies.

    A reply is either a list of records or an exception instance to raise.
    Commands without a canned reply raise NoDataError, like an empty reply.
    """

    def __init__(self, replies: Dict[str, Union[List[Record], Exception]] = None):
        self.replies = dict(replies or {})
        self.requests: List[Tuple[str, ...]] = []

    async def request(self, command: str, *args: str) -> List[Record]:
        self.requests.append((command,) + args)
        key = " ".join((command,) + args)
        reply = self.replies.get(key, self.replies.get(command))
        if reply is None:
            raise NoDataError(f"{command}: empty reply")
        if isinstance(reply, Exception):
            raise reply
        return reply


def session_factory(session: FakeSession):
    """open_session replacement yielding ``session``."""
    opened = []

    @asynccontextmanager
    async def factory(uri, timeout):
        opened.append((uri, timeout))
        yield session

    factory.opened = opened
    return factory


@pytest.fixture
def logger():
    """Create logger for tests."""
    return setup_logger("test", "DEBUG")


@pytest.fixture
def kamailio_config():
    """Kamailio settings with a dispatcher map and two dialog profiles."""
    return KamailioConfig(
        rpc_uri="tcp://127.0.0.1:2049",
        timeout_seconds=2,
        dispatcher_map=["1:carriers", "2:media"],
        dialog_profiles=["inbound", "outbound"],
    )


@pytest.fixture
def fake_session():
    """Empty fake session; tests fill ``replies``."""
    return FakeSession()
