"""Base collector abstract class for all Kamailio collectors."""

from abc import ABC, abstractmethod
from typing import Any, List
import logging

from ..services.session import Session
from ..utils.errors import NoDataError
from ..utils.metrics import MetricSink
from ..utils.records import Record


class BaseCollector(ABC):
    """
    Abstract base class for all collectors.

    A collector issues one or more commands on the shared session and writes
    metric points into the sink it is given. Returning normally means the
    collector succeeded; raising NoDataError means the server answered with
    an empty result; any other exception is a failure of this collector only.
    """

    # Registry name, also used as the ``collector`` label of the meta-metrics
    name: str = ""

    def __init__(self, config: Any, logger: logging.Logger):
        """
        Initialize base collector.

        Args:
            config: Kamailio connection/collector configuration
            logger: Logger instance
        """
        self.config = config
        self.logger = logger.getChild(self.__class__.__name__)

    @abstractmethod
    async def update(self, session: Session, sink: MetricSink) -> None:
        """
        Fetch data from Kamailio and emit metric points.

        Args:
            session: Open session shared by all collectors of this cycle
            sink: Destination for this collector's points

        Raises:
            NoDataError: If the server returned a well-formed but empty result
            Exception: Any other error fails this collector only
        """
        pass

    async def fetch(self, session: Session, command: str, *args: str) -> List[Record]:
        """
        Run one command, logging failures other than an empty reply.

        Raises:
            Whatever the session raises.
        """
        try:
            return await session.request(command, *args)
        except NoDataError:
            raise
        except Exception as e:
            self.logger.debug(f"Can not fetch {command}: {e}")
            raise

    async def fetch_struct(self, session: Session, command: str, *args: str) -> Record:
        """Run one command and return its first record, which must be a struct."""
        records = await self.fetch(session, command, *args)
        record = records[0]
        record.as_struct_items()
        return record
