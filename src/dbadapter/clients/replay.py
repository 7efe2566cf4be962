"""
Offline client for replaying recordings.

Lets a test build an adapter and open transactions in read mode without a
database. Any statement that reaches it was not served from a recording and
fails with ConnectionFailure.
"""
import logging
from typing import Self

from dbadapter.clients.base import DriverClient, DriverConnection
from dbadapter.clients.base import get_client_class
from dbadapter.exceptions import ConnectionFailure
from dbadapter.options import AdapterOptions
from dbadapter.types import DriverResult

logger = logging.getLogger(__name__)


class ReplayConnection(DriverConnection):

    def __init__(self, flavour: str) -> None:
        super().__init__()
        self.flavour = flavour

    async def _execute(self, sql: str, args: tuple) -> DriverResult:
        raise ConnectionFailure(f'Replay client has no database to run: {sql}')

    async def in_transaction(self) -> bool:
        return False

    async def _invalidate(self, exc: BaseException | None) -> None:
        pass

    async def _release(self) -> None:
        pass


class ReplayClient(DriverClient):
    """Client without a database, reporting the flavour of the one it stands in for.
    """

    def __init__(self, flavour: str = 'postgres') -> None:
        self.flavour = flavour

    @classmethod
    def from_options(cls, options: AdapterOptions) -> Self:
        return cls(flavour=get_client_class(options.drivername).flavour)

    async def checkout(self) -> ReplayConnection:
        logger.debug(f'Checked out replay connection ({self.flavour})')
        return ReplayConnection(self.flavour)
