"""
Base client interface for native database drivers.

A client is the capability set the adapter needs from a driver:

- run_query(sql, args): run one statement on a pooled connection
- checkout(): take one connection out of the pool for exclusive use

Each supported driver provides one DriverClient/DriverConnection pair and
registers it under its driver name. The adapter picks the variant at
construction time and never looks at the driver directly.
"""
import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Self

from dbadapter.exceptions import ConnectionFailure, is_connection_error
from dbadapter.types import DriverResult

if TYPE_CHECKING:
    from dbadapter.options import AdapterOptions

logger = logging.getLogger(__name__)

# Registry of driver name -> client class
_CLIENT_REGISTRY: dict[str, type['DriverClient']] = {}


def register_client(drivername: str):
    """Decorator to register a client class for a driver name.

    Usage:
        @register_client('postgresql')
        class PostgresClient(DriverClient):
            ...
    """
    def decorator(cls: type['DriverClient']) -> type['DriverClient']:
        _CLIENT_REGISTRY[drivername] = cls
        return cls
    return decorator


def get_client_class(drivername: str) -> type['DriverClient']:
    """Get the client class registered for a driver name."""
    if drivername not in _CLIENT_REGISTRY:
        available = list(_CLIENT_REGISTRY.keys())
        raise ValueError(f'Unsupported driver: {drivername}. Available: {available}')
    return _CLIENT_REGISTRY[drivername]


def get_available_drivers() -> list[str]:
    """Return list of registered driver names."""
    return list(_CLIENT_REGISTRY.keys())


def is_supported_driver(drivername: str) -> bool:
    """Check if a driver name is registered."""
    return drivername in _CLIENT_REGISTRY


def normalize_rowcount(rowcount: int | None) -> int | None:
    """DB-API reports -1 when no count applies; treat that as no count."""
    if rowcount is None or rowcount < 0:
        return None
    return rowcount


class DriverConnection(ABC):
    """One connection checked out of a client's pool.

    A connection that failed at the connection level is invalidated so the
    pool discards it instead of handing it out again. Release is idempotent.
    """

    flavour: str = 'unknown'

    def __init__(self) -> None:
        self.healthy = True
        self.released = False

    async def run_query(self, sql: str, args: tuple = ()) -> DriverResult:
        """Run one statement and return its rows in array row mode.
        """
        if self.released:
            raise ConnectionFailure('Connection was already released to the pool')
        if not self.healthy:
            raise ConnectionFailure('Connection was invalidated after an earlier failure')
        try:
            return await self._execute(sql, tuple(args))
        except Exception as err:
            if is_connection_error(err):
                await self.invalidate(err)
            raise

    async def finish(self, statement: str) -> bool:
        """Issue COMMIT or ROLLBACK if the connection is inside a transaction.

        Returns
            True if the statement was sent
        """
        if self.released or not self.healthy:
            return False
        if not await self.in_transaction():
            return False
        logger.debug(f'Issuing {statement} on open transaction')
        await self.run_query(statement)
        return True

    async def invalidate(self, exc: BaseException | None = None) -> None:
        """Mark the connection unusable so the pool evicts it.
        """
        if not self.healthy:
            return
        self.healthy = False
        logger.warning(f'Invalidating connection after error: {exc}')
        await self._invalidate(exc)

    async def release(self) -> None:
        """Return the connection to the pool. Later calls are no-ops.
        """
        if self.released:
            return
        self.released = True
        await self._release()
        logger.debug(f'Released {self.flavour} connection {id(self)}')

    @abstractmethod
    async def _execute(self, sql: str, args: tuple) -> DriverResult:
        """Run a statement on the driver connection."""

    @abstractmethod
    async def in_transaction(self) -> bool:
        """Whether the server-side session has an open transaction."""

    @abstractmethod
    async def _invalidate(self, exc: BaseException | None) -> None:
        """Tell the pool to discard this connection."""

    @abstractmethod
    async def _release(self) -> None:
        """Give the connection back to the pool."""


class DriverClient(ABC):
    """A native driver behind a connection pool.
    """

    flavour: str = 'unknown'

    @classmethod
    @abstractmethod
    def from_options(cls, options: 'AdapterOptions') -> Self:
        """Create the client and its pool from options."""

    @abstractmethod
    async def checkout(self) -> DriverConnection:
        """Take a connection out of the pool for exclusive use."""

    async def run_query(self, sql: str, args: tuple = ()) -> DriverResult:
        """Run one statement on a pooled connection.

        The connection goes back to the pool afterwards, or is discarded if
        the statement failed at the connection level.
        """
        connection = await self.checkout()
        try:
            return await connection.run_query(sql, args)
        finally:
            await connection.release()

    async def close(self) -> None:
        """Dispose of the pool."""

    def __repr__(self) -> str:
        return f'{type(self).__name__}(flavour={self.flavour!r})'
