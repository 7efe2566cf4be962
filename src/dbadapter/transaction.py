"""
Transaction handling for adapter operations.
"""
import asyncio
import logging
from enum import Enum
from typing import Any, Self

from dbadapter.clients.base import DriverConnection
from dbadapter.exceptions import TransactionClosedError
from dbadapter.queryable import Queryable
from dbadapter.recording import RecordingContext
from dbadapter.types import Query, ResultSet, TransactionOptions

logger = logging.getLogger(__name__)

__all__ = ['Transaction', 'TransactionState']


class TransactionState(str, Enum):
    OPEN = 'open'
    COMMITTED = 'committed'
    ROLLED_BACK = 'rolled_back'


class Transaction:
    """Queries on one exclusively owned connection, ended by commit or rollback.

    The connection is released exactly once, by whichever of commit/rollback
    runs first. After that the transaction is inert: every further call
    raises TransactionClosedError. Calls are serialised on a lock, so they
    reach the connection in the order they were issued.

    Examples
        async with await adapter.start_transaction() as tx:
            await tx.execute_raw(Query('DELETE FROM ...', (1,)))
            await tx.execute_raw(Query('UPDATE ...', (2,)))
    """

    def __init__(self, connection: DriverConnection, options: TransactionOptions,
                 recording: RecordingContext | None = None) -> None:
        self.options = options
        self._connection = connection
        self._queryable = Queryable(connection, recording)
        self._state = TransactionState.OPEN
        self._lock = asyncio.Lock()

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def flavour(self) -> str:
        return self._queryable.flavour

    def _ensure_open(self, operation: str) -> None:
        if self._state != TransactionState.OPEN:
            raise TransactionClosedError(f'Cannot {operation}: transaction already {self._state.value}')

    async def query_raw(self, query: Query, recording: RecordingContext | None = None) -> ResultSet:
        async with self._lock:
            self._ensure_open('query')
            return await self._queryable.query_raw(query, recording)

    async def execute_raw(self, query: Query, recording: RecordingContext | None = None) -> int:
        async with self._lock:
            self._ensure_open('execute')
            return await self._queryable.execute_raw(query, recording)

    async def commit(self) -> None:
        """Commit any transaction still open on the connection and release it.
        """
        logger.debug('[commit]')
        await self._finish('COMMIT', TransactionState.COMMITTED)

    async def rollback(self) -> None:
        """Roll back any transaction still open on the connection and release it.

        ROLLBACK is sent explicitly; the pool's reset-on-return is not relied on.
        """
        logger.debug('[rollback]')
        await self._finish('ROLLBACK', TransactionState.ROLLED_BACK)

    async def _finish(self, statement: str, state: TransactionState) -> None:
        async with self._lock:
            self._ensure_open(statement.lower())
            self._state = state
            try:
                await self._connection.finish(statement)
            finally:
                await self._connection.release()
                logger.debug(f'Transaction {state.value}, connection {id(self._connection)} released')

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type: type | None, value: BaseException | None, traceback: Any | None) -> None:
        if self._state != TransactionState.OPEN:
            return
        if exc_type is not None:
            logger.warning('Rolling back the current transaction')
            await self.rollback()
        else:
            await self.commit()
