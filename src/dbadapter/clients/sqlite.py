"""
SQLite client on sqlite3, pooled by a SQLAlchemy engine.

sqlite3 is blocking, so every call is moved off the event loop with
asyncio.to_thread; connections are opened with check_same_thread=False for
that reason. sqlite3 cursors report no column type codes, so each column's
storage class is inferred from its values.
"""
import asyncio
import logging
from typing import Self

import sqlalchemy as sa
from dbadapter.adapters.type_mapping import sqlite_storage_class
from dbadapter.clients.base import DriverClient, DriverConnection
from dbadapter.clients.base import normalize_rowcount, register_client
from dbadapter.options import AdapterOptions, create_url_from_options
from dbadapter.types import DriverResult, Field
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)


class SQLiteConnection(DriverConnection):
    """A pooled connection with its sqlite3 connection.
    """

    flavour = 'sqlite'

    def __init__(self, sa_connection: sa.Connection, driver_connection) -> None:
        super().__init__()
        self.sa_connection = sa_connection
        self.driver_connection = driver_connection

    def _execute_sync(self, sql: str, args: tuple) -> DriverResult:
        cursor = self.driver_connection.cursor()
        try:
            cursor.execute(sql, args)
            description = cursor.description
            rows = [list(row) for row in cursor.fetchall()] if description else []
            rowcount = normalize_rowcount(cursor.rowcount)
        finally:
            cursor.close()

        if description is None:
            return DriverResult(row_count=rowcount)

        fields = [
            Field(col[0], sqlite_storage_class(row[i] for row in rows))
            for i, col in enumerate(description)
            ]
        return DriverResult(fields=fields, rows=rows, row_count=rowcount)

    async def _execute(self, sql: str, args: tuple) -> DriverResult:
        return await asyncio.to_thread(self._execute_sync, sql, args)

    async def in_transaction(self) -> bool:
        return self.driver_connection.in_transaction

    async def _invalidate(self, exc: BaseException | None) -> None:
        await asyncio.to_thread(self.sa_connection.invalidate, exc)

    async def _release(self) -> None:
        await asyncio.to_thread(self.sa_connection.close)


@register_client('sqlite')
class SQLiteClient(DriverClient):
    """sqlite3 driver behind a SQLAlchemy Engine pool.
    """

    flavour = 'sqlite'

    def __init__(self, engine: sa.Engine) -> None:
        self.engine = engine

    @classmethod
    def from_options(cls, options: AdapterOptions) -> Self:
        connect_args = {'check_same_thread': False}
        if options.timeout:
            connect_args['timeout'] = options.timeout

        engine_kwargs = {
            'isolation_level': 'AUTOCOMMIT',
            'connect_args': connect_args,
            }
        if options.database == ':memory:':
            # every checkout must see the same in-memory database
            engine_kwargs['poolclass'] = StaticPool
        else:
            engine_kwargs['pool_size'] = options.pool_max_connections
            engine_kwargs['max_overflow'] = 0
            engine_kwargs['pool_timeout'] = options.pool_wait_timeout

        engine = sa.create_engine(create_url_from_options(options), **engine_kwargs)
        logger.debug(f'Created engine for sqlite database {options.database}')
        return cls(engine)

    async def checkout(self) -> SQLiteConnection:
        sa_connection = await asyncio.to_thread(self.engine.connect)
        return SQLiteConnection(sa_connection, sa_connection.connection.driver_connection)

    async def close(self) -> None:
        await asyncio.to_thread(self.engine.dispose)
        logger.debug('Disposed sqlite engine')
