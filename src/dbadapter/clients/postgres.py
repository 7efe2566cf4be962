"""
PostgreSQL client on psycopg, pooled by a SQLAlchemy async engine.

The engine runs in AUTOCOMMIT isolation: the query engine opens and closes
transactions itself with `BEGIN`/`COMMIT` statements, so the driver must
not start implicit ones. Statements run directly on the psycopg
AsyncConnection underneath the pooled SQLAlchemy connection.
"""
import logging
from typing import Self

from dbadapter.clients.base import DriverClient, DriverConnection
from dbadapter.clients.base import normalize_rowcount, register_client
from dbadapter.options import AdapterOptions, create_url_from_options
from dbadapter.types import DriverResult, Field
from psycopg.pq import TransactionStatus
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine
from sqlalchemy.ext.asyncio import create_async_engine

logger = logging.getLogger(__name__)


class PostgresConnection(DriverConnection):
    """A pooled connection with its psycopg AsyncConnection.
    """

    flavour = 'postgres'

    def __init__(self, sa_connection: AsyncConnection, driver_connection) -> None:
        super().__init__()
        self.sa_connection = sa_connection
        self.driver_connection = driver_connection

    async def _execute(self, sql: str, args: tuple) -> DriverResult:
        async with self.driver_connection.cursor() as cursor:
            # no params keeps literal % signs out of placeholder parsing
            await cursor.execute(sql, args or None)
            rowcount = normalize_rowcount(cursor.rowcount)
            if cursor.description is None:
                return DriverResult(row_count=rowcount)

            fields = [Field(col.name, col.type_code) for col in cursor.description]
            rows = [list(row) for row in await cursor.fetchall()]
            logger.debug(f'Query result: {cursor.statusmessage}')
            return DriverResult(fields=fields, rows=rows, row_count=rowcount)

    async def in_transaction(self) -> bool:
        return self.driver_connection.info.transaction_status != TransactionStatus.IDLE

    async def _invalidate(self, exc: BaseException | None) -> None:
        await self.sa_connection.invalidate(exc)

    async def _release(self) -> None:
        await self.sa_connection.close()


@register_client('postgresql')
class PostgresClient(DriverClient):
    """psycopg driver behind a SQLAlchemy AsyncEngine pool.
    """

    flavour = 'postgres'

    def __init__(self, engine: AsyncEngine) -> None:
        self.engine = engine

    @classmethod
    def from_options(cls, options: AdapterOptions) -> Self:
        engine = create_async_engine(
            create_url_from_options(options),
            isolation_level='AUTOCOMMIT',
            pool_size=options.pool_max_connections,
            max_overflow=0,
            pool_recycle=options.pool_max_idle_time,
            pool_timeout=options.pool_wait_timeout,
            pool_pre_ping=True,
            )
        logger.debug(f'Created async engine for {options.hostname}/{options.database}')
        return cls(engine)

    async def checkout(self) -> PostgresConnection:
        sa_connection = await self.engine.connect()
        try:
            raw = await sa_connection.get_raw_connection()
        except Exception:
            await sa_connection.close()
            raise
        return PostgresConnection(sa_connection, raw.driver_connection)

    async def close(self) -> None:
        await self.engine.dispose()
        logger.debug('Disposed postgres engine')
