"""
Raw query execution against a driver client or connection.
"""
import logging
from typing import Protocol

from dbadapter.adapters.type_mapping import map_column_type
from dbadapter.recording import RecordingContext, RecordingHarness
from dbadapter.types import DriverResult, Query, ResultSet

logger = logging.getLogger(__name__)

__all__ = ['Queryable', 'QueryRunner', 'MAX_ROW_COUNT']

# affected-row counts cross the engine boundary as unsigned 32-bit integers
MAX_ROW_COUNT = 2**32 - 1


class QueryRunner(Protocol):
    """Anything that runs SQL: a pooled client or a checked-out connection."""

    flavour: str

    async def run_query(self, sql: str, args: tuple = ()) -> DriverResult: ...


class Queryable:
    """Runs queries on a runner and shapes the results for the engine.

    Every statement goes through `_perform_io`, the single point where
    recording contexts intercept I/O.
    """

    def __init__(self, runner: QueryRunner, recording: RecordingContext | None = None) -> None:
        self.runner = runner
        self.recording = recording

    @property
    def flavour(self) -> str:
        return self.runner.flavour

    async def query_raw(self, query: Query, recording: RecordingContext | None = None) -> ResultSet:
        """Execute a query given as SQL, interpolating the given parameters.
        """
        logger.debug(f'[query_raw] {query}')

        result = await self._perform_io(query, recording)

        return ResultSet(
            column_names=[f.name for f in result.fields],
            column_types=[map_column_type(self.flavour, f.type_id) for f in result.fields],
            rows=result.rows,
            )

    async def execute_raw(self, query: Query, recording: RecordingContext | None = None) -> int:
        """Execute a query given as SQL, interpolating the given parameters and
        returning the number of affected rows.

        The count is 0 when the driver reports none (e.g. for `BEGIN`) and is
        capped at MAX_ROW_COUNT.
        """
        logger.debug(f'[execute_raw] {query}')

        result = await self._perform_io(query, recording)

        rows_affected = result.row_count or 0
        if rows_affected > MAX_ROW_COUNT:
            logger.warning(f'Row count {rows_affected} exceeds 32 bits, reporting {MAX_ROW_COUNT}')
            return MAX_ROW_COUNT
        return max(rows_affected, 0)

    async def _perform_io(self, query: Query, recording: RecordingContext | None = None) -> DriverResult:
        """Run a query against the database, or through the recording harness
        when a recording context applies.

        A connection-level failure invalidates the connection it happened on
        before the error reaches the caller.
        """
        recording = recording or self.recording
        try:
            if recording is None:
                return await self.runner.run_query(query.sql, query.args)
            return await RecordingHarness(recording).perform(query, self.runner.run_query)
        except Exception as e:
            logger.debug(f'Error in perform_io: {e}')
            raise
