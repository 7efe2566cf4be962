"""
Adapter tests against a real SQLite database.
"""
import sqlite3

import pytest
from dbadapter import ColumnType, DriverAdapter, Query, TransactionState
from dbadapter.clients import ReplayClient
from dbadapter.recording import RecordingMode


async def count_rows(adapter):
    result = await adapter.query_raw(Query('SELECT count(*) AS n FROM test_table'))
    return result.rows[0][0]


@pytest.mark.asyncio
async def test_select_column_types(sqlite_adapter):
    """Test storage classes map to canonical column types"""
    result = await sqlite_adapter.query_raw(
        Query('SELECT id, name, value, ratio, payload FROM test_table ORDER BY id'))

    assert result.column_names == ['id', 'name', 'value', 'ratio', 'payload']
    assert result.column_types == [
        ColumnType.INT64,
        ColumnType.TEXT,
        ColumnType.INT64,
        ColumnType.DOUBLE,
        ColumnType.BYTES,
        ]
    assert result.rows[0] == [1, 'Alice', 10, 0.5, b'\x01']
    assert result.rows[2] == [3, 'Charlie', 30, None, None]


@pytest.mark.asyncio
async def test_all_null_column_is_int32(sqlite_adapter):
    result = await sqlite_adapter.query_raw(Query('SELECT NULL AS nothing'))
    assert result.column_types == [ColumnType.INT32]
    assert result.rows == [[None]]


@pytest.mark.asyncio
async def test_positional_args(sqlite_adapter):
    result = await sqlite_adapter.query_raw(
        Query('SELECT name FROM test_table WHERE value > ? ORDER BY name', [15]))
    assert result.rows == [['Bob'], ['Charlie']]


@pytest.mark.asyncio
async def test_execute_raw_counts(sqlite_adapter):
    assert await sqlite_adapter.execute_raw(
        Query("INSERT INTO test_table (name, value) VALUES ('Dan', 1), ('Eve', 2)")) == 2
    assert await sqlite_adapter.execute_raw(Query('UPDATE test_table SET value = value + 1')) == 5
    assert await sqlite_adapter.execute_raw(Query('DELETE FROM test_table WHERE id < 0')) == 0


@pytest.mark.asyncio
async def test_statement_error_propagates(sqlite_adapter):
    with pytest.raises(sqlite3.OperationalError, match='no such table'):
        await sqlite_adapter.query_raw(Query('SELECT * FROM missing'))

    with pytest.raises(sqlite3.IntegrityError):
        await sqlite_adapter.execute_raw(Query("INSERT INTO test_table (name) VALUES ('Alice')"))

    assert await count_rows(sqlite_adapter) == 3


@pytest.mark.asyncio
async def test_transaction_commit_persists(sqlite_adapter):
    tx = await sqlite_adapter.start_transaction()
    assert await tx.execute_raw(Query('BEGIN')) == 0
    assert await tx.execute_raw(Query("INSERT INTO test_table (name, value) VALUES ('Dan', 40)")) == 1
    await tx.commit()

    assert tx.state == TransactionState.COMMITTED
    assert await count_rows(sqlite_adapter) == 4


@pytest.mark.asyncio
async def test_transaction_rollback_discards(sqlite_adapter):
    """Test rollback ends the engine's open BEGIN and the insert is gone"""
    tx = await sqlite_adapter.start_transaction()
    await tx.execute_raw(Query('BEGIN'))
    await tx.execute_raw(Query("INSERT INTO test_table (name, value) VALUES ('Dan', 40)"))
    assert (await tx.query_raw(Query('SELECT count(*) FROM test_table'))).rows == [[4]]
    await tx.rollback()

    assert tx.state == TransactionState.ROLLED_BACK
    assert await count_rows(sqlite_adapter) == 3


@pytest.mark.asyncio
async def test_transaction_context_manager_rolls_back(sqlite_adapter):
    with pytest.raises(RuntimeError):
        async with await sqlite_adapter.start_transaction() as tx:
            await tx.execute_raw(Query('BEGIN'))
            await tx.execute_raw(Query('DELETE FROM test_table'))
            raise RuntimeError('abort')

    assert await count_rows(sqlite_adapter) == 3


@pytest.mark.asyncio
async def test_recorded_session_replays_offline(sqlite_adapter, make_recording):
    """Test a session recorded against SQLite replays without the database"""
    select = Query('SELECT id, name, ratio, payload FROM test_table ORDER BY id')
    update = Query('UPDATE test_table SET value = ? WHERE name = ?', [99, 'Bob'])

    writer = make_recording(RecordingMode.WRITE)
    recorded = await sqlite_adapter.query_raw(select, writer)
    assert await sqlite_adapter.execute_raw(update, writer) == 1

    replay = DriverAdapter(ReplayClient('sqlite'), make_recording(RecordingMode.READ))
    assert await replay.query_raw(select) == recorded
    assert await replay.execute_raw(update) == 1
    assert recorded.rows[0][3] == b'\x01'


@pytest.mark.asyncio
async def test_memory_database_shares_one_connection():
    """Test every checkout of an in-memory adapter sees the same database"""
    from dbadapter import connect

    async with connect(drivername='sqlite', database=':memory:') as adapter:
        await adapter.execute_raw(Query('CREATE TABLE t (a INTEGER)'))
        await adapter.execute_raw(Query('INSERT INTO t VALUES (1)'))
        result = await adapter.query_raw(Query('SELECT a FROM t'))

    assert result.rows == [[1]]
    assert adapter.closed


if __name__ == '__main__':
    __import__('pytest').main([__file__])
