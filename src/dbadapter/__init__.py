"""
Driver adapters for a database-agnostic query engine, with PostgreSQL and SQLite clients.

The engine talks to one contract whatever the database:

- adapter.query_raw(query) -> ResultSet
- adapter.execute_raw(query) -> affected row count
- adapter.start_transaction() -> Transaction with commit()/rollback()

A RecordingContext passed to the adapter (or to a single call) captures
live results to a file or replays them from it, so tests run without a
database.
"""
__version__ = '0.1.0'

from dbadapter.adapter import DriverAdapter, connect
from dbadapter.adapters.type_mapping import map_column_type
from dbadapter.clients import DriverClient, PostgresClient, ReplayClient
from dbadapter.clients import SQLiteClient
from dbadapter.exceptions import AdapterClosedError, ConnectionFailure, DatabaseError
from dbadapter.exceptions import DbConnectionError, RecordingError
from dbadapter.exceptions import RecordingNotFound, SerializationError
from dbadapter.exceptions import TransactionClosedError
from dbadapter.options import AdapterOptions
from dbadapter.queryable import Queryable
from dbadapter.recording import RecordingContext, RecordingHarness, RecordingMode
from dbadapter.transaction import Transaction, TransactionState
from dbadapter.types import ColumnType, DriverResult, Field, Query, ResultSet
from dbadapter.types import TransactionOptions

__all__ = [
    'connect',
    'DriverAdapter',
    'Queryable',
    'Transaction',
    'TransactionState',
    'TransactionOptions',
    'DriverClient',
    'PostgresClient',
    'SQLiteClient',
    'ReplayClient',
    'AdapterOptions',
    'RecordingContext',
    'RecordingHarness',
    'RecordingMode',
    'Query',
    'ResultSet',
    'ColumnType',
    'Field',
    'DriverResult',
    'map_column_type',
    'DatabaseError',
    'AdapterClosedError',
    'ConnectionFailure',
    'DbConnectionError',
    'RecordingError',
    'RecordingNotFound',
    'SerializationError',
    'TransactionClosedError',
]
