"""
Adapter-specific exception classes.
"""
import re
import sqlite3

import psycopg

TRANSIENT_PATTERNS = [
    # SSL/TLS errors
    r'ssl',
    r'tls',
    # Connection drops
    r'connection.*(closed|reset|refused|lost|terminated|broken)',
    r'server closed',
    r'eof detected',
    r'broken pipe',
    # Timeouts
    r'timeout',
    r'timed out',
    # Network issues
    r'could not connect',
    r'no route to host',
    r'network.*(unreachable|error)',
    r'host.*(unreachable|down)',
    # Database unavailable
    r'database.*unavailable',
    r'unable to open database',
    r'disk i/o error',
    r'too many connections',
]

_TRANSIENT_REGEX = re.compile('|'.join(TRANSIENT_PATTERNS), re.IGNORECASE)


def is_retryable_error(exc: BaseException) -> bool:
    """Check if an exception message describes a transient, connection-level fault.

    :param exc: The exception to check.
    :returns: True for dropped connections, timeouts and network faults.
    """
    return bool(_TRANSIENT_REGEX.search(str(exc)))


class DatabaseError(Exception):
    """Base class for all adapter errors.
    """


class ConnectionFailure(DatabaseError):
    """Error establishing or maintaining a database connection.
    """


class TransactionClosedError(DatabaseError):
    """Operation attempted on a transaction that was already committed or rolled back.
    """


class AdapterClosedError(DatabaseError):
    """Operation attempted on an adapter after close().
    """


class RecordingError(DatabaseError):
    """Base class for capture-and-replay errors.
    """


class RecordingNotFound(RecordingError):
    """Replay lookup found no recorded result for the query.
    """

    def __init__(self, sql: str, path) -> None:
        self.sql = sql
        self.path = path
        super().__init__(f'Recording not found: {sql} ({path})')


class SerializationError(RecordingError):
    """Recorded payload could not be parsed back into a result.
    """


DbConnectionError = (
    psycopg.OperationalError,
    psycopg.InterfaceError,
    sqlite3.OperationalError,
    sqlite3.InterfaceError,
    ConnectionFailure,
    )


def is_connection_error(exc: BaseException) -> bool:
    """Check if an error leaves the connection it happened on unusable.

    psycopg reports every connection fault as OperationalError/InterfaceError.
    sqlite3 also raises OperationalError for plain syntax and schema errors,
    so for sqlite the message must look like a connection-level fault.
    """
    if isinstance(exc, sqlite3.OperationalError):
        return is_retryable_error(exc)
    return isinstance(exc, DbConnectionError)
