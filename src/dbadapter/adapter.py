"""
Top-level driver adapter.

The adapter is what the query engine talks to:

- query_raw/execute_raw run single statements on pooled connections
- start_transaction checks out a dedicated connection
- close disposes of the pool when the adapter owns it
"""
import logging
from collections.abc import Mapping
from typing import Any, Self

from dbadapter.clients import DriverClient, get_client_class
from dbadapter.exceptions import AdapterClosedError
from dbadapter.options import AdapterOptions, load_options
from dbadapter.queryable import Queryable
from dbadapter.recording import RecordingContext
from dbadapter.transaction import Transaction
from dbadapter.types import Query, ResultSet, TransactionOptions

logger = logging.getLogger(__name__)

__all__ = ['DriverAdapter', 'connect']


class DriverAdapter:
    """Queryable over a client's shared pool, and factory for transactions.

    The pool is closed by `close()` only when the adapter owns the client
    (as when it was built by `connect()`). A client passed in by the caller
    stays the caller's to close.
    """

    def __init__(self, client: DriverClient, recording: RecordingContext | None = None,
                 owns_client: bool = False) -> None:
        self.client = client
        self.recording = recording
        self.owns_client = owns_client
        self.closed = False
        self._queryable = Queryable(client, recording)

    @property
    def flavour(self) -> str:
        return self.client.flavour

    def _ensure_open(self, operation: str) -> None:
        if self.closed:
            raise AdapterClosedError(f'Cannot {operation}: adapter already closed')

    async def query_raw(self, query: Query, recording: RecordingContext | None = None) -> ResultSet:
        self._ensure_open('query')
        return await self._queryable.query_raw(query, recording)

    async def execute_raw(self, query: Query, recording: RecordingContext | None = None) -> int:
        self._ensure_open('execute')
        return await self._queryable.execute_raw(query, recording)

    async def start_transaction(self, recording: RecordingContext | None = None) -> Transaction:
        """Check out a dedicated connection and wrap it in a Transaction.
        """
        self._ensure_open('start transaction')
        options = TransactionOptions(use_phantom_query=False)
        logger.debug(f'[start_transaction] options: {options}')

        connection = await self.client.checkout()
        return Transaction(connection, options, recording or self.recording)

    async def close(self) -> None:
        """Release adapter resources. Later calls are no-ops; queries and new
        transactions are rejected with AdapterClosedError.
        """
        if self.closed:
            return
        self.closed = True
        if self.owns_client:
            await self.client.close()
        logger.debug(f'Closed {self.flavour} adapter')

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f'{type(self).__name__}({self.client!r})'


def connect(options: AdapterOptions | Mapping[str, Any] | None = None,
            recording: RecordingContext | None = None, **kw: Any) -> DriverAdapter:
    """Create an adapter that owns a new client and pool.

    Args:
        options: AdapterOptions, or a mapping of option values
        recording: Default recording context for every call on the adapter
        **kw: Option values overriding `options`

    Returns
        DriverAdapter for the configured driver
    """
    options = load_options(options, **kw)
    client = get_client_class(options.drivername).from_options(options)
    return DriverAdapter(client, recording=recording, owns_client=True)
