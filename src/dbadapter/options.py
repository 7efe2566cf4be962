import logging
import os
import sys
from collections.abc import Mapping
from dataclasses import dataclass, fields
from typing import Any

import sqlalchemy as sa

logger = logging.getLogger(__name__)

__all__ = [
    'AdapterOptions',
    'load_options',
    'create_url_from_options',
]


def _scriptname() -> str | None:
    """Name of the running script, used as the default application name."""
    if not sys.argv or not sys.argv[0]:
        return None
    name = os.path.splitext(os.path.basename(sys.argv[0]))[0]
    return name or None


@dataclass
class AdapterOptions:
    """Options

    supported driver names: `postgresql`, `sqlite`

    Connection pooling options:
    - pool_max_connections: Maximum connections in pool (default: 5)
    - pool_max_idle_time: Seconds after which a pooled connection is recycled (default: 300)
    - pool_wait_timeout: Maximum seconds to wait for a connection (default: 30)
    """
    drivername: str = 'postgresql'
    hostname: str = None
    username: str = None
    password: str = None
    database: str = None
    port: int = 0
    timeout: int = 0
    appname: str = None
    pool_max_connections: int = 5
    pool_max_idle_time: int = 300
    pool_wait_timeout: int = 30

    def __post_init__(self):
        # Import here to avoid circular import dependencies
        from dbadapter.clients import get_available_drivers, is_supported_driver
        if not is_supported_driver(self.drivername):
            available = get_available_drivers()
            raise ValueError(f'drivername must be one of: {available}')
        self.appname = self.appname or _scriptname() or 'python_console'
        if self.drivername == 'sqlite' and not self.database:
            raise ValueError('database (file path or :memory:) is required for sqlite')
        if self.drivername == 'postgresql':
            missing = [name for name in ('hostname', 'database') if not getattr(self, name)]
            if missing:
                raise ValueError(f'Missing required postgresql options: {missing}')
        if self.pool_max_connections < 1:
            raise ValueError('pool_max_connections must be at least 1')


def load_options(options: AdapterOptions | Mapping[str, Any] | None = None,
                 **kw: Any) -> AdapterOptions:
    """Build AdapterOptions from an instance, a mapping and/or keywords.

    Keywords override values from `options`. Unknown keys are rejected.
    """
    if isinstance(options, AdapterOptions):
        if not kw:
            return options
        values = {f.name: getattr(options, f.name) for f in fields(AdapterOptions)}
    else:
        values = dict(options or {})
    values.update(kw)

    known = {f.name for f in fields(AdapterOptions)}
    unknown = sorted(set(values) - known)
    if unknown:
        raise ValueError(f'Unknown adapter options: {unknown}')
    return AdapterOptions(**values)


def create_url_from_options(options: AdapterOptions) -> sa.URL:
    """Convert AdapterOptions to a SQLAlchemy URL.

    PostgreSQL uses the psycopg driver, which SQLAlchemy runs in async mode
    for async engines.
    """
    if options.drivername == 'sqlite':
        return sa.URL.create(
            drivername='sqlite',
            database=options.database
        )

    elif options.drivername == 'postgresql':
        query = {'application_name': options.appname}
        if options.timeout:
            query['connect_timeout'] = str(options.timeout)

        return sa.URL.create(
            drivername='postgresql+psycopg',
            username=options.username,
            password=options.password,
            host=options.hostname,
            port=options.port or None,
            database=options.database,
            query=query
        )

    raise ValueError(f'Unsupported database type: {options.drivername}')
