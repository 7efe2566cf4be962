"""
Capture-and-replay of query results for tests.

A RecordingContext names one recording file (from the test's name segments)
and selects a mode:

- write: run the query live and append it to the file
- read: return the result recorded for the query, without touching the database
- off: neither; return an empty result

File format, one record per statement:

    <sql text line>
    <serialized result line>
    <blank line>

Read-mode lookups always scan from the top of the file: the first record
whose SQL line contains the query text wins, so a statement recorded twice
replays its first result every time.

Files are append-only and not safe for concurrent writers; one name-segment
sequence must not be written by two tests at once.
"""
import logging
import os
import pathlib
import re
from collections.abc import Awaitable, Callable, Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Self

import aiofiles
import aiofiles.os
from dbadapter.adapters.serialization import dumps_result, loads_result
from dbadapter.exceptions import RecordingNotFound
from dbadapter.types import DriverResult, Query

logger = logging.getLogger(__name__)

__all__ = [
    'RecordingMode',
    'RecordingContext',
    'RecordingHarness',
    'sanitize_file_name',
    'RECORDINGS_ENV',
    'RECORDINGS_DIR_ENV',
]

RECORDINGS_ENV = 'DBADAPTER_RECORDINGS'
RECORDINGS_DIR_ENV = 'DBADAPTER_RECORDINGS_DIR'
DEFAULT_DIRECTORY = 'recordings'
FILE_SUFFIX = '.recording'

_ILLEGAL_CHARS = re.compile(r'[/\\:*?"<>|]')

LiveQuery = Callable[[str, tuple], Awaitable[DriverResult]]


class RecordingMode(str, Enum):
    OFF = 'off'
    READ = 'read'
    WRITE = 'write'

    @classmethod
    def parse(cls, value: str | None) -> 'RecordingMode':
        """Parse a mode selector; unset or empty means OFF.
        """
        if value is None or value == '':
            return cls.OFF
        try:
            return cls(value.strip().lower())
        except ValueError:
            raise ValueError(f'Recording mode must be one of: unset, read, write (got {value!r})')


def sanitize_file_name(name: str) -> str:
    """Replace characters that are illegal in file names with `_`.

    >>> sanitize_file_name('tests/test_a.py::test_b[x?y]')
    'tests_test_a.py__test_b[x_y]'
    """
    return _ILLEGAL_CHARS.sub('_', name)


@dataclass(frozen=True)
class RecordingContext:
    """Which recording file to use and how.

    names: ordered test-name segments the file name is derived from
    mode: read, write or off
    directory: where recording files live
    """
    names: tuple[str, ...]
    mode: RecordingMode = RecordingMode.OFF
    directory: pathlib.Path = field(default_factory=lambda: pathlib.Path(DEFAULT_DIRECTORY))

    def __post_init__(self):
        if isinstance(self.names, str):
            object.__setattr__(self, 'names', (self.names,))
        elif not isinstance(self.names, tuple):
            object.__setattr__(self, 'names', tuple(self.names))
        if not isinstance(self.mode, RecordingMode):
            object.__setattr__(self, 'mode', RecordingMode.parse(self.mode))
        object.__setattr__(self, 'directory', pathlib.Path(self.directory))

    @classmethod
    def from_env(cls, names: Iterable[str], env: Mapping[str, str] | None = None) -> Self:
        """Build a context with mode and directory read from the environment.
        """
        env = os.environ if env is None else env
        return cls(
            names=tuple(names),
            mode=RecordingMode.parse(env.get(RECORDINGS_ENV)),
            directory=pathlib.Path(env.get(RECORDINGS_DIR_ENV) or DEFAULT_DIRECTORY),
            )

    @property
    def file_name(self) -> str:
        return sanitize_file_name('-'.join(self.names)) + FILE_SUFFIX

    @property
    def file_path(self) -> pathlib.Path:
        return self.directory / self.file_name


def encode_sql_line(sql: str) -> str:
    """Escape a statement so it occupies exactly one line.

    >>> encode_sql_line('SELECT 1\\nFROM t')
    'SELECT 1\\\\nFROM t'
    """
    return sql.replace('\\', '\\\\').replace('\r', '\\r').replace('\n', '\\n')


class RecordingHarness:
    """Intercepts query I/O according to a RecordingContext.
    """

    def __init__(self, context: RecordingContext) -> None:
        self.context = context

    @property
    def path(self) -> pathlib.Path:
        return self.context.file_path

    async def perform(self, query: Query, live: LiveQuery) -> DriverResult:
        """Run, record or replay one query.

        Args:
            query: The statement to intercept
            live: Coroutine function running the statement against the database

        Returns
            The live result (write), the recorded result (read) or an empty
            result (off)
        """
        mode = self.context.mode
        if mode == RecordingMode.WRITE:
            result = await live(query.sql, query.args)
            await self.append(query.sql, result)
            return result
        if mode == RecordingMode.READ:
            return loads_result(await self.lookup(query.sql))

        logger.debug(f'Recording mode is off, returning empty result for: {query.sql}')
        return DriverResult.empty()

    async def append(self, sql: str, result: DriverResult) -> None:
        """Append one record to the recording file.
        """
        payload = dumps_result(result)
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
        async with aiofiles.open(self.path, mode='a', encoding='utf-8') as f:
            await f.write(f'{encode_sql_line(sql)}\n{payload}\n\n')
        logger.debug(f'Recorded query to {self.path}')

    async def lookup(self, sql: str) -> str:
        """Return the payload line recorded for `sql`.

        Raises
            RecordingNotFound: no record's SQL line contains `sql`, or the
            file does not exist
        """
        if not await aiofiles.os.path.exists(self.path):
            logger.debug(f'Recording file does not exist: {self.path}')
            raise RecordingNotFound(sql, self.path)

        needle = encode_sql_line(sql)
        async with aiofiles.open(self.path, encoding='utf-8') as f:
            sql_line = None
            async for line in f:
                line = line.rstrip('\n')
                if sql_line is None:
                    if line:
                        sql_line = line
                    continue
                if needle in sql_line:
                    return line
                sql_line = None

        logger.error(f'Search string not found: {sql} ({self.path})')
        raise RecordingNotFound(sql, self.path)

