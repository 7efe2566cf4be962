"""
Canonical data shapes exchanged with the query engine.

- Query: one SQL statement plus its positional arguments
- ColumnType: driver-independent column type tag
- ResultSet: column names, canonical types and rows of a query
- Field/DriverResult: the raw, driver-shaped result a client returns
  and a recording stores
- TransactionOptions: options handed to the engine with a transaction
"""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Self

import pandas as pd

logger = logging.getLogger(__name__)

__all__ = [
    'Query',
    'ColumnType',
    'ResultSet',
    'Field',
    'DriverResult',
    'TransactionOptions',
]


@dataclass(frozen=True)
class Query:
    """SQL text and its ordered parameter values.
    """
    sql: str
    args: tuple = ()

    def __post_init__(self):
        if not isinstance(self.args, tuple):
            object.__setattr__(self, 'args', tuple(self.args))


class ColumnType(str, Enum):
    """Canonical column types.

    UNKNOWN is a legal value for driver types without a mapping.
    """
    INT32 = 'int32'
    INT64 = 'int64'
    FLOAT = 'float'
    DOUBLE = 'double'
    NUMERIC = 'numeric'
    BOOLEAN = 'boolean'
    CHAR = 'char'
    TEXT = 'text'
    DATE = 'date'
    TIME = 'time'
    DATETIME = 'datetime'
    JSON = 'json'
    ENUM = 'enum'
    BYTES = 'bytes'
    UUID = 'uuid'

    INT32_ARRAY = 'int32-array'
    INT64_ARRAY = 'int64-array'
    FLOAT_ARRAY = 'float-array'
    DOUBLE_ARRAY = 'double-array'
    NUMERIC_ARRAY = 'numeric-array'
    BOOLEAN_ARRAY = 'boolean-array'
    CHAR_ARRAY = 'char-array'
    TEXT_ARRAY = 'text-array'
    DATE_ARRAY = 'date-array'
    TIME_ARRAY = 'time-array'
    DATETIME_ARRAY = 'datetime-array'
    JSON_ARRAY = 'json-array'
    BYTES_ARRAY = 'bytes-array'
    UUID_ARRAY = 'uuid-array'

    UNKNOWN = 'unknown'

    def __str__(self) -> str:
        return self.value


@dataclass
class ResultSet:
    """Result of a query in canonical form.

    `column_types[i]` describes every `rows[*][i]`.
    """
    column_names: list[str] = field(default_factory=list)
    column_types: list[ColumnType] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)

    def __post_init__(self):
        if len(self.column_names) != len(self.column_types):
            raise ValueError(
                f'Got {len(self.column_names)} column names but {len(self.column_types)} column types')
        width = len(self.column_names)
        for i, row in enumerate(self.rows):
            if len(row) != width:
                raise ValueError(f'Row {i} has {len(row)} values, expected {width}')

    def __len__(self) -> int:
        return len(self.rows)

    def to_dataframe(self) -> pd.DataFrame:
        """Load the rows into a DataFrame.

        Columns are preserved for empty results; the canonical types are kept
        in `df.attrs['column_types']`.
        """
        df = pd.DataFrame.from_records(self.rows, columns=self.column_names)
        df.attrs['column_types'] = {
            name: str(ctype) for name, ctype in zip(self.column_names, self.column_types)
            }
        return df


@dataclass(frozen=True)
class Field:
    """Column descriptor as reported by the driver.
    """
    name: str
    type_id: Any = None


@dataclass
class DriverResult:
    """Raw query result in array row mode.

    `row_count` is None when the driver reports no count (e.g. for `BEGIN`).
    """
    fields: list[Field] = field(default_factory=list)
    rows: list[list[Any]] = field(default_factory=list)
    row_count: int | None = None

    @classmethod
    def empty(cls) -> Self:
        return cls()

    def to_dict(self) -> dict[str, Any]:
        return {
            'fields': [{'name': f.name, 'type_id': f.type_id} for f in self.fields],
            'rows': self.rows,
            'row_count': self.row_count,
            }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        fields = [Field(f['name'], f.get('type_id')) for f in data['fields']]
        rows = [list(row) for row in data['rows']]
        return cls(fields=fields, rows=rows, row_count=data.get('row_count'))


@dataclass(frozen=True)
class TransactionOptions:
    """Options the engine reads when a transaction starts.

    use_phantom_query: whether the engine should skip sending its own
    opening statement (`BEGIN`) and treat the transaction as implicitly
    started.
    """
    use_phantom_query: bool = False
