"""
Column type mapping from driver type identifiers to canonical column types.

Each driver flavour owns an explicit table:

1. postgres: type OIDs, taken from the psycopg type registry
2. sqlite: storage class or declared type names

Lookups are total. Identifiers missing from a table resolve to
ColumnType.UNKNOWN, so new native types never break result mapping.
"""
import datetime
import decimal
import logging
from collections.abc import Iterable
from typing import Any

from dbadapter.types import ColumnType
from psycopg.postgres import types

logger = logging.getLogger(__name__)

__all__ = [
    'map_column_type',
    'register_type_map',
    'sqlite_storage_class',
    'postgres_types',
    'sqlite_types',
    'FIRST_USER_DEFINED_OID',
]

# OIDs from this value up belong to user-defined types (enums, domains)
FIRST_USER_DEFINED_OID = 10000


def _oids(*names: str, array: bool = False) -> list[int]:
    oids = []
    for name in names:
        info = types.get(name)
        if info is None:
            logger.debug(f'psycopg has no type named {name!r}')
            continue
        oids.append(info.array_oid if array else info.oid)
    return oids


postgres_types: dict[int, ColumnType] = {}
for names, scalar, array in [
    (('int2', 'int4'), ColumnType.INT32, ColumnType.INT32_ARRAY),
    (('int8', 'oid'), ColumnType.INT64, ColumnType.INT64_ARRAY),
    (('float4',), ColumnType.FLOAT, ColumnType.FLOAT_ARRAY),
    (('float8',), ColumnType.DOUBLE, ColumnType.DOUBLE_ARRAY),
    (('numeric', 'money'), ColumnType.NUMERIC, ColumnType.NUMERIC_ARRAY),
    (('bool',), ColumnType.BOOLEAN, ColumnType.BOOLEAN_ARRAY),
    (('"char"',), ColumnType.CHAR, ColumnType.CHAR_ARRAY),
    (('text', 'varchar', 'bpchar', 'name', 'bit', 'varbit', 'inet', 'cidr', 'xml'),
     ColumnType.TEXT, ColumnType.TEXT_ARRAY),
    (('date',), ColumnType.DATE, ColumnType.DATE_ARRAY),
    (('time', 'timetz'), ColumnType.TIME, ColumnType.TIME_ARRAY),
    (('timestamp', 'timestamptz'), ColumnType.DATETIME, ColumnType.DATETIME_ARRAY),
    (('json', 'jsonb'), ColumnType.JSON, ColumnType.JSON_ARRAY),
    (('bytea',), ColumnType.BYTES, ColumnType.BYTES_ARRAY),
    (('uuid',), ColumnType.UUID, ColumnType.UUID_ARRAY),
]:
    for v in _oids(*names):
        postgres_types[v] = scalar
    for v in _oids(*names, array=True):
        postgres_types[v] = array


sqlite_types: dict[str, ColumnType] = {
    'INTEGER': ColumnType.INT64,
    'REAL': ColumnType.DOUBLE,
    'TEXT': ColumnType.TEXT,
    'BLOB': ColumnType.BYTES,
    'NULL': ColumnType.INT32,
    'NUMERIC': ColumnType.NUMERIC,
    'BOOLEAN': ColumnType.BOOLEAN,
    'DATE': ColumnType.DATE,
    'DATETIME': ColumnType.DATETIME,
    'TIME': ColumnType.TIME,
    }


def _resolve_postgres(type_id: Any) -> ColumnType:
    if type_id in postgres_types:
        return postgres_types[type_id]
    if isinstance(type_id, int) and not isinstance(type_id, bool) \
            and type_id >= FIRST_USER_DEFINED_OID:
        return ColumnType.ENUM
    return ColumnType.UNKNOWN


def _resolve_sqlite(type_id: Any) -> ColumnType:
    if not isinstance(type_id, str):
        return ColumnType.UNKNOWN
    return sqlite_types.get(type_id.upper(), ColumnType.UNKNOWN)


_resolvers = {
    'postgres': _resolve_postgres,
    'sqlite': _resolve_sqlite,
    }


def register_type_map(flavour: str, mapping: dict[Any, ColumnType]) -> None:
    """Add or override type ids for a flavour.

    Entries are looked up before the built-in table of that flavour.
    """
    fallback = _resolvers.get(flavour)

    def resolve(type_id: Any) -> ColumnType:
        if type_id in mapping:
            return mapping[type_id]
        if fallback is None:
            return ColumnType.UNKNOWN
        return fallback(type_id)

    _resolvers[flavour] = resolve


def map_column_type(flavour: str, type_id: Any) -> ColumnType:
    """Map a driver-native column type id to a canonical ColumnType.

    Never raises: unknown flavours, unknown ids, None and unhashable ids
    all resolve to ColumnType.UNKNOWN.

    >>> map_column_type('postgres', 23)
    <ColumnType.INT32: 'int32'>
    >>> map_column_type('postgres', 3)
    <ColumnType.UNKNOWN: 'unknown'>
    >>> map_column_type('sqlite', 'integer')
    <ColumnType.INT64: 'int64'>
    """
    resolver = _resolvers.get(flavour)
    if resolver is None:
        return ColumnType.UNKNOWN
    try:
        return resolver(type_id)
    except TypeError:
        return ColumnType.UNKNOWN


def sqlite_storage_class(values: Iterable[Any]) -> str:
    """Infer the storage class of a SQLite result column.

    sqlite3 cursors carry no type codes, so the first non-null value decides.
    A column holding only NULLs reports 'NULL'.
    """
    for value in values:
        if value is None:
            continue
        if isinstance(value, bool):
            return 'BOOLEAN'
        if isinstance(value, int):
            return 'INTEGER'
        if isinstance(value, float):
            return 'REAL'
        if isinstance(value, decimal.Decimal):
            return 'NUMERIC'
        if isinstance(value, str):
            return 'TEXT'
        if isinstance(value, (bytes, bytearray, memoryview)):
            return 'BLOB'
        if isinstance(value, datetime.datetime):
            return 'DATETIME'
        if isinstance(value, datetime.date):
            return 'DATE'
        if isinstance(value, datetime.time):
            return 'TIME'
        return 'UNKNOWN'
    return 'NULL'
