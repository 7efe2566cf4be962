"""
Type adapters package.

- type_mapping: driver type id -> canonical ColumnType (identification only)
- serialization: JSON encoding of driver results for recordings

Values themselves are never converted here. Conversion of database values to
Python objects is left to the driver.
"""
from dbadapter.adapters.serialization import dumps_result, loads_result
from dbadapter.adapters.type_mapping import map_column_type, register_type_map
from dbadapter.adapters.type_mapping import sqlite_storage_class
