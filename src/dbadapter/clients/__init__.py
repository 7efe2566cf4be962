"""
Driver client registry.
"""
from dbadapter.clients.base import DriverClient as DriverClient
from dbadapter.clients.base import DriverConnection as DriverConnection
from dbadapter.clients.base import get_available_drivers, get_client_class
from dbadapter.clients.base import is_supported_driver
from dbadapter.clients.base import register_client as register_client
from dbadapter.clients.postgres import PostgresClient as PostgresClient
from dbadapter.clients.replay import ReplayClient as ReplayClient
from dbadapter.clients.sqlite import SQLiteClient as SQLiteClient

__all__ = [
    'DriverClient',
    'DriverConnection',
    'PostgresClient',
    'SQLiteClient',
    'ReplayClient',
    'register_client',
    'get_client_class',
    'get_available_drivers',
    'is_supported_driver',
]
