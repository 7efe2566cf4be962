"""
JSON encoding of driver results for recording files.

A payload is one line of JSON:

    {"fields": [{"name": ..., "type_id": ...}], "rows": [[...]], "row_count": n}

Values JSON cannot represent are tagged as {"$type": <tag>, "value": <text>}
and restored when the payload is read back. Sets come back as sets, tuples
as lists. Driver dicts that happen to carry a `$type` key are wrapped as
`object` so they are never mistaken for a tag.
"""
import base64
import datetime
import decimal
import ipaddress
import json
import logging
import uuid
from typing import Any

import dateutil.parser
from dbadapter.exceptions import SerializationError
from dbadapter.types import DriverResult

logger = logging.getLogger(__name__)

__all__ = ['dumps_result', 'loads_result', 'encode_value', 'decode_value', 'escape_objects']

TYPE_KEY = '$type'

_isoparser = dateutil.parser.isoparser()


def encode_value(val: Any) -> Any:
    """Tag a value JSON cannot carry natively.

    >>> encode_value(datetime.date(2023, 5, 15))
    {'$type': 'date', 'value': '2023-05-15'}
    >>> encode_value(decimal.Decimal('1.50'))
    {'$type': 'decimal', 'value': '1.50'}
    """
    if isinstance(val, datetime.datetime):
        return {TYPE_KEY: 'datetime', 'value': val.isoformat()}
    if isinstance(val, datetime.date):
        return {TYPE_KEY: 'date', 'value': val.isoformat()}
    if isinstance(val, datetime.time):
        return {TYPE_KEY: 'time', 'value': val.isoformat()}
    if isinstance(val, datetime.timedelta):
        return {TYPE_KEY: 'timedelta', 'value': [val.days, val.seconds, val.microseconds]}
    if isinstance(val, decimal.Decimal):
        return {TYPE_KEY: 'decimal', 'value': str(val)}
    if isinstance(val, uuid.UUID):
        return {TYPE_KEY: 'uuid', 'value': str(val)}
    if isinstance(val, (bytes, bytearray, memoryview)):
        return {TYPE_KEY: 'bytes', 'value': base64.b64encode(bytes(val)).decode('ascii')}
    # interfaces subclass addresses, so they are checked first
    if isinstance(val, (ipaddress.IPv4Interface, ipaddress.IPv6Interface)):
        return {TYPE_KEY: 'ip_interface', 'value': str(val)}
    if isinstance(val, (ipaddress.IPv4Address, ipaddress.IPv6Address)):
        return {TYPE_KEY: 'ip_address', 'value': str(val)}
    if isinstance(val, (ipaddress.IPv4Network, ipaddress.IPv6Network)):
        return {TYPE_KEY: 'ip_network', 'value': str(val)}
    if isinstance(val, frozenset):
        return {TYPE_KEY: 'frozenset', 'value': list(val)}
    if isinstance(val, set):
        return {TYPE_KEY: 'set', 'value': list(val)}
    raise TypeError(f'Object of type {type(val).__name__} is not serializable')


def escape_objects(val: Any) -> Any:
    """Wrap driver dicts that carry a `$type` key so they are not read back as tags.

    json.dumps writes dicts without consulting `default`, so a JSON column
    holding e.g. {"$type": "date", "value": ...} must be escaped up front.
    The wrapped dict is stored as key/value pairs: the decoder works bottom-up
    and would otherwise restore the inner dict before seeing the wrapper.

    >>> escape_objects({'$type': 'date', 'value': '2020-01-01'})
    {'$type': 'object', 'value': [['$type', 'date'], ['value', '2020-01-01']]}
    """
    if isinstance(val, dict):
        items = {k: escape_objects(v) for k, v in val.items()}
        if TYPE_KEY in items:
            return {TYPE_KEY: 'object', 'value': [[k, v] for k, v in items.items()]}
        return items
    if isinstance(val, (list, tuple)):
        return [escape_objects(v) for v in val]
    return val


_decoders = {
    'datetime': dateutil.parser.isoparse,
    'date': lambda v: dateutil.parser.isoparse(v).date(),
    'time': _isoparser.parse_isotime,
    'timedelta': lambda v: datetime.timedelta(days=v[0], seconds=v[1], microseconds=v[2]),
    'decimal': decimal.Decimal,
    'uuid': uuid.UUID,
    'bytes': lambda v: base64.b64decode(v.encode('ascii')),
    'ip_address': ipaddress.ip_address,
    'ip_interface': ipaddress.ip_interface,
    'ip_network': ipaddress.ip_network,
    'set': set,
    'frozenset': frozenset,
    'object': dict,
    }


def decode_value(obj: dict) -> Any:
    """Restore a tagged value; other objects pass through unchanged.
    """
    tag = obj.get(TYPE_KEY)
    if tag is None or 'value' not in obj or len(obj) != 2:
        return obj
    decoder = _decoders.get(tag)
    if decoder is None:
        return obj
    return decoder(obj['value'])


def dumps_result(result: DriverResult) -> str:
    """Serialize a driver result to a single line of JSON.
    """
    data = result.to_dict()
    data['rows'] = escape_objects(data['rows'])
    try:
        return json.dumps(data, default=encode_value)
    except (TypeError, ValueError) as err:
        raise SerializationError(f'Cannot serialize result: {err}') from err


def loads_result(payload: str) -> DriverResult:
    """Parse a recorded payload back into a driver result.
    """
    try:
        data = json.loads(payload, object_hook=decode_value)
    except (ValueError, TypeError, decimal.InvalidOperation) as err:
        raise SerializationError(f'Malformed recording payload: {err}') from err
    if not isinstance(data, dict) or 'fields' not in data or 'rows' not in data:
        raise SerializationError(f'Recording payload is missing fields/rows: {payload[:200]!r}')
    try:
        return DriverResult.from_dict(data)
    except (KeyError, TypeError) as err:
        raise SerializationError(f'Malformed recording payload: {err}') from err
