"""orjson encoding for tool payloads and MySQL row values.

aiomysql hands back a few types orjson rejects: DECIMAL columns as ``Decimal``,
TIME columns as ``timedelta``, BLOB/BINARY columns as ``bytes`` and SET columns as
``set``. ``_encode_mysql_value`` maps those onto JSON values.
"""

import base64
import datetime
import decimal
from typing import Any

import orjson


def _encode_mysql_value(obj: Any) -> Any:
    """orjson ``default=`` hook for the driver types listed above."""
    if isinstance(obj, decimal.Decimal):
        return str(obj)

    if isinstance(obj, datetime.timedelta):
        return obj.total_seconds()

    if isinstance(obj, (bytes, bytearray, memoryview)):
        data = bytes(obj)
        try:
            return data.decode("utf-8")
        except UnicodeDecodeError:
            return base64.b64encode(data).decode("ascii")

    if isinstance(obj, (set, frozenset)):
        return sorted(obj, key=str)

    raise TypeError(f"Cannot encode {type(obj).__name__} as JSON")


def convert_value_to_json_safe(value: Any) -> Any:
    """Return ``value`` as it will appear in the JSON payload (``str()`` if unencodable)."""
    try:
        return orjson.loads(orjson.dumps(value, default=_encode_mysql_value))
    except TypeError:
        return str(value)


def convert_row_to_json_safe(row: dict[str, Any]) -> dict[str, Any]:
    return {column: convert_value_to_json_safe(value) for column, value in row.items()}


def convert_rows_to_json_safe(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return [convert_row_to_json_safe(row) for row in rows]


def dumps(obj: Any) -> str:
    """Encode a tool payload as 2-space indented UTF-8 JSON text."""
    return orjson.dumps(
        obj, default=_encode_mysql_value, option=orjson.OPT_INDENT_2
    ).decode("utf-8")
