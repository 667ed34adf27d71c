"""Conversion between native BSON values and extended JSON.

Only the tags below are understood. Values of any other BSON type are left
as they are on encode and end up stringified by the JSON writer, so they do
not survive a backup/restore cycle unchanged.

A dict that carries a tag key is always treated as an encoded value. A user
document with a literal ``$oid`` field is therefore indistinguishable from an
encoded ObjectId; this is a property of the format.

Dates are written in UTC and read back as timezone-aware UTC datetimes. A
naive datetime is taken to be UTC, so it decodes to an equal instant but not
to an equal object: ``datetime(2024, 1, 1)`` comes back with ``tzinfo=utc``.
Dates outside the year range 1-9999 are carried as ``bson.DatetimeMS``.
"""

import math
import re
from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Union

from bson import DatetimeMS, Decimal128, Int64, ObjectId, Timestamp, json_util
from bson.codec_options import DatetimeConversion

from .exceptions import MalformedExtendedValueError

OID = "$oid"
DATE = "$date"
NUMBER_DECIMAL = "$numberDecimal"
NUMBER_DOUBLE = "$numberDouble"
NUMBER_INT = "$numberInt"
NUMBER_LONG = "$numberLong"
TIMESTAMP = "$timestamp"

EXTENDED_TAGS = (OID, DATE, NUMBER_DECIMAL, NUMBER_DOUBLE, NUMBER_INT, NUMBER_LONG, TIMESTAMP)

INT32_MIN, INT32_MAX = -(2 ** 31), 2 ** 31 - 1
INT64_MIN, INT64_MAX = -(2 ** 63), 2 ** 63 - 1
UINT32_MAX = 2 ** 32 - 1

# ASCII digits only; int() and float() would also take "1_000" or non-ASCII digits.
INTEGER_PATTERN = re.compile(r"-?[0-9]+")
DOUBLE_PATTERN = re.compile(r"-?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][-+]?[0-9]+)?|NaN|Infinity|-Infinity")

# UTC-aware datetimes, falling back to DatetimeMS outside datetime's range.
DATE_OPTIONS = json_util.JSONOptions(
    tz_aware=True,
    tzinfo=timezone.utc,
    datetime_conversion=DatetimeConversion.DATETIME_AUTO,
)


def format_date(value: datetime) -> str:
    """Format a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are taken to be UTC, which is how pymongo stores them.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    value = value.astimezone(timezone.utc)
    return (
        f"{value.year:04d}-{value.month:02d}-{value.day:02d}"
        f"T{value.hour:02d}:{value.minute:02d}:{value.second:02d}"
        f".{value.microsecond // 1000:03d}Z"
    )


def _encode_date(value: Union[datetime, DatetimeMS]) -> Dict[str, Any]:
    millis = value if isinstance(value, DatetimeMS) else DatetimeMS(value)
    converted = millis.as_datetime(DATE_OPTIONS)
    if isinstance(converted, DatetimeMS):
        return {DATE: {NUMBER_LONG: str(int(converted))}}
    return {DATE: format_date(converted)}


def _encode_double(value: float) -> Any:
    if math.isnan(value):
        return {NUMBER_DOUBLE: "NaN"}
    if math.isinf(value):
        return {NUMBER_DOUBLE: "Infinity" if value > 0 else "-Infinity"}
    return value


def _encode_int(value: int) -> Any:
    if INT32_MIN <= value <= INT32_MAX:
        return value
    if INT64_MIN <= value <= INT64_MAX:
        return {NUMBER_LONG: str(value)}
    return value


def encode_value(value: Any) -> Any:
    """Convert a native value into its extended JSON form.

    Returns new containers; the input is never modified.
    """
    if value is None or isinstance(value, (str, bool)):
        return value
    if isinstance(value, ObjectId):
        return {OID: str(value)}
    if isinstance(value, (datetime, DatetimeMS)):
        return _encode_date(value)
    if isinstance(value, Decimal128):
        return {NUMBER_DECIMAL: str(value)}
    # Int64 subclasses int, so it has to be checked first
    if isinstance(value, Int64):
        return {NUMBER_LONG: str(int(value))}
    if isinstance(value, int):
        return _encode_int(value)
    if isinstance(value, float):
        return _encode_double(value)
    if isinstance(value, Timestamp):
        return {TIMESTAMP: {"t": value.time, "i": value.inc}}
    if isinstance(value, Mapping):
        return {key: encode_value(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item) for item in value]
    return value


def encode_documents(documents: List[Mapping]) -> List[Any]:
    """Encode a sequence of documents, preserving order."""
    return [encode_value(document) for document in documents]


# Decoders

def _coerce_int(raw: Any, path: str, tag: str, low: int, high: int) -> int:
    if isinstance(raw, bool):
        raise MalformedExtendedValueError(path, tag, f"expected an integer, got {raw!r}")
    if isinstance(raw, int):
        number = raw
    elif isinstance(raw, float) and raw.is_integer():
        number = int(raw)
    elif isinstance(raw, str) and INTEGER_PATTERN.fullmatch(raw):
        number = int(raw, 10)
    else:
        raise MalformedExtendedValueError(path, tag, f"expected an integer, got {raw!r}")

    if not low <= number <= high:
        raise MalformedExtendedValueError(path, tag, f"{number} is out of range [{low}, {high}]")
    return number


def _decode_oid(raw: Any, path: str) -> ObjectId:
    if not isinstance(raw, str) or len(raw) != 24 or not ObjectId.is_valid(raw):
        raise MalformedExtendedValueError(path, OID, f"expected 24 hex characters, got {raw!r}")
    return ObjectId(raw)


def _decode_date(raw: Any, path: str) -> Union[datetime, DatetimeMS]:
    """Decode a ``$date`` payload; out-of-range instants come back as DatetimeMS."""
    if isinstance(raw, Mapping) and NUMBER_LONG in raw:
        raw = _coerce_int(raw[NUMBER_LONG], path, DATE, INT64_MIN, INT64_MAX)
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        raw = _coerce_int(raw, path, DATE, INT64_MIN, INT64_MAX)
    elif not isinstance(raw, str):
        raise MalformedExtendedValueError(path, DATE, f"expected an ISO-8601 string, got {raw!r}")

    try:
        return json_util.object_hook({DATE: raw}, json_options=DATE_OPTIONS)
    except (ValueError, TypeError, IndexError, OverflowError):
        raise MalformedExtendedValueError(path, DATE, f"not an ISO-8601 date: {raw!r}") from None


def _decode_decimal(raw: Any, path: str) -> Decimal128:
    if not isinstance(raw, str):
        raise MalformedExtendedValueError(path, NUMBER_DECIMAL, f"expected a decimal string, got {raw!r}")
    try:
        return Decimal128(raw)
    except (ArithmeticError, ValueError, TypeError) as e:
        raise MalformedExtendedValueError(path, NUMBER_DECIMAL, f"{raw!r} ({e})") from e


def _decode_double(raw: Any, path: str) -> float:
    if isinstance(raw, bool) or not isinstance(raw, (int, float, str)):
        raise MalformedExtendedValueError(path, NUMBER_DOUBLE, f"expected a number, got {raw!r}")
    if isinstance(raw, str) and not DOUBLE_PATTERN.fullmatch(raw):
        raise MalformedExtendedValueError(path, NUMBER_DOUBLE, f"not a number: {raw!r}")
    return float(raw)


def _decode_int(raw: Any, path: str) -> int:
    return _coerce_int(raw, path, NUMBER_INT, INT32_MIN, INT32_MAX)


def _decode_long(raw: Any, path: str) -> Int64:
    return Int64(_coerce_int(raw, path, NUMBER_LONG, INT64_MIN, INT64_MAX))


def _decode_timestamp(raw: Any, path: str) -> Timestamp:
    if not isinstance(raw, Mapping) or "t" not in raw or "i" not in raw:
        raise MalformedExtendedValueError(path, TIMESTAMP, f"expected an object with 't' and 'i', got {raw!r}")
    seconds = _coerce_int(raw["t"], f"{path}.t", TIMESTAMP, 0, UINT32_MAX)
    ordinal = _coerce_int(raw["i"], f"{path}.i", TIMESTAMP, 0, UINT32_MAX)
    return Timestamp(seconds, ordinal)


_DECODERS: Dict[str, Callable[[Any, str], Any]] = {
    OID: _decode_oid,
    DATE: _decode_date,
    NUMBER_DECIMAL: _decode_decimal,
    NUMBER_DOUBLE: _decode_double,
    NUMBER_INT: _decode_int,
    NUMBER_LONG: _decode_long,
    TIMESTAMP: _decode_timestamp,
}


def decode_value(value: Any, path: str = "$") -> Any:
    """Convert an extended JSON value back into native values.

    Args:
        value: Parsed JSON value
        path: Location of ``value`` used in error messages

    Raises:
        MalformedExtendedValueError: If a tag payload cannot be converted
    """
    if isinstance(value, list):
        return [decode_value(item, f"{path}[{index}]") for index, item in enumerate(value)]
    if not isinstance(value, Mapping):
        return value

    tags = [tag for tag in EXTENDED_TAGS if tag in value]
    if len(tags) > 1:
        raise MalformedExtendedValueError(path, tags[0], f"object carries several type tags: {', '.join(tags)}")
    if tags:
        tag = tags[0]
        return _DECODERS[tag](value[tag], path)

    return {key: decode_value(item, f"{path}.{key}") for key, item in value.items()}


def decode_documents(items: List[Any]) -> List[Any]:
    """Decode a parsed snapshot array, preserving order."""
    return [decode_value(item, f"$[{index}]") for index, item in enumerate(items)]
