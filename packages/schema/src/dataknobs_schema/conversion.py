"""Conversions from loosely related source values to each kind's canonical type.

The pipeline only converts when ``get_type(value)`` differs from the schema's
declared type. A converter either returns the converted value or raises a
recorded `ValidationError` of kind INCORRECT_TYPE; it never returns a value of
the wrong type.
"""

from __future__ import annotations

import json
import math
import numbers
from collections.abc import Mapping
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Callable, Dict

import numpy as np

from .exceptions import ErrorKind, ValidationError
from .kinds import SchemaKind, get_type

if TYPE_CHECKING:
    from .passes import ValidationPass
    from .schemas import BaseSchema

Converter = Callable[["BaseSchema", Any, "ValidationPass"], Any]

_FALSE_STRINGS = ("false", "no", "off")

# Tried in order before falling back to ISO-8601 parsing
_DATE_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%dT%H:%M:%SZ",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%dT%H:%M:%S.%fZ",
    "%Y/%m/%d %H:%M:%S",
    "%Y/%m/%d",
    "%Y-%m-%d",
)


def _unable(value: Any, target: str, pass_: ValidationPass, detail: str = "") -> ValidationError:
    suffix = f" ({detail})" if detail else ""
    return pass_.cause_error(
        f"Unable to convert {get_type(value)} to {target}{pass_.location}.{suffix}",
        ErrorKind.INCORRECT_TYPE,
    )


def as_utc(value: datetime) -> datetime:
    """Return an aware UTC datetime, taking naive values as UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(value: datetime) -> str:
    """ISO-8601 text with millisecond precision and a Z suffix."""
    return as_utc(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def format_number(value: int | float) -> str:
    """Shortest text form of a number; integral floats drop the fraction."""
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer():
            return str(int(value))
        return repr(float(value))
    return str(int(value))


def epoch_millis(value: datetime) -> int:
    return round(as_utc(value).timestamp() * 1000)


def from_epoch_millis(millis: float) -> datetime:
    return datetime.fromtimestamp(millis / 1000, tz=timezone.utc)


def parse_date(text: str) -> datetime:
    """Parse a date string, raising ValueError if no known format matches."""
    text = text.strip()
    if not text:
        raise ValueError("Empty string cannot be converted to a date")
    for fmt in _DATE_FORMATS:
        try:
            return as_utc(datetime.strptime(text, fmt))
        except ValueError:
            continue
    return as_utc(datetime.fromisoformat(text.replace("Z", "+00:00")))


def to_string(schema: BaseSchema, value: Any, pass_: ValidationPass) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    if isinstance(value, datetime):
        return format_date(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, (dict, list, tuple)):
        try:
            return json.dumps(value)
        except (TypeError, ValueError) as e:
            raise _unable(value, "string", pass_, str(e)) from e
    return str(value)


def to_number(schema: BaseSchema, value: Any, pass_: ValidationPass) -> int | float:
    if value is None:
        return 0
    if isinstance(value, (bool, np.bool_)):
        return 1 if value else 0
    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise _unable(value, "number", pass_, "empty string")
        try:
            return int(text)
        except ValueError:
            pass
        try:
            return float(text)
        except ValueError:
            raise _unable(value, "number", pass_, f"'{value}' is not numeric") from None
    if isinstance(value, datetime):
        return epoch_millis(value)
    if isinstance(value, np.generic) and np.issubdtype(value.dtype, np.number):
        return value.item()
    if isinstance(value, Decimal):
        if value.is_finite() and value == value.to_integral_value():
            return int(value)
        return float(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        return float(value)
    raise _unable(value, "number", pass_)


def to_boolean(schema: BaseSchema, value: Any, pass_: ValidationPass) -> bool:
    if value is None:
        return False
    if isinstance(value, np.bool_):
        return bool(value)
    if isinstance(value, str):
        if value.strip().lower() in _FALSE_STRINGS:
            return False
        return len(value) > 0
    if isinstance(value, (numbers.Number, np.number)):
        return bool(value != 0)
    raise _unable(value, "boolean", pass_)


def to_date(schema: BaseSchema, value: Any, pass_: ValidationPass) -> datetime:
    if isinstance(value, str):
        if value == "now":
            return datetime.now(timezone.utc)
        try:
            return parse_date(value)
        except ValueError as e:
            raise _unable(value, "Date", pass_, str(e)) from e
    if isinstance(value, np.datetime64):
        if np.isnat(value):
            raise _unable(value, "Date", pass_, "NaT")
        value = int(value.astype("datetime64[ms]").astype("int64"))
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, (numbers.Real, np.number)) and not isinstance(value, (bool, np.bool_)):
        try:
            return from_epoch_millis(float(value))
        except (OverflowError, OSError, ValueError) as e:
            raise _unable(value, "Date", pass_, str(e)) from e
    raise _unable(value, "Date", pass_)


def to_object(schema: BaseSchema, value: Any, pass_: ValidationPass) -> dict:
    if isinstance(value, Mapping):
        return dict(value)
    raise _unable(value, "object", pass_)


def to_array(schema: BaseSchema, value: Any, pass_: ValidationPass) -> list:
    if isinstance(value, str):
        return [value]
    if isinstance(value, np.ndarray):
        return value.tolist()
    raise _unable(value, "array", pass_)


def to_tuple(schema: BaseSchema, value: Any, pass_: ValidationPass) -> list:
    if isinstance(value, np.ndarray):
        return value.tolist()
    raise _unable(value, "tuple", pass_)


def unchanged(schema: BaseSchema, value: Any, pass_: ValidationPass) -> Any:
    return value


CONVERTERS: Dict[SchemaKind, Converter] = {
    SchemaKind.STRING: to_string,
    SchemaKind.NUMBER: to_number,
    SchemaKind.BOOLEAN: to_boolean,
    SchemaKind.DATE: to_date,
    SchemaKind.CONSTANT: unchanged,
    SchemaKind.ENUMERATION: unchanged,
    SchemaKind.ANY: unchanged,
    SchemaKind.OBJECT: to_object,
    SchemaKind.LENIENT_OBJECT: to_object,
    SchemaKind.DYNAMIC_OBJECT: to_object,
    SchemaKind.ARRAY: to_array,
    SchemaKind.TUPLE: to_tuple,
    SchemaKind.OR_SET: unchanged,
}


def convert(schema: BaseSchema, value: Any, pass_: ValidationPass) -> Any:
    """Convert a present value to the schema's canonical type.

    Args:
        schema: Target schema
        value: Present value whose type tag differs from ``schema.type``
        pass_: Current validation pass

    Returns:
        Converted value

    Raises:
        ValidationError: If no conversion path exists
    """
    return CONVERTERS[schema.kind](schema, value, pass_)
