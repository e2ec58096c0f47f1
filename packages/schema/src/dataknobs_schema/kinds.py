"""Schema kinds, the absent-value sentinel and runtime type tags.

Every schema node belongs to exactly one `SchemaKind`. The pipeline selects
conversion and check functions by kind, while conversion itself is triggered by
comparing a node's declared type tag against `get_type(value)`.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any


class SchemaKind(Enum):
    """Enumeration of the schema node variants.

    Attributes:
        STRING: Text values
        NUMBER: Integers and floats (never booleans)
        BOOLEAN: True/False values
        DATE: Date and time values
        CONSTANT: A single literal value
        ENUMERATION: One string out of a fixed member list
        ANY: Any present value, unchanged
        OBJECT: Fixed named fields, unknown keys dropped
        LENIENT_OBJECT: Fixed named fields, unknown keys kept
        DYNAMIC_OBJECT: One value schema applied under arbitrary keys
        ARRAY: One item schema applied to every index
        TUPLE: One schema per position
        OR_SET: First matching member schema wins
    """

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"
    CONSTANT = "constant"
    ENUMERATION = "enumeration"
    ANY = "any"
    OBJECT = "object"
    LENIENT_OBJECT = "lenient_object"
    DYNAMIC_OBJECT = "dynamic_object"
    ARRAY = "array"
    TUPLE = "tuple"
    OR_SET = "or_set"


class _Missing:
    """Marker for an absent value, distinct from ``None``."""

    _instance: _Missing | None = None

    def __new__(cls) -> _Missing:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Missing:
        return self

    def __deepcopy__(self, memo: dict) -> _Missing:
        return self

    def __reduce__(self) -> str:
        return "MISSING"


MISSING: Any = _Missing()


def is_present(value: Any) -> bool:
    """Check whether a value is present (anything but MISSING, ``None`` included)."""
    return value is not MISSING


def get_type(value: Any) -> str:
    """Get the runtime type tag of a value.

    Args:
        value: Any value

    Returns:
        "null", "boolean", "number", "string", "Date", "array", "object",
        or the class name for any other value (e.g. "Decimal", "ndarray")
    """
    if value is None:
        return "null"
    if value is MISSING:
        return "undefined"
    # bool must be tested before int
    if isinstance(value, bool):
        return "boolean"
    if type(value) in (int, float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, datetime):
        return "Date"
    if type(value) in (list, tuple):
        return "array"
    if type(value) is dict:
        return "object"
    return type(value).__name__
