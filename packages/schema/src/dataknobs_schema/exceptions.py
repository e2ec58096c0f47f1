"""Exceptions for the dataknobs_schema package.

All errors derive from `SchemaError`, a `DataknobsError` from dataknobs_common,
so they carry a human-readable message plus an optional context dictionary and
can be caught alongside the errors of the other dataknobs packages.

Example:
    ```python
    from dataknobs_schema import NumberSchema, TopLevelValidationError

    try:
        NumberSchema().validate("not a number")
    except TopLevelValidationError as e:
        for error in e.errors:
            print(error.path_string, error.kind, error.message)
    ```
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Any, Dict

from dataknobs_common import (
    ConfigurationError,
    DataknobsError,
    ValidationError as BaseValidationError,
)

if TYPE_CHECKING:
    from .passes import ValidationPass


class ErrorKind(Enum):
    """Categories of validation failures.

    Attributes:
        MISSING: A required value was absent and no default applied
        INCORRECT_TYPE: A present value could not be converted to the declared type
        FAILED_CUSTOM_VALIDATOR: A hook or built-in assertion failed
        INVALID_SCHEMA: A malformed schema tree was encountered during validation
        OR_SET_EXHAUSTED: No member of an OrSet accepted the value
    """

    MISSING = "missing"
    INCORRECT_TYPE = "incorrect_type"
    FAILED_CUSTOM_VALIDATOR = "failed_custom_validator"
    INVALID_SCHEMA = "invalid_schema"
    OR_SET_EXHAUSTED = "or_set_exhausted"


class SchemaError(DataknobsError):
    """Base exception for the dataknobs_schema package.

    Attributes:
        message: Human-readable error message
    """

    def __init__(
        self,
        message: str,
        context: Dict[str, Any] | None = None,
        details: Dict[str, Any] | None = None,
    ):
        super().__init__(message, context=context, details=details)
        self.message = message


class InvalidSchemaError(SchemaError, ConfigurationError):
    """Raised when a schema definition is malformed.

    This is a construction-time error (bad hook stage, inconsistent extension,
    children that are not schemas), as opposed to a `ValidationError`, which
    always describes a problem with the validated data.
    """

    def __init__(self, message: str, schema: Any = None):
        self.schema = schema
        context = {"schema": type(schema).__name__} if schema is not None else None
        super().__init__(message, context=context)


class ValidationError(SchemaError, BaseValidationError):
    """A single validation failure bound to the pass where it originated.

    Args:
        pass_: The validation pass that raised the error
        message: Human-readable error message
        kind: Category of the failure
    """

    def __init__(
        self,
        pass_: ValidationPass,
        message: str,
        kind: ErrorKind = ErrorKind.FAILED_CUSTOM_VALIDATOR,
    ):
        self.pass_ = pass_
        self.kind = kind
        super().__init__(
            message,
            context={"path": list(pass_.path), "kind": kind.value},
        )

    @property
    def path(self) -> tuple[str | int, ...]:
        """Path from the validated root to the failing value."""
        return self.pass_.path

    @property
    def path_string(self) -> str:
        """Dot-joined form of `path` ("" at the root)."""
        return self.pass_.path_string

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}({self.message!r}, "
            f"path={self.path_string!r}, kind={self.kind.value})"
        )


class TopLevelValidationError(ValidationError):
    """Raised once by a root validation when any error was recorded.

    Attributes:
        errors: Every ValidationError collected by the root pass, in order
    """

    def __init__(self, pass_: ValidationPass):
        self.errors = list(pass_.errors)
        messages = "\n * ".join(error.message for error in self.errors)
        kind = self.errors[0].kind if self.errors else ErrorKind.FAILED_CUSTOM_VALIDATOR
        super().__init__(
            pass_,
            f"Encountered {len(self.errors)} error(s).\n * {messages}",
            kind=kind,
        )
        self.context["error_count"] = len(self.errors)

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]
