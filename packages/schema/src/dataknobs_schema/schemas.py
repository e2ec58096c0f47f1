"""Schema node definitions.

Schema nodes are immutable descriptions of an expected shape. Every modifier
(`as_required`, `with_default`, `custom`, `ensure` and the kind-specific
assertions such as `StringSchema.length`) returns a new node, so a schema can
be shared between any number of validations.

Example:
    ```python
    from dataknobs_schema import (
        ArraySchema, NumberSchema, ObjectSchema, StringSchema,
    )

    user = ObjectSchema({
        "name": StringSchema().length(1, 64),
        "age": NumberSchema(required=False).min(0),
        "tags": ArraySchema(StringSchema(), required=False, default=list),
    })

    user.validate({"name": "Alice", "age": "30", "extra": True})
    # {'name': 'Alice', 'age': 30, 'tags': []}
    ```
"""

from __future__ import annotations

import inspect
import logging
import math
import re
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta, timezone
from re import Pattern as RegexPattern
from types import MappingProxyType
from typing import Any, Callable, ClassVar, Dict, Mapping, Sequence

from . import pipeline
from .config import ValidationOptions
from .conversion import as_utc, format_date, format_number
from .exceptions import ErrorKind, InvalidSchemaError
from .hooks import Hook, HookStage, Hooks
from .kinds import MISSING, SchemaKind, get_type, is_present
from .passes import ValidationPass
from .result import ValidationResult

logger = logging.getLogger(__name__)

EnsureValidator = Callable[[Any, ValidationPass], bool]


@dataclass(frozen=True, eq=False, kw_only=True)
class BaseSchema:
    """Base class of all schema nodes.

    Attributes:
        required: Whether an absent value (after defaults) is an error
        default: Literal default, or a generator called with the pass (or with
            no arguments) when the value is absent. None means no default.
        hooks: Callbacks run at the pipeline stages
    """

    required: bool = True
    default: Any = MISSING
    hooks: Hooks = field(default_factory=Hooks)

    kind: ClassVar[SchemaKind]
    type_tag: ClassVar[str] = "unknown"

    is_present = staticmethod(is_present)
    get_type = staticmethod(get_type)

    @property
    def type(self) -> str:
        """Type tag a present value must have to skip conversion."""
        return self.type_tag

    def is_required(self) -> bool:
        return self.required

    def has_default(self) -> bool:
        return self.default is not MISSING and self.default is not None

    def is_default_runtime_evaluated(self) -> bool:
        return self.has_default() and callable(self.default)

    def get_default(self, pass_: ValidationPass) -> Any:
        """Resolve the default for an absent value.

        Raises:
            ValidationError: If no default is configured
        """
        if self.is_default_runtime_evaluated():
            if _wants_pass(self.default, 0):
                return self.default(pass_)
            return self.default()
        if self.has_default():
            return self.default
        raise pass_.cause_error(
            "Failed to get default. Invalid default value.", ErrorKind.INVALID_SCHEMA
        )

    def as_required(self) -> BaseSchema:
        return replace(self, required=True)

    def as_optional(self) -> BaseSchema:
        return replace(self, required=False)

    def with_default(self, default: Any) -> BaseSchema:
        return replace(self, default=default)

    def custom(self, hook: Hook, stage: HookStage | str = HookStage.AFTER_ALL) -> BaseSchema:
        """Return a copy of this schema with an additional hook.

        Args:
            hook: Callable receiving ``(value, pass_)`` and returning the value
            stage: Pipeline stage to attach the hook to (default: after_all)

        Returns:
            New schema instance
        """
        return replace(self, hooks=self.hooks.add(stage, hook))

    def ensure(self, predicate: EnsureValidator, message: str | None = None) -> BaseSchema:
        """Return a copy of this schema that asserts a condition after validation.

        Args:
            predicate: Callable receiving ``(model, pass_)`` and returning a bool
            message: Error message if the predicate fails

        Returns:
            New schema instance
        """
        failure = "Failed to ensure value." if message is None else message
        takes_pass = _wants_pass(predicate, 1)

        def ensure_hook(model: Any, pass_: ValidationPass) -> Any:
            outcome = predicate(model, pass_) if takes_pass else predicate(model)
            pass_.assert_(bool(outcome), failure)
            return model

        return self.custom(ensure_hook)

    def validate(
        self,
        source: Any = MISSING,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        pass_: ValidationPass | None = None,
        *,
        collect_errors: bool | None = None,
    ) -> Any:
        """Validate a source value and return the model.

        Args:
            source: Raw value (omit for an absent value)
            options: Validation options
            pass_: Pass to validate in; a new root pass is created if omitted
            collect_errors: Shortcut overriding ``options.collect_errors``

        Returns:
            The validated model, None when absent

        Raises:
            TopLevelValidationError: If a root validation recorded any error
            ValidationError: From a nested pass in fail-fast mode
        """
        return pipeline.validate(self, source, options, pass_, collect_errors=collect_errors)

    def check(
        self,
        source: Any = MISSING,
        options: ValidationOptions | Mapping[str, Any] | None = None,
        *,
        collect_errors: bool | None = None,
    ) -> ValidationResult:
        """Validate a source value without raising."""
        return pipeline.check(self, source, options, collect_errors=collect_errors)

    def to_dict(self) -> Dict[str, Any]:
        """Describe this schema tree for external renderers.

        Returns:
            Dictionary with kind, type, requirement, default and children
        """
        data: Dict[str, Any] = {
            "kind": self.kind.value,
            "type": self.type,
            "required": self.required,
            "has_default": self.has_default(),
        }
        if self.has_default() and not self.is_default_runtime_evaluated():
            data["default"] = self.default
        if len(self.hooks):
            data["hooks"] = len(self.hooks)
        data.update(self._describe())
        return data

    def _describe(self) -> Dict[str, Any]:
        return {}

    def _assertion(self, check: Callable[[Any], bool], message: Callable[[Any], str]) -> BaseSchema:
        def assertion_hook(model: Any, pass_: ValidationPass) -> Any:
            if not check(model):
                raise pass_.cause_error(message(model))
            return model

        return self.custom(assertion_hook)


def _wants_pass(function: Callable[..., Any], leading: int) -> bool:
    """Whether function requires a positional argument after ``leading`` ones."""
    try:
        parameters = list(inspect.signature(function).parameters.values())
    except (TypeError, ValueError):
        return False
    if any(parameter.kind is inspect.Parameter.VAR_POSITIONAL for parameter in parameters):
        return True
    positional = [
        parameter
        for parameter in parameters
        if parameter.kind
        in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)
    ]
    return len(positional) > leading and positional[leading].default is inspect.Parameter.empty


def _ensure_schema(owner: BaseSchema, child: Any, where: str) -> BaseSchema:
    if not isinstance(child, BaseSchema):
        raise InvalidSchemaError(
            f"{type(owner).__name__} {where} must be a schema, got {type(child).__name__}",
            owner,
        )
    return child


def _custom_message(message: str | None, default: str) -> str:
    return default if message is None else message


# Primitive schemas


@dataclass(frozen=True, eq=False)
class StringSchema(BaseSchema):
    """Schema for text values."""

    kind = SchemaKind.STRING
    type_tag = "string"

    def length(
        self,
        minimum: int,
        maximum: int | None = None,
        message: str | None = None,
        too_long_message: str | None = None,
    ) -> StringSchema:
        """Require the length to be within [minimum, maximum].

        Args:
            minimum: Minimum length
            maximum: Maximum length (unbounded if None)
            message: Message for any failure, or for too-short values when
                too_long_message is also given
            too_long_message: Message for too-long values
        """
        too_long = message if too_long_message is None else too_long_message

        def length_hook(model: str, pass_: ValidationPass) -> str:
            pass_.assert_(
                len(model) >= minimum,
                _custom_message(message, f'String "{model}" failed minimum length check. ({minimum})'),
            )
            if maximum is not None:
                pass_.assert_(
                    len(model) <= maximum,
                    _custom_message(too_long, f'String "{model}" failed maximum length check. ({maximum})'),
                )
            return model

        return self.custom(length_hook)

    def non_empty(self, message: str | None = None) -> StringSchema:
        return self.length(1, None, message)

    def regex(self, pattern: str | RegexPattern, message: str | None = None) -> StringSchema:
        """Require a regular expression to match somewhere in the value."""
        expression = re.compile(pattern) if isinstance(pattern, str) else pattern
        return self._assertion(
            lambda model: expression.search(model) is not None,
            lambda model: _custom_message(
                message, f'String "{model}" failed regular expression check. ({expression.pattern})'
            ),
        )

    expression = regex


@dataclass(frozen=True, eq=False)
class NumberSchema(BaseSchema):
    """Schema for integers and floats."""

    kind = SchemaKind.NUMBER
    type_tag = "number"

    def min(self, minimum: float, message: str | None = None) -> NumberSchema:
        return self._assertion(
            lambda model: model >= minimum,
            lambda model: _custom_message(
                message,
                f"Number {format_number(model)} failed minimum check. ({format_number(minimum)})",
            ),
        )

    def max(self, maximum: float, message: str | None = None) -> NumberSchema:
        return self._assertion(
            lambda model: model <= maximum,
            lambda model: _custom_message(
                message,
                f"Number {format_number(model)} failed maximum check. ({format_number(maximum)})",
            ),
        )

    def clamp(
        self,
        minimum: float,
        maximum: float,
        message: str | None = None,
        too_large_message: str | None = None,
    ) -> NumberSchema:
        return self.min(minimum, message).max(
            maximum, message if too_large_message is None else too_large_message
        )

    def valid_number(self, not_a_number: bool = False, message: str | None = None) -> NumberSchema:
        """Require a real number (or NaN when ``not_a_number`` is True)."""
        requirement = "Requires NaN" if not_a_number else "Requires valid number"
        return self._assertion(
            lambda model: math.isnan(model) == not_a_number,
            lambda model: _custom_message(
                message,
                f"Number {format_number(model)} failed not a number check. ({requirement})",
            ),
        )

    def integer(self, message: str | None = None) -> NumberSchema:
        return self._assertion(
            lambda model: isinstance(model, int) or float(model).is_integer(),
            lambda model: _custom_message(
                message, f"Number {format_number(model)} failed integer check."
            ),
        )


@dataclass(frozen=True, eq=False)
class BooleanSchema(BaseSchema):
    """Schema for True/False values."""

    kind = SchemaKind.BOOLEAN
    type_tag = "boolean"


def _as_duration(duration: timedelta | float) -> timedelta:
    if isinstance(duration, timedelta):
        return duration
    return timedelta(milliseconds=duration)


@dataclass(frozen=True, eq=False)
class DateSchema(BaseSchema):
    """Schema for date and time values.

    Converted models are timezone-aware UTC datetimes; naive datetimes are
    compared as UTC.
    """

    kind = SchemaKind.DATE
    type_tag = "Date"

    def before(self, moment: datetime, message: str | None = None) -> DateSchema:
        return self._assertion(
            lambda model: as_utc(model) < as_utc(moment),
            lambda model: _custom_message(
                message,
                f'Date "{format_date(model)}" failed check. (Must be before {format_date(moment)})',
            ),
        )

    def after(self, moment: datetime, message: str | None = None) -> DateSchema:
        return self._assertion(
            lambda model: as_utc(model) > as_utc(moment),
            lambda model: _custom_message(
                message,
                f'Date "{format_date(model)}" failed check. (Must be after {format_date(moment)})',
            ),
        )

    def more_than_ago(self, duration: timedelta | float, message: str | None = None) -> DateSchema:
        """Require the date to be further in the past than duration (timedelta or ms)."""
        span = _as_duration(duration)
        return self._assertion(
            lambda model: datetime.now(timezone.utc) - as_utc(model) > span,
            lambda model: _custom_message(
                message, f'Date "{format_date(model)}" failed check. (Must be more than {span} ago)'
            ),
        )

    def less_than_ago(self, duration: timedelta | float, message: str | None = None) -> DateSchema:
        """Require the date to be within duration (timedelta or ms) of now."""
        span = _as_duration(duration)
        return self._assertion(
            lambda model: datetime.now(timezone.utc) - as_utc(model) < span,
            lambda model: _custom_message(
                message, f'Date "{format_date(model)}" failed check. (Must be less than {span} ago)'
            ),
        )


@dataclass(frozen=True, eq=False)
class ConstantSchema(BaseSchema):
    """Schema accepting exactly one literal value."""

    value: Any

    kind = SchemaKind.CONSTANT

    @property
    def type(self) -> str:
        return get_type(self.value)

    def _describe(self) -> Dict[str, Any]:
        return {"const": self.value}


@dataclass(frozen=True, eq=False)
class EnumerationSchema(BaseSchema):
    """Schema accepting one string out of an ordered member list."""

    members: Sequence[str]

    kind = SchemaKind.ENUMERATION
    type_tag = "string"

    def __post_init__(self) -> None:
        members = tuple(self.members)
        if not members:
            raise InvalidSchemaError("EnumerationSchema requires at least one member", self)
        for member in members:
            if not isinstance(member, str):
                raise InvalidSchemaError(
                    f"EnumerationSchema members must be strings, got {type(member).__name__}", self
                )
        object.__setattr__(self, "members", members)

    def _describe(self) -> Dict[str, Any]:
        return {"enum": list(self.members)}


@dataclass(frozen=True, eq=False)
class AnySchema(BaseSchema):
    """Schema accepting any present value unchanged."""

    kind = SchemaKind.ANY
    type_tag = "any"


# Composite schemas


@dataclass(frozen=True, eq=False)
class _FieldsSchema(BaseSchema):
    """Shared behaviour of schemas with a fixed set of named fields."""

    subschema: Mapping[str, BaseSchema]

    type_tag = "object"

    def __post_init__(self) -> None:
        fields = dict(self.subschema)
        for key, child in fields.items():
            _ensure_schema(self, child, f"field '{key}'")
        object.__setattr__(self, "subschema", MappingProxyType(fields))

    def extend(self, other: _FieldsSchema) -> _FieldsSchema:
        """Merge another schema's fields (and defaults) into a new schema.

        Fields of ``other`` win on key collisions. Hooks are not carried over.

        Raises:
            InvalidSchemaError: If the schemas disagree on requirement or on
                whether a default is present
        """
        if not isinstance(other, _FieldsSchema):
            raise InvalidSchemaError(
                f"Cannot extend {type(self).__name__} with {type(other).__name__}", self
            )
        if self.required != other.required:
            raise InvalidSchemaError(
                "Both schemas must agree on being required in order to extend a schema!", self
            )
        if self.has_default() != other.has_default():
            raise InvalidSchemaError(
                "Both or neither default values must be specified in order to extend a schema!",
                self,
            )
        default: Any = MISSING
        if self.has_default():
            base, extension = self, other

            def default(pass_: ValidationPass) -> Dict[str, Any]:
                return {**base.get_default(pass_), **extension.get_default(pass_)}

        logger.debug(
            f"Extending {type(self).__name__} with fields: {', '.join(other.subschema)}"
        )
        return replace(
            self,
            subschema={**self.subschema, **other.subschema},
            default=default,
            hooks=Hooks(),
        )

    def _describe(self) -> Dict[str, Any]:
        return {"properties": {key: child.to_dict() for key, child in self.subschema.items()}}


@dataclass(frozen=True, eq=False)
class ObjectSchema(_FieldsSchema):
    """Object with fixed named fields; unknown input keys are dropped."""

    kind = SchemaKind.OBJECT


@dataclass(frozen=True, eq=False)
class LenientObjectSchema(_FieldsSchema):
    """Object with fixed named fields; unknown input keys are kept verbatim."""

    kind = SchemaKind.LENIENT_OBJECT

    def _describe(self) -> Dict[str, Any]:
        return {**super()._describe(), "additional_properties": True}


@dataclass(frozen=True, eq=False)
class DynamicObjectSchema(BaseSchema):
    """Object whose every value, under any key, matches one schema."""

    subschema: BaseSchema

    kind = SchemaKind.DYNAMIC_OBJECT
    type_tag = "object"

    def __post_init__(self) -> None:
        _ensure_schema(self, self.subschema, "value schema")

    def _describe(self) -> Dict[str, Any]:
        return {"additional_properties": self.subschema.to_dict()}


@dataclass(frozen=True, eq=False)
class ArraySchema(BaseSchema):
    """List whose every item matches one schema."""

    subschema: BaseSchema

    kind = SchemaKind.ARRAY
    type_tag = "array"

    def __post_init__(self) -> None:
        _ensure_schema(self, self.subschema, "item schema")

    def _describe(self) -> Dict[str, Any]:
        return {"items": self.subschema.to_dict()}


@dataclass(frozen=True, eq=False)
class TupleSchema(BaseSchema):
    """Fixed-length list with one schema per position."""

    subschemas: Sequence[BaseSchema]

    kind = SchemaKind.TUPLE
    type_tag = "array"

    def __post_init__(self) -> None:
        members = tuple(self.subschemas)
        for index, child in enumerate(members):
            _ensure_schema(self, child, f"position {index}")
        object.__setattr__(self, "subschemas", members)

    def _describe(self) -> Dict[str, Any]:
        return {"items": [child.to_dict() for child in self.subschemas]}


@dataclass(frozen=True, eq=False)
class OrSetSchema(BaseSchema):
    """Union of member schemas; the first type-matching member that validates wins."""

    schemas: Sequence[BaseSchema]

    kind = SchemaKind.OR_SET
    type_tag = "OrSet"

    def __post_init__(self) -> None:
        members = tuple(self.schemas)
        if not members:
            raise InvalidSchemaError("OrSetSchema requires at least one member schema", self)
        for index, child in enumerate(members):
            _ensure_schema(self, child, f"member #{index + 1}")
        object.__setattr__(self, "schemas", members)

    def _describe(self) -> Dict[str, Any]:
        return {"one_of": [child.to_dict() for child in self.schemas]}
