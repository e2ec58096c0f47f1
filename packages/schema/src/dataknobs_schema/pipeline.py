"""The per-node validation pipeline and the public entry points.

`run` executes the fixed stage sequence for one schema node and returns a
`ValidationResult`. Only `validate` turns recorded errors into exceptions:
a root invocation raises a single `TopLevelValidationError`, while a nested
invocation re-raises its first error (or returns None when collecting errors).
"""

from __future__ import annotations

import json
import logging
from dataclasses import replace
from functools import partial
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping

from . import traversal
from .config import ValidationOptions
from .conversion import convert
from .exceptions import ErrorKind, TopLevelValidationError, ValidationError
from .hooks import HookStage
from .kinds import MISSING, SchemaKind, get_type, is_present
from .passes import ValidationPass
from .result import ValidationResult

if TYPE_CHECKING:
    from .schemas import BaseSchema

logger = logging.getLogger(__name__)

Check = Callable[["BaseSchema", Any, ValidationOptions, ValidationPass], ValidationResult]


def _accept(
    schema: BaseSchema, value: Any, options: ValidationOptions, pass_: ValidationPass
) -> ValidationResult:
    return ValidationResult.success(value, pass_)


def _as_json(value: Any) -> str:
    try:
        return json.dumps(value, default=str)
    except (TypeError, ValueError):
        return repr(value)


def _check_constant(
    schema: BaseSchema, value: Any, options: ValidationOptions, pass_: ValidationPass
) -> ValidationResult:
    # True == 1 in Python, so the type tags must agree as well
    matches = get_type(value) == get_type(schema.value) and value == schema.value
    pass_.assert_(
        matches,
        f"Supplied source ({_as_json(value)}) did not match expected constant value "
        f"({_as_json(schema.value)}){pass_.location}.",
        ErrorKind.INCORRECT_TYPE,
    )
    return ValidationResult.success(value, pass_)


def _check_enumeration(
    schema: BaseSchema, value: Any, options: ValidationOptions, pass_: ValidationPass
) -> ValidationResult:
    pass_.assert_(
        value in schema.members,
        f'"{value}" is not a valid enumeration value{pass_.location}. '
        f"(Expected: {', '.join(schema.members)})",
        ErrorKind.INCORRECT_TYPE,
    )
    return ValidationResult.success(value, pass_)


def run(
    schema: BaseSchema, source: Any, options: ValidationOptions, pass_: ValidationPass
) -> ValidationResult:
    """Run every pipeline stage of one schema node.

    Stages, in order: before_all and before_default hooks, default
    resolution, after_default hooks, the required check, before_conversion
    hooks, conversion, after_conversion hooks, the kind-specific check and
    after_all hooks. An absent optional value skips everything after the
    required check.

    Args:
        schema: Node to validate against
        source: Raw value, MISSING when absent
        options: Resolved validation options
        pass_: Pass for this node

    Returns:
        Success with the model value (MISSING when absent), or failure with
        the errors raised at or below this node. When collecting errors, a
        composite node whose children failed still succeeds with the valid part
        of its model; the child errors stay recorded on the root pass.
    """
    check = CHECKS.get(getattr(schema, "kind", None))
    try:
        if check is None:
            raise pass_.cause_error(
                f"Invalid schema{pass_.location}: {type(schema).__name__} is not a schema node.",
                ErrorKind.INVALID_SCHEMA,
            )
        hooks = schema.hooks
        value = hooks.run(HookStage.BEFORE_ALL, source, pass_)

        value = hooks.run(HookStage.BEFORE_DEFAULT, value, pass_)
        if not is_present(value) and schema.has_default():
            value = schema.get_default(pass_)
        value = hooks.run(HookStage.AFTER_DEFAULT, value, pass_)

        if not is_present(value):
            if schema.is_required():
                raise pass_.cause_error(
                    f"Missing required {schema.type}{pass_.location}.", ErrorKind.MISSING
                )
            return ValidationResult.success(MISSING, pass_)

        value = hooks.run(HookStage.BEFORE_CONVERSION, value, pass_)
        if get_type(value) != schema.type:
            logger.debug(f"Converting {get_type(value)} to {schema.type}{pass_.location}")
            value = convert(schema, value, pass_)
        value = hooks.run(HookStage.AFTER_CONVERSION, value, pass_)

        result = check(schema, value, options, pass_)
        if not result.valid:
            return result

        value = hooks.run(HookStage.AFTER_ALL, result.value, pass_)
        return ValidationResult.success(value, pass_)
    except ValidationError as error:
        pass_.record(error)
        return ValidationResult.failure([error], pass_=pass_)


CHECKS: Dict[SchemaKind, Check] = {
    SchemaKind.STRING: _accept,
    SchemaKind.NUMBER: _accept,
    SchemaKind.BOOLEAN: _accept,
    SchemaKind.DATE: _accept,
    SchemaKind.ANY: _accept,
    SchemaKind.CONSTANT: _check_constant,
    SchemaKind.ENUMERATION: _check_enumeration,
    SchemaKind.OBJECT: partial(traversal.check_object, descend=run),
    SchemaKind.LENIENT_OBJECT: partial(traversal.check_lenient_object, descend=run),
    SchemaKind.DYNAMIC_OBJECT: partial(traversal.check_dynamic_object, descend=run),
    SchemaKind.ARRAY: partial(traversal.check_array, descend=run),
    SchemaKind.TUPLE: partial(traversal.check_tuple, descend=run),
    SchemaKind.OR_SET: partial(traversal.check_or_set, descend=run),
}


def resolve_options(
    options: ValidationOptions | Mapping[str, Any] | None = None,
    collect_errors: bool | None = None,
) -> ValidationOptions:
    """Normalize options and apply a ``collect_errors`` override."""
    resolved = ValidationOptions.ensure(options)
    if collect_errors is not None and collect_errors != resolved.collect_errors:
        resolved = replace(resolved, collect_errors=collect_errors)
    return resolved


def validate(
    schema: BaseSchema,
    source: Any = MISSING,
    options: ValidationOptions | Mapping[str, Any] | None = None,
    pass_: ValidationPass | None = None,
    *,
    collect_errors: bool | None = None,
) -> Any:
    """Validate a source value against a schema and return the model.

    Args:
        schema: Root schema
        source: Raw value (omit for an absent value)
        options: Validation options, as an instance or a dictionary
        pass_: Existing pass to validate in (e.g. from inside a hook)
        collect_errors: Override for ``options.collect_errors``

    Returns:
        The model value, None when the result is absent

    Raises:
        TopLevelValidationError: If a root validation recorded any error
        ValidationError: The first error of a nested validation in fail-fast mode
    """
    options = resolve_options(options, collect_errors)
    if pass_ is None:
        pass_ = ValidationPass(schema, source)
    result = run(schema, source, options, pass_)

    if pass_.top_level:
        if pass_.errors:
            logger.debug(f"Validation failed with {len(pass_.errors)} error(s)")
            raise TopLevelValidationError(pass_)
        return result.model

    if not result.valid:
        if options.collect_errors:
            return None
        raise result.errors[0]
    return result.model


def check(
    schema: BaseSchema,
    source: Any = MISSING,
    options: ValidationOptions | Mapping[str, Any] | None = None,
    *,
    collect_errors: bool | None = None,
) -> ValidationResult:
    """Validate a source value without raising on validation failures.

    Returns:
        ValidationResult holding the model or every error recorded by the root pass
    """
    options = resolve_options(options, collect_errors)
    pass_ = ValidationPass(schema, source)
    result = run(schema, source, options, pass_)
    if pass_.errors:
        return ValidationResult.failure(pass_.errors, pass_=pass_)
    return ValidationResult.success(result.value, pass_)
