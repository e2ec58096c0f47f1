"""Checks for composite schemas and OrSet resolution.

Each check receives the already converted value of its node and descends into
children through the ``descend`` runner supplied by the pipeline, using a child
pass so that errors carry the full path.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Iterable, Tuple

from .exceptions import ErrorKind, ValidationError
from .kinds import MISSING, get_type, is_present
from .result import ValidationResult

if TYPE_CHECKING:
    from .config import ValidationOptions
    from .passes import PathSegment, ValidationPass
    from .schemas import BaseSchema

logger = logging.getLogger(__name__)

Descend = Callable[["BaseSchema", Any, "ValidationOptions", "ValidationPass"], ValidationResult]
Child = Tuple["PathSegment", "BaseSchema", Any]


def _descend_all(
    children: Iterable[Child],
    options: ValidationOptions,
    pass_: ValidationPass,
    descend: Descend,
) -> tuple[list[tuple[PathSegment, ValidationResult]], list[ValidationError]]:
    """Validate children in order.

    Stops at the first failing child unless errors are being collected.

    Returns:
        (segment, result) pairs of every child that ran and all their errors.
        A failed child's result value is MISSING.
    """
    results = []
    errors: list[ValidationError] = []
    for segment, schema, value in children:
        result = descend(schema, value, options, pass_.child(segment, schema, value))
        results.append((segment, result))
        if not result.valid:
            errors.extend(result.errors)
            if not options.collect_errors:
                break
    return results, errors


def _conclude(
    model: Any, errors: list[ValidationError], options: ValidationOptions, pass_: ValidationPass
) -> ValidationResult:
    # Collected child errors are already on the root pass; the node itself
    # goes on with the children that did validate
    if errors and not options.collect_errors:
        return ValidationResult.failure(errors, pass_=pass_)
    return ValidationResult.success(model, pass_)


def check_object(
    schema: BaseSchema, value: dict, options: ValidationOptions, pass_: ValidationPass, descend: Descend
) -> ValidationResult:
    """Validate declared fields only; unknown keys are dropped."""
    children = (
        (key, child, value.get(key, MISSING)) for key, child in schema.subschema.items()
    )
    results, errors = _descend_all(children, options, pass_, descend)
    model = {key: result.value for key, result in results if is_present(result.value)}
    return _conclude(model, errors, options, pass_)


def check_lenient_object(
    schema: BaseSchema, value: dict, options: ValidationOptions, pass_: ValidationPass, descend: Descend
) -> ValidationResult:
    """Validate declared fields and keep every other key verbatim."""
    children = (
        (key, child, value.get(key, MISSING)) for key, child in schema.subschema.items()
    )
    results, errors = _descend_all(children, options, pass_, descend)
    model = dict(value)
    for key, result in results:
        if is_present(result.value):
            model[key] = result.value
        else:
            model.pop(key, None)
    return _conclude(model, errors, options, pass_)


def check_dynamic_object(
    schema: BaseSchema, value: dict, options: ValidationOptions, pass_: ValidationPass, descend: Descend
) -> ValidationResult:
    """Validate every value of the input under the single value schema."""
    children = ((key, schema.subschema, item) for key, item in value.items())
    results, errors = _descend_all(children, options, pass_, descend)
    model = {key: result.value for key, result in results if is_present(result.value)}
    return _conclude(model, errors, options, pass_)


def check_array(
    schema: BaseSchema, value: list, options: ValidationOptions, pass_: ValidationPass, descend: Descend
) -> ValidationResult:
    """Validate every item under the single item schema."""
    children = ((index, schema.subschema, item) for index, item in enumerate(value))
    results, errors = _descend_all(children, options, pass_, descend)
    return _conclude([result.model for _, result in results], errors, options, pass_)


def check_tuple(
    schema: BaseSchema, value: list, options: ValidationOptions, pass_: ValidationPass, descend: Descend
) -> ValidationResult:
    """Validate each declared position under its own schema.

    Positions missing from the input are absent; items beyond the declared
    positions are dropped.
    """
    children = (
        (index, child, value[index] if index < len(value) else MISSING)
        for index, child in enumerate(schema.subschemas)
    )
    results, errors = _descend_all(children, options, pass_, descend)
    return _conclude([result.model for _, result in results], errors, options, pass_)


def check_or_set(
    schema: BaseSchema, value: Any, options: ValidationOptions, pass_: ValidationPass, descend: Descend
) -> ValidationResult:
    """Resolve a union by trying each member whose type matches the value.

    Members never convert: a member is attempted only when its type tag equals
    the value's type tag. Attempts run in detached passes so a rejected member
    leaves no errors behind.
    """
    value_type = get_type(value)
    reasons = []
    for number, member in enumerate(schema.schemas, start=1):
        if member.type != value_type:
            reasons.append(f"Schema #{number}: type mismatch.")
            continue
        attempt = pass_.detached(member, value)
        result = descend(member, value, options, attempt)
        if result.valid and not attempt.errors:
            logger.debug(f"OrSet{pass_.location} resolved to member #{number} ({member.type})")
            return ValidationResult.success(result.value, pass_)
        messages = [error.message for error in attempt.errors] or result.messages
        logger.debug(f"OrSet{pass_.location} rejected member #{number}: {messages}")
        reasons.append(f"Schema #{number}: {'; '.join(messages)}")
    member_types = ", ".join(member.type for member in schema.schemas)
    raise pass_.cause_error(
        f"Provided value ({value_type}) matched no schemas ({member_types}){pass_.location}.\n"
        + "\n".join(reasons),
        ErrorKind.OR_SET_EXHAUSTED,
    )
