"""Per-invocation validation context.

A `ValidationPass` tree is created for every top-level validation. Composite
schemas create child passes with `next()`/`child()` before descending, so every
error knows the path to the value that caused it.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Sequence

from .exceptions import ErrorKind, ValidationError

if TYPE_CHECKING:
    from .schemas import BaseSchema

PathSegment = str | int


class ValidationPass:
    """Context for one node of a single validation invocation.

    `original_schema` and `original_source` are shared by every pass of the
    tree. `errors` holds the errors raised at this pass and below it, which is
    why the root pass can report every nested failure.
    """

    def __init__(
        self,
        original_schema: BaseSchema,
        original_source: Any,
        parent: ValidationPass | None = None,
        path: Sequence[PathSegment] = (),
        schema: BaseSchema | None = None,
        source: Any = None,
    ):
        self.original_schema = original_schema
        self.original_source = original_source
        self._parent = parent
        self._path: tuple[PathSegment, ...] = tuple(path)
        if schema is None:
            schema, source = original_schema, original_source
        self._schema = schema
        self._source = source
        self._errors: list[ValidationError] = []
        self._recorded: set[int] = set()

    @property
    def parent(self) -> ValidationPass | None:
        return self._parent

    @property
    def path(self) -> tuple[PathSegment, ...]:
        return self._path

    @property
    def schema(self) -> BaseSchema:
        return self._schema

    @property
    def source(self) -> Any:
        return self._source

    @property
    def errors(self) -> list[ValidationError]:
        return self._errors

    @property
    def top_level(self) -> bool:
        return self._parent is None

    @property
    def path_string(self) -> str:
        return ".".join(str(segment) for segment in self._path)

    @property
    def location(self) -> str:
        """Suffix used by built-in messages, e.g. ' at path "a.b.2"'."""
        return f' at path "{self.path_string}"' if self._path else ""

    def next(
        self, path: Sequence[PathSegment], schema: BaseSchema, source: Any
    ) -> ValidationPass:
        """Create a child pass for a nested value.

        Args:
            path: Full path of the nested value
            schema: Schema the nested value is validated against
            source: Raw nested value

        Returns:
            A new pass whose parent is this pass
        """
        return ValidationPass(
            self.original_schema,
            self.original_source,
            parent=self,
            path=path,
            schema=schema,
            source=source,
        )

    def child(self, segment: PathSegment, schema: BaseSchema, source: Any) -> ValidationPass:
        """Create a child pass one path segment below this one."""
        return self.next((*self._path, segment), schema, source)

    def detached(self, schema: BaseSchema, source: Any) -> ValidationPass:
        """Create a parentless pass at the current path.

        Errors raised in a detached pass are not propagated into this tree.
        """
        return ValidationPass(
            schema,
            source,
            parent=None,
            path=self._path,
            schema=schema,
            source=source,
        )

    def assert_(
        self,
        condition: bool,
        message: str,
        kind: ErrorKind = ErrorKind.FAILED_CUSTOM_VALIDATOR,
    ) -> None:
        """Raise a recorded ValidationError unless condition holds."""
        if not condition:
            raise self.cause_error(message, kind)

    def cause_error(
        self,
        message: str | None = None,
        kind: ErrorKind = ErrorKind.FAILED_CUSTOM_VALIDATOR,
    ) -> ValidationError:
        """Create an error bound to this pass and record it up to the root.

        The error is returned rather than raised so callers can write
        ``raise pass_.cause_error(...)``.

        Args:
            message: Error message (default: "Validation failed.")
            kind: Category of the failure

        Returns:
            The recorded ValidationError
        """
        error = ValidationError(self, "Validation failed." if message is None else message, kind)
        self.record(error)
        return error

    def record(self, error: ValidationError) -> None:
        """Record an error on this pass and every ancestor, once."""
        node: ValidationPass | None = self
        while node is not None:
            if id(error) not in node._recorded:
                node.add_error(error)
            node = node._parent

    def add_error(self, error: ValidationError) -> None:
        self._recorded.add(id(error))
        self._errors.append(error)

    def __repr__(self) -> str:
        return f"ValidationPass(path={self.path_string!r}, errors={len(self._errors)})"
