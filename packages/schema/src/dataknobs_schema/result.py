"""Result type returned by node-level validation.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .exceptions import TopLevelValidationError
from .kinds import MISSING

if TYPE_CHECKING:
    from .exceptions import ValidationError
    from .passes import ValidationPass


@dataclass
class ValidationResult:
    """Outcome of validating one value against one schema node.

    The pipeline returns a ValidationResult from every node instead of raising,
    so only the public entry point decides whether failures become an exception.
    """

    valid: bool
    value: Any  # The (possibly coerced) value, MISSING when absent or failed
    errors: list[ValidationError] = field(default_factory=list)
    pass_: ValidationPass | None = None

    def __bool__(self) -> bool:
        """Allow 'if result:' usage to check validity."""
        return self.valid

    @property
    def messages(self) -> list[str]:
        return [error.message for error in self.errors]

    @property
    def model(self) -> Any:
        """The validated value, with an absent value reported as None."""
        return None if self.value is MISSING else self.value

    def unwrap(self) -> Any:
        """Return the model value, or raise the aggregate error.

        Raises:
            TopLevelValidationError: If the result is not valid
        """
        if not self.valid:
            if self.pass_ is None:
                raise self.errors[0]
            raise TopLevelValidationError(self.pass_)
        return self.model

    @classmethod
    def success(cls, value: Any, pass_: ValidationPass | None = None) -> ValidationResult:
        """Create a successful validation result."""
        return cls(valid=True, value=value, errors=[], pass_=pass_)

    @classmethod
    def failure(
        cls,
        errors: list[ValidationError],
        value: Any = MISSING,
        pass_: ValidationPass | None = None,
    ) -> ValidationResult:
        """Create a failed validation result.

        Args:
            errors: Errors that caused the failure
            value: Value to report (MISSING by default)
            pass_: Pass the result belongs to
        """
        return cls(valid=False, value=value, errors=list(errors), pass_=pass_)
