"""Validation hooks attached to pipeline stages."""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable

from .exceptions import InvalidSchemaError

if TYPE_CHECKING:
    from .passes import ValidationPass

Hook = Callable[[Any, "ValidationPass"], Any]


class HookStage(Enum):
    """Pipeline stages that accept hooks, in execution order."""

    BEFORE_ALL = "before_all"
    BEFORE_DEFAULT = "before_default"
    AFTER_DEFAULT = "after_default"
    BEFORE_CONVERSION = "before_conversion"
    AFTER_CONVERSION = "after_conversion"
    AFTER_ALL = "after_all"

    @classmethod
    def parse(cls, stage: HookStage | str) -> HookStage:
        """Resolve a stage from an enum member, a value or a camelCase name.

        Args:
            stage: e.g. HookStage.AFTER_ALL, "after_all" or "afterAll"

        Raises:
            InvalidSchemaError: If the stage is unknown
        """
        if isinstance(stage, HookStage):
            return stage
        normalized = "".join(
            f"_{char.lower()}" if char.isupper() else char for char in stage
        ).lstrip("_")
        try:
            return cls(normalized)
        except ValueError as e:
            allowed = ", ".join(member.value for member in cls)
            raise InvalidSchemaError(
                f"Unknown hook stage '{stage}'. (Expected one of: {allowed})"
            ) from e


@dataclass(frozen=True)
class Hooks:
    """Immutable per-stage lists of hooks.

    Each hook receives ``(value, pass_)`` and returns the value handed to the
    next hook. Hooks signal failure by raising through ``pass_.assert_`` or
    ``raise pass_.cause_error(...)``.
    """

    before_all: tuple[Hook, ...] = ()
    before_default: tuple[Hook, ...] = ()
    after_default: tuple[Hook, ...] = ()
    before_conversion: tuple[Hook, ...] = ()
    after_conversion: tuple[Hook, ...] = ()
    after_all: tuple[Hook, ...] = ()

    def get(self, stage: HookStage) -> tuple[Hook, ...]:
        return getattr(self, stage.value)

    def add(self, stage: HookStage | str, hook: Hook) -> Hooks:
        """Return a copy of these hooks with one more hook at the given stage."""
        stage = HookStage.parse(stage)
        if not callable(hook):
            raise InvalidSchemaError(f"Hook for stage '{stage.value}' must be callable")
        return replace(self, **{stage.value: (*self.get(stage), hook)})

    def run(self, stage: HookStage, value: Any, pass_: ValidationPass) -> Any:
        for hook in self.get(stage):
            value = hook(value, pass_)
        return value

    def __len__(self) -> int:
        return sum(len(self.get(stage)) for stage in HookStage)
