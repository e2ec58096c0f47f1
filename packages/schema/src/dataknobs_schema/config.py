"""Validation options and how they are loaded."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Mapping

logger = logging.getLogger(__name__)

_TRUE_STRINGS = ("true", "yes", "1", "on")
_FALSE_STRINGS = ("false", "no", "0", "off", "")


@dataclass(frozen=True)
class ValidationOptions:
    """Options for a single validation invocation.

    Attributes:
        collect_errors: If True, keep validating sibling values after a failure
            and report every error at once; otherwise stop at the first error.
    """

    collect_errors: bool = False

    ENV_PREFIX = "DATAKNOBS_SCHEMA_"

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ValidationOptions:
        """Create options from a configuration dictionary.

        Both ``collect_errors`` and ``collectErrors`` keys are accepted.

        Args:
            data: Configuration dictionary

        Returns:
            ValidationOptions instance
        """
        unknown = set(data) - {"collect_errors", "collectErrors"}
        if unknown:
            logger.warning(f"Ignoring unknown validation options: {', '.join(sorted(unknown))}")
        collect = data.get("collect_errors", data.get("collectErrors", False))
        return cls(collect_errors=_parse_flag(collect, "collect_errors"))

    @classmethod
    def from_env(cls, prefix: str | None = None) -> ValidationOptions:
        """Create options from environment variables.

        Reads ``<prefix>COLLECT_ERRORS`` (default prefix: DATAKNOBS_SCHEMA_).

        Args:
            prefix: Custom environment variable prefix

        Returns:
            ValidationOptions instance
        """
        prefix = prefix or cls.ENV_PREFIX
        raw = os.environ.get(f"{prefix}COLLECT_ERRORS")
        if raw is None:
            return cls()
        return cls(collect_errors=_parse_flag(raw, f"{prefix}COLLECT_ERRORS"))

    @classmethod
    def ensure(
        cls, options: ValidationOptions | Mapping[str, Any] | None
    ) -> ValidationOptions:
        """Normalize None, a dictionary or an options instance."""
        if options is None:
            return cls()
        if isinstance(options, ValidationOptions):
            return options
        return cls.from_dict(options)


def _parse_flag(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in _TRUE_STRINGS:
            return True
        if lowered in _FALSE_STRINGS:
            return False
    raise ValueError(f"Cannot interpret {value!r} as a boolean for '{name}'")
