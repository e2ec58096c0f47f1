"""Pytest configuration and shared fixtures for dataknobs_schema tests."""

import os
import sys
from pathlib import Path

import pytest

# Add src to path for testing
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

from dataknobs_schema import (  # noqa: E402
    ArraySchema,
    BooleanSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
)


@pytest.fixture
def user_schema():
    """Object schema with nested and optional fields."""
    return ObjectSchema({
        "name": StringSchema().non_empty(),
        "age": NumberSchema(required=False).min(0),
        "active": BooleanSchema(default=True),
        "tags": ArraySchema(StringSchema(), required=False),
    })


@pytest.fixture
def nested_numbers_schema():
    """Schema for {a: {b: [number, ...]}}."""
    return ObjectSchema({
        "a": ObjectSchema({"b": ArraySchema(NumberSchema())}),
    })


@pytest.fixture
def env_vars(monkeypatch):
    """Helper to set environment variables."""

    def _set_env(**kwargs):
        for key, value in kwargs.items():
            monkeypatch.setenv(key, str(value))

    return _set_env


@pytest.fixture
def clear_env(monkeypatch):
    """Clear all DATAKNOBS_SCHEMA_ environment variables."""
    for key in list(os.environ.keys()):
        if key.startswith("DATAKNOBS_SCHEMA_"):
            monkeypatch.delenv(key)
