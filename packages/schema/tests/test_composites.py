"""Tests for object, array and tuple schemas."""

import pytest

from dataknobs_schema import (
    MISSING,
    ArraySchema,
    BooleanSchema,
    DynamicObjectSchema,
    ErrorKind,
    InvalidSchemaError,
    LenientObjectSchema,
    NumberSchema,
    ObjectSchema,
    StringSchema,
    TopLevelValidationError,
    TupleSchema,
)


class TestObjectSchema:
    """Test fixed-field objects."""

    def test_unknown_keys_are_dropped(self):
        """Only declared keys reach the model."""
        schema = ObjectSchema({"a": StringSchema()})

        assert schema.validate({"a": "x", "b": "y"}) == {"a": "x"}

    def test_fields_are_converted(self, user_schema):
        """Declared fields are validated and coerced, defaults applied."""
        result = user_schema.validate({"name": "Alice", "age": "30"})

        assert result == {"name": "Alice", "age": 30, "active": True}

    def test_absent_optional_fields_are_omitted(self, user_schema):
        """Absent optional fields do not appear as keys."""
        result = user_schema.validate({"name": "Bob"})

        assert "age" not in result
        assert "tags" not in result

    def test_null_is_a_present_value(self):
        """None is converted rather than treated as absent."""
        schema = ObjectSchema({"flag": BooleanSchema(required=False)})

        assert schema.validate({"flag": None}) == {"flag": False}

    def test_missing_required_field(self, user_schema):
        """A missing required field reports its path."""
        with pytest.raises(TopLevelValidationError) as exc_info:
            user_schema.validate({"age": 3})

        error = exc_info.value.errors[0]
        assert error.kind is ErrorKind.MISSING
        assert error.path == ("name",)
        assert error.message == 'Missing required string at path "name".'

    def test_non_schema_field(self):
        """Fields must be schema nodes."""
        with pytest.raises(InvalidSchemaError):
            ObjectSchema({"a": "string"})

    def test_subschema_is_read_only(self):
        """The field mapping cannot be modified after construction."""
        schema = ObjectSchema({"a": StringSchema()})

        with pytest.raises(TypeError):
            schema.subschema["b"] = StringSchema()


class TestLenientObjectSchema:
    """Test objects that keep unknown keys."""

    def test_unknown_keys_are_kept(self):
        """Unknown keys survive and declared keys are validated."""
        schema = LenientObjectSchema({"a": StringSchema(), "n": NumberSchema()})

        assert schema.validate({"a": "x", "b": "y", "n": "1"}) == {"a": "x", "b": "y", "n": 1}

    def test_input_is_not_mutated(self):
        """The output is a copy of the input."""
        source = {"n": "1", "extra": True}
        LenientObjectSchema({"n": NumberSchema()}).validate(source)

        assert source == {"n": "1", "extra": True}


class TestDynamicObjectSchema:
    """Test objects with arbitrary keys."""

    def test_every_value_is_validated(self):
        """The value schema applies to every key."""
        schema = DynamicObjectSchema(NumberSchema())

        assert schema.validate({"x": "1", "y": "2"}) == {"x": 1, "y": 2}

    def test_error_path_uses_key(self):
        """Errors report the failing key."""
        with pytest.raises(TopLevelValidationError) as exc_info:
            DynamicObjectSchema(NumberSchema()).validate({"x": 1, "bad": "z"})

        assert exc_info.value.errors[0].path_string == "bad"


class TestArraySchema:
    """Test arrays."""

    def test_items_are_validated(self):
        """Every item is converted by the item schema."""
        assert ArraySchema(NumberSchema()).validate(["1", 2, 3.5]) == [1, 2, 3.5]

    def test_nested_error_path(self, nested_numbers_schema):
        """A failure deep in the tree reports the full path."""
        with pytest.raises(TopLevelValidationError) as exc_info:
            nested_numbers_schema.validate({"a": {"b": [0, 1, "bad"]}})

        error = exc_info.value.errors[0]
        assert error.path == ("a", "b", 2)
        assert error.path_string == "a.b.2"
        assert 'at path "a.b.2"' in error.message

    def test_optional_items_become_none(self):
        """Absent item results are represented by None."""
        dropping_zero = NumberSchema(required=False).custom(
            lambda value, pass_: MISSING if value == 0 else value
        )

        assert ArraySchema(dropping_zero).validate([0, "1"]) == [None, 1]


class TestTupleSchema:
    """Test positional tuples."""

    def test_positions(self):
        """Each position uses its own schema."""
        schema = TupleSchema([StringSchema(), NumberSchema(), BooleanSchema()])

        assert schema.validate([1, "2", "yes"]) == ["1", 2, True]
        assert schema.type == "array"

    def test_missing_positions(self):
        """Missing optional positions become None, missing required ones fail."""
        schema = TupleSchema([NumberSchema(), NumberSchema(required=False)])

        assert schema.validate([1]) == [1, None]
        with pytest.raises(TopLevelValidationError, match='Missing required number at path "0"'):
            schema.validate([])

    def test_extra_items_are_dropped(self):
        """Items beyond the declared positions are ignored."""
        assert TupleSchema([NumberSchema()]).validate([1, "2", "x"]) == [1]
