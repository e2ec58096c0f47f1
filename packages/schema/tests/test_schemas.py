"""Tests for schema metadata and object extension."""

import pytest

from dataknobs_schema import (
    ArraySchema,
    BaseSchema,
    BooleanSchema,
    ConstantSchema,
    DynamicObjectSchema,
    EnumerationSchema,
    InvalidSchemaError,
    LenientObjectSchema,
    NumberSchema,
    ObjectSchema,
    OrSetSchema,
    SchemaKind,
    StringSchema,
    TopLevelValidationError,
    TupleSchema,
)


class TestMetadata:
    """Test node metadata exposed to external renderers."""

    def test_kinds_and_types(self):
        """Each node reports its kind and declared type."""
        assert StringSchema().kind is SchemaKind.STRING
        assert DynamicObjectSchema(StringSchema()).type == "object"
        assert LenientObjectSchema({}).kind is SchemaKind.LENIENT_OBJECT
        assert OrSetSchema([NumberSchema()]).type == "OrSet"
        assert ConstantSchema(True).type == "boolean"
        assert BaseSchema.get_type([]) == "array"
        assert StringSchema.is_present(None)

    def test_default_introspection(self):
        """Literal and generated defaults are distinguished."""
        literal = NumberSchema(default=1)
        generated = NumberSchema(default=lambda: 2)

        assert literal.has_default() and not literal.is_default_runtime_evaluated()
        assert generated.is_default_runtime_evaluated()

    def test_to_dict(self):
        """The description walks the whole tree."""
        schema = ObjectSchema({
            "id": NumberSchema().integer(),
            "role": EnumerationSchema(["admin", "user"], default="user"),
            "tags": ArraySchema(StringSchema(), required=False),
            "pair": TupleSchema([NumberSchema(), BooleanSchema()]),
            "either": OrSetSchema([NumberSchema(), StringSchema()]),
        })

        data = schema.to_dict()

        assert data["kind"] == "object"
        assert data["required"] is True
        properties = data["properties"]
        assert properties["id"]["hooks"] == 1
        assert properties["role"]["enum"] == ["admin", "user"]
        assert properties["role"]["default"] == "user"
        assert properties["tags"]["required"] is False
        assert properties["tags"]["items"]["type"] == "string"
        assert [item["type"] for item in properties["pair"]["items"]] == ["number", "boolean"]
        assert [item["kind"] for item in properties["either"]["one_of"]] == ["number", "string"]

    def test_to_dict_variants(self):
        """Lenient and dynamic objects describe additional properties."""
        assert LenientObjectSchema({})._describe()["additional_properties"] is True
        assert DynamicObjectSchema(NumberSchema()).to_dict()["additional_properties"]["type"] == "number"
        assert ConstantSchema("x").to_dict()["const"] == "x"
        assert "default" not in NumberSchema(default=lambda: 1).to_dict()

    def test_non_schema_children(self):
        """Composite children are checked at construction."""
        with pytest.raises(InvalidSchemaError):
            ArraySchema(str)
        with pytest.raises(InvalidSchemaError):
            TupleSchema([NumberSchema(), 5])
        with pytest.raises(InvalidSchemaError):
            OrSetSchema([None])


class TestExtend:
    """Test object extension."""

    def test_fields_merge(self):
        """Fields of the extension win on collisions."""
        base = ObjectSchema({"a": StringSchema(), "b": StringSchema()})
        extension = ObjectSchema({"b": NumberSchema(), "c": BooleanSchema()})

        merged = base.extend(extension)

        assert isinstance(merged, ObjectSchema)
        assert set(merged.subschema) == {"a", "b", "c"}
        assert merged.validate({"a": "x", "b": "2", "c": 1}) == {"a": "x", "b": 2, "c": True}
        assert set(base.subschema) == {"a", "b"}

    def test_lenient_extend(self):
        """Extending keeps the schema kind of the base."""
        merged = LenientObjectSchema({"a": NumberSchema()}).extend(ObjectSchema({"b": NumberSchema()}))

        assert merged.kind is SchemaKind.LENIENT_OBJECT
        assert merged.validate({"a": "1", "b": "2", "z": 0}) == {"a": 1, "b": 2, "z": 0}

    def test_defaults_merge(self):
        """Both defaults are merged through a generator."""
        base = ObjectSchema({"a": NumberSchema()}, default={"a": 1})
        extension = ObjectSchema({"b": NumberSchema()}, default=lambda: {"b": 2})

        merged = base.extend(extension)

        assert merged.is_default_runtime_evaluated()
        assert merged.validate() == {"a": 1, "b": 2}

    def test_hooks_are_not_carried(self):
        """The merged schema starts without hooks."""
        base = ObjectSchema({"a": NumberSchema()}).ensure(lambda value: False)

        merged = base.extend(ObjectSchema({"b": NumberSchema()}))

        with pytest.raises(TopLevelValidationError):
            base.validate({"a": 1})
        assert merged.validate({"a": 1, "b": 2}) == {"a": 1, "b": 2}

    def test_required_mismatch(self):
        """Both schemas must agree on being required."""
        with pytest.raises(InvalidSchemaError, match="agree on being required"):
            ObjectSchema({}).extend(ObjectSchema({}, required=False))

    def test_default_mismatch(self):
        """Both or neither schema must have a default."""
        with pytest.raises(InvalidSchemaError, match="default values"):
            ObjectSchema({}, default={}).extend(ObjectSchema({}))

    def test_extend_non_object(self):
        """Only field-based objects can be merged."""
        with pytest.raises(InvalidSchemaError):
            ObjectSchema({}).extend(DynamicObjectSchema(NumberSchema()))
