"""
Unit tests for the normalizer and type node serialization.
"""

import pytest

from layout_schema.schema.compiler import compile_expression
from layout_schema.schema.declarations import build_table
from layout_schema.schema.diagnostics import SchemaCompilationError
from layout_schema.schema.normalizer import FALLBACK_DOCUMENT, fallback_document, normalize
from layout_schema.schema.types import (
    ArrayType,
    BooleanType,
    EnumType,
    NumberType,
    ObjectType,
    StringType,
    UnknownType,
)


class TestNormalize:
    """Test closed-schema serialization."""

    def test_reference_inlining_example(self):
        """Test the complete document for a referenced item schema."""
        source = (
            "const ItemSchema = z.object({label: z.string()});\n"
            "const Schema = z.object({items: z.array(ItemSchema)});\n"
        )
        table = build_table(source)

        document = normalize(compile_expression(table["Schema"], table, {"Schema"}))

        assert document == {
            "type": "object",
            "properties": {
                "items": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {"label": {"type": "string"}},
                        "required": ["label"],
                        "additionalProperties": False,
                    },
                },
            },
            "required": ["items"],
            "additionalProperties": False,
        }

    def test_required_follows_property_order(self):
        """Test that required names are listed in property order."""
        node = ObjectType(
            properties={"b": StringType(), "a": NumberType(), "c": BooleanType()},
            required={"c", "b"}
        )
        assert normalize(node)["required"] == ["b", "c"]

    def test_empty_required_is_omitted(self):
        """Test an object without required properties."""
        node = ObjectType(properties={"a": StringType()})
        assert "required" not in normalize(node)

    def test_unknown_items_become_strings(self):
        """Test that unresolved array items are strings."""
        assert normalize(ArrayType(items=UnknownType())) == {
            "type": "array",
            "items": {"type": "string"},
        }

    def test_missing_items_become_strings(self):
        """Test an array node that never got items."""
        assert normalize(ArrayType(max_items=2)) == {
            "type": "array",
            "items": {"type": "string"},
            "maxItems": 2,
        }

    def test_unknown_property_becomes_closed_object(self):
        """Test that an unresolved property is an empty closed object."""
        node = ObjectType(properties={"extra": UnknownType()}, required={"extra"})
        assert normalize(node)["properties"]["extra"] == {
            "type": "object",
            "properties": {},
            "additionalProperties": False,
        }

    def test_nested_unknown_inside_arrays(self):
        """Test an unresolved object nested in an array of arrays."""
        node = ArrayType(items=ArrayType(items=ObjectType(properties={"x": UnknownType()})))
        document = normalize(node)
        assert document["items"]["items"]["properties"]["x"]["additionalProperties"] is False

    def test_enum_and_number(self):
        """Test enum and number serialization."""
        node = ObjectType(
            properties={"kind": EnumType(values=["bar", "pie"]), "scale": NumberType(0.5, 2)},
            required={"kind"}
        )
        document = normalize(node)
        assert document["properties"]["kind"] == {"type": "string", "enum": ["bar", "pie"]}
        assert document["properties"]["scale"] == {"type": "number", "minimum": 0.5, "maximum": 2}

    def test_input_tree_is_not_modified(self):
        """Test that normalizing leaves the compiled tree alone."""
        node = ObjectType(properties={"a": UnknownType()})
        normalize(node)
        assert node.properties["a"] == UnknownType()

    def test_required_without_property_raises(self):
        """Test the required-subset invariant."""
        node = ObjectType(properties={"a": StringType()}, required={"a", "b"})
        with pytest.raises(SchemaCompilationError):
            normalize(node)


class TestFallback:
    """Test the fallback document."""

    def test_top_level_unknown(self):
        """Test that an unresolved root yields the fallback document."""
        assert normalize(UnknownType()) == FALLBACK_DOCUMENT

    def test_fallback_shape(self):
        """Test the fallback document fields."""
        document = fallback_document()
        assert document["required"] == ["title", "content"]
        assert document["properties"]["title"] == {"type": "string", "minLength": 3, "maxLength": 100}
        assert document["properties"]["content"] == {"type": "string", "minLength": 10, "maxLength": 500}
        assert document["additionalProperties"] is False

    def test_fallback_is_a_fresh_copy(self):
        """Test that callers cannot change the shared fallback."""
        document = fallback_document()
        document["properties"]["title"]["maxLength"] = 5
        assert fallback_document()["properties"]["title"]["maxLength"] == 100
