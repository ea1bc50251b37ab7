"""
Unit tests for response-schema transforms.
"""

import pytest

from layout_schema.schema.transforms import (
    SPEAKER_NOTE_FIELD,
    SPEAKER_NOTE_SCHEMA,
    add_additional_properties,
    add_field,
    build_response_schema,
    remove_fields,
)


LAYOUT_DOCUMENT = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "maxLength": 60},
        "image": {
            "type": "object",
            "properties": {
                "__image_url__": {"type": "string"},
                "__image_prompt__": {"type": "string"},
            },
            "required": ["__image_url__", "__image_prompt__"],
            "additionalProperties": False,
        },
        "icons": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {"__icon_url__": {"type": "string"}},
                "required": ["__icon_url__"],
                "additionalProperties": False,
            },
        },
    },
    "required": ["title", "image", "icons"],
    "additionalProperties": False,
}


class TestAddAdditionalProperties:
    """Test closing objects."""

    def test_closes_nested_objects(self):
        """Test objects in properties, items and combinators."""
        schema = {
            "type": "object",
            "properties": {
                "a": {"type": "object", "properties": {}},
                "b": {"type": "array", "items": {"type": "object", "properties": {}}},
                "c": {"anyOf": [{"type": "object", "properties": {}}, {"type": "string"}]},
            },
        }

        result = add_additional_properties(schema)

        assert result["additionalProperties"] is False
        assert result["properties"]["a"]["additionalProperties"] is False
        assert result["properties"]["b"]["items"]["additionalProperties"] is False
        assert result["properties"]["c"]["anyOf"][0]["additionalProperties"] is False
        assert "additionalProperties" not in result["properties"]["c"]["anyOf"][1]

    def test_keeps_explicit_value(self):
        """Test that an existing additionalProperties is not overwritten."""
        schema = {"type": "object", "properties": {}, "additionalProperties": True}
        assert add_additional_properties(schema)["additionalProperties"] is True

    def test_input_not_modified(self):
        """Test that the input stays untouched."""
        schema = {"type": "object", "properties": {}}
        add_additional_properties(schema)
        assert "additionalProperties" not in schema


class TestRemoveFields:
    """Test removing fields at every depth."""

    def test_removes_media_urls(self):
        """Test removal from nested objects and array items."""
        result = remove_fields(LAYOUT_DOCUMENT, ["__image_url__", "__icon_url__"])

        image = result["properties"]["image"]
        assert list(image["properties"]) == ["__image_prompt__"]
        assert image["required"] == ["__image_prompt__"]

        icon = result["properties"]["icons"]["items"]
        assert icon["properties"] == {}
        assert "required" not in icon

    def test_input_not_modified(self):
        """Test that the input stays untouched."""
        remove_fields(LAYOUT_DOCUMENT, ["__image_url__"])
        assert "__image_url__" in LAYOUT_DOCUMENT["properties"]["image"]["properties"]

    def test_unknown_field(self):
        """Test removing a field that does not exist."""
        assert remove_fields(LAYOUT_DOCUMENT, ["missing"]) == LAYOUT_DOCUMENT


class TestAddField:
    """Test adding a top-level field."""

    def test_required_field(self):
        """Test adding a required field."""
        result = add_field(LAYOUT_DOCUMENT, "note", {"type": "string"}, required=True)

        assert result["properties"]["note"] == {"type": "string"}
        assert result["required"] == ["title", "image", "icons", "note"]

    def test_optional_field_replaces_required(self):
        """Test that re-adding a field as optional drops it from required."""
        result = add_field(LAYOUT_DOCUMENT, "title", {"type": "string"})

        assert result["properties"]["title"] == {"type": "string"}
        assert result["required"] == ["image", "icons"]

    def test_schema_without_properties(self):
        """Test adding to a schema with no properties."""
        result = add_field({"type": "object"}, "note", {"type": "string"})
        assert result == {"type": "object", "properties": {"note": {"type": "string"}}}

    def test_invalid_arguments(self):
        """Test argument type checks."""
        with pytest.raises(TypeError):
            add_field(LAYOUT_DOCUMENT, 3, {"type": "string"})
        with pytest.raises(TypeError):
            add_field(LAYOUT_DOCUMENT, "note", "string")


class TestBuildResponseSchema:
    """Test the combined response-schema preparation."""

    def test_response_schema(self):
        """Test media removal plus speaker note."""
        result = build_response_schema(LAYOUT_DOCUMENT)

        assert result["properties"][SPEAKER_NOTE_FIELD] == SPEAKER_NOTE_SCHEMA
        assert result["required"][-1] == SPEAKER_NOTE_FIELD
        assert "__image_url__" not in result["properties"]["image"]["properties"]
        assert "__icon_url__" not in result["properties"]["icons"]["items"]["properties"]
        assert result["additionalProperties"] is False

    def test_fallback_document(self):
        """Test preparing the fallback document."""
        from layout_schema.schema.normalizer import fallback_document

        result = build_response_schema(fallback_document())
        assert result["required"] == ["title", "content", SPEAKER_NOTE_FIELD]
