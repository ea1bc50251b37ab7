"""
Response-schema transforms.

Before a compiled layout schema is sent as the response schema of a
structured-output call, the content generator adjusts it: image and icon URL
fields are produced later by the rendering step, a speaker note is always
requested, and every object must be closed for strict mode.

All transforms work on plain JSON Schema dictionaries and return deep copies;
the input is never modified.

Usage:
    ```python
    from layout_schema.schema.transforms import build_response_schema

    response_schema = build_response_schema(layout.json_schema)
    ```
"""

import copy
from typing import Any, Dict, Iterable

# Filled in by the rendering step, never by the model
MEDIA_URL_FIELDS = ("__image_url__", "__icon_url__")

SPEAKER_NOTE_FIELD = "__speaker_note__"
SPEAKER_NOTE_SCHEMA: Dict[str, Any] = {
    "type": "string",
    "minLength": 100,
    "maxLength": 250,
    "description": "Speaker note for the slide",
}

_COMBINATORS = ("allOf", "anyOf", "oneOf")


def add_additional_properties(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Close every object in a schema.

    Objects that already state ``additionalProperties`` keep their value.
    Properties, array items, combinators, ``not`` and schema-valued
    ``additionalProperties`` are all visited.

    Args:
        schema: JSON Schema dictionary

    Returns:
        Dict: Copy of schema with ``additionalProperties: false`` added
    """
    result = copy.deepcopy(schema)

    def process(node: Any) -> None:
        if not isinstance(node, dict):
            return

        if node.get("type") == "object" and "additionalProperties" not in node:
            node["additionalProperties"] = False

        for prop in (node.get("properties") or {}).values():
            process(prop)

        items = node.get("items")
        if isinstance(items, list):
            for item in items:
                process(item)
        else:
            process(items)

        for key in _COMBINATORS:
            if isinstance(node.get(key), list):
                for sub_schema in node[key]:
                    process(sub_schema)

        if isinstance(node.get("additionalProperties"), dict):
            process(node["additionalProperties"])

        process(node.get("not"))

    process(result)
    return result


def remove_fields(schema: Dict[str, Any], fields: Iterable[str]) -> Dict[str, Any]:
    """
    Remove named properties at every depth.

    Args:
        schema: JSON Schema dictionary
        fields: Property names to remove

    Returns:
        Dict: Copy of schema without the fields; ``required`` lists lose the
            names and are dropped when they become empty

    Example:
        ```python
        remove_fields(schema, ["__image_url__"])
        ```
    """
    to_remove = set(fields)
    result = copy.deepcopy(schema)

    def process(node: Any) -> None:
        if isinstance(node, list):
            for item in node:
                process(item)
            return
        if not isinstance(node, dict):
            return

        properties = node.get("properties")
        if isinstance(properties, dict):
            for name in to_remove:
                properties.pop(name, None)

        required = node.get("required")
        if isinstance(required, list):
            required = [name for name in required if name not in to_remove]
            if required:
                node["required"] = required
            else:
                del node["required"]

        for key, value in node.items():
            if key == "properties" and isinstance(value, dict):
                for prop in value.values():
                    process(prop)
            elif key != "required":
                process(value)

    process(result)
    return result


def add_field(
    schema: Dict[str, Any],
    field_name: str,
    field_schema: Dict[str, Any],
    required: bool = False
) -> Dict[str, Any]:
    """
    Add one top-level property.

    Args:
        schema: JSON Schema dictionary (an object schema)
        field_name: Name of the property to add
        field_schema: Schema of the property
        required: Whether the property must be present

    Returns:
        Dict: Copy of schema with the property; an existing property of the
            same name is replaced

    Raises:
        TypeError: If field_name is not a string or field_schema not a dict
    """
    if not isinstance(field_name, str):
        raise TypeError("Field name must be a string")
    if not isinstance(field_schema, dict):
        raise TypeError("Field schema must be a dictionary")

    result = copy.deepcopy(schema)
    if not isinstance(result.get("properties"), dict):
        result["properties"] = {}
    result["properties"][field_name] = copy.deepcopy(field_schema)

    names = result.get("required")
    names = list(names) if isinstance(names, list) else []
    if required:
        if field_name not in names:
            names.append(field_name)
    else:
        names = [name for name in names if name != field_name]

    if names:
        result["required"] = names
    else:
        result.pop("required", None)

    return result


def build_response_schema(schema: Dict[str, Any]) -> Dict[str, Any]:
    """
    Prepare a layout schema for a structured-output generation call.

    Steps:
        1. Remove media URL fields (MEDIA_URL_FIELDS)
        2. Add a required speaker note field
        3. Close every object

    Args:
        schema: Compiled layout schema

    Returns:
        Dict: Response schema
    """
    response_schema = remove_fields(schema, MEDIA_URL_FIELDS)
    response_schema = add_field(
        response_schema,
        SPEAKER_NOTE_FIELD,
        SPEAKER_NOTE_SCHEMA,
        required=True
    )
    return add_additional_properties(response_schema)
