"""
Normalizer - finalize a compiled TypeNode tree into a schema document.

Structured-output APIs in strict mode reject schemas with open objects or
arrays without concrete items. The normalizer walks the tree bottom-up and
enforces:
    - Every object carries ``additionalProperties: false``
    - Every array has an ``items`` schema (UnknownType items become strings)
    - Unknown fragments elsewhere become empty closed objects
    - ``required`` is omitted when empty
    - An unresolved top-level tree is replaced by the fallback document

Usage:
    ```python
    from layout_schema.schema.normalizer import normalize

    document = normalize(compile_expression(text, table))
    ```
"""

import copy
import logging
from typing import Any, Dict

from layout_schema.schema.diagnostics import SchemaCompilationError
from layout_schema.schema.types import ArrayType, ObjectType, StringType, TypeNode, UnknownType

logger = logging.getLogger(__name__)

FALLBACK_DOCUMENT: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "title": {"type": "string", "minLength": 3, "maxLength": 100},
        "content": {"type": "string", "minLength": 10, "maxLength": 500},
    },
    "required": ["title", "content"],
    "additionalProperties": False,
}


def fallback_document() -> Dict[str, Any]:
    """Return a fresh copy of the canonical two-field fallback document."""
    return copy.deepcopy(FALLBACK_DOCUMENT)


def _normalize_node(node: TypeNode, as_items: bool = False) -> TypeNode:
    if isinstance(node, UnknownType):
        return StringType() if as_items else ObjectType()

    if isinstance(node, ArrayType):
        items = node.items if node.items is not None else UnknownType()
        return ArrayType(
            items=_normalize_node(items, as_items=True),
            min_items=node.min_items,
            max_items=node.max_items
        )

    if isinstance(node, ObjectType):
        missing = node.required - set(node.properties)
        if missing:
            raise SchemaCompilationError(
                f"Required properties missing from object: {sorted(missing)}"
            )
        return ObjectType(
            properties={k: _normalize_node(v) for k, v in node.properties.items()},
            required=set(node.required)
        )

    return node


def normalize(node: TypeNode) -> Dict[str, Any]:
    """
    Normalize a compiled tree and serialize it.

    Args:
        node: Root of the compiled tree

    Returns:
        Dict: Closed JSON Schema document

    Raises:
        SchemaCompilationError: If the tree breaks an internal invariant
            (a required name without a property)

    Example:
        ```python
        normalize(ArrayType(items=UnknownType()))
        # {"type": "array", "items": {"type": "string"}}
        ```
    """
    if isinstance(node, UnknownType):
        logger.warning("Schema did not resolve to a known type, using fallback document")
        return fallback_document()

    return _normalize_node(node).to_schema()
