"""
Type node definitions for compiled layout schemas.

This module defines the internal type tree produced by the expression compiler
and consumed by the normalizer. Each node mirrors one JSON Schema construct.

Type Hierarchy:
    TypeNode (abstract)
    ├── ObjectType: Object with ordered properties and required names
    ├── ArrayType: Array with an item node and length bounds
    ├── StringType: String with length bounds
    ├── NumberType: Number with range bounds
    ├── BooleanType: Boolean value
    ├── EnumType: String restricted to an ordered list of values
    └── UnknownType: Fragment that could not be classified

Each concrete node knows how to serialize itself once normalized. UnknownType
never serializes directly; the normalizer replaces it first.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Union


@dataclass
class TypeNode(ABC):
    """
    Abstract base class for all compiled type nodes.
    """

    @abstractmethod
    def to_schema(self) -> Dict[str, Any]:
        """
        Serialize this node to a JSON Schema dictionary.

        Returns:
            Dict: JSON Schema fragment for this node

        Note:
            Container nodes serialize their children recursively, so this should
            only be called on a tree that went through the normalizer.
        """
        pass


@dataclass
class ObjectType(TypeNode):
    """
    Represents an object with typed properties.

    Example source:
        z.object({title: z.string(), subtitle: z.string().optional()})

    Attributes:
        properties: Property nodes in declaration order
        required: Names of required properties (subset of properties)
    """

    properties: Dict[str, TypeNode] = field(default_factory=dict)
    required: Set[str] = field(default_factory=set)

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {
            "type": "object",
            "properties": {k: v.to_schema() for k, v in self.properties.items()},
        }
        # Keep required in property order so output is deterministic
        required = [name for name in self.properties if name in self.required]
        if required:
            schema["required"] = required
        schema["additionalProperties"] = False
        return schema


@dataclass
class ArrayType(TypeNode):
    """
    Represents an array whose items all match one node.

    Attributes:
        items: Node for array items (None until compiled)
        min_items: Minimum number of items (None = no limit)
        max_items: Maximum number of items (None = no limit)
    """

    items: Optional[TypeNode] = None
    min_items: Optional[int] = None
    max_items: Optional[int] = None

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": "array"}
        items = self.items if self.items is not None else StringType()
        schema["items"] = items.to_schema()
        if self.min_items is not None:
            schema["minItems"] = self.min_items
        if self.max_items is not None:
            schema["maxItems"] = self.max_items
        return schema


@dataclass
class StringType(TypeNode):
    """
    Represents a string with optional length bounds.

    Attributes:
        min_length: Minimum string length (None = no limit)
        max_length: Maximum string length (None = no limit)
    """

    min_length: Optional[int] = None
    max_length: Optional[int] = None

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": "string"}
        if self.min_length is not None:
            schema["minLength"] = self.min_length
        if self.max_length is not None:
            schema["maxLength"] = self.max_length
        return schema


@dataclass
class NumberType(TypeNode):
    """
    Represents a number with optional range bounds.

    Attributes:
        minimum: Minimum value (None = no limit)
        maximum: Maximum value (None = no limit)
    """

    minimum: Optional[Union[int, float]] = None
    maximum: Optional[Union[int, float]] = None

    def to_schema(self) -> Dict[str, Any]:
        schema: Dict[str, Any] = {"type": "number"}
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.maximum is not None:
            schema["maximum"] = self.maximum
        return schema


@dataclass
class BooleanType(TypeNode):
    """Represents a boolean value."""

    def to_schema(self) -> Dict[str, Any]:
        return {"type": "boolean"}


@dataclass
class EnumType(TypeNode):
    """
    Represents a string limited to a fixed list of values.

    Attributes:
        values: Allowed values in source order
    """

    values: List[str] = field(default_factory=list)

    def to_schema(self) -> Dict[str, Any]:
        if not self.values:
            return {"type": "string"}
        return {"type": "string", "enum": list(self.values)}


@dataclass
class UnknownType(TypeNode):
    """
    Terminal fallback for fragments the compiler could not classify.

    The normalizer turns it into a string when used as array items and into
    an empty closed object anywhere else.
    """

    def to_schema(self) -> Dict[str, Any]:
        return {"type": "object", "properties": {}, "additionalProperties": False}
