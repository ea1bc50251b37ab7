"""
Builder expression compiler - turns one declaration into a TypeNode tree.

This is the recursive-descent step of the pipeline. Given the text of a
builder chain and the declaration table, it:
    - Strips ``.default(...)`` calls (defaults never reach the schema)
    - Classifies the chain into a CallKind
    - Compiles constraints from the chain (``.min``, ``.max``, ...)
    - Inlines references to other declarations, guarding against cycles
    - Descends into ``z.array(...)`` items and ``z.object({...})`` fields

Anything it does not understand becomes UnknownType; compilation never raises
on bad input.

Usage:
    ```python
    from layout_schema.schema.compiler import compile_expression

    table = {"ItemSchema": "z.object({label: z.string()})"}
    node = compile_expression("z.array(ItemSchema).max(4)", table)
    # ArrayType(items=ObjectType(...), min_items=None, max_items=4)
    ```
"""

import logging
import re
from enum import Enum
from typing import AbstractSet, List, Mapping, Optional, Union

from layout_schema.config import CompilerConfig
from layout_schema.schema.diagnostics import DiagnosticKind, Diagnostics
from layout_schema.schema.scanner import (
    ChainCall,
    QUOTES,
    find_balanced,
    parse_chain,
    split_top_level,
    strip_method_calls,
)
from layout_schema.schema.types import (
    ArrayType,
    BooleanType,
    EnumType,
    NumberType,
    ObjectType,
    StringType,
    TypeNode,
    UnknownType,
)

logger = logging.getLogger(__name__)


class CallKind(Enum):
    REFERENCE = "reference"
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    ENUM = "enum"
    ARRAY = "array"
    OBJECT = "object"
    UNKNOWN = "unknown"


CONSTRUCTORS = {
    "object": CallKind.OBJECT,
    "array": CallKind.ARRAY,
    "string": CallKind.STRING,
    "number": CallKind.NUMBER,
    "boolean": CallKind.BOOLEAN,
    "enum": CallKind.ENUM,
    # Dates travel as strings; a literal is a one-value enum
    "date": CallKind.STRING,
    "literal": CallKind.ENUM,
}

OPTIONAL_METHODS = ("optional", "nullish")

_INTEGER = re.compile(r"^\s*(\d+)\s*$")
_NUMBER = re.compile(r"^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)\s*$")
_FIELD = re.compile(
    r"""^\s*(?:([A-Za-z_$][\w$]*)|"((?:[^"\\]|\\.)*)"|'((?:[^'\\]|\\.)*)')\s*:\s*(.+)$""",
    re.DOTALL,
)


def _preview(text: str, limit: int = 60) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit - 3] + "..."


def _render(calls: List[ChainCall]) -> str:
    """Turn calls back into chain text."""
    return ".".join(c.name if c.args is None else f"{c.name}({c.args})" for c in calls)


def _constructor_offset(chain: List[ChainCall], config: CompilerConfig) -> int:
    """Index of the first modifier call (2 for ``z.string()...``, 1 for references)."""
    if chain[0].name == config.builder_namespace and chain[0].args is None:
        return 2
    return 1


def _classify_chain(
    chain: Optional[List[ChainCall]],
    table: Mapping[str, str],
    config: CompilerConfig
) -> CallKind:
    if not chain:
        return CallKind.UNKNOWN

    head = chain[0]
    if head.args is None and head.name in table:
        return CallKind.REFERENCE

    if head.name == config.builder_namespace and head.args is None and len(chain) >= 2:
        constructor = chain[1]
        if constructor.args is not None:
            return CONSTRUCTORS.get(constructor.name, CallKind.UNKNOWN)

    return CallKind.UNKNOWN


def classify(
    expr_text: str,
    table: Mapping[str, str],
    config: Optional[CompilerConfig] = None
) -> CallKind:
    """
    Classify a builder expression by its constructor.

    Args:
        expr_text: Expression text, e.g. ``z.string().min(3)``
        table: Declaration table used to recognize references
        config: Compiler settings (defaults if None)

    Returns:
        CallKind: The kind the compiler will dispatch on

    Example:
        ```python
        classify("z.enum(['a', 'b'])", {})  # CallKind.ENUM
        classify("CardSchema.optional()", {"CardSchema": "..."})  # CallKind.REFERENCE
        classify("z.union([...])", {})  # CallKind.UNKNOWN
        ```
    """
    config = config or CompilerConfig()
    chain = parse_chain(strip_method_calls(expr_text, ("default",)))
    return _classify_chain(chain, table, config)


def is_optional(expr_text: str, config: Optional[CompilerConfig] = None) -> bool:
    """
    Check whether an expression is marked optional on its outer chain.

    Only the outer chain counts: the ``.optional()`` inside
    ``z.object({a: z.string().optional()})`` does not make the object optional.
    """
    config = config or CompilerConfig()
    text = strip_method_calls(expr_text, ("default",)).strip()
    chain = parse_chain(text)
    if not chain:
        return re.search(r"\.\s*optional\s*\(\s*\)\s*$", text) is not None

    offset = _constructor_offset(chain, config)
    return any(
        call.name in OPTIONAL_METHODS and call.args is not None
        for call in chain[offset:]
    )


def unquote(literal: str) -> Optional[str]:
    """
    Return the content of a quoted string literal.

    Args:
        literal: Literal text such as ``"bar"`` or ``'pie'``

    Returns:
        The unescaped content, or None if literal is not a quoted string
    """
    literal = literal.strip()
    if len(literal) < 2 or literal[0] not in QUOTES or literal[-1] != literal[0]:
        return None
    body = literal[1:-1]
    return re.sub(r"\\(.)", r"\1", body)


def _first_argument(args: Optional[str]) -> str:
    if not args:
        return ""
    parts = split_top_level(args)
    return parts[0] if parts else ""


def _int_arg(call: ChainCall) -> Optional[int]:
    match = _INTEGER.match(_first_argument(call.args))
    return int(match.group(1)) if match else None


def _number_arg(call: ChainCall) -> Optional[Union[int, float]]:
    match = _NUMBER.match(_first_argument(call.args))
    if not match:
        return None
    token = match.group(1)
    # Integral literals stay ints so they serialize without a trailing .0
    if "." in token:
        return float(token)
    if "e" in token.lower():
        value = float(token)
        return int(value) if value.is_integer() else value
    return int(token)


def _compile_string(modifiers: List[ChainCall]) -> StringType:
    node = StringType()
    for call in modifiers:
        value = _int_arg(call) if call.args is not None else None
        if value is None:
            continue
        if call.name == "min":
            node.min_length = value
        elif call.name == "max":
            node.max_length = value
        elif call.name == "length":
            node.min_length = value
            node.max_length = value
    return node


def _compile_number(modifiers: List[ChainCall]) -> NumberType:
    node = NumberType()
    for call in modifiers:
        value = _number_arg(call) if call.args is not None else None
        if value is None:
            continue
        if call.name in ("min", "gte"):
            node.minimum = value
        elif call.name in ("max", "lte"):
            node.maximum = value
    return node


def _compile_enum(constructor: ChainCall) -> TypeNode:
    argument = _first_argument(constructor.args)

    if constructor.name == "literal":
        value = unquote(argument)
        if value is None:
            return UnknownType()
        return EnumType(values=[value])

    if not (argument.startswith("[") and argument.endswith("]")):
        logger.debug(f"Enum values are not an inline list: {_preview(argument)}")
        return EnumType()

    values = []
    for item in split_top_level(argument[1:-1]):
        value = unquote(item)
        values.append(value if value is not None else item.strip())
    return EnumType(values=[value for value in values if value])


def _apply_array_bounds(node: ArrayType, modifiers: List[ChainCall]) -> ArrayType:
    for call in modifiers:
        if call.name == "nonempty":
            node.min_items = 1
            continue
        value = _int_arg(call) if call.args is not None else None
        if value is None:
            continue
        if call.name == "min":
            node.min_items = value
        elif call.name == "max":
            node.max_items = value
        elif call.name == "length":
            node.min_items = value
            node.max_items = value
    return node


class _Compiler:
    """State shared by one compile_expression() call tree."""

    def __init__(
        self,
        table: Mapping[str, str],
        config: CompilerConfig,
        diagnostics: Optional[Diagnostics]
    ):
        self.table = table
        self.config = config
        self.diagnostics = diagnostics

    def _record(self, kind: DiagnosticKind, message: str, name: Optional[str] = None) -> None:
        if self.diagnostics is not None:
            self.diagnostics.add(kind, message, name=name)

    def compile(self, expr_text: str, visiting: AbstractSet[str], depth: int) -> TypeNode:
        if depth > self.config.max_depth:
            logger.warning(
                f"Depth ceiling {self.config.max_depth} reached at {_preview(expr_text)}"
            )
            self._record(
                DiagnosticKind.DEPTH_EXCEEDED,
                f"Nesting deeper than {self.config.max_depth} levels"
            )
            return UnknownType()

        text = strip_method_calls(expr_text, ("default",)).strip()
        chain = parse_chain(text)
        kind = _classify_chain(chain, self.table, self.config)

        if kind is CallKind.UNKNOWN:
            logger.debug(f"Unrecognized fragment: {_preview(text)}")
            self._record(
                DiagnosticKind.UNRESOLVED_FRAGMENT,
                f"Unrecognized expression: {_preview(text)}"
            )
            return UnknownType()

        # _classify_chain only returns a known kind for a non-empty chain
        assert chain is not None

        offset = _constructor_offset(chain, self.config)
        array_at = self._array_suffix(chain, offset)
        if array_at is not None:
            # ItemSchema.array() / z.string().array().max(3)
            items = self.compile(_render(chain[:array_at]), visiting, depth + 1)
            return _apply_array_bounds(ArrayType(items=items), chain[array_at + 1:])

        modifiers = chain[offset:]

        if kind is CallKind.REFERENCE:
            return self._compile_reference(chain[0].name, visiting, depth)
        elif kind is CallKind.STRING:
            return _compile_string(modifiers)
        elif kind is CallKind.NUMBER:
            return _compile_number(modifiers)
        elif kind is CallKind.BOOLEAN:
            return BooleanType()
        elif kind is CallKind.ENUM:
            node = _compile_enum(chain[1])
            if isinstance(node, UnknownType):
                self._record(
                    DiagnosticKind.UNRESOLVED_FRAGMENT,
                    f"Unsupported literal: {_preview(text)}"
                )
            return node
        elif kind is CallKind.ARRAY:
            return self._compile_array(chain[1], modifiers, visiting, depth)
        elif kind is CallKind.OBJECT:
            return self._compile_object(chain[1], modifiers, visiting, depth)

        raise AssertionError(f"Unhandled call kind: {kind}")

    @staticmethod
    def _array_suffix(chain: List[ChainCall], offset: int) -> Optional[int]:
        """Index of the last ``.array()`` modifier, if any."""
        for index in range(len(chain) - 1, offset - 1, -1):
            if chain[index].name == "array" and chain[index].args is not None:
                return index
        return None

    def _compile_reference(self, name: str, visiting: AbstractSet[str], depth: int) -> TypeNode:
        if name in visiting:
            logger.warning(f"Reference cycle through {name}, treating it as unknown")
            self._record(
                DiagnosticKind.REFERENCE_CYCLE,
                f"{name} refers back to itself",
                name=name
            )
            return UnknownType()

        logger.debug(f"Inlining reference {name}")
        return self.compile(self.table[name], visiting | {name}, depth + 1)

    def _compile_array(
        self,
        constructor: ChainCall,
        modifiers: List[ChainCall],
        visiting: AbstractSet[str],
        depth: int
    ) -> ArrayType:
        items_text = _first_argument(constructor.args)
        if items_text:
            items = self.compile(items_text, visiting, depth + 1)
        else:
            logger.debug("Array without an item expression")
            items = UnknownType()
        return _apply_array_bounds(ArrayType(items=items), modifiers)

    def _compile_object(
        self,
        constructor: ChainCall,
        modifiers: List[ChainCall],
        visiting: AbstractSet[str],
        depth: int
    ) -> ObjectType:
        node = ObjectType()
        shape = _first_argument(constructor.args)

        close = find_balanced(shape, 0) if shape.startswith("{") else None
        if close is None:
            logger.debug(f"Object shape is not an inline literal: {_preview(shape)}")
            self._record(
                DiagnosticKind.UNRESOLVED_FRAGMENT,
                f"Unsupported object shape: {_preview(shape)}"
            )
            return node

        for entry in split_top_level(shape[1:close - 1]):
            match = _FIELD.match(entry)
            if match is None:
                # Spreads (...Base.shape) and shorthand entries
                logger.debug(f"Skipping object entry: {_preview(entry)}")
                continue

            name = next(group for group in match.groups()[:3] if group is not None)
            expr = match.group(4)

            node.properties[name] = self.compile(expr, visiting, depth + 1)
            if is_optional(expr, self.config):
                node.required.discard(name)
            else:
                node.required.add(name)

        if any(call.name == "partial" and call.args is not None for call in modifiers):
            node.required.clear()

        return node


def compile_expression(
    expr_text: str,
    table: Mapping[str, str],
    visiting: AbstractSet[str] = frozenset(),
    *,
    depth: int = 0,
    config: Optional[CompilerConfig] = None,
    diagnostics: Optional[Diagnostics] = None
) -> TypeNode:
    """
    Compile one builder expression into a TypeNode tree.

    Args:
        expr_text: Expression text, e.g. a value of the declaration table
        table: Declaration table used to resolve references
        visiting: Names of declarations currently being compiled
        depth: Current nesting depth
        config: Compiler settings (defaults if None)
        diagnostics: Collector for recovery events

    Returns:
        TypeNode: Compiled tree (UnknownType for unrecognized input)

    Example:
        ```python
        node = compile_expression('z.string().min(3).default("Untitled")', {})
        # StringType(min_length=3, max_length=None)
        ```
    """
    config = config or CompilerConfig()
    return _Compiler(table, config, diagnostics).compile(expr_text, frozenset(visiting), depth)
