"""
Layout schema extraction - the pipeline from layout source to layout record.

This module ties the schema components together:
    1. Build the declaration table from the source
    2. Select the entry-point declaration
    3. Compile it, inlining referenced declarations
    4. Normalize the tree into a closed schema document
    5. Attach the layout id, name and description found in the source

Every step degrades instead of failing: whatever the input, the result holds a
usable schema document (the fallback document in the worst case).

Usage:
    ```python
    from layout_schema import extract_layout_schema

    layout = extract_layout_schema(layout_code)
    print(layout.id, layout.json_schema["properties"].keys())
    ```
"""

import logging
import re
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pydantic import BaseModel

from layout_schema.config import CompilerConfig
from layout_schema.schema.compiler import compile_expression, unquote
from layout_schema.schema.declarations import build_table, select_main
from layout_schema.schema.diagnostics import Diagnostic, DiagnosticKind, Diagnostics
from layout_schema.schema.normalizer import fallback_document, normalize
from layout_schema.schema.types import ObjectType, UnknownType

logger = logging.getLogger(__name__)


def _metadata_pattern(name: str) -> "re.Pattern[str]":
    # The literal ends at its own closing delimiter; other quotes are content
    return re.compile(r"\bconst\s+%s\s*=\s*(([\"'`])(?:\\.|(?!\2).)*\2)" % name)


_LAYOUT_ID = _metadata_pattern("layoutId")
_LAYOUT_NAME = _metadata_pattern("layoutName")
_LAYOUT_DESCRIPTION = _metadata_pattern("layoutDescription")


class LayoutSchema(BaseModel):
    """
    Layout record attached to a stored layout.

    Attributes:
        id: Layout identifier (``const layoutId = "..."``)
        name: Display name (``const layoutName = "..."``)
        description: Description (``const layoutDescription = "..."``)
        json_schema: Compiled schema document
    """

    id: str = "unknown"
    name: str = "Unknown Layout"
    description: str = ""
    json_schema: Dict[str, Any]


@dataclass
class CompileResult:
    """
    Result of compiling one layout source.

    Attributes:
        schema: Compiled schema document (fallback document if used_fallback)
        main_name: Name of the entry-point declaration (None if none found)
        declarations: Names of the collected declarations, in source order
        diagnostics: Recovery events recorded during compilation
        used_fallback: True if the fallback document was substituted
    """

    schema: Dict[str, Any]
    main_name: Optional[str] = None
    declarations: List[str] = field(default_factory=list)
    diagnostics: List[Diagnostic] = field(default_factory=list)
    used_fallback: bool = False


def compile_layout(source_text: str, config: Optional[CompilerConfig] = None) -> CompileResult:
    """
    Compile the schema declared in a layout source.

    Args:
        source_text: Layout source code
        config: Compiler settings (defaults if None)

    Returns:
        CompileResult: Schema document plus what happened on the way

    Note:
        Never raises. Unexpected errors are logged and answered with the
        fallback document.

    Example:
        ```python
        result = compile_layout(layout_code)
        if result.used_fallback:
            for diagnostic in result.diagnostics:
                print(diagnostic.kind, diagnostic.message)
        ```
    """
    config = config or CompilerConfig()
    diagnostics = Diagnostics()
    result = CompileResult(schema={}, diagnostics=diagnostics.items)

    def fall_back() -> CompileResult:
        result.schema = fallback_document()
        result.used_fallback = True
        return result

    try:
        table = build_table(source_text, config, diagnostics)
        result.declarations = list(table)

        main = select_main(source_text, table, config)
        if main is None:
            logger.warning(
                f"No schema declaration found, using fallback document "
                f"(source starts with {source_text[:80]!r})"
            )
            diagnostics.add(DiagnosticKind.NO_MAIN_DECLARATION, "No schema declaration found")
            return fall_back()

        result.main_name = main.name
        logger.debug(f"Compiling entry point {main.name}")

        node = compile_expression(
            main.text,
            table,
            frozenset({main.name}),
            config=config,
            diagnostics=diagnostics
        )

        if isinstance(node, UnknownType):
            result.schema = normalize(node)
            result.used_fallback = True
            return result

        if isinstance(node, ObjectType) and not node.properties:
            logger.warning(f"{main.name} has no properties, using fallback document")
            diagnostics.add(
                DiagnosticKind.EMPTY_SCHEMA,
                f"{main.name} compiled to an object without properties",
                name=main.name
            )
            return fall_back()

        result.schema = normalize(node)
        return result

    except Exception as e:
        logger.exception(f"Unexpected error while compiling layout schema: {e}")
        diagnostics.add(DiagnosticKind.INTERNAL_ERROR, str(e))
        return fall_back()


def compile_layout_schema(source_text: str, config: Optional[CompilerConfig] = None) -> Dict[str, Any]:
    """Compile a layout source and return only the schema document."""
    return compile_layout(source_text, config).schema


def extract_layout_metadata(source_text: str) -> Dict[str, str]:
    """
    Read the layout id, name and description declared in a source.

    Returns:
        Dict with ``id``, ``name`` and ``description`` (defaults when absent)
    """
    metadata = {"id": "unknown", "name": "Unknown Layout", "description": ""}
    for key, pattern in (
        ("id", _LAYOUT_ID),
        ("name", _LAYOUT_NAME),
        ("description", _LAYOUT_DESCRIPTION),
    ):
        match = pattern.search(source_text)
        value = unquote(match.group(1)) if match else None
        if value:
            metadata[key] = value
    return metadata


def extract_layout_schema(source_text: str, config: Optional[CompilerConfig] = None) -> LayoutSchema:
    """
    Build the layout record for a source.

    Args:
        source_text: Layout source code
        config: Compiler settings (defaults if None)

    Returns:
        LayoutSchema: Metadata plus compiled schema document
    """
    metadata = extract_layout_metadata(source_text)
    result = compile_layout(source_text, config)
    if result.used_fallback:
        logger.info(f"Layout {metadata['id']} uses the fallback schema")
    return LayoutSchema(json_schema=result.schema, **metadata)


def extract_layout_schemas(
    sources: Iterable[str],
    config: Optional[CompilerConfig] = None,
    max_workers: Optional[int] = None
) -> List[LayoutSchema]:
    """
    Build layout records for many sources concurrently.

    Compilation holds no shared state, so sources are handed to a thread pool
    as they are; results keep the input order.

    Args:
        sources: Layout source codes
        config: Compiler settings shared by all compilations (read-only)
        max_workers: Thread pool size (executor default if None)

    Returns:
        List[LayoutSchema]: One record per source, in input order
    """
    with ThreadPoolExecutor(max_workers=max_workers) as executor:
        return list(executor.map(lambda source: extract_layout_schema(source, config), sources))
