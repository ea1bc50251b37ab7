"""
layout-schema: JSON Schemas for AI-generated slide content, recovered from layout code

Generated slide layouts declare the content they can render as builder-style
schemas (``const Schema = z.object({...})``). layout-schema reads those
declarations straight from the layout source and compiles them into a closed
JSON Schema that a structured-output model call can be constrained with.

Key Features:
    - Depth-aware declaration extraction (strings, comments, nested calls)
    - Reference inlining across declarations, with cycle protection
    - Strict-mode output: closed objects, concrete array items, no defaults
    - Never fails: malformed input degrades to a canonical fallback schema
    - Validation of generated content against the compiled schema

Quick Start:
    ```python
    from layout_schema import extract_layout_schema

    layout = extract_layout_schema('''
        const layoutId = "title-cards";
        const CardSchema = z.object({ label: z.string().max(40) });
        const Schema = z.object({
            title: z.string().min(3).max(80),
            cards: z.array(CardSchema).max(4),
        });
    ''')
    print(layout.json_schema)
    ```

Architecture:
    1. Scanner: Balanced-span extraction and field splitting
    2. Declarations: Declaration table and entry-point selection
    3. Compiler: Builder expression -> TypeNode tree
    4. Normalizer: TypeNode tree -> closed schema document (or fallback)
    5. Transforms / Validation: Response-schema preparation and content checks
"""

__version__ = "0.1.0"

from layout_schema.config import CompilerConfig  # noqa: F401
from layout_schema.extractor import (  # noqa: F401
    CompileResult,
    LayoutSchema,
    compile_layout,
    compile_layout_schema,
    extract_layout_schema,
    extract_layout_schemas,
)

__all__ = [
    "CompilerConfig",
    "CompileResult",
    "LayoutSchema",
    "compile_layout",
    "compile_layout_schema",
    "extract_layout_schema",
    "extract_layout_schemas",
]
