"""
Schema compilation module.

This module recovers a JSON Schema from the builder-style schema declarations
(``const CardSchema = z.object({...})``) found in generated layout sources.

Components:
    - scanner: Depth-aware span extraction, field splitting and chain parsing
    - declarations: Declaration table building and entry-point selection
    - compiler: Recursive compilation of one expression into a TypeNode tree
    - normalizer: Closed-schema serialization and the fallback document
    - transforms: Response-schema adjustments for structured-output calls
    - types: TypeNode definitions (ObjectType, ArrayType, StringType, etc.)

Example:
    ```python
    from layout_schema.schema import build_table, select_main, compile_expression, normalize

    table = build_table(source)
    main = select_main(source, table)
    document = normalize(compile_expression(main.text, table, {main.name}))
    ```
"""

from layout_schema.schema.compiler import CallKind, classify, compile_expression, is_optional
from layout_schema.schema.declarations import DeclarationTable, MainDeclaration, build_table, select_main
from layout_schema.schema.diagnostics import Diagnostic, DiagnosticKind, Diagnostics, SchemaCompilationError
from layout_schema.schema.normalizer import FALLBACK_DOCUMENT, fallback_document, normalize
from layout_schema.schema.scanner import extract_span, split_top_level
from layout_schema.schema.transforms import (
    add_additional_properties,
    add_field,
    build_response_schema,
    remove_fields,
)

__all__ = [
    "CallKind",
    "classify",
    "compile_expression",
    "is_optional",
    "DeclarationTable",
    "MainDeclaration",
    "build_table",
    "select_main",
    "Diagnostic",
    "DiagnosticKind",
    "Diagnostics",
    "SchemaCompilationError",
    "FALLBACK_DOCUMENT",
    "fallback_document",
    "normalize",
    "extract_span",
    "split_top_level",
    "add_additional_properties",
    "add_field",
    "build_response_schema",
    "remove_fields",
]
