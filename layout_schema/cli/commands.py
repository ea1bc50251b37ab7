"""
CLI command implementations.

This module contains the business logic for each CLI command:
- compile: Compile the schema declared in a layout source
- inspect: Show declarations, entry point and diagnostics
- validate: Validate generated content against a layout's schema
"""

import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional

from layout_schema.config import CompilerConfig, load_config
from layout_schema.extractor import compile_layout, extract_layout_metadata
from layout_schema.schema.declarations import build_table, select_main
from layout_schema.schema.transforms import build_response_schema
from layout_schema.validation import check_document, validate

from .display import (
    console,
    print_declarations,
    print_diagnostics,
    print_error,
    print_header,
    print_info,
    print_json,
    print_problems,
    print_separator,
    print_success,
    print_validation_errors,
    print_warning,
)


def load_source_file(source_path: Path) -> str:
    """
    Read a layout source file.

    Args:
        source_path: Path to the layout source (.tsx, .jsx, .ts, ...)

    Returns:
        Source text

    Raises:
        ValueError: If the file doesn't exist or isn't UTF-8 text
    """
    if not source_path.exists():
        raise ValueError(f"Layout source not found: {source_path}")

    try:
        return source_path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ValueError(f"Layout source is not UTF-8 text: {e}")


def _load_config_or_exit(config_path: Optional[Path], announce: bool = True) -> CompilerConfig:
    if config_path is None:
        return CompilerConfig()
    try:
        config = load_config(config_path)
    except ValueError as e:
        print_error(f"Failed to load config: {e}")
        raise SystemExit(1)
    if announce:
        print_success(f"Loaded config from: {config_path}")
    return config


def _load_source_or_exit(source_path: Path) -> str:
    try:
        return load_source_file(source_path)
    except ValueError as e:
        print_error(f"Failed to load layout source: {e}")
        raise SystemExit(1)


def compile_command(
    source_path: Path,
    output_path: Optional[Path],
    config_path: Optional[Path],
    metadata: bool,
    response_schema: bool,
    raw: bool
) -> None:
    """
    Execute the compile command.

    Args:
        source_path: Path to the layout source
        output_path: Optional path to write the result to
        config_path: Optional path to a compiler config JSON file
        metadata: Emit the layout record (id, name, description, json_schema)
        response_schema: Apply the response-schema transforms to the document
        raw: Print plain JSON to stdout instead of a highlighted panel
    """
    if not raw:
        print_header("layout-schema - Compile")

    config = _load_config_or_exit(config_path, announce=not raw)
    source = _load_source_or_exit(source_path)

    result = compile_layout(source, config)
    schema = build_response_schema(result.schema) if response_schema else result.schema

    data: Dict[str, Any] = schema
    if metadata:
        data = {**extract_layout_metadata(source), "json_schema": schema}

    serialized = json.dumps(data, indent=2) + "\n"
    if output_path:
        output_path.write_text(serialized, encoding="utf-8")

    if raw:
        if not output_path:
            sys.stdout.write(serialized)
        return

    if result.used_fallback:
        print_warning("Layout did not compile, fallback schema used")
        print_diagnostics(result.diagnostics)
    else:
        print_success(f"Compiled entry point [bold]{result.main_name}[/bold]")

    if output_path:
        print_success(f"Wrote schema to: {output_path}")
    else:
        print_json(data, title="Layout Schema" if metadata else "Schema")


def inspect_command(source_path: Path, config_path: Optional[Path], show_schema: bool) -> None:
    """
    Execute the inspect command.

    Args:
        source_path: Path to the layout source
        config_path: Optional path to a compiler config JSON file
        show_schema: Whether to display the compiled document
    """
    print_header("layout-schema - Inspect")

    config = _load_config_or_exit(config_path)
    source = _load_source_or_exit(source_path)

    table = build_table(source, config)
    main = select_main(source, table, config)
    result = compile_layout(source, config)

    print_declarations(dict(table), main.name if main else None)

    if main is None:
        print_warning("No entry point found")
    else:
        print_info(f"Entry point: [bold]{main.name}[/bold]")

    print_separator()
    print_diagnostics(result.diagnostics)
    print_problems(check_document(result.schema))

    if result.used_fallback:
        print_warning("Fallback schema used")

    if show_schema:
        print_json(result.schema, title="Schema")


def validate_command(
    json_path: Path,
    source_path: Path,
    config_path: Optional[Path],
    response_schema: bool,
    show_schema: bool
) -> None:
    """
    Execute the validate command.

    Args:
        json_path: Path to generated content (JSON)
        source_path: Path to the layout source the content was generated for
        config_path: Optional path to a compiler config JSON file
        response_schema: Validate against the response schema (speaker note
            required, media URL fields removed)
        show_schema: Whether to display the schema
    """
    print_header("layout-schema - Validate")

    config = _load_config_or_exit(config_path)
    source = _load_source_or_exit(source_path)

    result = compile_layout(source, config)
    if result.used_fallback:
        print_warning("Layout did not compile, validating against the fallback schema")
    schema = build_response_schema(result.schema) if response_schema else result.schema

    if show_schema:
        print_json(schema, title="Schema")

    try:
        content = json_path.read_text(encoding="utf-8")
        print_success(f"Loaded content from: {json_path}")
    except (OSError, UnicodeDecodeError) as e:
        print_error(f"Failed to read content: {e}")
        raise SystemExit(1)

    print_separator()
    print_info("Validating...")

    validation = validate(content, schema)

    console.print()
    if validation.is_valid:
        print_success("Validation passed!")
    else:
        print_error("Validation failed")
        print_validation_errors(validation.errors)
        raise SystemExit(1)
