"""
Validation layer module.

This module checks compiled layout schemas and the content generated against
them, with readable error reporting.

Components:
    - validator: jsonschema-based content validation and strict-mode document checks
    - error_formatter: Hints for fixing content that does not fit a layout

Example:
    ```python
    from layout_schema.validation import check_document, suggest_fix, validate

    assert check_document(schema) == []

    result = validate(generated_json, schema)
    for error in result.errors:
        print(f"{error.path}: {suggest_fix(error)}")
    ```
"""

from layout_schema.validation.validator import (
    ROOT_PATH,
    ValidationError,
    ValidationResult,
    check_document,
    format_path,
    format_validation_errors,
    quick_validate,
    validate,
)
from layout_schema.validation.error_formatter import format_error_with_context, suggest_fix

__all__ = [
    "ROOT_PATH",
    "ValidationError",
    "ValidationResult",
    "check_document",
    "format_path",
    "format_validation_errors",
    "quick_validate",
    "validate",
    "format_error_with_context",
    "suggest_fix",
]
