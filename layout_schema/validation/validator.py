"""
Validation of compiled schemas and of content generated against them.

Two questions come up once a layout schema is compiled:
    1. Is the document itself usable as a strict structured-output schema?
       (check_document)
    2. Does content produced by the model fit the layout? (validate)

Both rely on the jsonschema library (Draft 7).

Usage:
    ```python
    from layout_schema.validation import check_document, validate

    problems = check_document(layout.json_schema)
    result = validate('{"title": "Quarterly review"}', layout.json_schema)
    if not result.is_valid:
        print(format_validation_errors(result.errors))
    ```
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from jsonschema import Draft7Validator
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as SchemaViolation

logger = logging.getLogger(__name__)

ROOT_PATH = "(root)"


@dataclass
class ValidationError:
    """
    One way in which generated content breaks a layout schema.

    Attributes:
        path: Field location such as ``cards[1].heading`` (ROOT_PATH for the slide itself)
        message: Message reported by jsonschema
        validator: Keyword that failed (``required``, ``maxLength``, ...)
        expected: Keyword value from the schema (``40`` for ``maxLength: 40``)
        actual: What the content holds; for ``required`` and
            ``additionalProperties`` the missing or unexpected field names
    """
    path: str
    message: str
    validator: str
    expected: Any = None
    actual: Any = None


@dataclass
class ValidationResult:
    """
    Result of validating content against a layout schema.

    Attributes:
        is_valid: Whether the content fits the schema
        errors: Every error found, ordered by field location
        data: Parsed content (None unless valid)
    """
    is_valid: bool
    errors: List[ValidationError] = field(default_factory=list)
    data: Optional[Any] = None


def format_path(parts: Iterable[Union[str, int]]) -> str:
    """
    Render a jsonschema path as a field location.

    Example:
        ```python
        format_path(["cards", 1, "heading"])  # 'cards[1].heading'
        format_path([])                       # '(root)'
        ```
    """
    text = ""
    for part in parts:
        if isinstance(part, int):
            text += f"[{part}]"
        else:
            text += f".{part}" if text else str(part)
    return text or ROOT_PATH


def _location_key(parts: Iterable[Union[str, int]]) -> List[Tuple[int, Union[str, int]]]:
    # Indexes sort numerically, cards[2] before cards[10]
    return [(0, part) if isinstance(part, int) else (1, str(part)) for part in parts]


def _convert_error(violation: SchemaViolation) -> ValidationError:
    expected = violation.validator_value
    actual = violation.instance

    if violation.validator == "required" and isinstance(actual, dict):
        actual = [name for name in expected if name not in violation.instance]
    elif violation.validator == "additionalProperties" and isinstance(actual, dict):
        known = violation.schema.get("properties", {}) if isinstance(violation.schema, dict) else {}
        expected = list(known)
        actual = [name for name in violation.instance if name not in known]

    return ValidationError(
        path=format_path(violation.absolute_path),
        message=violation.message,
        validator=str(violation.validator),
        expected=expected,
        actual=actual
    )


def validate(output: Union[str, Dict[str, Any]], schema: Dict[str, Any]) -> ValidationResult:
    """
    Validate generated content against a schema document.

    Args:
        output: Model output as a JSON string, or already-parsed content
        schema: Schema document

    Returns:
        ValidationResult: All errors found (not just the first)

    Example:
        ```python
        result = validate('{"title": "Hi"}', {
            "type": "object",
            "properties": {"title": {"type": "string", "minLength": 3}},
            "required": ["title"],
            "additionalProperties": False
        })
        result.errors[0].path       # 'title'
        result.errors[0].validator  # 'minLength'
        ```
    """
    if isinstance(output, str):
        try:
            data = json.loads(output)
        except json.JSONDecodeError as e:
            logger.debug(f"Content is not JSON: {e}")
            return ValidationResult(
                is_valid=False,
                errors=[
                    ValidationError(
                        path=ROOT_PATH,
                        message=f"Invalid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
                        validator="json",
                        expected="a JSON object",
                        actual=output[:80]
                    )
                ]
            )
    else:
        data = output

    violations = sorted(
        Draft7Validator(schema).iter_errors(data),
        key=lambda v: _location_key(v.absolute_path)
    )
    errors = [_convert_error(violation) for violation in violations]

    if errors:
        logger.debug(f"Content failed validation with {len(errors)} error(s)")
        return ValidationResult(is_valid=False, errors=errors)
    return ValidationResult(is_valid=True, data=data)


def check_document(schema: Dict[str, Any]) -> List[str]:
    """
    List the problems that make a document unusable for strict structured output.

    Checks that the document is a valid Draft 7 schema, that every object is
    closed and lists only existing properties as required, and that every
    array has an items schema.

    Args:
        schema: Schema document

    Returns:
        List of problem descriptions (empty if the document is usable)
    """
    problems: List[str] = []

    try:
        Draft7Validator.check_schema(schema)
    except SchemaError as e:
        problems.append(f"Invalid JSON Schema: {e.message}")

    def walk(node: Any, location: str) -> None:
        if not isinstance(node, dict):
            return

        node_type = node.get("type")
        if node_type == "object":
            if node.get("additionalProperties") is not False:
                problems.append(f"{location}: object is not closed (additionalProperties)")
            properties = node.get("properties")
            if not isinstance(properties, dict):
                problems.append(f"{location}: object has no properties")
                properties = {}
            for name in node.get("required", []):
                if name not in properties:
                    problems.append(f"{location}: required property '{name}' is not defined")
            for name, prop in properties.items():
                walk(prop, f"{location}.{name}")

        elif node_type == "array":
            items = node.get("items")
            if not isinstance(items, dict) or "type" not in items:
                problems.append(f"{location}: array has no concrete items")
            else:
                walk(items, f"{location}[]")

    walk(schema, "root")
    return problems


def format_validation_errors(errors: List[ValidationError]) -> str:
    """
    Summarize validation errors, one line per error.

    Example output:
        2 problem(s) in generated content:
          - title [minLength]: 'Hi' is too short
          - cards [maxItems]: [...] is too long
    """
    if not errors:
        return "No validation errors"

    lines = [f"{len(errors)} problem(s) in generated content:"]
    lines.extend(f"  - {error.path} [{error.validator}]: {error.message}" for error in errors)
    return "\n".join(lines)


def quick_validate(output: Union[str, Dict[str, Any]], schema: Dict[str, Any]) -> bool:
    """Validate content and return only True/False."""
    return validate(output, schema).is_valid
