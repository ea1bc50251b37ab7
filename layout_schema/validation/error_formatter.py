"""
Error formatter - turn content validation errors into hints.

Generated slide content usually fails a layout schema in a handful of ways:
a missing field, text too long for its box, more cards than the layout has
room for, or a field the layout cannot render. These helpers phrase each
error so a reviewer (or a retry prompt) knows what to change.
"""

from typing import Any

from layout_schema.validation.validator import ValidationError


def _names(values: Any) -> str:
    if isinstance(values, (list, tuple)):
        return ", ".join(repr(value) for value in values)
    return repr(values)


def format_error_with_context(error: ValidationError) -> str:
    """
    Describe an error with the schema rule, the offending value and a hint.

    Args:
        error: Validation error

    Returns:
        str: Multi-line description, e.g.::

            title: 'Hi' is too short
               rule:  minLength = 3
               value: 'Hi'
               fix:   Lengthen title to at least 3 characters
    """
    lines = [f"{error.path}: {error.message}"]
    if error.expected is not None:
        lines.append(f"   rule:  {error.validator} = {error.expected!r}")
    lines.append(f"   value: {error.actual!r}")
    lines.append(f"   fix:   {suggest_fix(error)}")
    return "\n".join(lines)


def suggest_fix(error: ValidationError) -> str:
    """
    Suggest how to fix a validation error.

    Args:
        error: Validation error

    Returns:
        str: Suggested fix
    """
    path, limit = error.path, error.expected

    if error.validator == "required":
        return f"Fill in {_names(error.actual)} at {path}"

    elif error.validator == "additionalProperties":
        return f"Drop {_names(error.actual)} at {path}, the layout has no place for them"

    elif error.validator == "type":
        return f"Give {path} a value of type {limit}"

    elif error.validator == "enum":
        return f"Use one of {_names(limit)} for {path}"

    elif error.validator == "maxLength":
        return f"Shorten {path} to at most {limit} characters"

    elif error.validator == "minLength":
        return f"Lengthen {path} to at least {limit} characters"

    elif error.validator == "maxItems":
        return f"Keep at most {limit} items in {path}"

    elif error.validator == "minItems":
        return f"Provide at least {limit} items in {path}"

    elif error.validator == "maximum":
        return f"Keep {path} at or below {limit}"

    elif error.validator == "minimum":
        return f"Keep {path} at or above {limit}"

    elif error.validator == "json":
        return "Return a single JSON object and nothing else"

    else:
        return f"Check the layout schema for {path}"
