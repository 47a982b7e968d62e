# src/routetrace/infrastructure/utility/pydantic_validation.py
"""
Shared Pydantic validation utilities.

Provides consistent error formatting for ValidationError across:
- TrackerConfig construction (fail-fast configuration errors)
- Interaction entries arriving as raw mappings (logged, then dropped)
"""

import difflib
import re

from pydantic import ValidationError


def _extract_invalid_value(err: dict) -> str | None:
    """Extract the invalid value from a validation error's input context."""
    ctx = err.get("ctx", {})
    input_val = err.get("input")
    if input_val is None:
        input_val = ctx.get("input")
    if input_val is not None:
        return str(input_val)
    return None


def _extract_allowed_values(err: dict) -> list[str]:
    """Extract allowed values from a literal_error or enum error."""
    ctx = err.get("ctx", {})
    expected = ctx.get("expected")
    if expected and isinstance(expected, str):
        return re.findall(r"'([^']+)'", expected)
    return []


def _suggest_similar(invalid: str, allowed: list[str], max_suggestions: int = 3) -> list[str]:
    """Find allowed values most similar to the invalid one."""
    return difflib.get_close_matches(invalid, allowed, n=max_suggestions, cutoff=0.4)


def get_validation_action(err: dict, field_name: str) -> str:
    """
    Get actionable message for a Pydantic validation error.

    Args:
        err: Single error dict from ValidationError.errors()
        field_name: Name of the field that failed validation

    Returns:
        Human-readable action to fix the error
    """
    err_type = err["type"]

    if err_type == "missing":
        return f"Add '{field_name}' - it is required."
    elif err_type == "extra_forbidden":
        return f"Remove '{field_name}' - it is not a known option."
    elif err_type in ("greater_than", "greater_than_equal"):
        limit = err.get("ctx", {}).get("gt", err.get("ctx", {}).get("ge"))
        return f"Use a value for '{field_name}' above {limit}."
    elif err_type in ("less_than", "less_than_equal"):
        return f"Lower the value of '{field_name}'."
    elif err_type in ("enum", "literal_error"):
        invalid = _extract_invalid_value(err)
        allowed = _extract_allowed_values(err)
        if invalid and allowed:
            suggestions = _suggest_similar(invalid, allowed)
            if suggestions:
                return (
                    f"'{invalid}' is not valid for '{field_name}'. "
                    f"Did you mean: {', '.join(suggestions)}?"
                )
            return f"'{invalid}' is not valid for '{field_name}'. Check exact spelling."
        return f"Use an allowed value for '{field_name}'."
    elif err_type.endswith("_type") or err_type.endswith("_parsing"):
        return f"Provide a {err_type.split('_')[0]} value for '{field_name}'."
    else:
        return f"Fix '{field_name}'."


def format_validation_error(e: ValidationError, context: str) -> str:
    """
    Format a Pydantic ValidationError into a readable, actionable message.

    Args:
        e: The ValidationError exception
        context: Description of what was being validated (e.g., "tracker configuration")

    Returns:
        Formatted error message with details and suggested actions
    """
    error_details = []

    for err in e.errors():
        loc = ".".join(str(item) for item in err["loc"]) or "root"
        field_name = str(err["loc"][-1]) if err["loc"] else "root"
        action = get_validation_action(err, field_name)
        error_details.append(f"  - '{loc}': {err['msg']}\n    Action: {action}")

    return f"VALIDATION ERROR for {context}:\n\n" + "\n\n".join(error_details)
