"""Shared argument validation for wallet MCP tools."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping

_TYPE_CHECKS: Dict[str, Callable[[Any], bool]] = {
    "string": lambda value: isinstance(value, str),
    "number": lambda value: isinstance(value, (int, float)) and not isinstance(value, bool),
    "integer": lambda value: isinstance(value, int) and not isinstance(value, bool),
    "boolean": lambda value: isinstance(value, bool),
}


class ToolValidationError(ValueError):
    """Raised when tool arguments do not match the declared input schema."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"Invalid parameters: {detail}")
        self.detail = detail


def validate_arguments(schema: Mapping[str, Any], arguments: Any) -> Dict[str, Any]:
    """
    Check arguments against a tool's JSON input schema and apply defaults.

    Only the subset of JSON Schema the tool table uses is understood: per-property
    ``type`` and ``default``, the ``required`` list, and closed objects (extra
    keys are rejected). Optional parameters given as ``None`` count as omitted.

    Returns:
        A new dict holding the validated arguments with defaults filled in.

    Raises:
        ToolValidationError: on the first mismatch found.
    """
    if arguments is None:
        arguments = {}
    if not isinstance(arguments, dict):
        raise ToolValidationError("arguments must be an object")

    properties: Mapping[str, Any] = schema.get("properties", {})
    required = set(schema.get("required", []))

    unexpected = sorted(key for key in arguments if key not in properties)
    if unexpected:
        raise ToolValidationError(f"unexpected parameter '{unexpected[0]}'")

    validated: Dict[str, Any] = {}
    for name, spec in properties.items():
        value = arguments.get(name)
        if value is None and name not in required:
            if "default" in spec:
                validated[name] = spec["default"]
            continue
        if name not in arguments:
            raise ToolValidationError(f"missing required parameter '{name}'")
        expected = spec["type"]
        if not _TYPE_CHECKS[expected](value):
            raise ToolValidationError(f"parameter '{name}' must be a {expected}")
        validated[name] = value
    return validated


def format_number(value: int | float) -> str:
    """Render a number for a query string, dropping a trailing ``.0``."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
