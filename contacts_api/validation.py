"""
Turns pydantic validation errors into a single client-facing message.

Only the first failing field is reported, so clients get one actionable
sentence instead of the full error list.
"""

from typing import Any, Iterable, Mapping

LABELS = {
    "firstName": "first name",
    "lastName": "last name",
    "email": "email",
    "password": "password",
    "name": "name",
    "phone": "phone",
    "favorite": "favorite",
    "subscription": "subscription",
}

MISSING_BODY_MESSAGE = "Missing required fields"


def _label(field: str) -> str:
    return LABELS.get(field, field)


def _field_of(loc: Iterable[Any]) -> str | None:
    parts = [part for part in loc if part not in ("body", "query", "path", "form")]
    parts = [part for part in parts if isinstance(part, str)]
    return parts[-1] if parts else None


def error_message(error: Mapping[str, Any]) -> str:
    """Render one pydantic error dict as a sentence."""
    kind = error.get("type", "")
    ctx = error.get("ctx") or {}
    field = _field_of(error.get("loc", ()))
    if field is None:
        return MISSING_BODY_MESSAGE
    label = _label(field)

    if kind == "missing":
        return f"Missing required {label} field"
    if kind == "string_pattern_mismatch":
        return f"{label.capitalize()} must only contain alphabet letters"
    if kind == "string_too_short":
        if ctx.get("min_length") == 1:
            return f"{label.capitalize()} is not allowed to be empty"
        return f"{label.capitalize()} must be at least {ctx.get('min_length')} characters long"
    if kind == "string_too_long":
        return f"{label.capitalize()} cannot be longer than {ctx.get('max_length')} characters"
    if kind == "string_type":
        return f"{label.capitalize()} must be a string"
    if kind in ("bool_type", "bool_parsing"):
        return f"{label.capitalize()} must be a boolean"
    if kind in ("int_type", "int_parsing"):
        return f"{label.capitalize()} must be an integer"
    if kind == "greater_than_equal":
        return f"{label.capitalize()} must be greater than or equal to {ctx.get('ge')}"
    if kind == "less_than_equal":
        return f"{label.capitalize()} must be less than or equal to {ctx.get('le')}"
    if kind == "literal_error":
        return f"{label.capitalize()} must be one of {ctx.get('expected', '').replace(' or ', ', ')}".replace("'", "")
    if kind == "email_format":
        return error.get("msg", "")
    return f"{field}: {error.get('msg', '')}"


def first_error_message(errors: Iterable[Mapping[str, Any]]) -> str:
    for error in errors:
        return error_message(error)
    return MISSING_BODY_MESSAGE
