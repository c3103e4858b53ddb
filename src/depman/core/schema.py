"""Per-collection field schemas, validation and CLI value coercion.

Records are stored as open dicts: unknown keys are kept verbatim, and only the
fields named in a schema are checked. Validation happens at the service
boundary, before anything is merged into a document.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any

from depman.core.errors import ValidationError


class FieldType(Enum):
    """Supported record field types."""

    STRING = "string"
    BOOL = "bool"
    STRING_LIST = "string_list"
    STEPS = "steps"


@dataclass
class FieldDef:
    """Schema definition for a single field."""

    field_type: FieldType
    description: str
    required: bool = False
    nullable: bool = False


KNOWN_PLATFORMS = ["common", "android", "ios", "desktop", "web"]

CATEGORY_SCHEMA: dict[str, FieldDef] = {
    "id": FieldDef(FieldType.STRING, "Category id (slug of name)"),
    "name": FieldDef(FieldType.STRING, "Display name", required=True),
    "description": FieldDef(FieldType.STRING, "Short description"),
    "icon": FieldDef(FieldType.STRING, "Display glyph", nullable=True),
    "color": FieldDef(FieldType.STRING, "Display color token", nullable=True),
    "platform": FieldDef(FieldType.STRING_LIST, "Platforms covered by the category"),
}

DEPENDENCY_SCHEMA: dict[str, FieldDef] = {
    "id": FieldDef(FieldType.STRING, "Dependency id (slug of name)"),
    "categoryId": FieldDef(FieldType.STRING, "Owning category id"),
    "name": FieldDef(FieldType.STRING, "Library name", required=True),
    "version": FieldDef(FieldType.STRING, "Version string, kept verbatim", nullable=True),
    "module": FieldDef(FieldType.STRING, "Package coordinate, e.g. group:artifact", nullable=True),
    "platform": FieldDef(FieldType.STRING, "Target platform"),
    "required": FieldDef(FieldType.BOOL, "Whether the category needs it"),
}

GUIDE_SCHEMA: dict[str, FieldDef] = {
    "id": FieldDef(FieldType.STRING, "Guide id", required=True),
    "categoryId": FieldDef(FieldType.STRING, "Category the guide explains"),
    "title": FieldDef(FieldType.STRING, "Guide title"),
    "steps": FieldDef(FieldType.STEPS, "Ordered steps of {title, content}"),
}

POST_SCHEMA: dict[str, FieldDef] = {
    "id": FieldDef(FieldType.STRING, "Post id (slug of title)"),
    "title": FieldDef(FieldType.STRING, "Post title", required=True),
    "author": FieldDef(FieldType.STRING, "Author name", nullable=True),
    "excerpt": FieldDef(FieldType.STRING, "Summary shown in listings"),
    "content": FieldDef(FieldType.STRING, "Markdown-like body", nullable=True),
    "pdfUrl": FieldDef(FieldType.STRING, "Public path of an uploaded PDF body", nullable=True),
    "date": FieldDef(FieldType.STRING, "ISO timestamp set at creation"),
    "tags": FieldDef(FieldType.STRING_LIST, "Post tags"),
}


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def _is_step(value: Any) -> bool:
    return (
        isinstance(value, dict)
        and isinstance(value.get("title", ""), str)
        and isinstance(value.get("content", ""), str)
    )


def check_type(value: Any, field_def: FieldDef) -> bool:
    """Return True if *value* has the field's type.

    None passes only for nullable fields.
    """
    if value is None:
        return field_def.nullable
    ft = field_def.field_type
    if ft == FieldType.STRING:
        return isinstance(value, str)
    if ft == FieldType.BOOL:
        return isinstance(value, bool)
    if ft == FieldType.STRING_LIST:
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    if ft == FieldType.STEPS:
        return isinstance(value, list) and all(_is_step(item) for item in value)
    return False


def validate_field(field: str, value: Any, schema: dict[str, FieldDef]) -> list[str]:
    """Validate a single field value against a schema.

    Returns:
        List of error messages (empty if valid).
    """
    field_def = schema.get(field)
    if field_def is None:
        return [f"Unknown field: {field!r}"]

    if value is None and not field_def.nullable:
        return [f"{field}: may not be null."]

    if not check_type(value, field_def):
        return [f"{field}: expected {field_def.field_type.value}, got {type(value).__name__}."]

    return []


def validate_record(
    record: dict[str, Any],
    schema: dict[str, FieldDef],
    partial: bool = False,
) -> list[str]:
    """Validate the known fields of *record*.

    Args:
        record: Payload to check.
        schema: Collection schema.
        partial: True for merge payloads, where required fields may be absent.

    Returns:
        List of error messages (empty if valid).
    """
    errors: list[str] = []

    if not partial:
        for name, field_def in schema.items():
            if field_def.required and not record.get(name):
                errors.append(f"{name} is required")

    for name, value in record.items():
        if name in schema:
            errors.extend(validate_field(name, value, schema))

    return errors


def require_object(payload: Any, kind: str) -> dict[str, Any]:
    """Reject payloads that are not JSON objects."""
    if not isinstance(payload, dict):
        raise ValidationError(f"{kind} payload must be a JSON object")
    return payload


def require_id(payload: dict[str, Any], kind: str) -> str:
    record_id = payload.get("id")
    if not record_id or not isinstance(record_id, str):
        raise ValidationError(f"{kind} id is required")
    return record_id


def check_payload(
    payload: dict[str, Any],
    schema: dict[str, FieldDef],
    kind: str,
    partial: bool = False,
) -> None:
    """Raise ValidationError listing every problem with *payload*."""
    errors = validate_record(payload, schema, partial=partial)
    if errors:
        raise ValidationError(f"Invalid {kind}: {'; '.join(errors)}", errors)


# ---------------------------------------------------------------------------
# Coercion
# ---------------------------------------------------------------------------


def coerce_value(value_str: str, field_def: FieldDef) -> Any:
    """Coerce a string from the command line to the field's type.

    Raises:
        ValueError: If the value cannot be coerced.
    """
    ft = field_def.field_type

    if ft == FieldType.STRING:
        return value_str

    if ft == FieldType.BOOL:
        lower = value_str.lower()
        if lower in ("true", "yes", "1", "on"):
            return True
        if lower in ("false", "no", "0", "off"):
            return False
        raise ValueError(f"Expected boolean (true/false/yes/no/1/0/on/off), got: {value_str!r}")

    if ft == FieldType.STRING_LIST:
        stripped = value_str.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return [str(item) for item in parsed]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in value_str.split(",") if item.strip()]

    if ft == FieldType.STEPS:
        try:
            parsed = json.loads(value_str)
        except json.JSONDecodeError as e:
            raise ValueError(f"Expected JSON list of steps, got: {value_str!r}") from e
        if not isinstance(parsed, list):
            raise ValueError(f"Expected JSON list of steps, got: {value_str!r}")
        return parsed

    raise ValueError(f"Unknown field type: {ft}")
