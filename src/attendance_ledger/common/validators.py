from __future__ import annotations

import uuid

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"Invalid {field_name}: empty or null")
    return str(value).strip()


def require_uuid(value: str, field_name: str) -> str:
    try:
        uuid.UUID(value)
    except (TypeError, ValueError) as exc:
        raise ValidationError(f"Invalid {field_name}: {value!r} is not a valid UUID") from exc
    return value
