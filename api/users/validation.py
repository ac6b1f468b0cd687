"""
Field rules for create/update payloads.

Pure functions: they either return the accepted fields or raise
`errors.ValidationError` for the first offending field.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .errors import ValidationError

# Checked in this order; the first violation is reported.
FIELDS = ("name", "email")


def _check_name(value: Any) -> None:
    if not isinstance(value, str):
        raise ValidationError("name", "type")
    if not value.strip():
        raise ValidationError("name", "blank")


def _check_email(value: Any) -> None:
    if not isinstance(value, str):
        raise ValidationError("email", "type")
    if value.count("@") != 1:
        raise ValidationError("email", "format")
    local, domain = value.split("@")
    if not local or not domain:
        raise ValidationError("email", "format")


_CHECKS = {
    "name": _check_name,
    "email": _check_email,
}


def validate_create(payload: Mapping[str, Any]) -> dict[str, str]:
    accepted: dict[str, str] = {}
    for field in FIELDS:
        value = payload.get(field)
        if value is None:
            raise ValidationError(field, "required")
        _CHECKS[field](value)
        accepted[field] = value
    return accepted


def validate_update(payload: Mapping[str, Any]) -> dict[str, str]:
    """
    Only supplied fields are checked. An explicit null is rejected rather than
    treated as "clear the column", since both columns are NOT NULL.
    """
    accepted: dict[str, str] = {}
    for field in FIELDS:
        if field not in payload:
            continue
        value = payload[field]
        if value is None:
            raise ValidationError(field, "null")
        _CHECKS[field](value)
        accepted[field] = value
    return accepted
