"""Input checks applied before any store is touched."""

from __future__ import annotations

import re

from agrihub.errors import ValidationError

FARM_NAME_MAX_LENGTH = 100

_FARM_NAME_RE = re.compile(r"^[A-Za-z0-9 _-]+$")
_ADDRESS_RE = re.compile(r"^0x[0-9a-fA-F]{40}$")


def validate_farm_name(name: str) -> str:
    if not name or not name.strip():
        raise ValidationError("farmName", "must not be empty")
    if len(name) > FARM_NAME_MAX_LENGTH:
        raise ValidationError("farmName", f"must be at most {FARM_NAME_MAX_LENGTH} characters")
    if not _FARM_NAME_RE.match(name):
        raise ValidationError("farmName", "may only contain letters, digits, spaces, '_' and '-'")
    return name


def validate_address(value: str, field: str = "address") -> str:
    if not _ADDRESS_RE.match(value or ""):
        raise ValidationError(field, "must be a 0x-prefixed 40 hex digit address")
    return value
