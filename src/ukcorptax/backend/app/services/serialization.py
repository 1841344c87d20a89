"""Convert engine records into JSON-compatible structures.

Money is reported as whole pounds; rates and thresholds are plain floats.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import fields, is_dataclass
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel

from ukcorptax.backend.app.models import Amount


def _decimal(value: Decimal) -> int | float:
    if value == value.to_integral_value():
        return int(value)
    return float(value)


def to_jsonable(value: Any) -> Any:
    """Recursively render ``value`` using only JSON types."""

    if isinstance(value, Amount):
        return value.rounded
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        return _decimal(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, BaseModel):
        return to_jsonable(value.model_dump())
    if is_dataclass(value) and not isinstance(value, type):
        return {field.name: to_jsonable(getattr(value, field.name)) for field in fields(value)}
    if isinstance(value, Mapping):
        return {str(key): to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    return value


__all__ = ["to_jsonable"]
