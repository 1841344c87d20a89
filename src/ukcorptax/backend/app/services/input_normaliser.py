"""Turn raw payloads into the frozen :class:`CalculationInput` record."""

from __future__ import annotations

from collections.abc import Mapping
from decimal import Decimal
from typing import Any

from pydantic import ValidationError

from ukcorptax.backend.app.models import (
    MONEY_FIELDS,
    OPTIONAL_MONEY_FIELDS,
    CalculationInput,
    CalculationRequest,
    format_validation_error,
    resolve_aliases,
)
from ukcorptax.backend.exceptions import InputError, InvalidPeriodError

from .calculators.periods import days_inclusive
from .calculators.utils import clamp_non_negative, round_pounds

_TOTAL_AIA_FIELD = "annual_investment_allowance_total_additions"


def _drop_blank_amounts(payload: dict[str, Any]) -> dict[str, Any]:
    # Blank money cells mean "not supplied" so the model defaults apply.
    blank_fields = set(MONEY_FIELDS) | set(OPTIONAL_MONEY_FIELDS)
    return {
        key: value
        for key, value in payload.items()
        if not (
            key in blank_fields
            and (value is None or (isinstance(value, str) and not value.strip()))
        )
    }


def _trade_aia_additions(request: CalculationRequest) -> Decimal:
    trade = request.annual_investment_allowance_trade_additions
    if trade > 0:
        return trade
    total_additions = request.annual_investment_allowance_total_additions
    if total_additions > 0:
        # Older payloads only carried a combined figure.
        return clamp_non_negative(
            total_additions - request.annual_investment_allowance_non_trade_additions
        )
    return trade


def _validate_request(payload: Mapping[str, Any]) -> CalculationRequest:
    resolved = _drop_blank_amounts(resolve_aliases(payload))
    try:
        return CalculationRequest.model_validate(resolved)
    except ValidationError as exc:
        raise InputError(format_validation_error(exc)) from exc


def normalise_input(raw: Mapping[str, Any] | CalculationInput) -> CalculationInput:
    """Validate ``raw`` and return whole-pound canonical input.

    Legacy field names are resolved first, missing amounts default to zero and
    every amount is rounded to whole pounds. Raises :class:`InputError` for
    malformed payloads and :class:`InvalidPeriodError` when the accounting
    period ends before it starts.
    """

    if isinstance(raw, CalculationInput):
        return raw
    if not isinstance(raw, Mapping):
        raise InputError("Payload must be a mapping")

    request = _validate_request(raw)
    start = request.accounting_period_start
    end = request.accounting_period_end
    if end < start:
        raise InvalidPeriodError(start, end)

    values = request.model_dump(exclude={_TOTAL_AIA_FIELD})
    values["annual_investment_allowance_trade_additions"] = _trade_aia_additions(request)
    for name in MONEY_FIELDS:
        if name in values:
            values[name] = round_pounds(values[name])
    for name in OPTIONAL_MONEY_FIELDS:
        if values[name] is not None:
            values[name] = round_pounds(values[name])
    values["accounting_period_days"] = days_inclusive(start, end)

    return CalculationInput.model_validate(values)


def canonical_payload(data: CalculationInput) -> dict[str, Any]:
    """Return ``data`` as a raw payload that :func:`normalise_input` accepts."""

    return data.model_dump(exclude={"accounting_period_days"})


__all__ = ["canonical_payload", "normalise_input"]
