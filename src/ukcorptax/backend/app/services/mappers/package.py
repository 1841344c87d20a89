"""Build CT return packages from raw payloads.

A package bundles the normalised input, the canonical result and both
mapped views for exactly one return. HMRC accepts returns for periods of at
most 12 months, so a longer accounting period either fails fast
(:func:`build_ct_package`) or is cut into consecutive submissions
(:func:`build_ct_packages_for_long_period`) whose loss pools run on from
one submission to the next.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal
from typing import Any

from ukcorptax.backend.app.models import MONEY_FIELDS, CalculationInput
from ukcorptax.backend.config.schema import TaxYearTable
from ukcorptax.backend.exceptions import SubmissionPeriodError
from ukcorptax.backend.version import get_project_version

from ..calculation_service import EngineRun, run
from ..calculators.periods import days_inclusive, twelve_month_end
from ..calculators.utils import apportion, clamp_non_negative, round_pounds
from ..input_normaliser import canonical_payload, normalise_input
from ..serialization import to_jsonable
from .ct600 import map_ct600_boxes
from .tax_computation import map_tax_computation

_LOGGER = logging.getLogger(__name__)

SCHEMA_VERSION = "HMRC CT600 v3 (2025)"

HEADER_FIELDS: tuple[str, ...] = (
    "company_utr",
    "company_name",
    "company_registration_number",
    "return_type_or_period_indicator",
    "company_address",
)

# Loss pools are threaded between submissions instead of being apportioned.
_CARRIED_FIELDS = frozenset(
    {"trading_loss_brought_forward", "property_loss_brought_forward"}
)
_SIGNED_FIELDS = frozenset({"chargeable_gains"})


def _package(engine_run: EngineRun) -> dict[str, Any]:
    data = engine_run.normalized_input
    result = engine_run.result
    return {
        "inputs": to_jsonable(data),
        "tax_model": to_jsonable(result),
        "ct600_boxes": map_ct600_boxes(data, result),
        "ct600_header": {name: getattr(data, name) for name in HEADER_FIELDS},
        "ct600_attachments": {
            "accounts_and_computation_metadata": data.accounts_and_computation_metadata,
        },
        "tax_computation": map_tax_computation(data, result),
        "metadata": {
            "build_date": datetime.now(timezone.utc).isoformat(),
            "version": get_project_version(),
            "schema_version": SCHEMA_VERSION,
        },
    }


def _run_single(
    data: CalculationInput, tax_year_table: TaxYearTable | None
) -> EngineRun:
    latest_end = twelve_month_end(data.accounting_period_start)
    if data.accounting_period_end > latest_end:
        raise SubmissionPeriodError(
            data.accounting_period_start, data.accounting_period_end, latest_end
        )
    return run(data, tax_year_table)


def build_ct_package(
    raw_input: Mapping[str, Any] | CalculationInput,
    tax_year_table: TaxYearTable | None = None,
) -> dict[str, Any]:
    """Return the CT package for an accounting period of at most 12 months.

    Raises :class:`SubmissionPeriodError` for anything longer.
    """

    data = normalise_input(raw_input)
    return _package(_run_single(data, tax_year_table))


def split_submission_periods(start: date, end: date) -> list[tuple[date, date]]:
    """Cut ``start``..``end`` into consecutive periods of at most 12 months."""

    periods: list[tuple[date, date]] = []
    cursor = start
    while True:
        period_end = min(end, twelve_month_end(cursor))
        periods.append((cursor, period_end))
        if period_end >= end:
            return periods
        cursor = period_end + timedelta(days=1)


def _share_requested(
    remaining: Decimal | None, days: int, remaining_days: int, is_last: bool
) -> Decimal | None:
    if remaining is None:
        return None
    if is_last:
        return remaining
    return round_pounds(apportion(remaining, days, max(1, remaining_days)))


def build_ct_packages_for_long_period(
    raw_input: Mapping[str, Any] | CalculationInput,
    tax_year_table: TaxYearTable | None = None,
) -> list[dict[str, Any]]:
    """Return one CT package per submission period of the accounting period.

    Amounts are apportioned by days, with the last submission taking whatever
    rounding left over so submissions add back to the input. Loss pools carry
    forward from each submission's result, and explicit loss-usage requests
    are spread by days over the submissions still to come.
    """

    data = normalise_input(raw_input)
    start = data.accounting_period_start
    end = data.accounting_period_end
    periods = split_submission_periods(start, end)
    if len(periods) == 1:
        return [build_ct_package(data, tax_year_table)]

    _LOGGER.debug(
        "Splitting accounting period %s..%s into %d submissions", start, end, len(periods)
    )

    base = canonical_payload(data)
    apportioned_fields = [
        name for name in MONEY_FIELDS if name in base and name not in _CARRIED_FIELDS
    ]
    allocated = {name: Decimal("0") for name in apportioned_fields}

    trading_pool = data.trading_loss_brought_forward
    property_pool = data.property_loss_brought_forward
    trading_requested = data.trading_loss_usage_requested
    property_requested = data.property_loss_usage_requested
    remaining_days = data.accounting_period_days

    packages: list[dict[str, Any]] = []
    for position, (period_start, period_end) in enumerate(periods, start=1):
        is_last = position == len(periods)
        days = days_inclusive(period_start, period_end)

        submission = dict(base)
        submission["accounting_period_start"] = period_start
        submission["accounting_period_end"] = period_end
        for name in apportioned_fields:
            if is_last:
                share = base[name] - allocated[name]
                if name not in _SIGNED_FIELDS:
                    share = clamp_non_negative(share)
            else:
                share = round_pounds(apportion(base[name], days, data.accounting_period_days))
            allocated[name] += share
            submission[name] = share

        submission["trading_loss_brought_forward"] = trading_pool
        submission["property_loss_brought_forward"] = property_pool
        trading_share = _share_requested(trading_requested, days, remaining_days, is_last)
        property_share = _share_requested(property_requested, days, remaining_days, is_last)
        submission["trading_loss_usage_requested"] = trading_share
        submission["property_loss_usage_requested"] = property_share

        engine_run = _run_single(normalise_input(submission), tax_year_table)
        result = engine_run.result

        trading_pool = clamp_non_negative(result.computation.trading_loss_carried_forward.exact)
        property_pool = clamp_non_negative(result.property.property_loss_carried_forward.exact)
        if trading_requested is not None:
            trading_requested = clamp_non_negative(trading_requested - trading_share)
        if property_requested is not None:
            property_requested = clamp_non_negative(property_requested - property_share)
        remaining_days -= days

        package = _package(engine_run)
        package["metadata"].update(
            {
                "submission_index": position,
                "submission_count": len(periods),
                "auto_split_from_long_period": True,
                "original_accounting_period_start": start.isoformat(),
                "original_accounting_period_end": end.isoformat(),
            }
        )
        packages.append(package)

    return packages


__all__ = [
    "HEADER_FIELDS",
    "SCHEMA_VERSION",
    "build_ct_package",
    "build_ct_packages_for_long_period",
    "split_submission_periods",
]
