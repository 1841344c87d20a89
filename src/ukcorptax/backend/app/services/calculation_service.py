"""Orchestrate normalisation, period splitting and the tax calculation stages.

The calculation service threads one accounting period through every
calculator in order: split into submission periods, resolve financial years,
apportion thresholds and AIA caps, classify profits, relieve losses, collapse
unchanged regimes, tax each slice and aggregate. Loss pools are the only
state carried from one period to the next. Profiling hooks live here so the
calculators stay pure arithmetic.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from time import perf_counter
from typing import Any

from ukcorptax.backend.app.models import CalculationInput, CorporationTaxResult
from ukcorptax.backend.config.schema import TaxYearTable
from ukcorptax.backend.config.year_config import load_tax_year_table

from .calculators import (
    LossPool,
    PeriodOutcome,
    aggregate,
    allocate_period_slices,
    apply_loss_relief,
    apportion_to_period,
    classify_profits,
    collapse_slices,
    resolve_fy_overlaps,
    split_accounting_period,
    spread_profits,
    tax_regime_slice,
    total,
)
from .input_normaliser import normalise_input
from .serialization import to_jsonable

_LOGGER = logging.getLogger(__name__)


def _profiling_enabled() -> bool:
    """Return ``True`` when calculation profiling should be captured."""

    flag = os.getenv("UKCT_PROFILE_CALCULATIONS", "")
    return flag.strip().lower() in {"1", "true", "yes", "on"}


@contextmanager
def _profile_section(name: str, store: dict[str, float] | None):
    """Capture the duration of a named section when profiling is enabled."""

    if store is None:
        yield
        return

    start = perf_counter()
    try:
        yield
    finally:
        store[name] = store.get(name, 0.0) + perf_counter() - start


@dataclass(frozen=True, slots=True)
class EngineRun:
    """Normalised input together with the canonical result computed from it."""

    normalized_input: CalculationInput
    result: CorporationTaxResult


def run(
    raw_input: Mapping[str, Any] | CalculationInput,
    tax_year_table: TaxYearTable | None = None,
) -> EngineRun:
    """Compute corporation tax for one accounting period.

    ``tax_year_table`` defaults to the bundled reference table. The call is a
    pure function of its arguments: nothing is cached between calls apart
    from the default table itself.
    """

    timings: dict[str, float] | None = {} if _profiling_enabled() else None
    overall_start = perf_counter() if timings is not None else None

    with _profile_section("normalise_input", timings):
        data = normalise_input(raw_input)
    table = tax_year_table if tax_year_table is not None else load_tax_year_table()

    with _profile_section("split_periods", timings):
        periods = split_accounting_period(
            data.accounting_period_start, data.accounting_period_end
        )

    opening_trading = LossPool.opening(
        data.trading_loss_brought_forward, data.trading_loss_usage_requested
    )
    opening_property = LossPool.opening(
        data.property_loss_brought_forward, data.property_loss_usage_requested
    )
    trading_pool = opening_trading
    property_pool = opening_property

    outcomes: list[PeriodOutcome] = []
    for period in periods:
        with _profile_section("allocate", timings):
            overlaps = resolve_fy_overlaps(period, table)
            fy_slices = allocate_period_slices(
                period, overlaps, data.associated_company_count
            )

        with _profile_section("classify_profits", timings):
            shares = apportion_to_period(data, period)
            streams = classify_profits(
                shares, total(fy_slice.aia_cap for fy_slice in fy_slices)
            )

        with _profile_section("loss_relief", timings):
            relief = apply_loss_relief(streams, trading_pool, property_pool)
        trading_pool = relief.trading.closing
        property_pool = relief.property.closing

        augmented = relief.taxable_total + shares.dividend_income
        with _profile_section("tax_slices", timings):
            regime_slices = collapse_slices(
                spread_profits(fy_slices, relief.taxable_total, augmented, period.days)
            )
            taxed = tuple(
                (regime_slice, tax_regime_slice(regime_slice))
                for regime_slice in regime_slices
            )

        outcomes.append(
            PeriodOutcome(
                period=period,
                shares=shares,
                streams=streams,
                relief=relief,
                augmented_profit=augmented,
                slices=taxed,
            )
        )

    with _profile_section("aggregate", timings):
        result = aggregate(data, outcomes, opening_trading, opening_property)

    if timings is not None and overall_start is not None:
        timings["total"] = perf_counter() - overall_start
        _LOGGER.debug(
            "run timings (ms): %s",
            {name: round(duration * 1000, 3) for name, duration in timings.items()},
        )

    return EngineRun(normalized_input=data, result=result)


def calculate_corporation_tax(
    payload: Mapping[str, Any],
    tax_year_table: TaxYearTable | None = None,
) -> dict[str, Any]:
    """Run the engine and return a JSON-ready document."""

    engine_run = run(payload, tax_year_table)
    return {
        "normalized_input": to_jsonable(engine_run.normalized_input),
        "result": to_jsonable(engine_run.result),
    }


__all__ = ["EngineRun", "calculate_corporation_tax", "run"]
