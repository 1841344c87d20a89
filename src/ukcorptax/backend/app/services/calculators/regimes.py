"""Merge adjacent financial year slices that share one tax regime."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ukcorptax.backend.config.schema import TaxYearDefinition

from .allocation import FYSlice
from .utils import apportion, total

_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ProfitSlice:
    """An FY slice carrying its day-share of the period's profits."""

    fy_slice: FYSlice
    taxable_profit: Decimal
    augmented_profit: Decimal


@dataclass(frozen=True, slots=True)
class RegimeSlice:
    """One or more contiguous FY slices taxed together."""

    components: tuple[ProfitSlice, ...]

    @property
    def tax_year(self) -> TaxYearDefinition:
        return self.components[0].fy_slice.tax_year

    @property
    def fy_years(self) -> tuple[int, ...]:
        return tuple(component.fy_slice.fy_year for component in self.components)

    @property
    def start(self) -> date:
        return self.components[0].fy_slice.start

    @property
    def end(self) -> date:
        return self.components[-1].fy_slice.end

    @property
    def days(self) -> int:
        return sum(component.fy_slice.days for component in self.components)

    @property
    def taxable_profit(self) -> Decimal:
        return total(component.taxable_profit for component in self.components)

    @property
    def augmented_profit(self) -> Decimal:
        return total(component.augmented_profit for component in self.components)

    @property
    def lower_threshold(self) -> Decimal:
        return total(component.fy_slice.lower_threshold for component in self.components)

    @property
    def upper_threshold(self) -> Decimal:
        return total(component.fy_slice.upper_threshold for component in self.components)

    @property
    def aia_cap(self) -> Decimal:
        return total(component.fy_slice.aia_cap for component in self.components)


def spread_profits(
    fy_slices: Sequence[FYSlice],
    taxable_profit: Decimal,
    augmented_profit: Decimal,
    period_days: int,
) -> tuple[ProfitSlice, ...]:
    """Apportion a period's taxable and augmented profit to its FY slices by days."""

    return tuple(
        ProfitSlice(
            fy_slice=fy_slice,
            taxable_profit=apportion(taxable_profit, fy_slice.days, period_days),
            augmented_profit=apportion(augmented_profit, fy_slice.days, period_days),
        )
        for fy_slice in fy_slices
    )


def collapse_slices(slices: Sequence[ProfitSlice]) -> tuple[RegimeSlice, ...]:
    """Group date-ordered slices whose regime signature is unchanged.

    Marginal relief is then computed once over the combined band instead of
    being split at a financial year boundary where nothing changed.
    """

    ordered = sorted(slices, key=lambda entry: entry.fy_slice.start)
    groups: list[list[ProfitSlice]] = []
    for entry in ordered:
        signature = entry.fy_slice.tax_year.regime_signature
        if groups and groups[-1][-1].fy_slice.tax_year.regime_signature == signature:
            groups[-1].append(entry)
        else:
            groups.append([entry])

    collapsed = tuple(RegimeSlice(tuple(group)) for group in groups)
    if len(collapsed) < len(ordered):
        _LOGGER.debug(
            "Collapsed %d FY slices into %d regime slices", len(ordered), len(collapsed)
        )
    return collapsed


__all__ = ["ProfitSlice", "RegimeSlice", "collapse_slices", "spread_profits"]
