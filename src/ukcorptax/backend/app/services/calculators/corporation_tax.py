"""Three-band corporation tax with marginal relief."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from .regimes import RegimeSlice
from .utils import ZERO, clamp_non_negative, safe_ratio


class Band(str, Enum):
    SMALL_PROFITS = "small_profits"
    MARGINAL_RELIEF = "marginal_relief"
    MAIN_RATE = "main_rate"


@dataclass(frozen=True, slots=True)
class SliceTax:
    """Exact charge (net of relief) and marginal relief for one slice."""

    band: Band
    charge: Decimal
    marginal_relief: Decimal


def compute_corporation_tax(
    taxable_profit: Decimal,
    augmented_profit: Decimal,
    lower_limit: Decimal,
    upper_limit: Decimal,
    small_rate: Decimal,
    main_rate: Decimal,
    relief_fraction: Decimal,
) -> SliceTax:
    """Apply the small profits rate, main rate or marginal relief.

    The band is chosen on augmented profits; tax is charged on taxable
    profits. Values stay unrounded so they can be summed across slices.
    """

    taxable = clamp_non_negative(taxable_profit)
    augmented = clamp_non_negative(augmented_profit)
    lower = clamp_non_negative(lower_limit)
    upper = clamp_non_negative(upper_limit)

    if augmented <= lower:
        return SliceTax(Band.SMALL_PROFITS, taxable * small_rate, ZERO)
    if augmented >= upper:
        return SliceTax(Band.MAIN_RATE, taxable * main_rate, ZERO)

    relief = relief_fraction * (upper - augmented) * safe_ratio(taxable, augmented)
    return SliceTax(Band.MARGINAL_RELIEF, taxable * main_rate - relief, relief)


def tax_regime_slice(regime_slice: RegimeSlice) -> SliceTax:
    tax_year = regime_slice.tax_year
    return compute_corporation_tax(
        regime_slice.taxable_profit,
        regime_slice.augmented_profit,
        regime_slice.lower_threshold,
        regime_slice.upper_threshold,
        tax_year.small_rate,
        tax_year.main_rate,
        tax_year.relief_fraction,
    )


def has_small_profits_or_marginal_relief_entitlement(
    taxable_profit: Decimal,
    augmented_profit: Decimal,
    upper_limit: Decimal,
    small_rate: Decimal,
    main_rate: Decimal,
    marginal_relief: Decimal,
) -> bool:
    """Whether a slice qualifies for the small profits rate or marginal relief."""

    if taxable_profit <= 0:
        return False
    if not (small_rate > 0 and main_rate > small_rate):
        return False
    if upper_limit <= 0:
        return marginal_relief > 0
    return clamp_non_negative(augmented_profit) < upper_limit


__all__ = [
    "Band",
    "SliceTax",
    "compute_corporation_tax",
    "has_small_profits_or_marginal_relief_entitlement",
    "tax_regime_slice",
]
