"""Threshold and AIA cap apportionment per financial year slice."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from ukcorptax.backend.config.schema import TaxYearDefinition

from .periods import FYOverlap, Period
from .utils import ZERO, apportion, clamp_non_negative, round_pounds, safe_ratio


@dataclass(frozen=True, slots=True)
class FYSlice:
    """A period/FY overlap with its apportioned thresholds and AIA cap."""

    overlap: FYOverlap
    lower_threshold: Decimal
    upper_threshold: Decimal
    aia_cap: Decimal

    @property
    def tax_year(self) -> TaxYearDefinition:
        return self.overlap.tax_year

    @property
    def fy_year(self) -> int:
        return self.overlap.fy_year

    @property
    def start(self) -> date:
        return self.overlap.start

    @property
    def end(self) -> date:
        return self.overlap.end

    @property
    def days(self) -> int:
        return self.overlap.days


def associated_divisor(associated_company_count: int) -> int:
    return max(0, associated_company_count) + 1


def _apportion_annual(
    annual: Decimal, overlap: FYOverlap, period: Period, divisor: int
) -> Decimal:
    if period.is_short_period:
        # Time-apportion against the FY itself, so a short period gets less than a year.
        return apportion(annual, overlap.days, overlap.fy_total_days) / divisor
    # Whole 12-month period: the annual figure is spread by day share and never exceeded.
    return apportion(annual / divisor, overlap.days, period.days)


def allocate_period_slices(
    period: Period,
    overlaps: Sequence[FYOverlap],
    associated_company_count: int,
) -> tuple[FYSlice, ...]:
    """Attach marginal relief limits and the AIA cap to each overlap of ``period``."""

    divisor = associated_divisor(associated_company_count)
    slices: list[FYSlice] = []
    for overlap in overlaps:
        tax_year = overlap.tax_year
        slices.append(
            FYSlice(
                overlap=overlap,
                lower_threshold=_apportion_annual(
                    tax_year.lower_threshold, overlap, period, divisor
                ),
                upper_threshold=_apportion_annual(
                    tax_year.upper_threshold, overlap, period, divisor
                ),
                aia_cap=_apportion_annual(tax_year.aia_limit, overlap, period, divisor),
            )
        )
    return tuple(slices)


@dataclass(frozen=True, slots=True)
class SharedCapClaim:
    trade: Decimal
    non_trade: Decimal

    @property
    def total(self) -> Decimal:
        return self.trade + self.non_trade


def allocate_shared_cap(
    trade_requested: Decimal, non_trade_requested: Decimal, cap: Decimal
) -> SharedCapClaim:
    """Share one AIA cap between trade and non-trade additions.

    Requests within the cap are granted in full. Otherwise the cap is split
    in proportion to the requests, each side is clamped to its own request and
    any headroom freed by the clamp goes to trade first, then non-trade, so
    the claims always sum to the cap exactly.
    """

    cap = clamp_non_negative(cap)
    trade = clamp_non_negative(trade_requested)
    non_trade = clamp_non_negative(non_trade_requested)
    requested = trade + non_trade

    if cap <= 0 or requested <= 0:
        return SharedCapClaim(ZERO, ZERO)
    if requested <= cap:
        return SharedCapClaim(trade, non_trade)

    trade_claim = min(trade, apportion(cap, trade, requested))
    non_trade_claim = min(non_trade, cap - trade_claim)

    remainder = cap - (trade_claim + non_trade_claim)
    if remainder > 0:
        top_up = min(remainder, trade - trade_claim)
        trade_claim += top_up
        remainder -= top_up
    if remainder > 0:
        non_trade_claim += min(remainder, non_trade - non_trade_claim)

    return SharedCapClaim(trade_claim, non_trade_claim)


def allocate_by_weight(amount: Decimal, weights: Sequence[Decimal]) -> list[Decimal]:
    """Split a whole-pound ``amount`` across rows by weight for display.

    Every row but the last is rounded independently; the last takes whatever
    remains so the rows always add back to the rounded total.
    """

    if not weights:
        return []

    total_weight = sum(weights, ZERO)
    remaining = round_pounds(amount)
    shares: list[Decimal] = []
    for position, weight in enumerate(weights):
        if position == len(weights) - 1:
            shares.append(remaining)
            break
        share = round_pounds(amount * safe_ratio(weight, total_weight))
        shares.append(share)
        remaining -= share
    return shares


__all__ = [
    "FYSlice",
    "SharedCapClaim",
    "allocate_by_weight",
    "allocate_period_slices",
    "allocate_shared_cap",
    "associated_divisor",
]
