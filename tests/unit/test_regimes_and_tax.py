"""Unit coverage for regime slicing and the three-band tax computation."""

from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from ukcorptax.backend.app.services.calculators.allocation import allocate_period_slices
from ukcorptax.backend.app.services.calculators.corporation_tax import (
    Band,
    compute_corporation_tax,
    has_small_profits_or_marginal_relief_entitlement,
    tax_regime_slice,
)
from ukcorptax.backend.app.services.calculators.periods import (
    resolve_fy_overlaps,
    split_accounting_period,
)
from ukcorptax.backend.app.services.calculators.regimes import (
    collapse_slices,
    spread_profits,
)
from ukcorptax.backend.config.year_config import load_tax_year_table

D = Decimal
_LIMITS = (D("50000"), D("250000"), D("0.19"), D("0.25"), D("0.015"))


def _regime_slices(start: date, end: date, profit: str, augmented: str | None = None):
    (period,) = split_accounting_period(start, end)
    fy_slices = allocate_period_slices(
        period, resolve_fy_overlaps(period, load_tax_year_table()), 0
    )
    spread = spread_profits(fy_slices, D(profit), D(augmented or profit), period.days)
    return spread, collapse_slices(spread)


@pytest.mark.parametrize(
    ("profit", "band", "charge", "relief"),
    [
        ("40000", Band.SMALL_PROFITS, "7600", "0"),
        ("50000", Band.SMALL_PROFITS, "9500", "0"),
        ("100000", Band.MARGINAL_RELIEF, "22750", "2250"),
        ("250000", Band.MAIN_RATE, "62500", "0"),
        ("300000", Band.MAIN_RATE, "75000", "0"),
    ],
)
def test_three_band_computation(profit: str, band: Band, charge: str, relief: str) -> None:
    tax = compute_corporation_tax(D(profit), D(profit), *_LIMITS)

    assert tax.band is band
    assert tax.charge == D(charge)
    assert tax.marginal_relief == D(relief)


def test_band_is_chosen_on_augmented_profits() -> None:
    tax = compute_corporation_tax(D("45000"), D("60000"), *_LIMITS)

    assert tax.band is Band.MARGINAL_RELIEF
    # 0.015 x (250000 - 60000) x 45000 / 60000
    assert tax.marginal_relief == D("2137.5")
    assert tax.charge == D("11250") - D("2137.5")


def test_marginal_relief_scales_with_taxable_share() -> None:
    tax = compute_corporation_tax(D("90000"), D("100000"), *_LIMITS)

    assert tax.marginal_relief == D("2025")
    assert tax.charge == D("20475")


def test_charge_is_continuous_at_the_lower_limit() -> None:
    at_limit = compute_corporation_tax(D("50000"), D("50000"), *_LIMITS)
    just_above = compute_corporation_tax(D("50001"), D("50001"), *_LIMITS)

    assert just_above.charge - at_limit.charge < 1


def test_negative_profit_is_taxed_as_zero() -> None:
    tax = compute_corporation_tax(D("-500"), D("-500"), *_LIMITS)

    assert tax.charge == 0
    assert tax.band is Band.SMALL_PROFITS


@pytest.mark.parametrize(
    ("taxable", "augmented", "small", "main", "expected"),
    [
        ("0", "0", "0.19", "0.25", False),
        ("100000", "100000", "0.19", "0.19", False),
        ("100000", "100000", "0.19", "0.25", True),
        ("300000", "300000", "0.19", "0.25", False),
    ],
)
def test_small_profits_or_marginal_relief_entitlement(
    taxable: str, augmented: str, small: str, main: str, expected: bool
) -> None:
    assert (
        has_small_profits_or_marginal_relief_entitlement(
            D(taxable), D(augmented), D("250000"), D(small), D(main), D("0")
        )
        is expected
    )


def test_identical_regimes_collapse_into_one_slice() -> None:
    spread, regimes = _regime_slices(date(2024, 10, 1), date(2025, 9, 30), "365000")

    assert [entry.fy_slice.days for entry in spread] == [182, 183]
    assert [entry.taxable_profit for entry in spread] == [D("182000"), D("183000")]
    (regime,) = regimes
    assert regime.fy_years == (2024, 2025)
    assert regime.days == 365
    assert regime.taxable_profit == D("365000")
    assert regime.upper_threshold == pytest.approx(D("250000"))


def test_changed_regime_keeps_slices_apart() -> None:
    _, regimes = _regime_slices(date(2023, 1, 1), date(2023, 12, 31), "365000")

    assert [regime.fy_years for regime in regimes] == [(2022,), (2023,)]
    assert [regime.days for regime in regimes] == [90, 275]


def test_collapsed_slice_applies_marginal_relief_once() -> None:
    _, regimes = _regime_slices(date(2024, 10, 1), date(2025, 9, 30), "100000")
    (regime,) = regimes

    tax = tax_regime_slice(regime)

    assert tax.band is Band.MARGINAL_RELIEF
    assert tax.marginal_relief == pytest.approx(D("2250"))
    assert tax.charge == pytest.approx(D("22750"))


def test_spread_profits_keeps_augmented_separate() -> None:
    spread, _ = _regime_slices(date(2023, 1, 1), date(2023, 12, 31), "73000", "146000")

    assert spread[0].taxable_profit == D("18000")
    assert spread[0].augmented_profit == D("36000")
