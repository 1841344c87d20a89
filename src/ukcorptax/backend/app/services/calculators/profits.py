"""Per-period profit apportionment and trading / non-trading classification."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from ukcorptax.backend.app.models import CalculationInput

from .allocation import SharedCapClaim, allocate_shared_cap
from .periods import Period
from .utils import apportion, clamp_non_negative


@dataclass(frozen=True, slots=True)
class PeriodShares:
    """Accounting figures apportioned to one period by its share of AP days."""

    profit_before_tax: Decimal
    add_backs: Decimal
    interest_income: Decimal
    property_income: Decimal
    chargeable_gains: Decimal
    dividend_income: Decimal
    trade_aia_additions: Decimal
    non_trade_aia_additions: Decimal


def apportion_to_period(data: CalculationInput, period: Period) -> PeriodShares:
    """Scale the AP-wide inputs to ``period`` by ``period.days / ap_days``."""

    ap_days = data.accounting_period_days

    def share(value: Decimal) -> Decimal:
        return apportion(value, period.days, ap_days)

    return PeriodShares(
        profit_before_tax=share(data.total_income - data.total_expenses),
        add_backs=share(data.add_backs),
        interest_income=share(data.interest_income),
        property_income=share(data.property_income),
        chargeable_gains=share(data.chargeable_gains),
        dividend_income=share(data.dividend_income),
        trade_aia_additions=share(data.annual_investment_allowance_trade_additions),
        non_trade_aia_additions=share(data.annual_investment_allowance_non_trade_additions),
    )


@dataclass(frozen=True, slots=True)
class ProfitStreams:
    """Trading and non-trading profit for a period before and after AIA."""

    taxable_before_aia: Decimal
    trading_before_aia: Decimal
    interest_income: Decimal
    chargeable_gains: Decimal
    ring_fenced_capital_loss: Decimal
    property_before_aia: Decimal
    aia_cap: Decimal
    aia_claim: SharedCapClaim

    @property
    def non_trading_before_aia(self) -> Decimal:
        return self.interest_income + self.property_before_aia + self.chargeable_gains

    @property
    def trading_after_aia(self) -> Decimal:
        return self.trading_before_aia - self.aia_claim.trade

    @property
    def property_after_aia(self) -> Decimal:
        # Non-trade AIA reduces the property business only, never interest.
        return self.property_before_aia - self.aia_claim.non_trade

    @property
    def other_income(self) -> Decimal:
        """Non-trading profits outside the property business (never negative)."""

        return self.interest_income + self.chargeable_gains

    @property
    def non_trading_after_aia(self) -> Decimal:
        return self.other_income + self.property_after_aia

    @property
    def taxable_before_loss(self) -> Decimal:
        return self.trading_after_aia + self.non_trading_after_aia


def classify_profits(shares: PeriodShares, aia_cap: Decimal) -> ProfitStreams:
    """Split the period's taxable base into streams and apply the shared AIA cap.

    Capital losses are ring-fenced: a negative gain is floored at zero here
    and the floored amount is reported separately rather than reducing any
    other stream. Trading profit is what remains of the taxable base once the
    non-trading items are removed, so turnover, grants and balancing charges
    all land in trade.
    """

    gains = clamp_non_negative(shares.chargeable_gains)
    ring_fenced = gains - shares.chargeable_gains
    taxable_before_aia = shares.profit_before_tax + shares.add_backs + ring_fenced
    non_trading = shares.interest_income + shares.property_income + gains

    claim = allocate_shared_cap(
        shares.trade_aia_additions, shares.non_trade_aia_additions, aia_cap
    )

    return ProfitStreams(
        taxable_before_aia=taxable_before_aia,
        trading_before_aia=taxable_before_aia - non_trading,
        interest_income=shares.interest_income,
        chargeable_gains=gains,
        ring_fenced_capital_loss=ring_fenced,
        property_before_aia=shares.property_income,
        aia_cap=aia_cap,
        aia_claim=claim,
    )


__all__ = [
    "PeriodShares",
    "ProfitStreams",
    "apportion_to_period",
    "classify_profits",
]
