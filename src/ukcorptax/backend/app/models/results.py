"""Frozen result records produced by the engine.

The tree is a value snapshot: sequences are tuples and no record refers back
to calculator state, so mappers can read it freely without recomputing tax.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from .money import Amount


@dataclass(frozen=True, slots=True)
class Accounts:
    total_income: Amount
    total_expenses: Amount
    profit_before_tax: Amount


@dataclass(frozen=True, slots=True)
class AiaPart:
    """Per-slice AIA reporting row; requested/claimed/unrelieved are cap-share allocations."""

    fy_years: tuple[int, ...]
    period_index: int
    slice_index: int
    days: int
    aia_limit_pro_rated: Amount
    aia_claim_requested: Amount
    aia_allowance_claimed: Amount
    aia_unrelieved: Amount

    @property
    def fy_year(self) -> int:
        return self.fy_years[0]


@dataclass(frozen=True, slots=True)
class Computation:
    add_backs: Amount
    capital_allowances: Amount
    trade_capital_allowances: Amount
    non_trade_capital_allowances: Amount
    trading_loss_used: Amount
    trading_loss_brought_forward_available: Amount
    trading_loss_brought_forward_remaining: Amount
    trading_loss_current_period_incurred: Amount
    trading_loss_carried_forward: Amount
    taxable_trading_profit: Amount
    gross_trading_profit: Amount
    taxable_non_trading_profits: Amount
    profits_subtotal: Amount
    subtotal_before_deductions: Amount
    taxable_total_profits: Amount
    augmented_profits: Amount
    total_trading_income: Amount
    total_other_income: Amount
    chargeable_gains_ring_fenced_loss: Amount
    aia_total_cap: Amount
    aia_requested_total: Amount
    aia_unrelieved_total: Amount
    aia_parts_by_fy: tuple[AiaPart, ...]

    @property
    def deductions(self) -> Amount:
        return self.capital_allowances


@dataclass(frozen=True, slots=True)
class PropertySummary:
    rental_income: Amount
    property_loss_brought_forward: Amount
    property_loss_used: Amount
    property_profit_after_loss_offset: Amount
    property_business_income_for_ct600: Amount
    property_loss_carried_forward: Amount


@dataclass(frozen=True, slots=True)
class TaxSummary:
    corporation_tax_charge: Amount
    marginal_relief: Amount
    corporation_tax_chargeable: Amount
    corporation_tax_table_total: Amount
    total_reliefs_and_deductions: Amount
    net_ct_liability: Amount
    total_box_500_charges: Amount
    total_tax_chargeable: Amount
    income_tax_repayable: Amount
    self_assessment_tax_payable: Amount
    total_self_assessment_tax_payable: Amount
    small_profits_rate_or_marginal_relief_entitlement: bool

    @property
    def tax_payable(self) -> Amount:
        return self.total_self_assessment_tax_payable


@dataclass(frozen=True, slots=True)
class SliceComponent:
    """One financial year's share of a calculation slice."""

    fy_year: int
    start: date
    end: date
    days: int
    fy_total_days: int
    taxable_profit: Amount
    augmented_profit: Amount
    lower_threshold: Decimal
    upper_threshold: Decimal
    aia_cap: Amount


@dataclass(frozen=True, slots=True)
class SliceResult:
    """Tax computed once over a run of financial years sharing one regime."""

    period_index: int
    period_name: str
    slice_index: int
    start: date
    end: date
    days: int
    fy_years: tuple[int, ...]
    band: str
    taxable_profit: Amount
    augmented_profit: Amount
    lower_threshold: Decimal
    upper_threshold: Decimal
    aia_cap: Amount
    small_rate: Decimal
    main_rate: Decimal
    relief_fraction: Decimal
    ct_charge: Amount
    marginal_relief: Amount
    components: tuple[SliceComponent, ...]

    @property
    def fy_year(self) -> int:
        return self.fy_years[0]

    @property
    def regime_grouped(self) -> bool:
        return len(self.fy_years) > 1

    @property
    def corporation_tax_at_main_rate(self) -> Amount:
        return Amount(self.taxable_profit.exact * self.main_rate)

    @property
    def effective_tax_rate(self) -> Decimal:
        if self.taxable_profit.exact <= 0:
            return Decimal("0")
        return self.ct_charge.exact / self.taxable_profit.exact


@dataclass(frozen=True, slots=True)
class LossPoolState:
    """Movement on one loss pool during one period."""

    opening: Amount
    used: Amount
    incurred: Amount
    relieved_in_period: Amount
    unrelieved: Amount
    carried_forward: Amount
    requested_remaining: Amount | None


@dataclass(frozen=True, slots=True)
class PeriodResult:
    index: int
    name: str
    start: date
    end: date
    days: int
    is_short_period: bool
    profit_before_tax: Amount
    add_backs: Amount
    rental_income: Amount
    taxable_before_loss: Amount
    trading_profit_after_loss: Amount
    non_trading_profit_after_aia: Amount
    property_profit_after_aia: Amount
    property_profit_after_loss: Amount
    taxable_profit: Amount
    augmented_profit: Amount
    aia_cap_total: Amount
    trade_aia_additions: Amount
    non_trade_aia_additions: Amount
    trade_aia_claim: Amount
    non_trade_aia_claim: Amount
    trading_loss: LossPoolState
    property_loss: LossPoolState
    ct_charge: Amount
    marginal_relief: Amount
    slices: tuple[SliceResult, ...]

    @property
    def aia_claim(self) -> Amount:
        return self.trade_aia_claim + self.non_trade_aia_claim


@dataclass(frozen=True, slots=True)
class ResultMetadata:
    ap_days: int
    ap_split: bool
    trading_loss_bf_available: Amount
    trading_loss_bf_remaining: Amount
    trading_loss_current_period_incurred: Amount
    trading_loss_cf_total: Amount
    trading_loss_use_requested: Amount
    trading_loss_use_remaining: Amount
    property_loss_bf_available: Amount
    property_loss_bf_remaining: Amount
    property_loss_use_requested: Amount
    property_loss_use_remaining: Amount
    notes: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class CorporationTaxResult:
    """Canonical engine output consumed by every mapper."""

    accounts: Accounts
    computation: Computation
    property: PropertySummary
    tax: TaxSummary
    periods: tuple[PeriodResult, ...]
    slices: tuple[SliceResult, ...]
    metadata: ResultMetadata


__all__ = [
    "Accounts",
    "AiaPart",
    "Computation",
    "CorporationTaxResult",
    "LossPoolState",
    "PeriodResult",
    "PropertySummary",
    "ResultMetadata",
    "SliceComponent",
    "SliceResult",
    "TaxSummary",
]
