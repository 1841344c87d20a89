"""Assemble per-period outcomes into the canonical corporation tax result.

Every total is built from the exact ``Decimal`` figures of the periods and
slices; rounding only happens when a reader asks an :class:`Amount` for its
whole-pound value, so slice-level rounding never accumulates.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from decimal import Decimal

from ukcorptax.backend.app.models import (
    Accounts,
    AiaPart,
    Amount,
    CalculationInput,
    Computation,
    CorporationTaxResult,
    LossPoolState,
    PeriodResult,
    PropertySummary,
    ResultMetadata,
    SliceComponent,
    SliceResult,
    TaxSummary,
)

from .allocation import allocate_by_weight
from .corporation_tax import SliceTax, has_small_profits_or_marginal_relief_entitlement
from .losses import LossMovement, LossPool, LossRelief
from .periods import Period
from .profits import PeriodShares, ProfitStreams
from .regimes import RegimeSlice
from .utils import clamp_non_negative, round_pounds, total

LOSS_RELIEF_NOTE = (
    "Trading losses brought forward are set against trading profits only. "
    "Property losses are set against total profits. Current-period losses "
    "not relieved in the period are carried forward."
)
PERIOD_STRUCTURE_NOTE = (
    "Periods are submission periods (split only when the accounting period "
    "exceeds 12 months); slices are tax-regime slices within each period."
)
AIA_ALLOCATION_NOTE = (
    "Per-slice requested, claimed and unrelieved AIA figures are allocated by "
    "cap share for reporting."
)
CAPITAL_LOSS_NOTE = (
    "Capital losses are ring-fenced within the period and are not carried forward."
)


@dataclass(frozen=True, slots=True)
class PeriodOutcome:
    """Everything the engine worked out for one period."""

    period: Period
    shares: PeriodShares
    streams: ProfitStreams
    relief: LossRelief
    augmented_profit: Decimal
    slices: tuple[tuple[RegimeSlice, SliceTax], ...]

    @property
    def ct_charge(self) -> Decimal:
        return total(tax.charge for _, tax in self.slices)

    @property
    def marginal_relief(self) -> Decimal:
        return total(tax.marginal_relief for _, tax in self.slices)

    @property
    def property_profit_after_loss(self) -> Decimal:
        # Property-stream view: b/f property loss used, capped at the stream's profit.
        stream = clamp_non_negative(self.streams.property_after_aia)
        return clamp_non_negative(stream - self.relief.property.used)


def _pool_state(movement: LossMovement) -> LossPoolState:
    requested = movement.closing.requested_remaining
    return LossPoolState(
        opening=Amount(movement.opening.available),
        used=Amount(movement.used),
        incurred=Amount(movement.incurred),
        relieved_in_period=Amount(movement.relieved_in_period),
        unrelieved=Amount(movement.unrelieved),
        carried_forward=Amount(movement.closing.available),
        requested_remaining=None if requested is None else Amount(requested),
    )


def _slice_results(outcome: PeriodOutcome) -> tuple[SliceResult, ...]:
    period = outcome.period
    results: list[SliceResult] = []
    for position, (regime_slice, tax) in enumerate(outcome.slices, start=1):
        tax_year = regime_slice.tax_year
        components = tuple(
            SliceComponent(
                fy_year=component.fy_slice.fy_year,
                start=component.fy_slice.start,
                end=component.fy_slice.end,
                days=component.fy_slice.days,
                fy_total_days=component.fy_slice.overlap.fy_total_days,
                taxable_profit=Amount(component.taxable_profit),
                augmented_profit=Amount(component.augmented_profit),
                lower_threshold=component.fy_slice.lower_threshold,
                upper_threshold=component.fy_slice.upper_threshold,
                aia_cap=Amount(component.fy_slice.aia_cap),
            )
            for component in regime_slice.components
        )
        results.append(
            SliceResult(
                period_index=period.index,
                period_name=period.name,
                slice_index=position,
                start=regime_slice.start,
                end=regime_slice.end,
                days=regime_slice.days,
                fy_years=regime_slice.fy_years,
                band=tax.band.value,
                taxable_profit=Amount(regime_slice.taxable_profit),
                augmented_profit=Amount(regime_slice.augmented_profit),
                lower_threshold=regime_slice.lower_threshold,
                upper_threshold=regime_slice.upper_threshold,
                aia_cap=Amount(regime_slice.aia_cap),
                small_rate=tax_year.small_rate,
                main_rate=tax_year.main_rate,
                relief_fraction=tax_year.relief_fraction,
                ct_charge=Amount(tax.charge),
                marginal_relief=Amount(tax.marginal_relief),
                components=components,
            )
        )
    return tuple(results)


def _period_result(outcome: PeriodOutcome) -> PeriodResult:
    period = outcome.period
    shares = outcome.shares
    streams = outcome.streams
    relief = outcome.relief
    return PeriodResult(
        index=period.index,
        name=period.name,
        start=period.start,
        end=period.end,
        days=period.days,
        is_short_period=period.is_short_period,
        profit_before_tax=Amount(shares.profit_before_tax),
        add_backs=Amount(shares.add_backs),
        rental_income=Amount(shares.property_income),
        taxable_before_loss=Amount(streams.taxable_before_loss),
        trading_profit_after_loss=Amount(relief.trading_after_loss),
        non_trading_profit_after_aia=Amount(streams.non_trading_after_aia),
        property_profit_after_aia=Amount(streams.property_after_aia),
        property_profit_after_loss=Amount(outcome.property_profit_after_loss),
        taxable_profit=Amount(relief.taxable_total),
        augmented_profit=Amount(outcome.augmented_profit),
        aia_cap_total=Amount(streams.aia_cap),
        trade_aia_additions=Amount(shares.trade_aia_additions),
        non_trade_aia_additions=Amount(shares.non_trade_aia_additions),
        trade_aia_claim=Amount(streams.aia_claim.trade),
        non_trade_aia_claim=Amount(streams.aia_claim.non_trade),
        trading_loss=_pool_state(relief.trading),
        property_loss=_pool_state(relief.property),
        ct_charge=Amount(outcome.ct_charge),
        marginal_relief=Amount(outcome.marginal_relief),
        slices=_slice_results(outcome),
    )


def _aia_parts(
    slices: Sequence[SliceResult], requested: Decimal, claimed: Decimal
) -> tuple[AiaPart, ...]:
    weights = [entry.aia_cap.exact for entry in slices]
    unrelieved = clamp_non_negative(requested - claimed)
    requested_parts = allocate_by_weight(requested, weights)
    claimed_parts = allocate_by_weight(claimed, weights)
    unrelieved_parts = allocate_by_weight(unrelieved, weights)
    return tuple(
        AiaPart(
            fy_years=entry.fy_years,
            period_index=entry.period_index,
            slice_index=entry.slice_index,
            days=entry.days,
            aia_limit_pro_rated=entry.aia_cap,
            aia_claim_requested=Amount(requested_part),
            aia_allowance_claimed=Amount(claimed_part),
            aia_unrelieved=Amount(unrelieved_part),
        )
        for entry, requested_part, claimed_part, unrelieved_part in zip(
            slices, requested_parts, claimed_parts, unrelieved_parts
        )
    )


def _tax_summary(
    data: CalculationInput, outcomes: Sequence[PeriodOutcome], slices: Sequence[SliceResult]
) -> TaxSummary:
    charge = total(outcome.ct_charge for outcome in outcomes)
    relief = total(outcome.marginal_relief for outcome in outcomes)

    reliefs_and_deductions = (
        data.community_investment_tax_relief
        + data.double_taxation_relief
        + data.advance_corporation_tax
    )
    box_500_charges = (
        data.controlled_foreign_companies_tax
        + data.bank_levy_payable
        + data.bank_surcharge_payable
        + data.residential_property_developer_tax
    )
    net_liability = clamp_non_negative(charge - reliefs_and_deductions)
    total_chargeable = (
        net_liability
        + data.loans_to_participators_tax
        + box_500_charges
        + data.eogpl_payable
        + data.egl_payable
        + data.supplementary_charge_payable
    )
    income_tax = data.income_tax_deducted_from_gross_income
    self_assessment = clamp_non_negative(total_chargeable - income_tax)

    entitlement = any(
        has_small_profits_or_marginal_relief_entitlement(
            entry.taxable_profit.exact,
            entry.augmented_profit.exact,
            entry.upper_threshold,
            entry.small_rate,
            entry.main_rate,
            entry.marginal_relief.exact,
        )
        for entry in slices
    )

    return TaxSummary(
        corporation_tax_charge=Amount(charge),
        marginal_relief=Amount(relief),
        corporation_tax_chargeable=Amount(charge),
        corporation_tax_table_total=Amount(charge + relief),
        total_reliefs_and_deductions=Amount(reliefs_and_deductions),
        net_ct_liability=Amount(net_liability),
        total_box_500_charges=Amount(box_500_charges),
        total_tax_chargeable=Amount(total_chargeable),
        income_tax_repayable=Amount(clamp_non_negative(income_tax - total_chargeable)),
        self_assessment_tax_payable=Amount(self_assessment),
        total_self_assessment_tax_payable=Amount(
            self_assessment
            + data.coronavirus_support_payment_overpayment_now_due
            + data.restitution_tax
        ),
        small_profits_rate_or_marginal_relief_entitlement=entitlement,
    )


def aggregate(
    data: CalculationInput,
    outcomes: Sequence[PeriodOutcome],
    trading_pool: LossPool,
    property_pool: LossPool,
) -> CorporationTaxResult:
    """Build the canonical result from ordered period outcomes.

    ``trading_pool`` and ``property_pool`` are the opening pools for the first
    period, used for the brought-forward audit figures.
    """

    periods = tuple(_period_result(outcome) for outcome in outcomes)
    slices = tuple(entry for period in periods for entry in period.slices)
    last = outcomes[-1].relief

    profit_before_tax = data.total_income - data.total_expenses
    add_backs = total(outcome.shares.add_backs for outcome in outcomes)
    trade_claim = total(outcome.streams.aia_claim.trade for outcome in outcomes)
    non_trade_claim = total(outcome.streams.aia_claim.non_trade for outcome in outcomes)
    capital_allowances = trade_claim + non_trade_claim

    trading_used = total(outcome.relief.trading.used for outcome in outcomes)
    trading_incurred = total(outcome.relief.trading.incurred for outcome in outcomes)
    trading_bf_remaining = clamp_non_negative(trading_pool.available - trading_used)
    property_used = total(outcome.relief.property.used for outcome in outcomes)
    property_bf_remaining = clamp_non_negative(property_pool.available - property_used)

    taxable_trading = total(
        clamp_non_negative(outcome.relief.trading_after_loss) for outcome in outcomes
    )
    taxable_non_trading = total(
        clamp_non_negative(outcome.streams.non_trading_after_aia) for outcome in outcomes
    )
    taxable_total_profits = total(outcome.relief.taxable_total for outcome in outcomes)

    property_business_income = clamp_non_negative(
        total(outcome.streams.property_after_aia for outcome in outcomes)
    )

    aia_requested = data.annual_investment_allowance_total_additions
    aia_claimed_reported = round_pounds(capital_allowances)

    computation = Computation(
        add_backs=Amount(add_backs),
        capital_allowances=Amount(capital_allowances),
        trade_capital_allowances=Amount(trade_claim),
        non_trade_capital_allowances=Amount(non_trade_claim),
        trading_loss_used=Amount(trading_used),
        trading_loss_brought_forward_available=Amount(data.trading_loss_brought_forward),
        trading_loss_brought_forward_remaining=Amount(trading_bf_remaining),
        trading_loss_current_period_incurred=Amount(trading_incurred),
        trading_loss_carried_forward=Amount(last.trading.closing.available),
        taxable_trading_profit=Amount(taxable_trading),
        gross_trading_profit=Amount(taxable_trading + trading_used),
        taxable_non_trading_profits=Amount(taxable_non_trading),
        profits_subtotal=Amount(taxable_trading + taxable_non_trading),
        subtotal_before_deductions=Amount(profit_before_tax + add_backs),
        taxable_total_profits=Amount(taxable_total_profits),
        augmented_profits=Amount(taxable_total_profits + data.dividend_income),
        total_trading_income=Amount(data.trading_income),
        total_other_income=Amount(
            property_business_income
            + data.interest_income
            + data.chargeable_gains
            + data.dividend_income
        ),
        chargeable_gains_ring_fenced_loss=Amount(
            total(outcome.streams.ring_fenced_capital_loss for outcome in outcomes)
        ),
        aia_total_cap=Amount(total(entry.aia_cap.exact for entry in slices)),
        aia_requested_total=Amount(aia_requested),
        aia_unrelieved_total=Amount(clamp_non_negative(aia_requested - aia_claimed_reported)),
        aia_parts_by_fy=_aia_parts(slices, aia_requested, aia_claimed_reported),
    )

    property_summary = PropertySummary(
        rental_income=Amount(data.property_income),
        property_loss_brought_forward=Amount(data.property_loss_brought_forward),
        property_loss_used=Amount(property_used),
        property_profit_after_loss_offset=Amount(
            total(outcome.property_profit_after_loss for outcome in outcomes)
        ),
        property_business_income_for_ct600=Amount(property_business_income),
        property_loss_carried_forward=Amount(last.property.closing.available),
    )

    metadata = ResultMetadata(
        ap_days=data.accounting_period_days,
        ap_split=len(outcomes) > 1,
        trading_loss_bf_available=Amount(trading_pool.available),
        trading_loss_bf_remaining=Amount(trading_bf_remaining),
        trading_loss_current_period_incurred=Amount(trading_incurred),
        trading_loss_cf_total=Amount(last.trading.closing.available),
        trading_loss_use_requested=Amount(trading_pool.requested_total),
        trading_loss_use_remaining=Amount(
            clamp_non_negative(trading_pool.requested_total - trading_used)
        ),
        property_loss_bf_available=Amount(property_pool.available),
        property_loss_bf_remaining=Amount(property_bf_remaining),
        property_loss_use_requested=Amount(property_pool.requested_total),
        property_loss_use_remaining=Amount(
            clamp_non_negative(property_pool.requested_total - property_used)
        ),
        notes=(PERIOD_STRUCTURE_NOTE, LOSS_RELIEF_NOTE, AIA_ALLOCATION_NOTE, CAPITAL_LOSS_NOTE),
    )

    return CorporationTaxResult(
        accounts=Accounts(
            total_income=Amount(data.total_income),
            total_expenses=Amount(data.total_expenses),
            profit_before_tax=Amount(profit_before_tax),
        ),
        computation=computation,
        property=property_summary,
        tax=_tax_summary(data, outcomes, slices),
        periods=periods,
        slices=slices,
        metadata=metadata,
    )


__all__ = [
    "AIA_ALLOCATION_NOTE",
    "CAPITAL_LOSS_NOTE",
    "LOSS_RELIEF_NOTE",
    "PERIOD_STRUCTURE_NOTE",
    "PeriodOutcome",
    "aggregate",
]
