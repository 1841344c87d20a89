"""Map the canonical result onto CT600 box values.

The mapper only reads figures the engine already produced; it never
recomputes tax. Official boxes use ``box_<number>_<label>`` keys, while
keys starting with an underscore are transparency fields that help reviewers
reconcile the return and are not filed.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Sequence
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from ukcorptax.backend.app.models import CalculationInput, CorporationTaxResult, SliceResult

from ..calculators.utils import ZERO, clamp_non_negative, safe_ratio

_PENNY = Decimal("0.01")
# Tolerance when classifying a slice as taxed at the small profits rate.
_SMALL_RATE_TOLERANCE = Decimal("0.002")


@dataclass(frozen=True, slots=True)
class _RateRow:
    profit: Decimal
    rate: Decimal
    tax: Decimal


# (year box, profit box, rate box, tax box, year group, row within group)
_RATE_TABLE_LAYOUT: tuple[tuple[int | None, int, int, int, int, int], ...] = (
    (330, 335, 340, 345, 0, 0),
    (None, 350, 355, 360, 0, 1),
    (None, 365, 370, 375, 0, 2),
    (380, 385, 390, 395, 1, 0),
    (None, 400, 405, 410, 1, 1),
    (None, 415, 420, 425, 1, 2),
)


def _money(value: Decimal) -> int | float:
    """Return a two-decimal figure, as an ``int`` when it is whole pounds."""

    quantised = value.quantize(_PENNY, rounding=ROUND_HALF_UP)
    if quantised == quantised.to_integral_value():
        return int(quantised)
    return float(quantised)


def _non_negative(value: Decimal) -> int:
    return max(0, int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


def _checkmark(flag: bool) -> str:
    return "X" if flag else ""


def _rate_row(entry: SliceResult) -> _RateRow | None:
    profit = clamp_non_negative(entry.taxable_profit.exact)
    if profit <= 0:
        return None

    small_rate = entry.small_rate
    main_rate = entry.main_rate
    if entry.marginal_relief.exact > 0 and main_rate > 0:
        rate = main_rate
    else:
        effective = safe_ratio(clamp_non_negative(entry.ct_charge.exact), profit)
        if small_rate > 0 and main_rate > small_rate and effective <= small_rate + _SMALL_RATE_TOLERANCE:
            rate = small_rate
        elif main_rate > 0:
            rate = main_rate
        else:
            rate = effective
    return _RateRow(profit=profit, rate=rate, tax=profit * rate)


def _group_rate_rows(slices: Sequence[SliceResult]) -> list[tuple[int, list[_RateRow]]]:
    """Group rows by financial year (first two) and merge equal rates (first three)."""

    by_year: dict[int, dict[Decimal, _RateRow]] = defaultdict(dict)
    for entry in slices:
        row = _rate_row(entry)
        if row is None:
            continue
        rows = by_year[entry.fy_year]
        existing = rows.get(row.rate)
        if existing is None:
            rows[row.rate] = row
        else:
            rows[row.rate] = _RateRow(
                profit=existing.profit + row.profit,
                rate=row.rate,
                tax=existing.tax + row.tax,
            )

    groups: list[tuple[int, list[_RateRow]]] = []
    for year in sorted(by_year)[:2]:
        rows = sorted(by_year[year].values(), key=lambda row: row.rate)[:3]
        groups.append((year, rows))
    return groups


def _fill_rate_table(boxes: dict[str, Any], slices: Sequence[SliceResult]) -> None:
    groups = _group_rate_rows(slices)
    for year_box, profit_box, rate_box, tax_box, group_index, row_index in _RATE_TABLE_LAYOUT:
        group = groups[group_index] if group_index < len(groups) else None
        row = None
        if group is not None and row_index < len(group[1]):
            row = group[1][row_index]
        if year_box is not None:
            boxes[f"box_{year_box}_financial_year"] = group[0] if group else ""
        boxes[f"box_{profit_box}_profits_chargeable_at_corresponding_rate"] = _money(
            row.profit if row else ZERO
        )
        boxes[f"box_{rate_box}_corresponding_rate"] = _money(row.rate * 100 if row else ZERO)
        boxes[f"box_{tax_box}_tax"] = _money(row.tax if row else ZERO)


def _associated_company_years(slices: Sequence[SliceResult]) -> list[int]:
    years = {year for entry in slices for year in entry.fy_years if year > 0}
    return sorted(years)[:3]


def map_ct600_boxes(data: CalculationInput, result: CorporationTaxResult) -> dict[str, Any]:
    """Return CT600 box values for one accounting period."""

    computation = result.computation
    property_summary = result.property
    tax = result.tax
    boxes: dict[str, Any] = {}

    boxes["box_30_period_start"] = data.accounting_period_start.isoformat()
    boxes["box_35_period_end"] = data.accounting_period_end.isoformat()
    fy_years = _associated_company_years(result.slices)
    for position, box in enumerate((326, 327, 328)):
        boxes[f"box_{box}_assoc_companies"] = (
            data.associated_company_count if position < len(fy_years) else ""
        )

    # Income
    boxes["box_145_trade_turnover"] = _non_negative(data.trading_turnover)
    boxes["box_155_trading_profit"] = _non_negative(computation.gross_trading_profit.exact)
    boxes["box_160_trading_losses_bfwd_used"] = computation.trading_loss_used.rounded
    boxes["box_160_trading_losses_bfwd"] = boxes["box_160_trading_losses_bfwd_used"]
    boxes["box_165_net_trading_profits"] = _non_negative(computation.taxable_trading_profit.exact)
    boxes["box_170_non_trading_loan_relationship_profits"] = _non_negative(data.interest_income)
    boxes["box_190_property_business_income"] = _non_negative(
        property_summary.property_business_income_for_ct600.exact
    )
    boxes["box_205_income_not_elsewhere"] = 0
    boxes["box_210_chargeable_gains"] = _non_negative(data.chargeable_gains)
    boxes["box_235_profits_subtotal"] = _non_negative(computation.profits_subtotal.exact)
    boxes["box_250_property_business_losses_used"] = property_summary.property_loss_used.rounded
    boxes["box_300_profits_before_deductions"] = _non_negative(computation.profits_subtotal.exact)
    boxes["box_305_donations"] = 0
    boxes["box_310_group_relief"] = 0
    boxes["box_312_other_deductions"] = 0
    boxes["box_315_taxable_profit"] = _non_negative(computation.taxable_total_profits.exact)
    boxes["box_620_franked_investment_income_exempt_abgh"] = _non_negative(data.dividend_income)

    boxes["box_329_small_profits_rate_or_marginal_relief_entitlement"] = _checkmark(
        tax.small_profits_rate_or_marginal_relief_entitlement
    )

    # Tax calculation table
    _fill_rate_table(boxes, result.slices)
    boxes["box_430_corporation_tax"] = tax.corporation_tax_table_total.rounded
    boxes["box_435_marginal_relief"] = _money(tax.marginal_relief.exact)
    boxes["box_440_corporation_tax_chargeable"] = tax.corporation_tax_chargeable.rounded

    # Reliefs and deductions
    boxes["box_445_community_investment_tax_relief"] = _money(data.community_investment_tax_relief)
    boxes["box_450_double_taxation_relief"] = _money(data.double_taxation_relief)
    boxes["box_455_underlying_rate_relief_claim"] = _checkmark(data.underlying_rate_relief_claim)
    boxes["box_460_relief_carried_back_to_earlier_period"] = _checkmark(
        data.relief_carried_back_to_earlier_period
    )
    boxes["box_465_advance_corporation_tax"] = _money(data.advance_corporation_tax)
    boxes["box_470_total_reliefs_and_deductions"] = tax.total_reliefs_and_deductions.rounded

    # Tax payable
    boxes["box_475_net_ct_liability"] = tax.net_ct_liability.rounded
    boxes["box_480_tax_payable_by_a_close_company"] = _money(data.loans_to_participators_tax)
    boxes["box_500_cfc_bank_levy_surcharge_and_rpdt"] = tax.total_box_500_charges.rounded
    boxes["box_501_eogpl_payable"] = _money(data.eogpl_payable)
    boxes["box_502_egl_payable"] = _money(data.egl_payable)
    boxes["box_505_supplementary_charge"] = _money(data.supplementary_charge_payable)
    boxes["box_510_total_tax_chargeable"] = tax.total_tax_chargeable.rounded
    boxes["box_515_income_tax_deducted_from_gross_income"] = _money(
        data.income_tax_deducted_from_gross_income
    )
    boxes["box_520_income_tax_repayable"] = tax.income_tax_repayable.rounded
    boxes["box_525_self_assessment_tax_payable"] = tax.self_assessment_tax_payable.rounded
    boxes["box_526_coronavirus_support_payment_overpayment_now_due"] = _money(
        data.coronavirus_support_payment_overpayment_now_due
    )
    boxes["box_527_restitution_tax"] = _money(data.restitution_tax)
    boxes["box_528_total_self_assessment_tax_payable"] = (
        tax.total_self_assessment_tax_payable.rounded
    )

    # Declaration
    boxes["box_975_name"] = data.declaration_name
    boxes["box_980_date"] = data.declaration_date
    boxes["box_985_status"] = data.declaration_status

    # Transparency fields
    boxes["_marginal_relief_total"] = tax.marginal_relief.rounded
    boxes["_trading_balancing_charges"] = int(data.trading_balancing_charges)
    boxes["_trading_losses_bfwd"] = int(data.trading_loss_brought_forward)
    boxes["_trading_losses_used"] = computation.trading_loss_used.rounded
    boxes["_trading_losses_available"] = computation.trading_loss_brought_forward_remaining.rounded
    boxes["_trading_losses_cfwd"] = computation.trading_loss_carried_forward.rounded
    boxes["_property_losses_bfwd"] = int(data.property_loss_brought_forward)
    boxes["_property_losses_used"] = property_summary.property_loss_used.rounded
    boxes["_property_losses_available"] = result.metadata.property_loss_bf_remaining.rounded
    boxes["_property_losses_cfwd"] = property_summary.property_loss_carried_forward.rounded
    boxes["_chargeable_gains_ring_fenced_loss"] = (
        computation.chargeable_gains_ring_fenced_loss.rounded
    )
    boxes["_engine_corporation_tax_charge"] = tax.corporation_tax_charge.rounded

    delta = (
        Decimal(boxes["box_430_corporation_tax"])
        - Decimal(str(boxes["box_435_marginal_relief"]))
        - Decimal(boxes["box_440_corporation_tax_chargeable"])
    )
    delta_money = _money(delta)
    boxes["_integrity_box_430_minus_435_equals_440"] = _checkmark(abs(delta) < _PENNY)
    boxes["_integrity_box_430_435_440_delta"] = delta_money

    return boxes


__all__ = ["map_ct600_boxes"]
