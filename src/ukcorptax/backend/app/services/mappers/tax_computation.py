"""Map the canonical result onto the tax computation schedules.

The schedules walk a reviewer from accounts profit to taxable total profits,
then show the capital allowances claim, the trading loss movement and the
tax charged per slice. Every figure is read from the result; nothing here
changes the tax due.
"""

from __future__ import annotations

from typing import Any

from ukcorptax.backend.app.models import CalculationInput, CorporationTaxResult

from ..calculators.aggregation import AIA_ALLOCATION_NOTE, LOSS_RELIEF_NOTE
from ..calculators.utils import format_percentage


def build_profit_adjustment_schedule(
    data: CalculationInput, result: CorporationTaxResult
) -> dict[str, Any]:
    computation = result.computation
    property_summary = result.property
    return {
        "accounting_profit_before_tax": result.accounts.profit_before_tax.rounded,
        "add_backs": {
            "depreciation_disallowed": int(data.depreciation_expense),
            "disallowable_expenses": int(data.disallowable_expenditure),
            "other_adjustments_add_back": int(data.other_tax_adjustments_add_back),
            "total_add_backs": computation.add_backs.rounded,
        },
        "subtotal_before_deductions": computation.subtotal_before_deductions.rounded,
        "deductions": {
            "capital_allowances_claimed": computation.capital_allowances.rounded,
            "trade_capital_allowances": computation.trade_capital_allowances.rounded,
            "non_trade_capital_allowances": computation.non_trade_capital_allowances.rounded,
            "total_deductions": computation.deductions.rounded,
        },
        "trading_income_components": {
            "turnover": int(data.trading_turnover),
            "govt_grants": int(data.government_grants),
            "asset_disposal_proceeds_balancing_charges": int(data.trading_balancing_charges),
            "total_trading_income": computation.total_trading_income.rounded,
        },
        "net_trading_profit_before_loss": computation.gross_trading_profit.rounded,
        "trading_loss_bfwd_applied": computation.trading_loss_used.rounded,
        "net_trading_profit": computation.taxable_trading_profit.rounded,
        "other_income": {
            "rental_income_net": property_summary.property_profit_after_loss_offset.rounded,
            "property_business_income": (
                property_summary.property_business_income_for_ct600.rounded
            ),
            "interest_income": int(data.interest_income),
            "capital_gains": int(data.chargeable_gains),
            "capital_gains_ring_fenced_loss": (
                computation.chargeable_gains_ring_fenced_loss.rounded
            ),
            "capital_gains_source_file": data.chargeable_gains_computation_file_name,
            "dividend_income": int(data.dividend_income),
            "total_other_income": computation.total_other_income.rounded,
        },
        "property_loss_bfwd_applied": property_summary.property_loss_used.rounded,
        "taxable_total_profits": computation.taxable_total_profits.rounded,
    }


def build_capital_allowances_schedule(
    data: CalculationInput, result: CorporationTaxResult
) -> dict[str, Any]:
    computation = result.computation
    parts = [
        {
            "fy_year": part.fy_year,
            "fy_years": list(part.fy_years),
            "period_index": part.period_index,
            "slice_index": part.slice_index,
            "ap_days_in_fy": part.days,
            "aia_limit_pro_rated": part.aia_limit_pro_rated.rounded,
            "aia_claim_requested": part.aia_claim_requested.rounded,
            "aia_allowance_claimed": part.aia_allowance_claimed.rounded,
            "aia_unrelieved_bfwd": part.aia_unrelieved.rounded,
        }
        for part in computation.aia_parts_by_fy
    ]
    return {
        "total_plant_additions": int(data.annual_investment_allowance_total_additions),
        "trade_plant_additions": int(data.annual_investment_allowance_trade_additions),
        "non_trade_plant_additions": int(data.annual_investment_allowance_non_trade_additions),
        "annual_investment_allowance": {
            "parts_by_fy": parts,
            "total_aia_cap": computation.aia_total_cap.rounded,
            "total_aia_claimed": computation.capital_allowances.rounded,
            "total_aia_unrelieved": computation.aia_unrelieved_total.rounded,
            "allocation_note": AIA_ALLOCATION_NOTE,
        },
        "total_capital_allowances": computation.capital_allowances.rounded,
    }


def build_trading_loss_schedule(
    data: CalculationInput, result: CorporationTaxResult
) -> dict[str, Any]:
    computation = result.computation
    metadata = result.metadata
    return {
        "trading_loss_bfwd_available": int(data.trading_loss_brought_forward),
        "trading_loss_use_requested": metadata.trading_loss_use_requested.rounded,
        "trading_loss_bfwd_used_this_period": computation.trading_loss_used.rounded,
        "trading_loss_incurred_this_period": (
            computation.trading_loss_current_period_incurred.rounded
        ),
        "trading_loss_cfwd": computation.trading_loss_carried_forward.rounded,
    }


def build_tax_calculation_table(result: CorporationTaxResult) -> dict[str, Any]:
    rows = [
        {
            "fy_year": entry.fy_year,
            "fy_years": list(entry.fy_years),
            "period_index": entry.period_index,
            "period_name": entry.period_name,
            "start": entry.start.isoformat(),
            "end": entry.end.isoformat(),
            "days": entry.days,
            "band": entry.band,
            "taxable_profit": entry.taxable_profit.rounded,
            "augmented_profit": entry.augmented_profit.rounded,
            "lower_threshold": float(entry.lower_threshold),
            "upper_threshold": float(entry.upper_threshold),
            "main_rate": float(entry.main_rate),
            "main_rate_label": format_percentage(entry.main_rate),
            "regime_grouped": entry.regime_grouped,
            "effective_tax_rate": float(entry.effective_tax_rate),
            "corporation_tax_at_main_rate": entry.corporation_tax_at_main_rate.rounded,
            "marginal_relief_reduction": entry.marginal_relief.rounded,
            "corporation_tax_charged": entry.ct_charge.rounded,
        }
        for entry in result.slices
    ]
    return {
        "computation_by_fy": rows,
        "year_summary": {
            "total_taxable_profit": result.computation.taxable_total_profits.rounded,
            "total_augmented_profit": result.computation.augmented_profits.rounded,
            "total_marginal_relief": result.tax.marginal_relief.rounded,
            "corporation_tax_charge": result.tax.corporation_tax_charge.rounded,
            "slice_count": len(rows),
            "slice_days": sum(entry.days for entry in result.slices),
            "loss_relief_note": LOSS_RELIEF_NOTE,
        },
    }


def map_tax_computation(data: CalculationInput, result: CorporationTaxResult) -> dict[str, Any]:
    """Return the full tax computation for one accounting period."""

    return {
        "profit_adjustment_schedule": build_profit_adjustment_schedule(data, result),
        "capital_allowances_schedule": build_capital_allowances_schedule(data, result),
        "trading_loss_schedule": build_trading_loss_schedule(data, result),
        "tax_calculation_table": build_tax_calculation_table(result),
        "summary": {
            "taxable_total_profits": result.computation.taxable_total_profits.rounded,
            "augmented_profits": result.computation.augmented_profits.rounded,
            "corporation_tax_charge": result.tax.corporation_tax_charge.rounded,
            "marginal_relief_total": result.tax.marginal_relief.rounded,
            "tax_payable": result.tax.tax_payable.rounded,
        },
    }


__all__ = [
    "build_capital_allowances_schedule",
    "build_profit_adjustment_schedule",
    "build_tax_calculation_table",
    "build_trading_loss_schedule",
    "map_tax_computation",
]
