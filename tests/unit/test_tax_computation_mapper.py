"""Unit coverage for the tax computation schedules."""

from __future__ import annotations

from typing import Any

from ukcorptax.backend.app.services.calculation_service import run
from ukcorptax.backend.app.services.mappers.tax_computation import map_tax_computation

FY2024 = {
    "accounting_period_start": "2024-04-01",
    "accounting_period_end": "2025-03-31",
}


def _computation(payload: dict[str, Any]) -> dict[str, Any]:
    engine_run = run(payload)
    return map_tax_computation(engine_run.normalized_input, engine_run.result)


def test_profit_adjustment_walks_from_accounts_to_taxable_profit() -> None:
    computation = _computation(
        {
            **FY2024,
            "trading_turnover": 100_000,
            "cost_of_goods_sold": 40_000,
            "staff_employment_costs": 20_000,
            "depreciation_expense": 5_000,
            "other_operating_charges": 15_000,
            "disallowable_expenditure": 1_000,
        }
    )
    schedule = computation["profit_adjustment_schedule"]

    assert schedule["accounting_profit_before_tax"] == 20_000
    assert schedule["add_backs"] == {
        "depreciation_disallowed": 5_000,
        "disallowable_expenses": 1_000,
        "other_adjustments_add_back": 0,
        "total_add_backs": 6_000,
    }
    assert schedule["subtotal_before_deductions"] == 26_000
    assert schedule["net_trading_profit"] == 26_000
    assert schedule["taxable_total_profits"] == 26_000
    assert computation["summary"]["corporation_tax_charge"] == 4_940


def test_capital_allowances_schedule_reports_the_capped_claim() -> None:
    computation = _computation(
        {
            **FY2024,
            "trading_turnover": 2_000_000,
            "cost_of_goods_sold": 500_000,
            "annual_investment_allowance_trade_additions": 1_500_000,
        }
    )
    schedule = computation["capital_allowances_schedule"]
    aia = schedule["annual_investment_allowance"]

    assert schedule["total_plant_additions"] == 1_500_000
    assert schedule["total_capital_allowances"] == 1_000_000
    assert aia["total_aia_cap"] == 1_000_000
    assert aia["total_aia_unrelieved"] == 500_000
    (part,) = aia["parts_by_fy"]
    assert part["fy_year"] == 2024
    assert part["ap_days_in_fy"] == 365
    assert part["aia_claim_requested"] == 1_500_000
    assert part["aia_allowance_claimed"] == 1_000_000
    assert part["aia_unrelieved_bfwd"] == 500_000
    deductions = computation["profit_adjustment_schedule"]["deductions"]
    assert deductions["total_deductions"] == 1_000_000


def test_trading_loss_schedule() -> None:
    computation = _computation(
        {
            **FY2024,
            "trading_turnover": 20_000,
            "trading_loss_brought_forward": 50_000,
            "trading_loss_usage_requested": 15_000,
        }
    )

    assert computation["trading_loss_schedule"] == {
        "trading_loss_bfwd_available": 50_000,
        "trading_loss_use_requested": 15_000,
        "trading_loss_bfwd_used_this_period": 15_000,
        "trading_loss_incurred_this_period": 0,
        "trading_loss_cfwd": 35_000,
    }


def test_tax_calculation_table_lists_each_slice() -> None:
    computation = _computation(
        {
            "accounting_period_start": "2023-01-01",
            "accounting_period_end": "2024-06-30",
            "trading_turnover": 547_000,
        }
    )
    table = computation["tax_calculation_table"]
    rows = table["computation_by_fy"]

    assert [row["fy_years"] for row in rows] == [[2022], [2023], [2023, 2024]]
    assert [row["days"] for row in rows] == [90, 275, 182]
    assert [row["corporation_tax_charged"] for row in rows] == [17_100, 68_750, 45_500]
    assert [row["main_rate_label"] for row in rows] == ["19%", "25%", "25%"]
    assert [row["regime_grouped"] for row in rows] == [False, False, True]
    assert table["year_summary"]["slice_count"] == 3
    assert table["year_summary"]["slice_days"] == 547
    assert table["year_summary"]["corporation_tax_charge"] == 131_350
    assert computation["summary"]["tax_payable"] == 131_350


def test_rental_income_is_reported_net_of_property_losses() -> None:
    computation = _computation(
        {
            **FY2024,
            "trading_turnover": 10_000,
            "property_income": 6_000,
            "property_loss_brought_forward": 2_500,
            "interest_income": 400,
        }
    )
    other_income = computation["profit_adjustment_schedule"]["other_income"]

    assert other_income["rental_income_net"] == 3_500
    assert other_income["property_business_income"] == 6_000
    assert other_income["interest_income"] == 400
    assert computation["profit_adjustment_schedule"]["property_loss_bfwd_applied"] == 2_500
    assert computation["summary"]["taxable_total_profits"] == 13_900
