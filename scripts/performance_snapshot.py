#!/usr/bin/env python3
"""Collect baseline timing metrics for the corporation tax engine."""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from time import perf_counter

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from ukcorptax.backend.app.services.calculation_service import run  # noqa: E402
from ukcorptax.backend.app.services.mappers import (  # noqa: E402
    build_ct_packages_for_long_period,
)

SAMPLE_PAYLOAD = {
    "accounting_period_start": "2023-01-01",
    "accounting_period_end": "2023-12-31",
    "associated_company_count": 1,
    "trading_turnover": 420000,
    "property_income": 36000,
    "interest_income": 2500,
    "dividend_income": 8000,
    "cost_of_goods_sold": 160000,
    "staff_employment_costs": 110000,
    "depreciation_expense": 12000,
    "other_operating_charges": 30000,
    "disallowable_expenditure": 1500,
    "annual_investment_allowance_trade_additions": 40000,
    "annual_investment_allowance_non_trade_additions": 5000,
    "trading_loss_brought_forward": 15000,
}

LONG_PERIOD_PAYLOAD = {
    **SAMPLE_PAYLOAD,
    "accounting_period_start": "2023-01-01",
    "accounting_period_end": "2024-06-30",
}


def _time(label: str, iterations: int, func, payload) -> dict[str, float]:
    func(payload)  # Warm caches
    start = perf_counter()
    for _ in range(iterations):
        func(payload)
    elapsed = perf_counter() - start
    return {
        "label": label,
        "iterations": iterations,
        "total_ms": elapsed * 1000,
        "average_ms": (elapsed / iterations) * 1000,
    }


def main() -> None:
    iterations = int(os.getenv("UKCT_PROFILE_ITERATIONS", "75"))
    report = {
        "engine_run": _time("run", iterations, run, SAMPLE_PAYLOAD),
        "long_period_packages": _time(
            "build_ct_packages_for_long_period",
            iterations,
            build_ct_packages_for_long_period,
            LONG_PERIOD_PAYLOAD,
        ),
    }
    print(json.dumps(report, indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
