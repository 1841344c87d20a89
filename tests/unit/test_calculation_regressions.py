"""Regression coverage ensuring calculator outputs stay stable."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from ukcorptax.backend.app.services.calculation_service import calculate_corporation_tax

_DATA_PATH = Path(__file__).resolve().parents[1] / "data" / "regression_scenarios.json"
_SECTIONS = ("computation", "tax", "metadata")


@pytest.mark.parametrize(
    "scenario",
    json.loads(_DATA_PATH.read_text("utf-8")),
    ids=lambda item: item["name"],
)
def test_calculate_corporation_tax_matches_regression_scenario(
    scenario: dict[str, object],
) -> None:
    """The calculation service returns the expected results for known payloads."""

    payload = scenario["payload"]
    expectations = scenario["expectations"]

    result = calculate_corporation_tax(payload)["result"]

    for section in _SECTIONS:
        for key, value in expectations.get(section, {}).items():
            assert result[section][key] == pytest.approx(value), f"{section}.{key}"

    assert len(result["slices"]) == expectations["slice_count"]
