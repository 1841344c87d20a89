from decimal import Decimal

import pytest

from ukcorptax.backend.config.schema import TaxYearDefinition
from ukcorptax.backend.config.validator import (
    expected_relief_fraction,
    main,
    validate_all_years,
    validate_manifest,
    validate_table,
    validate_tax_year,
)
from ukcorptax.backend.config.year_config import build_tax_year_table, load_tax_year


def _definition(**overrides) -> TaxYearDefinition:
    data = {
        "year": 2024,
        "aia_limit": 1_000_000,
        "tiers": [
            {"index": 1, "threshold": 0, "rate": "0.19"},
            {"index": 2, "threshold": 50_000, "rate": "0.25", "relief_fraction": "0.015"},
            {"index": 3, "threshold": 250_000, "rate": "0.25"},
        ],
    }
    data.update(overrides)
    return TaxYearDefinition.model_validate(data)


def test_current_configurations_are_valid() -> None:
    results = validate_all_years()
    assert all(not issues for issues in results.values()), results
    assert validate_manifest() == []


def test_expected_relief_fraction_matches_published_value() -> None:
    assert expected_relief_fraction(load_tax_year(2024)) == Decimal("0.015")


def test_validator_flags_inconsistent_relief_fraction() -> None:
    broken = _definition(
        tiers=[
            {"index": 1, "threshold": 0, "rate": "0.19"},
            {"index": 2, "threshold": 50_000, "rate": "0.25", "relief_fraction": "0.02"},
            {"index": 3, "threshold": 250_000, "rate": "0.25"},
        ]
    )

    errors = validate_tax_year(broken)

    assert any("relief fraction 0.02" in error for error in errors)


def test_validator_flags_relief_fraction_for_single_rate_year() -> None:
    broken = _definition(
        tiers=[
            {"index": 1, "threshold": 0, "rate": "0.19"},
            {"index": 2, "threshold": 50_000, "rate": "0.19", "relief_fraction": "0.01"},
            {"index": 3, "threshold": 250_000, "rate": "0.19"},
        ]
    )

    assert any("single rate" in error for error in validate_tax_year(broken))


def test_validator_flags_misaligned_dates() -> None:
    broken = _definition(start_date="2024-05-01")

    errors = validate_tax_year(broken)

    assert any(error.startswith("dates:") and "2024-04-01" in error for error in errors)
    assert any("not one year" in error for error in errors)


def test_validate_table_reports_gaps() -> None:
    table = build_tax_year_table([load_tax_year(2022), load_tax_year(2024)])

    assert validate_table(table) == ["table: no financial year covers 2023-04-01 to 2024-03-31"]


def test_main_reports_each_year_and_the_table(capsys: pytest.CaptureFixture[str]) -> None:
    assert main([]) == 0

    output = capsys.readouterr().out
    assert "[2020] OK" in output
    assert "[2030] OK" in output
    assert "[table] OK" in output


def test_main_with_explicit_years_skips_table(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["2024"]) == 0

    output = capsys.readouterr().out
    assert output.strip() == "[2024] OK"


def test_main_reports_missing_year(capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["1999"]) == 1

    assert "[1999] failed to load configuration" in capsys.readouterr().out
