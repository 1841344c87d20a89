"""Utilities for validating the tax-year reference table and surfacing issues.

Schema validation already rejects structurally broken files; these checks
catch data that loads cleanly but is probably wrong, such as a financial year
that does not start on 1 April or a marginal relief fraction that does not
line the two rates up at the limits.
"""

from __future__ import annotations

import argparse
from datetime import date
from decimal import Decimal
from typing import Sequence

from .schema import ConfigurationError, TaxYearDefinition, TaxYearTable
from .year_config import (
    available_years,
    build_tax_year_table,
    load_tax_year,
    manifest_entries,
)

KNOWN_STATUSES = frozenset({"active", "projected", "archived"})
_FRACTION_TOLERANCE = Decimal("0.0001")


def _format_scope(scope: str, message: str) -> str:
    return f"{scope}: {message}"


def _validate_dates(definition: TaxYearDefinition) -> list[str]:
    errors: list[str] = []
    year = definition.fy_year

    if definition.start_date != date(year, 4, 1):
        errors.append(
            _format_scope("dates", f"FY{year} should start on {date(year, 4, 1).isoformat()}")
        )
    if definition.end_date != date(year + 1, 3, 31):
        errors.append(
            _format_scope(
                "dates", f"FY{year} should end on {date(year + 1, 3, 31).isoformat()}"
            )
        )
    if definition.total_days not in (365, 366):
        errors.append(
            _format_scope("dates", f"span of {definition.total_days} days is not one year")
        )
    return errors


def expected_relief_fraction(definition: TaxYearDefinition) -> Decimal:
    """Fraction that makes marginal relief meet the small rate at the lower limit."""

    lower = definition.lower_threshold
    upper = definition.upper_threshold
    if upper <= lower:
        return Decimal("0")
    return (definition.main_rate - definition.small_rate) * lower / (upper - lower)


def _validate_rates(definition: TaxYearDefinition) -> list[str]:
    errors: list[str] = []
    small_rate = definition.small_rate
    main_rate = definition.main_rate

    if small_rate > main_rate:
        errors.append(
            _format_scope(
                "tiers", f"small profits rate {small_rate} exceeds main rate {main_rate}"
            )
        )
    if definition.tiers[1].rate != main_rate:
        errors.append(
            _format_scope("tiers", "marginal tier rate should equal the main rate")
        )

    fraction = definition.relief_fraction
    if small_rate == main_rate:
        if fraction != 0:
            errors.append(
                _format_scope(
                    "tiers", "relief fraction should be zero when a single rate applies"
                )
            )
    else:
        expected = expected_relief_fraction(definition)
        if abs(fraction - expected) > _FRACTION_TOLERANCE:
            errors.append(
                _format_scope(
                    "tiers",
                    f"relief fraction {fraction} does not match the limits and rates "
                    f"(expected {expected.normalize()})",
                )
            )
    return errors


def validate_tax_year(definition: TaxYearDefinition) -> list[str]:
    """Return a list of validation issues for one financial year."""

    errors: list[str] = []
    errors.extend(_validate_dates(definition))
    errors.extend(_validate_rates(definition))
    if definition.aia_limit <= 0:
        errors.append(_format_scope("aia_limit", "AIA limit should be positive"))
    return errors


def validate_table(table: TaxYearTable) -> list[str]:
    """Return issues that only show up across consecutive financial years."""

    return [
        _format_scope("table", f"no financial year covers {start.isoformat()} to {end.isoformat()}")
        for start, end in table.gaps()
    ]


def validate_manifest() -> list[str]:
    errors: list[str] = []
    for entry in manifest_entries():
        if entry.status not in KNOWN_STATUSES:
            errors.append(
                _format_scope(
                    f"manifest.{entry.year}", f"status '{entry.status}' is not recognised"
                )
            )
        if entry.notes_url and not entry.notes_url.startswith(("http://", "https://")):
            errors.append(
                _format_scope(f"manifest.{entry.year}", "notes URL must be absolute")
            )
    return errors


def validate_all_years(years: Sequence[int] | None = None) -> dict[int, list[str]]:
    """Validate configured years and return issues keyed by year."""

    targets = years or available_years()
    return {int(year): validate_tax_year(load_tax_year(year)) for year in targets}


def _build_argument_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Validate the corporation tax reference table and report issues."
    )
    parser.add_argument(
        "years",
        nargs="*",
        type=int,
        help="Specific financial years to validate (defaults to all configured years)",
    )
    return parser


def _report(scope: str, issues: Sequence[str]) -> bool:
    if issues:
        print(f"[{scope}] {len(issues)} issue(s) detected:")
        for issue in issues:
            print(f"  - {issue}")
        return False
    print(f"[{scope}] OK")
    return True


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point for running validations from the command line."""

    parser = _build_argument_parser()
    args = parser.parse_args(argv)
    years = args.years or available_years()

    if not years:
        parser.print_help()
        return 1

    exit_code = 0
    definitions: list[TaxYearDefinition] = []

    for year in years:
        try:
            definition = load_tax_year(year)
        except (FileNotFoundError, ConfigurationError) as error:
            print(f"[{year}] failed to load configuration: {error}")
            exit_code = 1
            continue

        definitions.append(definition)
        if not _report(str(year), validate_tax_year(definition)):
            exit_code = 1

    if not args.years:
        table_issues = validate_manifest()
        try:
            table_issues.extend(validate_table(build_tax_year_table(definitions)))
        except ConfigurationError as error:
            table_issues.append(_format_scope("table", str(error)))
        if not _report("table", table_issues):
            exit_code = 1

    return exit_code


if __name__ == "__main__":  # pragma: no cover - CLI invocation
    raise SystemExit(main())
