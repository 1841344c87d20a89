"""Unit coverage for tax-year reference table discovery and parsing."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from pathlib import Path
from shutil import copy2

import pytest
import yaml

from ukcorptax.backend.config import year_config
from ukcorptax.backend.config.schema import ConfigurationError


@pytest.fixture()
def isolated_config_directory(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Return a temporary configuration directory patched into ``year_config``."""

    original_directory = year_config.CONFIG_DIRECTORY
    for filename in ("2023.yaml", "2024.yaml", "2025.yaml"):
        copy2(original_directory / filename, tmp_path / filename)

    manifest_path = tmp_path / "manifest.yaml"
    manifest_path.write_text(
        yaml.safe_dump({"years": [{"year": 2023}, {"year": 2024}, {"year": 2025}]})
    )

    monkeypatch.setattr(year_config, "CONFIG_DIRECTORY", tmp_path)
    monkeypatch.setattr(year_config, "MANIFEST_FILE", manifest_path)
    year_config.clear_caches()

    yield tmp_path

    year_config.clear_caches()


def _add_manifest_entry(directory: Path, entry: dict[str, object]) -> None:
    manifest_path = directory / "manifest.yaml"
    manifest = yaml.safe_load(manifest_path.read_text())
    manifest["years"].append(entry)
    manifest_path.write_text(yaml.safe_dump(manifest, sort_keys=False))
    year_config.clear_caches()


def test_bundled_manifest_lists_every_year() -> None:
    assert year_config.available_years() == tuple(range(2020, 2031))


def test_load_tax_year_parses_rates_and_limits() -> None:
    definition = year_config.load_tax_year(2024)

    assert definition.start_date == date(2024, 4, 1)
    assert definition.end_date == date(2025, 3, 31)
    assert definition.total_days == 365
    assert definition.small_rate == Decimal("0.19")
    assert definition.main_rate == Decimal("0.25")
    assert definition.relief_fraction == Decimal("0.015")
    assert definition.lower_threshold == Decimal("50000")
    assert definition.upper_threshold == Decimal("250000")
    assert definition.aia_limit == Decimal("1000000")


def test_leap_financial_year_has_366_days() -> None:
    assert year_config.load_tax_year(2023).total_days == 366


def test_bundled_table_is_contiguous() -> None:
    table = year_config.load_tax_year_table()

    assert table.gaps() == []
    assert table.supported_years == tuple(range(2020, 2031))
    assert table.get(2022).regime_signature != table.get(2023).regime_signature
    assert table.get(2024).regime_signature == table.get(2025).regime_signature


def test_table_get_unknown_year_raises_key_error() -> None:
    with pytest.raises(KeyError):
        year_config.load_tax_year_table().get(1999)


def test_available_years_follow_the_manifest(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2026.yaml").write_text("year: 2026\n")

    assert year_config.available_years() == (2023, 2024, 2025)


def test_new_year_is_discovered_once_declared(isolated_config_directory: Path) -> None:
    source = yaml.safe_load((isolated_config_directory / "2025.yaml").read_text())
    source.update({"year": 2026, "start_date": "2026-04-01", "end_date": "2027-03-31"})
    (isolated_config_directory / "2026.yaml").write_text(yaml.safe_dump(source))
    _add_manifest_entry(isolated_config_directory, {"year": 2026, "status": "projected"})

    table = year_config.load_tax_year_table()

    assert table.supported_years == (2023, 2024, 2025, 2026)
    assert table.get(2026).start_date == date(2026, 4, 1)


def test_undeclared_year_is_missing() -> None:
    with pytest.raises(FileNotFoundError, match="not declared"):
        year_config.load_tax_year(1990)


def test_declared_year_without_file_is_missing(isolated_config_directory: Path) -> None:
    _add_manifest_entry(isolated_config_directory, {"year": 2026})

    with pytest.raises(FileNotFoundError, match="2026.yaml"):
        year_config.load_tax_year(2026)


def test_year_mismatch_is_rejected(isolated_config_directory: Path) -> None:
    copy2(isolated_config_directory / "2025.yaml", isolated_config_directory / "2026.yaml")
    _add_manifest_entry(isolated_config_directory, {"year": 2026})

    with pytest.raises(ConfigurationError, match="mismatch"):
        year_config.load_tax_year(2026)


def test_malformed_tiers_are_rejected(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2026.yaml").write_text(
        yaml.safe_dump(
            {
                "year": 2026,
                "aia_limit": 1_000_000,
                "tiers": [{"index": 1, "threshold": 0, "rate": 0.19}],
            }
        )
    )
    _add_manifest_entry(isolated_config_directory, {"year": 2026})

    with pytest.raises(ConfigurationError, match="FY2026"):
        year_config.load_tax_year(2026)


def test_non_mapping_file_is_rejected(isolated_config_directory: Path) -> None:
    (isolated_config_directory / "2026.yaml").write_text("- 1\n- 2\n")
    _add_manifest_entry(isolated_config_directory, {"year": 2026})

    with pytest.raises(ConfigurationError, match="mapping"):
        year_config.load_tax_year(2026)


def test_build_tax_year_table_rejects_duplicates() -> None:
    definition = year_config.load_tax_year(2024)

    with pytest.raises(ConfigurationError, match="Duplicate"):
        year_config.build_tax_year_table([definition, definition])


def test_build_tax_year_table_reports_gaps() -> None:
    table = year_config.build_tax_year_table(
        [year_config.load_tax_year(2025), year_config.load_tax_year(2023)]
    )

    assert table.supported_years == (2023, 2025)
    assert table.gaps() == [(date(2024, 4, 1), date(2025, 3, 31))]
