"""Reference table loader wrapping the shared schema models."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Sequence

import yaml
from pydantic import ValidationError

from .schema import (
    ConfigurationError,
    TaxTier,
    TaxYearDefinition,
    TaxYearManifest,
    TaxYearManifestEntry,
    TaxYearTable,
)

CONFIG_DIRECTORY = Path(__file__).resolve().parent / "data"
MANIFEST_FILE = CONFIG_DIRECTORY / "manifest.yaml"


def _load_yaml(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    if not isinstance(data, dict):
        raise ConfigurationError("Configuration file must define a mapping at the top level")
    return data


@lru_cache(maxsize=1)
def load_manifest() -> TaxYearManifest:
    """Load and cache the configuration manifest."""

    if not MANIFEST_FILE.exists():
        raise FileNotFoundError("Configuration manifest not found")

    raw_manifest = _load_yaml(MANIFEST_FILE)

    try:
        return TaxYearManifest.model_validate(raw_manifest)
    except ValidationError as error:
        raise ConfigurationError(f"Manifest validation failed: {error}") from error


def manifest_entries() -> Sequence[TaxYearManifestEntry]:
    """Expose the configured manifest entries."""

    return load_manifest().years


@lru_cache(maxsize=16)
def load_tax_year(year: int) -> TaxYearDefinition:
    """Load the definition for the specified financial year from disk."""

    try:
        manifest_entry = load_manifest().get_entry(year)
    except KeyError as exc:
        raise FileNotFoundError(f"Configuration for FY{year} not declared in manifest") from exc

    config_file = CONFIG_DIRECTORY / manifest_entry.resolved_filename
    if not config_file.exists():
        raise FileNotFoundError(
            f"Configuration file for FY{year} missing: {config_file.name}"
        )

    raw_config = _load_yaml(config_file)
    raw_config.setdefault("year", year)

    try:
        definition = TaxYearDefinition.model_validate(raw_config)
    except ValidationError as error:
        raise ConfigurationError(f"Configuration validation failed for FY{year}: {error}") from error

    if definition.fy_year != year:
        raise ConfigurationError(
            f"Configuration year mismatch: expected {year}, found {definition.fy_year}"
        )

    return definition


@lru_cache(maxsize=1)
def load_tax_year_table() -> TaxYearTable:
    """Return the default reference table covering every manifest year.

    The table is immutable and cached for the lifetime of the process; callers
    needing different rates build their own :class:`TaxYearTable` and pass it
    to the engine explicitly.
    """

    definitions = tuple(load_tax_year(year) for year in available_years())
    try:
        return TaxYearTable(years=definitions)
    except ValidationError as error:
        raise ConfigurationError(f"Reference table validation failed: {error}") from error


def build_tax_year_table(entries: Sequence[Any]) -> TaxYearTable:
    """Validate caller-supplied definitions (mappings or models) into a table."""

    try:
        return TaxYearTable.model_validate({"years": list(entries)})
    except ValidationError as error:
        raise ConfigurationError(f"Reference table validation failed: {error}") from error


def available_years() -> Sequence[int]:
    """Return the financial years declared in the manifest."""

    return load_manifest().supported_years


def clear_caches() -> None:
    """Drop cached configuration so the next load re-reads the YAML files."""

    load_tax_year_table.cache_clear()
    load_tax_year.cache_clear()
    load_manifest.cache_clear()


__all__ = [
    "CONFIG_DIRECTORY",
    "ConfigurationError",
    "MANIFEST_FILE",
    "TaxTier",
    "TaxYearDefinition",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "TaxYearTable",
    "available_years",
    "build_tax_year_table",
    "clear_caches",
    "load_manifest",
    "load_tax_year",
    "load_tax_year_table",
    "manifest_entries",
]
