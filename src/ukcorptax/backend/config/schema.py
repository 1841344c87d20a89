"""Pydantic models describing the financial year reference table."""

from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Mapping, Sequence

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError,
    ValidationInfo,
    computed_field,
    field_validator,
    model_validator,
)
from typing_extensions import Self


class ConfigurationError(ValueError):
    """Raised when configuration values violate schema expectations."""


class ImmutableModel(BaseModel):
    """Base class that freezes instances and rejects unknown fields."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


def _coerce_decimal(value: Any, label: str) -> Decimal:
    if isinstance(value, bool):
        raise ConfigurationError(f"{label} must be numeric")
    if isinstance(value, Decimal):
        return value
    try:
        # Route floats through ``str`` so 0.19 stays exactly 0.19.
        return Decimal(str(value))
    except (InvalidOperation, TypeError, ValueError) as exc:
        raise ConfigurationError(f"{label} must be numeric") from exc


class TaxTier(ImmutableModel):
    """A single rate tier (small profits, marginal band or main rate)."""

    index: int = Field(ge=1, le=3)
    threshold: Decimal
    rate: Decimal
    relief_fraction: Decimal = Decimal("0")

    @field_validator("threshold", "rate", "relief_fraction", mode="before")
    @classmethod
    def _coerce_numbers(cls, value: Any, info: ValidationInfo) -> Decimal:
        if value is None:
            return Decimal("0")
        return _coerce_decimal(value, f"Tier {info.field_name}")

    @model_validator(mode="after")
    def _validate_values(self) -> TaxTier:
        if self.threshold < 0:
            raise ConfigurationError("Tier thresholds must be non-negative")
        if self.rate < 0 or self.rate > 1:
            raise ConfigurationError("Tier rates must be between 0 and 1")
        if self.relief_fraction < 0 or self.relief_fraction > 1:
            raise ConfigurationError("Relief fractions must be between 0 and 1")
        return self


class TaxYearDefinition(ImmutableModel):
    """Rates, limits and the date range of one UK financial year."""

    fy_year: int = Field(alias="year")
    start_date: date
    end_date: date
    tiers: tuple[TaxTier, ...]
    aia_limit: Decimal
    notes: str | None = None

    @model_validator(mode="before")
    @classmethod
    def _default_dates(cls, data: Any) -> Mapping[str, Any]:
        if not isinstance(data, Mapping):
            raise ConfigurationError("Financial year definitions must be mappings")

        prepared = dict(data)
        year = prepared.get("year", prepared.get("fy_year"))
        if isinstance(year, int):
            prepared.setdefault("start_date", date(year, 4, 1))
            prepared.setdefault("end_date", date(year + 1, 3, 31))
        return prepared

    @field_validator("aia_limit", mode="before")
    @classmethod
    def _coerce_aia_limit(cls, value: Any) -> Decimal:
        return _coerce_decimal(value, "AIA limit")

    @model_validator(mode="after")
    def _validate_definition(self) -> Self:
        if self.end_date < self.start_date:
            raise ConfigurationError(
                f"FY{self.fy_year}: end date precedes start date"
            )
        if self.aia_limit < 0:
            raise ConfigurationError(f"FY{self.fy_year}: AIA limit must be non-negative")
        if len(self.tiers) != 3:
            raise ConfigurationError(
                f"FY{self.fy_year}: exactly three rate tiers are required"
            )
        if [tier.index for tier in self.tiers] != [1, 2, 3]:
            raise ConfigurationError(
                f"FY{self.fy_year}: tiers must be ordered small, marginal, main"
            )
        if self.tiers[0].threshold != 0:
            raise ConfigurationError(
                f"FY{self.fy_year}: the first tier must start at a zero threshold"
            )
        for previous, current in zip(self.tiers, self.tiers[1:]):
            if current.threshold <= previous.threshold:
                raise ConfigurationError(
                    f"FY{self.fy_year}: tier thresholds must be strictly increasing"
                )
        return self

    @computed_field
    @property
    def total_days(self) -> int:
        return (self.end_date - self.start_date).days + 1

    @property
    def small_rate(self) -> Decimal:
        return self.tiers[0].rate

    @property
    def main_rate(self) -> Decimal:
        return self.tiers[2].rate

    @property
    def relief_fraction(self) -> Decimal:
        return self.tiers[1].relief_fraction

    @property
    def lower_threshold(self) -> Decimal:
        return self.tiers[1].threshold

    @property
    def upper_threshold(self) -> Decimal:
        return self.tiers[2].threshold

    @property
    def regime_signature(self) -> tuple[Decimal, Decimal, Decimal, Decimal, Decimal]:
        """Values that must match for two years to share one calculation slice."""

        return (
            self.small_rate,
            self.main_rate,
            self.relief_fraction,
            self.lower_threshold,
            self.upper_threshold,
        )


class TaxYearTable(ImmutableModel):
    """Ordered, non-overlapping collection of financial year definitions."""

    years: tuple[TaxYearDefinition, ...]

    @field_validator("years", mode="after")
    @classmethod
    def _sort_years(
        cls, value: tuple[TaxYearDefinition, ...]
    ) -> tuple[TaxYearDefinition, ...]:
        return tuple(sorted(value, key=lambda entry: entry.start_date))

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearTable:
        seen: set[int] = set()
        for entry in self.years:
            if entry.fy_year in seen:
                raise ConfigurationError(
                    f"Duplicate financial year {entry.fy_year} in the reference table"
                )
            seen.add(entry.fy_year)

        for previous, current in zip(self.years, self.years[1:]):
            if current.start_date <= previous.end_date:
                raise ConfigurationError(
                    f"FY{previous.fy_year} and FY{current.fy_year} overlap"
                )
        return self

    def get(self, fy_year: int) -> TaxYearDefinition:
        for entry in self.years:
            if entry.fy_year == fy_year:
                return entry
        raise KeyError(fy_year)

    def gaps(self) -> list[tuple[date, date]]:
        """Return uncovered date ranges between consecutive financial years."""

        missing: list[tuple[date, date]] = []
        for previous, current in zip(self.years, self.years[1:]):
            expected = previous.end_date + timedelta(days=1)
            if current.start_date > expected:
                missing.append((expected, current.start_date - timedelta(days=1)))
        return missing

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(entry.fy_year for entry in self.years)


class TaxYearManifestEntry(ImmutableModel):
    """Entry describing a supported financial year in the manifest."""

    year: int
    filename: str | None = None
    status: str = "active"
    notes_url: str | None = None

    @computed_field
    @property
    def resolved_filename(self) -> str:
        return self.filename or f"{self.year}.yaml"


class TaxYearManifest(ImmutableModel):
    """Manifest describing the available financial year files."""

    years: Sequence[TaxYearManifestEntry]

    @model_validator(mode="after")
    def _validate_years(self) -> TaxYearManifest:
        seen: set[int] = set()
        for entry in self.years:
            if entry.year in seen:
                raise ConfigurationError(
                    f"Duplicate year {entry.year} declared in the configuration manifest"
                )
            seen.add(entry.year)
        return self

    def get_entry(self, year: int) -> TaxYearManifestEntry:
        for entry in self.years:
            if entry.year == year:
                return entry
        raise KeyError(year)

    @computed_field
    @property
    def supported_years(self) -> tuple[int, ...]:
        return tuple(sorted(entry.year for entry in self.years))


__all__ = [
    "ConfigurationError",
    "ImmutableModel",
    "TaxTier",
    "TaxYearDefinition",
    "TaxYearManifest",
    "TaxYearManifestEntry",
    "TaxYearTable",
    "ValidationError",
]
