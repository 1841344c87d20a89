"""Typed errors raised by the corporation tax engine.

Every exception carries a machine-readable ``code`` so the HTTP layer and
other callers can branch on type rather than message text. Input problems
subclass :class:`ValueError` and reference-table problems subclass
:class:`~ukcorptax.backend.config.schema.ConfigurationError`, keeping the
existing ``ValueError`` handlers working unchanged.
"""

from __future__ import annotations

from datetime import date

from ukcorptax.backend.config.schema import ConfigurationError


class CorporationTaxError(Exception):
    """Base class for engine errors."""

    code: str = "CORPORATION_TAX_ERROR"


class InputError(CorporationTaxError, ValueError):
    """Raw input could not be normalised into a calculation record."""

    code: str = "INVALID_INPUT"


class InvalidPeriodError(InputError):
    """Accounting period end date falls before its start date."""

    code: str = "INVALID_PERIOD"

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(
            f"Accounting period end date {end.isoformat()} must be on or after "
            f"start date {start.isoformat()}"
        )


class SubmissionPeriodError(InputError):
    """A single return was requested for an accounting period over 12 months."""

    code: str = "SUBMISSION_PERIOD_TOO_LONG"

    def __init__(self, start: date, end: date, latest_end: date):
        self.start = start
        self.end = end
        self.latest_end = latest_end
        super().__init__(
            f"Accounting period {start.isoformat()} to {end.isoformat()} exceeds 12 months "
            f"(latest end for one return is {latest_end.isoformat()}); "
            "split it into separate submissions"
        )


class NoApplicableTaxYearError(CorporationTaxError, ConfigurationError):
    """No financial year in the reference table overlaps a period."""

    code: str = "NO_APPLICABLE_TAX_YEAR"

    def __init__(self, start: date, end: date):
        self.start = start
        self.end = end
        super().__init__(
            f"No financial year overlaps {start.isoformat()} to {end.isoformat()}; "
            "update the tax year reference table"
        )


__all__ = [
    "ConfigurationError",
    "CorporationTaxError",
    "InputError",
    "InvalidPeriodError",
    "NoApplicableTaxYearError",
    "SubmissionPeriodError",
]
