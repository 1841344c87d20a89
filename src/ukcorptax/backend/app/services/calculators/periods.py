"""Accounting period splitting and financial year overlap resolution."""

from __future__ import annotations

import calendar
import logging
from dataclasses import dataclass
from datetime import date, timedelta

from ukcorptax.backend.config.schema import TaxYearDefinition, TaxYearTable
from ukcorptax.backend.exceptions import InvalidPeriodError, NoApplicableTaxYearError

_LOGGER = logging.getLogger(__name__)

_ONE_DAY = timedelta(days=1)

FULL_PERIOD_NAME = "Full Period"
FIRST_PERIOD_NAME = "Period 1 (12 months)"
SHORT_PERIOD_NAME = "Period 2 (short period)"


def add_months(value: date, months: int) -> date:
    """Shift ``value`` by calendar months, clamping to the target month's last day."""

    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def twelve_month_end(start: date) -> date:
    """Last day of the 12 calendar months beginning on ``start``."""

    return add_months(start, 12) - _ONE_DAY


@dataclass(frozen=True, slots=True)
class Period:
    """Sub-range of an accounting period taxed as one unit."""

    index: int
    name: str
    start: date
    end: date
    is_short_period: bool

    @property
    def days(self) -> int:
        return days_inclusive(self.start, self.end)


def split_accounting_period(start: date, end: date) -> tuple[Period, ...]:
    """Split an accounting period at the 12-month mark.

    A period of up to 12 calendar months is returned whole. Anything longer
    becomes a 12-month first period plus a short second period running to
    ``end``. Month arithmetic is calendar based, so a 366-day period covering
    exactly 12 months is not split.
    """

    if end < start:
        raise InvalidPeriodError(start, end)

    first_end = twelve_month_end(start)
    if end <= first_end:
        return (Period(1, FULL_PERIOD_NAME, start, end, False),)

    _LOGGER.debug(
        "Splitting accounting period %s..%s at %s", start, end, first_end
    )
    return (
        Period(1, FIRST_PERIOD_NAME, start, first_end, False),
        Period(2, SHORT_PERIOD_NAME, first_end + _ONE_DAY, end, True),
    )


@dataclass(frozen=True, slots=True)
class FYOverlap:
    """Intersection of a period with one financial year."""

    tax_year: TaxYearDefinition
    start: date
    end: date

    @property
    def fy_year(self) -> int:
        return self.tax_year.fy_year

    @property
    def days(self) -> int:
        return days_inclusive(self.start, self.end)

    @property
    def fy_total_days(self) -> int:
        return self.tax_year.total_days


def resolve_fy_overlaps(period: Period, table: TaxYearTable) -> tuple[FYOverlap, ...]:
    """Return the financial years ``period`` touches, in date order."""

    overlaps: list[FYOverlap] = []
    for tax_year in table.years:
        start = max(period.start, tax_year.start_date)
        end = min(period.end, tax_year.end_date)
        if start <= end:
            overlaps.append(FYOverlap(tax_year, start, end))

    if not overlaps:
        raise NoApplicableTaxYearError(period.start, period.end)

    overlaps.sort(key=lambda overlap: overlap.start)
    # Overlap days must cover the period exactly; a table gap would drop profit.
    if sum(overlap.days for overlap in overlaps) != period.days:
        raise NoApplicableTaxYearError(period.start, period.end)
    return tuple(overlaps)


__all__ = [
    "FIRST_PERIOD_NAME",
    "FULL_PERIOD_NAME",
    "FYOverlap",
    "Period",
    "SHORT_PERIOD_NAME",
    "add_months",
    "days_inclusive",
    "resolve_fy_overlaps",
    "split_accounting_period",
    "twelve_month_end",
]
