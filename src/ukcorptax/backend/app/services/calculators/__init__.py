"""Domain-specific calculation helpers."""

from .aggregation import PeriodOutcome, aggregate
from .allocation import (
    FYSlice,
    SharedCapClaim,
    allocate_by_weight,
    allocate_period_slices,
    allocate_shared_cap,
    associated_divisor,
)
from .corporation_tax import (
    Band,
    SliceTax,
    compute_corporation_tax,
    has_small_profits_or_marginal_relief_entitlement,
    tax_regime_slice,
)
from .losses import LossMovement, LossPool, LossRelief, apply_loss_relief
from .periods import (
    FYOverlap,
    Period,
    add_months,
    days_inclusive,
    resolve_fy_overlaps,
    split_accounting_period,
    twelve_month_end,
)
from .profits import PeriodShares, ProfitStreams, apportion_to_period, classify_profits
from .regimes import ProfitSlice, RegimeSlice, collapse_slices, spread_profits
from .utils import (
    ZERO,
    apportion,
    clamp_non_negative,
    format_percentage,
    round_pounds,
    safe_ratio,
    total,
)

__all__ = [
    "Band",
    "FYOverlap",
    "FYSlice",
    "LossMovement",
    "LossPool",
    "LossRelief",
    "Period",
    "PeriodOutcome",
    "PeriodShares",
    "ProfitSlice",
    "ProfitStreams",
    "RegimeSlice",
    "SharedCapClaim",
    "SliceTax",
    "ZERO",
    "add_months",
    "aggregate",
    "allocate_by_weight",
    "allocate_period_slices",
    "allocate_shared_cap",
    "apply_loss_relief",
    "apportion",
    "apportion_to_period",
    "associated_divisor",
    "clamp_non_negative",
    "classify_profits",
    "collapse_slices",
    "compute_corporation_tax",
    "days_inclusive",
    "format_percentage",
    "has_small_profits_or_marginal_relief_entitlement",
    "resolve_fy_overlaps",
    "round_pounds",
    "safe_ratio",
    "spread_profits",
    "split_accounting_period",
    "tax_regime_slice",
    "total",
    "twelve_month_end",
]
