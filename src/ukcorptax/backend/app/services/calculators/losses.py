"""Sequential trading and property loss relief across periods.

Pools are threaded period by period in date order; they are never apportioned
by days. Each pool is an immutable value: relieving or topping it up returns a
new pool, so a period's opening and closing balances are always available for
the audit trail.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from decimal import Decimal

from .profits import ProfitStreams
from .utils import ZERO, clamp_non_negative


@dataclass(frozen=True, slots=True)
class LossPool:
    """Loss balance plus the user's remaining usage cap (``None`` = unlimited)."""

    available: Decimal
    requested_remaining: Decimal | None = None

    @classmethod
    def opening(cls, brought_forward: Decimal, requested: Decimal | None) -> LossPool:
        pool = clamp_non_negative(brought_forward)
        cap = None if requested is None else min(pool, clamp_non_negative(requested))
        return cls(pool, cap)

    @property
    def requested_total(self) -> Decimal:
        if self.requested_remaining is None:
            return self.available
        return self.requested_remaining

    def relieve(self, profit: Decimal) -> tuple[Decimal, LossPool]:
        """Use as much of the pool as ``profit`` and the usage cap allow."""

        limit = min(self.available, clamp_non_negative(profit))
        if self.requested_remaining is not None:
            limit = min(limit, self.requested_remaining)
        used = clamp_non_negative(limit)

        remaining_request = None
        if self.requested_remaining is not None:
            remaining_request = clamp_non_negative(self.requested_remaining - used)
        return used, LossPool(clamp_non_negative(self.available - used), remaining_request)

    def add(self, unrelieved: Decimal) -> LossPool:
        """Carry a current-period loss into the pool for later periods."""

        return replace(self, available=self.available + clamp_non_negative(unrelieved))


@dataclass(frozen=True, slots=True)
class LossMovement:
    opening: LossPool
    used: Decimal
    incurred: Decimal
    relieved_in_period: Decimal
    closing: LossPool

    @property
    def unrelieved(self) -> Decimal:
        return self.incurred - self.relieved_in_period


@dataclass(frozen=True, slots=True)
class LossRelief:
    """Outcome of loss relief for one period."""

    trading: LossMovement
    property: LossMovement
    trading_after_loss: Decimal
    taxable_after_trading_loss: Decimal
    taxable_total: Decimal


def apply_loss_relief(
    streams: ProfitStreams, trading_pool: LossPool, property_pool: LossPool
) -> LossRelief:
    """Relieve brought-forward losses and carry any new losses forward.

    Trading losses brought forward are set only against trading profit after
    AIA. Property losses brought forward are set against total profits after
    trading loss relief. A property loss arising in the period is first
    relieved against the period's other profits, then a trading loss is
    relieved against whatever remains; the unrelieved balance of each joins
    its own pool for the next period.
    """

    trading = streams.trading_after_aia
    trading_used, trading_after_use = trading_pool.relieve(trading)
    trading_after_loss = trading - trading_used

    taxable_after_trading_loss = trading_after_loss + streams.non_trading_after_aia
    property_used, property_after_use = property_pool.relieve(taxable_after_trading_loss)
    taxable_total = clamp_non_negative(taxable_after_trading_loss - property_used)

    property_stream = streams.property_after_aia
    property_incurred = clamp_non_negative(-property_stream)
    property_relieved = min(
        property_incurred,
        clamp_non_negative(trading_after_loss) + streams.other_income,
    )

    trading_incurred = clamp_non_negative(-trading_after_loss)
    trading_relieved = min(
        trading_incurred,
        clamp_non_negative(
            streams.other_income + clamp_non_negative(property_stream) - property_relieved
        ),
    )

    return LossRelief(
        trading=LossMovement(
            opening=trading_pool,
            used=trading_used,
            incurred=trading_incurred,
            relieved_in_period=trading_relieved,
            closing=trading_after_use.add(trading_incurred - trading_relieved),
        ),
        property=LossMovement(
            opening=property_pool,
            used=property_used,
            incurred=property_incurred,
            relieved_in_period=property_relieved,
            closing=property_after_use.add(property_incurred - property_relieved),
        ),
        trading_after_loss=trading_after_loss,
        taxable_after_trading_loss=taxable_after_trading_loss,
        taxable_total=taxable_total,
    )


__all__ = ["LossMovement", "LossPool", "LossRelief", "apply_loss_relief"]
