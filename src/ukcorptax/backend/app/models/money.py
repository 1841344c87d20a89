"""Money value type pairing an exact figure with its reported whole-pound form."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

_WHOLE_POUND = Decimal("1")


@dataclass(frozen=True, slots=True)
class Amount:
    """Exact monetary figure that rounds only when reported.

    ``exact`` keeps full ``Decimal`` precision and is what every aggregation
    sums. ``rounded`` is the whole-pound figure shown on returns, rounded half
    away from zero.
    """

    exact: Decimal

    def __post_init__(self) -> None:
        if not isinstance(self.exact, Decimal):
            try:
                object.__setattr__(self, "exact", Decimal(str(self.exact)))
            except (InvalidOperation, ValueError) as exc:
                raise ValueError(f"Invalid amount: {self.exact!r}") from exc
        if not self.exact.is_finite():
            raise ValueError(f"Amounts must be finite, got {self.exact}")

    @classmethod
    def of(cls, value: Decimal | int | str) -> Amount:
        return cls(Decimal(str(value)) if not isinstance(value, Decimal) else value)

    @classmethod
    def zero(cls) -> Amount:
        return cls(Decimal("0"))

    @classmethod
    def sum(cls, amounts: Iterable[Amount]) -> Amount:
        return cls(sum((amount.exact for amount in amounts), Decimal("0")))

    @property
    def rounded(self) -> int:
        return int(self.exact.quantize(_WHOLE_POUND, rounding=ROUND_HALF_UP))

    @property
    def is_zero(self) -> bool:
        return self.exact == 0

    def __add__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.exact + other.exact)

    def __sub__(self, other: Amount) -> Amount:
        if not isinstance(other, Amount):
            return NotImplemented
        return Amount(self.exact - other.exact)

    def __neg__(self) -> Amount:
        return Amount(-self.exact)

    def __int__(self) -> int:
        return self.rounded

    def __str__(self) -> str:
        return str(self.rounded)


__all__ = ["Amount"]
