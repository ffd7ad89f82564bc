"""Exact-decimal money arithmetic.

All monetary amounts handled by the order ledger and the analytics engine go
through :class:`Money`. Amounts are held as ``decimal.Decimal`` with two
fractional digits; binary floats are rejected at the boundary so no value that
reaches persistence or aggregation has been through floating point.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Iterable, Union

CENT = Decimal("0.01")

# Largest amount a Numeric(10, 2) column can store
MAX_AMOUNT = Decimal("99999999.99")

MoneyInput = Union[str, int, Decimal, "Money"]


class InvalidMoneyError(ValueError):
    """Raised when a value cannot be interpreted as an exact money amount."""


@dataclass(frozen=True, order=True)
class Money:
    """Immutable two-decimal currency amount."""

    amount: Decimal

    def __post_init__(self):
        if not isinstance(self.amount, Decimal):
            raise InvalidMoneyError(f"Money requires a Decimal, got {type(self.amount).__name__}")
        if not self.amount.is_finite():
            raise InvalidMoneyError("Money amount must be finite")
        object.__setattr__(self, "amount", self.amount.quantize(CENT, rounding=ROUND_HALF_UP))

    @classmethod
    def parse(cls, value: MoneyInput) -> "Money":
        """Parse an untrusted value into Money.

        Accepts decimal strings, integers and Decimals. Floats are refused, as
        are amounts carrying more than two significant fractional digits.
        """
        if isinstance(value, Money):
            return value
        if isinstance(value, bool) or isinstance(value, float):
            raise InvalidMoneyError("Money amounts must be given as decimal strings, not floats")
        try:
            amount = Decimal(value.strip()) if isinstance(value, str) else Decimal(value)
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidMoneyError(f"Invalid money amount: {value!r}")
        if not amount.is_finite():
            raise InvalidMoneyError(f"Invalid money amount: {value!r}")
        if amount.quantize(CENT, rounding=ROUND_HALF_UP) != amount:
            raise InvalidMoneyError(f"Money amount has more than two decimal places: {value!r}")
        return cls(amount)

    @classmethod
    def zero(cls) -> "Money":
        return cls(Decimal("0"))

    @classmethod
    def sum(cls, amounts: Iterable["Money"]) -> "Money":
        total = cls.zero()
        for amount in amounts:
            total = total + amount
        return total

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self.amount + other.amount)

    def __mul__(self, quantity: int) -> "Money":
        # Only integer multipliers keep the result exact
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return NotImplemented
        return Money(self.amount * quantity)

    __rmul__ = __mul__

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def to_decimal(self) -> Decimal:
        return self.amount

    def to_fixed2(self) -> str:
        """Render with exactly two fractional digits."""
        return f"{self.amount:.2f}"

    def __str__(self) -> str:
        return self.to_fixed2()

    def fits_column(self) -> bool:
        """True when the amount can be stored in a ``Numeric(10, 2)`` column."""
        return abs(self.amount) <= MAX_AMOUNT
