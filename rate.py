"""Throughput arithmetic: amounts completed every N ticks."""

import math
from dataclasses import dataclass

# Realized throughput over theoretical throughput, in [0, 1]
Efficiency = float


def _is_whole(ticks: float) -> bool:
    return float(ticks).is_integer()


@dataclass(frozen=True)
class Rate:
    """`amount` units complete every `ticks` ticks"""

    amount: int
    ticks: float = 1

    def __post_init__(self):
        if self.amount < 0:
            raise ValueError(f"Rate amount must be non-negative, got {self.amount}")
        if self.ticks <= 0:
            raise ValueError(f"Rate ticks must be positive, got {self.ticks}")

    def throughput(self) -> float:
        """Units per tick."""
        return self.amount / self.ticks

    def is_zero(self) -> bool:
        return self.amount == 0

    def __add__(self, other: "Rate") -> "Rate":
        """Combine the throughput of two parallel sources.

        Precondition:
            other is a Rate

        Postcondition:
            returns a Rate whose throughput is the sum of both throughputs
            and whose amount is an integer
            adding ZERO returns the other operand unchanged

        Args:
            other: rate to add

        Returns:
            combined rate over the least common tick base when both ticks
            are whole numbers; otherwise the summed amounts over the ticks
            that give the combined throughput, exact in throughput only
        """
        if not isinstance(other, Rate):
            return NotImplemented
        if other.is_zero():
            return self
        if self.is_zero():
            return other
        if self.ticks == other.ticks:
            return Rate(self.amount + other.amount, self.ticks)
        if _is_whole(self.ticks) and _is_whole(other.ticks):
            ticks = math.lcm(int(self.ticks), int(other.ticks))
            return Rate(
                self.amount * (ticks // int(self.ticks)) + other.amount * (ticks // int(other.ticks)),
                ticks,
            )
        amount = self.amount + other.amount
        return Rate(amount, amount / (self.throughput() + other.throughput()))

    def __radd__(self, other):
        # lets sum() start from 0
        if other == 0:
            return self
        return self.__add__(other)

    def __mul__(self, factor) -> "Rate":
        """Scale a rate by an integer multiplier or a real efficiency.

        Precondition:
            factor is an int >= 0 (parallel copies) or a float in [0, 1]

        Postcondition:
            int factors scale the amount, float factors stretch the ticks
            so the amount stays integral; both compose in any order

        Args:
            factor: multiplier or efficiency

        Returns:
            scaled rate, ZERO when factor is 0
        """
        if isinstance(factor, bool):
            return NotImplemented
        if isinstance(factor, int):
            if factor == 0:
                return Rate.ZERO
            return Rate(self.amount * factor, self.ticks)
        if isinstance(factor, float):
            if factor <= 0.0 or self.is_zero():
                return Rate.ZERO
            return Rate(self.amount, self.ticks / factor)
        return NotImplemented

    __rmul__ = __mul__

    def __truediv__(self, other: "Rate") -> Efficiency:
        """Ratio of two throughputs.

        Raises:
            ZeroDivisionError: if other is a zero rate
        """
        if not isinstance(other, Rate):
            return NotImplemented
        if other.is_zero():
            raise ZeroDivisionError("division by a zero rate")
        return self.throughput() / other.throughput()

    def __lt__(self, other: "Rate") -> bool:
        if not isinstance(other, Rate):
            return NotImplemented
        return self.throughput() < other.throughput()

    def __le__(self, other: "Rate") -> bool:
        if not isinstance(other, Rate):
            return NotImplemented
        return self.throughput() <= other.throughput()

    def __gt__(self, other: "Rate") -> bool:
        if not isinstance(other, Rate):
            return NotImplemented
        return self.throughput() > other.throughput()

    def __ge__(self, other: "Rate") -> bool:
        if not isinstance(other, Rate):
            return NotImplemented
        return self.throughput() >= other.throughput()

    def __str__(self) -> str:
        return f"{self.amount:g} / {self.ticks:g} ticks"


Rate.ZERO = Rate(0, 1)
