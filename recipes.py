"""Immutable conversion rules between products."""

from collections import defaultdict
from dataclasses import dataclass
from functools import cached_property

from frozendict import frozendict

from products import Product
from rate import Rate


@dataclass(frozen=True)
class RecipePart:
    """`amount` units of `product` per conversion cycle"""

    product: Product
    amount: int = 1


def _totals(parts: tuple[RecipePart, ...]) -> frozendict[Product, int]:
    """Sum per-cycle amounts by product.

    Precondition:
        parts is a tuple of RecipePart, products may repeat

    Postcondition:
        returns frozendict mapping each product to its summed amount
        products keep their first-appearance order

    Args:
        parts: recipe parts to tally

    Returns:
        immutable product -> amount mapping
    """
    totals: dict[Product, int] = defaultdict(int)
    for part in parts:
        totals[part.product] += part.amount
    return frozendict(totals)


@dataclass(frozen=True)
class Recipe:
    """One conversion cycle completes every `rate.ticks` ticks"""

    rate: Rate
    inputs: tuple[RecipePart, ...]
    outputs: tuple[RecipePart, ...]

    @classmethod
    def every(cls, period: int, inputs, outputs) -> "Recipe":
        """Build a recipe that cycles once every `period` ticks.

        Precondition:
            period is an integer >= 1
            inputs and outputs are iterables of RecipePart

        Postcondition:
            returns a Recipe with base rate Rate(1, period)

        Args:
            period: ticks per conversion cycle
            inputs: consumed parts, in slot order
            outputs: yielded parts

        Returns:
            new Recipe

        Raises:
            ValueError: if period is not a positive integer
        """
        if isinstance(period, bool) or not isinstance(period, int) or period < 1:
            raise ValueError(f"Recipe period must be a positive integer, got {period!r}")
        return cls(Rate(1, period), tuple(inputs), tuple(outputs))

    @property
    def period(self) -> int:
        return int(self.rate.ticks)

    def optimal_inflow_of(self, product: Product) -> Rate:
        """Ideal consumption rate of `product` for one un-multiplied instance."""
        return sum(
            (self.rate * part.amount for part in self.inputs if part.product == product),
            Rate.ZERO,
        )

    def optimal_outflow_of(self, product: Product) -> Rate:
        """Ideal production rate of `product` for one un-multiplied instance."""
        return sum(
            (self.rate * part.amount for part in self.outputs if part.product == product),
            Rate.ZERO,
        )

    def is_inert(self) -> bool:
        """True when a cycle neither consumes nor yields anything."""
        return not self.inputs and not self.outputs

    def required_of(self, product: Product) -> int:
        return self.input_totals.get(product, 0)

    def yield_of(self, product: Product) -> int:
        return self.output_totals.get(product, 0)

    @cached_property
    def input_totals(self) -> frozendict[Product, int]:
        return _totals(self.inputs)

    @cached_property
    def output_totals(self) -> frozendict[Product, int]:
        return _totals(self.outputs)

    def input_products(self) -> list[Product]:
        """Distinct input products in slot order."""
        return list(self.input_totals.keys())
