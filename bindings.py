"""Values a graph builder hands to a Factory when defining recipes and streams.

The set is closed: a Factory accepts exactly these variants (and bare product
names where a part is expected) and rejects anything else with a
MalformedInputError.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PartRef:
    """`amount` units of the product named `product`"""

    product: str
    amount: int = 1


@dataclass(frozen=True)
class StreamRef:
    """An already registered, named stream"""

    name: str


@dataclass(frozen=True)
class RecipeCall:
    """A new stream running `recipe` on `args`, one binding per input slot"""

    recipe: str
    args: tuple = ()
    mult: int = 1

    def __post_init__(self):
        object.__setattr__(self, "args", tuple(self.args))

    def times(self, mult: int) -> "RecipeCall":
        """The same call at `mult` times the parallelism."""
        return RecipeCall(self.recipe, self.args, self.mult * mult)

    def __mul__(self, mult):
        if isinstance(mult, bool) or not isinstance(mult, int):
            return NotImplemented
        return self.times(mult)

    __rmul__ = __mul__


Binding = StreamRef | RecipeCall
