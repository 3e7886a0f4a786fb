"""Named registry of products, recipes and streams, and the commands driving them."""

import logging
from dataclasses import dataclass

from frozendict import frozendict

from balancer import DEFAULT_EPSILON, solve
from bindings import PartRef, RecipeCall, StreamRef
from buffers import DEFAULT_BUFFER_MULTIPLIER
from errors import (
    DuplicateDefinitionError,
    FactoryError,
    InvalidArgumentsError,
    MalformedInputError,
    UnresolvedReferenceError,
)
from products import DEFAULT_MODULE, ModuleRegistry, Product, ProductRegistry
from rate import Efficiency, Rate
from recipes import Recipe, RecipePart
from simulation import StreamTick, TickOrder, tick
from streams import Stream, StreamArena

_LOGGER = logging.getLogger("streamworks")


@dataclass
class FactoryConfig:
    """Tunables for one factory"""

    buffer_multiplier: int = DEFAULT_BUFFER_MULTIPLIER
    tick_order: TickOrder = TickOrder.UPSTREAM_FIRST
    epsilon: float = DEFAULT_EPSILON


@dataclass(frozen=True)
class StreamReport:
    """Realized rates of a stream's outputs, for display"""

    name: str
    mult: int
    rates: frozendict[str, Rate]

    def lines(self) -> list[str]:
        """Render the report as display lines."""
        result = [f"----- {self.name} x{self.mult} -----"]
        result.extend(f"  {product} @ {rate}" for product, rate in self.rates.items())
        return result


def _require_int(value, what: str, name: str | None, minimum: int = 0) -> int:
    """Validate an integer argument.

    Precondition:
        what describes the value for error messages

    Postcondition:
        returns value unchanged if it is an int (not a bool) >= minimum

    Raises:
        MalformedInputError: otherwise
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise MalformedInputError(f"Expected an integer {what}, got {value!r}", name)
    if value < minimum:
        raise MalformedInputError(f"{what.capitalize()} must be at least {minimum}, got {value}", name)
    return value


class Factory:
    """Owns a stream graph and the names used to build and drive it.

    Every registration either succeeds completely or leaves the factory as it
    was. Calls into one factory must not interleave.
    """

    def __init__(self, config: FactoryConfig | None = None):
        """Initialize an empty factory.

        Args:
            config: tunables, defaults to FactoryConfig()
        """
        self.config = config or FactoryConfig()
        self.modules = ModuleRegistry()
        self._product_ids = ProductRegistry()
        self.arena = StreamArena()

        self.products: dict[str, Product] = {}
        self.product_names: dict[Product, str] = {}
        self.recipes: dict[str, Recipe] = {}
        self.streams: dict[str, int] = {}
        self._labels: list[str] = []

    # ========== Lookups ==========

    def product(self, name: str) -> Product:
        try:
            return self.products[name]
        except KeyError:
            raise UnresolvedReferenceError(f"Unknown product '{name}'", name) from None

    def recipe(self, name: str) -> Recipe:
        try:
            return self.recipes[name]
        except KeyError:
            raise UnresolvedReferenceError(f"Unknown recipe '{name}'", name) from None

    def stream_index(self, name: str) -> int:
        try:
            return self.streams[name]
        except KeyError:
            raise UnresolvedReferenceError(f"Unknown stream '{name}'", name) from None

    def stream(self, name: str) -> Stream:
        return self.arena[self.stream_index(name)]

    def stream_name(self, index: int) -> str:
        """Registered name of a stream, or `<recipe>#<index>` for anonymous ones."""
        return self._labels[index]

    def named_streams(self) -> list[str]:
        return list(self.streams.keys())

    # ========== Registration ==========

    def register_product(self, name: str, module: str = DEFAULT_MODULE) -> Product:
        """Register a new product in a module.

        Precondition:
            name is a non-empty string

        Postcondition:
            the product is reachable by name and its name by product

        Args:
            name: product name
            module: namespace the product belongs to

        Returns:
            the new Product

        Raises:
            DuplicateDefinitionError: if name is already a product
        """
        if name in self.products:
            raise DuplicateDefinitionError(f"Product '{name}' already exists", name)
        product = self._product_ids.create(self.modules.get(module))
        self.products[name] = product
        self.product_names[product] = name
        _LOGGER.debug("Registered product %s as %s", name, product)
        return product

    def register_recipe(self, name: str, inputs, outputs, period) -> Recipe:
        """Register a recipe converting `inputs` into `outputs` every `period` ticks.

        Precondition:
            inputs and outputs are sequences of PartRef or product names

        Postcondition:
            the recipe is reachable by name, input slot order follows `inputs`

        Args:
            name: recipe name
            inputs: consumed parts per cycle
            outputs: yielded parts per cycle
            period: ticks per cycle, integer >= 1

        Returns:
            the new Recipe

        Raises:
            DuplicateDefinitionError: if name is already a recipe
            UnresolvedReferenceError: if a part names an unknown product
            MalformedInputError: if a part, amount or period has the wrong kind
        """
        if name in self.recipes:
            raise DuplicateDefinitionError(f"Recipe '{name}' already exists", name)
        input_parts = [self._part(value, name) for value in inputs]
        output_parts = [self._part(value, name) for value in outputs]
        period = _require_int(period, "period", name, minimum=1)

        recipe = Recipe.every(period, input_parts, output_parts)
        self.recipes[name] = recipe
        _LOGGER.debug("Registered recipe %s every %d ticks", name, period)
        return recipe

    def register_stream(self, name: str, binding) -> int:
        """Register a named stream built from a recipe call.

        Nested RecipeCalls among the arguments become anonymous streams.

        Precondition:
            binding is a RecipeCall whose args bind each recipe input slot

        Postcondition:
            the stream and any anonymous upstreams are in the arena
            on failure the arena is unchanged

        Args:
            name: stream name
            binding: recipe call describing the stream

        Returns:
            arena index of the new stream

        Raises:
            DuplicateDefinitionError: if name is already a stream
            UnresolvedReferenceError: if a recipe or stream name is unknown
            InvalidArgumentsError: if an argument count does not match the recipe
            MalformedInputError: if a binding or multiplier has the wrong kind
        """
        if name in self.streams:
            raise DuplicateDefinitionError(f"Stream '{name}' already exists", name)
        if not isinstance(binding, RecipeCall):
            raise MalformedInputError(
                f"Stream '{name}' must be defined by a recipe call, got {binding!r}", name
            )

        mark = len(self.arena)
        try:
            index = self._build_stream(binding, name)
        except FactoryError:
            self.arena.truncate(mark)
            del self._labels[mark:]
            raise

        self.streams[name] = index
        self._labels[index] = name
        _LOGGER.debug("Registered stream %s at index %d", name, index)
        return index

    def _part(self, value, owner: str) -> RecipePart:
        if isinstance(value, str):
            return RecipePart(self.product(value), 1)
        if isinstance(value, PartRef):
            amount = _require_int(value.amount, "part amount", owner, minimum=1)
            return RecipePart(self.product(value.product), amount)
        raise MalformedInputError(f"Expected a recipe part, got {value!r}", owner)

    def _build_stream(self, call: RecipeCall, owner: str) -> int:
        recipe = self.recipe(call.recipe)
        mult = _require_int(call.mult, "multiplier", owner, minimum=1)
        if len(call.args) != len(recipe.inputs):
            raise InvalidArgumentsError(
                f"Recipe '{call.recipe}' takes {len(recipe.inputs)} inputs, got {len(call.args)}",
                owner,
            )

        inputs = [(part.product, self._bind(arg, owner)) for part, arg in zip(recipe.inputs, call.args)]
        try:
            stream = Stream.create(recipe, inputs, mult, self.config.buffer_multiplier)
            index = self.arena.add(stream)
        except MalformedInputError as exc:
            raise MalformedInputError(str(exc), owner) from exc
        self._labels.append(f"{call.recipe}#{index}")
        return index

    def _bind(self, value, owner: str) -> int:
        if isinstance(value, StreamRef):
            return self.stream_index(value.name)
        if isinstance(value, RecipeCall):
            return self._build_stream(value, owner)
        raise MalformedInputError(f"Expected a stream or recipe call, got {value!r}", owner)

    # ========== Queries ==========

    def efficiency(self, stream: str) -> Efficiency:
        return self.arena.efficiency(self.stream_index(stream))

    def rate_of(self, stream: str, product: str) -> Rate | None:
        return self.arena.rate_of(self.stream_index(stream), self.product(product))

    # ========== Commands ==========

    def set_buffer(self, stream: str, product: str, capacity: int) -> None:
        """Set the capacity of one of a stream's buffers.

        Raises:
            InvalidArgumentsError: if the stream holds no buffer for product
            MalformedInputError: if capacity is not a non-negative integer
        """
        target = self.stream(stream)
        item = self.product(product)
        capacity = _require_int(capacity, "buffer capacity", stream)
        buffer = target.buffers.get(item)
        if buffer is None:
            raise InvalidArgumentsError(f"Stream '{stream}' has no buffer for '{product}'", stream)
        spilled = buffer.resize(capacity)
        if spilled:
            _LOGGER.warning("Discarded %d %s above the new capacity of %s", spilled, product, stream)

    def solve(self, stream: str) -> list[tuple[str, int, int]]:
        """Balance the supply chain behind a stream.

        Returns:
            applied changes as (stream name, old mult, new mult)
        """
        changes = solve(self.arena, self.stream_index(stream), self.config.epsilon)
        return [(self.stream_name(index), old, new) for index, old, new in changes]

    def log(self, stream: str, *products: str) -> StreamReport:
        """Report realized output rates of a stream.

        Args:
            stream: stream name
            products: output product names, all outputs when empty

        Returns:
            StreamReport with one rate per requested product

        Raises:
            InvalidArgumentsError: if the stream does not produce a product
        """
        index = self.stream_index(stream)
        target = self.arena[index]
        if products:
            wanted = [(name, self.product(name)) for name in products]
        else:
            wanted = [(self.product_names[item], item) for item in target.recipe.output_totals]

        rates = {}
        for name, item in wanted:
            rate = self.arena.rate_of(index, item)
            if rate is None:
                raise InvalidArgumentsError(f"Stream '{stream}' does not produce '{name}'", stream)
            rates[name] = rate
        return StreamReport(stream, target.mult, frozendict(rates))

    def call(self, stream: str, method: str, *args):
        """Dispatch a named command on a stream.

        Supported methods: `buffer(product, capacity)`, `solve()`,
        `log(*products)`.

        Raises:
            InvalidArgumentsError: for an unknown method or wrong arguments
        """
        if method == "buffer":
            if len(args) != 2 or not isinstance(args[0], str):
                raise InvalidArgumentsError("buffer expects (product, capacity)", stream)
            return self.set_buffer(stream, args[0], args[1])
        if method == "solve":
            if args:
                raise InvalidArgumentsError("solve takes no arguments", stream)
            return self.solve(stream)
        if method == "log":
            if not all(isinstance(arg, str) for arg in args):
                raise InvalidArgumentsError("log expects product names", stream)
            return self.log(stream, *args)
        raise InvalidArgumentsError(f"Streams have no method '{method}'", stream)

    def tick(self, ticks: int) -> list[StreamTick]:
        """Advance every stream by `ticks` ticks.

        Returns:
            one StreamTick per stream in visiting order
        """
        ticks = _require_int(ticks, "tick count", None)
        return tick(self.arena, ticks, self.config.tick_order, self.config.buffer_multiplier)

    def produced_by_name(self, report: StreamTick) -> dict[str, int]:
        """Translate a StreamTick's products into product names."""
        return {self.product_names[item]: amount for item, amount in report.produced.items()}
