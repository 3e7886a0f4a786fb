"""Running recipe instances wired into a supply graph."""

from dataclasses import dataclass, field

from buffers import Buffer, DEFAULT_BUFFER_MULTIPLIER
from errors import CycleError, MalformedInputError
from products import Product
from rate import Efficiency, Rate
from recipes import Recipe


@dataclass
class Stream:
    """A recipe run at `mult` parallel copies.

    `inputs` holds one (product, upstream stream index) pair per recipe input
    slot, in slot order. `buffers` holds one Buffer per output product and
    gains per-input buffers the first time the stream draws its inputs.
    `next` counts the ticks left until the next cycle boundary; None means a
    full period.
    """

    recipe: Recipe
    inputs: list[tuple[Product, int]] = field(default_factory=list)
    mult: int = 1
    buffers: dict[Product, Buffer] = field(default_factory=dict)
    next: int | None = None

    @classmethod
    def create(
        cls,
        recipe: Recipe,
        inputs: list[tuple[Product, int]] | None = None,
        mult: int = 1,
        buffer_multiplier: int = DEFAULT_BUFFER_MULTIPLIER,
    ) -> "Stream":
        """Create a stream with freshly allocated output buffers.

        Precondition:
            recipe is a Recipe
            inputs has exactly one entry per recipe input slot
            mult >= 1

        Postcondition:
            every output product has an empty buffer holding
            amount * buffer_multiplier * mult units

        Args:
            recipe: recipe to run
            inputs: (product, upstream index) per input slot
            mult: parallel copies
            buffer_multiplier: cycles of output each buffer can hold

        Returns:
            new Stream

        Raises:
            MalformedInputError: if the slot count or multiplier is wrong
        """
        inputs = list(inputs or [])
        if len(inputs) != len(recipe.inputs):
            raise MalformedInputError(
                f"Recipe takes {len(recipe.inputs)} inputs, got {len(inputs)}"
            )
        if mult < 1:
            raise MalformedInputError(f"Multiplier must be at least 1, got {mult}")
        buffers = {
            product: Buffer(0, amount * buffer_multiplier * mult)
            for product, amount in recipe.output_totals.items()
        }
        return cls(recipe, inputs, mult, buffers)

    @property
    def ticks(self) -> int:
        """Recipe period in ticks."""
        return self.recipe.period

    def is_leaf(self) -> bool:
        return not self.inputs

    def upstreams(self) -> list[int]:
        """Distinct upstream stream indices, in slot order."""
        return list(dict.fromkeys(index for _, index in self.inputs))

    def input_buffer(self, product: Product, buffer_multiplier: int = DEFAULT_BUFFER_MULTIPLIER) -> Buffer:
        """Get the local buffer for an input product, creating it on first use."""
        buffer = self.buffers.get(product)
        if buffer is None:
            capacity = self.recipe.required_of(product) * buffer_multiplier * self.mult
            buffer = self.buffers[product] = Buffer(0, capacity)
        return buffer

    def scale(self, new_mult: int) -> None:
        """Change the multiplier, scaling every buffer capacity with it.

        Precondition:
            new_mult >= 1

        Postcondition:
            each buffer max becomes floor(max * new_mult / old_mult)
            stock above a reduced capacity is discarded
            self.mult == new_mult
        """
        old_mult = self.mult
        for buffer in self.buffers.values():
            buffer.resize(buffer.max * new_mult // old_mult)
        self.mult = new_mult

    def try_produce(self) -> bool:
        """Run one conversion cycle if stock and headroom allow it.

        Precondition:
            none

        Postcondition:
            on success every input buffer lost amount * mult units and every
            output buffer gained amount * mult units
            on failure no buffer changed

        Returns:
            True if the cycle ran
        """
        needs = self.recipe.input_totals
        yields = self.recipe.output_totals

        for product, amount in needs.items():
            buffer = self.buffers.get(product)
            if buffer is None or buffer.current < amount * self.mult:
                return False
        for product, amount in yields.items():
            buffer = self.buffers.get(product)
            if buffer is None or buffer.free() < amount * self.mult:
                return False

        for product, amount in needs.items():
            self.buffers[product].current -= amount * self.mult
        for product, amount in yields.items():
            self.buffers[product].current += amount * self.mult
        return True


class StreamArena:
    """Owns every stream of a factory, addressed by stable integer indices.

    A stream may only bind upstream indices that already exist when it is
    added, so an arena built through `add` alone has no cycles.
    """

    def __init__(self):
        self._streams: list[Stream] = []

    def __getitem__(self, index: int) -> Stream:
        return self._streams[index]

    def __len__(self) -> int:
        return len(self._streams)

    def __iter__(self):
        return iter(self._streams)

    def add(self, stream: Stream) -> int:
        """Append a stream and return its index.

        Raises:
            MalformedInputError: if an input slot refers to a missing stream
        """
        for product, index in stream.inputs:
            if not 0 <= index < len(self._streams):
                raise MalformedInputError(
                    f"Input slot for product {product.id} refers to unknown stream {index}"
                )
        self._streams.append(stream)
        return len(self._streams) - 1

    def truncate(self, length: int) -> None:
        """Drop every stream added after the arena had `length` streams."""
        del self._streams[length:]

    def upstreams_of(self, index: int) -> list[int]:
        return self._streams[index].upstreams()

    def efficiency(self, index: int) -> Efficiency:
        """Fraction of its theoretical throughput a stream can sustain.

        Precondition:
            index is a valid stream index

        Postcondition:
            returns 1.0 for a stream without inputs
            otherwise returns min over input products of
            supplied / (optimal inflow * mult), clamped to at most 1.0,
            or 0.0 when nothing contributes

        Args:
            index: stream to evaluate

        Returns:
            efficiency in [0, 1]

        Raises:
            CycleError: if the stream transitively supplies itself
        """
        return self._efficiency(index, set(), {})

    def rate_of(self, index: int, product: Product) -> Rate | None:
        """Realized outflow of `product`, or None if the stream does not make it."""
        return self._rate_of(index, product, set(), {})

    def supplied_rate(self, index: int, product: Product) -> Rate:
        """Realized inflow of `product` summed over a stream's distinct upstreams."""
        return self._supplied_rate(index, product, set(), {})

    # `known` caches efficiencies settled during one top-level query
    def _supplied_rate(
        self, index: int, product: Product, visiting: set[int], known: dict[int, Efficiency]
    ) -> Rate:
        rates = (self._rate_of(upstream, product, visiting, known) for upstream in self.upstreams_of(index))
        return sum((rate for rate in rates if rate is not None), Rate.ZERO)

    def _efficiency(self, index: int, visiting: set[int], known: dict[int, Efficiency]) -> Efficiency:
        if index in known:
            return known[index]
        if index in visiting:
            raise CycleError(f"Stream {index} supplies its own input")
        stream = self._streams[index]
        if stream.is_leaf():
            return 1.0

        visiting.add(index)
        try:
            ratios = []
            for product in stream.recipe.input_products():
                optimal = stream.recipe.optimal_inflow_of(product) * stream.mult
                if optimal.is_zero():
                    continue
                ratios.append(self._supplied_rate(index, product, visiting, known) / optimal)
        finally:
            visiting.discard(index)

        known[index] = min(min(ratios, default=0.0), 1.0)
        return known[index]

    def _rate_of(
        self, index: int, product: Product, visiting: set[int], known: dict[int, Efficiency]
    ) -> Rate | None:
        stream = self._streams[index]
        outflow = stream.recipe.optimal_outflow_of(product)
        if outflow.is_zero():
            return None
        return outflow * self._efficiency(index, visiting, known) * stream.mult
