"""Discrete-time simulation of a stream graph."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum

from frozendict import frozendict
from tarjan import tarjan

from buffers import DEFAULT_BUFFER_MULTIPLIER
from errors import CycleError
from products import Product
from streams import Stream, StreamArena

_LOGGER = logging.getLogger("streamworks")


class TickOrder(Enum):
    """order in which streams are advanced within one tick call"""

    UPSTREAM_FIRST = "upstream"
    DOWNSTREAM_FIRST = "downstream"
    REGISTRATION = "registration"


@dataclass(frozen=True)
class StreamTick:
    """What one stream produced during one tick call"""

    index: int
    produced: frozendict[Product, int]

    def total(self) -> int:
        return sum(self.produced.values())


def advance_clock(next_boundary: int, period: int, ticks: int) -> tuple[int, int]:
    """Count the cycle boundaries crossed in `ticks` ticks.

    Precondition:
        period >= 1
        1 <= next_boundary <= period
        ticks >= 0

    Postcondition:
        the partial countdown is consumed first, then whole periods
        the countdown restarts at period after every boundary

    Args:
        next_boundary: ticks left until the next boundary
        period: ticks per cycle
        ticks: elapsed ticks

    Returns:
        (cycles crossed, ticks left until the following boundary)
    """
    cycles = 0
    while ticks > 0:
        if next_boundary == period and ticks >= period:
            cycles += ticks // period
            ticks %= period
        elif ticks >= next_boundary:
            ticks -= next_boundary
            cycles += 1
            next_boundary = period
        else:
            next_boundary -= ticks
            ticks = 0
    return cycles, next_boundary


def visit_order(arena: StreamArena, order: TickOrder = TickOrder.UPSTREAM_FIRST) -> list[int]:
    """Stream indices in the order `tick` advances them.

    Raises:
        CycleError: if a supply-ordered visit is requested on a cyclic graph
    """
    if order is TickOrder.REGISTRATION:
        return list(range(len(arena)))

    graph = {index: arena.upstreams_of(index) for index in range(len(arena))}
    # tarjan yields components after everything they reach, so suppliers come first
    components = tarjan(graph)
    for component in components:
        if len(component) > 1 or component[0] in graph[component[0]]:
            raise CycleError(f"Streams {sorted(component)} supply each other")

    ordered = [component[0] for component in components]
    if order is TickOrder.DOWNSTREAM_FIRST:
        ordered.reverse()
    return ordered


def _pull_inputs(arena: StreamArena, stream: Stream, buffer_multiplier: int) -> None:
    """Move as much input stock as fits from upstream output buffers."""
    for product, upstream_index in stream.inputs:
        local = stream.input_buffer(product, buffer_multiplier)
        source = arena[upstream_index].buffers.get(product)
        if source is not None:
            local.fill_from(source)


def advance_stream(arena: StreamArena, index: int, ticks: int, buffer_multiplier: int = DEFAULT_BUFFER_MULTIPLIER) -> StreamTick:
    """Advance one stream by `ticks` ticks.

    Precondition:
        index is a valid stream index
        ticks >= 0

    Postcondition:
        stream.next holds the countdown to the following boundary
        for each boundary crossed, inputs were pulled and one cycle attempted
        the first failed cycle abandons the rest of this call

    Args:
        arena: streams of the graph
        index: stream to advance
        ticks: elapsed ticks
        buffer_multiplier: cycles of input a new input buffer can hold

    Returns:
        StreamTick with units produced per output product
    """
    stream = arena[index]
    period = stream.ticks
    next_boundary = period if stream.next is None else stream.next
    cycles, stream.next = advance_clock(next_boundary, period, ticks)
    if stream.recipe.is_inert():
        cycles = 0

    yields = stream.recipe.output_totals
    produced: dict[Product, int] = defaultdict(int, {product: 0 for product in yields})
    for _ in range(cycles):
        _pull_inputs(arena, stream, buffer_multiplier)
        if not stream.try_produce():
            break
        for product, amount in yields.items():
            produced[product] += amount * stream.mult

    for product, amount in produced.items():
        if amount > 0:
            _LOGGER.debug(
                "Stream %s produced %d of product %s (%s)",
                index, amount, product.id, stream.buffers[product],
            )
    return StreamTick(index, frozendict(produced))


def tick(
    arena: StreamArena,
    ticks: int,
    order: TickOrder = TickOrder.UPSTREAM_FIRST,
    buffer_multiplier: int = DEFAULT_BUFFER_MULTIPLIER,
) -> list[StreamTick]:
    """Advance every stream in the arena by `ticks` ticks.

    Each stream sees its upstream buffers as they are when it is visited, so
    `order` decides whether material produced this call can be consumed
    downstream within the same call.

    Args:
        arena: streams to advance
        ticks: elapsed ticks, >= 0
        order: visiting policy
        buffer_multiplier: cycles of input a new input buffer can hold

    Returns:
        one StreamTick per stream, in visiting order
    """
    return [advance_stream(arena, index, ticks, buffer_multiplier) for index in visit_order(arena, order)]
