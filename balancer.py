"""Raise upstream multipliers until a stream can run at full efficiency."""

import logging
import math

from errors import CycleError
from rate import Rate
from streams import StreamArena

_LOGGER = logging.getLogger("streamworks")

# Tolerance for floating point error in efficiency ratios
DEFAULT_EPSILON = 1e-9


def _short_of(rate: Rate, target: Rate, epsilon: float) -> bool:
    """Check if `rate` falls measurably below `target`."""
    return rate.throughput() < target.throughput() * (1.0 - epsilon)


def _scaled_mult(mult: int, needed_efficiency: float, epsilon: float) -> int:
    """Smallest multiplier whose capacity meets demand.

    Precondition:
        mult >= 1
        0 < needed_efficiency < 1

    Postcondition:
        returns ceil(mult / needed_efficiency), ignoring error below epsilon
        result is always greater than mult

    Args:
        mult: current multiplier
        needed_efficiency: current capacity over demanded rate
        epsilon: tolerance subtracted before rounding up

    Returns:
        new multiplier
    """
    return max(math.ceil(mult / needed_efficiency - epsilon), mult + 1)


def solve(arena: StreamArena, index: int, epsilon: float = DEFAULT_EPSILON) -> list[tuple[int, int, int]]:
    """Scale the supply chain behind a stream so it can run at full efficiency.

    Walks upstream depth first. An upstream with too few parallel copies gets
    its multiplier raised (and its buffers scaled with it); an upstream with
    enough copies that still under-delivers is balanced in turn. Multipliers
    are never lowered.

    Precondition:
        index is a valid stream index in arena
        the graph behind index is acyclic

    Postcondition:
        every multiplier change has been applied and balanced recursively
        arena.efficiency(index) == 1.0 when every leaf can be scaled

    Args:
        arena: streams to balance
        index: target stream
        epsilon: tolerance for floating point comparisons

    Returns:
        applied changes as (stream index, old mult, new mult), in order

    Raises:
        CycleError: if a stream is reached again while it is being balanced
    """
    changes: list[tuple[int, int, int]] = []
    _solve(arena, index, epsilon, set(), changes)
    return changes


def _solve(
    arena: StreamArena,
    index: int,
    epsilon: float,
    balancing: set[int],
    changes: list[tuple[int, int, int]],
) -> None:
    if index in balancing:
        raise CycleError(f"Stream {index} supplies its own input")
    if arena.efficiency(index) >= 1.0 - epsilon:
        return

    balancing.add(index)
    try:
        stream = arena[index]
        # evaluate every slot against the current state before mutating anything
        pending: dict[int, int] = {}
        for product, upstream_index in stream.inputs:
            upstream = arena[upstream_index]
            optimal = stream.recipe.optimal_inflow_of(product) * stream.mult
            capacity = upstream.recipe.optimal_outflow_of(product) * upstream.mult

            if capacity.is_zero():
                _LOGGER.warning(
                    "Stream %s cannot supply product %s to stream %s, skipping",
                    upstream_index, product.id, index,
                )
                continue

            if _short_of(capacity, optimal, epsilon):
                new_mult = _scaled_mult(upstream.mult, capacity / optimal, epsilon)
                pending[upstream_index] = max(new_mult, pending.get(upstream_index, 0))
            else:
                realized = arena.rate_of(upstream_index, product)
                if realized is not None and _short_of(realized, optimal, epsilon):
                    _solve(arena, upstream_index, epsilon, balancing, changes)

        for upstream_index, new_mult in pending.items():
            upstream = arena[upstream_index]
            old_mult = upstream.mult
            if new_mult <= old_mult:
                continue
            upstream.scale(new_mult)
            changes.append((upstream_index, old_mult, new_mult))
            _LOGGER.info("Scaled stream %s from x%d to x%d", upstream_index, old_mult, new_mult)
            _solve(arena, upstream_index, epsilon, balancing, changes)
    finally:
        balancing.discard(index)
