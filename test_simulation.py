"""Tests for simulation module"""

from pytest import raises

from balancer import solve
from errors import CycleError
from products import Product
from recipes import Recipe, RecipePart
from simulation import TickOrder, advance_clock, advance_stream, tick, visit_order
from streams import Stream, StreamArena

A = Product(0, 0)
B = Product(1, 0)

CONVERT = Recipe.every(4, [RecipePart(A, 2)], [RecipePart(B, 3)])


def _leaf(amount: int = 2, period: int = 4) -> tuple[StreamArena, int]:
    arena = StreamArena()
    index = arena.add(Stream.create(Recipe.every(period, [], [RecipePart(A, amount)])))
    return arena, index


def _solved_chain() -> tuple[StreamArena, int, int]:
    arena = StreamArena()
    upstream = arena.add(Stream.create(Recipe.every(4, [], [RecipePart(A)])))
    downstream = arena.add(Stream.create(CONVERT, [(A, upstream)]))
    solve(arena, downstream)
    return arena, upstream, downstream


def test_advance_clock_whole_periods():
    """whole periods from a fresh countdown should each count as a cycle"""
    assert advance_clock(4, 4, 4) == (1, 4)
    assert advance_clock(4, 4, 12) == (3, 4)
    assert advance_clock(4, 4, 13) == (3, 3)
    assert advance_clock(4, 4, 0) == (0, 4)


def test_advance_clock_partial_countdown():
    """a partially elapsed countdown should be honored first"""
    assert advance_clock(4, 4, 2) == (0, 2)
    assert advance_clock(2, 4, 2) == (1, 4)
    assert advance_clock(2, 4, 7) == (2, 3)
    assert advance_clock(1, 4, 1) == (1, 4)


def test_split_ticks_match_single_call():
    """ticking in pieces should cross the same boundaries as one call"""
    next_boundary, total = 4, 0
    for ticks in [1, 3, 2, 5, 1]:
        cycles, next_boundary = advance_clock(next_boundary, 4, ticks)
        total += cycles
    assert (total, next_boundary) == advance_clock(4, 4, 12)


def test_leaf_produces_one_cycle_per_period():
    """a leaf should yield one cycle's output per period"""
    arena, index = _leaf()
    report = advance_stream(arena, index, 4)
    assert report.produced == {A: 2}
    assert arena[index].buffers[A].current == 2


def test_leaf_produces_k_cycles():
    """k periods should yield k cycles' output"""
    arena, index = _leaf()
    report = advance_stream(arena, index, 12)
    assert report.total() == 6
    assert arena[index].buffers[A].current == 6


def test_leaf_capped_by_headroom():
    """production should stop once the output buffer is full"""
    arena, index = _leaf()
    report = advance_stream(arena, index, 40)
    assert report.produced[A] == 16
    assert arena[index].buffers[A].current == arena[index].buffers[A].max == 16


def test_partial_ticks_accumulate():
    """short tick calls should add up to whole cycles"""
    arena, index = _leaf()
    assert advance_stream(arena, index, 3).total() == 0
    assert arena[index].next == 1
    assert advance_stream(arena, index, 1).total() == 2
    assert arena[index].next == 4


def test_visit_orders():
    """supply order visits suppliers before consumers, or the reverse"""
    arena, upstream, downstream = _solved_chain()
    assert visit_order(arena, TickOrder.UPSTREAM_FIRST) == [upstream, downstream]
    assert visit_order(arena, TickOrder.DOWNSTREAM_FIRST) == [downstream, upstream]
    assert visit_order(arena, TickOrder.REGISTRATION) == [0, 1]


def test_visit_order_detects_cycle():
    """a cyclic graph cannot be visited in supply order"""
    arena, upstream, downstream = _solved_chain()
    back = arena.add(Stream.create(Recipe.every(4, [RecipePart(B)], [RecipePart(A)]), [(B, downstream)]))
    arena[downstream].inputs = [(A, back)]
    with raises(CycleError):
        visit_order(arena, TickOrder.UPSTREAM_FIRST)
    assert visit_order(arena, TickOrder.REGISTRATION) == [0, 1, 2]


def test_tick_upstream_first_moves_material():
    """with suppliers first, fresh output is consumed in the same call"""
    arena, upstream, downstream = _solved_chain()

    reports = tick(arena, 4, TickOrder.UPSTREAM_FIRST)

    assert [report.index for report in reports] == [upstream, downstream]
    assert reports[0].produced == {A: 2}
    assert reports[1].produced == {B: 3}
    assert arena[upstream].buffers[A].current == 0
    assert arena[downstream].buffers[A].current == 0
    assert arena[downstream].buffers[B].current == 3


def test_tick_downstream_first_lags_one_call():
    """with consumers first, an empty upstream buffer yields nothing"""
    arena, upstream, downstream = _solved_chain()

    reports = tick(arena, 4, TickOrder.DOWNSTREAM_FIRST)

    assert reports[0].index == downstream
    assert reports[0].produced == {B: 0}
    assert arena[downstream].buffers[B].current == 0
    assert arena[downstream].buffers[A].current == 0
    assert arena[upstream].buffers[A].current == 2

    reports = tick(arena, 4, TickOrder.DOWNSTREAM_FIRST)
    assert reports[0].produced == {B: 3}


def test_stalled_stream_does_not_catch_up():
    """a failed cycle abandons the remaining cycles of the call"""
    arena = StreamArena()
    upstream = arena.add(Stream.create(Recipe.every(4, [], [RecipePart(A)])))
    downstream = arena.add(Stream.create(CONVERT, [(A, upstream)]))

    reports = tick(arena, 8)

    assert reports[0].produced == {A: 2}
    assert reports[1].produced == {B: 3}
    assert arena[downstream].next == 4


def test_buffers_stay_bounded():
    """no buffer should ever exceed its capacity or go negative"""
    arena, upstream, downstream = _solved_chain()
    for ticks in [1, 3, 4, 7, 16, 40, 2]:
        tick(arena, ticks)
        for stream in arena:
            for buffer in stream.buffers.values():
                assert 0 <= buffer.current <= buffer.max


def test_inert_recipe_skips_cycles():
    """a recipe with no parts should only advance its clock"""
    arena = StreamArena()
    index = arena.add(Stream.create(Recipe.every(3, [], [])))
    report = advance_stream(arena, index, 10**12 + 1)
    assert report.produced == {}
    assert report.total() == 0
    assert arena[index].next == 1
