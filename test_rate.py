"""Tests for rate module"""

from pytest import approx, raises

from rate import Rate


def test_zero_is_additive_identity():
    """adding ZERO should return the rate unchanged"""
    for rate in (Rate(3, 4), Rate(1, 2.5), Rate.ZERO):
        assert rate + Rate.ZERO == rate
        assert Rate.ZERO + rate == rate


def test_multiply_by_one_is_identity():
    """multiplying by 1 should return an equal rate"""
    rate = Rate(3, 4)
    assert rate * 1 == rate
    assert 1 * rate == rate


def test_add_same_ticks():
    """rates over the same tick base should sum their amounts"""
    assert Rate(1, 4) + Rate(2, 4) == Rate(3, 4)


def test_add_different_ticks():
    """rates over different tick bases should sum their throughputs"""
    combined = Rate(1, 2) + Rate(1, 4)
    assert combined.throughput() == approx(0.75)


def test_add_whole_ticks_uses_common_base():
    """whole tick bases should combine over their least common multiple"""
    combined = Rate(1, 2) + Rate(1, 4)
    assert combined == Rate(3, 4)
    assert isinstance(combined.amount, int)
    assert Rate(1, 4) + Rate(1, 6) == Rate(5, 12)


def test_add_stretched_ticks_keeps_amount_integral():
    """sums involving stretched ticks should keep an integer amount"""
    combined = Rate(1, 4) * 0.3 + Rate(1, 4)
    assert combined.amount == 2
    assert isinstance(combined.amount, int)
    assert combined.throughput() == approx(0.25 * 0.3 + 0.25)


def test_sum_of_rates():
    """sum() should combine rates starting from 0"""
    assert sum([Rate(1, 4), Rate(1, 4), Rate(2, 4)]) == Rate(4, 4)


def test_integer_multiplication_scales_amount():
    """integer multipliers model parallel copies"""
    assert Rate(3, 4) * 2 == Rate(6, 4)
    assert Rate(3, 4) * 0 == Rate.ZERO


def test_efficiency_multiplication_keeps_amount_integral():
    """efficiency factors should stretch ticks rather than cut amounts"""
    halved = Rate(3, 4) * 0.5
    assert halved.amount == 3
    assert halved.throughput() == approx(0.375)
    assert Rate(3, 4) * 0.0 == Rate.ZERO


def test_efficiency_and_multiplier_commute():
    """multiplier and efficiency can be applied in either order"""
    rate = Rate(2, 3)
    assert (rate * 0.25 * 3).throughput() == approx((rate * 3 * 0.25).throughput())


def test_division_yields_ratio():
    """dividing rates should give a dimensionless ratio"""
    assert Rate(1, 4) / Rate(2, 4) == approx(0.5)
    assert Rate(3, 2) / Rate(3, 2) == approx(1.0)


def test_division_by_zero_rate():
    """dividing by a zero rate should raise"""
    with raises(ZeroDivisionError):
        Rate(1, 4) / Rate.ZERO


def test_ordering_compares_throughput():
    """ordering should compare realized throughput, not raw fields"""
    assert Rate(1, 4) < Rate(1, 2)
    assert Rate(2, 8) <= Rate(1, 4)
    assert not Rate(2, 8) < Rate(1, 4)
    assert Rate(5, 1) > Rate(9, 2)
    assert Rate.ZERO < Rate(1, 1000)


def test_invalid_rates():
    """negative amounts and non-positive ticks should be rejected"""
    with raises(ValueError):
        Rate(-1, 4)
    with raises(ValueError):
        Rate(1, 0)


def test_str():
    """rates should render as amount per ticks"""
    assert str(Rate(3, 4)) == "3 / 4 ticks"
    assert str(Rate(3, 4) * 1.0) == "3 / 4 ticks"
