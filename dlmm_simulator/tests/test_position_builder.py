"""
Tests for building the initial bins of a position
"""

import dataclasses
import logging

import pytest

from dlmm_simulator.strategy.models import SimulationParams, Strategy, TokenType
from dlmm_simulator.strategy.position_builder import (
    find_starved_sides,
    get_bin_range,
    get_initial_bins,
)


@pytest.fixture
def sample_params():
    """SOL/USDC style position around a price of 100."""
    return SimulationParams(
        bin_step=25,
        initial_price=100.0,
        base_amount=1.0,
        quote_amount=100.0,
        lower_price=90.0,
        upper_price=110.0,
        strategy=Strategy.SPOT
    )


def _side_sum(bins, token_type):
    return sum(b.initial_amount for b in bins if b.initial_token_type == token_type)


@pytest.mark.parametrize("changes", [
    {'lower_price': 0.0},
    {'lower_price': -10.0},
    {'upper_price': 80.0},
    {'upper_price': 90.0},
    {'bin_step': 0},
    {'bin_step': -25},
    {'initial_price': 0.0},
])
def test_invalid_params_give_empty_list(sample_params, changes):
    """Test invalid parameters produce no bins instead of an error."""
    params = dataclasses.replace(sample_params, **changes)
    assert not params.is_valid()
    assert get_initial_bins(params) == []


@pytest.mark.parametrize("strategy", list(Strategy))
@pytest.mark.parametrize("apply_adjustment", [True, False])
def test_mass_conservation(sample_params, strategy, apply_adjustment):
    """Test per-side sums match the requested amounts."""
    params = dataclasses.replace(sample_params, strategy=strategy,
                                 apply_decimal_adjustment=apply_adjustment)
    bins = get_initial_bins(params)
    assert bins
    assert _side_sum(bins, TokenType.BASE) == pytest.approx(1.0, rel=1e-9)
    assert _side_sum(bins, TokenType.QUOTE) == pytest.approx(100.0, rel=1e-9)


def test_bins_sorted_and_contiguous(sample_params):
    """Test bins cover the range in ascending price order."""
    bins = get_initial_bins(sample_params)
    min_bin_id, max_bin_id, _ = get_bin_range(sample_params)
    assert [b.id for b in bins] == list(range(min_bin_id, max_bin_id + 1))
    prices = [b.price for b in bins]
    assert prices == sorted(prices)
    assert bins[0].price <= 90.0
    assert bins[-1].price >= 110.0


def test_token_sides(sample_params):
    """Test quote bins sit at or below the initial price and base bins above it."""
    bins = get_initial_bins(sample_params)
    _, _, active_bin_id = get_bin_range(sample_params)
    for b in bins:
        if b.id <= active_bin_id:
            assert b.initial_token_type == TokenType.QUOTE
            assert b.price <= 100.0
        else:
            assert b.initial_token_type == TokenType.BASE
            assert b.price > 100.0


def test_spot_equal_base_values(sample_params):
    """Test every spot base bin holds the same quote value."""
    bins = get_initial_bins(sample_params)
    values = [b.initial_value_in_quote for b in bins if b.initial_token_type == TokenType.BASE]
    assert len(values) > 1
    for value in values:
        assert value == pytest.approx(values[0], rel=1e-9)


def test_quote_values_equal_amounts(sample_params):
    """Test quote bins are valued one to one."""
    for strategy in Strategy:
        bins = get_initial_bins(dataclasses.replace(sample_params, strategy=strategy))
        for b in bins:
            if b.initial_token_type == TokenType.QUOTE:
                assert b.initial_value_in_quote == b.initial_amount


def test_display_value_snapshot(sample_params):
    """Test display value mirrors the initial value."""
    for strategy in Strategy:
        bins = get_initial_bins(dataclasses.replace(sample_params, strategy=strategy))
        assert all(b.display_value == b.initial_value_in_quote for b in bins)


def test_bid_ask_shape(sample_params):
    """Test bid-ask puts more quote further from the active bin."""
    bins = get_initial_bins(dataclasses.replace(sample_params, strategy=Strategy.BID_ASK))
    quote = [b.initial_amount for b in bins if b.initial_token_type == TokenType.QUOTE]
    # Ascending id means decreasing distance on the quote side
    assert quote == sorted(quote, reverse=True)


def test_initial_price_above_range(sample_params, caplog):
    """Test an initial price above the range gives an all-quote position."""
    params = dataclasses.replace(sample_params, initial_price=200.0)
    with caplog.at_level(logging.WARNING):
        bins = get_initial_bins(params)
    assert bins
    assert all(b.initial_token_type == TokenType.QUOTE for b in bins)
    assert _side_sum(bins, TokenType.QUOTE) == pytest.approx(100.0, rel=1e-9)
    assert find_starved_sides(params, bins) == [TokenType.BASE]
    assert "base amount has no eligible bins" in caplog.text


def test_initial_price_below_range(sample_params):
    """Test an initial price below the range gives an all-base position."""
    for strategy in Strategy:
        params = dataclasses.replace(sample_params, initial_price=50.0, strategy=strategy)
        bins = get_initial_bins(params)
        assert all(b.initial_token_type == TokenType.BASE for b in bins)
        assert _side_sum(bins, TokenType.BASE) == pytest.approx(1.0, rel=1e-9)
        assert find_starved_sides(params, bins) == [TokenType.QUOTE]


def test_single_sided_request(sample_params):
    """Test a zero amount on one side is not reported as starved."""
    params = dataclasses.replace(sample_params, quote_amount=0.0, strategy=Strategy.CURVE)
    bins = get_initial_bins(params)
    assert _side_sum(bins, TokenType.QUOTE) == 0.0
    assert _side_sum(bins, TokenType.BASE) == pytest.approx(1.0, rel=1e-9)
    assert find_starved_sides(params, bins) == []


def test_params_are_immutable(sample_params):
    """Test parameters cannot be modified in place."""
    with pytest.raises(dataclasses.FrozenInstanceError):
        sample_params.bin_step = 10


def test_params_from_dict():
    """Test parameters from camelCase and snake_case records."""
    params = SimulationParams.from_dict({
        'binStep': '25',
        'initialPrice': 100,
        'baseAmount': 1,
        'quoteAmount': 100,
        'lowerPrice': 90,
        'upperPrice': 110,
        'strategy': 'bid-ask',
    })
    assert params.bin_step == 25.0
    assert params.strategy == Strategy.BID_ASK
    assert params.base_decimals == 9
    assert params.quote_decimals == 6
    assert params.apply_decimal_adjustment is True
    assert SimulationParams.from_dict(params.to_dict()) == params

    with pytest.raises(ValueError):
        SimulationParams.from_dict(dict(params.to_dict(), slippage=0.01))
    with pytest.raises(KeyError):
        SimulationParams.from_dict({'bin_step': 25})
    with pytest.raises(ValueError):
        SimulationParams.from_dict(dict(params.to_dict(), strategy='uniform'))


def test_prices_outside_float_range_give_empty_list(caplog):
    """Test prices that overflow after decimal scaling produce no bins instead of an error."""
    params = SimulationParams(
        bin_step=100,
        initial_price=1e305,
        base_amount=1.0,
        quote_amount=1.0,
        lower_price=1e304,
        upper_price=1e306,
        base_decimals=0,
        quote_decimals=9
    )
    assert params.is_valid()
    with caplog.at_level(logging.WARNING):
        assert get_initial_bins(params) == []
    assert "out of range after decimal adjustment" in caplog.text

    tiny = dataclasses.replace(params, initial_price=5e-324, lower_price=5e-324,
                               upper_price=1e-300, base_decimals=9, quote_decimals=6)
    assert get_initial_bins(tiny) == []
