"""
Tests for strategy weights and amount distribution
"""

import pytest

from dlmm_simulator.strategy.distribution import BinAmount, weights_to_amounts
from dlmm_simulator.strategy.models import Strategy
from dlmm_simulator.strategy.weights import (
    calculate_strategy_weights,
    get_strategy_description,
)


@pytest.fixture
def bin_range():
    """Active bin 100 with bins 96..100 on the quote side and 101..105 on the base side."""
    return 96, 105, 100


def test_spot_weights(bin_range):
    """Test uniform weights for spot."""
    weights = calculate_strategy_weights(Strategy.SPOT, *bin_range)
    assert list(weights) == list(range(96, 106))
    assert set(weights.values()) == {1}


def test_bid_ask_weights(bin_range):
    """Test linear weights growing with the distance from the active bin."""
    weights = calculate_strategy_weights(Strategy.BID_ASK, *bin_range)
    assert [weights[100 - d] for d in range(5)] == [1, 2, 3, 4, 5]
    for d in range(1, 5):
        assert weights[100 + d] == weights[100 - d] == d + 1
    assert weights[105] == 6


def test_curve_weights(bin_range):
    """Test weights shrinking with the distance from the active bin."""
    weights = calculate_strategy_weights(Strategy.CURVE, *bin_range)
    assert [weights[i] for i in range(96, 101)] == [1, 1, 2, 3, 4]
    assert [weights[i] for i in range(101, 106)] == [4, 3, 2, 1, 1]


@pytest.mark.parametrize("strategy", list(Strategy))
def test_weights_at_least_one(strategy, bin_range):
    """Test every strategy assigns a weight of at least 1 to every bin."""
    weights = calculate_strategy_weights(strategy, *bin_range)
    assert len(weights) == 10
    assert min(weights.values()) >= 1


@pytest.mark.parametrize("strategy", list(Strategy))
def test_active_bin_outside_range(strategy):
    """Test one-sided ranges keep weights inside the range."""
    below = calculate_strategy_weights(strategy, 96, 105, 90)
    above = calculate_strategy_weights(strategy, 96, 105, 120)
    assert list(below) == list(range(96, 106))
    assert list(above) == list(range(96, 106))
    assert min(below.values()) >= 1
    assert min(above.values()) >= 1


def test_bid_ask_one_sided():
    """Test bid-ask distances are measured from an out-of-range active bin."""
    weights = calculate_strategy_weights('bid-ask', 96, 98, 90)
    assert weights == {96: 7, 97: 8, 98: 9}


def test_unknown_strategy():
    """Test unknown strategy names are rejected."""
    with pytest.raises(ValueError):
        calculate_strategy_weights('uniform', 0, 10, 5)


def test_strategy_descriptions():
    """Test every strategy has a description."""
    for strategy in Strategy:
        assert get_strategy_description(strategy)
    assert 'Curve' in get_strategy_description('curve')


def test_quote_distribution():
    """Test quote tokens are split proportionally to weight."""
    amounts = weights_to_amounts({1: 1, 2: 1, 3: 2}, 0.0, 100.0, 3, {}, Strategy.CURVE, 1.0)
    assert amounts[1] == BinAmount(0.0, 25.0, 25.0)
    assert amounts[2] == BinAmount(0.0, 25.0, 25.0)
    assert amounts[3] == BinAmount(0.0, 50.0, 50.0)


def test_zero_amounts():
    """Test zero totals leave every bin empty."""
    weights = {1: 1, 2: 2, 3: 3, 4: 4}
    amounts = weights_to_amounts(weights, 0.0, 0.0, 2, {3: 1.0, 4: 2.0}, Strategy.BID_ASK, 1.5)
    assert set(amounts) == {1, 2, 3, 4}
    assert all(amount == BinAmount(0.0, 0.0, 0.0) for amount in amounts.values())


def test_bid_ask_base_distribution():
    """Test base value is split by weight and converted at the bin price."""
    amounts = weights_to_amounts({3: 1, 4: 2, 5: 3}, 1.0, 10.0, 3, {4: 2.0, 5: 4.0},
                                 Strategy.BID_ASK, 3.0)
    assert amounts[4].base_amount == pytest.approx(0.6)
    assert amounts[4].value_in_quote == pytest.approx(1.2)
    assert amounts[5].base_amount == pytest.approx(0.45)
    assert amounts[5].value_in_quote == pytest.approx(1.8)
    assert amounts[3].quote_amount == 10.0


def test_spot_base_distribution():
    """Test spot base bins hold the quote value of one quote bin each."""
    amounts = weights_to_amounts({1: 1, 2: 1, 3: 1, 4: 1}, 1.0, 100.0, 2, {3: 2.0, 4: 5.0},
                                 Strategy.SPOT, 3.0)
    assert amounts[3].base_amount == pytest.approx(25.0)
    assert amounts[4].base_amount == pytest.approx(10.0)
    # Valued at the market price, not the bin price
    assert amounts[3].value_in_quote == pytest.approx(75.0)
    assert amounts[4].value_in_quote == pytest.approx(30.0)


def test_spot_without_quote_side():
    """Test spot keeps equal values per bin when there is no quote side."""
    amounts = weights_to_amounts({5: 1, 6: 1}, 2.0, 0.0, 4, {5: 4.0, 6: 5.0},
                                 Strategy.SPOT, 10.0)
    assert amounts[5].base_amount * 4.0 == pytest.approx(10.0)
    assert amounts[6].base_amount * 5.0 == pytest.approx(10.0)
