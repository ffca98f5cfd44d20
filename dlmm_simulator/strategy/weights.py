"""
Strategy weights for DLMM liquidity distribution
"""

import logging
from typing import Dict

from .models import Strategy

logger = logging.getLogger(__name__)

STRATEGY_DESCRIPTIONS = {
    Strategy.SPOT: 'Uniform distribution - equal weight across all bins',
    Strategy.BID_ASK: 'Bid-Ask - liquidity grows towards the edges of the range',
    Strategy.CURVE: 'Curve - liquidity concentrated around the active bin',
}


def get_strategy_description(strategy: Strategy) -> str:
    """Human readable summary of a distribution strategy."""
    return STRATEGY_DESCRIPTIONS[Strategy.parse(strategy)]


def calculate_strategy_weights(strategy: Strategy,
                               min_bin_id: int,
                               max_bin_id: int,
                               active_bin_id: int) -> Dict[int, int]:
    """Calculate the relative weight of every bin in [min_bin_id, max_bin_id].

    Bins at or below the active bin form the quote side, bins above it the
    base side. The active bin may lie outside the range, in which case only
    one side has bins.

    Args:
        strategy: Distribution strategy
        min_bin_id: Lowest bin id of the position
        max_bin_id: Highest bin id of the position
        active_bin_id: Bin containing the initial price

    Returns:
        Dict mapping bin id to a weight >= 1
    """
    strategy = Strategy.parse(strategy)
    weights = {}

    quote_ids = range(min_bin_id, min(active_bin_id, max_bin_id) + 1)
    base_ids = range(max(active_bin_id + 1, min_bin_id), max_bin_id + 1)

    if strategy == Strategy.SPOT:
        for bin_id in range(min_bin_id, max_bin_id + 1):
            weights[bin_id] = 1

    elif strategy == Strategy.BID_ASK:
        # Weight grows linearly with the distance from the active bin
        for bin_id in quote_ids:
            weights[bin_id] = active_bin_id - bin_id + 1
        for bin_id in base_ids:
            weights[bin_id] = bin_id - active_bin_id + 1

    elif strategy == Strategy.CURVE:
        # Side size is the distance from the active bin to the far edge
        quote_side = active_bin_id - min_bin_id
        base_side = max_bin_id - active_bin_id
        for bin_id in quote_ids:
            distance = active_bin_id - bin_id
            weight = quote_side - distance if quote_side > 0 else 1
            weights[bin_id] = max(weight, 1)
        for bin_id in base_ids:
            distance = bin_id - active_bin_id
            weight = base_side - distance if base_side > 0 else 1
            weights[bin_id] = max(weight, 1)

    else:
        raise ValueError(f"Unhandled strategy: {strategy}")

    logger.debug(f"{strategy.value} weights for bins {min_bin_id}..{max_bin_id} "
                 f"(active {active_bin_id}): {len(weights)} bins")
    return weights
