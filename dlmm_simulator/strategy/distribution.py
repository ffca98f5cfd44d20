"""
Conversion of strategy weights into per-bin token amounts
"""

import logging
from typing import Dict, Mapping, NamedTuple

from .models import Strategy

logger = logging.getLogger(__name__)


class BinAmount(NamedTuple):
    base_amount: float
    quote_amount: float
    value_in_quote: float


_EMPTY = BinAmount(0.0, 0.0, 0.0)


def weights_to_amounts(weights: Mapping[int, float],
                       total_base_amount: float,
                       total_quote_amount: float,
                       active_bin_id: int,
                       bin_prices: Mapping[int, float],
                       strategy: Strategy,
                       initial_price: float) -> Dict[int, BinAmount]:
    """Convert a weight distribution into token amounts per bin.

    Quote tokens go to bins at or below the active bin in proportion to their
    weight. Base tokens go to bins above it: for spot every base bin holds the
    same value, for bid-ask and curve the base value at the initial price is
    split by weight and converted to an amount at the bin's own price.

    Args:
        weights: Map of bin id to weight
        total_base_amount: Base tokens to distribute
        total_quote_amount: Quote tokens to distribute
        active_bin_id: Bin containing the initial price
        bin_prices: Map of bin id to price
        strategy: Distribution strategy
        initial_price: Market price used for valuation

    Returns:
        Map of bin id to BinAmount
    """
    strategy = Strategy.parse(strategy)
    amounts = {}

    quote_bins = [bin_id for bin_id in weights if bin_id <= active_bin_id]
    base_bins = [bin_id for bin_id in weights if bin_id > active_bin_id]

    total_quote_weight = sum(weights[bin_id] for bin_id in quote_bins)
    total_base_weight = sum(weights[bin_id] for bin_id in base_bins)

    # Quote side
    if total_quote_weight > 0 and total_quote_amount > 0:
        for bin_id in quote_bins:
            amount = (total_quote_amount * weights[bin_id]) / total_quote_weight
            amounts[bin_id] = BinAmount(0.0, amount, amount)
    else:
        for bin_id in quote_bins:
            amounts[bin_id] = _EMPTY

    # Base side
    if total_base_weight > 0 and total_base_amount > 0:
        if strategy == Strategy.SPOT:
            if quote_bins and total_quote_amount > 0:
                constant_value = total_quote_amount / len(quote_bins)
            else:
                # One-sided position: no quote side to mirror
                logger.debug("Spot distribution without quote side, valuing base bins at initial price")
                constant_value = total_base_amount * initial_price / len(base_bins)
            for bin_id in base_bins:
                amount = constant_value / bin_prices[bin_id]
                amounts[bin_id] = BinAmount(amount, 0.0, amount * initial_price)

        elif strategy in (Strategy.BID_ASK, Strategy.CURVE):
            total_value = total_base_amount * initial_price
            for bin_id in base_bins:
                target_value = total_value * (weights[bin_id] / total_base_weight)
                amount = target_value / bin_prices[bin_id]
                amounts[bin_id] = BinAmount(amount, 0.0, target_value)

        else:
            raise ValueError(f"Unhandled strategy: {strategy}")
    else:
        for bin_id in base_bins:
            amounts[bin_id] = _EMPTY

    return amounts
