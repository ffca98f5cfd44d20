"""
Construction of the initial bin set of a DLMM position
"""

import logging
import math
from typing import List

from .bin_math import (
    BinRounding,
    bin_count,
    bin_exponent,
    bin_id_from_price,
    bin_prices,
    is_valid_bin_id,
)
from .distribution import weights_to_amounts
from .models import Bin, SimulationParams, Strategy, TokenType
from .weights import calculate_strategy_weights

logger = logging.getLogger(__name__)


def get_bin_range(params: SimulationParams):
    """Return (min_bin_id, max_bin_id, active_bin_id) for valid parameters.

    The range is widened outwards so that both the lower and the upper price
    fall inside it. The active bin is the one containing the initial price.
    """
    decimals = (params.base_decimals, params.quote_decimals, params.apply_decimal_adjustment)
    min_bin_id = bin_id_from_price(params.lower_price, params.bin_step, *decimals,
                                   rounding=BinRounding.DOWN)
    max_bin_id = bin_id_from_price(params.upper_price, params.bin_step, *decimals,
                                   rounding=BinRounding.UP)
    active_bin_id = bin_id_from_price(params.initial_price, params.bin_step, *decimals,
                                      rounding=BinRounding.DOWN)
    return min_bin_id, max_bin_id, active_bin_id


def get_initial_bins(params: SimulationParams) -> List[Bin]:
    """Distribute a position's tokens across its bins.

    Invalid parameters (non-positive prices or bin step, inverted range)
    produce an empty list rather than an error.

    Args:
        params: Position parameters

    Returns:
        Bins sorted by ascending price, with base and quote totals normalized
        to the requested amounts
    """
    if not params.is_valid():
        logger.debug(f"Invalid simulation parameters: {params}")
        return []

    decimals = (params.base_decimals, params.quote_decimals, params.apply_decimal_adjustment)
    for price in (params.lower_price, params.upper_price, params.initial_price):
        if bin_exponent(price, params.bin_step, *decimals) is None:
            return []

    min_bin_id, max_bin_id, active_bin_id = get_bin_range(params)
    if not (is_valid_bin_id(min_bin_id) and is_valid_bin_id(max_bin_id)):
        logger.warning(f"Bin range {min_bin_id}..{max_bin_id} exceeds the protocol bin id range")
        return []

    n_bins = bin_count(min_bin_id, max_bin_id)
    if n_bins == 0:
        logger.warning(f"Empty bin range {min_bin_id}..{max_bin_id}")
        return []
    logger.debug(f"Building {n_bins} bins from {min_bin_id} to {max_bin_id}, active bin {active_bin_id}")

    if not min_bin_id <= active_bin_id <= max_bin_id:
        logger.info(f"Initial price {params.initial_price} outside range "
                    f"[{params.lower_price}, {params.upper_price}], building one-sided position")

    try:
        prices = bin_prices(min_bin_id, max_bin_id, params.bin_step, *decimals)
    except OverflowError:
        logger.warning(f"Bin prices overflow for bins {min_bin_id}..{max_bin_id}")
        return []
    if not all(math.isfinite(price) and price > 0 for price in prices.values()):
        logger.warning(f"Bin prices for bins {min_bin_id}..{max_bin_id} are not representable")
        return []

    weights = calculate_strategy_weights(params.strategy, min_bin_id, max_bin_id, active_bin_id)
    amounts = weights_to_amounts(
        weights,
        params.base_amount,
        params.quote_amount,
        active_bin_id,
        prices,
        params.strategy,
        params.initial_price
    )

    # Collect raw amounts before normalization
    raw = []
    for bin_id in range(min_bin_id, max_bin_id + 1):
        amount = amounts[bin_id]
        if bin_id <= active_bin_id:
            raw.append([bin_id, TokenType.QUOTE, amount.quote_amount, amount.value_in_quote])
        else:
            raw.append([bin_id, TokenType.BASE, amount.base_amount, amount.value_in_quote])

    base_sum = sum(entry[2] for entry in raw if entry[1] == TokenType.BASE)
    quote_sum = sum(entry[2] for entry in raw if entry[1] == TokenType.QUOTE)

    if params.base_amount > 0 and base_sum > 0:
        factor = params.base_amount / base_sum
        for entry in raw:
            if entry[1] != TokenType.BASE:
                continue
            entry[2] *= factor
            if params.strategy == Strategy.SPOT:
                # Equal value per bin at the bin's own price
                entry[3] = entry[2] * prices[entry[0]]
            else:
                entry[3] *= factor

    if params.quote_amount > 0 and quote_sum > 0:
        factor = params.quote_amount / quote_sum
        for entry in raw:
            if entry[1] != TokenType.QUOTE:
                continue
            entry[2] *= factor
            entry[3] = entry[2]

    bins = [
        Bin(
            id=bin_id,
            price=prices[bin_id],
            initial_token_type=token_type,
            initial_amount=amount,
            initial_value_in_quote=value,
            display_value=value,
            current_token_type=token_type,
            current_amount=amount,
            current_value_in_quote=value,
        )
        for bin_id, token_type, amount, value in raw
    ]
    bins.sort(key=lambda b: b.price)

    for token_type in find_starved_sides(params, bins):
        logger.warning(f"Requested {token_type.value} amount has no eligible bins and is not deployed")

    return bins


def find_starved_sides(params: SimulationParams, bins: List[Bin]) -> List[TokenType]:
    """Token types requested with a positive amount that no bin ended up holding."""
    requested = (
        (TokenType.BASE, params.base_amount),
        (TokenType.QUOTE, params.quote_amount),
    )
    starved = []
    for token_type, amount in requested:
        if amount <= 0:
            continue
        held = any(b.initial_token_type == token_type and b.initial_amount > 0 for b in bins)
        if not held:
            starved.append(token_type)
    return starved
