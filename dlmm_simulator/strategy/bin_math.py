"""
Utility functions for DLMM bin id and price calculations.
Based on the Meteora DLMM SDK price formulas.
"""

import logging
import math
from decimal import Decimal
from enum import Enum
from typing import Dict, NamedTuple, Optional

logger = logging.getLogger(__name__)

# Constants from the DLMM protocol
REFERENCE_BIN_ID = 262144
MIN_BIN_ID = -2147483648
MAX_BIN_ID = 2147483647

DEFAULT_BASE_DECIMALS = 9
DEFAULT_QUOTE_DECIMALS = 6

# Slack for directed rounding so an exact bin price maps back to its own id
_ROUNDING_EPSILON = 1e-9


class BinRounding(str, Enum):
    """How a fractional bin position is snapped to an integer id."""
    NEAREST = "nearest"
    DOWN = "down"
    UP = "up"


class BinPriceRange(NamedTuple):
    lower: float
    upper: float
    mid: float


def get_basis(bin_step: float) -> float:
    """Price multiplier between two adjacent bins."""
    return 1 + bin_step / 10000


def _decimal_scale(value: float, exponent: int) -> float:
    return float(Decimal(value) * Decimal(10) ** exponent)


def price_from_bin_id(bin_id: int,
                      bin_step: float,
                      base_decimals: int = DEFAULT_BASE_DECIMALS,
                      quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
                      apply_decimal_adjustment: bool = True) -> float:
    """Convert a bin id to a price.

    price = (1 + bin_step/10000)^(bin_id - REFERENCE_BIN_ID), multiplied by
    10^(base_decimals - quote_decimals) when the decimal adjustment is applied.

    Args:
        bin_id: The bin id to convert
        bin_step: Bin step in basis points (e.g. 25 = 0.25%)
        base_decimals: Decimals of the base token
        quote_decimals: Decimals of the quote token
        apply_decimal_adjustment: Whether to scale by the decimal difference

    Returns:
        float: Price of one base token in quote tokens, 0.0 for a non-positive bin step
    """
    if bin_step <= 0:
        logger.warning(f"Invalid bin step {bin_step} for bin {bin_id}")
        return 0.0

    raw_price = get_basis(bin_step) ** (bin_id - REFERENCE_BIN_ID)
    if not apply_decimal_adjustment:
        return raw_price
    return _decimal_scale(raw_price, base_decimals - quote_decimals)


def bin_exponent(price: float,
                 bin_step: float,
                 base_decimals: int = DEFAULT_BASE_DECIMALS,
                 quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
                 apply_decimal_adjustment: bool = True) -> Optional[float]:
    """Fractional bin offset of a price from REFERENCE_BIN_ID.

    Returns None (and logs a warning) when the price cannot be placed on the
    bin grid: a non-positive or non-finite price or bin step, or a price that
    over- or underflows once the decimal adjustment is reversed.
    """
    if bin_step <= 0 or not math.isfinite(price) or price <= 0:
        logger.warning(f"Invalid price or bin step: price={price}, bin_step={bin_step}")
        return None

    raw_price = price
    if apply_decimal_adjustment:
        raw_price = _decimal_scale(price, quote_decimals - base_decimals)
    if not math.isfinite(raw_price) or raw_price <= 0:
        logger.warning(f"Price {price} out of range after decimal adjustment "
                       f"({base_decimals}/{quote_decimals}): {raw_price}")
        return None

    log_basis = math.log(get_basis(bin_step))
    if log_basis <= 0:
        logger.warning(f"Bin step {bin_step} too small to separate bins")
        return None

    exponent = math.log(raw_price) / log_basis
    if not math.isfinite(exponent):
        logger.warning(f"Price {price} has no finite bin offset at bin step {bin_step}")
        return None
    return exponent


def bin_id_from_price(price: float,
                      bin_step: float,
                      base_decimals: int = DEFAULT_BASE_DECIMALS,
                      quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
                      apply_decimal_adjustment: bool = True,
                      rounding: BinRounding = BinRounding.NEAREST) -> int:
    """Convert a price to a bin id.

    Inverse of price_from_bin_id: the logarithm of the (optionally
    decimal-reversed) price in base 1 + bin_step/10000.

    Args:
        price: The price to convert
        bin_step: Bin step in basis points
        base_decimals: Decimals of the base token
        quote_decimals: Decimals of the quote token
        apply_decimal_adjustment: Whether the price carries the decimal adjustment
        rounding: Snap to the nearest bin, or the bin below/above

    Returns:
        int: The bin id, or 0 for a price that cannot be placed on the bin grid
    """
    exponent = bin_exponent(price, bin_step, base_decimals, quote_decimals,
                            apply_decimal_adjustment)
    if exponent is None:
        return 0

    if rounding == BinRounding.NEAREST:
        offset = math.floor(exponent + 0.5)
    elif rounding == BinRounding.DOWN:
        offset = math.floor(exponent + _ROUNDING_EPSILON)
    elif rounding == BinRounding.UP:
        offset = math.ceil(exponent - _ROUNDING_EPSILON)
    else:
        raise ValueError(f"Unknown rounding mode: {rounding}")

    return offset + REFERENCE_BIN_ID


def is_valid_bin_id(bin_id: int) -> bool:
    """Bin ids are stored as signed 32-bit integers by the protocol."""
    return MIN_BIN_ID <= bin_id <= MAX_BIN_ID


def bin_price_range(bin_id: int,
                    bin_step: float,
                    base_decimals: int = DEFAULT_BASE_DECIMALS,
                    quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
                    apply_decimal_adjustment: bool = True) -> BinPriceRange:
    """Lower and upper price boundaries of a bin.

    The quoted price of a bin is its lower edge, so mid equals lower.
    """
    lower = price_from_bin_id(bin_id, bin_step, base_decimals, quote_decimals,
                              apply_decimal_adjustment)
    upper = price_from_bin_id(bin_id + 1, bin_step, base_decimals, quote_decimals,
                              apply_decimal_adjustment)
    return BinPriceRange(lower=lower, upper=upper, mid=lower)


def bin_count(min_bin_id: int, max_bin_id: int) -> int:
    """Number of bins in the inclusive range [min_bin_id, max_bin_id]."""
    return max(0, max_bin_id - min_bin_id + 1)


def bin_prices(min_bin_id: int,
               max_bin_id: int,
               bin_step: float,
               base_decimals: int = DEFAULT_BASE_DECIMALS,
               quote_decimals: int = DEFAULT_QUOTE_DECIMALS,
               apply_decimal_adjustment: bool = True) -> Dict[int, float]:
    """Map every bin id in the inclusive range to its price."""
    return {
        bin_id: price_from_bin_id(bin_id, bin_step, base_decimals, quote_decimals,
                                  apply_decimal_adjustment)
        for bin_id in range(min_bin_id, max_bin_id + 1)
    }
