"""
Token decimals registry and best-effort decimals inference from pool prices
"""

import logging
import math
from types import MappingProxyType
from typing import List, NamedTuple, Optional

from .bin_math import (
    DEFAULT_BASE_DECIMALS,
    DEFAULT_QUOTE_DECIMALS,
    bin_id_from_price,
    price_from_bin_id,
)

logger = logging.getLogger(__name__)

# Authoritative decimals by Solana mint address
TOKEN_DECIMALS_BY_ADDRESS = MappingProxyType({
    'So11111111111111111111111111111111111111112': 9,   # SOL
    'EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZwyTDt1v': 6,  # USDC
})

# Legacy symbol lookup
COMMON_TOKEN_DECIMALS = MappingProxyType({
    'SOL': 9,
    'WSOL': 9,
    'USDC': 6,
})

MAX_TOKEN_DECIMALS = 18
DECIMALS_SEARCH_WINDOW = 3


class DecimalsGuess(NamedTuple):
    base_decimals: int
    quote_decimals: int
    apply_decimal_adjustment: bool


def get_token_decimals_by_address(address: Optional[str],
                                  default: int = DEFAULT_BASE_DECIMALS) -> int:
    """Decimals of a token by mint address, or default if unknown."""
    if address is None:
        return default
    return TOKEN_DECIMALS_BY_ADDRESS.get(address, default)


def infer_token_decimals(symbol: Optional[str], default: int = DEFAULT_BASE_DECIMALS) -> int:
    """Decimals of a token by ticker symbol, or default if unknown."""
    if not symbol:
        return default
    return COMMON_TOKEN_DECIMALS.get(symbol.strip().upper(), default)


def _candidate_base_decimals(base_token_key: Optional[str]) -> List[int]:
    base_default = get_token_decimals_by_address(base_token_key, DEFAULT_BASE_DECIMALS)
    candidates = [base_default]
    if base_token_key not in TOKEN_DECIMALS_BY_ADDRESS:
        low = max(0, base_default - DECIMALS_SEARCH_WINDOW)
        high = min(MAX_TOKEN_DECIMALS, base_default + DECIMALS_SEARCH_WINDOW)
        for decimals in range(low, high + 1):
            if decimals not in candidates:
                candidates.append(decimals)
    return candidates


def reverse_engineer_decimals(observed_price: float,
                              bin_step: float,
                              base_token_key: Optional[str],
                              quote_token_key: Optional[str]) -> DecimalsGuess:
    """Recover token decimals from a pool's reported price.

    When both tokens are in the registry their decimals are returned as-is.
    Otherwise every candidate base decimals value is tried with and without
    the decimal adjustment, and the combination whose snapped bin price lies
    closest to the observed price wins. Ties go to the first candidate tried.

    Args:
        observed_price: Current price reported by the pool listing
        bin_step: Bin step of the pool in basis points
        base_token_key: Mint address of the base token (token X)
        quote_token_key: Mint address of the quote token (token Y)

    Returns:
        DecimalsGuess, falling back to (9, quote, True) when nothing fits better
    """
    quote_decimals = get_token_decimals_by_address(quote_token_key, DEFAULT_QUOTE_DECIMALS)

    if base_token_key in TOKEN_DECIMALS_BY_ADDRESS and quote_token_key in TOKEN_DECIMALS_BY_ADDRESS:
        return DecimalsGuess(
            base_decimals=TOKEN_DECIMALS_BY_ADDRESS[base_token_key],
            quote_decimals=quote_decimals,
            apply_decimal_adjustment=True,
        )

    best = DecimalsGuess(DEFAULT_BASE_DECIMALS, quote_decimals, True)
    smallest_difference = math.inf

    for base_decimals in _candidate_base_decimals(base_token_key):
        for use_adjustment in (True, False):
            try:
                bin_id = bin_id_from_price(observed_price, bin_step, base_decimals,
                                           quote_decimals, use_adjustment)
                bin_price = price_from_bin_id(bin_id, bin_step, base_decimals,
                                              quote_decimals, use_adjustment)
            except (ArithmeticError, ValueError) as e:
                logger.debug(f"Skipping decimals candidate {base_decimals} "
                             f"(adjustment={use_adjustment}): {e}")
                continue

            difference = abs(observed_price - bin_price)
            if difference < smallest_difference:
                smallest_difference = difference
                best = DecimalsGuess(base_decimals, quote_decimals, use_adjustment)

    logger.debug(f"Inferred decimals for price {observed_price}: {best}")
    return best
