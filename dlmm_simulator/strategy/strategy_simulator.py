"""
Price movement simulation for DLMM positions
"""

import logging
from dataclasses import replace
from typing import Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from .models import (
    Analysis,
    Bin,
    PositionPerformance,
    SimulationParams,
    SimulationResult,
    TokenType,
)
from .position_builder import get_initial_bins

logger = logging.getLogger(__name__)

# Amounts at or below this are floating point noise
DUST_THRESHOLD = 1e-12


def _simulate_bin(b: Bin, current_price: float) -> Bin:
    """Derive a bin's holding at current_price."""
    if b.initial_amount <= 0:
        return replace(
            b,
            current_token_type=b.initial_token_type,
            current_amount=0.0,
            current_value_in_quote=0.0,
        )

    if current_price > b.price:
        # Price moved above the bin: base was sold at the bin price
        token_type = TokenType.QUOTE
        if b.initial_token_type == TokenType.BASE:
            amount = b.initial_amount * b.price
        else:
            amount = b.initial_amount
    else:
        # Price at or below the bin: quote was spent buying base at the bin price
        token_type = TokenType.BASE
        if b.initial_token_type == TokenType.QUOTE:
            amount = b.initial_amount / b.price
        else:
            amount = b.initial_amount

    return _with_holding(b, token_type, amount, current_price)


def _with_holding(b: Bin, token_type: TokenType, amount: float, current_price: float) -> Bin:
    value = amount * current_price if token_type == TokenType.BASE else amount
    return replace(
        b,
        current_token_type=token_type,
        current_amount=amount,
        current_value_in_quote=value,
    )


def analyze_bins(initial_bins: Sequence[Bin], simulated_bins: Sequence[Bin]) -> Analysis:
    """Aggregate simulated holdings, ignoring dust amounts.

    total_bins counts the funded bins of the initial position and is not
    affected by dust filtering.
    """
    total_value = 0.0
    total_base = 0.0
    total_quote = 0.0
    base_bins = 0
    quote_bins = 0

    for b in simulated_bins:
        if b.current_amount <= DUST_THRESHOLD:
            continue
        total_value += b.current_value_in_quote
        if b.current_token_type == TokenType.BASE:
            total_base += b.current_amount
            base_bins += 1
        else:
            total_quote += b.current_amount
            quote_bins += 1

    return Analysis(
        total_value_in_quote=total_value,
        total_base=total_base,
        total_quote=total_quote,
        total_bins=sum(1 for b in initial_bins if b.initial_amount > 0),
        base_bins=base_bins,
        quote_bins=quote_bins,
    )


def run_simulation(initial_bins: Sequence[Bin],
                   current_price: float,
                   initial_price: float) -> SimulationResult:
    """Simulate a position's holdings after the market moves to current_price.

    Each funded bin holds quote once the price is above it and base otherwise,
    converting at the bin's own price. The input bins are left untouched and
    a new list is returned on every call. At current_price == initial_price
    every bin keeps its initial token and amount.

    Args:
        initial_bins: Bins from get_initial_bins
        current_price: Hypothetical market price
        initial_price: Price the position was built at

    Returns:
        SimulationResult with the derived bins and their Analysis
    """
    if not initial_bins:
        return SimulationResult(simulated_bins=[], analysis=Analysis())

    if current_price == initial_price:
        simulated_bins = [
            _with_holding(b, b.initial_token_type, b.initial_amount, current_price)
            if b.initial_amount > 0 else _simulate_bin(b, current_price)
            for b in initial_bins
        ]
    else:
        simulated_bins = [_simulate_bin(b, current_price) for b in initial_bins]

    return SimulationResult(
        simulated_bins=simulated_bins,
        analysis=analyze_bins(initial_bins, simulated_bins),
    )


def _pct_change(new: float, old: float) -> float:
    return (new - old) / old * 100 if old > 0 else 0.0


def summarize_performance(initial_bins: Sequence[Bin],
                          result: SimulationResult,
                          initial_price: float,
                          current_price: float,
                          base_amount: Optional[float] = None,
                          quote_amount: Optional[float] = None) -> PositionPerformance:
    """Compare a simulated position against its initial value and against holding.

    base_amount and quote_amount default to the initial per-side totals of
    the bins.
    """
    initial_value = sum(b.initial_value_in_quote for b in initial_bins)
    current_value = result.analysis.total_value_in_quote

    if base_amount is None:
        base_amount = sum(b.initial_amount for b in initial_bins
                          if b.initial_token_type == TokenType.BASE)
    if quote_amount is None:
        quote_amount = sum(b.initial_amount for b in initial_bins
                           if b.initial_token_type == TokenType.QUOTE)
    hodl_value = base_amount * current_price + quote_amount

    return PositionPerformance(
        initial_value=initial_value,
        current_value=current_value,
        profit_loss=current_value - initial_value,
        value_change_pct=_pct_change(current_value, initial_value),
        price_change_pct=_pct_change(current_price, initial_price),
        hodl_value=hodl_value,
        value_vs_hodl=current_value - hodl_value,
    )


def evaluate_position(params: SimulationParams, current_price: float):
    """Build a position and simulate it at current_price.

    Returns:
        Tuple of (initial bins, SimulationResult, PositionPerformance)
    """
    initial_bins = get_initial_bins(params)
    result = run_simulation(initial_bins, current_price, params.initial_price)
    performance = summarize_performance(
        initial_bins, result, params.initial_price, current_price,
        params.base_amount, params.quote_amount
    )
    return initial_bins, result, performance


def price_grid(lower: float, upper: float, points: int = 50, geometric: bool = True) -> np.ndarray:
    """Evenly spaced prices between lower and upper (inclusive).

    Geometric spacing matches the multiplicative spacing of bins.
    """
    if points < 1:
        raise ValueError(f"points must be positive, got {points}")
    if lower <= 0 and geometric:
        raise ValueError(f"Geometric grid needs a positive lower bound, got {lower}")
    if geometric:
        return np.geomspace(lower, upper, points)
    return np.linspace(lower, upper, points)


def sweep_prices(initial_bins: Sequence[Bin],
                 prices: Iterable[float],
                 initial_price: float) -> pd.DataFrame:
    """Run the simulation for every price and collect one row per price."""
    initial_value = sum(b.initial_value_in_quote for b in initial_bins)
    rows = []
    for price in prices:
        price = float(price)
        analysis = run_simulation(initial_bins, price, initial_price).analysis
        row = {'current_price': price}
        row.update(analysis.to_dict())
        row['profit_loss'] = analysis.total_value_in_quote - initial_value
        rows.append(row)

    columns = ['current_price'] + list(Analysis.__dataclass_fields__) + ['profit_loss']
    return pd.DataFrame(rows, columns=columns)


def bins_to_frame(bins: List[Bin]) -> pd.DataFrame:
    """Tabulate bins, one row per bin indexed by bin id."""
    columns = list(Bin.__dataclass_fields__)
    frame = pd.DataFrame([b.to_dict() for b in bins], columns=columns)
    return frame.set_index('id')
