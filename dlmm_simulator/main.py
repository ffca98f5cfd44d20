#!/usr/bin/env python3
"""
Main entry point for the DLMM position simulator
"""

import argparse
import json
import logging
from typing import Any, Dict

from tqdm import tqdm

from dlmm_simulator.strategy.decimals import reverse_engineer_decimals
from dlmm_simulator.strategy.position_builder import find_starved_sides, get_initial_bins
from dlmm_simulator.strategy.strategy_simulator import (
    price_grid,
    run_simulation,
    summarize_performance,
    sweep_prices,
)
from dlmm_simulator.strategy.weights import get_strategy_description
from dlmm_simulator.utils.config_utils import load_config, params_from_config
from dlmm_simulator.utils.logging_utils import log_simulation_step, setup_logging

logger = logging.getLogger(__name__)


def build(config: Dict[str, Any]) -> None:
    """Build the initial position and log its layout."""
    params = params_from_config(config)
    bins = get_initial_bins(params)

    logger.info(f"Strategy: {get_strategy_description(params.strategy)}")
    logger.info(f"Bins: {len(bins)}")
    for b in bins:
        if b.initial_amount > 0:
            logger.info(f"  bin {b.id} @ {b.price:.6g}: {b.initial_amount:.6g} "
                        f"{b.initial_token_type.value} (value {b.initial_value_in_quote:.6g})")
    for token_type in find_starved_sides(params, bins):
        logger.warning(f"No bins hold the requested {token_type.value} amount")


def simulate(config: Dict[str, Any]) -> None:
    """Simulate the position at the configured current price."""
    params = params_from_config(config)
    sim_config = config['simulation']
    current_price = float(sim_config.get('current_price', params.initial_price))

    bins = get_initial_bins(params)
    result = run_simulation(bins, current_price, params.initial_price)
    performance = summarize_performance(bins, result, params.initial_price, current_price,
                                        params.base_amount, params.quote_amount)

    logger.info(f"Analysis at price {current_price}: {json.dumps(result.analysis.to_dict())}")
    logger.info(f"Performance: {json.dumps(performance.to_dict())}")

    log_dir = config['logging'].get('log_dir')
    if log_dir:
        log_simulation_step({
            'current_price': current_price,
            'analysis': result.analysis.to_dict(),
            'performance': performance.to_dict(),
        }, log_dir)


def sweep(config: Dict[str, Any], output: str = None) -> None:
    """Simulate the position over a grid of prices."""
    params = params_from_config(config)
    sweep_config = config['simulation'].get('sweep', {})
    prices = price_grid(
        float(sweep_config.get('lower', params.lower_price)),
        float(sweep_config.get('upper', params.upper_price)),
        int(sweep_config.get('points', 50)),
        bool(sweep_config.get('geometric', True)),
    )

    bins = get_initial_bins(params)
    frame = sweep_prices(bins, tqdm(prices, desc="Simulating prices"), params.initial_price)

    logger.info(f"Swept {len(frame)} prices between {prices[0]:.6g} and {prices[-1]:.6g}")
    logger.info(f"Worst P&L: {frame['profit_loss'].min():.6g}, best P&L: {frame['profit_loss'].max():.6g}")
    if output:
        frame.to_csv(output, index=False)
        logger.info(f"Sweep written to {output}")


def infer_decimals(config: Dict[str, Any]) -> None:
    """Infer token decimals for the configured pool."""
    pool = config.get('pool')
    if not pool:
        raise ValueError("infer-decimals mode needs a 'pool' section in the config")
    guess = reverse_engineer_decimals(float(pool['current_price']), float(pool['bin_step']),
                                      pool.get('mint_x'), pool.get('mint_y'))
    logger.info(f"Decimals: base={guess.base_decimals} quote={guess.quote_decimals} "
                f"adjusted={guess.apply_decimal_adjustment}")


def main():
    parser = argparse.ArgumentParser(description='DLMM Position Simulator')
    parser.add_argument('--config', type=str, required=True, help='Path to config file')
    parser.add_argument('--mode', type=str, required=True,
                        choices=['build', 'simulate', 'sweep', 'infer-decimals'],
                        help='Mode to run: build the position, simulate one price, '
                             'sweep a price grid, or infer token decimals')
    parser.add_argument('--output', type=str, default=None, help='CSV path for sweep results')
    args = parser.parse_args()

    config = load_config(args.config)

    log_config = config['logging']
    level = getattr(logging, str(log_config.get('level', 'INFO')).upper(), logging.INFO)
    if log_config.get('log_dir'):
        setup_logging(log_config['log_dir'], level)
    else:
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(levelname)s - %(message)s'
        )

    if args.mode == 'build':
        build(config)
    elif args.mode == 'simulate':
        simulate(config)
    elif args.mode == 'sweep':
        sweep(config, args.output)
    elif args.mode == 'infer-decimals':
        infer_decimals(config)


if __name__ == '__main__':
    main()
