"""
Configuration loading for the DLMM simulator
"""

import logging
from pathlib import Path
from typing import Any, Dict, Mapping

import yaml

from dlmm_simulator.strategy.decimals import reverse_engineer_decimals
from dlmm_simulator.strategy.models import SimulationParams

logger = logging.getLogger(__name__)


def load_config(config_path: str) -> Dict[str, Any]:
    """Load a YAML configuration file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file has no 'position' section
    """
    path = Path(config_path)
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(path, 'r') as f:
        config = yaml.safe_load(f) or {}

    if 'position' not in config:
        raise ValueError(f"Config {config_path} has no 'position' section")

    config.setdefault('simulation', {})
    config.setdefault('logging', {})
    return config


def params_from_pool(pool: Mapping[str, Any], **position: Any) -> SimulationParams:
    """Build parameters for a pool taken from a pool listing.

    The pool supplies bin_step, current_price and the mint addresses of both
    tokens (mint_x is the base token, mint_y the quote token). Token decimals
    are inferred from the reported price unless the listing carries them.
    Missing position fields default to the pool's current price.
    """
    bin_step = float(pool['bin_step'])
    current_price = float(pool['current_price'])

    if pool.get('decimals_x') is not None and pool.get('decimals_y') is not None:
        decimals = {
            'base_decimals': int(pool['decimals_x']),
            'quote_decimals': int(pool['decimals_y']),
            'apply_decimal_adjustment': True,
        }
    else:
        guess = reverse_engineer_decimals(current_price, bin_step,
                                          pool.get('mint_x'), pool.get('mint_y'))
        decimals = guess._asdict()
        logger.info(f"Inferred decimals for pool {pool.get('name', '')}: {guess}")

    values = {
        'bin_step': bin_step,
        'initial_price': current_price,
        'base_amount': 0.0,
        'quote_amount': 0.0,
        'lower_price': current_price,
        'upper_price': current_price,
    }
    values.update(decimals)
    values.update(position)
    return SimulationParams.from_dict(values)


def params_from_config(config: Mapping[str, Any]) -> SimulationParams:
    """Create SimulationParams from a loaded configuration.

    If the config has a 'pool' section, its values are used as defaults and
    the 'position' section overrides them.
    """
    position = dict(config['position'])
    if config.get('pool'):
        return params_from_pool(config['pool'], **position)
    return SimulationParams.from_dict(position)
