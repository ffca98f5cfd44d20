from .bin_math import (
    REFERENCE_BIN_ID,
    BinRounding,
    bin_id_from_price,
    bin_price_range,
    is_valid_bin_id,
    price_from_bin_id,
)
from .decimals import reverse_engineer_decimals
from .models import Analysis, Bin, SimulationParams, SimulationResult, Strategy, TokenType
from .position_builder import find_starved_sides, get_initial_bins
from .strategy_simulator import run_simulation, summarize_performance, sweep_prices
from .weights import calculate_strategy_weights
from .distribution import weights_to_amounts
