"""
Data model for DLMM positions and simulations
"""

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Union

from .bin_math import DEFAULT_BASE_DECIMALS, DEFAULT_QUOTE_DECIMALS


class Strategy(str, Enum):
    """Liquidity distribution shape across bins."""
    SPOT = "spot"
    BID_ASK = "bid-ask"
    CURVE = "curve"

    @classmethod
    def parse(cls, value: Union[str, "Strategy"]) -> "Strategy":
        """Accept a Strategy member or its string value (e.g. 'bid-ask')."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower().replace("_", "-"))
        except ValueError:
            raise ValueError(f"Unknown strategy: {value!r}") from None


class TokenType(str, Enum):
    BASE = "base"
    QUOTE = "quote"


# camelCase keys used by the web simulator's records
_PARAM_ALIASES = {
    'binStep': 'bin_step',
    'initialPrice': 'initial_price',
    'baseAmount': 'base_amount',
    'quoteAmount': 'quote_amount',
    'lowerPrice': 'lower_price',
    'upperPrice': 'upper_price',
    'baseDecimals': 'base_decimals',
    'quoteDecimals': 'quote_decimals',
    'applyDecimalAdjustment': 'apply_decimal_adjustment',
}


@dataclass(frozen=True)
class SimulationParams:
    """Parameters of a DLMM position.

    Prices are quote tokens per base token. bin_step is in basis points.
    """
    bin_step: float
    initial_price: float
    base_amount: float
    quote_amount: float
    lower_price: float
    upper_price: float
    strategy: Strategy = Strategy.SPOT
    base_decimals: int = DEFAULT_BASE_DECIMALS
    quote_decimals: int = DEFAULT_QUOTE_DECIMALS
    apply_decimal_adjustment: bool = True

    def __post_init__(self):
        object.__setattr__(self, 'strategy', Strategy.parse(self.strategy))

    def is_valid(self) -> bool:
        """Whether the parameters describe a position that can be built."""
        return (
            self.lower_price > 0
            and self.upper_price > self.lower_price
            and self.bin_step > 0
            and self.initial_price > 0
        )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['strategy'] = self.strategy.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SimulationParams':
        """Create parameters from a mapping with snake_case or camelCase keys."""
        values = {_PARAM_ALIASES.get(key, key): value for key, value in data.items()}
        known = {name for name in cls.__dataclass_fields__}
        unknown = set(values) - known
        if unknown:
            raise ValueError(f"Unknown simulation parameters: {sorted(unknown)}")

        for name in ('bin_step', 'initial_price', 'base_amount', 'quote_amount',
                     'lower_price', 'upper_price'):
            if name not in values:
                raise KeyError(f"Missing simulation parameter: {name}")
            values[name] = float(values[name])
        for name in ('base_decimals', 'quote_decimals'):
            if name in values:
                values[name] = int(values[name])
        if 'apply_decimal_adjustment' in values:
            values['apply_decimal_adjustment'] = bool(values['apply_decimal_adjustment'])
        return cls(**values)


@dataclass(frozen=True)
class Bin:
    """A single price bin of a position.

    The initial_* fields and display_value are fixed when the position is
    built. The current_* fields describe the holding at a simulated price.
    """
    id: int
    price: float
    initial_token_type: TokenType
    initial_amount: float = 0.0
    initial_value_in_quote: float = 0.0
    display_value: float = 0.0
    current_token_type: TokenType = TokenType.BASE
    current_amount: float = 0.0
    current_value_in_quote: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['initial_token_type'] = self.initial_token_type.value
        data['current_token_type'] = self.current_token_type.value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Bin':
        values = dict(data)
        values['initial_token_type'] = TokenType(values['initial_token_type'])
        if 'current_token_type' in values:
            values['current_token_type'] = TokenType(values['current_token_type'])
        return cls(**values)


@dataclass(frozen=True)
class Analysis:
    """Aggregate holdings of a simulated position."""
    total_value_in_quote: float = 0.0
    total_base: float = 0.0
    total_quote: float = 0.0
    total_bins: int = 0
    base_bins: int = 0
    quote_bins: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SimulationResult:
    simulated_bins: List[Bin] = field(default_factory=list)
    analysis: Analysis = field(default_factory=Analysis)


@dataclass(frozen=True)
class PositionPerformance:
    """Change in position value between the initial and a simulated price."""
    initial_value: float
    current_value: float
    profit_loss: float
    value_change_pct: float
    price_change_pct: float
    hodl_value: float
    value_vs_hodl: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
