"""
Trading data models.

Orders and trades are immutable once created. A Session owns its trade list
and is mutated only by appending trades and recomputing its aggregates.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from ..errors import ConfigurationError, UnknownTimePeriodError


class Direction(str, Enum):
    """Trade direction."""
    BUY = "BUY"
    SELL = "SELL"

    @property
    def is_buy(self) -> bool:
        return self is Direction.BUY


class OrderType(str, Enum):
    """Supported order types."""
    MARKET = "market"
    LIMIT = "limit"
    STOP_LOSS = "stop-loss"     # Stop-entry semantics


class Grade(str, Enum):
    """Performance letter grades."""
    A_STAR = "A*"
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"
    NOT_AVAILABLE = "N/A"


TIME_PERIODS: dict[str, str] = {
    "2008-financial-crisis": "2008 Financial Crisis",
    "2020-covid-crash": "2020 COVID Crash",
    "2021-crypto-boom": "2021 Crypto Boom",
    "2022-fed-hikes": "2022 Fed Rate Hikes",
    "2023-ai-rally": "2023 AI Rally",
    "recent-volatility": "Recent Volatility",
}

DEFAULT_TIME_PERIOD = "2020-covid-crash"

STRATEGY_TRIGGERS = ("diagonal-imbalance", "stacked-imbalance", "absorption", "delta-divergence")
STRATEGY_SENSITIVITIES = ("200", "300", "400")
STRATEGY_ZONE_FILTERS = ("poc", "vwap", "value-area-high", "value-area-low")


def validate_time_period(time_period: str) -> str:
    if time_period not in TIME_PERIODS:
        raise UnknownTimePeriodError(time_period)
    return time_period


@dataclass(frozen=True)
class Account:
    """Account settings. Read by execution, never mutated by trading."""
    balance: float = 10000.0
    currency: str = "GBP"
    leverage: int = 100


@dataclass(frozen=True)
class StrategyConfig:
    """Discretionary strategy setup chosen before a backtest."""
    name: str = "My Strategy"
    description: str = ""
    trigger: str = "diagonal-imbalance"
    sensitivity: str = "300"
    zone_filter: str = "poc"
    stop_logic: str = "low-of-bar"
    order_type: OrderType = OrderType.MARKET
    limit_price: Optional[float] = None
    stop_price: Optional[float] = None

    def validate(self) -> "StrategyConfig":
        """Return self, or raise ConfigurationError on an unknown choice."""
        checks = (
            ("trigger", self.trigger, STRATEGY_TRIGGERS),
            ("sensitivity", self.sensitivity, STRATEGY_SENSITIVITIES),
            ("zone_filter", self.zone_filter, STRATEGY_ZONE_FILTERS),
        )
        for name, value, allowed in checks:
            if value not in allowed:
                raise ConfigurationError(
                    f"{name} must be one of {list(allowed)}",
                    field=name,
                    value=value,
                )
        if not self.name.strip():
            raise ConfigurationError("Strategy name must not be empty", field="name", value=self.name)
        return self


@dataclass(frozen=True)
class OrderRequest:
    """A user's order against the current bar."""
    direction: Direction
    order_type: OrderType
    requested_price: float
    lots: float = 0.1
    limit_price: Optional[float] = None     # Defaults to requested_price
    stop_price: Optional[float] = None      # Defaults to requested_price


@dataclass(frozen=True)
class Trade:
    """A resolved, single-bar trade."""
    id: str
    direction: Direction
    order_type: OrderType
    requested_price: float
    entry_price: float
    entry_time: datetime
    entry_index: int
    exit_price: float
    exit_time: datetime
    lots: float
    contract_size: float
    profit: float                           # Account currency
    is_win: bool
    instrument: str
    limit_price: Optional[float] = None
    stop_price: Optional[float] = None


@dataclass
class Session:
    """A backtest session and its running aggregates."""
    id: str
    start_time: datetime
    instrument: str
    balance: float
    time_period: str = DEFAULT_TIME_PERIOD
    strategy: Optional[StrategyConfig] = None
    trades: list[Trade] = field(default_factory=list)
    win_rate: float = 0.0
    total_pnl: float = 0.0
    grade: Grade = Grade.NOT_AVAILABLE

    @property
    def wins(self) -> int:
        return sum(1 for t in self.trades if t.is_win)

    @property
    def losses(self) -> int:
        return len(self.trades) - self.wins


@dataclass
class StrategyRecord:
    """A strategy started during this run, with its final session results."""
    id: str
    strategy: StrategyConfig
    instrument: str
    time_period: str
    start_time: datetime
    session_id: str
    trade_count: int = 0
    win_rate: float = 0.0
    total_pnl: float = 0.0
    grade: Grade = Grade.NOT_AVAILABLE
