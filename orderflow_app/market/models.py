"""
Immutable market data structures produced by the simulator.

Bars are generated once per session and never modified. Footprint levels are
derived on demand from a bar and are not persisted.
"""

from dataclasses import dataclass
from datetime import datetime

from .instruments import InstrumentProfile


@dataclass(frozen=True)
class Bar:
    """One fixed-interval OHLCV snapshot with its bid/ask volume split."""
    timestamp: datetime         # UTC bar open time
    open: float
    high: float
    low: float
    close: float
    volume: int
    bid_volume: int
    ask_volume: int
    profile: InstrumentProfile

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def delta(self) -> int:
        return self.ask_volume - self.bid_volume


@dataclass(frozen=True)
class PriceLevel:
    """Single footprint row."""
    price: float
    bid_volume: int
    ask_volume: int

    @property
    def delta(self) -> int:
        return self.ask_volume - self.bid_volume

    @property
    def total_volume(self) -> int:
        return self.bid_volume + self.ask_volume


@dataclass(frozen=True)
class FootprintSummary:
    """Aggregate view over a bar's footprint levels."""
    point_of_control: float     # Price with the most total volume
    total_bid_volume: int
    total_ask_volume: int
    level_count: int

    @property
    def delta(self) -> int:
        return self.total_ask_volume - self.total_bid_volume

    @property
    def total_volume(self) -> int:
        return self.total_bid_volume + self.total_ask_volume
