"""Default configuration parameters for the order-flow simulator."""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class SimulationParams:
    """Price series generation parameters."""
    bar_count: int = 500                             # Bars generated per session
    bar_interval_seconds: int = 300                  # Fixed 5-minute bars
    mean_reversion_rate: float = 0.0001              # Pull back toward base price
    base_volume: float = 5000.0                      # Volume floor per bar
    volume_range: float = 10000.0                    # Uniform volume spread above floor
    volume_shock_multiplier: float = 50.0            # Volume clustering with price moves
    imbalance_ratio: float = 0.6                     # Bid share on up-shocks


@dataclass(frozen=True)
class FootprintParams:
    """Footprint synthesis parameters."""
    min_levels: int = 5
    decay_fraction: float = 0.3                      # Weight decay as fraction of bar range
    scale_low: float = 0.3                           # Per-level random scale lower bound
    scale_span: float = 1.4                          # Per-level random scale width
    range_floor_ticks: float = 0.01                  # Zero-range guard, in ticks


@dataclass(frozen=True)
class PlaybackParams:
    """Bar-by-bar playback parameters."""
    base_interval_ms: int = 1000                     # Interval at 1x speed
    default_speed: float = 1.0
    allowed_speeds: tuple = (0.5, 1.0, 2.0, 4.0)
    initial_history_bars: int = 50                   # Cursor start index
    visible_lookback: int = 25                       # Bars shown behind the cursor


@dataclass(frozen=True)
class AccountParams:
    """Account defaults."""
    balance: float = 10000.0
    currency: str = "GBP"
    leverage: int = 100
    allowed_leverage: tuple = (50, 100, 200, 500)
    supported_currencies: tuple = ("GBP", "USD", "EUR")


@dataclass(frozen=True)
class TradingParams:
    """Trade execution and grading parameters."""
    default_lots: float = 0.1
    min_trades_for_grade: int = 10
    fx_rates: dict = field(default_factory=lambda: {"USD": {"GBP": 0.79}})


@dataclass(frozen=True)
class PersistenceParams:
    """Session store parameters."""
    session_key_prefix: str = "session:"
    sqlite_path: Optional[str] = None                # None keeps sessions in memory


@dataclass(frozen=True)
class DefaultConfig:
    """Complete default configuration."""
    simulation: SimulationParams
    footprint: FootprintParams
    playback: PlaybackParams
    account: AccountParams
    trading: TradingParams
    persistence: PersistenceParams


def get_default_config() -> DefaultConfig:
    """Get the default configuration instance."""
    return DefaultConfig(
        simulation=SimulationParams(),
        footprint=FootprintParams(),
        playback=PlaybackParams(),
        account=AccountParams(),
        trading=TradingParams(),
        persistence=PersistenceParams(),
    )
