"""
Engine state data models.

EngineState is the single explicit struct holding everything a running
simulator knows: the instrument, the bar sequence and its cursor, playback
status, account settings, the active session and the session history.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..market.instruments import InstrumentProfile
from ..market.models import Bar
from ..trading.models import Account, Session, StrategyConfig, StrategyRecord


class PlaybackState(str, Enum):
    """Playback lifecycle states."""
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


@dataclass
class EngineState:
    """Mutable state of one simulator instance."""

    # Market
    profile: InstrumentProfile
    bars: list[Bar]
    cursor: int                                     # Index of the current (tradable) bar

    # Session
    account: Account
    session: Session
    strategy: Optional[StrategyConfig] = None
    history: list[Session] = field(default_factory=list)        # Most recent first
    strategy_records: list[StrategyRecord] = field(default_factory=list)

    # Playback
    playback: PlaybackState = PlaybackState.IDLE
    speed: float = 1.0

    @property
    def instrument(self) -> str:
        return self.profile.symbol

    @property
    def current_bar(self) -> Optional[Bar]:
        if 0 <= self.cursor < len(self.bars):
            return self.bars[self.cursor]
        return None

    @property
    def at_last_bar(self) -> bool:
        return self.cursor >= len(self.bars) - 1

    @property
    def is_playing(self) -> bool:
        return self.playback is PlaybackState.PLAYING
