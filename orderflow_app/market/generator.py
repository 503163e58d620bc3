"""
Synthetic price series generation.

Produces a mean-reverting random walk of OHLCV bars for one instrument. The
generator owns no state besides its random source, so a seeded
random.Random reproduces the same sequence for the same end time.
"""

import math
import random
from datetime import datetime, timedelta, timezone
from typing import Optional, Union

import structlog

from ..config.defaults import SimulationParams
from ..errors import ConfigurationError
from .instruments import InstrumentProfile, get_instrument_profile
from .models import Bar

logger = structlog.get_logger(__name__)


class PriceSeriesGenerator:
    """Mean-reverting random walk bar generator."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        params: Optional[SimulationParams] = None
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.params = params or SimulationParams()

    def generate(
        self,
        profile: Union[InstrumentProfile, str],
        bar_count: Optional[int] = None,
        end_time: Optional[datetime] = None
    ) -> list[Bar]:
        """
        Generate an ordered bar sequence.

        Args:
            profile: Instrument profile or catalog symbol
            bar_count: Number of bars (defaults to SimulationParams.bar_count)
            end_time: Series end; the first bar opens bar_count intervals
                earlier. Defaults to now (UTC).

        Returns:
            Bars in strictly increasing timestamp order

        Raises:
            ConfigurationError: unknown symbol or negative bar count
        """
        if isinstance(profile, str):
            profile = get_instrument_profile(profile)

        n_bars = self.params.bar_count if bar_count is None else bar_count
        if n_bars < 0:
            raise ConfigurationError("bar_count must be non-negative", field="bar_count", value=n_bars)

        if end_time is None:
            end_time = datetime.now(timezone.utc)
        elif end_time.tzinfo is None:
            end_time = end_time.replace(tzinfo=timezone.utc)

        interval = timedelta(seconds=self.params.bar_interval_seconds)
        start_ts = end_time - interval * n_bars

        rng = self.rng
        p = self.params
        price = float(profile.base_price)
        bars: list[Bar] = []

        for i in range(n_bars):
            # Pull toward base as a fraction of base price
            drift = (profile.base_price - price) / profile.base_price * p.mean_reversion_rate
            shock = (rng.random() - 0.5) * profile.volatility
            price = price * (1 + drift + shock)

            # Volume clusters with the size of the move
            base_volume = p.base_volume + rng.random() * p.volume_range
            volume_multiplier = 1 + abs(shock) * p.volume_shock_multiplier
            total_volume = int(math.floor(base_volume * volume_multiplier))

            imbalance = p.imbalance_ratio if shock > 0 else 1 - p.imbalance_ratio
            bid_volume = int(math.floor(total_volume * imbalance))
            ask_volume = total_volume - bid_volume

            high = price + profile.spread + rng.random() * profile.volatility * price
            low = price - profile.spread - rng.random() * profile.volatility * price
            open_ = low + rng.random() * (high - low)
            close = low + rng.random() * (high - low)

            bars.append(
                Bar(
                    timestamp=start_ts + interval * i,
                    open=profile.round_price(open_),
                    high=profile.round_price(high),
                    low=profile.round_price(low),
                    close=profile.round_price(close),
                    volume=total_volume,
                    bid_volume=bid_volume,
                    ask_volume=ask_volume,
                    profile=profile,
                )
            )

        logger.debug(
            "Generated price series",
            symbol=profile.symbol,
            bar_count=n_bars,
            start=start_ts.isoformat(),
            last_close=bars[-1].close if bars else None,
        )

        return bars


def generate_price_series(
    symbol: str,
    bar_count: int,
    *,
    seed: Optional[int] = None,
    end_time: Optional[datetime] = None,
    params: Optional[SimulationParams] = None
) -> list[Bar]:
    """Convenience wrapper: one-off seeded generation for a catalog symbol."""
    generator = PriceSeriesGenerator(rng=random.Random(seed), params=params)
    return generator.generate(symbol, bar_count, end_time=end_time)
