"""
Intra-bar footprint synthesis.

Fabricates bid/ask volume across evenly spaced price levels of a bar, with
volume concentrated around the close. The levels double as the tradable
price points of the current bar. Each level is scaled independently, so the
level volumes approximate rather than reproduce the bar's total volume.
"""

import math
import random
from typing import Optional, Sequence

from ..config.defaults import FootprintParams
from .models import Bar, FootprintSummary, PriceLevel


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class FootprintSynthesizer:
    """Builds footprint levels for a bar from an injected random source."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        params: Optional[FootprintParams] = None
    ) -> None:
        self.rng = rng if rng is not None else random.Random()
        self.params = params or FootprintParams()

    def level_count(self, bar: Bar) -> int:
        return max(self.params.min_levels, _round_half_up(bar.range / bar.profile.tick_size))

    def synthesize(self, bar: Bar) -> list[PriceLevel]:
        """
        Synthesize footprint levels for one bar.

        Args:
            bar: Source bar

        Returns:
            Price levels ordered highest price first
        """
        profile = bar.profile
        p = self.params
        num_levels = self.level_count(bar)
        bar_range = bar.range
        # Zero-range bars still need a finite decay width
        decay_width = max(bar_range, profile.tick_size * p.range_floor_ticks) * p.decay_fraction

        bid_per_level = bar.bid_volume / num_levels
        ask_per_level = bar.ask_volume / num_levels

        levels: list[PriceLevel] = []
        for i in range(num_levels):
            price = bar.low + (i / num_levels) * bar_range
            weight = math.exp(-abs(price - bar.close) / decay_width)

            bid_vol = int(math.floor(bid_per_level * weight * (p.scale_low + self.rng.random() * p.scale_span)))
            ask_vol = int(math.floor(ask_per_level * weight * (p.scale_low + self.rng.random() * p.scale_span)))

            levels.append(
                PriceLevel(
                    price=profile.round_price(price),
                    bid_volume=bid_vol,
                    ask_volume=ask_vol,
                )
            )

        levels.reverse()
        return levels


def summarize_footprint(levels: Sequence[PriceLevel]) -> Optional[FootprintSummary]:
    """
    Summarize footprint levels.

    The point of control is the level with the highest total volume; ties go
    to the higher price. Returns None for an empty footprint.
    """
    if not levels:
        return None

    poc = max(levels, key=lambda level: (level.total_volume, level.price))
    return FootprintSummary(
        point_of_control=poc.price,
        total_bid_volume=sum(level.bid_volume for level in levels),
        total_ask_volume=sum(level.ask_volume for level in levels),
        level_count=len(levels),
    )
