"""
Instrument catalog and price precision policy.

Every component that rounds or formats a price goes through the profile so
that the tick-size threshold stays in one place.
"""

from dataclasses import dataclass, replace
from typing import Mapping, Optional

from ..config.validation import ConfigValidator
from ..errors import ConfigurationError, UnknownInstrumentError

INTEGER_TICK_THRESHOLD = 1.0
FRACTIONAL_DECIMALS = 4


@dataclass(frozen=True)
class InstrumentProfile:
    """Static market constants for one tradable instrument."""
    symbol: str
    display_name: str
    base_price: float
    volatility: float           # Per-bar uniform shock width
    spread: float               # Added beyond the close on both sides of the bar
    tick_size: float            # Minimum increment, also drives display precision
    lot_size: float             # Contract units per lot
    quote_currency: Optional[str] = None

    @property
    def price_decimals(self) -> int:
        """0 decimals for integer-tick instruments, 4 otherwise."""
        return 0 if self.tick_size >= INTEGER_TICK_THRESHOLD else FRACTIONAL_DECIMALS

    def round_price(self, price: float) -> float:
        return round(float(price), self.price_decimals)

    def format_price(self, price: float) -> str:
        return f"{price:.{self.price_decimals}f}"


INSTRUMENT_CATALOG: dict[str, InstrumentProfile] = {
    "EURUSD": InstrumentProfile(
        symbol="EURUSD", display_name="EUR/USD", base_price=1.0850,
        volatility=0.0003, spread=0.00015, tick_size=0.0001, lot_size=100000,
        quote_currency="USD",
    ),
    "GBPUSD": InstrumentProfile(
        symbol="GBPUSD", display_name="GBP/USD", base_price=1.2650,
        volatility=0.0004, spread=0.0002, tick_size=0.0001, lot_size=100000,
        quote_currency="USD",
    ),
    "BTCUSD": InstrumentProfile(
        symbol="BTCUSD", display_name="BTC/USD", base_price=45000,
        volatility=0.015, spread=5, tick_size=1, lot_size=1,
        quote_currency="USD",
    ),
    "XAUUSD": InstrumentProfile(
        symbol="XAUUSD", display_name="XAU/USD (Gold)", base_price=2050,
        volatility=0.008, spread=0.5, tick_size=0.1, lot_size=100,
        quote_currency="USD",
    ),
    # Index points; P&L is never converted.
    "NQ": InstrumentProfile(
        symbol="NQ", display_name="NQ (Nasdaq)", base_price=16500,
        volatility=0.005, spread=0.25, tick_size=0.25, lot_size=20,
    ),
}


def list_instruments() -> list[str]:
    return list(INSTRUMENT_CATALOG)


def get_instrument_profile(
    symbol: str,
    overrides: Optional[Mapping[str, float]] = None
) -> InstrumentProfile:
    """
    Look up an instrument profile by symbol.

    Args:
        symbol: Catalog symbol (EURUSD, GBPUSD, BTCUSD, XAUUSD, NQ)
        overrides: Optional numeric field overrides (e.g. from simulator.yaml)

    Returns:
        The catalog profile, with overrides applied

    Raises:
        UnknownInstrumentError: symbol is not in the catalog
        ConfigurationError: overrides name a non-numeric or unknown field
    """
    try:
        profile = INSTRUMENT_CATALOG[symbol]
    except KeyError as exc:
        raise UnknownInstrumentError(symbol) from exc

    if not overrides:
        return profile

    errors = ConfigValidator.validate_instrument_overrides(dict(overrides))
    if errors:
        first = errors[0]
        raise ConfigurationError(
            f"Invalid override for {symbol}.{first.field}: {first.message}",
            field=first.field,
            value=first.value,
        )

    return replace(profile, **{k: float(v) for k, v in overrides.items()})
