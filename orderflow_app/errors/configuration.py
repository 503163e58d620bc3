"""
Configuration error classifications.

Raised when a request names something the simulator does not know about
(an instrument symbol, a time period) or carries invalid settings. These are
always raised before the engine touches its state.
"""

from typing import Optional

from .system_failures import SimulatorError


class ConfigurationError(SimulatorError):
    """Invalid or unknown configuration requested by the caller."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: object = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value


class UnknownInstrumentError(ConfigurationError):
    """Instrument symbol is not in the catalog."""

    def __init__(self, symbol: str, **kwargs):
        super().__init__(f"Unknown instrument: {symbol}", field="instrument", value=symbol, **kwargs)
        self.symbol = symbol


class UnknownTimePeriodError(ConfigurationError):
    """Time period label is not in the catalog."""

    def __init__(self, time_period: str, **kwargs):
        super().__init__(f"Unknown time period: {time_period}", field="time_period",
                         value=time_period, **kwargs)
        self.time_period = time_period
