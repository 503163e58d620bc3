"""
Error classification for the order-flow simulator.

Recoverable operation errors resolve as a no-op at the engine boundary,
configuration errors reject a request before any state changes, and system
failures are logged by the layer that owns the failing resource.
"""

from .configuration import (
    ConfigurationError,
    UnknownInstrumentError,
    UnknownTimePeriodError,
)
from .operations import (
    InvalidOperation,
    InsufficientBarsError,
    OrderNotFilledError,
    InvalidOrderError,
)
from .system_failures import (
    SimulatorError,
    SystemFailureError,
    PersistenceError,
    StateTransitionError,
)

__all__ = [
    # Base
    "SimulatorError",
    # Configuration
    "ConfigurationError",
    "UnknownInstrumentError",
    "UnknownTimePeriodError",
    # Soft operation errors
    "InvalidOperation",
    "InsufficientBarsError",
    "OrderNotFilledError",
    "InvalidOrderError",
    # System failures
    "SystemFailureError",
    "PersistenceError",
    "StateTransitionError",
]
