"""
Soft operation errors for trade requests.

A trade that cannot be resolved is not a failure of the simulator: the
engine catches these and reports "no trade recorded" to the caller.
"""

from typing import Optional

from .system_failures import SimulatorError


class InvalidOperation(SimulatorError):
    """Base class for requests that resolve as a no-op."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.recoverable = True


class InsufficientBarsError(InvalidOperation):
    """No bar after the current one to resolve the exit against."""

    def __init__(self, message: str, current_index: Optional[int] = None,
                 bar_count: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_index = current_index
        self.bar_count = bar_count


class OrderNotFilledError(InvalidOperation):
    """Limit or stop trigger was not reached by the next bar."""

    def __init__(self, message: str, order_type: Optional[str] = None,
                 trigger_price: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.order_type = order_type
        self.trigger_price = trigger_price


class InvalidOrderError(InvalidOperation):
    """Order request carries values that cannot be traded."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: object = None, **kwargs):
        super().__init__(message, **kwargs)
        self.field = field
        self.value = value
