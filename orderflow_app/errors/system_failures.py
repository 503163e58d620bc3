"""
System failure error classifications.

These exceptions represent failures of a resource the engine depends on
(the session store, the playback state machine) rather than a bad request.
"""

from typing import Any, Dict, Optional


class SimulatorError(Exception):
    """Base class for every error raised by the simulator."""

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.context = context or {}
        self.recoverable = False


class SystemFailureError(SimulatorError):
    """Base class for unrecoverable system failures."""


class PersistenceError(SystemFailureError):
    """Key-value store or serialization failures."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 key: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.operation = operation
        self.key = key


class StateTransitionError(SystemFailureError):
    """Playback transition that the state machine does not allow."""

    def __init__(self, message: str, current_state: Optional[str] = None,
                 attempted_transition: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.current_state = current_state
        self.attempted_transition = attempted_transition
