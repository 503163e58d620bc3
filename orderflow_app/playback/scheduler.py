"""
Cancellable repeating tick task for bar playback.

Each start() issues a fresh CancellationToken. A firing checks its token
before invoking the tick callback and again before re-arming, so a timer
that fires after cancel() does nothing. The callback receives the token so
the consumer can reject ticks from a superseded run.
"""

import threading
from typing import Callable, Optional, Protocol

import structlog

logger = structlog.get_logger(__name__)


class CancellationToken:
    """One-shot cancellation flag shared between a run and its timers."""

    def __init__(self) -> None:
        self._cancelled = threading.Event()

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()


class TimerHandle(Protocol):
    def start(self) -> None: ...
    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], TimerHandle]


def _threading_timer(interval_seconds: float, fn: Callable[[], None]) -> TimerHandle:
    timer = threading.Timer(interval_seconds, fn)
    timer.daemon = True
    return timer


class PlaybackScheduler:
    """Repeating task that calls on_tick(token) every interval."""

    def __init__(
        self,
        on_tick: Callable[[CancellationToken], None],
        interval_ms: float,
        timer_factory: Optional[TimerFactory] = None
    ) -> None:
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.on_tick = on_tick
        self.interval_ms = float(interval_ms)
        self._timer_factory = timer_factory or _threading_timer
        self._token: Optional[CancellationToken] = None
        self._timer: Optional[TimerHandle] = None
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    @property
    def token(self) -> Optional[CancellationToken]:
        return self._token

    def start(self) -> CancellationToken:
        """Cancel any current run and start a new one."""
        with self._lock:
            self._cancel_locked()
            token = CancellationToken()
            self._token = token
            self._arm(token)
        logger.debug("Playback scheduler started", interval_ms=self.interval_ms)
        return token

    def cancel(self) -> None:
        with self._lock:
            self._cancel_locked()

    def set_interval(self, interval_ms: float) -> None:
        """Change the interval; a running task is restarted at the new rate."""
        if interval_ms <= 0:
            raise ValueError("interval_ms must be positive")
        self.interval_ms = float(interval_ms)
        if self.running:
            self.start()

    def _cancel_locked(self) -> None:
        if self._token is not None:
            self._token.cancel()
        if self._timer is not None:
            self._timer.cancel()
        self._timer = None

    def _arm(self, token: CancellationToken) -> None:
        timer = self._timer_factory(self.interval_ms / 1000.0, lambda: self._fire(token))
        self._timer = timer
        timer.start()

    def _fire(self, token: CancellationToken) -> None:
        if token.cancelled:
            return
        self.on_tick(token)
        with self._lock:
            # on_tick may have cancelled or restarted the run
            if token.cancelled or token is not self._token:
                return
            self._arm(token)
