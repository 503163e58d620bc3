"""Pytest configuration and shared fixtures."""

import itertools
import pytest
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional

from orderflow_app.config.defaults import get_default_config
from orderflow_app.engine import SimulatorEngine
from orderflow_app.market.instruments import InstrumentProfile, get_instrument_profile
from orderflow_app.market.models import Bar
from orderflow_app.persistence.kv_store import InMemoryKeyValueStore
from orderflow_app.persistence.session_store import SessionStore
from orderflow_app.trading.models import Direction, OrderType, Trade

BASE_TIME = datetime(2024, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class ManualTimer:
    """Timer that only fires when the test says so."""

    def __init__(self, interval: float, fn: Callable[[], None]):
        self.interval = interval
        self.fn = fn
        self.started = False
        self.cancelled = False

    def start(self) -> None:
        self.started = True

    def cancel(self) -> None:
        self.cancelled = True

    def fire(self) -> None:
        self.fn()


class ManualTimerFactory:
    """Records every timer the scheduler creates."""

    def __init__(self) -> None:
        self.timers: List[ManualTimer] = []

    def __call__(self, interval: float, fn: Callable[[], None]) -> ManualTimer:
        timer = ManualTimer(interval, fn)
        self.timers.append(timer)
        return timer

    @property
    def latest(self) -> ManualTimer:
        return self.timers[-1]


@pytest.fixture
def timer_factory() -> ManualTimerFactory:
    return ManualTimerFactory()


@pytest.fixture
def clock() -> Callable[[], datetime]:
    """Clock that advances one minute per call."""
    counter = itertools.count()
    return lambda: BASE_TIME + timedelta(minutes=next(counter))


@pytest.fixture
def eurusd() -> InstrumentProfile:
    return get_instrument_profile("EURUSD")


@pytest.fixture
def make_bar() -> Callable[..., Bar]:
    """Build a bar by hand; low/high default to the close."""

    def _make(
        profile: InstrumentProfile,
        close: float,
        low: Optional[float] = None,
        high: Optional[float] = None,
        open_: Optional[float] = None,
        index: int = 0,
        bid_volume: int = 3000,
        ask_volume: int = 2000,
    ) -> Bar:
        low = close if low is None else low
        high = close if high is None else high
        return Bar(
            timestamp=BASE_TIME + timedelta(minutes=5 * index),
            open=close if open_ is None else open_,
            high=high,
            low=low,
            close=close,
            volume=bid_volume + ask_volume,
            bid_volume=bid_volume,
            ask_volume=ask_volume,
            profile=profile,
        )

    return _make


@pytest.fixture
def make_trade() -> Callable[..., Trade]:
    def _make(profit: float, index: int = 0, trade_id: Optional[str] = None) -> Trade:
        return Trade(
            id=trade_id or f"trade-{index}",
            direction=Direction.BUY if index % 2 == 0 else Direction.SELL,
            order_type=OrderType.MARKET,
            requested_price=1.085,
            entry_price=1.085,
            entry_time=BASE_TIME + timedelta(minutes=5 * index),
            entry_index=index,
            exit_price=1.09,
            exit_time=BASE_TIME + timedelta(minutes=5 * (index + 1)),
            lots=0.1,
            contract_size=10000.0,
            profit=profit,
            is_win=profit > 0,
            instrument="EURUSD",
        )

    return _make


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore(InMemoryKeyValueStore())


@pytest.fixture
def engine(timer_factory, clock, session_store) -> SimulatorEngine:
    return SimulatorEngine(
        "EURUSD",
        seed=42,
        config=get_default_config(),
        session_store=session_store,
        timer_factory=timer_factory,
        clock=clock,
    )
