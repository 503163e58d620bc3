"""
Main simulator engine coordinator.

Owns the EngineState and exposes the session lifecycle operations a UI calls:
instrument selection, strategy start, playback control, trading against the
current bar, and starting a new session.

Generation → Footprint → Execution → Aggregates/Grade → Session store
"""

import random
import threading
from dataclasses import replace
from datetime import datetime
from pathlib import Path
from typing import Callable, Optional, Union

import structlog

from .config.defaults import DefaultConfig
from .config.loader import ConfigLoader
from .config.validation import ConfigValidator
from .errors import ConfigurationError
from .logging.config import get_session_logger
from .market.footprint import FootprintSynthesizer, summarize_footprint
from .market.generator import PriceSeriesGenerator
from .market.instruments import InstrumentProfile, get_instrument_profile
from .market.models import Bar, FootprintSummary, PriceLevel
from .persistence.kv_store import SQLiteKeyValueStore
from .persistence.session_store import SessionStore
from .playback.scheduler import CancellationToken, PlaybackScheduler, TimerFactory
from .state.machine import transition
from .state.models import EngineState, PlaybackState
from .trading.currency import CurrencyConverter, normalize_currency
from .trading.execution import TradeExecutionEngine
from .trading.models import (
    Account,
    Direction,
    OrderRequest,
    OrderType,
    Session,
    StrategyConfig,
    StrategyRecord,
    Trade,
    validate_time_period,
)
from .trading.session import new_session
from .utils.time import utc_now

logger = structlog.get_logger(__name__)
session_logger = get_session_logger(__name__)


class SimulatorEngine:
    """
    Coordinator for one interactive backtest.

    All state-changing operations run under a single re-entrant lock, so a
    playback tick fired from the scheduler's timer thread never interleaves
    with a trade or a session reset.
    """

    def __init__(
        self,
        instrument: str = "EURUSD",
        *,
        seed: Optional[int] = None,
        config: Optional[DefaultConfig] = None,
        config_dir: Optional[Union[str, Path]] = None,
        session_store: Optional[SessionStore] = None,
        account: Optional[Account] = None,
        converter: Optional[CurrencyConverter] = None,
        timer_factory: Optional[TimerFactory] = None,
        clock: Optional[Callable[[], datetime]] = None
    ) -> None:
        """
        Initialize the simulator engine.

        Args:
            instrument: Starting catalog symbol
            seed: Seed for price and footprint randomness; None for fresh entropy
            config: Typed configuration; loaded from config_dir when omitted
            config_dir: Directory holding simulator.yaml
            session_store: Session persistence; SQLite when persistence.sqlite_path
                is configured, in-memory otherwise
            account: Account settings; configuration defaults when omitted
            converter: P&L currency converter; configured rates when omitted
            timer_factory: Playback timer factory (tests inject a manual one)
            clock: Wall-clock source for session start and series end times

        Raises:
            ConfigurationError: unknown instrument or invalid configuration
        """
        self.logger = logger
        self._lock = threading.RLock()

        self.config_loader = ConfigLoader.create(Path(config_dir) if config_dir else None)
        self.config = config or self.config_loader.load()
        self._clock = clock or utc_now

        # Separate price and footprint streams, both derived from one seed
        seeds = random.Random(seed)
        self.generator = PriceSeriesGenerator(
            rng=random.Random(seeds.getrandbits(64)), params=self.config.simulation
        )
        self.footprint_synthesizer = FootprintSynthesizer(
            rng=random.Random(seeds.getrandbits(64)), params=self.config.footprint
        )
        self.executor = TradeExecutionEngine(
            converter=converter or CurrencyConverter.from_nested(self.config.trading.fx_rates),
            min_trades_for_grade=self.config.trading.min_trades_for_grade,
        )
        if session_store is None:
            sqlite_path = self.config.persistence.sqlite_path
            session_store = SessionStore(
                SQLiteKeyValueStore(sqlite_path) if sqlite_path else None,
                key_prefix=self.config.persistence.session_key_prefix,
            )
        self.session_store = session_store

        if account is None:
            account = Account(
                balance=self.config.account.balance,
                currency=self.config.account.currency,
                leverage=self.config.account.leverage,
            )
        account = replace(account, currency=normalize_currency(account.currency))

        profile = self._load_profile(instrument)
        bars = self._generate_bars(profile)
        self.state = EngineState(
            profile=profile,
            bars=bars,
            cursor=self._initial_cursor(bars),
            account=account,
            session=new_session(profile.symbol, account, start_time=self._clock()),
            speed=self.config.playback.default_speed,
        )

        self.scheduler = PlaybackScheduler(
            on_tick=self._on_tick,
            interval_ms=self._interval_ms(self.state.speed),
            timer_factory=timer_factory,
        )

        self.logger.info(
            "Simulator engine initialized",
            instrument=profile.symbol,
            bar_count=len(bars),
            session_id=self.state.session.id,
            seed=seed,
        )

    # -----------------------
    # Setup helpers
    # -----------------------

    def _load_profile(self, symbol: str) -> InstrumentProfile:
        return get_instrument_profile(symbol, self.config_loader.load_instrument_config(symbol))

    def _generate_bars(self, profile: InstrumentProfile) -> list[Bar]:
        return self.generator.generate(profile, self.config.simulation.bar_count, end_time=self._clock())

    def _initial_cursor(self, bars: list[Bar]) -> int:
        return max(0, min(self.config.playback.initial_history_bars, len(bars) - 1))

    def _interval_ms(self, speed: float) -> float:
        return self.config.playback.base_interval_ms / speed

    def _set_playback(self, target: PlaybackState, trigger: str) -> None:
        if self.state.playback is target:
            return
        self.state.playback = transition(self.state.playback, target, trigger, self.state.session.id)

    # -----------------------
    # Session lifecycle
    # -----------------------

    def select_instrument(self, symbol: str) -> EngineState:
        """
        Switch instrument, discarding the bar sequence and starting a new session.

        Raises:
            ConfigurationError: unknown symbol; the current state is left untouched
        """
        profile = self._load_profile(symbol)
        with self._lock:
            self._start_new_session(profile, trigger="instrument_change")
        return self.state

    def handle_new_session(self) -> EngineState:
        """Archive the current session (if it traded) and start a fresh one."""
        with self._lock:
            self._start_new_session(self.state.profile, trigger="new_session")
        return self.state

    def _start_new_session(self, profile: InstrumentProfile, trigger: str) -> None:
        state = self.state
        self.scheduler.cancel()

        previous = state.session
        if previous.trades:
            self.session_store.save(previous)
            # Autosave may already have put it there through load_history
            state.history = [s for s in state.history if s.id != previous.id]
            state.history.insert(0, previous)
            self._close_strategy_record(previous)

        bars = self._generate_bars(profile)
        state.profile = profile
        state.bars = bars
        state.cursor = self._initial_cursor(bars)
        self._set_playback(PlaybackState.IDLE, trigger)
        state.session = new_session(
            profile.symbol,
            state.account,
            time_period=previous.time_period,
            strategy=state.strategy,
            start_time=self._clock(),
        )

        session_logger.info(
            "New session started",
            trigger=trigger,
            session_id=state.session.id,
            previous_session_id=previous.id,
            previous_trade_count=len(previous.trades),
            instrument=profile.symbol,
        )

    def _close_strategy_record(self, session: Session) -> None:
        for record in self.state.strategy_records:
            if record.session_id == session.id:
                record.trade_count = len(session.trades)
                record.win_rate = session.win_rate
                record.total_pnl = session.total_pnl
                record.grade = session.grade

    def start_strategy(
        self,
        strategy: StrategyConfig,
        time_period: Optional[str] = None
    ) -> StrategyRecord:
        """
        Attach a strategy (and optionally a time period) to the current session.

        Raises:
            ConfigurationError: unknown strategy choice or time period
        """
        strategy.validate()
        if time_period is not None:
            validate_time_period(time_period)

        with self._lock:
            session = self.state.session
            self.state.strategy = strategy
            session.strategy = strategy
            if time_period is not None:
                session.time_period = time_period

            record = StrategyRecord(
                id=f"{session.id}:{len(self.state.strategy_records)}",
                strategy=strategy,
                instrument=session.instrument,
                time_period=session.time_period,
                start_time=self._clock(),
                session_id=session.id,
            )
            self.state.strategy_records.append(record)

        session_logger.info(
            "Strategy started",
            session_id=session.id,
            strategy=strategy.name,
            trigger=strategy.trigger,
            order_type=strategy.order_type.value,
            time_period=session.time_period,
        )
        return record

    def update_account(
        self,
        balance: Optional[float] = None,
        currency: Optional[str] = None,
        leverage: Optional[int] = None
    ) -> Account:
        """
        Change account settings. Takes effect from the next trade.

        Raises:
            ConfigurationError: invalid balance, currency or leverage
        """
        changes = {
            k: v for k, v in
            (("balance", balance), ("currency", currency), ("leverage", leverage))
            if v is not None
        }
        params = dict(changes)
        params["supported_currencies"] = self.config.account.supported_currencies
        params["allowed_leverage"] = self.config.account.allowed_leverage
        errors = ConfigValidator.validate_account_params(params)
        if errors:
            first = errors[0]
            raise ConfigurationError(
                f"{first.field}: {first.message} (got: {first.value})",
                field=first.field,
                value=first.value,
            )

        if "currency" in changes:
            changes["currency"] = normalize_currency(changes["currency"])

        with self._lock:
            self.state.account = replace(self.state.account, **changes)
        self.logger.info("Account updated", **changes)
        return self.state.account

    def load_history(self) -> list[Session]:
        """Reload session history from the store, most recent first."""
        history = self.session_store.load_all()
        with self._lock:
            self.state.history = history
        return history

    # -----------------------
    # Playback
    # -----------------------

    def play(self) -> bool:
        """Start playback. Returns False when already at the last bar."""
        with self._lock:
            if self.state.at_last_bar:
                self.logger.info("Playback not started: at last bar", cursor=self.state.cursor)
                return False
            if self.state.is_playing:
                return True
            self._set_playback(PlaybackState.PLAYING, "play")
            self.scheduler.start()
            return True

    def pause(self) -> None:
        with self._lock:
            self.scheduler.cancel()
            if self.state.is_playing:
                self._set_playback(PlaybackState.PAUSED, "pause")

    def toggle_playback(self) -> bool:
        """Play if paused/idle, pause if playing. Returns whether now playing."""
        with self._lock:
            if self.state.is_playing:
                self.pause()
            else:
                self.play()
            return self.state.is_playing

    def set_speed(self, speed: float) -> None:
        """
        Change the playback speed multiplier.

        Raises:
            ConfigurationError: speed not in PlaybackParams.allowed_speeds
        """
        if speed not in self.config.playback.allowed_speeds:
            raise ConfigurationError(
                f"Speed must be one of {list(self.config.playback.allowed_speeds)}",
                field="speed",
                value=speed,
            )
        with self._lock:
            self.state.speed = speed
            self.scheduler.set_interval(self._interval_ms(speed))

    def tick(self, token: Optional[CancellationToken] = None) -> bool:
        """
        Advance the cursor by one bar.

        Args:
            token: Scheduler token of the firing run; ticks from a cancelled
                or superseded run are ignored. None for a manual step.

        Returns:
            True if the cursor moved
        """
        with self._lock:
            if token is not None and (token.cancelled or token is not self.scheduler.token):
                return False

            state = self.state
            if state.at_last_bar:
                self._stop_at_end()
                return False

            state.cursor += 1
            if state.at_last_bar:
                self._stop_at_end()
            return True

    def _stop_at_end(self) -> None:
        self.scheduler.cancel()
        if self.state.is_playing:
            self._set_playback(PlaybackState.PAUSED, "end_of_data")

    def _on_tick(self, token: CancellationToken) -> None:
        self.tick(token)

    def reset_cursor(self) -> int:
        """Move the cursor back to the initial history position."""
        with self._lock:
            self.state.cursor = self._initial_cursor(self.state.bars)
            return self.state.cursor

    # -----------------------
    # Market views
    # -----------------------

    @property
    def current_bar(self) -> Optional[Bar]:
        return self.state.current_bar

    def visible_bars(self, lookback: Optional[int] = None) -> list[Bar]:
        """Bars from lookback before the cursor up to and including it."""
        n = self.config.playback.visible_lookback if lookback is None else lookback
        cursor = self.state.cursor
        return self.state.bars[max(0, cursor - n):cursor + 1]

    def footprint(self, bar: Optional[Bar] = None) -> list[PriceLevel]:
        """Footprint levels for a bar (the current bar by default)."""
        target = bar or self.state.current_bar
        if target is None:
            return []
        return self.footprint_synthesizer.synthesize(target)

    def footprint_summary(self, levels: Optional[list[PriceLevel]] = None) -> Optional[FootprintSummary]:
        return summarize_footprint(self.footprint() if levels is None else levels)

    # -----------------------
    # Trading
    # -----------------------

    def trade_at_level(
        self,
        price: float,
        direction: Union[Direction, str],
        lots: Optional[float] = None,
        order_type: Optional[Union[OrderType, str]] = None,
        limit_price: Optional[float] = None,
        stop_price: Optional[float] = None
    ) -> Optional[Trade]:
        """
        Trade the current bar at a price level.

        The order type defaults to the active strategy's. Limit and stop
        triggers default to the requested price.

        Returns:
            The recorded trade, or None if the order resolved as a no-op
        """
        if isinstance(direction, str):
            direction = Direction(direction.upper())
        if order_type is None:
            strategy = self.state.strategy
            order_type = strategy.order_type if strategy else OrderType.MARKET
        elif isinstance(order_type, str):
            order_type = OrderType(order_type)

        request = OrderRequest(
            direction=direction,
            order_type=order_type,
            requested_price=float(price),
            lots=self.config.trading.default_lots if lots is None else lots,
            limit_price=limit_price,
            stop_price=stop_price,
        )

        with self._lock:
            state = self.state
            trade = self.executor.execute(state.session, state.account, state.cursor, state.bars, request)
            if trade is not None:
                self.session_store.save(state.session)
        return trade

    def trade_level(self, level: PriceLevel, lots: Optional[float] = None) -> Optional[Trade]:
        """Buy a level with positive delta, sell any other, triggering at its price."""
        direction = Direction.BUY if level.delta > 0 else Direction.SELL
        return self.trade_at_level(level.price, direction, lots)

    def quick_trade(
        self,
        direction: Union[Direction, str],
        lots: Optional[float] = None,
        order_type: Optional[Union[OrderType, str]] = None,
        limit_price: Optional[float] = None,
        stop_price: Optional[float] = None
    ) -> Optional[Trade]:
        """
        Trade at the current bar's close.

        A strategy's fixed limit or stop price applies here when the caller
        gives none.
        """
        bar = self.state.current_bar
        if bar is None:
            return None
        strategy = self.state.strategy
        if strategy is not None:
            limit_price = strategy.limit_price if limit_price is None else limit_price
            stop_price = strategy.stop_price if stop_price is None else stop_price
        return self.trade_at_level(bar.close, direction, lots, order_type, limit_price, stop_price)
