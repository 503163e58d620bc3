"""Session creation and aggregate bookkeeping."""

import uuid
from datetime import datetime
from typing import Optional

from ..utils.time import utc_now
from .grading import MIN_TRADES_FOR_GRADE, grade
from .models import (
    DEFAULT_TIME_PERIOD,
    Account,
    Session,
    StrategyConfig,
    Trade,
)


def new_session(
    instrument: str,
    account: Account,
    time_period: str = DEFAULT_TIME_PERIOD,
    strategy: Optional[StrategyConfig] = None,
    start_time: Optional[datetime] = None
) -> Session:
    """Create an empty session funded with the account balance."""
    return Session(
        id=str(uuid.uuid4()),
        start_time=start_time or utc_now(),
        instrument=instrument,
        balance=account.balance,
        time_period=time_period,
        strategy=strategy,
    )


def win_rate_percent(trades: list[Trade]) -> float:
    """Wins over total in percent, one decimal. 0.0 for no trades."""
    if not trades:
        return 0.0
    wins = sum(1 for t in trades if t.is_win)
    return round(wins / len(trades) * 100, 1)


def recompute_aggregates(
    session: Session,
    account: Account,
    min_trades: int = MIN_TRADES_FOR_GRADE
) -> Session:
    """Recompute win rate, P&L, balance and grade from the trade list."""
    session.win_rate = win_rate_percent(session.trades)
    session.total_pnl = sum(t.profit for t in session.trades)
    session.balance = account.balance + session.total_pnl
    session.grade = grade(session.win_rate, len(session.trades), min_trades)
    return session


def append_trade(
    session: Session,
    trade: Trade,
    account: Account,
    min_trades: int = MIN_TRADES_FOR_GRADE
) -> Session:
    session.trades.append(trade)
    return recompute_aggregates(session, account, min_trades)
