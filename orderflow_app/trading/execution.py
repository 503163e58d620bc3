"""
Single-bar trade execution.

Fill rules:
- Market fills at the requested price (the clicked level, or the current
  close for quick trades).
- Buy limit fills if next_bar.low <= limit; sell limit if next_bar.high >= limit.
- Buy stop fills if next_bar.high >= stop; sell stop if next_bar.low <= stop.
- Limit and stop orders fill at their trigger price.
- Every trade exits at the next bar's close; nothing is held longer.

A request that cannot be resolved (no next bar, trigger not reached,
non-positive size) is a no-op: execute() returns None and records nothing.
"""

import uuid
from typing import Optional, Sequence

from ..errors import (
    InsufficientBarsError,
    InvalidOperation,
    InvalidOrderError,
    OrderNotFilledError,
)
from ..logging.config import get_execution_logger, log_trade_execution
from ..market.models import Bar
from .currency import CurrencyConverter
from .grading import MIN_TRADES_FOR_GRADE
from .models import Account, Direction, OrderRequest, OrderType, Session, Trade
from .session import append_trade

execution_logger = get_execution_logger(__name__)


def resolve_entry_price(request: OrderRequest, next_bar: Bar) -> float:
    """
    Resolve the fill price of an order against the next bar's range.

    Raises:
        OrderNotFilledError: limit/stop trigger not reached
    """
    is_buy = request.direction.is_buy

    if request.order_type is OrderType.MARKET:
        return request.requested_price

    if request.order_type is OrderType.LIMIT:
        limit = request.requested_price if request.limit_price is None else request.limit_price
        filled = next_bar.low <= limit if is_buy else next_bar.high >= limit
        if not filled:
            raise OrderNotFilledError(
                "Limit not reached by next bar",
                order_type=request.order_type.value,
                trigger_price=limit,
                context={"next_low": next_bar.low, "next_high": next_bar.high},
            )
        return limit

    stop = request.requested_price if request.stop_price is None else request.stop_price
    filled = next_bar.high >= stop if is_buy else next_bar.low <= stop
    if not filled:
        raise OrderNotFilledError(
            "Stop not reached by next bar",
            order_type=request.order_type.value,
            trigger_price=stop,
            context={"next_low": next_bar.low, "next_high": next_bar.high},
        )
    return stop


class TradeExecutionEngine:
    """Resolves order requests against the bar sequence and records trades."""

    def __init__(
        self,
        converter: Optional[CurrencyConverter] = None,
        min_trades_for_grade: int = MIN_TRADES_FOR_GRADE
    ) -> None:
        self.converter = converter or CurrencyConverter()
        self.min_trades_for_grade = min_trades_for_grade
        self.logger = execution_logger

    def execute(
        self,
        session: Session,
        account: Account,
        current_index: int,
        bars: Sequence[Bar],
        request: OrderRequest
    ) -> Optional[Trade]:
        """
        Execute an order against the current bar and record the trade.

        Args:
            session: Active session; the trade is appended and aggregates recomputed
            account: Account settings (currency, starting balance)
            current_index: Index of the current bar in bars
            bars: Session bar sequence
            request: The order

        Returns:
            The recorded Trade, or None when the order resolved as a no-op
        """
        try:
            trade = self.build_trade(account, current_index, bars, request)
        except InvalidOperation as e:
            self.logger.info(
                "Order not executed",
                session_id=session.id,
                reason=str(e),
                error_type=type(e).__name__,
                direction=request.direction.value,
                order_type=request.order_type.value,
                current_index=current_index,
                context=e.context,
            )
            return None

        append_trade(session, trade, account, self.min_trades_for_grade)

        log_trade_execution(
            self.logger,
            session_id=session.id,
            trade_id=trade.id,
            direction=trade.direction.value,
            order_type=trade.order_type.value,
            entry_price=trade.entry_price,
            exit_price=trade.exit_price,
            profit=trade.profit,
            context={
                "win_rate": session.win_rate,
                "total_pnl": session.total_pnl,
                "grade": session.grade.value,
            },
        )
        return trade

    def build_trade(
        self,
        account: Account,
        current_index: int,
        bars: Sequence[Bar],
        request: OrderRequest
    ) -> Trade:
        """
        Resolve an order into a Trade without touching any session.

        Raises:
            InsufficientBarsError: no bar after current_index
            InvalidOrderError: non-positive lots
            OrderNotFilledError: limit/stop trigger not reached
        """
        if current_index < 0 or current_index > len(bars) - 2:
            raise InsufficientBarsError(
                "No next bar to resolve the trade against",
                current_index=current_index,
                bar_count=len(bars),
            )

        if request.lots <= 0:
            raise InvalidOrderError("Lots must be positive", field="lots", value=request.lots)

        entry_bar = bars[current_index]
        exit_bar = bars[current_index + 1]
        profile = entry_bar.profile

        entry_price = resolve_entry_price(request, exit_bar)
        exit_price = exit_bar.close
        contract_size = profile.lot_size * request.lots

        if request.direction is Direction.BUY:
            price_diff = exit_price - entry_price
        else:
            price_diff = entry_price - exit_price
        raw_profit = price_diff * contract_size
        profit = self.converter.convert(raw_profit, profile.quote_currency, account.currency)

        return Trade(
            id=str(uuid.uuid4()),
            direction=request.direction,
            order_type=request.order_type,
            requested_price=request.requested_price,
            entry_price=entry_price,
            entry_time=entry_bar.timestamp,
            entry_index=current_index,
            exit_price=exit_price,
            exit_time=exit_bar.timestamp,
            lots=request.lots,
            contract_size=contract_size,
            profit=profit,
            # Break-even is a loss
            is_win=raw_profit > 0,
            instrument=profile.symbol,
            limit_price=entry_price if request.order_type is OrderType.LIMIT else None,
            stop_price=entry_price if request.order_type is OrderType.STOP_LOSS else None,
        )
