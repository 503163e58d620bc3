"""Tests for single-bar trade execution."""

import pytest
from unittest.mock import patch

from orderflow_app.errors import InsufficientBarsError, InvalidOrderError, OrderNotFilledError
from orderflow_app.market.instruments import get_instrument_profile
from orderflow_app.trading.currency import CurrencyConverter
from orderflow_app.trading.execution import TradeExecutionEngine, resolve_entry_price
from orderflow_app.trading.models import Account, Direction, Grade, OrderRequest, OrderType
from orderflow_app.trading.session import new_session

USD_ACCOUNT = Account(balance=10000.0, currency="USD", leverage=100)
GBP_ACCOUNT = Account(balance=10000.0, currency="GBP", leverage=100)


@pytest.fixture
def executor():
    return TradeExecutionEngine()


def _market(direction: Direction, price: float, lots: float = 1.0) -> OrderRequest:
    return OrderRequest(direction=direction, order_type=OrderType.MARKET, requested_price=price, lots=lots)


class TestMarketOrders:
    """Market orders fill at the requested price and exit at the next close."""

    def test_buy_profit(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0900, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)

        trade = executor.execute(session, USD_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0850))

        assert trade is not None
        assert trade.entry_price == 1.0850
        assert trade.exit_price == 1.0900
        assert trade.profit == pytest.approx(500.0)
        assert trade.is_win is True
        assert trade.contract_size == 100000
        assert trade.entry_time == bars[0].timestamp
        assert trade.exit_time == bars[1].timestamp
        assert session.trades == [trade]

    def test_sell_loses_when_price_rises(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0900, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)

        trade = executor.execute(session, USD_ACCOUNT, 0, bars, _market(Direction.SELL, 1.0850))

        assert trade.profit == pytest.approx(-500.0)
        assert trade.is_win is False

    def test_zero_profit_is_a_loss(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0850, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)

        trade = executor.execute(session, USD_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0850))

        assert trade.profit == 0
        assert trade.is_win is False
        assert session.losses == 1

    def test_clicked_level_used_as_entry(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850, low=1.0840, high=1.0860), make_bar(eurusd, 1.0870, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)

        trade = executor.execute(session, USD_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0840, lots=0.1))

        assert trade.entry_price == 1.0840
        assert trade.profit == pytest.approx(0.0030 * 10000)


class TestCurrencyConversion:
    """USD-quoted profits convert into a GBP account."""

    def test_usd_profit_into_gbp(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0900, index=1)]
        session = new_session("EURUSD", GBP_ACCOUNT)

        trade = executor.execute(session, GBP_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0850))

        assert trade.profit == pytest.approx(395.0)
        assert session.total_pnl == pytest.approx(395.0)
        assert session.balance == pytest.approx(10395.0)

    def test_currency_symbol_account(self, executor, eurusd, make_bar):
        account = Account(currency="£")
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0900, index=1)]

        trade = executor.execute(new_session("EURUSD", account), account, 0, bars,
                                 _market(Direction.BUY, 1.0850))

        assert trade.profit == pytest.approx(395.0)

    def test_nq_never_converted(self, executor, make_bar):
        nq = get_instrument_profile("NQ")
        bars = [make_bar(nq, 16500.0, index=0), make_bar(nq, 16510.0, index=1)]

        trade = executor.execute(new_session("NQ", GBP_ACCOUNT), GBP_ACCOUNT, 0, bars,
                                 _market(Direction.BUY, 16500.0))

        assert trade.profit == pytest.approx(10 * 20)

    def test_win_flag_uses_raw_profit(self, eurusd, make_bar):
        executor = TradeExecutionEngine(converter=CurrencyConverter({("USD", "GBP"): 0.0}))
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0900, index=1)]

        trade = executor.execute(new_session("EURUSD", GBP_ACCOUNT), GBP_ACCOUNT, 0, bars,
                                 _market(Direction.BUY, 1.0850))

        assert trade.profit == 0
        assert trade.is_win is True


class TestLimitAndStopOrders:
    """Limit and stop orders fill only if the next bar reaches the trigger."""

    def test_buy_limit_not_reached(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850), make_bar(eurusd, 1.0830, low=1.0820, high=1.0860, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)
        request = OrderRequest(Direction.BUY, OrderType.LIMIT, 1.0800, lots=1.0, limit_price=1.0800)

        assert executor.execute(session, USD_ACCOUNT, 0, bars, request) is None
        assert session.trades == []

    def test_buy_limit_filled(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850), make_bar(eurusd, 1.0830, low=1.0795, high=1.0860, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)
        request = OrderRequest(Direction.BUY, OrderType.LIMIT, 1.0800, lots=1.0, limit_price=1.0800)

        trade = executor.execute(session, USD_ACCOUNT, 0, bars, request)

        assert trade.entry_price == 1.0800
        assert trade.limit_price == 1.0800
        assert trade.stop_price is None
        assert trade.profit == pytest.approx(0.0030 * 100000)

    def test_limit_defaults_to_requested_price(self, eurusd, make_bar):
        next_bar = make_bar(eurusd, 1.0830, low=1.0795, high=1.0860, index=1)
        request = OrderRequest(Direction.BUY, OrderType.LIMIT, 1.0800)
        assert resolve_entry_price(request, next_bar) == 1.0800

    def test_sell_limit(self, eurusd, make_bar):
        next_bar = make_bar(eurusd, 1.0830, low=1.0800, high=1.0860, index=1)
        assert resolve_entry_price(OrderRequest(Direction.SELL, OrderType.LIMIT, 1.0860), next_bar) == 1.0860
        with pytest.raises(OrderNotFilledError):
            resolve_entry_price(OrderRequest(Direction.SELL, OrderType.LIMIT, 1.0870), next_bar)

    def test_buy_stop(self, eurusd, make_bar):
        next_bar = make_bar(eurusd, 1.0830, low=1.0800, high=1.0860, index=1)
        request = OrderRequest(Direction.BUY, OrderType.STOP_LOSS, 1.0850, stop_price=1.0855)
        assert resolve_entry_price(request, next_bar) == 1.0855
        with pytest.raises(OrderNotFilledError) as exc_info:
            resolve_entry_price(OrderRequest(Direction.BUY, OrderType.STOP_LOSS, 1.0870), next_bar)
        assert exc_info.value.trigger_price == 1.0870
        assert exc_info.value.recoverable is True

    def test_sell_stop(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850), make_bar(eurusd, 1.0810, low=1.0800, high=1.0860, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)
        request = OrderRequest(Direction.SELL, OrderType.STOP_LOSS, 1.0850, lots=1.0, stop_price=1.0820)

        trade = executor.execute(session, USD_ACCOUNT, 0, bars, request)

        assert trade.entry_price == 1.0820
        assert trade.stop_price == 1.0820
        assert trade.limit_price is None
        assert trade.profit == pytest.approx(0.0010 * 100000)
        assert trade.is_win is True


class TestExecutionPreconditions:
    """Unresolvable requests are no-ops."""

    def test_no_next_bar(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850, index=0), make_bar(eurusd, 1.0860, index=1)]
        session = new_session("EURUSD", USD_ACCOUNT)

        assert executor.execute(session, USD_ACCOUNT, 1, bars, _market(Direction.BUY, 1.0860)) is None
        assert session.trades == []

    def test_build_trade_raises_insufficient_bars(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850)]
        with pytest.raises(InsufficientBarsError) as exc_info:
            executor.build_trade(USD_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0850))
        assert exc_info.value.bar_count == 1

    def test_negative_index(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850), make_bar(eurusd, 1.0860, index=1)]
        with pytest.raises(InsufficientBarsError):
            executor.build_trade(USD_ACCOUNT, -1, bars, _market(Direction.BUY, 1.0850))

    def test_non_positive_lots(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850), make_bar(eurusd, 1.0860, index=1)]
        with pytest.raises(InvalidOrderError):
            executor.build_trade(USD_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0850, lots=0))

    def test_rejected_order_is_logged_not_raised(self, executor, eurusd, make_bar):
        bars = [make_bar(eurusd, 1.0850)]
        session = new_session("EURUSD", USD_ACCOUNT)

        with patch.object(executor, "logger") as mock_logger:
            result = executor.execute(session, USD_ACCOUNT, 0, bars, _market(Direction.BUY, 1.0850))

        assert result is None
        mock_logger.info.assert_called_once()
        assert mock_logger.info.call_args[1]["error_type"] == "InsufficientBarsError"


class TestSessionAggregates:
    """Aggregates and grade are recomputed after each trade."""

    def test_grade_after_ten_trades(self, executor, eurusd, make_bar):
        session = new_session("EURUSD", USD_ACCOUNT)
        bars = []
        for i in range(11):
            # Eight rising closes then two flat ones
            close = 1.0800 + 0.0010 * min(i, 8)
            bars.append(make_bar(eurusd, close, index=i))

        for i in range(10):
            executor.execute(session, USD_ACCOUNT, i, bars, _market(Direction.BUY, bars[i].close, lots=0.1))
            if i < 9:
                assert session.grade is Grade.NOT_AVAILABLE

        assert len(session.trades) == 10
        assert session.wins == 8
        assert session.win_rate == 80.0
        assert session.grade is Grade.A_STAR
        assert session.total_pnl == pytest.approx(8 * 0.0010 * 10000)
        assert session.balance == pytest.approx(10000 + 80)
