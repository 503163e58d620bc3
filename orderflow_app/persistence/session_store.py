"""
Session persistence through the key-value store contract.

Sessions are stored under ``session:<id>`` as JSON records using the
camelCase field names of the session history format, with trades nested.
Writes never raise: a failing store is logged and reported as False so that
trading is never interrupted by persistence.
"""

import json
from typing import Any, Optional

import structlog

from ..errors import PersistenceError
from ..trading.models import (
    DEFAULT_TIME_PERIOD,
    Direction,
    Grade,
    OrderType,
    Session,
    StrategyConfig,
    Trade,
)
from ..utils.time import format_timestamp, parse_timestamp
from .kv_store import InMemoryKeyValueStore, KeyValueStore

SESSION_KEY_PREFIX = "session:"


def session_key(session_id: str, prefix: str = SESSION_KEY_PREFIX) -> str:
    return f"{prefix}{session_id}"


def strategy_to_record(strategy: StrategyConfig) -> dict[str, Any]:
    return {
        "name": strategy.name,
        "description": strategy.description,
        "trigger": strategy.trigger,
        "sensitivity": strategy.sensitivity,
        "zoneFilter": strategy.zone_filter,
        "stopLogic": strategy.stop_logic,
        "orderType": strategy.order_type.value,
        "limitPrice": strategy.limit_price,
        "stopPrice": strategy.stop_price,
    }


def strategy_from_record(record: dict[str, Any]) -> StrategyConfig:
    return StrategyConfig(
        name=record["name"],
        description=record.get("description", ""),
        trigger=record["trigger"],
        sensitivity=str(record["sensitivity"]),
        zone_filter=record["zoneFilter"],
        stop_logic=record.get("stopLogic", "low-of-bar"),
        order_type=OrderType(record.get("orderType", OrderType.MARKET.value)),
        limit_price=record.get("limitPrice"),
        stop_price=record.get("stopPrice"),
    )


def trade_to_record(trade: Trade) -> dict[str, Any]:
    return {
        "id": trade.id,
        "type": trade.direction.value,
        "orderType": trade.order_type.value,
        "requestedPrice": trade.requested_price,
        "entryPrice": trade.entry_price,
        "entryTime": format_timestamp(trade.entry_time),
        "entryIndex": trade.entry_index,
        "exitPrice": trade.exit_price,
        "exitTime": format_timestamp(trade.exit_time),
        "lots": trade.lots,
        "contractSize": trade.contract_size,
        "profit": trade.profit,
        "isWin": trade.is_win,
        "instrument": trade.instrument,
        "limitPrice": trade.limit_price,
        "stopPrice": trade.stop_price,
    }


def trade_from_record(record: dict[str, Any]) -> Trade:
    return Trade(
        id=str(record["id"]),
        direction=Direction(record["type"]),
        order_type=OrderType(record.get("orderType", OrderType.MARKET.value)),
        requested_price=record.get("requestedPrice", record["entryPrice"]),
        entry_price=record["entryPrice"],
        entry_time=parse_timestamp(record["entryTime"]),
        entry_index=int(record["entryIndex"]),
        exit_price=record["exitPrice"],
        exit_time=parse_timestamp(record["exitTime"]),
        lots=record["lots"],
        contract_size=record["contractSize"],
        profit=record["profit"],
        is_win=bool(record["isWin"]),
        instrument=record["instrument"],
        limit_price=record.get("limitPrice"),
        stop_price=record.get("stopPrice"),
    )


def session_to_record(session: Session) -> dict[str, Any]:
    return {
        "id": session.id,
        "startTime": format_timestamp(session.start_time),
        "instrument": session.instrument,
        "timePeriod": session.time_period,
        "strategy": strategy_to_record(session.strategy) if session.strategy else None,
        "trades": [trade_to_record(t) for t in session.trades],
        "balance": session.balance,
        "winRate": session.win_rate,
        "totalPnL": session.total_pnl,
        "grade": session.grade.value,
    }


def session_from_record(record: dict[str, Any]) -> Session:
    """
    Rebuild a Session from its stored record.

    Raises:
        KeyError, ValueError, TypeError: the record is malformed
    """
    strategy = record.get("strategy")
    return Session(
        id=str(record["id"]),
        start_time=parse_timestamp(record["startTime"]),
        instrument=record["instrument"],
        balance=record["balance"],
        strategy=strategy_from_record(strategy) if strategy else None,
        trades=[trade_from_record(t) for t in record["trades"]],
        win_rate=record["winRate"],
        total_pnl=record["totalPnL"],
        grade=Grade(record["grade"]),
        time_period=record.get("timePeriod", DEFAULT_TIME_PERIOD),
    )


class SessionStore:
    """Saves and loads sessions through a KeyValueStore."""

    def __init__(self, kv_store: Optional[KeyValueStore] = None,
                 key_prefix: str = SESSION_KEY_PREFIX):
        self.kv_store = kv_store if kv_store is not None else InMemoryKeyValueStore()
        self.key_prefix = key_prefix
        self.logger = structlog.get_logger("session.store")

    def save(self, session: Session) -> bool:
        """
        Persist a session, replacing any earlier record with the same ID.

        Returns:
            True if stored, False if the store failed (logged, not raised)
        """
        key = session_key(session.id, self.key_prefix)
        try:
            payload = json.dumps(session_to_record(session))
            self.kv_store.set(key, payload)
        except Exception as e:
            error = e if isinstance(e, PersistenceError) else PersistenceError(
                str(e), operation="set", key=key
            )
            self.logger.error(
                "Failed to store session",
                session_id=session.id,
                key=key,
                operation=error.operation,
                error=str(error),
                error_type=type(e).__name__,
            )
            return False

        self.logger.info(
            "Session stored",
            session_id=session.id,
            trade_count=len(session.trades),
            grade=session.grade.value,
        )
        return True

    def load(self, session_id: str) -> Optional[Session]:
        """Load one session; None when absent or malformed."""
        key = session_key(session_id, self.key_prefix)
        try:
            raw = self.kv_store.get(key)
        except Exception as e:
            self.logger.error("Failed to get session", key=key, error=str(e))
            return None

        if raw is None:
            return None
        return self._decode(key, raw)

    def load_all(self) -> list[Session]:
        """
        Load every stored session, most recent start time first.

        Malformed entries are skipped.
        """
        try:
            keys = self.kv_store.list(self.key_prefix)
        except Exception as e:
            self.logger.error("Failed to list sessions", prefix=self.key_prefix, error=str(e))
            return []

        sessions = []
        for key in sorted(keys):
            try:
                raw = self.kv_store.get(key)
            except Exception as e:
                self.logger.error("Failed to get session", key=key, error=str(e))
                continue
            if raw is None:
                continue
            session = self._decode(key, raw)
            if session is not None:
                sessions.append(session)

        sessions.sort(key=lambda s: s.start_time, reverse=True)
        return sessions

    def _decode(self, key: str, raw: str) -> Optional[Session]:
        try:
            return session_from_record(json.loads(raw))
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self.logger.warning("Dropping malformed session record", key=key, error=str(e))
            return None
