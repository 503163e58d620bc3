"""
Centralized logging configuration for the order-flow simulator.

All components log through structlog on top of the standard library logging
backend. Call configure_logging() once at startup; modules obtain loggers
with get_logger(__name__) or one of the subsystem-bound helpers below.
"""
import logging
import sys
from typing import Any, Optional

import structlog
from structlog.types import FilteringBoundLogger


def configure_logging(
    level: str = "INFO",
    format_json: bool = False,
    include_timestamp: bool = True,
    include_caller: bool = False,
    extra_processors: Optional[list] = None
) -> None:
    """
    Configure structlog for the entire application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_json: If True, output JSON format; otherwise human-readable
        include_timestamp: Include timestamp in log output
        include_caller: Include caller information (filename, line number)
        extra_processors: Additional structlog processors to include
    """
    log_level = getattr(logging, level.upper())

    logging.basicConfig(
        level=log_level,
        stream=sys.stdout,
        format="%(message)s"
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if include_timestamp:
        processors.append(structlog.processors.TimeStamper(fmt="iso"))

    if include_caller:
        processors.append(structlog.processors.CallsiteParameterAdder(
            parameters=[structlog.processors.CallsiteParameter.FILENAME,
                        structlog.processors.CallsiteParameter.LINENO]
        ))

    if extra_processors:
        processors.extend(extra_processors)

    if format_json:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> FilteringBoundLogger:
    """
    Get a configured structlog logger instance.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Configured structlog logger instance
    """
    return structlog.get_logger(name)


def get_execution_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the trade execution subsystem."""
    return get_logger(name).bind(
        subsystem="execution",
        audit_trail=True
    )


def get_session_logger(name: str) -> FilteringBoundLogger:
    """Logger bound to the session lifecycle / playback subsystem."""
    return get_logger(name).bind(
        subsystem="session",
        audit_trail=True
    )


def log_trade_execution(
    logger: FilteringBoundLogger,
    session_id: str,
    trade_id: str,
    direction: str,
    order_type: str,
    entry_price: float,
    exit_price: float,
    profit: float,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a recorded trade with standardized format.

    Args:
        logger: Structlog logger instance
        session_id: Session the trade was appended to
        trade_id: ID of the recorded trade
        direction: BUY or SELL
        order_type: market, limit or stop-loss
        entry_price: Resolved entry price
        exit_price: Next bar close
        profit: Profit in account currency
        context: Additional context data
    """
    bound_logger = logger.bind(
        session_id=session_id,
        trade_id=trade_id,
        direction=direction,
        order_type=order_type,
        entry_price=entry_price,
        exit_price=exit_price,
        profit=profit,
        trade_result="WIN" if profit > 0 else "LOSS",
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("Trade recorded")


def log_state_transition(
    logger: FilteringBoundLogger,
    session_id: str,
    from_state: str,
    to_state: str,
    trigger: str,
    context: Optional[dict[str, Any]] = None
) -> None:
    """
    Log a playback state transition with standardized format.

    Args:
        logger: Structlog logger instance
        session_id: ID of the active session
        from_state: Current state
        to_state: Target state
        trigger: What triggered the transition
        context: Additional context data
    """
    bound_logger = logger.bind(
        session_id=session_id,
        from_state=from_state,
        to_state=to_state,
        trigger=trigger,
    )

    if context:
        bound_logger = bound_logger.bind(context=context)

    bound_logger.info("State transition")
