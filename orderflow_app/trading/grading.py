"""Performance grading from session win rate."""

from .models import Grade

MIN_TRADES_FOR_GRADE = 10

# Inclusive lower bounds, checked highest first
GRADE_THRESHOLDS: tuple[tuple[float, Grade], ...] = (
    (75.0, Grade.A_STAR),
    (65.0, Grade.A),
    (55.0, Grade.B),
    (45.0, Grade.C),
    (35.0, Grade.D),
)


def grade(win_rate: float, trade_count: int, min_trades: int = MIN_TRADES_FOR_GRADE) -> Grade:
    """
    Map a win rate to a letter grade.

    Args:
        win_rate: Win rate in percent (0-100)
        trade_count: Number of trades in the session
        min_trades: Trades required before a grade is given

    Returns:
        Grade.NOT_AVAILABLE below min_trades, otherwise A* through F
    """
    if trade_count < min_trades:
        return Grade.NOT_AVAILABLE

    for threshold, letter in GRADE_THRESHOLDS:
        if win_rate >= threshold:
            return letter

    return Grade.F
