"""
Order-Flow Simulator - Discretionary Footprint Backtesting Engine

Generates synthetic mean-reverting bar sequences for a catalog of
instruments, synthesizes intra-bar footprint volume profiles, replays the
bars one at a time, and resolves user trades against the next bar before
grading the session and storing it in a key-value session store.
"""

__version__ = "0.1.0"
__author__ = "Order-Flow Simulator Team"
