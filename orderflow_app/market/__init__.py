"""
Synthetic market data module.

Instrument catalog, mean-reverting bar generation, and intra-bar footprint
synthesis for the active session.
"""
