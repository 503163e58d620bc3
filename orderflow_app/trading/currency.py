"""
Fixed-rate currency conversion for trade P&L.

Rates are a static table keyed by (from, to) currency pair. The default table
holds the single USD -> GBP rate the simulator has always applied; pairs
without a rate pass through unchanged.
"""

from typing import Mapping, Optional

CURRENCY_SYMBOLS = {
    "£": "GBP",
    "$": "USD",
    "€": "EUR",
}

DEFAULT_RATES: dict[tuple[str, str], float] = {
    ("USD", "GBP"): 0.79,
}


def normalize_currency(currency: str) -> str:
    """Map a currency symbol or code to its upper-case ISO code."""
    code = CURRENCY_SYMBOLS.get(currency.strip(), currency.strip())
    return code.upper()


class CurrencyConverter:
    """Converts amounts between currencies using an injected rate table."""

    def __init__(self, rates: Optional[Mapping[tuple[str, str], float]] = None) -> None:
        table = DEFAULT_RATES if rates is None else rates
        self.rates = {
            (normalize_currency(src), normalize_currency(dst)): float(rate)
            for (src, dst), rate in table.items()
        }

    @classmethod
    def from_nested(cls, rates: Mapping[str, Mapping[str, float]]) -> "CurrencyConverter":
        """Build from the {from: {to: rate}} shape used in configuration."""
        return cls({
            (src, dst): rate
            for src, targets in rates.items()
            for dst, rate in targets.items()
        })

    def rate(self, from_currency: Optional[str], to_currency: str) -> float:
        if from_currency is None:
            return 1.0
        src = normalize_currency(from_currency)
        dst = normalize_currency(to_currency)
        if src == dst:
            return 1.0
        return self.rates.get((src, dst), 1.0)

    def convert(self, amount: float, from_currency: Optional[str], to_currency: str) -> float:
        """
        Convert an amount into the target currency.

        Args:
            amount: Amount in from_currency
            from_currency: Source currency; None means already in target
            to_currency: Target (account) currency

        Returns:
            Converted amount; unchanged when no rate is registered
        """
        return amount * self.rate(from_currency, to_currency)
