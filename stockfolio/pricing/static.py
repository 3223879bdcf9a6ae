"""
In-memory price source for paper trading and tests.

Prices come from a dict the caller owns or updates through set_price/remove.
"""

from __future__ import annotations

from decimal import Decimal

from stockfolio.money import normalize_symbol, to_decimal
from stockfolio.pricing.source import PriceSource, Quote


class StaticPriceSource(PriceSource):
    """
    Serves prices from a symbol -> price mapping. A missing symbol is unavailable.
    Optional names are reported on the quote.
    """

    def __init__(
        self,
        prices: dict[str, Decimal | float | int | str] | None = None,
        *,
        names: dict[str, str] | None = None,
    ) -> None:
        self._prices: dict[str, Decimal] = {}
        self._names = {normalize_symbol(s): n for s, n in (names or {}).items()}
        for sym, price in (prices or {}).items():
            self.set_price(sym, price)

    def set_price(self, symbol: str, price: Decimal | float | int | str) -> None:
        # Non-positive prices are stored as-is; get_quote filters them.
        self._prices[normalize_symbol(symbol)] = to_decimal(price)

    def remove(self, symbol: str) -> None:
        self._prices.pop(normalize_symbol(symbol), None)

    def _fetch_quote(self, symbol: str) -> Quote | None:
        price = self._prices.get(symbol)
        if price is None:
            return None
        return Quote(symbol=symbol, price=price, name=self._names.get(symbol))
