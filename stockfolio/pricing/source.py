"""
Price source abstraction.

PriceSource ABC: get_quote / get_price. Implementations only fetch; the base
class normalizes the symbol and drops unusable prices, so every kind of
failure looks the same to callers: None.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from stockfolio.errors import InvalidArgumentError
from stockfolio.money import normalize_symbol, to_decimal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Quote:
    """Current price for a symbol. price is always > 0."""

    symbol: str
    price: Decimal
    name: str | None = None


def usable_price(price: object) -> Decimal | None:
    """Price as Decimal if it is finite and positive, else None."""
    try:
        d = to_decimal(price)
    except InvalidArgumentError:
        return None
    return d if d > 0 else None


class PriceSource(ABC):
    """
    Abstract quote provider. Same interface for live, offline and in-memory sources.
    Implementations: StaticPriceSource, AlphaVantagePriceSource, CsvPriceSource.
    """

    def get_quote(self, symbol: str) -> Quote | None:
        """Quote for symbol, or None when no usable price can be had right now."""
        sym = normalize_symbol(symbol)
        quote = self._fetch_quote(sym)
        if quote is None:
            return None
        price = usable_price(quote.price)
        if price is None:
            logger.warning("Discarding unusable price %r for %s", quote.price, sym)
            return None
        return Quote(symbol=normalize_symbol(quote.symbol or sym), price=price, name=quote.name)

    def get_price(self, symbol: str) -> Decimal | None:
        """Current price for symbol, or None."""
        quote = self.get_quote(symbol)
        return quote.price if quote is not None else None

    @abstractmethod
    def _fetch_quote(self, symbol: str) -> Quote | None:
        """
        Fetch a quote for an already-normalized symbol.
        Return None on any failure; do not raise for transport or parse errors.
        """
        ...
