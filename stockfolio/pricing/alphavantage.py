"""
Live price source: Alpha Vantage GLOBAL_QUOTE over HTTP.

Blocking requests with a bounded timeout. Every failure (transport error,
timeout, non-200, rate-limit note, error message, malformed body, missing
price) is logged and reported as None; no retries in place.
"""

from __future__ import annotations

import logging

import requests

from stockfolio.errors import InvalidArgumentError
from stockfolio.money import to_decimal
from stockfolio.pricing.source import PriceSource, Quote

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://www.alphavantage.co/query"
DEFAULT_TIMEOUT = 15.0

# Keys in the GLOBAL_QUOTE body.
QUOTE_KEY = "Global Quote"
SYMBOL_FIELD = "01. symbol"
PRICE_FIELD = "05. price"


class AlphaVantagePriceSource(PriceSource):
    """
    Quote source backed by the Alpha Vantage REST API.

    - api_key: required; without one every lookup is unavailable.
    - timeout: seconds per request (connect + read).
    - session: optional requests.Session (or compatible object with .get) for reuse/testing.

    GLOBAL_QUOTE does not return a company name, so quotes carry name=None.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        self._api_key = (api_key or "").strip()
        self._base_url = base_url
        self._timeout = timeout
        self._session = session or requests.Session()
        if not self._api_key:
            logger.warning("AlphaVantagePriceSource: API key is missing; all price lookups will fail.")

    def _fetch_quote(self, symbol: str) -> Quote | None:
        if not self._api_key:
            logger.error("API key is missing. Cannot fetch price for %s", symbol)
            return None

        params = {"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self._api_key}
        try:
            response = self._session.get(self._base_url, params=params, timeout=self._timeout)
        except requests.Timeout:
            logger.warning("Price request for %s timed out after %ss", symbol, self._timeout)
            return None
        except requests.RequestException as e:
            logger.warning("Price request for %s failed: %s", symbol, e)
            return None

        if response.status_code != 200:
            logger.warning(
                "Error fetching price for %s. HTTP status %s: %s",
                symbol,
                response.status_code,
                response.text[:200],
            )
            return None

        try:
            body = response.json()
        except ValueError:
            logger.warning("Malformed JSON in price response for %s", symbol)
            return None
        return self._parse_quote(symbol, body)

    def _parse_quote(self, symbol: str, body: object) -> Quote | None:
        if not isinstance(body, dict):
            logger.warning("Unexpected price response for %s: %r", symbol, body)
            return None

        quote = body.get(QUOTE_KEY)
        if not isinstance(quote, dict) or not quote:
            if "Note" in body or "Information" in body:
                logger.warning(
                    "API note for %s (likely rate limit): %s",
                    symbol,
                    body.get("Note") or body.get("Information"),
                )
            elif "Error Message" in body:
                logger.warning("API error for %s: %s", symbol, body["Error Message"])
            else:
                logger.warning("No '%s' data for %s. Is the symbol valid?", QUOTE_KEY, symbol)
            return None

        fetched_symbol = quote.get(SYMBOL_FIELD)
        price_str = quote.get(PRICE_FIELD)
        if not fetched_symbol or price_str is None:
            logger.warning("Could not parse symbol or price from response for %s", symbol)
            return None
        try:
            price = to_decimal(price_str)
        except InvalidArgumentError:
            logger.warning("Error parsing price %r for %s", price_str, symbol)
            return None
        logger.debug("Quote for %s: %s", fetched_symbol, price)
        return Quote(symbol=str(fetched_symbol), price=price, name=None)
