"""
Price sources: where the ledger gets current prices.

PriceSource interface; in-memory, Alpha Vantage (live) and CSV (offline) implementations.
"""

from stockfolio.pricing.source import PriceSource, Quote
from stockfolio.pricing.static import StaticPriceSource
from stockfolio.pricing.alphavantage import AlphaVantagePriceSource
from stockfolio.pricing.csv_source import CsvPriceSource, load_price_history

__all__ = [
    "PriceSource",
    "Quote",
    "StaticPriceSource",
    "AlphaVantagePriceSource",
    "CsvPriceSource",
    "load_price_history",
]
