"""
Runtime settings from environment variables.

STOCKFOLIO_DATA_DIR        directory for per-user snapshot files (default: data)
STOCKFOLIO_PRICE_SOURCE    'alphavantage' (default) or 'csv'
ALPHAVANTAGE_API_KEY       API key for the Alpha Vantage source
STOCKFOLIO_ALPHAVANTAGE_URL  override the Alpha Vantage endpoint
STOCKFOLIO_PRICE_TIMEOUT   seconds per price request (default: 15)
STOCKFOLIO_PRICES_DIR      directory of <SYMBOL>.csv files for the csv source (default: prices)
STOCKFOLIO_LOG_LEVEL       logging level name (default: WARNING)
"""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from stockfolio.errors import InvalidArgumentError
from stockfolio.pricing import AlphaVantagePriceSource, CsvPriceSource, PriceSource
from stockfolio.pricing.alphavantage import DEFAULT_BASE_URL, DEFAULT_TIMEOUT
from stockfolio.store import JsonFileStore

PRICE_SOURCES = ("alphavantage", "csv")


@dataclass(frozen=True)
class Settings:
    data_dir: Path = Path("data")
    price_source: str = "alphavantage"
    api_key: str | None = None
    alphavantage_url: str = DEFAULT_BASE_URL
    price_timeout: float = DEFAULT_TIMEOUT
    prices_dir: Path = Path("prices")
    log_level: str = "WARNING"

    def __post_init__(self) -> None:
        if self.price_source not in PRICE_SOURCES:
            raise InvalidArgumentError(
                f"Unknown price source {self.price_source!r}; expected one of {', '.join(PRICE_SOURCES)}"
            )
        if self.price_timeout <= 0:
            raise InvalidArgumentError("Price timeout must be positive.")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise InvalidArgumentError(f"Unknown log level {self.log_level!r}")

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        env = os.environ if environ is None else environ
        raw_timeout = env.get("STOCKFOLIO_PRICE_TIMEOUT", "").strip()
        try:
            timeout = float(raw_timeout) if raw_timeout else DEFAULT_TIMEOUT
        except ValueError as e:
            raise InvalidArgumentError(f"STOCKFOLIO_PRICE_TIMEOUT must be a number, got {raw_timeout!r}") from e
        return cls(
            data_dir=Path(env.get("STOCKFOLIO_DATA_DIR", "").strip() or "data"),
            price_source=(env.get("STOCKFOLIO_PRICE_SOURCE", "").strip().lower() or "alphavantage"),
            api_key=env.get("ALPHAVANTAGE_API_KEY", "").strip() or None,
            alphavantage_url=env.get("STOCKFOLIO_ALPHAVANTAGE_URL", "").strip() or DEFAULT_BASE_URL,
            price_timeout=timeout,
            prices_dir=Path(env.get("STOCKFOLIO_PRICES_DIR", "").strip() or "prices"),
            log_level=(env.get("STOCKFOLIO_LOG_LEVEL", "").strip().upper() or "WARNING"),
        )

    def build_price_source(self) -> PriceSource:
        if self.price_source == "csv":
            return CsvPriceSource(self.prices_dir)
        return AlphaVantagePriceSource(
            self.api_key,
            base_url=self.alphavantage_url,
            timeout=self.price_timeout,
        )

    def build_store(self) -> JsonFileStore:
        return JsonFileStore(self.data_dir)
