"""
Offline price source: latest close from per-symbol OHLC(V) CSV files.

Expects <directory>/<SYMBOL>.csv with a date column and at least a close
column. Column names are case-insensitive; common aliases (c, vol, ...) are mapped.
"""

from __future__ import annotations

import logging
from pathlib import Path

import pandas as pd

from stockfolio.pricing.source import PriceSource, Quote, usable_price

logger = logging.getLogger(__name__)

# Standard column names; lowercase for normalization
OHLCV = ("open", "high", "low", "close", "volume")


def _normalize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """Ensure columns are lowercase; map common aliases to open/high/low/close/volume."""
    out = df.copy()
    out.columns = [str(c).lower().strip() for c in out.columns]
    renames = {
        "o": "open",
        "h": "high",
        "l": "low",
        "c": "close",
        "v": "volume",
        "vol": "volume",
    }
    out = out.rename(columns={k: v for k, v in renames.items() if k in out.columns})
    return out


def load_price_history(
    path: str | Path,
    *,
    date_column: str | None = None,
    datetime_format: str | None = None,
) -> pd.DataFrame:
    """
    Load OHLC(V) rows from a CSV file.

    Parameters
    ----------
    path : str or Path
        Path to the CSV file.
    date_column : str, optional
        Column to use as datetime index. If None, 'date' or the first column is used.
    datetime_format : str, optional
        Format for parsing dates (e.g. '%Y-%m-%d').

    Returns
    -------
    pd.DataFrame
        Rows sorted by a DatetimeIndex named 'datetime', with whichever of
        open, high, low, close, volume the file provides.
    """
    df = _normalize_columns(pd.read_csv(path))
    date_col = date_column.lower() if date_column else ("date" if "date" in df.columns else df.columns[0])
    if date_col not in df.columns:
        date_col = df.columns[0]
    df["datetime"] = pd.to_datetime(df[date_col], format=datetime_format)
    df = df.drop(columns=[date_col], errors="ignore")
    df = df.set_index("datetime").sort_index()
    df = df[[c for c in OHLCV if c in df.columns]]
    df.index.name = "datetime"
    return df


class CsvPriceSource(PriceSource):
    """
    Serves the most recent close found in <directory>/<SYMBOL>.csv.
    Missing file, empty file, missing close column or unparseable data: unavailable.
    """

    def __init__(self, directory: str | Path, *, datetime_format: str | None = None) -> None:
        self._directory = Path(directory)
        self._datetime_format = datetime_format

    def path_for(self, symbol: str) -> Path:
        return self._directory / f"{symbol}.csv"

    def _fetch_quote(self, symbol: str) -> Quote | None:
        path = self.path_for(symbol)
        if not path.exists():
            logger.warning("No price file for %s at %s", symbol, path)
            return None
        try:
            df = load_price_history(path, datetime_format=self._datetime_format)
        except (OSError, ValueError) as e:
            logger.warning("Could not read price file %s: %s", path, e)
            return None
        if df.empty or "close" not in df.columns:
            logger.warning("Price file %s has no close prices", path)
            return None
        closes = df["close"].dropna()
        if closes.empty:
            logger.warning("Price file %s has no close prices", path)
            return None
        # Through str so the Decimal matches what the file says.
        price = usable_price(str(closes.iloc[-1]))
        if price is None:
            logger.warning("Unusable close %r in %s", closes.iloc[-1], path)
            return None
        return Quote(symbol=symbol, price=price, name=None)
