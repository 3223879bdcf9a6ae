"""
Offline example: prices from CSV files, ledger saved as JSON.

Uses examples/data/<SYMBOL>.csv (latest close is the current price) and writes
the user file to a temporary directory.
"""

from __future__ import annotations

import tempfile
from pathlib import Path

from reporting import print_profit_loss, print_summary
from stockfolio import JsonFileStore, Ledger
from stockfolio.pricing import CsvPriceSource, load_price_history


def main() -> None:
    data_dir = Path(__file__).resolve().parent / "data"
    prices = CsvPriceSource(data_dir)

    history = load_price_history(data_dir / "AAPL.csv")
    print(f"AAPL: {len(history)} bars, {history.index[0].date()} .. {history.index[-1].date()}")

    with tempfile.TemporaryDirectory() as tmp:
        store = JsonFileStore(tmp)
        ledger = Ledger.create("offline", store, prices, "25000")
        for symbol, quantity in (("AAPL", 40), ("MSFT", 20)):
            print(ledger.buy(symbol, quantity).message)
        print(ledger.sell("AAPL", 10).message)

        reopened = Ledger.open("offline", store, prices)
        print(f"Reloaded from {store.path_for('offline').name}: cash={reopened.cash:.2f}")
        print_summary(reopened)
        print_profit_loss(reopened)
        print(reopened.valuation().to_dataframe())
        print(reopened.transaction_log.to_dataframe())


if __name__ == "__main__":
    main()
