"""
Paper portfolio example: deposit, buy, sell against an in-memory price source.

Shows: Ledger.create with an InMemoryStore, StaticPriceSource price moves,
LedgerResult handling, rejections, and the printed reports and metrics.
"""

from __future__ import annotations

from reporting import compute_account_metrics, print_history, print_profit_loss, print_summary
from stockfolio import InMemoryStore, Ledger, StaticPriceSource
from stockfolio.types import LedgerResult


def show(result: LedgerResult) -> None:
    status = result.status.value.upper()
    extra = f" [{result.error.value}]" if result.error is not None else ""
    print(f"  {status}{extra}: {result.message}")


def main() -> None:
    # Simulated latest prices (in real use, AlphaVantagePriceSource or CsvPriceSource)
    prices = StaticPriceSource({"AAPL": "150", "MSFT": "300"}, names={"AAPL": "Apple Inc."})
    store = InMemoryStore()
    ledger = Ledger.create("demo", store, prices, "10000")

    print("--- Buys ---")
    show(ledger.buy("AAPL", 10))
    prices.set_price("AAPL", "200")
    show(ledger.buy("AAPL", 5))
    show(ledger.buy("MSFT", 100))  # too expensive
    print(f"Max affordable MSFT: {ledger.max_affordable_shares('MSFT')}")
    show(ledger.buy("MSFT", 2))

    print("\n--- Sells ---")
    prices.set_price("AAPL", "180")
    show(ledger.sell("TSLA", 1))  # never bought
    show(ledger.sell("AAPL", 15))

    prices.remove("MSFT")
    show(ledger.sell("MSFT", 1))  # no price: refused

    print_summary(ledger)
    print_profit_loss(ledger)
    print_history(ledger)

    prices.set_price("MSFT", "310")
    metrics = compute_account_metrics(ledger)
    print(f"Total value: {metrics.total_value:.2f}  P/L vs deposits: {metrics.total_pnl:.2f} ({metrics.total_return_pct:.2f}%)")
    for symbol, weight in metrics.weights.items():
        print(f"  {symbol:<5} {weight:.1%}")
    print(f"Snapshots saved: {store.save_count}")


if __name__ == "__main__":
    main()
