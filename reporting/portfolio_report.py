"""
Portfolio reports: print summary, transaction history and profit/loss for a ledger.

Each printer returns the numbers it printed so callers can use them directly.
"""

from __future__ import annotations

from stockfolio.ledger import Ledger
from stockfolio.transactions import DepositTransaction, Transaction
from stockfolio.valuation import HoldingsValue, ProfitLoss

SUMMARY_RULE = "-" * 85
PL_RULE = "-" * 107
HISTORY_RULE = "-" * 50


def _money(value) -> str:
    return f"${value:.2f}"


def _signed(value) -> str:
    if value == 0:
        value = abs(value)
    return f"{'+' if value >= 0 else ''}{value:.2f}"


def format_transaction(tx: Transaction) -> str:
    """One history line, e.g. '[2024-01-15 10:00:00] BUY  10 AAPL @ $150.00 (Total: $1500.00) ID: ...'."""
    ts = tx.timestamp.strftime("%Y-%m-%d %H:%M:%S")
    if isinstance(tx, DepositTransaction):
        return f"[{ts}] DEPOSIT {_money(tx.total_amount)} ID: {tx.id}"
    label = f"{tx.type.name:<4}"
    return (
        f"[{ts}] {label} {tx.quantity} {tx.symbol} @ {_money(tx.unit_price)} "
        f"(Total: {_money(tx.total_amount)}) ID: {tx.id}"
    )


def print_summary(ledger: Ledger) -> HoldingsValue:
    """Holdings at current prices plus cash. Unpriced holdings show N/A and add nothing."""
    holdings = ledger.valuation().holdings_value()
    print(f"\n--- Portfolio Summary for {ledger.username} ---")
    if not holdings.rows:
        print("No stock positions held.")
    else:
        print(SUMMARY_RULE)
        print(f"{'Symbol':<10} | {'Quantity':<10} | {'Avg Buy Price':<15} | {'Current Price':<15} | {'Total Value':<15}")
        print(SUMMARY_RULE)
        for row in holdings.rows:
            current = _money(row.current_price) if row.price_available else "N/A"
            print(
                f"{row.symbol:<10} | {row.quantity:<10d} | {_money(row.average_cost):<15} | "
                f"{current:<15} | {_money(row.value):<15}"
            )
        print(SUMMARY_RULE)
        print(f"Total Stock Holdings Value: {_money(holdings.total)}")
        if holdings.unpriced_symbols:
            print(f"No current price for: {', '.join(holdings.unpriced_symbols)}")
    print(f"Cash Balance: {_money(ledger.cash)}")
    print(SUMMARY_RULE + "\n")
    return holdings


def print_history(ledger: Ledger) -> list[Transaction]:
    """Transactions, most recent first."""
    entries = ledger.transaction_log.recent_first()
    print(f"\n--- Transaction History for {ledger.username} ---")
    if not entries:
        print("No transactions recorded.")
    for tx in entries:
        print(format_transaction(tx))
    print(HISTORY_RULE + "\n")
    return entries


def print_profit_loss(ledger: Ledger) -> ProfitLoss | None:
    """
    Per-holding and overall unrealized P/L. An unpriced holding shows N/A and
    is reported as a full loss of its cost (-100%). Returns the overall
    ProfitLoss, or None when nothing is held.
    """
    engine = ledger.valuation()
    print(f"\n--- Profit/Loss Report for {ledger.username} ---")
    if len(ledger.positions) == 0:
        print("No stock positions held to calculate profit/loss.")
        print(PL_RULE + "\n")
        return None

    rows = engine.valuations()
    print(PL_RULE)
    print(
        f"{'Symbol':<10} | {'Quantity':<10} | {'Avg Buy Price':<15} | {'Current Price':<15} | "
        f"{'Total Cost':<15} | {'Current Value':<15} | {'P/L ($)':<15} | {'P/L (%)':<10}"
    )
    print(PL_RULE)
    for row in rows:
        pl = row.profit_loss
        current = _money(row.current_price) if row.price_available else "N/A"
        print(
            f"{row.symbol:<10} | {row.quantity:<10d} | {_money(row.average_cost):<15} | {current:<15} | "
            f"{_money(pl.cost):<15} | {_money(pl.value):<15} | {_signed(pl.pl):<15} | {_signed(pl.pl_percent)}%"
        )
    print(PL_RULE)
    overall = engine.overall_profit_loss(rows)
    print(f"Overall Portfolio P/L: {_signed(overall.pl)} ({_signed(overall.pl_percent)}%)")
    print(PL_RULE + "\n")
    return overall
