"""
Tests for reporting: account metrics and printed reports.
"""

from datetime import datetime
from decimal import Decimal

import pytest

from reporting.metrics import allocation_weights, compute_account_metrics
from reporting.portfolio_report import format_transaction, print_history, print_profit_loss, print_summary
from stockfolio.ledger import Ledger
from stockfolio.pricing import StaticPriceSource
from stockfolio.store import InMemoryStore
from stockfolio.transactions import BuyTransaction, DepositTransaction
from stockfolio.valuation import HoldingsValue


def _ledger():
    prices = StaticPriceSource({"AAPL": "150", "MSFT": "300"})
    ledger = Ledger.create("alice", InMemoryStore(), prices, "10000")
    ledger.buy("AAPL", 10)
    ledger.buy("MSFT", 5)
    prices.set_price("AAPL", "180")
    return ledger


# --- Metrics ---


def test_account_metrics():
    m = compute_account_metrics(_ledger())
    assert m.cash == Decimal("7000")
    assert m.holdings_value == Decimal("3300")
    assert m.total_value == Decimal("10300")
    assert m.net_deposits == Decimal("10000")
    assert m.total_pnl == Decimal("300")
    assert m.total_return_pct == Decimal("3")
    assert sum(m.weights.values()) == pytest.approx(1.0)
    assert m.weights["CASH"] == pytest.approx(7000 / 10300)


def test_account_metrics_without_deposits():
    ledger = Ledger("bob", StaticPriceSource())
    m = compute_account_metrics(ledger)
    assert m.total_value == Decimal("0")
    assert m.total_return_pct == Decimal("0")
    assert m.weights == {}


def test_allocation_weights_skip_unpriced():
    ledger = _ledger()
    ledger.price_source.remove("MSFT")
    holdings = ledger.valuation().holdings_value()
    weights = allocation_weights(holdings)
    assert weights == {"AAPL": pytest.approx(1.0)}
    assert allocation_weights(HoldingsValue(total=Decimal("0"))) == {}


# --- Printed reports ---


def test_format_transaction():
    ts = datetime(2024, 1, 15, 10, 0, 0)
    dep = DepositTransaction(amount=Decimal("500"), timestamp=ts, id="d1")
    buy = BuyTransaction(symbol="AAPL", quantity=10, unit_price=Decimal("150"), timestamp=ts, id="b1")
    assert format_transaction(dep) == "[2024-01-15 10:00:00] DEPOSIT $500.00 ID: d1"
    assert format_transaction(buy) == "[2024-01-15 10:00:00] BUY  10 AAPL @ $150.00 (Total: $1500.00) ID: b1"


def test_print_summary(capsys):
    ledger = _ledger()
    ledger.price_source.remove("MSFT")
    holdings = print_summary(ledger)
    out = capsys.readouterr().out
    assert "Portfolio Summary for alice" in out
    assert "AAPL" in out and "$180.00" in out
    assert "N/A" in out
    assert "Total Stock Holdings Value: $1800.00" in out
    assert "No current price for: MSFT" in out
    assert "Cash Balance: $7000.00" in out
    assert holdings.total == Decimal("1800")


def test_print_summary_empty(capsys):
    print_summary(Ledger("bob", StaticPriceSource()))
    assert "No stock positions held." in capsys.readouterr().out


def test_print_history_newest_first(capsys):
    ledger = _ledger()
    entries = print_history(ledger)
    out = capsys.readouterr().out
    assert [tx.type.name for tx in entries] == ["BUY", "BUY", "DEPOSIT"]
    assert out.index("MSFT") < out.index("AAPL") < out.index("DEPOSIT")


def test_print_profit_loss(capsys):
    overall = print_profit_loss(_ledger())
    out = capsys.readouterr().out
    assert "+300.00" in out
    assert "+20.00%" in out
    assert "Overall Portfolio P/L: +300.00" in out
    assert overall.pl == Decimal("300")


def test_print_profit_loss_no_positions(capsys):
    assert print_profit_loss(Ledger("bob", StaticPriceSource())) is None
    assert "No stock positions held" in capsys.readouterr().out
