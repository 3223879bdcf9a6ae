"""
Account metrics: total value, return on deposited cash, allocation weights.

Uses cash, current holdings value and the deposit history. Unpriced holdings
count at zero value, as in the valuation engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

import numpy as np

from stockfolio.ledger import Ledger
from stockfolio.money import HUNDRED, ZERO
from stockfolio.transactions import TransactionType
from stockfolio.valuation import HoldingsValue, ValuationEngine


@dataclass
class AccountMetrics:
    """Headline numbers for one account."""

    cash: Decimal
    holdings_value: Decimal
    total_value: Decimal
    net_deposits: Decimal
    total_pnl: Decimal
    total_return_pct: Decimal
    weights: dict[str, float] = field(default_factory=dict)


def allocation_weights(holdings: HoldingsValue, cash: Decimal = ZERO) -> dict[str, float]:
    """
    Share of total value per priced symbol (and 'CASH' when cash > 0).
    Weights sum to 1.0; empty when there is nothing to allocate.
    """
    labels = [r.symbol for r in holdings.rows if r.price_available]
    values = [float(r.value) for r in holdings.rows if r.price_available]
    if cash > 0:
        labels.append("CASH")
        values.append(float(cash))
    arr = np.array(values, dtype=float)
    total = arr.sum() if arr.size else 0.0
    if total <= 0:
        return {}
    weights = arr / total
    return {label: float(w) for label, w in zip(labels, weights)}


def compute_account_metrics(
    ledger: Ledger,
    valuation: ValuationEngine | None = None,
    *,
    holdings: HoldingsValue | None = None,
) -> AccountMetrics:
    """
    Compute metrics for ledger at current prices.

    Parameters
    ----------
    ledger : Ledger
        The account to measure.
    valuation : ValuationEngine, optional
        Defaults to ledger.valuation().
    holdings : HoldingsValue, optional
        Precomputed holdings value (avoids refetching prices).

    Returns
    -------
    AccountMetrics
        total_value = cash + holdings value; total_pnl = total_value - net deposits;
        total_return_pct relative to net deposits (0 when nothing was deposited).
    """
    if holdings is None:
        holdings = (valuation or ledger.valuation()).holdings_value()
    cash = ledger.cash
    total_value = cash + holdings.total
    net_deposits = sum(
        (tx.total_amount for tx in ledger.transaction_log.of_type(TransactionType.DEPOSIT)),
        ZERO,
    )
    total_pnl = total_value - net_deposits
    total_return_pct = (total_pnl / net_deposits * HUNDRED) if net_deposits > 0 else ZERO
    weights = allocation_weights(holdings, cash)
    return AccountMetrics(
        cash=cash,
        holdings_value=holdings.total,
        total_value=total_value,
        net_deposits=net_deposits,
        total_pnl=total_pnl,
        total_return_pct=total_return_pct,
        weights=weights,
    )
