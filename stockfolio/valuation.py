"""
Valuation: holdings value and unrealized profit/loss at current prices.

Read-only over a PositionBook. A holding whose price cannot be fetched counts
as zero current value, so its P/L is the full loss of its cost basis (-100%).
That is a deliberate reporting policy, flagged on every row via price_available.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from decimal import Decimal

import pandas as pd

from stockfolio.errors import NotFoundError
from stockfolio.money import HUNDRED, ZERO, normalize_symbol
from stockfolio.positions import Position, PositionBook
from stockfolio.pricing.source import PriceSource

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProfitLoss:
    """Cost, current value and P/L for one holding or for the whole book."""

    cost: Decimal
    value: Decimal
    pl: Decimal
    pl_percent: Decimal
    price_available: bool = True


@dataclass(frozen=True)
class HoldingValuation:
    """One row of a valuation: a position at its current price (None if unavailable)."""

    symbol: str
    quantity: int
    average_cost: Decimal
    current_price: Decimal | None
    profit_loss: ProfitLoss

    @property
    def price_available(self) -> bool:
        return self.current_price is not None

    @property
    def cost(self) -> Decimal:
        return self.profit_loss.cost

    @property
    def value(self) -> Decimal:
        return self.profit_loss.value


@dataclass(frozen=True)
class HoldingsValue:
    """Total current value of all priced holdings plus the per-symbol rows."""

    total: Decimal
    rows: list[HoldingValuation] = field(default_factory=list)

    @property
    def unpriced_symbols(self) -> list[str]:
        return [r.symbol for r in self.rows if not r.price_available]


def _pl_percent(pl: Decimal, cost: Decimal) -> Decimal:
    return pl / cost * HUNDRED if cost > 0 else ZERO


def position_profit_loss(position: Position, price: Decimal | None) -> ProfitLoss:
    """P/L of one position at price; price None means unavailable."""
    cost = position.cost_basis
    if price is None:
        return ProfitLoss(cost=cost, value=ZERO, pl=-cost, pl_percent=_pl_percent(-cost, cost), price_available=False)
    value = position.quantity * price
    pl = value - cost
    return ProfitLoss(cost=cost, value=value, pl=pl, pl_percent=_pl_percent(pl, cost))


class ValuationEngine:
    """
    Values a PositionBook with a PriceSource. Each public call fetches every
    symbol it needs exactly once.
    """

    def __init__(self, positions: PositionBook, price_source: PriceSource) -> None:
        self.positions = positions
        self.price_source = price_source

    def _price(self, symbol: str) -> Decimal | None:
        price = self.price_source.get_price(symbol)
        if price is None:
            logger.warning("Price unavailable for %s; valuing holding at zero", symbol)
        return price

    def valuations(self) -> list[HoldingValuation]:
        """Every position at its current price, sorted by symbol."""
        rows: list[HoldingValuation] = []
        for pos in self.positions:
            price = self._price(pos.symbol)
            rows.append(
                HoldingValuation(
                    symbol=pos.symbol,
                    quantity=pos.quantity,
                    average_cost=pos.average_cost,
                    current_price=price,
                    profit_loss=position_profit_loss(pos, price),
                )
            )
        return rows

    def holdings_value(self) -> HoldingsValue:
        """Sum of quantity * price over priced holdings; unpriced rows add nothing."""
        rows = self.valuations()
        total = sum((r.value for r in rows if r.price_available), ZERO)
        return HoldingsValue(total=total, rows=rows)

    def profit_loss(self, symbol: str) -> ProfitLoss:
        """P/L for one held symbol. Raises NotFoundError if not held."""
        sym = normalize_symbol(symbol)
        pos = self.positions.get(sym)
        if pos is None:
            raise NotFoundError(f"No position in {sym}")
        return position_profit_loss(pos, self._price(sym))

    def overall_profit_loss(self, rows: list[HoldingValuation] | None = None) -> ProfitLoss:
        """
        Aggregate P/L: total cost and total value over all holdings (unpriced
        holdings at zero value), then pl and pl_percent as for a single row.
        Pass rows from valuations() to avoid refetching prices.
        """
        if rows is None:
            rows = self.valuations()
        cost = sum((r.cost for r in rows), ZERO)
        value = sum((r.value for r in rows), ZERO)
        pl = value - cost
        return ProfitLoss(
            cost=cost,
            value=value,
            pl=pl,
            pl_percent=_pl_percent(pl, cost),
            price_available=all(r.price_available for r in rows),
        )

    def to_dataframe(self, rows: list[HoldingValuation] | None = None) -> pd.DataFrame:
        """Valuation rows as a DataFrame indexed by symbol."""
        if rows is None:
            rows = self.valuations()
        columns = ["quantity", "average_cost", "current_price", "cost", "value", "pl", "pl_percent", "price_available"]
        records = [
            {
                "symbol": r.symbol,
                "quantity": r.quantity,
                "average_cost": r.average_cost,
                "current_price": r.current_price,
                "cost": r.cost,
                "value": r.value,
                "pl": r.profit_loss.pl,
                "pl_percent": r.profit_loss.pl_percent,
                "price_available": r.price_available,
            }
            for r in rows
        ]
        df = pd.DataFrame(records, columns=["symbol", *columns])
        return df.set_index("symbol")
