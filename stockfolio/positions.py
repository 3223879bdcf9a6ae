"""
PositionBook: one weighted-average-cost position per symbol.

Buys re-average the cost basis; sells reduce quantity and leave the cost basis
of the remaining shares alone; a position that reaches zero is removed.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass, replace
from decimal import Decimal
from enum import Enum
from typing import Any

from stockfolio.errors import InvalidArgumentError
from stockfolio.money import check_quantity, normalize_symbol, to_decimal


@dataclass(frozen=True)
class Position:
    """
    Holding in one symbol. Immutable; the book swaps in a new instance on every change.

    Equality is structural (symbol, quantity, average cost and cost basis all compare).
    cost_basis is the exact total paid for the shares still held; it defaults to
    quantity * average_cost.
    """

    symbol: str
    quantity: int
    average_cost: Decimal
    cost_basis: Decimal | None = None

    def __post_init__(self) -> None:
        if self.cost_basis is None:
            object.__setattr__(self, "cost_basis", self.quantity * self.average_cost)

    def to_record(self) -> dict[str, Any]:
        return {
            "symbol": self.symbol,
            "quantity": self.quantity,
            "average_cost": str(self.average_cost),
            "cost_basis": str(self.cost_basis),
        }

    @classmethod
    def from_record(cls, record: dict[str, Any]) -> Position:
        try:
            quantity = int(record["quantity"])
        except (TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Corrupt position record: {record!r}") from e
        average_cost = to_decimal(record["average_cost"])
        cost_basis = to_decimal(record["cost_basis"]) if "cost_basis" in record else None
        if quantity <= 0 or average_cost < 0 or (cost_basis is not None and cost_basis < 0):
            raise InvalidArgumentError(f"Corrupt position record: {record!r}")
        return cls(
            symbol=normalize_symbol(record["symbol"]),
            quantity=quantity,
            average_cost=average_cost,
            cost_basis=cost_basis,
        )


class ReduceOutcome(Enum):
    """Result of PositionBook.reduce. Only REDUCED and CLOSED change the book."""

    REDUCED = "reduced"
    CLOSED = "closed"
    NOT_FOUND = "not_found"
    INSUFFICIENT_SHARES = "insufficient_shares"

    @property
    def ok(self) -> bool:
        return self in (ReduceOutcome.REDUCED, ReduceOutcome.CLOSED)


class PositionBook:
    """Mapping of symbol -> Position. Mutable; owned by a single Ledger."""

    def __init__(self, positions: dict[str, Position] | None = None) -> None:
        self._positions: dict[str, Position] = {}
        for pos in (positions or {}).values():
            self._positions[normalize_symbol(pos.symbol)] = pos

    def get(self, symbol: str) -> Position | None:
        """Position for symbol, or None if not held."""
        return self._positions.get(normalize_symbol(symbol))

    def quantity(self, symbol: str) -> int:
        """Shares held in symbol. 0 if not present."""
        pos = self.get(symbol)
        return pos.quantity if pos is not None else 0

    def add_or_update(self, symbol: str, quantity: int, unit_price: Decimal) -> Position:
        """
        Add bought shares. A new symbol opens a position at unit_price; an existing
        one is re-averaged: (q0 * c0 + q * p) / (q0 + q), with q0 * c0 taken from the
        exact cost basis so the result does not depend on the order of the buys.
        """
        sym = normalize_symbol(symbol)
        quantity = check_quantity(quantity)
        price = to_decimal(unit_price)
        if price < 0:
            raise InvalidArgumentError("Price per share cannot be negative.")

        existing = self._positions.get(sym)
        if existing is None:
            pos = Position(symbol=sym, quantity=quantity, average_cost=price)
        else:
            new_qty = existing.quantity + quantity
            cost_basis = existing.cost_basis + quantity * price
            pos = replace(existing, quantity=new_qty, average_cost=cost_basis / new_qty, cost_basis=cost_basis)
        self._positions[sym] = pos
        return pos

    def reduce(self, symbol: str, quantity: int) -> ReduceOutcome:
        """Remove sold shares. No partial reduction: on failure the book is unchanged."""
        sym = normalize_symbol(symbol)
        quantity = check_quantity(quantity)
        existing = self._positions.get(sym)
        if existing is None:
            return ReduceOutcome.NOT_FOUND
        if quantity > existing.quantity:
            return ReduceOutcome.INSUFFICIENT_SHARES
        remaining = existing.quantity - quantity
        if remaining == 0:
            del self._positions[sym]
            return ReduceOutcome.CLOSED
        # Average cost stays fixed; the cost basis shrinks in proportion.
        self._positions[sym] = replace(
            existing,
            quantity=remaining,
            cost_basis=existing.cost_basis * remaining / existing.quantity,
        )
        return ReduceOutcome.REDUCED

    def restore(self, position: Position | None, symbol: str) -> None:
        """Put back a previously read position (rollback helper for the ledger)."""
        sym = normalize_symbol(symbol)
        if position is None:
            self._positions.pop(sym, None)
        else:
            self._positions[sym] = position

    def symbols(self) -> list[str]:
        return sorted(self._positions)

    def __contains__(self, symbol: object) -> bool:
        return isinstance(symbol, str) and symbol.strip().upper() in self._positions

    def __iter__(self) -> Iterator[Position]:
        return iter([self._positions[s] for s in self.symbols()])

    def __len__(self) -> int:
        return len(self._positions)

    def __repr__(self) -> str:
        return f"PositionBook({list(self)!r})"
