"""
Transactions: immutable records of deposits, buys and sells, and the append-only log.

One frozen dataclass per kind, so a trade can never lack a symbol and a
deposit never carries one.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Union

import pandas as pd

from stockfolio.errors import InvalidArgumentError
from stockfolio.money import normalize_symbol, to_decimal


class TransactionType(Enum):
    DEPOSIT = "deposit"
    BUY = "buy"
    SELL = "sell"


def new_transaction_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class DepositTransaction:
    """Cash paid into the account."""

    amount: Decimal
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_transaction_id)

    def __post_init__(self) -> None:
        amount = to_decimal(self.amount)
        if amount <= 0:
            raise InvalidArgumentError("Deposit amount must be positive.")
        object.__setattr__(self, "amount", amount)

    type = TransactionType.DEPOSIT
    symbol = None
    quantity = 0

    @property
    def unit_price(self) -> Decimal:
        return self.amount

    @property
    def total_amount(self) -> Decimal:
        return self.amount


@dataclass(frozen=True)
class _TradeTransaction:
    symbol: str
    quantity: int
    unit_price: Decimal
    timestamp: datetime = field(default_factory=datetime.now)
    id: str = field(default_factory=new_transaction_id)

    def __post_init__(self) -> None:
        if isinstance(self.quantity, bool) or not isinstance(self.quantity, int) or self.quantity <= 0:
            raise InvalidArgumentError("Quantity must be positive for BUY/SELL.")
        price = to_decimal(self.unit_price)
        if price < 0:
            raise InvalidArgumentError("Price per share cannot be negative.")
        object.__setattr__(self, "symbol", normalize_symbol(self.symbol))
        object.__setattr__(self, "unit_price", price)

    @property
    def total_amount(self) -> Decimal:
        return self.quantity * self.unit_price


@dataclass(frozen=True)
class BuyTransaction(_TradeTransaction):
    """Shares bought; total_amount is the cash paid."""

    type = TransactionType.BUY


@dataclass(frozen=True)
class SellTransaction(_TradeTransaction):
    """Shares sold; total_amount is the cash received."""

    type = TransactionType.SELL


Transaction = Union[DepositTransaction, BuyTransaction, SellTransaction]


def transaction_to_record(tx: Transaction) -> dict[str, Any]:
    """JSON-safe dict for a transaction (decimals as strings, ISO timestamps)."""
    record: dict[str, Any] = {
        "id": tx.id,
        "type": tx.type.value,
        "timestamp": tx.timestamp.isoformat(),
    }
    if isinstance(tx, DepositTransaction):
        record["amount"] = str(tx.amount)
    else:
        record["symbol"] = tx.symbol
        record["quantity"] = tx.quantity
        record["unit_price"] = str(tx.unit_price)
    return record


def transaction_from_record(record: dict[str, Any]) -> Transaction:
    try:
        kind = TransactionType(record["type"])
        ts = datetime.fromisoformat(record["timestamp"])
        if kind is TransactionType.DEPOSIT:
            return DepositTransaction(amount=to_decimal(record["amount"]), timestamp=ts, id=record["id"])
        cls = BuyTransaction if kind is TransactionType.BUY else SellTransaction
        return cls(
            symbol=record["symbol"],
            quantity=int(record["quantity"]),
            unit_price=to_decimal(record["unit_price"]),
            timestamp=ts,
            id=record["id"],
        )
    except (KeyError, ValueError, TypeError) as e:
        raise InvalidArgumentError(f"Corrupt transaction record: {record!r}") from e


class TransactionLog:
    """
    Append-only, insertion-ordered sequence of transactions.
    Insertion order is chronological; timestamps may tie.
    """

    def __init__(self, transactions: list[Transaction] | None = None) -> None:
        self._entries: list[Transaction] = list(transactions or [])

    def append(self, tx: Transaction) -> None:
        self._entries.append(tx)

    def entries(self) -> tuple[Transaction, ...]:
        """All transactions, oldest first."""
        return tuple(self._entries)

    def recent_first(self) -> list[Transaction]:
        """Newest first. Ties keep reverse insertion order."""
        return list(reversed(self._entries))

    def of_type(self, kind: TransactionType) -> list[Transaction]:
        return [tx for tx in self._entries if tx.type is kind]

    def truncate(self, length: int) -> None:
        """Drop entries past length. Only used by the ledger to undo an append it just made."""
        del self._entries[length:]

    def to_dataframe(self) -> pd.DataFrame:
        """One row per transaction: id, type, timestamp, symbol, quantity, unit_price, total_amount."""
        columns = ["id", "type", "timestamp", "symbol", "quantity", "unit_price", "total_amount"]
        rows = [
            {
                "id": tx.id,
                "type": tx.type.value,
                "timestamp": tx.timestamp,
                "symbol": tx.symbol,
                "quantity": tx.quantity,
                "unit_price": tx.unit_price,
                "total_amount": tx.total_amount,
            }
            for tx in self._entries
        ]
        return pd.DataFrame(rows, columns=columns)

    def __iter__(self) -> Iterator[Transaction]:
        return iter(tuple(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __getitem__(self, index: int) -> Transaction:
        return self._entries[index]
