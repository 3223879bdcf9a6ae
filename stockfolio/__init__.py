"""
stockfolio: simulated stock portfolio ledger.

Cash, weighted-average-cost positions and an immutable transaction history for
one user, kept consistent through every deposit, buy and sell. Prices come
from a pluggable PriceSource; snapshots persist through a Store.
"""

__version__ = "0.1.0"

from stockfolio.account import Account
from stockfolio.errors import ErrorKind, LedgerError
from stockfolio.ledger import Ledger
from stockfolio.positions import Position, PositionBook, ReduceOutcome
from stockfolio.pricing import PriceSource, Quote, StaticPriceSource
from stockfolio.store import InMemoryStore, JsonFileStore, LedgerSnapshot, Store
from stockfolio.transactions import (
    BuyTransaction,
    DepositTransaction,
    SellTransaction,
    Transaction,
    TransactionLog,
    TransactionType,
)
from stockfolio.types import LedgerResult, ResultStatus
from stockfolio.valuation import ValuationEngine

__all__ = [
    "Account",
    "ErrorKind",
    "LedgerError",
    "Ledger",
    "Position",
    "PositionBook",
    "ReduceOutcome",
    "PriceSource",
    "Quote",
    "StaticPriceSource",
    "InMemoryStore",
    "JsonFileStore",
    "LedgerSnapshot",
    "Store",
    "BuyTransaction",
    "DepositTransaction",
    "SellTransaction",
    "Transaction",
    "TransactionLog",
    "TransactionType",
    "LedgerResult",
    "ResultStatus",
    "ValuationEngine",
]
