"""
Ledger result types: the discriminated outcome of deposit / buy / sell.

A rejected operation changed nothing. An applied one may still carry
PERSISTENCE_FAILURE when the snapshot could not be saved.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from stockfolio.errors import ErrorKind, LedgerError
from stockfolio.transactions import Transaction


class ResultStatus(Enum):
    """Status of a ledger operation."""

    APPLIED = "applied"
    REJECTED = "rejected"


@dataclass(frozen=True)
class LedgerResult:
    """Result of a ledger operation. Immutable."""

    status: ResultStatus
    error: ErrorKind | None = None
    transaction: Transaction | None = None
    message: str | None = None
    cash_after: Decimal | None = None
    persisted: bool = False
    timestamp: datetime | None = None

    @property
    def ok(self) -> bool:
        return self.status is ResultStatus.APPLIED

    @classmethod
    def rejected(cls, error: ErrorKind, message: str) -> LedgerResult:
        return cls(status=ResultStatus.REJECTED, error=error, message=message, timestamp=datetime.now())

    @classmethod
    def from_error(cls, exc: LedgerError) -> LedgerResult:
        return cls.rejected(exc.kind, str(exc))
