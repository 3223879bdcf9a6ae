"""
Error kinds for the ledger.

Every failure the ledger can report has an ErrorKind. Lower layers raise the
matching LedgerError subclass; the Ledger turns those into LedgerResult values.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(Enum):
    INVALID_ARGUMENT = "invalid_argument"
    INSUFFICIENT_FUNDS = "insufficient_funds"
    INSUFFICIENT_SHARES = "insufficient_shares"
    NOT_FOUND = "not_found"
    PRICE_UNAVAILABLE = "price_unavailable"
    PERSISTENCE_FAILURE = "persistence_failure"


class LedgerError(Exception):
    """Base class. `kind` says which ErrorKind the failure maps to."""

    kind: ErrorKind = ErrorKind.INVALID_ARGUMENT


class InvalidArgumentError(LedgerError, ValueError):
    kind = ErrorKind.INVALID_ARGUMENT


class InsufficientFundsError(LedgerError):
    kind = ErrorKind.INSUFFICIENT_FUNDS


class InsufficientSharesError(LedgerError):
    kind = ErrorKind.INSUFFICIENT_SHARES


class NotFoundError(LedgerError, LookupError):
    kind = ErrorKind.NOT_FOUND


class PriceUnavailableError(LedgerError):
    kind = ErrorKind.PRICE_UNAVAILABLE


class PersistenceError(LedgerError):
    kind = ErrorKind.PERSISTENCE_FAILURE
