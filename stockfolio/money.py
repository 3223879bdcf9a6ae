"""
Money and symbol helpers.

Cash and per-share prices are Decimal everywhere; floats are converted through
their string form so 0.1 stays 0.1. Quantities are plain ints.
"""

from __future__ import annotations

from decimal import Decimal, InvalidOperation
from typing import Any

from stockfolio.errors import InvalidArgumentError

ZERO = Decimal("0")
HUNDRED = Decimal("100")


def to_decimal(value: Any) -> Decimal:
    """Convert int/float/str/Decimal to a finite Decimal. Raises InvalidArgumentError."""
    if isinstance(value, bool):
        raise InvalidArgumentError(f"Not a number: {value!r}")
    try:
        if isinstance(value, Decimal):
            d = value
        elif isinstance(value, int):
            d = Decimal(value)
        elif isinstance(value, float):
            d = Decimal(str(value))
        elif isinstance(value, str):
            d = Decimal(value.strip().replace(",", ""))
        else:
            raise InvalidArgumentError(f"Unsupported amount type: {type(value).__name__}")
    except InvalidOperation as e:
        raise InvalidArgumentError(f"Not a number: {value!r}") from e
    if not d.is_finite():
        raise InvalidArgumentError(f"Amount must be finite: {value!r}")
    return d


def normalize_symbol(symbol: str) -> str:
    """Strip and upper-case a ticker. Empty symbols are rejected."""
    if not isinstance(symbol, str):
        raise InvalidArgumentError(f"Symbol must be a string, got {type(symbol).__name__}")
    s = symbol.strip().upper()
    if not s:
        raise InvalidArgumentError("Symbol cannot be empty")
    return s


def check_quantity(quantity: Any) -> int:
    """A share quantity must be a positive int."""
    if isinstance(quantity, bool) or not isinstance(quantity, int):
        raise InvalidArgumentError(f"Quantity must be a whole number of shares, got {quantity!r}")
    if quantity <= 0:
        raise InvalidArgumentError("Quantity must be positive.")
    return quantity
