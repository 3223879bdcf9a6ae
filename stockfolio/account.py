"""
Account: the cash side of a ledger.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockfolio.errors import InsufficientFundsError, InvalidArgumentError
from stockfolio.money import ZERO, to_decimal


@dataclass
class Account:
    """Cash balance. Never negative; mutated only through credit/debit."""

    cash: Decimal = ZERO

    def __post_init__(self) -> None:
        self.cash = to_decimal(self.cash)
        if self.cash < 0:
            raise InvalidArgumentError("Cash balance cannot be negative.")

    def credit(self, amount: Decimal) -> Decimal:
        """Add amount (> 0). Returns the new balance."""
        amount = to_decimal(amount)
        if amount <= 0:
            raise InvalidArgumentError("Credit amount must be positive.")
        self.cash += amount
        return self.cash

    def debit(self, amount: Decimal) -> Decimal:
        """Remove amount (> 0). Raises InsufficientFundsError instead of going negative."""
        amount = to_decimal(amount)
        if amount <= 0:
            raise InvalidArgumentError("Debit amount must be positive.")
        if amount > self.cash:
            raise InsufficientFundsError(
                f"Insufficient funds. Required: {amount:.2f}, Available: {self.cash:.2f}"
            )
        self.cash -= amount
        return self.cash

    def can_afford(self, amount: Decimal) -> bool:
        return to_decimal(amount) <= self.cash
