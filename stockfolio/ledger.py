"""
Ledger: one user's cash, positions and transaction history, kept consistent.

deposit / buy / sell are each all-or-nothing and return a LedgerResult.
Flow for trades: validate -> price lookup (outside the lock) -> under the lock
re-check price and balance/holding -> mutate cash + positions + log -> save.
A failed save is reported on the result; the in-memory change stands.
"""

from __future__ import annotations

import logging
import threading
from decimal import Decimal

from stockfolio.account import Account
from stockfolio.errors import (
    ErrorKind,
    InsufficientFundsError,
    InsufficientSharesError,
    InvalidArgumentError,
    LedgerError,
    NotFoundError,
    PersistenceError,
    PriceUnavailableError,
)
from stockfolio.money import check_quantity, normalize_symbol, to_decimal
from stockfolio.positions import Position, PositionBook
from stockfolio.pricing.source import PriceSource, Quote, usable_price
from stockfolio.store import LedgerSnapshot, Store, validate_username
from stockfolio.transactions import (
    BuyTransaction,
    DepositTransaction,
    SellTransaction,
    Transaction,
    TransactionLog,
)
from stockfolio.types import LedgerResult, ResultStatus
from stockfolio.valuation import ValuationEngine

logger = logging.getLogger(__name__)


class Ledger:
    """
    Portfolio manager for a single user.

    Owns its Account, PositionBook and TransactionLog exclusively. Every mutating
    operation runs its check-then-commit under one lock, so concurrent callers
    cannot interleave between a balance check and the debit it guards.
    """

    def __init__(
        self,
        username: str,
        price_source: PriceSource,
        *,
        store: Store | None = None,
        account: Account | None = None,
        positions: PositionBook | None = None,
        transactions: TransactionLog | None = None,
    ) -> None:
        self._username = validate_username(username)
        self._price_source = price_source
        self._store = store
        self._account = account if account is not None else Account()
        self._positions = positions if positions is not None else PositionBook()
        self._log = transactions if transactions is not None else TransactionLog()
        self._lock = threading.RLock()

    # --- Construction from / to snapshots ---

    @classmethod
    def from_snapshot(
        cls,
        snapshot: LedgerSnapshot,
        price_source: PriceSource,
        *,
        store: Store | None = None,
    ) -> Ledger:
        return cls(
            snapshot.username,
            price_source,
            store=store,
            account=Account(cash=snapshot.cash),
            positions=PositionBook({p.symbol: p for p in snapshot.positions}),
            transactions=TransactionLog(list(snapshot.transactions)),
        )

    @classmethod
    def open(cls, username: str, store: Store, price_source: PriceSource) -> Ledger:
        """Load an existing user's ledger. Raises NotFoundError for an unknown user."""
        snapshot = store.load(username)
        logger.info("Loaded ledger for %s", snapshot.username)
        return cls.from_snapshot(snapshot, price_source, store=store)

    @classmethod
    def create(
        cls,
        username: str,
        store: Store,
        price_source: PriceSource,
        initial_cash: Decimal | float | int | str = 0,
    ) -> Ledger:
        """
        Create and save a new user. A positive initial_cash is recorded as a DEPOSIT.
        Raises InvalidArgumentError if the user exists or initial_cash < 0.
        """
        name = validate_username(username)
        if store.exists(name):
            raise InvalidArgumentError(f"User '{name}' already exists.")
        cash = to_decimal(initial_cash)
        if cash < 0:
            raise InvalidArgumentError("Initial deposit cannot be negative.")
        log = TransactionLog()
        if cash > 0:
            log.append(DepositTransaction(amount=cash))
        ledger = cls(name, price_source, store=store, account=Account(cash=cash), transactions=log)
        store.save(ledger.snapshot())
        logger.info("Created user %s with initial balance %.2f", name, cash)
        return ledger

    def snapshot(self) -> LedgerSnapshot:
        with self._lock:
            return LedgerSnapshot(
                username=self._username,
                cash=self._account.cash,
                positions=tuple(self._positions),
                transactions=self._log.entries(),
            )

    # --- Read access ---

    @property
    def username(self) -> str:
        return self._username

    @property
    def cash(self) -> Decimal:
        return self._account.cash

    @property
    def positions(self) -> PositionBook:
        """The position book. Mutate only through the ledger."""
        return self._positions

    @property
    def transactions(self) -> tuple[Transaction, ...]:
        return self._log.entries()

    @property
    def transaction_log(self) -> TransactionLog:
        return self._log

    @property
    def price_source(self) -> PriceSource:
        return self._price_source

    def position(self, symbol: str) -> Position | None:
        return self._positions.get(symbol)

    def valuation(self) -> ValuationEngine:
        return ValuationEngine(self._positions, self._price_source)

    def quote(self, symbol: str) -> Quote | None:
        """Current quote for symbol (the 'get price' action)."""
        return self._price_source.get_quote(symbol)

    # --- Operations ---

    def deposit(self, amount: Decimal | float | int | str) -> LedgerResult:
        """Add cash. Rejected with INVALID_ARGUMENT unless amount is a positive number."""
        try:
            value = self._deposit_amount(amount)
        except LedgerError as e:
            return self._reject(e)

        with self._lock:
            tx = DepositTransaction(amount=value)
            self._account.credit(value)
            self._log.append(tx)
            logger.info("Deposited %.2f for %s. New balance: %.2f", value, self._username, self._account.cash)
            return self._commit(
                tx,
                f"Successfully deposited ${value:.2f}. New balance: ${self._account.cash:.2f}",
            )

    def buy(self, symbol: str, quantity: int) -> LedgerResult:
        """
        Buy quantity shares at the current price.

        Rejections (nothing changes): INVALID_ARGUMENT, PRICE_UNAVAILABLE,
        INSUFFICIENT_FUNDS.
        """
        try:
            sym = normalize_symbol(symbol)
            qty = check_quantity(quantity)
            quote = self._require_quote(sym, "buy")
        except LedgerError as e:
            return self._reject(e)

        with self._lock:
            try:
                price = self._require_price(quote, "buy")
                total_cost = qty * price
                if not self._account.can_afford(total_cost):
                    raise InsufficientFundsError(
                        f"Failed to buy stock. Insufficient funds. Required: ${total_cost:.2f}, "
                        f"Available: ${self._account.cash:.2f}"
                    )
            except LedgerError as e:
                return self._reject(e)

            tx = BuyTransaction(symbol=sym, quantity=qty, unit_price=price)
            cash_before = self._account.cash
            position_before = self._positions.get(sym)
            log_length = len(self._log)
            try:
                self._account.debit(total_cost)
                self._positions.add_or_update(sym, qty, price)
                self._log.append(tx)
            except Exception:
                self._rollback(cash_before, sym, position_before, log_length)
                logger.exception("Buy of %s %s for %s rolled back", qty, sym, self._username)
                raise

            logger.info(
                "Bought %s %s @ %.2f for %s (total %.2f). Remaining balance: %.2f",
                qty, sym, price, self._username, total_cost, self._account.cash,
            )
            return self._commit(
                tx,
                f"Successfully bought {qty} shares of {sym} at ${price:.2f} each. "
                f"Total cost: ${total_cost:.2f}",
            )

    def sell(self, symbol: str, quantity: int) -> LedgerResult:
        """
        Sell quantity shares at the current price.

        Rejections (nothing changes): INVALID_ARGUMENT, NOT_FOUND,
        INSUFFICIENT_SHARES, PRICE_UNAVAILABLE. A sale is never executed at an
        unknown or stale price.
        """
        try:
            sym = normalize_symbol(symbol)
            qty = check_quantity(quantity)
            self._check_holding(sym, qty)
            quote = self._require_quote(sym, "sell")
        except LedgerError as e:
            return self._reject(e)

        with self._lock:
            try:
                # Holdings may have changed while the price was being fetched.
                self._check_holding(sym, qty)
                price = self._require_price(quote, "sell")
            except LedgerError as e:
                return self._reject(e)

            proceeds = qty * price
            tx = SellTransaction(symbol=sym, quantity=qty, unit_price=price)
            cash_before = self._account.cash
            position_before = self._positions.get(sym)
            log_length = len(self._log)
            try:
                outcome = self._positions.reduce(sym, qty)
                self._account.credit(proceeds)
                self._log.append(tx)
            except Exception:
                self._rollback(cash_before, sym, position_before, log_length)
                logger.exception("Sale of %s %s for %s rolled back", qty, sym, self._username)
                raise

            logger.info(
                "Sold %s %s @ %.2f for %s (proceeds %.2f, position %s). New balance: %.2f",
                qty, sym, price, self._username, proceeds, outcome.value, self._account.cash,
            )
            return self._commit(
                tx,
                f"Successfully sold {qty} shares of {sym} at ${price:.2f} each. "
                f"Total proceeds: ${proceeds:.2f}",
            )

    def max_affordable_shares(self, symbol: str, budget: Decimal | float | int | str | None = None) -> int | None:
        """
        Whole shares of symbol that budget (default: current cash) buys at the current price.
        0 for a non-positive budget; None when the price is unknown.
        """
        budget = self._account.cash if budget is None else to_decimal(budget)
        if budget <= 0:
            return 0
        price = self._price_source.get_price(symbol)
        if price is None:
            logger.warning("Could not fetch price for %s to calculate max shares", symbol)
            return None
        return shares_affordable(budget, price)

    # --- Internals ---

    @staticmethod
    def _deposit_amount(amount: Decimal | float | int | str) -> Decimal:
        try:
            value = to_decimal(amount)
        except InvalidArgumentError as e:
            raise InvalidArgumentError(f"Invalid deposit amount: {e!s}") from e
        if value <= 0:
            raise InvalidArgumentError("Deposit amount must be positive.")
        return value

    def _require_quote(self, symbol: str, action: str) -> Quote:
        quote = self._price_source.get_quote(symbol)
        if quote is None:
            raise PriceUnavailableError(f"Failed to {action} stock. Could not fetch current price for {symbol}")
        return quote

    @staticmethod
    def _require_price(quote: Quote, action: str) -> Decimal:
        price = usable_price(quote.price)
        if price is None:
            raise PriceUnavailableError(
                f"Failed to {action} stock. Invalid price ({quote.price}) for {quote.symbol}"
            )
        return price

    def _check_holding(self, symbol: str, quantity: int) -> None:
        held = self._positions.quantity(symbol)
        if held == 0:
            raise NotFoundError(f"Failed to sell stock. You do not own any shares of {symbol}")
        if quantity > held:
            raise InsufficientSharesError(
                f"Failed to sell stock. You only own {held} shares of {symbol}, "
                f"but tried to sell {quantity}."
            )

    def _rollback(
        self,
        cash_before: Decimal,
        symbol: str,
        position_before: Position | None,
        log_length: int,
    ) -> None:
        self._account.cash = cash_before
        self._positions.restore(position_before, symbol)
        self._log.truncate(log_length)

    def _reject(self, error: LedgerError) -> LedgerResult:
        logger.warning("Rejected for %s (%s): %s", self._username, error.kind.value, error)
        return LedgerResult.from_error(error)

    def _commit(self, tx: Transaction, message: str) -> LedgerResult:
        """Save the applied change. Called with the lock held."""
        persisted = False
        error: ErrorKind | None = None
        if self._store is not None:
            try:
                self._store.save(self.snapshot())
                persisted = True
            except PersistenceError as e:
                # In-memory state stays authoritative; it is just not durable.
                logger.error("Could not persist ledger for %s: %s", self._username, e)
                error = e.kind
                message = f"{message} (warning: not saved: {e!s})"
        return LedgerResult(
            status=ResultStatus.APPLIED,
            error=error,
            transaction=tx,
            message=message,
            cash_after=self._account.cash,
            persisted=persisted,
            timestamp=tx.timestamp,
        )


def shares_affordable(budget: Decimal, price: Decimal) -> int:
    """Whole shares budget buys at price (price > 0)."""
    if budget <= 0:
        return 0
    return int(budget // price)
