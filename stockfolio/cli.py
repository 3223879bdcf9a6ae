"""
Interactive command-line front end.

Login (or create a user), then a numbered menu. Every free-text prompt accepts
'cancel' to abort the current action. The CLI only renders: all validation is
done by the Ledger and reported through LedgerResult messages.
"""

from __future__ import annotations

import argparse
import dataclasses
import logging
import sys
from collections.abc import Callable, Sequence
from decimal import Decimal
from pathlib import Path

from reporting.portfolio_report import print_history, print_profit_loss, print_summary
from stockfolio.config import PRICE_SOURCES, Settings
from stockfolio.errors import InvalidArgumentError, LedgerError
from stockfolio.ledger import Ledger, shares_affordable
from stockfolio.money import to_decimal
from stockfolio.pricing.source import PriceSource
from stockfolio.store import Store
from stockfolio.types import LedgerResult

logger = logging.getLogger(__name__)

CANCEL_KEYWORD = "cancel"
EXIT_KEYWORD = "exit"

MENU_ITEMS = (
    "View Portfolio Summary",
    "View Transaction History",
    "View Profit/Loss Report",
    "Get Stock Price",
    "Buy Stock",
    "Sell Stock",
    "Deposit Funds",
    "Logout",
    "Exit Application",
)


class _Cancelled(Exception):
    """Raised by a prompt when the user types the cancel keyword."""


class StockfolioApp:
    """
    Menu loop over one Ledger at a time. Logout returns to the login prompt;
    exit (or end of input) leaves run().
    """

    def __init__(
        self,
        store: Store,
        price_source: PriceSource,
        *,
        input_fn: Callable[[str], str] | None = None,
    ) -> None:
        self.store = store
        self.price_source = price_source
        self._input = input_fn or input
        self.ledger: Ledger | None = None
        self._actions: dict[str, tuple[str, Callable[[], None]]] = {
            "1": ("View summary", self.view_summary),
            "2": ("View history", self.view_history),
            "3": ("View profit/loss", self.view_profit_loss),
            "4": ("Get stock price", self.get_price),
            "5": ("Buy", self.buy),
            "6": ("Sell", self.sell),
            "7": ("Deposit", self.deposit),
        }

    # --- Prompts ---

    def _prompt(self, text: str) -> str:
        raw = self._input(text).strip()
        if raw.lower() == CANCEL_KEYWORD:
            raise _Cancelled
        return raw

    def _prompt_symbol(self, action: str) -> str | None:
        symbol = self._prompt(f"Enter stock symbol to {action} (or type '{CANCEL_KEYWORD}' to abort): ")
        if not symbol:
            print("Stock symbol cannot be empty.")
            return None
        return symbol.upper()

    def _prompt_quantity(self, text: str) -> int:
        while True:
            raw = self._prompt(text)
            try:
                return int(raw)
            except ValueError:
                print(f"Invalid input. Please enter a whole number or '{CANCEL_KEYWORD}'.")

    def _prompt_amount(self, text: str) -> Decimal:
        while True:
            raw = self._prompt(text)
            try:
                return to_decimal(raw)
            except InvalidArgumentError:
                print(f"Invalid input. Please enter a number or '{CANCEL_KEYWORD}'.")

    @staticmethod
    def _show(result: LedgerResult) -> None:
        print(result.message)
        if result.ok:
            print(f"Balance: ${result.cash_after:.2f}")

    # --- Login ---

    def login(self) -> Ledger | None:
        """Prompt until a user is opened or created. None when the user types 'exit'."""
        while True:
            username = self._input(f"Enter username (or type '{EXIT_KEYWORD}' to quit): ").strip()
            if username.lower() == EXIT_KEYWORD:
                return None
            if not username:
                print("Username cannot be empty.")
                continue
            try:
                if self.store.exists(username):
                    ledger = Ledger.open(username, self.store, self.price_source)
                    print(f"Welcome back, {ledger.username}!")
                    return ledger
                ledger = self._create_user(username)
            except LedgerError as e:
                print(f"Error: {e}")
                continue
            if ledger is not None:
                return ledger

    def _create_user(self, username: str) -> Ledger | None:
        answer = self._input(f"User '{username}' not found. Create new user? (yes/no): ").strip().lower()
        if answer not in ("yes", "y"):
            print("User creation cancelled by choice.")
            return None
        try:
            initial = self._prompt_amount(
                f"Enter initial deposit amount ($) (or type '{CANCEL_KEYWORD}' to cancel user creation): "
            )
        except _Cancelled:
            print("User creation cancelled.")
            return None
        ledger = Ledger.create(username, self.store, self.price_source, initial)
        print(f"User '{ledger.username}' created successfully with initial balance: ${ledger.cash:.2f}")
        return ledger

    # --- Menu actions ---

    def view_summary(self) -> None:
        print_summary(self.ledger)

    def view_history(self) -> None:
        print_history(self.ledger)

    def view_profit_loss(self) -> None:
        print_profit_loss(self.ledger)

    def get_price(self) -> None:
        symbol = self._prompt_symbol("get stock price")
        if symbol is None:
            return
        quote = self.ledger.quote(symbol)
        if quote is None:
            print(f"Could not retrieve quote for symbol '{symbol}'. Check symbol or API status.")
            return
        print(f"Price for {quote.symbol} ({quote.name or 'N/A'}): ${quote.price:.2f}")

    def buy(self) -> None:
        symbol = self._prompt_symbol("buy")
        if symbol is None:
            return
        quote = self.ledger.quote(symbol)
        if quote is not None:
            print(
                f"(Current Price for {symbol}: ${quote.price:.2f}. You can afford a maximum of "
                f"{shares_affordable(self.ledger.cash, quote.price)} shares with your current balance.)"
            )
        quantity = self._prompt_quantity(f"Enter number of shares to buy (or type '{CANCEL_KEYWORD}' to abort): ")
        self._show(self.ledger.buy(symbol, quantity))

    def sell(self) -> None:
        symbol = self._prompt_symbol("sell")
        if symbol is None:
            return
        print(f"You currently own {self.ledger.positions.quantity(symbol)} shares of {symbol}.")
        quote = self.ledger.quote(symbol)
        if quote is not None:
            print(f"(Current Market Price for {symbol}: ${quote.price:.2f})")
        quantity = self._prompt_quantity(f"Enter number of shares to sell (or type '{CANCEL_KEYWORD}' to abort): ")
        self._show(self.ledger.sell(symbol, quantity))

    def deposit(self) -> None:
        amount = self._prompt_amount(f"Enter amount to deposit ($) (or type '{CANCEL_KEYWORD}' to abort): ")
        self._show(self.ledger.deposit(amount))

    # --- Loop ---

    def display_menu(self) -> None:
        print("\n===== STOCK MANAGEMENT SYSTEM MENU =====")
        print(f"User: {self.ledger.username} | Balance: ${self.ledger.cash:.2f}")
        print("----------------------------------------")
        for number, label in enumerate(MENU_ITEMS, start=1):
            print(f"{number}. {label}")
        print("----------------------------------------")

    def process_command(self, choice: str) -> str:
        """Run one menu choice. Returns 'continue', 'logout' or 'exit'."""
        if choice == "8":
            print(f"Logged out {self.ledger.username}.")
            return "logout"
        if choice == "9":
            print("Exiting the application. Goodbye!")
            return "exit"
        action = self._actions.get(choice)
        if action is None:
            print(f"Invalid choice '{choice}'. Please enter a number between 1 and {len(MENU_ITEMS)}.")
            return "continue"
        name, handler = action
        try:
            handler()
        except _Cancelled:
            print(f"{name} operation cancelled.")
        except LedgerError as e:
            logger.warning("%s failed: %s", name, e)
            print(f"Error: {e}")
        return "continue"

    def run(self) -> int:
        print("Welcome to the Stock Management System!")
        try:
            while True:
                self.ledger = self.login()
                if self.ledger is None:
                    print("Exiting application.")
                    return 0
                outcome = "continue"
                while outcome == "continue":
                    self.display_menu()
                    outcome = self.process_command(
                        self._input(f"Enter your choice (1-{len(MENU_ITEMS)}): ").strip()
                    )
                if outcome == "exit":
                    return 0
        except EOFError:
            print()
            return 0
        finally:
            self.ledger = None


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="stockfolio", description="Simulated stock portfolio manager.")
    parser.add_argument("--data-dir", type=Path, help="Directory for user data files (STOCKFOLIO_DATA_DIR).")
    parser.add_argument("--price-source", choices=PRICE_SOURCES, help="Where prices come from (STOCKFOLIO_PRICE_SOURCE).")
    parser.add_argument("--prices-dir", type=Path, help="CSV price directory for --price-source csv.")
    parser.add_argument("--api-key", help="Alpha Vantage API key (ALPHAVANTAGE_API_KEY).")
    parser.add_argument("--timeout", type=float, help="Seconds per price request.")
    parser.add_argument("--log-level", help="Logging level (STOCKFOLIO_LOG_LEVEL).")
    return parser


def settings_from_args(args: argparse.Namespace, base: Settings | None = None) -> Settings:
    """Environment settings with command-line overrides applied."""
    settings = base or Settings.from_env()
    overrides = {
        "data_dir": args.data_dir,
        "price_source": args.price_source,
        "prices_dir": args.prices_dir,
        "api_key": args.api_key,
        "price_timeout": args.timeout,
        "log_level": args.log_level.upper() if args.log_level else None,
    }
    return dataclasses.replace(settings, **{k: v for k, v in overrides.items() if v is not None})


def main(argv: Sequence[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    try:
        settings = settings_from_args(args)
    except InvalidArgumentError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 2
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    app = StockfolioApp(settings.build_store(), settings.build_price_source())
    return app.run()


if __name__ == "__main__":
    sys.exit(main())
