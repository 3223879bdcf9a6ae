"""
Snapshot persistence keyed by username.

A LedgerSnapshot is the unit of persistence: cash, every position and the full
transaction history of one user. Stores load and save whole snapshots; last
write wins. The in-memory ledger stays authoritative if a save fails.
"""

from __future__ import annotations

import copy
import json
import logging
import os
import re
import tempfile
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import Decimal
from pathlib import Path
from typing import Any

from stockfolio.errors import InvalidArgumentError, NotFoundError, PersistenceError
from stockfolio.money import ZERO, to_decimal
from stockfolio.positions import Position
from stockfolio.transactions import Transaction, transaction_from_record, transaction_to_record

logger = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1
_USERNAME_RE = re.compile(r"[A-Za-z0-9_][A-Za-z0-9_.-]*")


def validate_username(username: str) -> str:
    """Stripped username. Must be non-empty and safe to use as a file name."""
    if not isinstance(username, str) or not username.strip():
        raise InvalidArgumentError("Username cannot be empty.")
    name = username.strip()
    if not _USERNAME_RE.fullmatch(name):
        raise InvalidArgumentError(
            f"Invalid username {name!r}: use letters, digits, '_', '-' or '.'"
        )
    return name


@dataclass(frozen=True)
class LedgerSnapshot:
    """Everything persisted for one user."""

    username: str
    cash: Decimal = ZERO
    positions: tuple[Position, ...] = field(default_factory=tuple)
    transactions: tuple[Transaction, ...] = field(default_factory=tuple)

    def to_dict(self) -> dict[str, Any]:
        return {
            "version": SNAPSHOT_VERSION,
            "username": self.username,
            "cash": str(self.cash),
            "positions": [p.to_record() for p in self.positions],
            "transactions": [transaction_to_record(tx) for tx in self.transactions],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LedgerSnapshot:
        try:
            return cls(
                username=validate_username(data["username"]),
                cash=to_decimal(data["cash"]),
                positions=tuple(Position.from_record(r) for r in data.get("positions", [])),
                transactions=tuple(transaction_from_record(r) for r in data.get("transactions", [])),
            )
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidArgumentError(f"Corrupt snapshot: {e!s}") from e


class Store(ABC):
    """Persists LedgerSnapshots by username."""

    @abstractmethod
    def load(self, username: str) -> LedgerSnapshot:
        """Snapshot for username. Raises NotFoundError for an unknown user."""
        ...

    @abstractmethod
    def save(self, snapshot: LedgerSnapshot) -> None:
        """Replace the stored snapshot. Raises PersistenceError on I/O failure."""
        ...

    @abstractmethod
    def exists(self, username: str) -> bool:
        ...


class InMemoryStore(Store):
    """Keeps serialized snapshots in a dict. Loads return fresh objects."""

    def __init__(self) -> None:
        self._data: dict[str, dict[str, Any]] = {}
        self.save_count = 0

    def load(self, username: str) -> LedgerSnapshot:
        name = validate_username(username)
        if name not in self._data:
            raise NotFoundError(f"Unknown user: {name}")
        return LedgerSnapshot.from_dict(copy.deepcopy(self._data[name]))

    def save(self, snapshot: LedgerSnapshot) -> None:
        self._data[validate_username(snapshot.username)] = snapshot.to_dict()
        self.save_count += 1

    def exists(self, username: str) -> bool:
        return validate_username(username) in self._data


class JsonFileStore(Store):
    """
    One <username>.json file per user under directory.
    Writes go to a temp file in the same directory and are moved into place with os.replace.
    """

    def __init__(self, directory: str | Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, username: str) -> Path:
        return self._directory / f"{validate_username(username)}.json"

    def load(self, username: str) -> LedgerSnapshot:
        path = self.path_for(username)
        if not path.exists():
            raise NotFoundError(f"Unknown user: {username.strip()}")
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except OSError as e:
            raise PersistenceError(f"Error loading data from {path}: {e!s}") from e
        except json.JSONDecodeError as e:
            raise PersistenceError(f"Corrupt data file {path}: {e!s}") from e
        try:
            snapshot = LedgerSnapshot.from_dict(data)
        except InvalidArgumentError as e:
            raise PersistenceError(f"Corrupt data file {path}: {e!s}") from e
        logger.debug("Loaded snapshot for %s from %s", username, path)
        return snapshot

    def save(self, snapshot: LedgerSnapshot) -> None:
        target = self.path_for(snapshot.username)
        payload = json.dumps(snapshot.to_dict(), indent=2, sort_keys=True)
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            fd, tmp = tempfile.mkstemp(prefix=f".{target.stem}_", suffix=".json", dir=self._directory)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(payload)
                os.replace(tmp, target)
            finally:
                if os.path.exists(tmp):
                    os.unlink(tmp)
        except OSError as e:
            raise PersistenceError(f"Error saving data to {target}: {e!s}") from e
        logger.debug("Saved snapshot for %s to %s", snapshot.username, target)

    def exists(self, username: str) -> bool:
        return self.path_for(username).exists()

