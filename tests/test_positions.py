"""
Tests for PositionBook, Position and the money helpers it relies on.
"""

import itertools
from decimal import Decimal

import pytest

from stockfolio.errors import InvalidArgumentError
from stockfolio.money import check_quantity, normalize_symbol, to_decimal
from stockfolio.positions import Position, PositionBook, ReduceOutcome


# --- Money helpers ---


def test_to_decimal_converts_float_through_str():
    assert to_decimal(0.1) == Decimal("0.1")
    assert to_decimal("1,250.50") == Decimal("1250.50")
    assert to_decimal(7) == Decimal(7)


@pytest.mark.parametrize("bad", ["abc", "", "NaN", "inf", True, None, [1]])
def test_to_decimal_rejects_non_numbers(bad):
    with pytest.raises(InvalidArgumentError):
        to_decimal(bad)


def test_normalize_symbol():
    assert normalize_symbol("  aapl ") == "AAPL"
    with pytest.raises(InvalidArgumentError):
        normalize_symbol("   ")


def test_check_quantity():
    assert check_quantity(3) == 3
    for bad in (0, -1, 1.5, True, "2"):
        with pytest.raises(InvalidArgumentError):
            check_quantity(bad)


# --- add_or_update ---


def test_add_opens_position_at_price():
    book = PositionBook()
    pos = book.add_or_update("aapl", 10, Decimal("150"))
    assert pos == Position("AAPL", 10, Decimal("150"))
    assert book.get("AAPL") == pos
    assert "aapl" in book
    assert len(book) == 1


def test_add_reaverages_cost_basis():
    book = PositionBook()
    book.add_or_update("AAPL", 10, Decimal("150"))
    pos = book.add_or_update("AAPL", 5, Decimal("200"))
    assert pos.quantity == 15
    assert pos.average_cost.quantize(Decimal("0.01")) == Decimal("166.67")
    assert pos.cost_basis == Decimal("2500")


def test_weighted_average_independent_of_order():
    a = PositionBook()
    a.add_or_update("X", 3, Decimal("10"))
    a.add_or_update("X", 7, Decimal("20"))
    b = PositionBook()
    b.add_or_update("X", 7, Decimal("20"))
    b.add_or_update("X", 3, Decimal("10"))
    assert a.get("X").average_cost == b.get("X").average_cost == Decimal("17")


def test_weighted_average_exact_for_every_purchase_order():
    buys = [(8, Decimal("293.6")), (41, Decimal("823.38")), (38, Decimal("82.08")), (37, Decimal("768.48"))]
    expected_cost = sum(q * p for q, p in buys)
    results = set()
    for order in itertools.permutations(buys):
        book = PositionBook()
        for quantity, price in order:
            book.add_or_update("X", quantity, price)
        pos = book.get("X")
        assert pos.cost_basis == expected_cost
        results.add((pos.quantity, pos.average_cost, pos.cost_basis))
    assert results == {(124, expected_cost / 124, expected_cost)}


def test_sell_then_buy_uses_remaining_cost_basis():
    book = PositionBook()
    book.add_or_update("X", 3, Decimal("10"))
    book.reduce("X", 1)
    assert book.get("X").cost_basis == Decimal("20")
    pos = book.add_or_update("X", 2, Decimal("25"))
    assert pos.cost_basis == Decimal("70")
    assert pos.average_cost == Decimal("17.5")


def test_add_rejects_negative_price_and_bad_quantity():
    book = PositionBook()
    with pytest.raises(InvalidArgumentError):
        book.add_or_update("AAPL", 1, Decimal("-1"))
    with pytest.raises(InvalidArgumentError):
        book.add_or_update("AAPL", 0, Decimal("1"))
    assert len(book) == 0


# --- reduce ---


def test_reduce_keeps_average_cost():
    book = PositionBook()
    book.add_or_update("MSFT", 10, Decimal("300"))
    assert book.reduce("msft", 4) is ReduceOutcome.REDUCED
    pos = book.get("MSFT")
    assert pos.quantity == 6
    assert pos.average_cost == Decimal("300")


def test_reduce_to_zero_removes_position():
    book = PositionBook()
    book.add_or_update("MSFT", 10, Decimal("300"))
    assert book.reduce("MSFT", 10) is ReduceOutcome.CLOSED
    assert book.get("MSFT") is None
    assert book.quantity("MSFT") == 0
    assert "MSFT" not in book


def test_reduce_failures_leave_book_unchanged():
    book = PositionBook()
    book.add_or_update("MSFT", 10, Decimal("300"))
    assert book.reduce("AAPL", 1) is ReduceOutcome.NOT_FOUND
    assert book.reduce("MSFT", 11) is ReduceOutcome.INSUFFICIENT_SHARES
    assert not ReduceOutcome.INSUFFICIENT_SHARES.ok
    assert book.get("MSFT") == Position("MSFT", 10, Decimal("300"))


# --- Book views and records ---


def test_restore_puts_back_or_removes():
    book = PositionBook()
    before = book.add_or_update("AAPL", 2, Decimal("10"))
    book.add_or_update("AAPL", 2, Decimal("20"))
    book.restore(before, "AAPL")
    assert book.get("AAPL") == before
    book.restore(None, "AAPL")
    assert "AAPL" not in book


def test_iteration_sorted_by_symbol():
    book = PositionBook()
    book.add_or_update("MSFT", 1, Decimal("300"))
    book.add_or_update("AAPL", 2, Decimal("150"))
    assert [p.symbol for p in book] == ["AAPL", "MSFT"]
    assert book.symbols() == ["AAPL", "MSFT"]
    assert sum(p.cost_basis for p in book) == Decimal("600")


def test_record_round_trip_keeps_cost_basis():
    book = PositionBook()
    book.add_or_update("AAPL", 1, Decimal("10"))
    pos = book.add_or_update("AAPL", 2, Decimal("10.01"))
    record = pos.to_record()
    assert record["cost_basis"] == "30.02"
    assert Position.from_record(record) == pos


def test_from_record_without_cost_basis_derives_it():
    pos = Position.from_record({"symbol": "aapl", "quantity": "3", "average_cost": "100.25"})
    assert pos == Position("AAPL", 3, Decimal("100.25"))
    assert pos.cost_basis == Decimal("300.75")


def test_from_record_rejects_corrupt_rows():
    with pytest.raises(InvalidArgumentError):
        Position.from_record({"symbol": "AAPL", "quantity": 0, "average_cost": "1"})
    with pytest.raises(InvalidArgumentError):
        Position.from_record({"symbol": "AAPL", "quantity": "abc", "average_cost": "1"})
