"""
Tests for price sources: StaticPriceSource, AlphaVantagePriceSource (stub session), CsvPriceSource.
"""

from decimal import Decimal

import pandas as pd
import pytest
import requests

from stockfolio.pricing import AlphaVantagePriceSource, CsvPriceSource, StaticPriceSource, load_price_history
from stockfolio.pricing.source import usable_price


class StubResponse:
    def __init__(self, body=None, status_code=200, text=""):
        self._body = body
        self.status_code = status_code
        self.text = text

    def json(self):
        if isinstance(self._body, Exception):
            raise self._body
        return self._body


class StubSession:
    """Returns a canned response (or raises) and records request params."""

    def __init__(self, response=None, exc=None):
        self.response = response
        self.exc = exc
        self.requests = []

    def get(self, url, params=None, timeout=None):
        self.requests.append((url, params, timeout))
        if self.exc is not None:
            raise self.exc
        return self.response


def _quote_body(symbol="IBM", price="182.4500"):
    return {"Global Quote": {"01. symbol": symbol, "05. price": price}}


# --- usable_price / StaticPriceSource ---


def test_usable_price():
    assert usable_price("1.5") == Decimal("1.5")
    assert usable_price(0) is None
    assert usable_price("-3") is None
    assert usable_price("nan") is None
    assert usable_price("garbage") is None


def test_static_source_normalizes_and_filters():
    prices = StaticPriceSource({"aapl": 150, "BAD": "-1"})
    assert prices.get_price(" AAPL ") == Decimal("150")
    assert prices.get_quote("BAD") is None
    assert prices.get_quote("MSFT") is None
    prices.set_price("MSFT", "300.5")
    assert prices.get_price("msft") == Decimal("300.5")
    prices.remove("MSFT")
    assert prices.get_price("MSFT") is None


# --- AlphaVantagePriceSource ---


def test_alphavantage_parses_global_quote():
    session = StubSession(StubResponse(_quote_body()))
    source = AlphaVantagePriceSource("key", base_url="http://example.test/query", timeout=3, session=session)
    quote = source.get_quote("ibm")
    assert quote.symbol == "IBM"
    assert quote.price == Decimal("182.4500")
    assert quote.name is None
    url, params, timeout = session.requests[0]
    assert url == "http://example.test/query"
    assert params == {"function": "GLOBAL_QUOTE", "symbol": "IBM", "apikey": "key"}
    assert timeout == 3


@pytest.mark.parametrize(
    "body",
    [
        {"Note": "Thank you for using Alpha Vantage! Our standard API call frequency is 5 calls per minute."},
        {"Information": "rate limited"},
        {"Error Message": "Invalid API call."},
        {"Global Quote": {}},
        {"Global Quote": {"01. symbol": "IBM"}},
        {"Global Quote": {"01. symbol": "IBM", "05. price": "n/a"}},
        {"Global Quote": {"01. symbol": "IBM", "05. price": "0.0000"}},
        ["not", "a", "dict"],
    ],
)
def test_alphavantage_bad_bodies_are_unavailable(body):
    source = AlphaVantagePriceSource("key", session=StubSession(StubResponse(body)))
    assert source.get_quote("IBM") is None


def test_alphavantage_http_error_is_unavailable():
    source = AlphaVantagePriceSource("key", session=StubSession(StubResponse(status_code=503, text="down")))
    assert source.get_price("IBM") is None


def test_alphavantage_malformed_json_is_unavailable():
    source = AlphaVantagePriceSource("key", session=StubSession(StubResponse(ValueError("bad json"))))
    assert source.get_price("IBM") is None


@pytest.mark.parametrize("exc", [requests.Timeout("slow"), requests.ConnectionError("refused")])
def test_alphavantage_transport_errors_are_unavailable(exc):
    source = AlphaVantagePriceSource("key", session=StubSession(exc=exc))
    assert source.get_price("IBM") is None


def test_alphavantage_without_key_makes_no_request():
    session = StubSession(StubResponse(_quote_body()))
    source = AlphaVantagePriceSource(None, session=session)
    assert source.get_price("IBM") is None
    assert session.requests == []


# --- CsvPriceSource ---


def _write_prices(directory, symbol, rows):
    df = pd.DataFrame(rows, columns=["Date", "Open", "High", "Low", "Close", "Volume"])
    path = directory / f"{symbol}.csv"
    df.to_csv(path, index=False)
    return path


def test_load_price_history_sorts_and_normalizes(tmp_path):
    path = _write_prices(
        tmp_path,
        "AAPL",
        [
            ["2024-01-03", 102, 103, 101, 102.5, 1000],
            ["2024-01-02", 100, 101, 99, 100.5, 1000],
        ],
    )
    df = load_price_history(path)
    assert list(df.columns) == ["open", "high", "low", "close", "volume"]
    assert isinstance(df.index, pd.DatetimeIndex)
    assert df.index.name == "datetime"
    assert df["close"].iloc[-1] == 102.5


def test_load_price_history_aliases(tmp_path):
    path = tmp_path / "X.csv"
    pd.DataFrame({"date": ["2024-01-01"], "o": [1.0], "c": [2.0], "vol": [10]}).to_csv(path, index=False)
    df = load_price_history(path)
    assert list(df.columns) == ["open", "close", "volume"]


def test_csv_source_latest_close(tmp_path):
    _write_prices(
        tmp_path,
        "AAPL",
        [
            ["2024-01-02", 100, 101, 99, 100.5, 1000],
            ["2024-01-03", 102, 103, 101, 102.25, 1000],
        ],
    )
    source = CsvPriceSource(tmp_path)
    quote = source.get_quote("aapl")
    assert quote.symbol == "AAPL"
    assert quote.price == Decimal("102.25")


def test_csv_source_missing_or_unusable(tmp_path):
    source = CsvPriceSource(tmp_path)
    assert source.get_quote("NOPE") is None

    (tmp_path / "NOCLOSE.csv").write_text("date,open\n2024-01-01,1\n")
    assert source.get_quote("NOCLOSE") is None

    _write_prices(tmp_path, "ZERO", [["2024-01-01", 1, 1, 1, 0, 1]])
    assert source.get_quote("ZERO") is None
