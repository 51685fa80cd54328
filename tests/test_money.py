from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from statement_ledger.core.error import DataError, ExchangeRateError, LoaderError, ParseError
from statement_ledger.exchange.converter import RateTableConverter
from statement_ledger.exchange.currency import Currency
from statement_ledger.exchange.money import CurrencyMismatchError, Money
from statement_ledger.exchange.rate import Rate

from conftest import eur, rub, usd


def test_arithmetic_requires_same_currency():
    assert usd(1) + usd("2.5") == usd("3.5")
    assert -usd(3) == usd(-3)
    with pytest.raises(CurrencyMismatchError):
        usd(1) + eur(1)
    with pytest.raises(DataError):
        usd(1) < rub(1)


def test_round_uses_currency_precision():
    assert usd("1.005").round() == usd("1.01")
    assert Money(Currency.JPY, Decimal("100.5")).round().amount == Decimal("101")


def test_unknown_currency_code():
    with pytest.raises(ParseError):
        Currency.from_code("XXX")
    assert Currency.from_str("xxx") is None
    assert Currency.from_str("rub") is Currency.RUB


def test_rate_table_uses_latest_rate_on_or_before_date():
    converter = RateTableConverter()
    converter.add_rate(Rate(Currency.USD, Currency.RUB, Decimal("74"), dt.date(2021, 1, 4)))
    converter.add_rate(Rate(Currency.USD, Currency.RUB, Decimal("75"), dt.date(2021, 1, 6)))

    assert converter.get_rate(Currency.USD, Currency.RUB, dt.date(2021, 1, 5)).value == Decimal("74")
    assert converter.convert(dt.date(2021, 1, 6), usd(2), Currency.RUB) == rub(150)
    assert converter.convert(dt.date(2021, 1, 6), rub(150), Currency.USD) == usd(2)

    with pytest.raises(ExchangeRateError):
        converter.get_rate(Currency.USD, Currency.RUB, dt.date(2021, 1, 3))
    with pytest.raises(ExchangeRateError):
        converter.get_rate(Currency.EUR, Currency.RUB, dt.date(2021, 1, 6))


def test_rates_added_out_of_order_are_looked_up_by_date():
    converter = RateTableConverter()
    for day, value in [(10, "76"), (4, "74"), (6, "75"), (8, "75.5")]:
        converter.add_rate(Rate(Currency.USD, Currency.RUB, Decimal(value), dt.date(2021, 1, day)))

    assert converter.get_rate(Currency.USD, Currency.RUB, dt.date(2021, 1, 5)).value == Decimal("74")
    assert converter.get_rate(Currency.USD, Currency.RUB, dt.date(2021, 1, 9)).value == Decimal("75.5")
    assert converter.get_rate(Currency.USD, Currency.RUB, dt.date(2021, 2, 1)).value == Decimal("76")
    assert converter.get_rate(Currency.RUB, Currency.USD, dt.date(2021, 1, 4)).rate_date == dt.date(2021, 1, 4)


def test_missing_rate_is_a_data_error():
    converter = RateTableConverter()
    converter.add_rate(Rate(Currency.USD, Currency.RUB, Decimal("75"), dt.date(2021, 1, 1)))

    with pytest.raises(DataError) as excinfo:
        converter.convert(dt.date(2021, 3, 1), eur(10), Currency.USD)

    error = excinfo.value
    assert isinstance(error, ExchangeRateError)
    assert (error.base_currency, error.target_currency) == ("EUR", "USD")
    assert error.rate_date == dt.date(2021, 3, 1)
    assert error.details["available_pairs"] == ["USD/RUB"]


def test_load_csv(tmp_path):
    path = tmp_path / "usdrub.csv"
    path.write_text("Date, Close\n2021-01-04, 73.5\n01/05/2021, 74.25\n", encoding="utf-8")

    converter = RateTableConverter()
    assert converter.load_csv(Currency.USD, Currency.RUB, path) == 2
    rate = converter.get_rate(Currency.USD, Currency.RUB, dt.date(2021, 1, 10))
    assert rate.value == Decimal("74.25")
    assert rate.rate_date == dt.date(2021, 1, 5)


def test_load_csv_rejects_malformed_rows(tmp_path):
    path = tmp_path / "usdrub.csv"
    path.write_text("Date,Close\n2021-01-04,n/a\n", encoding="utf-8")

    with pytest.raises(LoaderError):
        RateTableConverter().load_csv(Currency.USD, Currency.RUB, path)
