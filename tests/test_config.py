from __future__ import annotations

import datetime as dt
from decimal import Decimal
from pathlib import Path

import pytest

from statement_ledger.app.config import ConfigManager
from statement_ledger.core.error import ConfigurationError
from statement_ledger.exchange.currency import Currency
from statement_ledger.processors.tax.scheduler import FixedTaxPaymentDay, OnCloseTaxPaymentDay

from conftest import write_config


def test_defaults(config):
    assert config.statement_files == []
    assert config.year is None
    assert config.tolerance == Decimal("0.015")
    assert config.tax_currency is Currency.USD
    assert config.tax_rate is None
    assert config.tax_payment_day == FixedTaxPaymentDay(3, 15)
    assert config.rate_sources == []


def test_load_yaml(tmp_path):
    path = write_config(
        tmp_path,
        statement_files=["a.json", "b.json"],
        year=2021,
        tolerance="0.01",
        taxes={"currency": "RUB", "payment_month": 4, "payment_day": 30, "rate": "0.13"},
        assets_currency="EUR",
        exchange_rates=[{"base": "USD", "target": "RUB", "history_file": "USDRUB.csv"}],
    )
    config = ConfigManager(path)

    assert config.statement_files == [Path("a.json"), Path("b.json")]
    assert config.year == 2021
    assert config.tolerance == Decimal("0.01")
    assert config.tax_currency is Currency.RUB
    assert config.tax_rate == Decimal("0.13")
    assert config.tax_payment_day.get(dt.date(2021, 6, 1)) == dt.date(2022, 4, 30)
    assert config.assets_currency is Currency.EUR

    source, = config.rate_sources
    assert (source.base, source.target, source.history_file) == (Currency.USD, Currency.RUB, Path("USDRUB.csv"))


def test_account_close_date_selects_on_close_payment(tmp_path):
    config = ConfigManager(write_config(tmp_path, taxes={"account_close_date": "2022-06-30"}))
    assert config.tax_payment_day == OnCloseTaxPaymentDay(dt.date(2022, 6, 30))


def test_empty_sections_are_allowed(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("statement_files:\nexchange_rates:\nlogging:\n", encoding="utf-8")
    config = ConfigManager(path)
    assert config.statement_files == []
    assert config.rate_sources == []


def test_environment_overrides_file(tmp_path, monkeypatch):
    monkeypatch.setenv("LEDGER_YEAR", "2020")
    monkeypatch.setenv("LEDGER_STATEMENT_FILES", "x.json,y.json")
    monkeypatch.setenv("LEDGER_USE_COLOR", "no")

    config = ConfigManager(write_config(tmp_path, year=2021, statement_files=["a.json"]))

    assert config.year == 2020
    assert config.statement_files == [Path("x.json"), Path("y.json")]
    assert config.use_color is False


def test_invalid_year_in_environment(monkeypatch):
    monkeypatch.setenv("LEDGER_YEAR", "last")
    with pytest.raises(ConfigurationError):
        ConfigManager()


def test_missing_file(tmp_path):
    with pytest.raises(ConfigurationError):
        ConfigManager(tmp_path / "missing.yaml")


@pytest.mark.parametrize(
    "options",
    [
        {"taxes": {"currency": "XXX"}},
        {"assets_currency": "???"},
        {"tolerance": "-1"},
        {"tolerance": "abc"},
        {"taxes": {"payment_month": 2, "payment_day": 30}},
    ],
)
def test_invalid_values(tmp_path, options):
    with pytest.raises(ConfigurationError):
        ConfigManager(write_config(tmp_path, **options))


def test_create_logging_config_creates_log_dir(tmp_path):
    config = ConfigManager(write_config(tmp_path))
    logging_config = config.create_logging_config()

    assert (tmp_path / "logs").is_dir()
    assert logging_config["handlers"]["file"]["filename"] == str(tmp_path / "logs" / "processing.log")
    assert logging_config["handlers"]["console"]["level"] == "WARNING"
