from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest
import yaml

from statement_ledger.app.config import ConfigManager
from statement_ledger.core.period import Period
from statement_ledger.exchange.currency import Currency
from statement_ledger.exchange.money import Money


def write_config(tmp_path, **options):
    options.setdefault("logging", {"log_dir": str(tmp_path / "logs")})
    path = tmp_path / "config.yaml"
    path.write_text(yaml.safe_dump(options, allow_unicode=True), encoding="utf-8")
    return path


def usd(amount) -> Money:
    return Money(Currency.USD, Decimal(str(amount)))


def eur(amount) -> Money:
    return Money(Currency.EUR, Decimal(str(amount)))


def rub(amount) -> Money:
    return Money(Currency.RUB, Decimal(str(amount)))


@pytest.fixture()
def year_2021() -> Period:
    return Period(dt.date(2021, 1, 1), dt.date(2021, 12, 31))


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("LEDGER_DEBUG", "LEDGER_USE_COLOR", "LEDGER_STATEMENT_FILES", "LEDGER_YEAR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture()
def config() -> ConfigManager:
    return ConfigManager()
