from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from statement_ledger.core.error import DataError, InvariantViolation
from statement_ledger.exchange.currency import Currency
from statement_ledger.processors.trade.reconciler import ExecutionDateReconciler
from statement_ledger.processors.trade.record import ConcludedTrade, ExecutedTrade, StockBuy, StockSell


def _trade(trade_id="1", **overrides) -> ConcludedTrade:
    fields = dict(
        trade_id=trade_id,
        symbol="SBER",
        conclusion_time=dt.datetime(2021, 3, 1, 10, 30),
        execution_date=dt.date(2021, 3, 3),
        price=Decimal("250.5"),
        price_currency="RUB",
        volume=Decimal("2505"),
        accounting_currency="RUB",
        commission=Decimal("1.25"),
        commission_currency="RUB",
        buy_quantity=Decimal("10"),
        sell_quantity=None,
    )
    fields.update(overrides)
    return ConcludedTrade(**fields)


def test_build_corrections_only_keeps_shifted_trades():
    reconciler = ExecutionDateReconciler()
    corrections = reconciler.build_corrections([
        ExecutedTrade("1", dt.date(2021, 3, 3), dt.date(2021, 3, 4)),
        ExecutedTrade("2", dt.date(2021, 3, 3), dt.date(2021, 3, 3)),
    ])
    assert corrections == {"1": dt.date(2021, 3, 4)}


def test_duplicate_correction_is_a_data_error():
    reconciler = ExecutionDateReconciler()
    with pytest.raises(DataError):
        reconciler.build_corrections([
            ExecutedTrade("1", dt.date(2021, 3, 3), dt.date(2021, 3, 4)),
            ExecutedTrade("1", dt.date(2021, 3, 3), dt.date(2021, 3, 5)),
        ])


def test_duplicate_unshifted_records_are_not_corrections():
    reconciler = ExecutionDateReconciler()
    corrections = reconciler.build_corrections([
        ExecutedTrade("1", dt.date(2021, 3, 3), dt.date(2021, 3, 3)),
        ExecutedTrade("1", dt.date(2021, 3, 3), dt.date(2021, 3, 3)),
    ])
    assert corrections == {}


def test_correction_is_consumed_once(caplog):
    reconciler = ExecutionDateReconciler()
    reconciler.build_corrections([ExecutedTrade("T", dt.date(2021, 3, 3), dt.date(2021, 3, 5))])

    with caplog.at_level("WARNING"):
        first = reconciler.parse_trade(_trade("T"))
    second = reconciler.parse_trade(_trade("T"))

    assert first.execution_date == dt.date(2021, 3, 5)
    assert second.execution_date == dt.date(2021, 3, 3)
    assert "'T'" in caplog.text
    assert reconciler.unconsumed() == {}


def test_unconsumed_corrections_are_reported_not_raised(caplog):
    reconciler = ExecutionDateReconciler()
    reconciler.build_corrections([ExecutedTrade("42", dt.date(2021, 3, 3), dt.date(2021, 3, 5))])
    reconciler.parse_trades([_trade("1")])

    with caplog.at_level("WARNING"):
        reconciler.finish()

    assert reconciler.unconsumed() == {"42": dt.date(2021, 3, 5)}
    assert "42" in caplog.text


def test_parse_trades_classifies_direction():
    reconciler = ExecutionDateReconciler()
    buys, sells = reconciler.parse_trades([
        _trade("1"),
        _trade("2", buy_quantity=None, sell_quantity=Decimal("4"), volume=Decimal("1002")),
    ])

    assert [type(t) for t in buys] == [StockBuy]
    assert [type(t) for t in sells] == [StockSell]
    assert sells[0].quantity == Decimal("4")
    assert sells[0].volume.currency is Currency.RUB
    assert buys[0].commission.amount == Decimal("1.25")


@pytest.mark.parametrize(
    "buy_quantity,sell_quantity",
    [(Decimal("1"), Decimal("1")), (None, None)],
)
def test_trade_direction_must_be_exclusive(buy_quantity, sell_quantity):
    reconciler = ExecutionDateReconciler()
    with pytest.raises(DataError):
        reconciler.parse_trade(_trade(buy_quantity=buy_quantity, sell_quantity=sell_quantity))


@pytest.mark.parametrize(
    "overrides",
    [
        {"price": Decimal("0")},
        {"price": Decimal("-1")},
        {"buy_quantity": Decimal("0")},
        {"commission": Decimal("-0.01")},
        {"accounting_currency": "USD"},
    ],
)
def test_invalid_trade_values_are_data_errors(overrides):
    reconciler = ExecutionDateReconciler()
    with pytest.raises(DataError):
        reconciler.parse_trade(_trade(**overrides))


def test_zero_commission_defaults_to_price_currency():
    reconciler = ExecutionDateReconciler()
    trade = reconciler.parse_trade(_trade(commission=Decimal("0"), commission_currency=None))
    assert trade.commission.currency is Currency.RUB
    assert trade.commission.is_zero()


def test_nonzero_commission_without_currency_is_a_data_error():
    reconciler = ExecutionDateReconciler()
    with pytest.raises(DataError):
        reconciler.parse_trade(_trade(commission_currency=None))


def test_commission_may_be_charged_in_other_currency():
    reconciler = ExecutionDateReconciler()
    trade = reconciler.parse_trade(_trade(commission_currency="USD"))
    assert trade.commission.currency is Currency.USD
    assert trade.volume.currency is Currency.RUB


def test_volume_mismatch_is_an_invariant_violation():
    reconciler = ExecutionDateReconciler()
    with pytest.raises(InvariantViolation):
        reconciler.parse_trade(_trade(volume=Decimal("2600")))
