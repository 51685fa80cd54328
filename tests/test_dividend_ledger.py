from __future__ import annotations

import datetime as dt
import itertools

import pytest

from statement_ledger.core.error import DataError, ParseError
from statement_ledger.processors.dividend.ledger import DividendAccrualLedger, parse_dividend_description
from statement_ledger.processors.dividend.record import DividendRow

from conftest import eur, usd


@pytest.mark.parametrize(
    "description,symbol",
    [
        ("VNQ (US9229085538) Cash Dividend USD 0.7318 (Ordinary Dividend)", "VNQ"),
        ("IEMG(US46434G1031) Cash Dividend 0.44190500 USD per Share (Ordinary Dividend)", "IEMG"),
        ("BND(US9219378356) Cash Dividend 0.18685800 USD per Share (Mixed Income)", "BND"),
        ("VNQ(US9229085538) Cash Dividend 0.82740000 USD per Share (Return of Capital)", "VNQ"),
        ("EXH4(DE000A0H08J9) Cash Dividend EUR 0.013046 per Share (Mixed Income)", "EXH4"),
        ("BND(US9219378356) Cash Dividend USD 0.193413 per Share - Reversal (Ordinary Dividend)", "BND"),
        ("RDS B(US7802591070) Cash Dividend USD 0.32 per Share (Ordinary Dividend)", "RDS-B"),
        ("UNIT(US91325V1089) Payment in Lieu of Dividend (Ordinary Dividend)", "UNIT"),
    ],
)
def test_parse_dividend_description(description, symbol):
    assert parse_dividend_description(description) == symbol


def test_parse_dividend_description_keeps_offending_text():
    text = "Cash Dividend USD 0.32 per Share"
    with pytest.raises(ParseError) as excinfo:
        parse_dividend_description(text)
    assert excinfo.value.raw_value == text
    assert text in str(excinfo.value)


def test_reversal_is_netted_against_payment():
    ledger = DividendAccrualLedger()
    ledger.record(dt.date(2021, 1, 1), "BND", usd(100))
    ledger.record(dt.date(2021, 1, 1), "BND", usd(-40))

    assert ledger.get_accrual(dt.date(2021, 1, 1), "BND").net == usd(60)
    dividends = ledger.finalize()
    assert len(dividends) == 1
    assert dividends[0].issuer == "BND"
    assert dividends[0].amount == usd(60)


def test_full_reversal_nets_to_zero_and_is_dropped():
    ledger = DividendAccrualLedger()
    accrual = ledger.record(dt.date(2021, 3, 5), "VNQ", usd("12.34"))
    ledger.record(dt.date(2021, 3, 5), "VNQ", usd("-12.34"))

    assert accrual.net.is_zero()
    assert ledger.finalize() == []


def test_netting_is_order_independent():
    contributions = [usd("10.5"), usd(-3), usd("7.25"), usd("-1.75")]
    results = set()

    for order in itertools.permutations(contributions):
        ledger = DividendAccrualLedger()
        for amount in order:
            ledger.record(dt.date(2021, 6, 30), "IEMG", amount)
        results.add(ledger.get_accrual(dt.date(2021, 6, 30), "IEMG").net)

    assert results == {usd(13)}


def test_identities_are_keyed_by_date_and_issuer():
    ledger = DividendAccrualLedger()
    ledger.record(dt.date(2021, 1, 1), "BND", usd(1))
    ledger.record(dt.date(2021, 1, 2), "BND", usd(2))
    ledger.record(dt.date(2021, 1, 1), "VNQ", usd(3))

    assert len(ledger) == 3
    assert [(d.date, d.issuer) for d in ledger.finalize()] == [
        (dt.date(2021, 1, 1), "BND"),
        (dt.date(2021, 1, 1), "VNQ"),
        (dt.date(2021, 1, 2), "BND"),
    ]


def test_zero_amount_is_rejected():
    ledger = DividendAccrualLedger()
    with pytest.raises(DataError):
        ledger.record(dt.date(2021, 1, 1), "BND", usd(0))


def test_currency_mismatch_is_rejected():
    ledger = DividendAccrualLedger()
    ledger.record(dt.date(2021, 1, 1), "EXH4", eur(5))
    with pytest.raises(DataError) as excinfo:
        ledger.record(dt.date(2021, 1, 1), "EXH4", usd(-5))
    assert excinfo.value.details["issuer"] == "EXH4"


def test_reversal_without_payment_is_a_data_error():
    ledger = DividendAccrualLedger()
    ledger.record(dt.date(2021, 1, 1), "BND", usd(-40))
    with pytest.raises(DataError):
        ledger.finalize()


def test_reversal_listed_before_payment_is_accepted():
    ledger = DividendAccrualLedger()
    ledger.record(dt.date(2021, 1, 1), "BND", usd(-40))
    ledger.record(dt.date(2021, 1, 1), "BND", usd(100))
    assert ledger.finalize()[0].amount == usd(60)


def test_negative_net_is_kept_with_warning(caplog):
    ledger = DividendAccrualLedger()
    ledger.record(dt.date(2021, 1, 1), "BND", usd(10))
    ledger.record(dt.date(2021, 1, 1), "BND", usd(-15))

    with caplog.at_level("WARNING"):
        dividends = ledger.finalize()

    assert dividends[0].amount == usd(-5)
    assert "BND" in caplog.text


def test_record_row_parses_description():
    ledger = DividendAccrualLedger()
    ledger.record_row(DividendRow(
        dt.date(2021, 2, 1),
        "RDS B(US7802591070) Cash Dividend USD 0.32 per Share (Ordinary Dividend)",
        usd("3.2"),
    ))
    assert ledger.get_accrual(dt.date(2021, 2, 1), "RDS-B").net == usd("3.2")
