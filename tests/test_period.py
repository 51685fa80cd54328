from __future__ import annotations

import datetime as dt
from decimal import Decimal

import pytest

from statement_ledger.core.error import DataError
from statement_ledger.core.period import Period
from statement_ledger.core.validation import DecimalRestrictions, validate_decimal


def test_period_bounds_are_inclusive(year_2021):
    assert year_2021.contains(dt.date(2021, 1, 1))
    assert year_2021.contains(dt.date(2021, 12, 31))
    assert not year_2021.contains(dt.date(2022, 1, 1))
    assert year_2021.days() == 365
    assert year_2021.prev_date() == dt.date(2020, 12, 31)
    assert year_2021.next_date() == dt.date(2022, 1, 1)
    assert str(year_2021) == "01.01.2021 - 31.12.2021"


def test_half_open_period():
    period = Period.half_open(dt.date(2021, 3, 1), dt.date(2021, 4, 1))
    assert period == Period(dt.date(2021, 3, 1), dt.date(2021, 3, 31))


def test_inverted_period_is_rejected():
    with pytest.raises(DataError):
        Period(dt.date(2021, 2, 1), dt.date(2021, 1, 31))


@pytest.mark.parametrize(
    "value,restrictions,valid",
    [
        ("1", DecimalRestrictions.STRICTLY_POSITIVE, True),
        ("0", DecimalRestrictions.STRICTLY_POSITIVE, False),
        ("0", DecimalRestrictions.POSITIVE_OR_ZERO, True),
        ("-0.01", DecimalRestrictions.POSITIVE_OR_ZERO, False),
        ("-5", DecimalRestrictions.NON_ZERO, True),
        ("0.00", DecimalRestrictions.NON_ZERO, False),
    ],
)
def test_validate_decimal(value, restrictions, valid):
    if valid:
        assert validate_decimal(Decimal(value), restrictions) == Decimal(value)
    else:
        with pytest.raises(DataError) as excinfo:
            validate_decimal(Decimal(value), restrictions, "数量", {"trade_id": "7"})
        assert excinfo.value.details["trade_id"] == "7"
        assert excinfo.value.details["restrictions"] == restrictions.name
