# exchange/rate.py

from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from .currency import Currency


@dataclass(frozen=True)
class Rate:
    """ある日付の為替レート（base 1単位あたりの target の額）"""

    base: Currency
    target: Currency
    value: Decimal
    rate_date: date

    def __post_init__(self) -> None:
        if not isinstance(self.value, Decimal):
            object.__setattr__(self, "value", Decimal(str(self.value)))

        if self.value <= 0:
            raise ValueError(f"為替レートは正の値である必要があります: {self.value}")
        if self.base == self.target and self.value != 1:
            raise ValueError(f"同一通貨間のレートは1でなければなりません: {self.base}")

    def convert(self, amount: Decimal) -> Decimal:
        """金額を変換し、変換先通貨の桁数で丸める"""
        return (amount * self.value).quantize(self.target.quantum, rounding=ROUND_HALF_UP)

    def inverse(self) -> "Rate":
        return Rate(self.target, self.base, 1 / self.value, self.rate_date)
