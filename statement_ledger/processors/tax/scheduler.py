"""
納税スケジュールモジュール

実現損益を納税日ごとのバケットに集計し、バケットごとの納税額を計算します。
納税日は1暦年につき1つだけになるように設計されています。
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import date
from decimal import Decimal, ROUND_HALF_UP
from typing import Callable, Dict
import logging

from ...config.settings import DEFAULT_TAX_PAYMENT_DAY, DEFAULT_TAX_PAYMENT_MONTH
from ...core.error import ConfigurationError, InvariantViolation

TaxFunction = Callable[[Decimal], Decimal]


class TaxPaymentDay(ABC):
    """実現日から納税日を求める規則"""

    @abstractmethod
    def get(self, income_date: date) -> date:
        """指定された実現日の利益に対するおおよその納税日"""
        pass


@dataclass(frozen=True)
class FixedTaxPaymentDay(TaxPaymentDay):
    """実現年の翌年の決まった月日に納税する"""
    month: int = DEFAULT_TAX_PAYMENT_MONTH
    day: int = DEFAULT_TAX_PAYMENT_DAY

    def __post_init__(self) -> None:
        try:
            date(2000, self.month, self.day)
        except ValueError as e:
            raise ConfigurationError(f"不正な納税日: {self.month}/{self.day}") from e

    def get(self, income_date: date) -> date:
        year = income_date.year + 1
        try:
            return date(year, self.month, self.day)
        except ValueError:
            # 2/29 を平年に当てはめた場合
            return date(year, self.month, self.day - 1)


@dataclass(frozen=True)
class OnCloseTaxPaymentDay(TaxPaymentDay):
    """口座閉鎖時に納税する（閉鎖日は呼び出し側が決定する）"""
    close_date: date

    def get(self, income_date: date) -> date:
        return self.close_date


def flat_rate_tax(rate: Decimal) -> TaxFunction:
    """
    一律税率の納税額関数を生成

    損失の場合の納税額はゼロとします。
    """
    rate = Decimal(str(rate))
    if not Decimal('0') <= rate <= Decimal('1'):
        raise ConfigurationError(f"不正な税率: {rate}")

    def tax_to_pay(profit: Decimal) -> Decimal:
        if profit <= 0:
            return Decimal('0')
        return (profit * rate).quantize(Decimal('0.01'), rounding=ROUND_HALF_UP)

    return tax_to_pay


class TaxPaymentScheduler:
    """
    納税スケジューラ

    Attributes:
        tax_payment_day: 納税日の規則
        _profit: 納税日から累計利益へのマップ
        logger: ロガーインスタンス
    """

    def __init__(self, tax_payment_day: TaxPaymentDay = FixedTaxPaymentDay()) -> None:
        self.tax_payment_day = tax_payment_day
        self._profit: Dict[date, Decimal] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def record_profit(self, realization_date: date, amount: Decimal) -> date:
        """
        実現損益を納税日のバケットに加算

        Args:
            realization_date: 実現日
            amount: 符号付きの損益

        Returns:
            加算先の納税日
        """
        payment_date = self.tax_payment_day.get(realization_date)
        self._profit[payment_date] = self._profit.get(payment_date, Decimal('0')) + amount
        self.logger.debug(f"損益記録: {realization_date} {amount} -> 納税日 {payment_date}")
        return payment_date

    def profit_buckets(self) -> Dict[date, Decimal]:
        """納税日順の累計利益"""
        return dict(sorted(self._profit.items()))

    def finalize(self, tax_to_pay: TaxFunction) -> Dict[date, Decimal]:
        """
        バケットごとの納税額を計算

        Args:
            tax_to_pay: 利益から納税額を求める関数

        Returns:
            納税日から納税額へのマップ

        Raises:
            InvariantViolation: 同じ年に納税日が2つ以上ある場合
        """
        taxes: Dict[date, Decimal] = {}
        years: Dict[int, date] = {}

        for payment_date, profit in sorted(self._profit.items()):
            other = years.setdefault(payment_date.year, payment_date)
            if other != payment_date:
                raise InvariantViolation(
                    f"{payment_date.year}年に納税日が複数あります: {other}, {payment_date}",
                    {'year': payment_date.year, 'dates': [other, payment_date]}
                )

            taxes[payment_date] = tax_to_pay(profit)

        return taxes
