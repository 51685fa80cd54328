"""
資金移動集計モジュール

時系列順の資金移動を1回の走査で通貨別に集計し、
期首残高 + 入金 - 出金 = 期末残高 の保存則を検証します。
"""

from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Mapping, Optional
import logging

from ...config.settings import CONSERVATION_TOLERANCE
from ...core.error import InvariantViolation
from ...core.period import Period
from ...exchange.currency import Currency
from ...exchange.money import Money
from .record import CashFlow


def _round(amount: Decimal, currency: Currency) -> Decimal:
    return amount.quantize(currency.quantum, rounding=ROUND_HALF_UP)


@dataclass
class CashFlowSummary:
    """通貨別の資金移動サマリー"""
    currency: Currency
    starting: Decimal = Decimal('0')
    deposits: Decimal = Decimal('0')
    withdrawals: Decimal = Decimal('0')
    ending: Decimal = Decimal('0')

    def add(self, amount: Money) -> None:
        if amount.is_positive():
            self.deposits += amount.amount
        elif amount.is_negative():
            self.withdrawals -= amount.amount
        self.ending += amount.amount

    @property
    def expected_ending(self) -> Decimal:
        """丸めた 期首 + 入金 - 出金"""
        return (
            _round(self.starting, self.currency)
            + _round(self.deposits, self.currency)
            - _round(self.withdrawals, self.currency)
        )


@dataclass
class CashFlowReport:
    """資金移動レポートのデータ"""
    period: Period
    summaries: Dict[Currency, CashFlowSummary] = field(default_factory=dict)
    cash_flows: List[CashFlow] = field(default_factory=list)

    @property
    def currencies(self) -> List[Currency]:
        return list(self.summaries)


def check_conservation(summary: CashFlowSummary, tolerance: Decimal = CONSERVATION_TOLERANCE) -> None:
    """
    保存則の検証

    Raises:
        InvariantViolation: 期首 + 入金 - 出金 が期末残高と許容誤差を超えて異なる場合
    """
    expected = summary.expected_ending
    if abs(expected - summary.ending) > tolerance:
        raise InvariantViolation(
            f"{summary.currency}の資金移動が一致しません: "
            f"{summary.starting} + {summary.deposits} - {summary.withdrawals} = {expected} != {summary.ending}",
            {'currency': summary.currency.code, 'starting': summary.starting,
             'deposits': summary.deposits, 'withdrawals': summary.withdrawals,
             'ending': summary.ending}
        )


def check_attribution(cash_flows: Iterable[CashFlow], currencies: Iterable[Currency]) -> None:
    """
    各資金移動が宣言された足の数だけ通貨に計上されることを検証

    Raises:
        InvariantViolation: 計上先の通貨数が足の数と一致しない場合
    """
    currencies = list(currencies)

    for cash_flow in cash_flows:
        matched = 0
        for currency in currencies:
            if cash_flow.amount.currency == currency:
                matched += 1
            elif cash_flow.sibling_amount is not None and cash_flow.sibling_amount.currency == currency:
                matched += 1

        expected = 1 if cash_flow.sibling_amount is None else 2
        if expected > cash_flow.operation.max_legs or matched != expected:
            raise InvariantViolation(
                f"資金移動の計上先が不正です: {cash_flow.description} "
                f"({cash_flow.operation.name}, 期待 {expected}, 実際 {matched})",
                {'date': cash_flow.date, 'operation': cash_flow.operation.name}
            )


class CashFlowSummarizer:
    """
    資金移動の集計クラス

    1回のレポート生成が所有する集計器です。
    資金移動は生成元で時系列順に並べられている前提で、再ソートしません。

    Attributes:
        period: 集計期間
        _summaries: 通貨別サマリー
        _cash_flows: 期間内の資金移動
        logger: ロガーインスタンス
    """

    def __init__(
        self,
        period: Period,
        starting_balances: Optional[Mapping[Currency, Money]] = None,
        tolerance: Decimal = CONSERVATION_TOLERANCE,
    ) -> None:
        self.period = period
        self.tolerance = tolerance
        self._summaries: Dict[Currency, CashFlowSummary] = {}
        self._cash_flows: List[CashFlow] = []
        self._closed = False
        self.logger = logging.getLogger(self.__class__.__name__)

        for currency, balance in (starting_balances or {}).items():
            summary = self._get_summary(currency)
            summary.starting = balance.amount
            summary.ending = balance.amount

    def _get_summary(self, currency: Currency) -> CashFlowSummary:
        summary = self._summaries.get(currency)
        if summary is None:
            summary = CashFlowSummary(currency)
            self._summaries[currency] = summary
        return summary

    def process(self, cash_flows: Iterable[CashFlow]) -> None:
        """
        資金移動を走査して集計

        Args:
            cash_flows: 時系列順の資金移動
        """
        if self._closed:
            raise InvariantViolation("レポート作成後の資金移動は集計できません")

        skipped = 0
        for cash_flow in cash_flows:
            if not self.period.contains(cash_flow.date):
                skipped += 1
                continue

            self._cash_flows.append(cash_flow)
            self._get_summary(cash_flow.amount.currency).add(cash_flow.amount)
            if cash_flow.sibling_amount is not None:
                self._get_summary(cash_flow.sibling_amount.currency).add(cash_flow.sibling_amount)

        self.logger.debug(
            f"資金移動集計: {len(self._cash_flows)}件 (期間外 {skipped}件) {self.period}")

    def build_report(self, observed_ending: Optional[Mapping[Currency, Money]] = None) -> CashFlowReport:
        """
        集計結果を検証してレポートデータを作成

        Args:
            observed_ending: 取引報告書に記載された期末残高（通貨別）。
                記載のない通貨は集計中の残高を期末残高とします

        Returns:
            通貨コード順のサマリーと資金移動一覧

        Raises:
            InvariantViolation: 保存則または計上先の検証に失敗した場合
        """
        for currency, balance in (observed_ending or {}).items():
            self._get_summary(currency).ending = balance.amount

        self._closed = True

        summaries = {
            currency: self._summaries[currency]
            for currency in sorted(self._summaries, key=lambda c: c.code)
        }

        check_attribution(self._cash_flows, summaries)
        for summary in summaries.values():
            check_conservation(summary, self.tolerance)

        return CashFlowReport(self.period, summaries, list(self._cash_flows))
