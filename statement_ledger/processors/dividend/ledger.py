"""
配当相殺モジュール

取引報告書の配当明細を（支払日, 発行体）単位で集計し、
同一配当に対する取消（リバーサル）を相殺します。
集計は加算の順序に依存しないため、取消が元の支払いより
先に現れても同じ結果になります。
"""

from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
import logging

from ...core.error import DataError, ParseError
from ...exchange.currency import Currency
from ...exchange.money import Money
from .config import DESCRIPTION_PATTERN, SYMBOL_CLASS_SEPARATOR
from .record import Dividend, DividendId, DividendRow


def parse_dividend_description(description: str) -> str:
    """
    配当明細の説明文から発行体シンボルを抽出

    Args:
        description: "<SYMBOL>[ ](<ISIN>) <残り>" 形式の説明文

    Returns:
        正規化されたシンボル（"RDS B" -> "RDS-B"）

    Raises:
        ParseError: 形式に一致しない場合
    """
    match = DESCRIPTION_PATTERN.match(description)
    if match is None:
        raise ParseError(
            f"想定外の配当説明文: {description!r}", description, 'DividendDescription'
        )

    return match.group('issuer').replace(' ', SYMBOL_CLASS_SEPARATOR)


class DividendAccrual:
    """1つの配当に対する支払いと取消の累計"""

    def __init__(self, dividend_id: DividendId) -> None:
        self.dividend_id = dividend_id
        self.currency: Optional[Currency] = None
        self.paid = Decimal('0')
        self.reversed = Decimal('0')

    def _check_currency(self, amount: Money) -> None:
        if self.currency is None:
            self.currency = amount.currency
        elif amount.currency != self.currency:
            raise DataError(
                f"{self.dividend_id}の配当で通貨が一致しません: {self.currency} != {amount.currency}",
                {'date': self.dividend_id.date, 'issuer': self.dividend_id.issuer, 'amount': str(amount)}
            )

    def add(self, amount: Money) -> None:
        self._check_currency(amount)
        self.paid += amount.amount

    def reverse(self, amount: Money) -> None:
        self._check_currency(amount)
        self.reversed += amount.amount

    @property
    def net(self) -> Money:
        """支払累計 - 取消累計"""
        return Money(self.currency or Currency.USD, self.paid - self.reversed)


class DividendAccrualLedger:
    """
    配当相殺台帳

    1回のレポート生成が所有する集計器です。
    配当の同一性ごとに DividendAccrual を1つ保持します。

    Attributes:
        _accruals: 同一性キーから累計へのマップ
        logger: ロガーインスタンス
    """

    def __init__(self) -> None:
        self._accruals: Dict[DividendId, DividendAccrual] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def record(self, payment_date: date, issuer: str, amount: Money) -> DividendAccrual:
        """
        配当の支払いまたは取消を記録

        Args:
            payment_date: 支払日
            issuer: 発行体シンボル
            amount: 符号付き金額（正: 支払い, 負: 取消）

        Returns:
            更新後の累計

        Raises:
            DataError: 金額がゼロ、または通貨が既存の記録と異なる場合
        """
        dividend_id = DividendId(payment_date, issuer)

        if amount.is_zero():
            raise DataError(
                f"{dividend_id}の配当金額がゼロです",
                {'date': payment_date, 'issuer': issuer}
            )

        accrual = self._accruals.get(dividend_id)
        if accrual is None:
            accrual = DividendAccrual(dividend_id)
            self._accruals[dividend_id] = accrual

        if amount.is_negative():
            accrual.reverse(-amount)
        else:
            accrual.add(amount)

        self.logger.debug(f"配当記録: {dividend_id} {amount} -> {accrual.net}")
        return accrual

    def record_row(self, row: DividendRow) -> DividendAccrual:
        """配当明細行を解析して記録"""
        issuer = parse_dividend_description(row.description)
        return self.record(row.date, issuer, row.amount)

    def get_accrual(self, payment_date: date, issuer: str) -> Optional[DividendAccrual]:
        return self._accruals.get(DividendId(payment_date, issuer))

    def __len__(self) -> int:
        return len(self._accruals)

    def finalize(self) -> List[Dividend]:
        """
        相殺済みの配当一覧を取得

        Returns:
            (支払日, 発行体) 順の配当リスト。全額取り消された配当は含まない

        Raises:
            DataError: 支払いのない配当に取消だけが存在する場合
        """
        dividends: List[Dividend] = []

        for dividend_id in sorted(self._accruals, key=lambda x: (x.date, x.issuer)):
            accrual = self._accruals[dividend_id]

            if accrual.paid.is_zero():
                raise DataError(
                    f"{dividend_id}の配当に対応する支払いがないまま取り消されています",
                    {'date': dividend_id.date, 'issuer': dividend_id.issuer,
                     'reversed': accrual.reversed}
                )

            net = accrual.net
            if net.is_zero():
                self.logger.debug(f"全額取り消された配当を除外: {dividend_id}")
                continue

            if net.is_negative():
                self.logger.warning(f"{dividend_id}の配当の相殺結果が負です: {net}")

            dividends.append(Dividend(dividend_id.date, dividend_id.issuer, net))

        return dividends
