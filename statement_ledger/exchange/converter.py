# exchange/converter.py

from abc import ABC, abstractmethod
from bisect import bisect_right
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Dict, List, Optional, Tuple
import csv
import logging

from .currency import Currency
from .money import Money
from .rate import Rate
from ..core.error import ExchangeRateError, LoaderError


class CurrencyConverter(ABC):
    """通貨変換の基本インターフェース"""

    @abstractmethod
    def get_rate(self, base: Currency, target: Currency, rate_date: date) -> Rate:
        """指定日の為替レートを取得"""
        pass

    def convert(self, rate_date: date, amount: Money, target: Currency) -> Money:
        """
        金額を指定通貨へ変換（変換先通貨の桁数で丸める）

        Args:
            rate_date: レート参照日
            amount: 変換する金額
            target: 変換先通貨

        Returns:
            変換後の金額
        """
        if amount.currency == target:
            return amount.round()

        rate = self.get_rate(amount.currency, target, rate_date)
        return Money(target, rate.convert(amount.amount))


class RateTableConverter(CurrencyConverter):
    """
    履歴レート表に基づく通貨変換

    通貨ペアごとに日付順のレート表を保持し、参照日以前で
    最も新しいレートを使用します。逆方向のペアは逆レートで補います。
    """

    def __init__(self) -> None:
        self._rates: Dict[Tuple[Currency, Currency], List[Rate]] = {}
        self._dates: Dict[Tuple[Currency, Currency], List[date]] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def add_rate(self, rate: Rate) -> None:
        """レートを追加"""
        pair = (rate.base, rate.target)
        dates = self._dates.setdefault(pair, [])
        index = bisect_right(dates, rate.rate_date)
        dates.insert(index, rate.rate_date)
        self._rates.setdefault(pair, []).insert(index, rate)

    def load_csv(self, base: Currency, target: Currency, file_path: Path) -> int:
        """
        CSVからレートを読み込み

        Args:
            base: 基準通貨
            target: 変換先通貨
            file_path: Date, Close 列を持つCSVファイルのパス

        Returns:
            読み込んだレート数

        Raises:
            LoaderError: ファイルを読み込めない、または行が不正な場合
        """
        loaded = 0
        try:
            with open(file_path, "r", encoding="utf-8") as f:
                reader = csv.DictReader(line.replace(" ", "") for line in f)
                for row in reader:
                    try:
                        rate_date = self._parse_date(row["Date"])
                        rate = Rate(base, target, Decimal(row["Close"]), rate_date)
                    except (KeyError, ValueError, InvalidOperation) as e:
                        raise LoaderError(
                            f"レート解析エラー: {row}", str(file_path), {'error': str(e)}
                        ) from e
                    self.add_rate(rate)
                    loaded += 1
        except OSError as e:
            raise LoaderError(f"レート読み込みエラー: {file_path}", str(file_path), {'error': str(e)}) from e

        self.logger.info(f"{loaded}件の為替レートを読み込みました: {base}/{target} ({file_path})")
        return loaded

    @staticmethod
    def _parse_date(value: str) -> date:
        for date_format in ("%Y-%m-%d", "%m/%d/%y", "%m/%d/%Y"):
            try:
                return datetime.strptime(value, date_format).date()
            except ValueError:
                continue
        raise ValueError(f"日付のパースに失敗: {value}")

    def get_rate(self, base: Currency, target: Currency, rate_date: date) -> Rate:
        if base == target:
            return Rate(base, target, Decimal("1"), rate_date)

        rate = self._find(base, target, rate_date)
        if rate is not None:
            return rate

        inverse = self._find(target, base, rate_date)
        if inverse is not None:
            return inverse.inverse()

        raise ExchangeRateError(
            f"為替レートが見つかりません: {base}/{target} ({rate_date})",
            base.code, target.code, rate_date,
            {'available_pairs': sorted(f"{b}/{t}" for b, t in self._rates)}
        )

    def _find(self, base: Currency, target: Currency, rate_date: date) -> Optional[Rate]:
        dates = self._dates.get((base, target))
        if not dates:
            return None

        index = bisect_right(dates, rate_date)
        if index == 0:
            return None

        return self._rates[(base, target)][index - 1]
