"""
決済日照合モジュール

取引報告書の「決済済み取引」セクションから、予定と異なる日に
決済された取引を抽出し（第1段階）、約定明細を解析する際に
その決済日で置き換えます（第2段階）。
"""

from datetime import date
from decimal import Decimal
from typing import Dict, Iterable, List, Tuple
import logging

from ...core.error import DataError, InvariantViolation
from ...core.validation import DecimalRestrictions, validate_decimal
from ...exchange.currency import Currency
from ...exchange.money import Money
from .record import ConcludedTrade, ExecutedTrade, StockBuy, StockSell, StockTrade


class ExecutionDateReconciler:
    """
    決済日の補正を管理するクラス

    補正は取引IDごとに1回だけ使用されます。同じIDを持つ2件目の
    約定明細には補正が適用されず、報告された決済日が使われます。

    Attributes:
        _corrections: 取引IDから実際の決済日へのマップ
        logger: ロガーインスタンス
    """

    def __init__(self) -> None:
        self._corrections: Dict[str, date] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def build_corrections(self, executed_trades: Iterable[ExecutedTrade]) -> Dict[str, date]:
        """
        決済日の補正マップを構築

        Args:
            executed_trades: 決済予定日と実際の決済日の一覧

        Returns:
            取引IDから実際の決済日へのマップ（コピー）

        Raises:
            DataError: 補正対象の取引IDが重複している場合
        """
        for trade in executed_trades:
            if trade.fact_execution_date == trade.plan_execution_date:
                continue

            if trade.trade_id in self._corrections:
                raise DataError(
                    f"決済日の補正が重複しています: 取引 {trade.trade_id!r}",
                    {'trade_id': trade.trade_id, 'fact_execution_date': trade.fact_execution_date}
                )

            self._corrections[trade.trade_id] = trade.fact_execution_date

        self.logger.debug(f"決済日の補正: {len(self._corrections)}件")
        return dict(self._corrections)

    def apply(self, trade_id: str, reported_date: date) -> date:
        """
        取引の決済日を決定し、補正を消費

        Args:
            trade_id: 取引ID
            reported_date: 約定明細に記載された決済日

        Returns:
            補正があれば補正後の決済日、なければ記載どおりの決済日
        """
        corrected = self._corrections.pop(trade_id, None)
        if corrected is None:
            return reported_date

        self.logger.warning(
            f"取引 {trade_id!r} の実際の決済日が予定と異なります ({reported_date} -> {corrected})。"
            "取引報告書の決済日を修正してください。"
        )
        return corrected

    def unconsumed(self) -> Dict[str, date]:
        """未使用の補正"""
        return dict(self._corrections)

    def finish(self) -> None:
        """未使用の補正を診断情報として出力"""
        if self._corrections:
            trade_ids = ", ".join(sorted(self._corrections))
            self.logger.warning(f"使用されなかった決済日の補正があります: {trade_ids}")

    def parse_trades(self, trades: Iterable[ConcludedTrade]) -> Tuple[List[StockBuy], List[StockSell]]:
        """
        約定明細を検証し、買付と売却に分類

        Args:
            trades: 約定明細の一覧

        Returns:
            (買付リスト, 売却リスト)

        Raises:
            DataError: 約定明細が不正な場合
            InvariantViolation: 約定代金が 価格×数量 と一致しない場合
        """
        buys: List[StockBuy] = []
        sells: List[StockSell] = []

        for trade in trades:
            record = self.parse_trade(trade)
            if isinstance(record, StockBuy):
                buys.append(record)
            else:
                sells.append(record)

        return buys, sells

    def parse_trade(self, trade: ConcludedTrade) -> StockTrade:
        context = {'trade_id': trade.trade_id, 'symbol': trade.symbol}

        if trade.price_currency != trade.accounting_currency:
            raise DataError(
                f"{trade.symbol}の取引通貨が計上通貨と異なります: "
                f"{trade.price_currency} != {trade.accounting_currency}",
                context
            )

        price_currency = Currency.from_code(trade.price_currency)
        price = validate_decimal(trade.price, DecimalRestrictions.STRICTLY_POSITIVE, "価格", context)
        volume = validate_decimal(trade.volume, DecimalRestrictions.STRICTLY_POSITIVE, "約定代金", context)
        commission = validate_decimal(
            trade.commission, DecimalRestrictions.POSITIVE_OR_ZERO, "手数料", context)

        if trade.commission_currency is not None:
            commission_currency = Currency.from_code(trade.commission_currency)
        elif commission.is_zero():
            commission_currency = price_currency
        else:
            raise DataError(f"取引 {trade.trade_id!r} の手数料通貨がありません", context)

        execution_date = self.apply(trade.trade_id, trade.execution_date)

        if trade.buy_quantity is not None and trade.sell_quantity is None:
            record_class = StockBuy
            quantity = trade.buy_quantity
        elif trade.sell_quantity is not None and trade.buy_quantity is None:
            record_class = StockSell
            quantity = trade.sell_quantity
        else:
            raise DataError(
                f"取引 {trade.trade_id!r} を買付とも売却とも判定できません", context)

        quantity = validate_decimal(quantity, DecimalRestrictions.STRICTLY_POSITIVE, "数量", context)
        self._check_volume(trade, price, quantity, volume, price_currency)

        return record_class(
            trade_id=trade.trade_id,
            symbol=trade.symbol,
            quantity=quantity,
            price=Money(price_currency, price).normalize(),
            volume=Money(price_currency, volume).normalize(),
            commission=Money(commission_currency, commission),
            conclusion_time=trade.conclusion_time,
            execution_date=execution_date,
        )

    @staticmethod
    def _check_volume(
        trade: ConcludedTrade, price: Decimal, quantity: Decimal, volume: Decimal, currency: Currency
    ) -> None:
        expected = Money(currency, price * quantity).round()
        if expected != Money(currency, volume).round():
            raise InvariantViolation(
                f"取引 {trade.trade_id!r} の約定代金が 価格×数量 と一致しません: {volume} != {price} * {quantity}",
                {'trade_id': trade.trade_id, 'price': price, 'quantity': quantity, 'volume': volume}
            )
