"""
レポート生成モジュール

取引報告書を読み込み済みのデータから、決済日の照合、配当の相殺、
資金移動の集計、納税スケジュールの作成までを順に実行し、
表示用のレポートデータを組み立てます。
"""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional
import logging

from ..core.error import DataError
from ..core.period import Period, format_date
from ..core.statement import Statement
from ..exchange.converter import CurrencyConverter
from ..exchange.currency import Currency
from ..exchange.money import Money
from ..processors.cash_flow.assets import OtherAssetsSummary, summarize_other_assets
from ..processors.cash_flow.mapper import map_cash_flows
from ..processors.cash_flow.record import CashFlow
from ..processors.cash_flow.summarizer import CashFlowReport
from ..processors.dividend.record import Dividend
from ..processors.tax.record import ProfitRecord
from ..processors.tax.scheduler import flat_rate_tax
from ..processors.trade.record import StockBuy, StockSell
from .config import ConfigManager
from .context import ReportContext


@dataclass
class LedgerReport:
    """1つの取引報告書から作成したレポートデータ"""
    account_id: str
    period: Period
    cash_flow: CashFlowReport
    dividends: List[Dividend]
    buys: List[StockBuy]
    sells: List[StockSell]
    tax_currency: Currency
    profit_buckets: Dict[date, Decimal] = field(default_factory=dict)
    taxes: Optional[Dict[date, Decimal]] = None
    other_assets: Optional[OtherAssetsSummary] = None


class ReportGenerator:
    """取引報告書からレポートデータを生成するクラス"""

    def __init__(self, config: ConfigManager, converter: Optional[CurrencyConverter] = None) -> None:
        self.config = config
        self.converter = converter
        self.logger = logging.getLogger(self.__class__.__name__)

    def generate(self, statement: Statement, year: Optional[int] = None) -> LedgerReport:
        """
        レポートデータを生成

        Args:
            statement: 取引報告書
            year: 集計年（未指定の場合は取引報告書の全期間）

        Returns:
            レポートデータ

        Raises:
            DataError: 取引報告書のデータが不正な場合
            InvariantViolation: 集計結果が不変条件を満たさない場合
        """
        context = ReportContext(self.config, self.converter)
        period = self._report_period(statement, year)
        self.logger.info(f"レポート生成開始: {statement.account_id} ({period})")

        context.reconciler.build_corrections(statement.executed_trades)
        buys, sells = context.reconciler.parse_trades(statement.trades)
        context.reconciler.finish()

        for row in statement.dividends:
            context.dividend_ledger.record_row(row)
        dividends = context.dividend_ledger.finalize()

        cash_flows = self._within_statement(
            statement, map_cash_flows(buys, sells, dividends, statement.cash_flows))
        starting = self._starting_balances(statement, period, cash_flows)
        summarizer = context.create_summarizer(period, starting)
        summarizer.process(cash_flows)

        observed_ending = statement.ending_cash if period.last == statement.period.last else None
        cash_flow_report = summarizer.build_report(observed_ending)

        other_assets = None
        if self.converter is not None:
            other_assets = summarize_other_assets(
                period, statement.period.first, statement.historical_assets,
                cash_flow_report.cash_flows, self.converter, self.config.assets_currency)
        else:
            self.logger.info("為替レートが設定されていないため、その他の資産の集計を省略します")

        tax_currency = self.config.tax_currency
        for profit in statement.profits:
            if period.contains(profit.date):
                amount = self._to_tax_currency(profit, tax_currency)
                context.tax_scheduler.record_profit(profit.date, amount.amount)

        taxes = None
        if self.config.tax_rate is not None:
            taxes = context.tax_scheduler.finalize(flat_rate_tax(self.config.tax_rate))

        self.logger.info(
            f"レポート生成完了: 資金移動 {len(cash_flow_report.cash_flows)}件, "
            f"配当 {len(dividends)}件, 買付 {len(buys)}件, 売却 {len(sells)}件"
        )

        return LedgerReport(
            account_id=statement.account_id,
            period=period,
            cash_flow=cash_flow_report,
            dividends=[d for d in dividends if period.contains(d.date)],
            buys=buys,
            sells=sells,
            tax_currency=tax_currency,
            profit_buckets=context.tax_scheduler.profit_buckets(),
            taxes=taxes,
            other_assets=other_assets,
        )

    @staticmethod
    def _report_period(statement: Statement, year: Optional[int]) -> Period:
        if year is None:
            return statement.period

        first = max(date(year, 1, 1), statement.period.first)
        last = min(date(year, 12, 31), statement.period.last)
        if first > last:
            raise DataError(
                f"取引報告書の期間 ({statement.period}) に{year}年が含まれていません",
                {'year': year, 'account_id': statement.account_id}
            )
        return Period(first, last)

    def _within_statement(self, statement: Statement, cash_flows: List[CashFlow]) -> List[CashFlow]:
        """取引報告書の対象期間外の資金移動を除外（期首・期末残高の範囲外）"""
        within: List[CashFlow] = []
        for cash_flow in cash_flows:
            if statement.period.contains(cash_flow.date):
                within.append(cash_flow)
                continue
            self.logger.warning(
                f"取引報告書の期間 ({statement.period}) 外の資金移動を除外します: "
                f"{format_date(cash_flow.date)} {cash_flow.description} {cash_flow.amount}"
            )
        return within

    @staticmethod
    def _starting_balances(
        statement: Statement, period: Period, cash_flows: List[CashFlow]
    ) -> Dict[Currency, Money]:
        """集計期間の期首残高（報告書の期首残高 + 期間前の資金移動）"""
        balances = dict(statement.starting_cash)

        def add(amount: Money) -> None:
            balances[amount.currency] = balances.get(amount.currency, Money.zero(amount.currency)) + amount

        for cash_flow in cash_flows:
            if cash_flow.date < statement.period.first:
                continue
            if cash_flow.date >= period.first:
                break
            add(cash_flow.amount)
            if cash_flow.sibling_amount is not None:
                add(cash_flow.sibling_amount)

        return balances

    def _to_tax_currency(self, profit: ProfitRecord, tax_currency: Currency) -> Money:
        if profit.amount.currency == tax_currency:
            return profit.amount

        if self.converter is None:
            raise DataError(
                f"{profit.date}の損益 {profit.amount} を{tax_currency}に換算できません（為替レート未設定）",
                {'date': profit.date, 'amount': str(profit.amount)}
            )
        return self.converter.convert(profit.date, profit.amount, tax_currency)
