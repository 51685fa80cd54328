# app/context.py

from typing import Optional
import logging

from ..core.period import Period
from ..exchange.converter import CurrencyConverter
from ..processors.cash_flow.summarizer import CashFlowSummarizer
from ..processors.dividend.ledger import DividendAccrualLedger
from ..processors.tax.scheduler import TaxPaymentDay, TaxPaymentScheduler
from ..processors.trade.reconciler import ExecutionDateReconciler
from .config import ConfigManager


class ReportContext:
    """
    1回のレポート生成のコンテキスト

    このクラスは以下の責務を持ちます：
    - 集計器（配当台帳、決済日照合、資金移動集計、納税スケジューラ）の生成と所有
    - 通貨変換の保持

    集計器はレポート生成ごとに新しく作られ、他の実行と共有されません。
    """

    def __init__(
        self,
        config: ConfigManager,
        converter: Optional[CurrencyConverter] = None,
    ) -> None:
        self.config = config
        self.converter = converter
        self.logger = logging.getLogger(self.__class__.__name__)

        self.dividend_ledger = DividendAccrualLedger()
        self.reconciler = ExecutionDateReconciler()
        self.tax_scheduler = TaxPaymentScheduler(self.tax_payment_day)
        self.logger.debug("レポートコンテキストを初期化しました")

    @property
    def tax_payment_day(self) -> TaxPaymentDay:
        return self.config.tax_payment_day

    def create_summarizer(self, period: Period, starting_balances) -> CashFlowSummarizer:
        return CashFlowSummarizer(period, starting_balances, self.config.tolerance)
