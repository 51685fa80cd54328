from typing import List, Sequence

from .base import BaseFormatter, BaseOutput
from ..app.report_generator import LedgerReport
from ..core.period import format_date
from ..exchange.money import Money


class ConsoleFormatter(BaseFormatter[LedgerReport]):
    """コンソール出力用フォーマッター"""

    def format(self, data: LedgerReport) -> str:
        sections = [
            self._format_cash_summary(data),
            self._format_details(data),
        ]
        if data.other_assets is not None:
            sections.append(self._format_other_assets(data))
        if data.profit_buckets:
            sections.append(self._format_taxes(data))
        return "\n\n".join(sections)

    def _format_cash_summary(self, data: LedgerReport) -> str:
        summaries = data.cash_flow.summaries
        header = [''] + [currency.code for currency in summaries]

        starting_row: List[str] = [format_date(data.period.first)]
        deposits_row: List[str] = ['入金']
        withdrawals_row: List[str] = ['出金']
        ending_row: List[str] = [format_date(data.period.last)]

        for currency, summary in summaries.items():
            starting_row.append(self.format_money(Money(currency, summary.starting)))
            deposits_row.append(self.format_money(Money(currency, summary.deposits)))
            withdrawals_row.append(self.format_money(Money(currency, -summary.withdrawals), use_color=True))
            ending_row.append(self.format_money(Money(currency, summary.expected_ending)))

        return self.format_table(
            f"資金移動サマリー: {data.account_id} ({data.period})",
            header, [starting_row, deposits_row, withdrawals_row, ending_row])

    def _format_details(self, data: LedgerReport) -> str:
        currencies = data.cash_flow.currencies
        header = ['日付', '内容'] + [currency.code for currency in currencies]
        rows: List[Sequence[str]] = []

        for cash_flow in data.cash_flow.cash_flows:
            row = [format_date(cash_flow.date), cash_flow.description]
            for currency in currencies:
                if cash_flow.amount.currency == currency:
                    row.append(self.format_money(cash_flow.amount, use_color=True))
                elif cash_flow.sibling_amount is not None and cash_flow.sibling_amount.currency == currency:
                    row.append(self.format_money(cash_flow.sibling_amount, use_color=True))
                else:
                    row.append('')
            rows.append(row)

        return self.format_table("資金移動の明細", header, rows)

    def _format_other_assets(self, data: LedgerReport) -> str:
        assets = data.other_assets
        rows = [
            [format_date(data.period.prev_date()), self.format_money(assets.starting)],
            ['入金', self.format_money(assets.deposits)],
            ['出金', self.format_money(-assets.withdrawals, use_color=True)],
            [format_date(data.period.last), self.format_money(assets.ending)],
        ]
        return self.format_table("その他の金融資産の評価額", ['', assets.currency.code], rows)

    def _format_taxes(self, data: LedgerReport) -> str:
        header = ['納税日', '課税対象利益']
        if data.taxes is not None:
            header.append('納税額')

        rows = []
        for payment_date, profit in data.profit_buckets.items():
            row = [format_date(payment_date), self.format_money(Money(data.tax_currency, profit), use_color=True)]
            if data.taxes is not None:
                row.append(self.format_money(Money(data.tax_currency, data.taxes[payment_date])))
            rows.append(row)

        return self.format_table("納税スケジュール", header, rows)


class ConsoleOutput(BaseOutput[LedgerReport]):
    """コンソール出力クラス"""

    def __init__(self, use_color: bool = True):
        super().__init__(ConsoleFormatter(use_color))

    def output(self, data: LedgerReport) -> None:
        print(self.format_data(data))
