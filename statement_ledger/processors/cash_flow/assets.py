"""
その他の資産（現金以外）の評価モジュール

期首・期末の純資産スナップショットと、期間中の取引による
証券残高の増減を並べて照合用のサマリーを作成します。
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Mapping, Optional
import logging

from ...core.period import Period, format_date
from ...core.statement import NetAssets
from ...exchange.converter import CurrencyConverter
from ...exchange.currency import Currency
from ...exchange.money import Money
from .record import CashFlow

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OtherAssetsSummary:
    """
    その他の資産のサマリー

    starting / ending が None の場合は評価額が不明であることを示し、
    ゼロとは区別されます。
    """
    period: Period
    currency: Currency
    starting: Optional[Money]
    deposits: Money
    withdrawals: Money
    ending: Optional[Money]
    available_dates: List[date]

    @property
    def missing(self) -> bool:
        return self.starting is None or self.ending is None


def summarize_other_assets(
    period: Period,
    statement_first_date: date,
    historical_assets: Mapping[date, NetAssets],
    cash_flows: Iterable[CashFlow],
    converter: CurrencyConverter,
    default_currency: Currency = Currency.USD,
) -> OtherAssetsSummary:
    """
    その他の資産のサマリーを作成

    Args:
        period: 集計期間
        statement_first_date: 取引報告書の対象期間の初日
        historical_assets: 日付別の純資産スナップショット
        cash_flows: 期間内の資金移動
        converter: 通貨変換
        default_currency: スナップショットがない場合の評価通貨

    Returns:
        その他の資産のサマリー
    """
    currency: Optional[Currency] = None

    ending: Optional[Money] = None
    end_assets = historical_assets.get(period.last)
    if end_assets is not None and end_assets.other is not None:
        ending = end_assets.other
        currency = ending.currency

    starting: Optional[Money] = None
    start_assets = historical_assets.get(period.prev_date())
    if start_assets is not None and start_assets.other is not None:
        starting = start_assets.other
        currency = currency or starting.currency
    elif period.first == statement_first_date:
        starting = Money.zero(currency or default_currency)

    currency = currency or default_currency
    deposits = Decimal('0')
    withdrawals = Decimal('0')

    def process(cash_flow_date: date, amount: Money) -> None:
        nonlocal deposits, withdrawals
        # 現金の流出は証券の流入
        converted = converter.convert(cash_flow_date, -amount, currency)
        if converted.amount >= 0:
            deposits += converted.amount
        else:
            withdrawals -= converted.amount

    for cash_flow in cash_flows:
        if not cash_flow.operation.is_trade:
            continue
        process(cash_flow.date, cash_flow.amount)
        if cash_flow.sibling_amount is not None:
            process(cash_flow.date, cash_flow.sibling_amount)

    available_dates = sorted(
        snapshot_date for snapshot_date, assets in historical_assets.items()
        if assets.other is not None
    )

    summary = OtherAssetsSummary(
        period=period,
        currency=currency,
        starting=starting,
        deposits=Money(currency, deposits),
        withdrawals=Money(currency, withdrawals),
        ending=ending,
        available_dates=available_dates,
    )

    if summary.missing:
        logger.warning(
            "取引報告書に指定期間の純資産の情報がありません。"
            f"利用可能な日付: {', '.join(format_date(d) for d in available_dates) or 'なし'}"
        )

    return summary
