from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from .period import Period
from ..exchange.currency import Currency
from ..exchange.money import Money
from ..processors.cash_flow.record import CashFlow
from ..processors.dividend.record import DividendRow
from ..processors.tax.record import ProfitRecord
from ..processors.trade.record import ConcludedTrade, ExecutedTrade


@dataclass(frozen=True)
class NetAssets:
    """ある日付時点の純資産（現金とその他の資産）"""
    cash: Optional[Money] = None
    other: Optional[Money] = None


@dataclass
class Statement:
    """
    1つの取引報告書の読み込み済みデータ

    Attributes:
        period: 報告書の対象期間
        starting_cash: 期首の現金残高（通貨別）
        ending_cash: 報告書に記載された期末の現金残高（通貨別）
        trades: 約定明細
        executed_trades: 決済予定日と実際の決済日
        dividends: 配当明細
        cash_flows: 入出金・手数料・税金などの資金移動
        profits: 実現損益
        historical_assets: 日付別の純資産
    """
    account_id: str
    period: Period
    starting_cash: Dict[Currency, Money] = field(default_factory=dict)
    ending_cash: Dict[Currency, Money] = field(default_factory=dict)
    trades: List[ConcludedTrade] = field(default_factory=list)
    executed_trades: List[ExecutedTrade] = field(default_factory=list)
    dividends: List[DividendRow] = field(default_factory=list)
    cash_flows: List[CashFlow] = field(default_factory=list)
    profits: List[ProfitRecord] = field(default_factory=list)
    historical_assets: Dict[date, NetAssets] = field(default_factory=dict)
