from datetime import datetime
from typing import Iterable, List
import logging

from ..dividend.record import Dividend
from ..trade.record import StockBuy, StockSell, StockTrade
from .record import CashFlow, Operation

logger = logging.getLogger(__name__)


def _trade_cash_flow(trade: StockTrade, operation: Operation) -> CashFlow:
    """取引を資金移動に変換（決済日に計上）"""
    if operation is Operation.BUY_TRADE:
        amount = -trade.volume
    else:
        amount = trade.volume

    sibling_amount = None
    if not trade.commission.is_zero():
        if trade.commission.currency == amount.currency:
            amount = amount - trade.commission
        else:
            sibling_amount = -trade.commission

    timestamp = datetime.combine(trade.execution_date, trade.conclusion_time.time())
    return CashFlow(timestamp, operation, amount, trade.description, sibling_amount)


def map_cash_flows(
    buys: Iterable[StockBuy],
    sells: Iterable[StockSell],
    dividends: Iterable[Dividend],
    other: Iterable[CashFlow],
) -> List[CashFlow]:
    """
    取引・配当・その他の資金移動を時系列順の一覧にまとめる

    同時刻の資金移動は入力順を保ちます。
    """
    cash_flows: List[CashFlow] = []

    for buy in buys:
        cash_flows.append(_trade_cash_flow(buy, Operation.BUY_TRADE))
    for sell in sells:
        cash_flows.append(_trade_cash_flow(sell, Operation.SELL_TRADE))
    for dividend in dividends:
        cash_flows.append(CashFlow(
            datetime.combine(dividend.date, datetime.min.time()),
            Operation.DIVIDEND, dividend.amount, dividend.description))
    cash_flows.extend(other)

    cash_flows.sort(key=lambda cash_flow: cash_flow.timestamp)
    logger.debug(f"資金移動: {len(cash_flows)}件")
    return cash_flows
