from abc import ABC
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ...exchange.money import Money


@dataclass(frozen=True)
class ExecutedTrade:
    """約定の決済予定日と実際の決済日"""
    trade_id: str
    plan_execution_date: date
    fact_execution_date: date


@dataclass(frozen=True)
class ConcludedTrade:
    """取引報告書の約定明細（未検証）"""
    trade_id: str
    symbol: str
    conclusion_time: datetime
    execution_date: date
    price: Decimal
    price_currency: str
    volume: Decimal
    accounting_currency: str
    commission: Decimal = Decimal('0')
    commission_currency: Optional[str] = None
    buy_quantity: Optional[Decimal] = None
    sell_quantity: Optional[Decimal] = None


@dataclass(frozen=True)
class StockTrade(ABC):
    """検証済みの株式取引"""
    trade_id: str
    symbol: str
    quantity: Decimal
    price: Money
    volume: Money
    commission: Money
    conclusion_time: datetime
    execution_date: date


@dataclass(frozen=True)
class StockBuy(StockTrade):
    """株式の買付"""

    @property
    def description(self) -> str:
        return f"{self.symbol} {self.quantity}株の買付"


@dataclass(frozen=True)
class StockSell(StockTrade):
    """株式の売却"""

    @property
    def description(self) -> str:
        return f"{self.symbol} {self.quantity}株の売却"
