from __future__ import annotations
from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum, auto
from typing import Dict, Final, Optional

from ...core.error import ParseError
from ...exchange.money import Money


class Operation(Enum):
    """
    資金移動の種別

    文字列からの変換をサポートします。
    """

    DEPOSIT = auto()  # 入金
    WITHDRAWAL = auto()  # 出金
    BUY_TRADE = auto()  # 買付
    SELL_TRADE = auto()  # 売却
    DIVIDEND = auto()  # 配当
    TAX = auto()  # 税金
    FEE = auto()  # 手数料
    INTEREST = auto()  # 利子
    CORPORATE_ACTION = auto()  # コーポレートアクション
    OTHER = auto()  # その他

    @property
    def is_trade(self) -> bool:
        return self in (Operation.BUY_TRADE, Operation.SELL_TRADE)

    @property
    def max_legs(self) -> int:
        """1つの資金移動が計上される通貨の最大数"""
        if self.is_trade:
            return 2
        return 1

    @classmethod
    def from_str(cls, action: str) -> Operation:
        """
        文字列から種別を判定

        Raises:
            ParseError: 種別名にも別名にも一致しない場合

        Examples:
            >>> Operation.from_str("deposit")
            <Operation.DEPOSIT: 1>
            >>> Operation.from_str("Corporate Action")
            <Operation.CORPORATE_ACTION: 9>
        """
        key = action.upper().replace(" ", "_").replace("-", "_")

        ALIASES: Final[Dict[str, Operation]] = {
            "BUY": cls.BUY_TRADE,
            "SELL": cls.SELL_TRADE,
            "COMMISSION": cls.FEE,
        }

        if key in cls.__members__:
            return cls[key]
        if key in ALIASES:
            return ALIASES[key]
        raise ParseError(f"未知の資金移動種別: {action!r}", action, 'Operation')


@dataclass(frozen=True)
class CashFlow:
    """
    符号付きの資金移動

    sibling_amount は同じ取引の別通貨の足（例: 決済通貨と異なる通貨で
    徴収された手数料）で、amount と合算してはいけません。
    """

    timestamp: datetime
    operation: Operation
    amount: Money
    description: str
    sibling_amount: Optional[Money] = None

    @property
    def date(self) -> date:
        return self.timestamp.date()
