# exchange/currency.py

from enum import Enum, unique
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional, Union

from ..core.error import ParseError


@dataclass(frozen=True)
class CurrencyInfo:
    """通貨の詳細情報を表すイミュータブルなデータクラス"""
    code: str
    symbol: str
    decimals: int
    display_name: str


@unique
class Currency(Enum):
    """通貨を表現する列挙型"""
    USD = CurrencyInfo('USD', '$', 2, 'US Dollar')
    EUR = CurrencyInfo('EUR', '€', 2, 'Euro')
    RUB = CurrencyInfo('RUB', '₽', 2, 'Russian Ruble')
    GBP = CurrencyInfo('GBP', '£', 2, 'British Pound')
    CHF = CurrencyInfo('CHF', 'CHF', 2, 'Swiss Franc')
    HKD = CurrencyInfo('HKD', 'HK$', 2, 'Hong Kong Dollar')
    CNY = CurrencyInfo('CNY', 'CN¥', 2, 'Chinese Yuan')
    JPY = CurrencyInfo('JPY', '¥', 0, 'Japanese Yen')

    def __init__(self, info: CurrencyInfo):
        """通貨情報の初期化"""
        object.__setattr__(self, '_info', info)

    @property
    def code(self) -> str:
        """通貨コードを取得"""
        return self._info.code

    @property
    def symbol(self) -> str:
        """通貨シンボルを取得"""
        return self._info.symbol

    @property
    def decimals(self) -> int:
        """小数点以下の桁数を取得"""
        return self._info.decimals

    @property
    def display_name(self) -> str:
        return self._info.display_name

    @property
    def quantum(self) -> Decimal:
        """丸め単位（例: USDなら0.01）"""
        return Decimal(1).scaleb(-self.decimals)

    def format_amount(
        self,
        amount: Union[Decimal, float, int],
        include_symbol: bool = True
    ) -> str:
        """
        金額を通貨形式でフォーマット

        Args:
            amount: フォーマットする金額
            include_symbol: シンボルを含めるかどうか

        Returns:
            フォーマットされた金額文字列
        """
        try:
            decimal_amount = Decimal(str(amount))

            if self.decimals == 0:
                formatted = f"{int(decimal_amount):,}"
            else:
                formatted = f"{decimal_amount:,.{self.decimals}f}"

            return f"{self.symbol}{formatted}" if include_symbol else formatted

        except (TypeError, ValueError) as e:
            raise ValueError(f"金額のフォーマットに失敗: {amount}") from e

    @classmethod
    def from_str(
        cls,
        value: Optional[str],
        default: Optional['Currency'] = None
    ) -> Optional['Currency']:
        """
        文字列から通貨を取得

        Args:
            value: 通貨を特定する文字列（コードまたはシンボル）
            default: 見つからない場合に返す通貨

        Returns:
            対応する通貨。見つからない場合はdefault
        """
        if not value:
            return default

        upper_value = value.upper().strip()
        if upper_value in cls.__members__:
            return cls[upper_value]

        for currency in cls:
            if currency.symbol == value:
                return currency

        return default

    @classmethod
    def from_code(cls, code: str) -> 'Currency':
        """
        通貨コードから通貨を取得

        Raises:
            ParseError: 未対応の通貨コードの場合
        """
        currency = cls.from_str(code)
        if currency is None:
            raise ParseError(f"未対応の通貨コード: {code!r}", str(code), 'Currency')
        return currency

    def __str__(self) -> str:
        """通貨コードを文字列として返す"""
        return self.code

    def __repr__(self) -> str:
        return f"Currency.{self.name}"
