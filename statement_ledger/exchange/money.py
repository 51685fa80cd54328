# exchange/money.py

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Union

from .currency import Currency
from ..core.error import DataError


class CurrencyMismatchError(DataError):
    """異なる通貨同士の演算に関するエラー"""
    pass


@dataclass(frozen=True)
class Money:
    """通貨金額を管理する不変クラス"""
    currency: Currency
    amount: Decimal = Decimal('0')

    def __post_init__(self) -> None:
        """金額をDecimalへ正規化"""
        if not isinstance(self.currency, Currency):
            object.__setattr__(self, 'currency', Currency.from_code(str(self.currency)))

        if not isinstance(self.amount, Decimal):
            try:
                object.__setattr__(self, 'amount', Decimal(str(self.amount)))
            except (TypeError, ValueError, InvalidOperation) as e:
                raise DataError(f"金額の変換に失敗: {self.amount!r}") from e

    @classmethod
    def zero(cls, currency: Currency) -> 'Money':
        return cls(currency, Decimal('0'))

    def _check_currency(self, other: 'Money') -> None:
        if self.currency != other.currency:
            raise CurrencyMismatchError(
                f"通貨が一致しません: {self.currency} != {other.currency}",
                {'left': str(self), 'right': str(other)}
            )

    def is_zero(self) -> bool:
        return self.amount.is_zero()

    def is_positive(self) -> bool:
        """正の金額かどうか（ゼロは含まない）"""
        return self.amount > 0

    def is_negative(self) -> bool:
        """負の金額かどうか（ゼロは含まない）"""
        return self.amount < 0

    def round(self) -> 'Money':
        """通貨の桁数で四捨五入"""
        return Money(
            self.currency,
            self.amount.quantize(self.currency.quantum, rounding=ROUND_HALF_UP)
        )

    def normalize(self) -> 'Money':
        """末尾のゼロを取り除く"""
        return Money(self.currency, self.amount.normalize())

    def __add__(self, other: 'Money') -> 'Money':
        """加算"""
        self._check_currency(other)
        return Money(self.currency, self.amount + other.amount)

    def __sub__(self, other: 'Money') -> 'Money':
        """減算"""
        self._check_currency(other)
        return Money(self.currency, self.amount - other.amount)

    def __mul__(self, factor: Union[Decimal, int]) -> 'Money':
        return Money(self.currency, self.amount * factor)

    __rmul__ = __mul__

    def __neg__(self) -> 'Money':
        return Money(self.currency, -self.amount)

    def __lt__(self, other: 'Money') -> bool:
        self._check_currency(other)
        return self.amount < other.amount

    def __le__(self, other: 'Money') -> bool:
        self._check_currency(other)
        return self.amount <= other.amount

    def __str__(self) -> str:
        """通貨と金額の文字列表現"""
        return self.currency.format_amount(self.amount)

    def __repr__(self) -> str:
        return f"Money(amount={self.amount}, currency={self.currency})"
