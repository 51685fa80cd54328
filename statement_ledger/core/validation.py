"""
数値検証モジュール

取引報告書から読み込んだ数量・価格・手数料などの値に対する
符号の制約を検証します。
"""

from decimal import Decimal
from enum import Enum, auto
from typing import Any, Dict, Optional

from .error import DataError


class DecimalRestrictions(Enum):
    """数値に課す符号の制約"""

    NON_ZERO = auto()
    STRICTLY_POSITIVE = auto()
    POSITIVE_OR_ZERO = auto()

    def check(self, value: Decimal) -> bool:
        if self is DecimalRestrictions.NON_ZERO:
            return not value.is_zero()
        if self is DecimalRestrictions.STRICTLY_POSITIVE:
            return value > 0
        return value >= 0


def validate_decimal(
    value: Decimal,
    restrictions: DecimalRestrictions,
    name: str = "value",
    context: Optional[Dict[str, Any]] = None,
) -> Decimal:
    """
    数値を検証して返す

    Args:
        value: 検証する値
        restrictions: 適用する制約
        name: エラーメッセージに含める値の名前
        context: エラーに含める識別情報（取引IDなど）

    Returns:
        検証済みの値

    Raises:
        DataError: 制約を満たさない場合
    """
    value = Decimal(str(value)) if not isinstance(value, Decimal) else value

    if not restrictions.check(value):
        details = dict(context or {})
        details.update({'name': name, 'value': value, 'restrictions': restrictions.name})
        raise DataError(f"不正な{name}: {value}", details)

    return value
