from dataclasses import dataclass
from datetime import date

from ...exchange.money import Money


@dataclass(frozen=True)
class DividendId:
    """配当の同一性キー（支払日, 発行体）"""
    date: date
    issuer: str

    def __str__(self) -> str:
        return f"{self.issuer} ({self.date.isoformat()})"


@dataclass(frozen=True)
class DividendRow:
    """取引報告書の配当明細1行"""
    date: date
    description: str
    amount: Money


@dataclass(frozen=True)
class Dividend:
    """相殺済みの配当"""
    date: date
    issuer: str
    amount: Money

    @property
    def description(self) -> str:
        return f"{self.issuer}の配当"
