from dataclasses import dataclass
from datetime import date
from typing import Optional

from ...exchange.money import Money


@dataclass(frozen=True)
class ProfitRecord:
    """実現損益（正: 利益, 負: 損失）"""
    date: date
    amount: Money
    description: Optional[str] = None
