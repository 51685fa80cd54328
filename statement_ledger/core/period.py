from dataclasses import dataclass
from datetime import date, timedelta

from .error import DataError

DATE_FORMAT = '%d.%m.%Y'


def format_date(value: date) -> str:
    return value.strftime(DATE_FORMAT)


@dataclass(frozen=True, order=True)
class Period:
    """両端を含む日付範囲 [first, last]"""

    first: date
    last: date

    def __post_init__(self) -> None:
        if self.first > self.last:
            raise DataError(f"不正な期間: {self.format()}", {'first': self.first, 'last': self.last})

    @classmethod
    def half_open(cls, start: date, end: date) -> 'Period':
        """[start, end) の範囲から期間を生成"""
        return cls(start, end - timedelta(days=1))

    def prev_date(self) -> date:
        return self.first - timedelta(days=1)

    def next_date(self) -> date:
        return self.last + timedelta(days=1)

    def contains(self, value: date) -> bool:
        return self.first <= value <= self.last

    def days(self) -> int:
        return (self.last - self.first).days + 1

    def format(self) -> str:
        return f"{format_date(self.first)} - {format_date(self.last)}"

    def __str__(self) -> str:
        return self.format()
