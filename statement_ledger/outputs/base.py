from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Generic, List, Optional, Sequence, TypeVar

from ..exchange.money import Money

T = TypeVar('T')


@dataclass
class ColorScheme:
    """色スキーマのデータクラス定義"""
    HEADER: str = '\033[95m'
    BLUE: str = '\033[94m'
    GREEN: str = '\033[92m'
    WARNING: str = '\033[93m'
    RED: str = '\033[91m'
    END: str = '\033[0m'
    BOLD: str = '\033[1m'


class BaseFormatter(ABC, Generic[T]):
    """
    出力フォーマットの抽象基本クラス

    このクラスは、異なる出力先にデータをフォーマットするための
    基本的な機能を提供します。
    """

    def __init__(self, use_color: bool = True):
        """
        フォーマッターを初期化

        Args:
            use_color: カラー出力を使用するかどうか
        """
        self.use_color = use_color
        self.color_scheme = ColorScheme() if use_color else None

    @abstractmethod
    def format(self, data: T) -> str:
        """
        データをフォーマット

        Args:
            data: フォーマットするデータ

        Returns:
            フォーマットされた文字列
        """
        pass

    def format_money(self, value: Optional[Money], use_color: bool = False) -> str:
        """
        金額をフォーマット（None は空欄）

        Args:
            value: フォーマットする金額
            use_color: 負の金額を赤で表示するかどうか
        """
        if value is None:
            return ''

        formatted = str(value.round())
        if value.is_negative() and use_color:
            return self._color(formatted, 'RED')
        return formatted

    def format_table(self, title: str, header: Sequence[str], rows: List[Sequence[str]]) -> str:
        """
        単純なテキスト表を作成

        Args:
            title: 表のタイトル
            header: 列見出し
            rows: 行（各セルは文字列）
        """
        widths = [len(cell) for cell in header]
        for row in rows:
            for index, cell in enumerate(row):
                widths[index] = max(widths[index], len(self._strip_color(cell)))

        def render(row: Sequence[str]) -> str:
            cells = []
            for index, cell in enumerate(row):
                padding = widths[index] - len(self._strip_color(cell))
                cells.append(cell + ' ' * padding if index == 0 else ' ' * padding + cell)
            return ' | '.join(cells)

        separator = '-+-'.join('-' * width for width in widths)
        lines = [self._color(title, 'BOLD'), render(header), separator]
        lines.extend(render(row) for row in rows)
        return '\n'.join(lines)

    def _strip_color(self, text: str) -> str:
        if not self.color_scheme:
            return text
        for code in vars(self.color_scheme).values():
            text = text.replace(code, '')
        return text

    def _color(self, text: str, color: str) -> str:
        """
        色付きテキストを生成

        Args:
            text: カラーリングするテキスト
            color: 色の名前
        """
        if not self.use_color or not self.color_scheme:
            return text

        color_code = getattr(self.color_scheme, color.upper(), '')
        return f"{color_code}{text}{self.color_scheme.END}" if color_code else text


class BaseOutput(ABC, Generic[T]):
    """
    出力処理の抽象基本クラス

    異なる出力先に対する共通の出力インターフェースを提供します。
    """

    def __init__(self, formatter: Optional[BaseFormatter[T]] = None):
        self.formatter = formatter

    @abstractmethod
    def output(self, data: T) -> None:
        """
        データを出力

        Args:
            data: 出力するデータ
        """
        pass

    def format_data(self, data: T) -> str:
        return str(data) if self.formatter is None else self.formatter.format(data)
