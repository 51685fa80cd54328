from datetime import date
from typing import Optional, Dict, Any


class LedgerError(Exception):
    """
    台帳処理の基本例外クラス

    アプリケーション固有の全ての例外の基底クラスとして機能し、
    エラーの詳細情報を構造化された形で保持します。
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message)
        self.details = details or {}


class DataError(LedgerError):
    """
    入力データ関連の基本例外クラス

    取引報告書の修正によって利用者が解消できる不整合を表現します。
    現在の報告書の処理は中断されます。
    """

    pass


class LoaderError(DataError):
    """
    データ読み込み関連の例外

    ファイルの読み込みやデータソースへのアクセスに
    関するエラーを表現します。
    """

    def __init__(self, message: str, source: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            source: エラーが発生したデータソース
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message, details)
        self.source = source


class ParseError(DataError):
    """
    データパース処理の例外

    データの解析や型変換に関するエラーを
    表現します。
    """

    def __init__(self, message: str, raw_value: str, target_type: str, details: Optional[Dict[str, Any]] = None) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            raw_value: パースに失敗した元の値
            target_type: 変換しようとした目標の型
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message, details)
        self.raw_value = raw_value
        self.target_type = target_type


class ExchangeRateError(DataError):
    """
    為替レート関連の例外

    換算に必要なレートが為替レート履歴にない場合のエラーを
    表現します。履歴ファイルの追加で解消できます。
    """

    def __init__(
        self,
        message: str,
        base_currency: str,
        target_currency: str,
        rate_date: Optional[date] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        例外を初期化

        Args:
            message: エラーメッセージ
            base_currency: 基準通貨
            target_currency: 変換先通貨
            rate_date: レート参照日
            details: エラーの詳細情報（オプション）
        """
        super().__init__(message, details)
        self.base_currency = base_currency
        self.target_currency = target_currency
        self.rate_date = rate_date


class ConfigurationError(LedgerError):
    """
    設定関連の例外

    設定の読み込みや検証時に発生するエラーを
    表現します。
    """

    pass


class InvariantViolation(AssertionError):
    """
    処理系の不変条件違反

    入力データではなくパイプライン自体の不具合を示します。
    警告に格下げして握りつぶしてはいけません。
    """

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.details = details or {}
