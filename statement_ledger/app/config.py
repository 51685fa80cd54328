import os
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import logging

import yaml

from ..config.settings import (
    CONSERVATION_TOLERANCE, DEFAULT_ASSETS_CURRENCY, DEFAULT_TAX_PAYMENT_DAY,
    DEFAULT_TAX_PAYMENT_MONTH, LOGGING_CONFIG,
)
from ..core.error import ConfigurationError
from ..exchange.currency import Currency
from ..processors.tax.scheduler import FixedTaxPaymentDay, OnCloseTaxPaymentDay, TaxPaymentDay


@dataclass
class RateSourceConfig:
    """為替レート履歴ファイルの設定"""
    base: Currency
    target: Currency
    history_file: Path


@dataclass
class ConfigOptions:
    """設定オプションのデフォルト値"""
    debug: bool = False
    use_color: bool = True

    # 取引報告書ファイル
    statement_files: List[str] = field(default_factory=list)

    # 集計年（未指定の場合は取引報告書の全期間）
    year: Optional[int] = None

    # 保存則検証の許容誤差
    tolerance: Decimal = CONSERVATION_TOLERANCE

    # 納税設定
    tax_currency: str = DEFAULT_ASSETS_CURRENCY
    tax_payment_month: int = DEFAULT_TAX_PAYMENT_MONTH
    tax_payment_day: int = DEFAULT_TAX_PAYMENT_DAY
    account_close_date: Optional[date] = None
    tax_rate: Optional[Decimal] = None

    # その他の資産の評価通貨
    assets_currency: str = DEFAULT_ASSETS_CURRENCY

    # 為替レート履歴
    exchange_rates: List[Dict[str, str]] = field(default_factory=list)

    # ロギング設定
    logging_config: Dict[str, str] = field(default_factory=lambda: dict(LOGGING_CONFIG))


class ConfigManager:
    """設定管理クラス"""

    def __init__(
        self,
        config_path: Optional[Union[str, Path]] = None,
        env_prefix: str = 'LEDGER_'
    ):
        """
        設定マネージャを初期化

        Args:
            config_path: 設定ファイルのパス
            env_prefix: 環境変数の接頭辞

        Raises:
            ConfigurationError: 設定ファイルの読み込みまたは検証に失敗した場合
        """
        self.logger = logging.getLogger(self.__class__.__name__)
        self.env_prefix = env_prefix
        self._config_options = ConfigOptions()

        if config_path:
            self._load_config_file(config_path)

        self._override_from_env()
        self._validate_config()

    def _load_config_file(self, config_path: Union[str, Path]) -> None:
        path = Path(config_path)
        if not path.exists():
            raise ConfigurationError(f"設定ファイルが見つかりません: {path}")

        try:
            with path.open('r', encoding='utf-8') as f:
                file_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"設定ファイルの読み込みに失敗: {e}") from e

        if not isinstance(file_config, dict):
            raise ConfigurationError(f"設定ファイルの形式が不正です: {path}")

        self._merge_config(file_config)

    def _merge_config(self, file_config: Dict[str, Any]) -> None:
        """
        ファイルからの設定とデフォルト設定をマージ

        Args:
            file_config: ファイルから読み込んだ設定
        """
        options = self._config_options

        try:
            if 'debug' in file_config:
                options.debug = bool(file_config['debug'])
            if 'use_color' in file_config:
                options.use_color = bool(file_config['use_color'])

            if 'statement_files' in file_config:
                options.statement_files = list(file_config['statement_files'] or [])

            if file_config.get('year') is not None:
                options.year = int(file_config['year'])

            if 'tolerance' in file_config:
                options.tolerance = Decimal(str(file_config['tolerance']))

            taxes = file_config.get('taxes') or {}
            if 'currency' in taxes:
                options.tax_currency = str(taxes['currency'])
            if 'payment_month' in taxes:
                options.tax_payment_month = int(taxes['payment_month'])
            if 'payment_day' in taxes:
                options.tax_payment_day = int(taxes['payment_day'])
            if taxes.get('account_close_date'):
                options.account_close_date = self._parse_date(taxes['account_close_date'])
            if taxes.get('rate') is not None:
                options.tax_rate = Decimal(str(taxes['rate']))

            if 'assets_currency' in file_config:
                options.assets_currency = str(file_config['assets_currency'])

            if 'exchange_rates' in file_config:
                options.exchange_rates = list(file_config['exchange_rates'] or [])

        except (TypeError, ValueError, InvalidOperation) as e:
            raise ConfigurationError(f"設定値が不正です: {e}") from e

        if 'logging' in file_config:
            options.logging_config.update({
                k: v for k, v in (file_config['logging'] or {}).items()
                if k in options.logging_config
            })

    @staticmethod
    def _parse_date(value: Union[str, date]) -> date:
        if isinstance(value, date):
            return value
        return datetime.strptime(str(value), '%Y-%m-%d').date()

    def _override_from_env(self) -> None:
        """環境変数による設定の上書き"""
        options = self._config_options

        debug_env = os.getenv(f'{self.env_prefix}DEBUG')
        if debug_env is not None:
            options.debug = debug_env.lower() in ['true', '1', 'yes']

        color_env = os.getenv(f'{self.env_prefix}USE_COLOR')
        if color_env is not None:
            options.use_color = color_env.lower() in ['true', '1', 'yes']

        files_env = os.getenv(f'{self.env_prefix}STATEMENT_FILES')
        if files_env:
            options.statement_files = files_env.split(',')

        year_env = os.getenv(f'{self.env_prefix}YEAR')
        if year_env:
            try:
                options.year = int(year_env)
            except ValueError as e:
                raise ConfigurationError(f"無効な集計年の環境変数: {year_env}") from e

    def _validate_config(self) -> None:
        """設定の検証"""
        options = self._config_options

        for file_path in options.statement_files:
            if not Path(file_path).exists():
                self.logger.warning(f"取引報告書ファイルが見つかりません: {file_path}")

        for code in (options.tax_currency, options.assets_currency):
            if Currency.from_str(code) is None:
                raise ConfigurationError(f"未対応の通貨コード: {code}")

        if options.tolerance < 0:
            raise ConfigurationError(f"許容誤差は0以上である必要があります: {options.tolerance}")

        self._tax_payment_day = self._create_tax_payment_day()

    @property
    def debug(self) -> bool:
        return self._config_options.debug

    @property
    def use_color(self) -> bool:
        return self._config_options.use_color

    @use_color.setter
    def use_color(self, value: bool) -> None:
        self._config_options.use_color = value

    @property
    def statement_files(self) -> List[Path]:
        """取引報告書ファイルのリスト"""
        return [Path(path) for path in self._config_options.statement_files]

    @property
    def year(self) -> Optional[int]:
        return self._config_options.year

    @year.setter
    def year(self, value: Optional[int]) -> None:
        self._config_options.year = value

    @property
    def tolerance(self) -> Decimal:
        return self._config_options.tolerance

    @property
    def tax_currency(self) -> Currency:
        return Currency.from_code(self._config_options.tax_currency)

    @property
    def assets_currency(self) -> Currency:
        return Currency.from_code(self._config_options.assets_currency)

    @property
    def tax_rate(self) -> Optional[Decimal]:
        return self._config_options.tax_rate

    @property
    def tax_payment_day(self) -> TaxPaymentDay:
        return self._tax_payment_day

    def _create_tax_payment_day(self) -> TaxPaymentDay:
        """納税日の規則（口座閉鎖日が設定されていれば閉鎖時納税）"""
        options = self._config_options
        if options.account_close_date is not None:
            return OnCloseTaxPaymentDay(options.account_close_date)
        return FixedTaxPaymentDay(options.tax_payment_month, options.tax_payment_day)

    @cached_property
    def rate_sources(self) -> List[RateSourceConfig]:
        """為替レート履歴ファイルの設定"""
        sources = []
        for pair_config in self._config_options.exchange_rates:
            try:
                sources.append(RateSourceConfig(
                    base=Currency.from_code(pair_config['base']),
                    target=Currency.from_code(pair_config['target']),
                    history_file=Path(pair_config['history_file']),
                ))
            except (KeyError, TypeError) as e:
                raise ConfigurationError(f"為替レート設定が不正です: {e}") from e
        return sources

    @cached_property
    def logging_config(self) -> Dict[str, str]:
        return dict(self._config_options.logging_config)

    def create_logging_config(self) -> Dict[str, Any]:
        """
        ロギング設定を生成

        Returns:
            logging.config.dictConfig 用の設定辞書
        """
        log_dir = Path(self.logging_config["log_dir"])
        log_dir.mkdir(parents=True, exist_ok=True)

        return {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'detailed': {
                    'format': self.logging_config['log_format']
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'formatter': 'detailed',
                    'level': 'DEBUG' if self.debug else self.logging_config['console_level']
                },
                'file': {
                    'class': 'logging.FileHandler',
                    'filename': str(log_dir / self.logging_config["log_file"]),
                    'formatter': 'detailed',
                    'level': self.logging_config['file_level']
                }
            },
            'root': {
                'handlers': ['console', 'file'],
                'level': 'DEBUG'
            }
        }
