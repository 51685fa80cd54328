from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Dict, Optional
import json
import logging

from .error import DataError, LoaderError, ParseError
from .period import Period
from .statement import NetAssets, Statement
from ..config.settings import FILE_ENCODING, INPUT_DATE_FORMAT, INPUT_DATETIME_FORMAT
from ..exchange.currency import Currency
from ..exchange.money import Money
from ..processors.cash_flow.record import CashFlow, Operation
from ..processors.dividend.record import DividendRow
from ..processors.tax.record import ProfitRecord
from ..processors.trade.record import ConcludedTrade, ExecutedTrade


class StatementLoader:
    """
    JSONファイルから取引報告書を読み込むローダー

    ブローカー固有の形式から変換済みのレコードを読み込み、
    Statementオブジェクトを生成します。不正なレコードは
    スキップせずにエラーとして報告します。
    """

    def __init__(self) -> None:
        """ローダーを初期化"""
        self.logger = logging.getLogger(self.__class__.__name__)

    def load(self, source: Path) -> Statement:
        """
        JSONファイルから取引報告書を読み込む

        Args:
            source: JSONファイルのパス

        Returns:
            読み込んだ取引報告書

        Raises:
            LoaderError: ファイル読み込みまたはJSON解析エラー
            DataError: レコードの内容が不正な場合
        """
        self._validate_source(source)
        self.logger.debug(f"JSONファイルの読み込みを開始: {source}")

        try:
            with source.open('r', encoding=FILE_ENCODING) as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise LoaderError(
                f"JSONファイルの解析に失敗: {source}",
                str(source),
                {'error': str(e), 'line': e.lineno, 'column': e.colno}
            ) from e
        except OSError as e:
            raise LoaderError(f"ファイルの読み込みに失敗: {source}", str(source), {'error': str(e)}) from e

        statement = self.parse(data, data.get('account_id') or source.stem)
        self.logger.info(
            f"取引報告書を読み込みました: {source} ({statement.period}, "
            f"約定 {len(statement.trades)}件, 配当 {len(statement.dividends)}件, "
            f"資金移動 {len(statement.cash_flows)}件)"
        )
        return statement

    def _validate_source(self, source: Path) -> None:
        if not source.exists():
            raise LoaderError(
                f"ソースファイルが存在しません: {source}",
                str(source),
                {'type': 'file_not_found'}
            )
        if not source.is_file():
            raise LoaderError(
                f"指定されたパスはファイルではありません: {source}",
                str(source),
                {'type': 'invalid_source_type'}
            )

    def parse(self, data: Dict[str, Any], account_id: str) -> Statement:
        """解析済みのJSONデータから取引報告書を生成"""
        period = Period(self._parse_date(data.get('from_date')), self._parse_date(data.get('to_date')))

        statement = Statement(
            account_id=account_id,
            period=period,
            starting_cash=self._parse_balances(data.get('starting_cash', {})),
            ending_cash=self._parse_balances(data.get('ending_cash', {})),
        )

        for record in data.get('trades', []):
            statement.trades.append(self._parse_record(self._parse_trade, record))
        for record in data.get('executed_trades', []):
            statement.executed_trades.append(self._parse_record(self._parse_executed_trade, record))
        for record in data.get('dividends', []):
            statement.dividends.append(self._parse_record(self._parse_dividend, record))
        for record in data.get('cash_flows', []):
            statement.cash_flows.append(self._parse_record(self._parse_cash_flow, record))
        for record in data.get('profits', []):
            statement.profits.append(self._parse_record(self._parse_profit, record))
        for record in data.get('net_assets', []):
            snapshot_date = self._parse_date(record.get('date'))
            statement.historical_assets[snapshot_date] = self._parse_record(self._parse_net_assets, record)

        return statement

    def _parse_record(self, parser, record: Dict[str, Any]):
        try:
            return parser(record)
        except DataError:
            raise
        except (KeyError, TypeError, ValueError, InvalidOperation) as e:
            raise ParseError(
                f"レコードの解析に失敗: {e}", json.dumps(record, ensure_ascii=False), parser.__name__
            ) from e

    def _parse_trade(self, record: Dict[str, Any]) -> ConcludedTrade:
        return ConcludedTrade(
            trade_id=str(record['id']),
            symbol=record['symbol'],
            conclusion_time=self._parse_datetime(record['conclusion_time']),
            execution_date=self._parse_date(record['execution_date']),
            price=Decimal(str(record['price'])),
            price_currency=record['price_currency'],
            volume=Decimal(str(record['volume'])),
            accounting_currency=record.get('accounting_currency', record['price_currency']),
            commission=Decimal(str(record.get('commission', '0'))),
            commission_currency=record.get('commission_currency'),
            buy_quantity=self._parse_optional_decimal(record.get('buy_quantity')),
            sell_quantity=self._parse_optional_decimal(record.get('sell_quantity')),
        )

    def _parse_executed_trade(self, record: Dict[str, Any]) -> ExecutedTrade:
        return ExecutedTrade(
            trade_id=str(record['id']),
            plan_execution_date=self._parse_date(record['plan_execution_date']),
            fact_execution_date=self._parse_date(record['fact_execution_date']),
        )

    def _parse_dividend(self, record: Dict[str, Any]) -> DividendRow:
        return DividendRow(
            date=self._parse_date(record['date']),
            description=record['description'],
            amount=self._parse_money(record['amount'], record['currency']),
        )

    def _parse_cash_flow(self, record: Dict[str, Any]) -> CashFlow:
        if 'time' in record:
            timestamp = self._parse_datetime(record['time'])
        else:
            timestamp = datetime.combine(self._parse_date(record['date']), datetime.min.time())

        sibling_amount = None
        if record.get('sibling_amount') is not None:
            sibling_amount = self._parse_money(record['sibling_amount'], record['sibling_currency'])

        operation = Operation.from_str(record['operation'])
        return CashFlow(
            timestamp=timestamp,
            operation=operation,
            amount=self._parse_money(record['amount'], record['currency']),
            description=record.get('description') or operation.name.replace('_', ' ').title(),
            sibling_amount=sibling_amount,
        )

    def _parse_profit(self, record: Dict[str, Any]) -> ProfitRecord:
        return ProfitRecord(
            date=self._parse_date(record['date']),
            amount=self._parse_money(record['amount'], record['currency']),
            description=record.get('description'),
        )

    def _parse_net_assets(self, record: Dict[str, Any]) -> NetAssets:
        def parse(value: Optional[Dict[str, Any]]) -> Optional[Money]:
            if value is None:
                return None
            return self._parse_money(value['amount'], value['currency'])

        return NetAssets(cash=parse(record.get('cash')), other=parse(record.get('other')))

    def _parse_balances(self, balances: Dict[str, Any]) -> Dict[Currency, Money]:
        parsed = {}
        for code, amount in balances.items():
            money = self._parse_record(lambda _: self._parse_money(amount, code), {code: amount})
            parsed[money.currency] = money
        return parsed

    @staticmethod
    def _parse_money(amount: Any, currency: str) -> Money:
        return Money(Currency.from_code(currency), Decimal(str(amount)))

    @staticmethod
    def _parse_optional_decimal(value: Any) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(str(value))

    @staticmethod
    def _parse_date(value: Optional[str]) -> date:
        if not value:
            raise ParseError("日付がありません", str(value), 'date')
        try:
            return datetime.strptime(value, INPUT_DATE_FORMAT).date()
        except ValueError as e:
            raise ParseError(f"日付のパースに失敗: {value}", value, 'date') from e

    @staticmethod
    def _parse_datetime(value: str) -> datetime:
        try:
            return datetime.strptime(value, INPUT_DATETIME_FORMAT)
        except ValueError as e:
            raise ParseError(f"日時のパースに失敗: {value}", value, 'datetime') from e
