import sys
import logging
import logging.config
from pathlib import Path
import argparse
from datetime import datetime
from typing import List, NoReturn, Optional

from .app.config import ConfigManager
from .app.report_generator import ReportGenerator
from .core.error import ConfigurationError, DataError
from .core.loader import StatementLoader
from .exchange.converter import RateTableConverter
from .outputs.console import ConsoleOutput


def create_converter(config: ConfigManager) -> Optional[RateTableConverter]:
    """
    為替レート表を初期化

    Args:
        config: アプリケーション設定

    Returns:
        レート表。設定がない場合はNone
    """
    if not config.rate_sources:
        return None

    converter = RateTableConverter()
    for source in config.rate_sources:
        converter.load_csv(source.base, source.target, source.history_file)
    return converter


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    コマンドライン引数をパース

    Returns:
        argparse.Namespace: パースされた引数
    """
    parser = argparse.ArgumentParser(
        description="取引報告書の資金移動・配当・納税スケジュール集計プログラム",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("config.yaml"),
        help="設定ファイルのパス",
    )
    parser.add_argument(
        "--year",
        type=int,
        default=None,
        help="集計年（未指定の場合は取引報告書の全期間）",
    )
    parser.add_argument(
        "--no-color",
        action="store_true",
        help="カラー出力を無効にする",
    )
    return parser.parse_args(argv)


def handle_keyboard_interrupt() -> NoReturn:
    logging.warning("ユーザーにより処理が中断されました")
    sys.exit(130)


def main(argv: Optional[List[str]] = None) -> int:
    """
    メインエントリーポイント

    Returns:
        int: 終了コード
    """
    start_time = datetime.now()
    args = parse_arguments(argv)

    try:
        config = ConfigManager(args.config)
    except ConfigurationError as e:
        logging.error(f"設定エラー: {e}")
        return 1

    if args.year is not None:
        config.year = args.year
    if args.no_color:
        config.use_color = False

    logging.config.dictConfig(config.create_logging_config())
    logger = logging.getLogger(__name__)
    logger.info("取引報告書の処理を開始...")

    statement_files = config.statement_files
    if not statement_files:
        logger.error("処理対象の取引報告書ファイルが設定されていません")
        return 1

    try:
        converter = create_converter(config)
        loader = StatementLoader()
        generator = ReportGenerator(config, converter)
        output = ConsoleOutput(config.use_color)

        for statement_file in statement_files:
            statement = loader.load(statement_file)
            output.output(generator.generate(statement, config.year))

    except DataError as e:
        logger.error(f"取引報告書のデータエラー: {e} {e.details}")
        return 1
    except KeyboardInterrupt:
        handle_keyboard_interrupt()

    execution_time = datetime.now() - start_time
    logger.info(f"処理が完了しました (所要時間: {execution_time})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
