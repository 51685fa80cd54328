from pathlib import Path
from decimal import Decimal

# ベースパス
BASE_DIR = Path.cwd()
OUTPUT_DIR = BASE_DIR / 'output'
LOG_DIR = OUTPUT_DIR / 'logs'

# ファイル設定
FILE_ENCODING = 'utf-8'

# 日付形式
INPUT_DATE_FORMAT = '%Y-%m-%d'
INPUT_DATETIME_FORMAT = '%Y-%m-%dT%H:%M:%S'

# 保存則検証の許容誤差（為替換算の丸め誤差を吸収する）
CONSERVATION_TOLERANCE = Decimal('0.015')

# 納税日（実現年の翌年の月日）
DEFAULT_TAX_PAYMENT_MONTH = 3
DEFAULT_TAX_PAYMENT_DAY = 15

# その他の資産の評価通貨
DEFAULT_ASSETS_CURRENCY = 'USD'

# ロギング設定
LOGGING_CONFIG = {
    'console_level': 'WARNING',
    'file_level': 'DEBUG',
    'log_dir': str(LOG_DIR),
    'log_file': 'processing.log',
    'log_format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
}
