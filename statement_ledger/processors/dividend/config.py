import re
from typing import Pattern

# ティッカー（クラス接尾辞付きを含む: "RDS B", "BRK.B"）
STOCK_SYMBOL_REGEX = r"[A-Z][A-Z0-9]*(?:[ .][A-Z]+)?"

# ISIN: 国コード2文字 + 9桁の英数字 + チェックディジット
STOCK_ID_REGEX = r"[A-Z]{2}[A-Z0-9]{9}[0-9]"

DESCRIPTION_PATTERN: Pattern[str] = re.compile(
    r"^(?P<issuer>{symbol}) ?\((?P<isin>{id})\) ".format(
        symbol=STOCK_SYMBOL_REGEX, id=STOCK_ID_REGEX
    )
)

# ティッカー本体とクラス接尾辞の区切り文字
SYMBOL_CLASS_SEPARATOR = "-"
