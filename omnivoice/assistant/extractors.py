"""Keyword and regex extractors for voice command parameters.

Every extractor is a pure function over the raw utterance. The keyword
scans run in a fixed order and each hit overwrites the previous one, so
when several keyword groups appear in one sentence the group checked
last wins (e.g. "USDT 换 ETH" resolves to ETH).
"""
from __future__ import annotations

import re
from typing import Callable, Dict, Iterable, Optional, Sequence, Tuple

from .models import ExtractedParameters


AMOUNT_PATTERN = re.compile(r"(\d+(?:\.\d+)?)")

RECIPIENT_MARKER = "给"

DEFAULT_CURRENCY = "CNY"
DEFAULT_METHOD = "qrcode"
DEFAULT_COIN = "BTC"

# Order matters: later groups overwrite earlier ones
CURRENCY_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("USD", ("美元", "美金", "dollar")),
    ("USDT", ("usdt",)),
    ("ETH", ("eth", "以太")),
    ("BTC", ("btc", "比特币")),
)

METHOD_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("alipay", ("支付宝", "alipay")),
    ("wechat", ("微信", "wechat")),
    ("bank", ("银行", "bank")),
    ("crypto", ("加密", "crypto")),
)

COIN_KEYWORDS: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("ETH", ("eth", "以太")),
    ("USDT", ("usdt",)),
    ("BNB", ("bnb",)),
)


def _last_match(text: str, table: Sequence[Tuple[str, Iterable[str]]], default: str) -> str:
    low = text.lower()
    result = default
    for value, keywords in table:
        if any(k in low for k in keywords):
            result = value
    return result


def extract_amount(text: str) -> Optional[float]:
    """Return the first number in the text, or None."""
    m = AMOUNT_PATTERN.search(text)
    if not m:
        return None
    return float(m.group(1))


def extract_currency(text: str, default: str = DEFAULT_CURRENCY) -> str:
    return _last_match(text, CURRENCY_KEYWORDS, default)


def extract_method(text: str, default: str = DEFAULT_METHOD) -> str:
    return _last_match(text, METHOD_KEYWORDS, default)


def extract_coin(text: str, default: str = DEFAULT_COIN) -> str:
    return _last_match(text, COIN_KEYWORDS, default)


def extract_recipient(text: str) -> str:
    """Return the token right after the recipient marker, or "".

    Naive split: "转账给小明" -> "小明", but the marker inside a compound
    word is taken at face value too.
    """
    low = text.lower()
    if RECIPIENT_MARKER not in low:
        return ""
    parts = low.split(RECIPIENT_MARKER)
    tokens = parts[1].strip().split()
    return tokens[0] if tokens else ""


EXTRACTORS: Dict[str, Callable[..., object]] = {
    "amount": extract_amount,
    "currency": extract_currency,
    "method": extract_method,
    "recipient": extract_recipient,
    "coin": extract_coin,
}


def extract_parameters(
    text: str,
    names: Iterable[str],
    local_currency: str = DEFAULT_CURRENCY,
) -> ExtractedParameters:
    """Run the named extractors over `text`.

    Raises KeyError for an unknown extractor name; rule tables are static,
    so that is a programming error rather than bad input.
    """
    values: Dict[str, object] = {}
    for name in names:
        extractor = EXTRACTORS[name]
        if name == "currency":
            values[name] = extractor(text, default=local_currency)
        else:
            values[name] = extractor(text)
    # Empty recipient means "not provided"
    if values.get("recipient") == "":
        values["recipient"] = None
    return ExtractedParameters(**values)
