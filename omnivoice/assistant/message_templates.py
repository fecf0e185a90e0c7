"""Reusable reply templates for the voice assistant."""
from __future__ import annotations

from typing import Dict, Iterable, Mapping, Tuple

from .models import format_amount


WELCOME_MESSAGE = (
    "您好！我是OmniCore智能助手。我可以帮您处理收款、转账、查余额、查价格等操作。"
    "请说\"帮助\"了解更多功能。"
)

NOT_UNDERSTOOD_MESSAGE = (
    "抱歉，我没有理解您的命令。您可以说\"收款100元\"、\"查询余额\"、\"转账给小明\"等，"
    "或者说\"帮助\"来了解我能做什么。"
)

COLLECT_ASK_AMOUNT = "请告诉我收款金额。"
TRANSFER_ASK_AMOUNT = "请告诉我转账金额。"
UNKNOWN_PRICE = "未知"

HISTORY_SUMMARY = (
    "您最近有3笔交易：收款500元（已完成），转账200元给张三（已完成），收款1000 USDT（待确认）。"
)

# Canned utterances the simulated recognizer picks from
DEMO_UTTERANCES: Tuple[str, ...] = (
    "收款100元",
    "查询余额",
    "收款500 USDT 用加密货币",
    "生成收款码200元",
    "比特币价格是多少",
)

FOLLOW_UP_PROMPTS: Dict[Tuple[str, str], str] = {
    ("collect", "amount"): "请问您要收多少钱？",
    ("transfer", "amount"): "您要转多少钱？",
    ("transfer", "recipient"): "您要转给谁？",
}


def _grouped(value: float) -> str:
    """Thousands-separated number, dropping a trailing .0."""
    v = float(value)
    if v.is_integer():
        return f"{int(v):,}"
    return f"{v:,}"


def collect_created(amount: float, currency: str) -> str:
    return f"好的，正在生成{format_amount(amount)} {currency}的收款码，请让客户扫码支付。"


def qrcode_created(amount: float, currency: str) -> str:
    if amount > 0:
        return f"已生成{format_amount(amount)} {currency}收款码。"
    return "已生成通用收款码。"


def transfer_ask_recipient(amount: float) -> str:
    return f"请告诉我转账给谁。金额：{format_amount(amount)}元。"


def transfer_done(amount: float, recipient: str, auto_confirm: bool) -> str:
    if auto_confirm:
        return f"已成功转账{format_amount(amount)}元给{recipient}。"
    return f"正在准备转账{format_amount(amount)}元给{recipient}，请确认交易详情后签名。"


def balance_summary(balances: Mapping[str, float]) -> str:
    cny = balances.get("CNY", 0)
    usdt = balances.get("USDT", 0)
    eth = balances.get("ETH", 0)
    btc = balances.get("BTC", 0)
    return (
        f"您的账户余额：人民币{_grouped(cny)}元，USDT {_grouped(usdt)}，"
        f"ETH {format_amount(eth)}个，BTC {format_amount(btc)}个。"
    )


def price_quote(coin: str, prices: Mapping[str, float]) -> str:
    price = prices.get(coin)
    shown = _grouped(price) if price is not None else UNKNOWN_PRICE
    return f"{coin}当前价格：{shown}美元。"


def amount_recorded(amount: float) -> str:
    return f"好的，金额{format_amount(amount)}元已记录。"


def recipient_recorded(recipient: str) -> str:
    return f"好的，收款人{recipient}已记录。"


def payment_received(amount: float, currency: str) -> str:
    return f"收款成功！{format_amount(amount)} {currency} 已到账。"


def help_text(descriptions: Iterable[str]) -> str:
    lines = "\n".join(f"• {d}" for d in descriptions)
    return (
        "我是您的智能助手，可以帮您：\n"
        f"{lines}\n\n"
        "您可以直接说出需求，比如\"收款100元\"或\"查一下余额\"。"
    )


def get_follow_up_prompt(intent_id: str, slot: str) -> str:
    return FOLLOW_UP_PROMPTS.get((intent_id, slot), "请补充一下信息。")
