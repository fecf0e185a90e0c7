"""Intent rule table and first-match intent matcher.

The table is an ordered tuple; `match_intent` scans it linearly and the
first rule with any keyword contained in the (lower-cased) input wins.
There is no scoring, so order is the only tie-break: `qrcode` sits ahead
of `collect` because "收款码" contains "收款".
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from .handlers import (
    Handler,
    handle_balance,
    handle_collect,
    handle_help,
    handle_history,
    handle_price,
    handle_qrcode,
    handle_transfer,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IntentRule:
    id: str
    keywords: Tuple[str, ...]
    category: str  # payment | wallet | market | general
    action: str
    description: str
    handler: Handler
    params: Tuple[str, ...] = ()
    examples: Tuple[str, ...] = ()

    def matches(self, text: str) -> bool:
        low = text.lower()
        return any(k.lower() in low for k in self.keywords)


INTENT_RULES: Tuple[IntentRule, ...] = (
    IntentRule(
        id="qrcode",
        keywords=("收款码", "二维码", "qrcode", "qr code"),
        category="payment",
        action="GENERATE_QRCODE",
        description="生成收款二维码",
        handler=handle_qrcode,
        params=("amount", "currency"),
        examples=("生成收款码200元", "给我一个二维码", "生成收款码"),
    ),
    IntentRule(
        id="collect",
        keywords=("收款", "收钱", "创建收款", "collect"),
        category="payment",
        action="CREATE_PAYMENT",
        description="收款（支付宝/微信/银行/加密货币）",
        handler=handle_collect,
        params=("amount", "currency", "method"),
        examples=("收款100元", "收款500 USDT 用加密货币", "我要收钱", "帮我收款50美元用支付宝"),
    ),
    IntentRule(
        id="transfer",
        keywords=("转账", "转钱", "汇款", "发送", "transfer"),
        category="wallet",
        action="TRANSFER",
        description="转账汇款",
        handler=handle_transfer,
        params=("amount", "recipient"),
        examples=("转账给小明", "转账100元给张三", "汇款500元", "发送200 USDT给李四"),
    ),
    IntentRule(
        id="balance",
        keywords=("余额", "还有多少", "我有多少钱", "balance"),
        category="wallet",
        action="CHECK_BALANCE",
        description="查询账户余额",
        handler=handle_balance,
        examples=("查一下余额", "查询余额", "我有多少钱", "账户还有多少"),
    ),
    IntentRule(
        id="price",
        keywords=("汇率", "价格", "多少钱", "price"),
        category="market",
        action="CHECK_PRICE",
        description="查询币价和汇率",
        handler=handle_price,
        params=("coin",),
        examples=("比特币价格是多少", "以太坊多少钱", "ETH price", "USDT汇率"),
    ),
    IntentRule(
        id="history",
        keywords=("交易", "记录", "历史", "history"),
        category="wallet",
        action="SHOW_HISTORY",
        description="查看交易记录",
        handler=handle_history,
        examples=("查看交易记录", "最近的交易", "历史账单"),
    ),
    IntentRule(
        id="help",
        keywords=("帮助", "怎么用", "你能做什么", "功能", "help"),
        category="general",
        action="SHOW_HELP",
        description="显示帮助",
        handler=handle_help,
        examples=("帮助", "你能做什么", "这个怎么用", "有什么功能"),
    ),
)


def match_intent(text: str, rules: Sequence[IntentRule] = INTENT_RULES) -> Optional[IntentRule]:
    """Return the first rule whose keywords appear in `text`, or None."""
    for rule in rules:
        if rule.matches(text):
            logger.debug(f"Matched intent {rule.id} for input {text!r}")
            return rule
    logger.debug(f"No intent matched input {text!r}")
    return None


def get_rule(intent_id: str, rules: Sequence[IntentRule] = INTENT_RULES) -> Optional[IntentRule]:
    for rule in rules:
        if rule.id == intent_id:
            return rule
    return None


def rule_for_action(action: str, rules: Sequence[IntentRule] = INTENT_RULES) -> Optional[IntentRule]:
    for rule in rules:
        if rule.action == action:
            return rule
    return None
