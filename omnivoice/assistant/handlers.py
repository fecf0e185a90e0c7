"""Intent handlers.

Each handler maps extracted parameters to a HandlerResponse. Only
`collect` and `qrcode` touch the payment registry. Missing information is
reported through `follow_up`/`slot`, never by raising.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, Sequence

from . import message_templates as templates
from .models import CommandStatus, ExtractedParameters, HandlerResponse
from .payments import PaymentRegistry
from .settings import AssistantSettings

if TYPE_CHECKING:
    from .intents import IntentRule


@dataclass
class HandlerContext:
    settings: AssistantSettings
    payments: PaymentRegistry
    rules: Sequence["IntentRule"] = field(default_factory=tuple)


Handler = Callable[[ExtractedParameters, HandlerContext], HandlerResponse]


def _payment_data(request) -> dict:
    return {
        "payment_id": request.id,
        "amount": request.amount,
        "currency": request.currency,
        "method": request.method,
        "qr_code": request.qr_code_url,
    }


def handle_collect(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    currency = params.currency or ctx.settings.local_currency
    method = params.method or "qrcode"

    if params.amount is None:
        return HandlerResponse(
            text=templates.COLLECT_ASK_AMOUNT,
            action="CREATE_PAYMENT",
            follow_up=templates.get_follow_up_prompt("collect", "amount"),
            slot="amount",
            data={"currency": currency, "method": method},
        )

    request = ctx.payments.create(params.amount, currency, method)
    return HandlerResponse(
        text=templates.collect_created(request.amount, request.currency),
        action="CREATE_PAYMENT",
        data=_payment_data(request),
    )


def handle_qrcode(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    amount = params.amount or 0
    currency = params.currency or ctx.settings.local_currency
    request = ctx.payments.create(amount, currency, "qrcode")
    return HandlerResponse(
        text=templates.qrcode_created(request.amount, request.currency),
        action="GENERATE_QRCODE",
        data=_payment_data(request),
    )


def handle_transfer(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    # A zero amount counts as "not provided", same as a missing one
    if not params.amount:
        return HandlerResponse(
            text=templates.TRANSFER_ASK_AMOUNT,
            action="TRANSFER",
            follow_up=templates.get_follow_up_prompt("transfer", "amount"),
            slot="amount",
            status=CommandStatus.PENDING,
            data={"recipient": params.recipient},
        )

    if not params.recipient:
        return HandlerResponse(
            text=templates.transfer_ask_recipient(params.amount),
            action="TRANSFER",
            follow_up=templates.get_follow_up_prompt("transfer", "recipient"),
            slot="recipient",
            status=CommandStatus.PENDING,
            data={"amount": params.amount},
        )

    return HandlerResponse(
        text=templates.transfer_done(params.amount, params.recipient, ctx.settings.auto_confirm),
        action="TRANSFER",
        data={
            "amount": params.amount,
            "recipient": params.recipient,
            "confirmed": ctx.settings.auto_confirm,
        },
    )


def handle_balance(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    balances = ctx.settings.balances
    return HandlerResponse(
        text=templates.balance_summary(balances),
        action="CHECK_BALANCE",
        data={"balances": dict(balances)},
    )


def handle_price(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    coin = params.coin or "BTC"
    return HandlerResponse(
        text=templates.price_quote(coin, ctx.settings.prices),
        action="CHECK_PRICE",
        data={"coin": coin, "price_usd": ctx.settings.prices.get(coin)},
    )


def handle_history(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    return HandlerResponse(text=templates.HISTORY_SUMMARY, action="SHOW_HISTORY")


def handle_help(params: ExtractedParameters, ctx: HandlerContext) -> HandlerResponse:
    descriptions = [r.description for r in ctx.rules if r.id != "help"]
    return HandlerResponse(text=templates.help_text(descriptions), action="SHOW_HELP")
