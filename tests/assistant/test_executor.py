import asyncio

import pytest

from omnivoice.assistant.executor import CommandExecutor
from omnivoice.assistant.message_templates import NOT_UNDERSTOOD_MESSAGE
from omnivoice.assistant.models import CommandStatus, PaymentStatus
from omnivoice.assistant.settings import AssistantSettings


def make_executor(settings):
    replies, toasts = [], []
    executor = CommandExecutor(
        settings=settings,
        on_response=replies.append,
        notify=lambda level, msg: toasts.append((level, msg)),
    )
    return executor, replies, toasts


@pytest.mark.asyncio
async def test_collect_creates_waiting_payment(fast_settings):
    executor, replies, toasts = make_executor(fast_settings)
    cmd = await executor.execute("收款100元")

    assert cmd.intent_id == "collect"
    assert cmd.status == CommandStatus.COMPLETED
    assert cmd.extracted_params.amount == 100.0
    assert cmd.extracted_params.currency == "CNY"
    assert "100" in cmd.response

    payment = executor.payments.active
    assert payment is not None
    assert payment.amount == 100.0
    assert payment.currency == "CNY"
    assert payment.status == PaymentStatus.WAITING
    assert replies == [cmd.response]
    assert toasts == [("success", cmd.response)]
    executor.payments.shutdown()


@pytest.mark.asyncio
async def test_collect_with_currency_and_method(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    await executor.execute("收款500 USDT 用加密货币")
    payment = executor.payments.active
    assert payment.currency == "USDT"
    assert payment.method == "crypto"
    executor.payments.shutdown()


@pytest.mark.asyncio
async def test_collect_without_amount_asks_and_completes(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    cmd = await executor.execute("我要收钱")
    assert cmd.status == CommandStatus.COMPLETED
    assert cmd.response == "请告诉我收款金额。"
    assert executor.payments.active is None
    assert executor.dialogue.pending_action == "CREATE_PAYMENT"

    answer = await executor.execute("88")
    assert answer.intent_id == "collect"
    assert answer.status == CommandStatus.COMPLETED
    assert executor.payments.active.amount == 88.0
    assert executor.dialogue.current is None
    executor.payments.shutdown()


@pytest.mark.asyncio
async def test_balance_has_no_side_effect(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    cmd = await executor.execute("查一下余额")
    assert cmd.intent_id == "balance"
    assert "125,432.5" in cmd.response
    assert "USDT 50,000" in cmd.response
    assert executor.payments.active is None


@pytest.mark.asyncio
async def test_transfer_without_amount_waits(fast_settings):
    executor, _, toasts = make_executor(fast_settings)
    cmd = await executor.execute("转账给小明")

    assert cmd.intent_id == "transfer"
    assert cmd.status == CommandStatus.PENDING
    assert "金额" in cmd.response
    assert executor.dialogue.pending_action == "TRANSFER"
    assert executor.dialogue.current.slot == "amount"
    assert executor.dialogue.current.command_id == cmd.id
    # No toast for a command that is still waiting
    assert toasts == []


@pytest.mark.asyncio
async def test_bare_number_completes_pending_transfer(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    first = await executor.execute("转账给小明")
    second = await executor.execute("100")

    assert second.intent_id == "transfer"
    assert second.status == CommandStatus.COMPLETED
    assert second.response.startswith("好的，金额100元已记录。")
    assert "小明" in second.response
    assert second.extracted_params.amount == 100.0
    assert first.status == CommandStatus.COMPLETED
    assert executor.dialogue.current is None


@pytest.mark.asyncio
async def test_transfer_missing_recipient(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    cmd = await executor.execute("汇款500元")
    assert cmd.status == CommandStatus.PENDING
    assert cmd.response == "请告诉我转账给谁。金额：500元。"
    assert executor.dialogue.current.slot == "recipient"


@pytest.mark.asyncio
async def test_number_does_not_overwrite_amount_while_recipient_is_awaited(fast_settings):
    executor, _, toasts = make_executor(fast_settings)
    first = await executor.execute("汇款500元")
    second = await executor.execute("100")

    assert second.response == "请告诉我转账给谁。金额：500元。"
    assert second.intent_id is None
    assert executor.dialogue.current.slot == "recipient"
    assert executor.dialogue.current.params.amount == 500.0
    assert first.status == CommandStatus.PENDING
    assert toasts[-1] == ("error", second.response)


@pytest.mark.asyncio
async def test_name_answer_fills_recipient(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    first = await executor.execute("汇款500元")
    await executor.execute("100")
    third = await executor.execute("小明")

    assert third.intent_id == "transfer"
    assert third.action == "TRANSFER"
    assert third.status == CommandStatus.COMPLETED
    assert third.extracted_params.amount == 500.0
    assert third.extracted_params.recipient == "小明"
    assert third.response == "好的，收款人小明已记录。正在准备转账500元给小明，请确认交易详情后签名。"
    assert first.status == CommandStatus.COMPLETED
    assert executor.dialogue.current is None


@pytest.mark.asyncio
async def test_amount_then_recipient_follow_ups(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    first = await executor.execute("我要转账")
    assert executor.dialogue.current.slot == "amount"

    second = await executor.execute("300")
    assert second.status == CommandStatus.PENDING
    assert second.response == "好的，金额300元已记录。请告诉我转账给谁。金额：300元。"
    assert first.status == CommandStatus.COMPLETED
    assert executor.dialogue.current.slot == "recipient"

    third = await executor.execute("给张三")
    assert third.status == CommandStatus.COMPLETED
    assert third.extracted_params.recipient == "张三"
    assert second.status == CommandStatus.COMPLETED
    assert executor.dialogue.current is None


@pytest.mark.asyncio
async def test_transfer_auto_confirm():
    settings = AssistantSettings(handler_latency_seconds=0, auto_confirm=True)
    executor, _, _ = make_executor(settings)
    cmd = await executor.execute("转账100元给张三")
    assert cmd.status == CommandStatus.COMPLETED
    assert cmd.response == "已成功转账100元给张三。"


@pytest.mark.asyncio
async def test_transfer_manual_confirm(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    cmd = await executor.execute("转账100元给张三")
    assert cmd.status == CommandStatus.COMPLETED
    assert "请确认交易详情后签名" in cmd.response


@pytest.mark.asyncio
async def test_unmatched_input_falls_back(fast_settings):
    executor, replies, toasts = make_executor(fast_settings)
    cmd = await executor.execute("今天天气如何")
    assert cmd.intent_id is None
    assert cmd.status == CommandStatus.COMPLETED
    assert cmd.response == NOT_UNDERSTOOD_MESSAGE
    assert toasts == [("error", NOT_UNDERSTOOD_MESSAGE)]


@pytest.mark.asyncio
async def test_bare_number_without_pending_action(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    cmd = await executor.execute("100")
    assert cmd.intent_id is None
    assert cmd.response == NOT_UNDERSTOOD_MESSAGE


@pytest.mark.asyncio
async def test_unrelated_command_overrides_pending_context(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    await executor.execute("转账给小明")
    await executor.execute("我要收钱")
    assert executor.dialogue.pending_action == "CREATE_PAYMENT"

    cmd = await executor.execute("50")
    assert cmd.intent_id == "collect"
    executor.payments.shutdown()


@pytest.mark.asyncio
async def test_command_without_follow_up_keeps_pending_context(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    await executor.execute("转账给小明")
    await executor.execute("查询余额")
    assert executor.dialogue.pending_action == "TRANSFER"


@pytest.mark.asyncio
async def test_qrcode_without_amount_is_generic(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    cmd = await executor.execute("生成收款码")
    assert cmd.intent_id == "qrcode"
    assert cmd.response == "已生成通用收款码。"
    assert executor.payments.active.display_amount == "0 CNY"
    executor.payments.shutdown()


@pytest.mark.asyncio
async def test_price_and_help(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    price = await executor.execute("以太坊多少钱")
    assert price.response == "ETH当前价格：3,450美元。"
    helped = await executor.execute("你能做什么")
    assert "查询账户余额" in helped.response


@pytest.mark.asyncio
async def test_history_log_records_every_command(fast_settings):
    executor, _, _ = make_executor(fast_settings)
    for text in ("查询余额", "今天天气如何", "查看交易记录"):
        await executor.execute(text)
    assert [c.raw_text for c in executor.history.all()] == ["查询余额", "今天天气如何", "查看交易记录"]


@pytest.mark.asyncio
async def test_handler_latency_is_awaited():
    settings = AssistantSettings(handler_latency_seconds=0.05)
    executor, _, _ = make_executor(settings)
    loop = asyncio.get_running_loop()
    started = loop.time()
    await executor.execute("查询余额")
    assert loop.time() - started >= 0.04
