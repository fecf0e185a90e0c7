"""
Rich renderables for the OmniVoice terminal client
"""

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from omnivoice.assistant.intents import IntentRule
from omnivoice.assistant.models import Command, CommandStatus, PaymentRequest, PaymentStatus


STATUS_STYLES = {
    CommandStatus.PENDING: "yellow",
    CommandStatus.EXECUTING: "cyan",
    CommandStatus.COMPLETED: "green",
    CommandStatus.FAILED: "red",
}

STATUS_LABELS = {
    CommandStatus.PENDING: "待补充",
    CommandStatus.EXECUTING: "执行中",
    CommandStatus.COMPLETED: "已完成",
    CommandStatus.FAILED: "失败",
}

METHOD_LABELS = {
    "alipay": "支付宝",
    "wechat": "微信",
    "bank": "银行转账",
    "crypto": "加密货币",
    "qrcode": "扫码支付",
}

CURRENCY_SYMBOLS = {"CNY": "¥", "USD": "$"}


def create_welcome_panel(app_name: str, session_id: str) -> Panel:
    text = (
        f"[bold cyan]{app_name}[/bold cyan] 智能语音收款助手\n"
        "说出或输入命令即可收款、转账、查询。\n\n"
        f"Session: [dim]{session_id[:8]}...[/dim]\n"
        "Type [bold]/intents[/bold] for examples, [bold]/listen[/bold] to simulate voice input, "
        "[bold]exit[/bold] to quit."
    )
    return Panel(text, title="Welcome", border_style="cyan", box=box.DOUBLE)


def create_reply_panel(text: str, action: Optional[str] = None) -> Panel:
    title = f"Assistant · {action}" if action else "Assistant"
    return Panel(text, title=title, border_style="magenta", box=box.ROUNDED)


def create_payment_panel(request: PaymentRequest) -> Panel:
    paid = request.status == PaymentStatus.PAID
    symbol = CURRENCY_SYMBOLS.get(request.currency, "")

    table = Table(show_header=False, box=None, padding=(0, 1))
    table.add_column("Field", style="bold", width=10)
    table.add_column("Value")
    table.add_row("金额", f"{symbol}{request.display_amount}")
    table.add_row("方式", METHOD_LABELS.get(request.method, request.method))
    table.add_row("状态", "[green]已完成[/green]" if paid else "[yellow]待支付[/yellow]")
    if paid and request.paid_at:
        table.add_row("到账", request.paid_at.strftime("%H:%M:%S"))
    else:
        table.add_row("二维码", f"[link={request.qr_code_url}]{request.qr_payload}[/link]")

    return Panel(
        table,
        title="收款成功" if paid else "等待付款",
        border_style="green" if paid else "yellow",
        box=box.ROUNDED,
    )


def create_history_table(commands: Sequence[Command], total: Optional[int] = None) -> Table:
    title = "命令历史"
    if total is not None and total > len(commands):
        title += f" (最近 {len(commands)} / 共 {total})"
    table = Table(title=title, box=box.SIMPLE_HEAD)
    table.add_column("时间", style="dim", width=8)
    table.add_column("命令")
    table.add_column("意图", style="cyan")
    table.add_column("状态")
    table.add_column("回复", overflow="fold")

    for cmd in commands:
        style = STATUS_STYLES[cmd.status]
        table.add_row(
            cmd.timestamp.strftime("%H:%M:%S"),
            cmd.raw_text,
            cmd.intent_id or "—",
            f"[{style}]{STATUS_LABELS[cmd.status]}[/{style}]",
            cmd.response or "",
        )
    return table


def create_intents_table(rules: Sequence[IntentRule]) -> Table:
    table = Table(title="支持的命令", box=box.SIMPLE_HEAD)
    table.add_column("#", justify="right", style="dim")
    table.add_column("意图", style="cyan bold")
    table.add_column("说明")
    table.add_column("示例", style="green")
    for i, rule in enumerate(rules, 1):
        table.add_row(str(i), rule.id, rule.description, " / ".join(rule.examples))
    return table


class DisplayManager:
    """Prints assistant output; one instance per chat session."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def show_reply(self, text: str, action: Optional[str] = None) -> None:
        self.console.print(create_reply_panel(text, action))

    def show_speech(self, text: str) -> None:
        self.console.print(f"[dim]🔊 {text}[/dim]")

    def show_toast(self, level: str, message: str) -> None:
        color = {"success": "green", "error": "red", "warning": "yellow"}.get(level, "blue")
        self.console.print(f"[{color}]● {message}[/{color}]")

    def show_payment(self, request: Optional[PaymentRequest]) -> None:
        if request is None:
            self.console.print("[yellow]No payment request yet[/yellow]")
            return
        self.console.print(create_payment_panel(request))

    def show_history(self, commands: List[Command], total: int) -> None:
        if not commands:
            self.console.print("[yellow]No commands in this session yet[/yellow]")
            return
        self.console.print(create_history_table(commands, total))

    def show_intents(self, rules: Sequence[IntentRule]) -> None:
        self.console.print(create_intents_table(rules))
