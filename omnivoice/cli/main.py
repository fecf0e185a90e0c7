from __future__ import annotations

import asyncio
from typing import Optional

import typer
from rich.console import Console

from omnivoice.assistant.intents import INTENT_RULES
from omnivoice.assistant.session import AssistantSession
from omnivoice.assistant.settings import AssistantSettings
from omnivoice.cli.display import DisplayManager
from omnivoice.config import Config
from omnivoice.utils.errors import ConfigurationError
from omnivoice.utils.logging import setup_logging
from omnivoice.utils.paths import resolve_config_path


app = typer.Typer(add_completion=False, help="OmniVoice voice payment assistant")


def _load(config_path: str, latency: Optional[float]) -> tuple:
    """Load config.yaml when present; defaults otherwise."""
    cfg_path = resolve_config_path(config_path)
    if cfg_path.exists():
        try:
            cfg = Config(str(cfg_path))
        except ConfigurationError as e:
            typer.secho(f"Invalid configuration: {e}", fg=typer.colors.RED)
            raise typer.Exit(code=1)
        settings = AssistantSettings.from_config(cfg)
        app_name = cfg.app_name
    else:
        setup_logging(level="WARNING", format_type="text")
        settings = AssistantSettings()
        app_name = "OmniVoice"
    if latency is not None:
        settings.handler_latency_seconds = latency
    return settings, app_name


@app.command("chat")
def chat(
    config: str = typer.Option("config.yaml", "--config", "-c", help="Path to YAML config"),
    latency: Optional[float] = typer.Option(None, "--latency", help="Override simulated handler latency (seconds)"),
    no_voice: bool = typer.Option(False, "--no-voice", help="Disable simulated speech output"),
    debug: bool = typer.Option(False, "--debug", help="Print tracebacks for unexpected errors"),
):
    """Start an interactive assistant session."""
    from omnivoice.cli.chat import ChatSession

    settings, app_name = _load(config, latency)
    if no_voice:
        settings.voice_enabled = False
    asyncio.run(ChatSession(settings=settings, app_name=app_name, debug=debug).start())


@app.command("say")
def say(
    text: str = typer.Argument(..., help="Utterance to resolve, e.g. 收款100元"),
    config: str = typer.Option("config.yaml", "--config", "-c", help="Path to YAML config"),
):
    """Resolve a single utterance and print the reply."""

    settings, _ = _load(config, latency=0.0)
    display = DisplayManager()

    async def run() -> None:
        session = AssistantSession(settings=settings, notify=display.show_toast)
        try:
            command = await session.submit_text(text)
            if command is None:
                typer.secho("Nothing to do for blank input", fg=typer.colors.YELLOW)
                return
            display.show_reply(command.response or "", command.action)
            if session.active_payment is not None:
                display.show_payment(session.active_payment)
            display.show_history(session.recent_commands(), len(session.history))
        finally:
            session.close()

    asyncio.run(run())


@app.command("intents")
def intents():
    """List the intent rule table in match order."""
    DisplayManager(Console()).show_intents(INTENT_RULES)


if __name__ == "__main__":
    app()
