"""
Interactive chat session for the OmniVoice terminal client
"""

import logging
import random
from datetime import datetime
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.auto_suggest import AutoSuggestFromHistory
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.patch_stdout import patch_stdout
from prompt_toolkit.styles import Style
from rich.console import Console

from omnivoice.assistant.intents import INTENT_RULES
from omnivoice.assistant.session import AssistantSession
from omnivoice.assistant.settings import AssistantSettings
from omnivoice.cli.display import DisplayManager, create_welcome_panel

logger = logging.getLogger(__name__)


PROMPT_STYLE = Style.from_dict({"": "bold cyan"})

# Client-side commands carry a "/" prefix; any other line is an utterance
LOCAL_COMMANDS = ["/intents", "/history", "/payment", "/listen", "/voice on", "/voice off", "/clear", "exit", "quit"]

EXIT_WORDS = ("exit", "quit", "bye")


def parse_local_command(user_input: str) -> Optional[str]:
    """Name of the client-side command in `user_input`, or None for an utterance."""
    command = " ".join(user_input.lower().split())
    if command in EXIT_WORDS:
        return "exit"
    if command in LOCAL_COMMANDS:
        return command[1:]
    return None


class ChatSession:
    """Terminal front-end: reads lines, feeds the assistant session, renders replies."""

    def __init__(
        self,
        settings: Optional[AssistantSettings] = None,
        app_name: str = "OmniVoice",
        console: Optional[Console] = None,
        debug: bool = False,
    ):
        self.debug = debug
        self.app_name = app_name
        self.console = console or Console()
        self.display = DisplayManager(self.console)
        self.assistant = AssistantSession(
            settings=settings,
            speak=self.display.show_speech,
            notify=self.display.show_toast,
        )
        self.started_at = datetime.now()

        self.prompt_session = PromptSession(
            history=InMemoryHistory(),
            auto_suggest=AutoSuggestFromHistory(),
            completer=self._create_completer(),
            key_bindings=self._create_key_bindings(),
        )

    def _create_completer(self) -> WordCompleter:
        examples = [e for rule in INTENT_RULES for e in rule.examples]
        return WordCompleter(LOCAL_COMMANDS + examples, ignore_case=True)

    def _create_key_bindings(self) -> KeyBindings:
        kb = KeyBindings()

        @kb.add('c-d')
        def _(event):
            """Handle Ctrl+D to exit"""
            event.app.exit(exception=EOFError)

        return kb

    async def start(self) -> None:
        """Run the read-eval loop until exit/EOF."""

        self.console.print(create_welcome_panel(self.app_name, self.assistant.session_id))
        self.display.show_reply(self.assistant.messages[0].content)

        try:
            # Settlement notifications print while the prompt is waiting
            with patch_stdout():
                while True:
                    try:
                        user_input = await self._get_user_input()

                        if not user_input:
                            continue

                        if await self._handle_local_command(user_input):
                            continue

                        await self._process_message(user_input)

                    except KeyboardInterrupt:
                        self.console.print("\n[yellow]👋 Use 'exit' or 'quit' to end the session[/yellow]")
                    except EOFError:
                        break
                    except Exception as e:
                        self.console.print(f"[red]❌ Error: {e}[/red]")
                        if self.debug:
                            logger.exception("Unhandled error in chat loop")
        finally:
            self.assistant.close()
            self._show_goodbye_message()

    async def _get_user_input(self) -> str:
        prompt_text = f"[{datetime.now().strftime('%H:%M')}] You: "
        user_input = await self.prompt_session.prompt_async(prompt_text, style=PROMPT_STYLE)
        return user_input.strip()

    async def _handle_local_command(self, user_input: str) -> bool:
        """Handle client-side commands - returns True if the line was consumed"""

        command = parse_local_command(user_input)

        if command is None:
            return False
        if command == 'exit':
            raise EOFError
        elif command == 'intents':
            self.display.show_intents(INTENT_RULES)
        elif command == 'history':
            self.display.show_history(self.assistant.recent_commands(), len(self.assistant.history))
        elif command == 'payment':
            self.display.show_payment(self.assistant.active_payment)
        elif command == 'clear':
            self.console.clear()
        elif command in ('voice on', 'voice off'):
            self.assistant.voice_enabled = command == 'voice on'
            state = "on" if self.assistant.voice_enabled else "off"
            self.console.print(f"[blue]Voice output {state}[/blue]")
        elif command == 'listen':
            utterance = self.assistant.simulate_listening(random.Random())
            self.console.print(f"[cyan]🎙 识别结果:[/cyan] \"{utterance}\"")
            await self._process_message(utterance)

        return True

    async def _process_message(self, user_input: str) -> None:
        with self.console.status("[bold green]处理中...", spinner="dots"):
            command = await self.assistant.submit_text(user_input)

        if command is None:
            return

        self.display.show_reply(command.response or "", command.action)

        active = self.assistant.active_payment
        if active is not None and command.intent_id in ("collect", "qrcode"):
            self.display.show_payment(active)

        if self.assistant.pending_action:
            self.console.print(f"[dim]等待补充: {self.assistant.pending_action}[/dim]")

        self.console.print()

    def _show_goodbye_message(self) -> None:
        duration = str(datetime.now() - self.started_at).split('.')[0]
        self.console.print(
            f"\n[bold green]Session ended[/bold green] · {len(self.assistant.history)} commands · {duration}"
        )
