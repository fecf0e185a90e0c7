"""Voice command resolution and simulated payment execution.

Modules:
- extractors.py: amount/currency/method/recipient/coin extraction
- intents.py: ordered intent rule table and first-match matcher
- handlers.py: one handler per intent
- executor.py: match -> extract -> handle -> record
- dialogue.py: single awaiting-slot follow-up tracker
- payments.py / scheduler.py: payment requests and cancellable settlement
- history.py: append-only command log
- session.py: façade wired to speech and notification sinks
"""

from .executor import CommandExecutor
from .session import AssistantSession
from .settings import AssistantSettings

__all__ = ["AssistantSession", "AssistantSettings", "CommandExecutor"]
