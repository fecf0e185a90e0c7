from __future__ import annotations

import logging
import random
import uuid
from datetime import datetime
from typing import Callable, List, Optional

from .executor import CommandExecutor
from .history import CommandHistoryLog
from .message_templates import DEMO_UTTERANCES, WELCOME_MESSAGE
from .models import Command, ConversationMessage, MessageRole, PaymentRequest
from .payments import PaymentRegistry
from .settings import AssistantSettings


logger = logging.getLogger(__name__)

SpeechSink = Callable[[str], None]
NotificationSink = Callable[[str, str], None]


class AssistantSession:
    """Session-lifetime façade wired to the speech and notification collaborators.

    Typed text and final speech transcripts both enter through
    `submit_text`. Every reply goes to `on_response` (the visual channel)
    and, when voice is enabled, to `speak`. Toasts go to `notify` as
    (level, message) pairs.
    """

    def __init__(
        self,
        settings: Optional[AssistantSettings] = None,
        on_response: Optional[SpeechSink] = None,
        speak: Optional[SpeechSink] = None,
        notify: Optional[NotificationSink] = None,
        session_id: Optional[str] = None,
    ) -> None:
        self.session_id = session_id or str(uuid.uuid4())
        self.settings = settings or AssistantSettings()
        self.voice_enabled = self.settings.voice_enabled
        self.started_at = datetime.now()
        self._on_response = on_response
        self._speak = speak
        self._notify = notify

        self.history = CommandHistoryLog()
        self.payments = PaymentRegistry(
            settlement_delay=self.settings.settlement_delay_seconds,
            on_settled=self._payment_settled,
        )
        self.executor = CommandExecutor(
            settings=self.settings,
            history=self.history,
            payments=self.payments,
            on_response=self.emit_response,
            notify=self._emit_notification,
        )
        self.messages: List[ConversationMessage] = [
            ConversationMessage(role=MessageRole.ASSISTANT, content=WELCOME_MESSAGE)
        ]

    # ---- input ----
    async def submit_text(self, text: str) -> Optional[Command]:
        """Run one utterance through the executor. Blank input is ignored."""
        if not text or not text.strip():
            return None
        text = text.strip()
        self.messages.append(ConversationMessage(role=MessageRole.USER, content=text))
        command = await self.executor.execute(text)
        self.messages.append(
            ConversationMessage(
                role=MessageRole.ASSISTANT,
                content=command.response or "",
                action=command.action,
            )
        )
        return command

    async def submit_transcript(self, text: str, is_final: bool = True) -> Optional[Command]:
        """Speech recognizer entry point; interim results are dropped."""
        if not is_final:
            return None
        return await self.submit_text(text)

    def simulate_listening(self, rng: Optional[random.Random] = None) -> str:
        """Pick a canned utterance, standing in for a recognizer result."""
        return (rng or random).choice(DEMO_UTTERANCES)

    # ---- output ----
    def emit_response(self, text: str) -> None:
        if self._on_response is not None:
            self._on_response(text)
        if self.voice_enabled and self._speak is not None:
            self._speak(text)

    def _emit_notification(self, level: str, message: str) -> None:
        if self._notify is not None:
            self._notify(level, message)

    def _payment_settled(self, request: PaymentRequest, message: str) -> None:
        self._emit_notification("success", message)
        if self.voice_enabled and self._speak is not None:
            self._speak(message)

    # ---- views ----
    @property
    def active_payment(self) -> Optional[PaymentRequest]:
        return self.payments.active

    @property
    def pending_action(self) -> Optional[str]:
        return self.executor.dialogue.pending_action

    def recent_commands(self, limit: Optional[int] = None) -> List[Command]:
        return self.history.recent(limit or self.settings.history_display_limit)

    def close(self) -> int:
        """Cancel outstanding settlement tasks; returns how many were cancelled."""
        cancelled = self.payments.shutdown()
        if cancelled:
            logger.info(f"Session {self.session_id} closed with {cancelled} settlement(s) cancelled")
        return cancelled
