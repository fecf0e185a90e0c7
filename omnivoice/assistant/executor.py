from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional, Sequence

from .dialogue import DialogueStateTracker
from .extractors import AMOUNT_PATTERN, extract_amount, extract_parameters, extract_recipient
from .handlers import HandlerContext
from .history import CommandHistoryLog
from .intents import INTENT_RULES, IntentRule, get_rule, match_intent
from .message_templates import (
    NOT_UNDERSTOOD_MESSAGE,
    amount_recorded,
    recipient_recorded,
    transfer_ask_recipient,
)
from .models import AwaitingSlot, Command, CommandStatus, HandlerResponse
from .payments import PaymentRegistry
from .settings import AssistantSettings


logger = logging.getLogger(__name__)

ResponseCallback = Callable[[str], None]
NotifyCallback = Callable[[str, str], None]


class CommandExecutor:
    """Resolve one utterance into a Command: match, extract, run handler, record.

    Owns the dialogue state and the payment registry. The history log is
    shared with the session that created the executor.
    """

    def __init__(
        self,
        settings: Optional[AssistantSettings] = None,
        history: Optional[CommandHistoryLog] = None,
        payments: Optional[PaymentRegistry] = None,
        rules: Sequence[IntentRule] = INTENT_RULES,
        on_response: Optional[ResponseCallback] = None,
        notify: Optional[NotifyCallback] = None,
    ) -> None:
        self.settings = settings or AssistantSettings()
        self.history = history if history is not None else CommandHistoryLog()
        self.payments = payments or PaymentRegistry(settlement_delay=self.settings.settlement_delay_seconds)
        self.rules = tuple(rules)
        self.dialogue = DialogueStateTracker()
        self.on_response = on_response
        self.notify = notify
        self._context = HandlerContext(settings=self.settings, payments=self.payments, rules=self.rules)

    async def execute(self, text: str) -> Command:
        command = self.history.append(Command(raw_text=text))
        logger.info(f"Command {command.id} created", extra={"command_id": command.id})

        rule = match_intent(text, self.rules)
        if rule is None:
            response = await self._handle_unmatched(command, text)
        else:
            response = await self._handle_matched(command, rule, text)

        self._finish(command, response)
        return command

    async def _simulate_latency(self) -> None:
        if self.settings.handler_latency_seconds > 0:
            await asyncio.sleep(self.settings.handler_latency_seconds)

    async def _handle_matched(self, command: Command, rule: IntentRule, text: str) -> HandlerResponse:
        command.intent_id = rule.id
        command.action = rule.action
        command.advance(CommandStatus.EXECUTING)
        command.extracted_params = extract_parameters(
            text, rule.params, local_currency=self.settings.local_currency
        )

        await self._simulate_latency()
        response = rule.handler(command.extracted_params, self._context)

        if response.requires_input:
            self.dialogue.await_slot(
                AwaitingSlot(
                    intent_id=rule.id,
                    action=response.action or rule.action,
                    slot=response.slot or "amount",
                    command_id=command.id,
                    params=command.extracted_params,
                )
            )
        return response

    async def _handle_unmatched(self, command: Command, text: str) -> HandlerResponse:
        """Generic path: an unmatched utterance can answer the outstanding follow-up."""
        slot = self.dialogue.current
        if slot is None:
            return HandlerResponse(text=NOT_UNDERSTOOD_MESSAGE)

        rule = get_rule(slot.intent_id, self.rules)
        if rule is None:
            self.dialogue.clear()
            return HandlerResponse(text=NOT_UNDERSTOOD_MESSAGE)

        if slot.slot == "recipient":
            recipient = self._recipient_answer(text)
            if recipient is None:
                # A number is not a name; ask again without touching the amount
                return HandlerResponse(
                    text=transfer_ask_recipient(slot.params.amount),
                    action=slot.action,
                )
            params = slot.params.merged_with(recipient=recipient)
            prefix = recipient_recorded(recipient)
        else:
            amount = extract_amount(text)
            if amount is None:
                return HandlerResponse(text=NOT_UNDERSTOOD_MESSAGE)
            params = slot.params.merged_with(amount=amount)
            prefix = amount_recorded(amount)

        self.dialogue.consume()
        command.intent_id = rule.id
        command.action = slot.action
        command.extracted_params = params
        command.advance(CommandStatus.EXECUTING)

        await self._simulate_latency()
        resumed = rule.handler(params, self._context)

        if resumed.requires_input:
            # Still missing something (e.g. transfer recipient): keep asking
            self.dialogue.await_slot(
                AwaitingSlot(
                    intent_id=rule.id,
                    action=resumed.action or rule.action,
                    slot=resumed.slot or "amount",
                    command_id=command.id,
                    params=params,
                )
            )
        self._close_origin(slot)

        return HandlerResponse(
            text=f"{prefix}{resumed.text}",
            action=resumed.action or slot.action,
            data=resumed.data,
            follow_up=resumed.follow_up,
            slot=resumed.slot,
            status=resumed.status,
        )

    @staticmethod
    def _recipient_answer(text: str) -> Optional[str]:
        """Name given in reply to "转账给谁", or None for a bare number."""
        name = extract_recipient(text)
        if not name:
            tokens = text.strip().split()
            name = tokens[0] if tokens else ""
        if not name or AMOUNT_PATTERN.fullmatch(name):
            return None
        return name

    def _close_origin(self, slot: AwaitingSlot) -> None:
        """Complete the command that asked the follow-up question."""
        if slot.command_id is None:
            return
        origin = self.history.get(slot.command_id)
        if origin.status.is_terminal:
            return
        self.history.update(origin.id, status=CommandStatus.COMPLETED)
        logger.info(
            f"Command {origin.id} completed by follow-up answer",
            extra={"command_id": origin.id},
        )

    def _finish(self, command: Command, response: HandlerResponse) -> None:
        self.history.update(command.id, status=response.status, response=response.text)
        if response.action and command.action is None:
            command.action = response.action
        logger.info(
            f"Command {command.id} -> {command.status.value} (intent={command.intent_id})",
            extra={"command_id": command.id, "intent_id": command.intent_id},
        )

        if self.on_response is not None:
            self.on_response(response.text)

        if self.notify is not None:
            if command.intent_id is None:
                self.notify("error", response.text)
            elif command.status == CommandStatus.COMPLETED:
                self.notify("success", response.text)
