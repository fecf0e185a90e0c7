from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from omnivoice.utils.errors import InvalidTransitionError


class CommandStatus(Enum):
    """Lifecycle of one resolved unit of user input."""

    PENDING = "pending"
    EXECUTING = "executing"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (CommandStatus.COMPLETED, CommandStatus.FAILED)


# Allowed forward moves; anything else would reopen or rewind a command
_COMMAND_TRANSITIONS = {
    CommandStatus.PENDING: {CommandStatus.EXECUTING, CommandStatus.COMPLETED, CommandStatus.FAILED},
    CommandStatus.EXECUTING: {CommandStatus.PENDING, CommandStatus.COMPLETED, CommandStatus.FAILED},
    CommandStatus.COMPLETED: set(),
    CommandStatus.FAILED: set(),
}


class PaymentStatus(Enum):
    """State of a simulated collectible payment."""

    WAITING = "waiting"
    PAID = "paid"
    EXPIRED = "expired"  # declared, no transition leads here yet


class MessageRole(Enum):
    USER = "user"
    ASSISTANT = "assistant"


def new_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def format_amount(amount: Optional[float]) -> str:
    """Render an amount without a trailing '.0' for whole numbers."""
    if amount is None:
        return "—"
    value = float(amount)
    if value.is_integer():
        return str(int(value))
    return str(value)


@dataclass
class ExtractedParameters:
    """Parameters extracted from user input."""

    amount: Optional[float] = None
    currency: Optional[str] = None
    method: Optional[str] = None
    recipient: Optional[str] = None
    coin: Optional[str] = None

    def merged_with(self, **overrides: Any) -> "ExtractedParameters":
        """Copy with the given non-None fields replaced."""
        data = self.to_dict()
        data.update({k: v for k, v in overrides.items() if v is not None})
        return ExtractedParameters(**data)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "amount": self.amount,
            "currency": self.currency,
            "method": self.method,
            "recipient": self.recipient,
            "coin": self.coin,
        }


@dataclass
class Command:
    """One resolved unit of user input, from intent match to final response."""

    raw_text: str
    id: str = field(default_factory=lambda: new_id("cmd"))
    intent_id: Optional[str] = None
    action: Optional[str] = None
    extracted_params: ExtractedParameters = field(default_factory=ExtractedParameters)
    status: CommandStatus = CommandStatus.PENDING
    response: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def advance(self, status: CommandStatus) -> None:
        """Move to `status`; terminal commands are never reopened.

        EXECUTING -> PENDING is allowed so a handler can park the command
        while it waits for a follow-up answer.
        """
        if status == self.status:
            return
        if status not in _COMMAND_TRANSITIONS[self.status]:
            raise InvalidTransitionError(
                f"Command {self.id} cannot move from {self.status.value} to {status.value}"
            )
        self.status = status


@dataclass
class HandlerResponse:
    """What an intent handler hands back to the executor."""

    text: str
    action: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    follow_up: Optional[str] = None
    # Slot the follow-up question is asking for (e.g. "amount")
    slot: Optional[str] = None
    status: CommandStatus = CommandStatus.COMPLETED

    @property
    def requires_input(self) -> bool:
        return self.follow_up is not None


@dataclass
class PaymentRequest:
    """Simulated outstanding collectible payment."""

    amount: float
    currency: str
    method: str
    id: str = field(default_factory=lambda: new_id("pay"))
    status: PaymentStatus = PaymentStatus.WAITING
    qr_payload: str = ""
    qr_code_url: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    paid_at: Optional[datetime] = None

    @property
    def display_amount(self) -> str:
        return f"{format_amount(self.amount)} {self.currency}"

    def mark_paid(self, when: Optional[datetime] = None) -> bool:
        """Settle the request. Returns False if it was not waiting."""
        if self.status != PaymentStatus.WAITING:
            return False
        self.status = PaymentStatus.PAID
        self.paid_at = when or datetime.now()
        return True


@dataclass(frozen=True)
class AwaitingSlot:
    """The single follow-up expectation the dialogue is holding."""

    intent_id: str
    action: str
    slot: str
    command_id: Optional[str] = None
    params: ExtractedParameters = field(default_factory=ExtractedParameters)


@dataclass
class ConversationMessage:
    role: MessageRole
    content: str
    id: str = field(default_factory=lambda: new_id("msg"))
    action: Optional[str] = None
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "role": self.role.value,
            "content": self.content,
            "action": self.action,
            "timestamp": self.timestamp.isoformat(),
        }
