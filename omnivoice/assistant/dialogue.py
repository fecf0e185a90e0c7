from __future__ import annotations

import logging
from typing import Optional

from .models import AwaitingSlot


logger = logging.getLogger(__name__)


class DialogueStateTracker:
    """Holds at most one outstanding follow-up expectation.

    A new follow-up silently replaces the previous one. The intent matcher
    never looks here; only the no-match path consumes the slot.
    """

    def __init__(self) -> None:
        self._slot: Optional[AwaitingSlot] = None

    @property
    def current(self) -> Optional[AwaitingSlot]:
        return self._slot

    @property
    def pending_action(self) -> Optional[str]:
        return self._slot.action if self._slot else None

    def await_slot(self, slot: AwaitingSlot) -> None:
        if self._slot is not None:
            logger.debug(f"Follow-up {self._slot.action}/{self._slot.slot} replaced by {slot.action}/{slot.slot}")
        self._slot = slot

    def consume(self) -> Optional[AwaitingSlot]:
        slot, self._slot = self._slot, None
        return slot

    def clear(self) -> None:
        self._slot = None
