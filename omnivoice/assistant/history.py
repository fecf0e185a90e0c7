from __future__ import annotations

from typing import Dict, List, Optional

from omnivoice.utils.errors import CommandNotFoundError

from .models import Command, CommandStatus


DEFAULT_DISPLAY_LIMIT = 10


class CommandHistoryLog:
    """Append-only record of commands in creation order.

    Entries are mutated in place by id (status, response, intent) but never
    removed or reordered. Display truncation happens in `recent()` only.
    """

    def __init__(self) -> None:
        self._commands: List[Command] = []
        self._index: Dict[str, Command] = {}

    def append(self, command: Command) -> Command:
        if command.id in self._index:
            raise ValueError(f"Command {command.id} is already in the history log")
        self._commands.append(command)
        self._index[command.id] = command
        return command

    def get(self, command_id: str) -> Command:
        try:
            return self._index[command_id]
        except KeyError:
            raise CommandNotFoundError(f"Unknown command: {command_id}") from None

    def update(
        self,
        command_id: str,
        status: Optional[CommandStatus] = None,
        response: Optional[str] = None,
        intent_id: Optional[str] = None,
    ) -> Command:
        command = self.get(command_id)
        if status is not None:
            command.advance(status)
        if response is not None:
            command.response = response
        if intent_id is not None:
            command.intent_id = intent_id
        return command

    def all(self) -> List[Command]:
        return list(self._commands)

    def recent(self, limit: int = DEFAULT_DISPLAY_LIMIT) -> List[Command]:
        """Newest first, at most `limit` entries."""
        if limit <= 0:
            return []
        return list(reversed(self._commands[-limit:]))

    def by_status(self, status: CommandStatus) -> List[Command]:
        return [c for c in self._commands if c.status == status]

    def __len__(self) -> int:
        return len(self._commands)

    def __iter__(self):
        return iter(self._commands)
