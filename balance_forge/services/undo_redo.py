from __future__ import annotations

import logging

from .commands import Command

"""Undo/redo stacks for table commands.

Executing a new command after an undo discards the redo history (the timeline diverges).
"""

__all__ = [
    "UndoRedoService",
]

logger = logging.getLogger(__name__)


class UndoRedoService:
    def __init__(self) -> None:
        self._undo: list[Command] = []
        self._redo: list[Command] = []

    def execute_command(self, command: Command) -> None:
        command.execute()
        self._undo.append(command)
        self._redo.clear()
        logger.debug(f"executed: {command.description}")

    def undo(self) -> Command | None:
        """Undo the latest command. Returns it, or None when there is nothing to undo."""
        if not self._undo:
            return None
        command = self._undo.pop()
        command.undo()
        self._redo.append(command)
        logger.debug(f"undone: {command.description}")
        return command

    def redo(self) -> Command | None:
        if not self._redo:
            return None
        command = self._redo.pop()
        command.execute()
        self._undo.append(command)
        logger.debug(f"redone: {command.description}")
        return command

    def clear(self) -> None:
        self._undo.clear()
        self._redo.clear()

    def can_undo(self) -> bool:
        return bool(self._undo)

    def can_redo(self) -> bool:
        return bool(self._redo)

    @property
    def undo_description(self) -> str | None:
        return self._undo[-1].description if self._undo else None

    @property
    def redo_description(self) -> str | None:
        return self._redo[-1].description if self._redo else None
