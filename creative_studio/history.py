from __future__ import annotations

"""
Branching undo/redo store for the editable campaign configuration.

The store keeps an append-only list of snapshots plus a cursor. Undo and redo
only move the cursor; committing while the cursor is behind the last snapshot
drops the undone future before appending, so the redo branch is gone.
"""

import logging
from typing import Callable, Generic, List, Tuple, TypeVar, Union

T = TypeVar("T")

Update = Union[T, Callable[[T], T]]


class ConfigHistory(Generic[T]):
    """Snapshot log with a cursor. The cursor is always a valid index."""

    def __init__(self, initial: T) -> None:
        self._initial = initial
        self._snapshots: List[T] = [initial]
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._snapshots)

    @property
    def cursor(self) -> int:
        return self._cursor

    def snapshots(self) -> Tuple[T, ...]:
        return tuple(self._snapshots)

    def current(self) -> T:
        return self._snapshots[self._cursor]

    def can_undo(self) -> bool:
        return self._cursor > 0

    def can_redo(self) -> bool:
        return self._cursor < len(self._snapshots) - 1

    def commit(self, update: Update) -> T:
        """
        Record a new snapshot and make it current.

        ``update`` is either the next snapshot or a function receiving the
        current snapshot and returning the next one.
        """
        present = self.current()
        next_snapshot = update(present) if callable(update) else update

        dropped = len(self._snapshots) - (self._cursor + 1)
        if dropped:
            logging.debug("Discarding %d undone snapshot(s) before commit.", dropped)
            del self._snapshots[self._cursor + 1:]

        self._snapshots.append(next_snapshot)
        self._cursor = len(self._snapshots) - 1
        return next_snapshot

    def undo(self) -> T:
        if self.can_undo():
            self._cursor -= 1
        return self.current()

    def redo(self) -> T:
        if self.can_redo():
            self._cursor += 1
        return self.current()

    def clear(self) -> T:
        """Forget every edit and go back to the initial snapshot."""
        self._snapshots = [self._initial]
        self._cursor = 0
        return self._initial
