from __future__ import annotations
import json
import logging
from contextlib import contextmanager
from typing import Callable, Iterator, List, Optional, TYPE_CHECKING
from blinker import Signal
from ..core.element import MalformedDocument
from ..core.layout import Layout

if TYPE_CHECKING:
    from typing import Any, Dict


logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 50


class HistoryManager:
    """
    A linear undo/redo history of full-document snapshots.

    Each checkpoint stores the complete serialized layout, never a diff,
    and never any selection or gesture state. The history is bounded; when
    it overflows, the oldest snapshot is dropped and the cursor shifts
    with it so it keeps pointing at the same state.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity < 1:
            raise ValueError("History capacity must be at least 1.")
        self.capacity = capacity
        self.snapshots: List[str] = []
        self.index: int = -1
        self._replay_depth = 0

        # Fired whenever the history or its cursor changes.
        self.changed = Signal()

    def __len__(self) -> int:
        return len(self.snapshots)

    @property
    def can_undo(self) -> bool:
        return self.index > 0

    @property
    def can_redo(self) -> bool:
        return self.index < len(self.snapshots) - 1

    @property
    def is_replaying(self) -> bool:
        return self._replay_depth > 0

    @contextmanager
    def replaying(self) -> Iterator[None]:
        """
        Suppresses checkpoints for the duration of the block. Blocks may
        nest.
        """
        self._replay_depth += 1
        try:
            yield
        finally:
            self._replay_depth -= 1

    def reset(self):
        self.snapshots = []
        self.index = -1
        self.changed.send(self)

    def checkpoint(self, layout: Optional[Layout]) -> bool:
        """
        Captures the given layout as the newest history entry.

        Does nothing while an undo/redo is being applied, when there is no
        layout, or when the layout is identical to the snapshot under the
        cursor. Returns True if a snapshot was recorded.
        """
        if self.is_replaying:
            logger.debug("Checkpoint suppressed during undo/redo replay.")
            return False
        if layout is None:
            return False

        snapshot = json.dumps(layout.to_dict(), sort_keys=True)
        if 0 <= self.index < len(self.snapshots):
            if self.snapshots[self.index] == snapshot:
                return False

        # Recording after an undo discards the redo branch.
        del self.snapshots[self.index + 1:]
        self.snapshots.append(snapshot)
        self.index = len(self.snapshots) - 1

        if len(self.snapshots) > self.capacity:
            self.snapshots.pop(0)
            self.index -= 1

        self.changed.send(self)
        return True

    def snapshot_at(self, index: int) -> "Dict[str, Any]":
        try:
            return json.loads(self.snapshots[index])
        except ValueError as e:
            raise MalformedDocument(f"Corrupt history snapshot: {e}")

    def undo(self, apply: Callable[[Layout], None]) -> bool:
        """
        Moves the cursor back one step and hands the restored layout to
        `apply`. Returns False if there is nothing to undo.
        """
        if not self.can_undo:
            return False
        return self._step(self.index - 1, apply)

    def redo(self, apply: Callable[[Layout], None]) -> bool:
        """The mirror of undo()."""
        if not self.can_redo:
            return False
        return self._step(self.index + 1, apply)

    def _step(self, target: int, apply: Callable[[Layout], None]) -> bool:
        # Deserialize before moving the cursor: a corrupt snapshot must
        # leave both the cursor and the live document untouched.
        layout = Layout.from_dict(self.snapshot_at(target))
        with self.replaying():
            self.index = target
            apply(layout)
        logger.debug(
            f"History moved to {self.index + 1}/{len(self.snapshots)}"
        )
        self.changed.send(self)
        return True
