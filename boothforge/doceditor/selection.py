from __future__ import annotations
import logging
from typing import Iterable, Iterator, List, Optional, TYPE_CHECKING
from blinker import Signal

if TYPE_CHECKING:
    from ..core.element import Element
    from ..core.layout import Layout


logger = logging.getLogger(__name__)


class Selection:
    """
    The set of selected element IDs plus the primary element.

    The primary is always a member of the set when the set is non-empty,
    and None when it is empty. Selection is session state only; it is
    never written to the undo history.
    """

    def __init__(self):
        self._ids: List[str] = []
        self.primary: Optional[str] = None
        self.changed = Signal()

    def __len__(self) -> int:
        return len(self._ids)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._ids))

    def __contains__(self, uid: object) -> bool:
        return uid in self._ids

    @property
    def ids(self) -> List[str]:
        return list(self._ids)

    def is_selected(self, uid: str) -> bool:
        return uid in self._ids

    @property
    def has_multiple(self) -> bool:
        return len(self._ids) > 1

    def select(
        self,
        uid: Optional[str],
        extend: bool = False,
        range_modifier: bool = False,
    ):
        """
        Selects a single element, replacing the selection.

        With both `extend` and `range_modifier` set and a primary already
        present, the element's membership is toggled instead: it is added
        and becomes the primary, or it is removed and, if it was the
        primary, the first remaining member takes over. Passing None
        clears the selection.
        """
        if uid is None:
            self.clear()
            return

        if extend and range_modifier and self.primary is not None:
            if uid in self._ids:
                self._ids.remove(uid)
                if self.primary == uid:
                    self.primary = self._ids[0] if self._ids else None
            else:
                self._ids.append(uid)
                self.primary = uid
        else:
            self._ids = [uid]
            self.primary = uid
        self.changed.send(self)

    def select_many(self, uids: Iterable[str]):
        """
        Replaces the selection with the given IDs. The first one becomes
        the primary.
        """
        ids: List[str] = []
        for uid in uids:
            if uid not in ids:
                ids.append(uid)
        if not ids:
            self.clear()
            return
        self._ids = ids
        self.primary = ids[0]
        self.changed.send(self)

    def select_all(self, layout: Layout):
        if not len(layout):
            return
        self.select_many(e.uid for e in layout)

    def clear(self):
        if not self._ids and self.primary is None:
            return
        self._ids = []
        self.primary = None
        self.changed.send(self)

    def discard(self, uid: str):
        """Drops one ID, e.g. after its element was deleted."""
        if uid not in self._ids:
            return
        self._ids.remove(uid)
        if self.primary == uid:
            self.primary = self._ids[0] if self._ids else None
        self.changed.send(self)

    def retain(self, layout: Layout):
        """
        Re-resolves the selection against a replacement layout. If the
        primary element no longer exists the selection is cleared;
        otherwise members that vanished are dropped.
        """
        if self.primary is None or layout.get(self.primary) is None:
            if self._ids:
                logger.debug("Selected element gone after replace; clearing")
            self.clear()
            return
        kept = [uid for uid in self._ids if layout.get(uid) is not None]
        if kept != self._ids:
            self._ids = kept
            self.changed.send(self)

    def elements_in(self, layout: Layout) -> List[Element]:
        """The selected elements in z-order, skipping stale IDs."""
        return [e for e in layout if e.uid in self._ids]
