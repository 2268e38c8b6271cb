"""Per-project IDE preference list: bounded, de-duplicated, MRU-first."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable, Iterator

MAX_PREFERENCES = 3


class PreferenceList:
    """Ordered set of IDE ids capped at ``maxlen`` entries.

    ``push`` moves an id to the front, evicting from the back once the cap
    is reached. Building from an iterable keeps its order (first item most
    preferred), so ``PreferenceList(["a", "b", "a", "c", "d"])`` holds
    ``["a", "b", "c"]``.
    """

    def __init__(self, ids: Iterable[str] = (), maxlen: int = MAX_PREFERENCES) -> None:
        self._items: deque[str] = deque(maxlen=maxlen)
        for ide_id in reversed(list(dict.fromkeys(ids))):
            self.push(ide_id)

    def push(self, ide_id: str) -> None:
        """Insert ``ide_id`` as the most preferred entry."""
        if ide_id in self._items:
            self._items.remove(ide_id)
        self._items.appendleft(ide_id)

    def discard(self, ide_id: str) -> None:
        """Remove ``ide_id`` if present."""
        if ide_id in self._items:
            self._items.remove(ide_id)

    def to_list(self) -> list[str]:
        return list(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, ide_id: object) -> bool:
        return ide_id in self._items
