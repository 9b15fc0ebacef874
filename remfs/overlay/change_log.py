"""Ordered log of changes not yet acknowledged by the remote."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from remfs.kernel.domain.changes import PendingChange


class ChangeLog:
    """Append-only sequence of pending changes.

    No deduplication or compaction: the remote replays entries in append
    order, so two patches to the same field are both kept and the later
    one wins remotely. The log itself is not locked; the overlay client
    guards it together with the index and the cache.
    """

    def __init__(self) -> None:
        self._changes: list[PendingChange] = []

    def append(self, change: PendingChange) -> None:
        self._changes.append(change)

    def extend(self, changes: Iterable[PendingChange]) -> None:
        self._changes.extend(changes)

    def drain(self) -> list[PendingChange]:
        """Return every pending change and leave the log empty."""
        changes, self._changes = self._changes, []
        return changes

    def restore(self, changes: list[PendingChange]) -> None:
        """Put drained changes back in front of anything appended since."""
        self._changes[:0] = changes

    def is_empty(self) -> bool:
        return not self._changes

    def snapshot(self) -> list[PendingChange]:
        return list(self._changes)

    def __len__(self) -> int:
        return len(self._changes)

    def __iter__(self) -> Iterator[PendingChange]:
        return iter(list(self._changes))


__all__ = ["ChangeLog"]
