"""Lazily populated id → record cache."""

from __future__ import annotations

from typing import TYPE_CHECKING

from remfs.kernel.exceptions import NotFoundError
from remfs.kernel.logging import get_logger

if TYPE_CHECKING:
    import asyncio
    from collections.abc import Iterable

    from remfs.kernel.domain.index import IndexSnapshot
    from remfs.kernel.domain.record import Record
    from remfs.kernel.ports.file_store import FileStore

logger = get_logger(__name__)


class RecordCache:
    """Partial view of remote records, plus local mutations.

    An id missing from the cache is not necessarily missing remotely;
    :meth:`aensure` tells the two apart. Ids removed locally are
    tombstoned so that they are not fetched back while their delete is
    still pending.

    Parameters
    ----------
    store : FileStore
        Source of records on cache misses.
    lock : asyncio.Lock
        Lock shared with the rest of the client state. Every method except
        :meth:`aensure` and :meth:`aensure_many` expects the caller to hold
        it.
    """

    def __init__(self, store: FileStore, lock: asyncio.Lock) -> None:
        self._store = store
        self._lock = lock
        self._records: dict[str, Record] = {}
        self._tombstones: set[str] = set()

    async def aensure(self, record_id: str) -> None:
        """Make sure ``record_id`` is cached, fetching it if absent."""
        await self.aensure_many([record_id])

    async def aensure_many(self, record_ids: Iterable[str]) -> None:
        """Fetch every absent id in one request.

        The fetch runs outside the lock. When the results are merged, a copy
        put locally in the meantime is kept over the fetched one.

        Raises
        ------
        NotFoundError
            If an id is unknown to the remote or was removed locally.
        """
        async with self._lock:
            wanted = list(dict.fromkeys(record_ids))
            for record_id in wanted:
                if record_id in self._tombstones:
                    raise NotFoundError("id", record_id)
            missing = [rid for rid in wanted if rid not in self._records]
        if not missing:
            return

        logger.debug("Cache miss for {count} record(s)", count=len(missing))
        fetched = await self._store.afetch_records(missing)

        async with self._lock:
            unresolved: list[str] = []
            for record_id in missing:
                if record_id in self._records:
                    continue
                record = fetched.get(record_id)
                if record is None or record_id in self._tombstones:
                    unresolved.append(record_id)
                    continue
                self._records[record_id] = record
            if unresolved:
                raise NotFoundError("id", unresolved[0])

    def get(self, record_id: str) -> Record | None:
        """Return a copy of the cached record; mutating it does not touch the cache."""
        record = self._records.get(record_id)
        return record.copy() if record is not None else None

    def peek(self, record_id: str) -> Record | None:
        """Return the cached record itself, for read-only checks."""
        return self._records.get(record_id)

    def put(self, record: Record) -> None:
        """Replace the cached record; the cache takes ownership of ``record``."""
        self._tombstones.discard(record.id)
        self._records[record.id] = record

    def seed(self, snapshot: IndexSnapshot) -> None:
        """Cache records shipped with an index snapshot, keeping local copies."""
        for record_id, record in snapshot.records.items():
            if record_id not in self._tombstones:
                self._records.setdefault(record_id, record)

    def invalidate(self, record_id: str) -> None:
        """Drop the cached copy; the next :meth:`aensure` refetches it."""
        self._records.pop(record_id, None)

    def discard(self, record_id: str) -> None:
        """Drop the cached copy and refuse to fetch it again."""
        self._records.pop(record_id, None)
        self._tombstones.add(record_id)

    def knows(self, record_id: str) -> bool:
        return record_id in self._records or record_id in self._tombstones

    def clear(self) -> None:
        self._records.clear()
        self._tombstones.clear()

    def __contains__(self, record_id: str) -> bool:
        return record_id in self._records

    def __len__(self) -> int:
        return len(self._records)


__all__ = ["RecordCache"]
