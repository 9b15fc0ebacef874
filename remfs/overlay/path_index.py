"""Local mirror of the remote path → id index.

Keys are normalized paths (see :func:`~remfs.kernel.utils.paths.normalize_path`).
The index is fetched once per client lifetime; concurrent first callers
share one fetch.
"""

from __future__ import annotations

import asyncio
from collections import Counter
from typing import TYPE_CHECKING

from remfs.kernel.logging import get_logger
from remfs.kernel.utils.paths import normalize_path

if TYPE_CHECKING:
    from collections.abc import Callable

    from remfs.kernel.domain.index import IndexSnapshot
    from remfs.kernel.ports.file_store import FileStore

logger = get_logger(__name__)


class PathIndex:
    """Normalized path → record id mapping with a load-once fetch.

    Parameters
    ----------
    store : FileStore
        Source of the index snapshot.
    lock : asyncio.Lock
        Lock shared with the rest of the client state. Every method except
        :meth:`aload` expects the caller to hold it.
    on_load : Callable[[IndexSnapshot], None] | None
        Called under the lock when a snapshot is committed, e.g. to seed
        the record cache with records shipped along with the index.
    """

    def __init__(
        self,
        store: FileStore,
        lock: asyncio.Lock,
        on_load: Callable[[IndexSnapshot], None] | None = None,
    ) -> None:
        self._store = store
        self._lock = lock
        self._on_load = on_load
        self._paths: dict[str, str] = {}
        self._ids: Counter[str] = Counter()
        self._principal: str | None = None
        self._loaded = False
        self._inflight: asyncio.Future[IndexSnapshot] | None = None

    @property
    def loaded(self) -> bool:
        return self._loaded

    @property
    def principal(self) -> str | None:
        return self._principal

    async def aload(self) -> None:
        """Fetch the index unless it is already loaded.

        The fetch runs outside the lock. The first caller starts it, every
        concurrent caller awaits the same fetch, and results are committed
        under the lock after re-checking the loaded flag. A failed fetch is
        raised to every waiter and leaves the index unloaded.
        """
        while True:
            async with self._lock:
                if self._loaded:
                    return
                if self._inflight is None:
                    logger.debug("Fetching remote index")
                    self._inflight = asyncio.ensure_future(self._store.afetch_index())
                inflight = self._inflight

            try:
                snapshot = await asyncio.shield(inflight)
            except Exception:
                async with self._lock:
                    if self._inflight is inflight:
                        self._inflight = None
                raise

            async with self._lock:
                if self._loaded:
                    return
                if self._inflight is not inflight:
                    # invalidated while fetching
                    continue
                self._inflight = None
                self._commit(snapshot)
                return

    def _commit(self, snapshot: IndexSnapshot) -> None:
        self._paths = {}
        self._ids = Counter()
        for raw_path, record_id in snapshot.paths.items():
            self._set(normalize_path(raw_path), record_id)
        self._principal = snapshot.principal
        self._loaded = True
        if self._on_load is not None:
            self._on_load(snapshot)
        logger.debug("Index loaded with {count} entries", count=len(self._paths))

    def _set(self, key: str, record_id: str) -> None:
        self._pop(key)
        self._paths[key] = record_id
        self._ids[record_id] += 1

    def _pop(self, key: str) -> str | None:
        record_id = self._paths.pop(key, None)
        if record_id is not None:
            self._ids[record_id] -= 1
            if not self._ids[record_id]:
                del self._ids[record_id]
        return record_id

    def invalidate(self) -> None:
        """Forget the loaded index; the next :meth:`aload` fetches again."""
        self._paths = {}
        self._ids = Counter()
        self._loaded = False
        self._inflight = None

    def lookup(self, path: str) -> str | None:
        return self._paths.get(normalize_path(path))

    def insert(self, path: str, record_id: str) -> None:
        self._set(normalize_path(path), record_id)

    def remove(self, path: str) -> str | None:
        return self._pop(normalize_path(path))

    def rekey(self, old_path: str, new_path: str) -> str | None:
        """Move the id at ``old_path`` to ``new_path``, replacing any id there."""
        record_id = self._pop(normalize_path(old_path))
        if record_id is not None:
            self._set(normalize_path(new_path), record_id)
        return record_id

    def contains_id(self, record_id: str) -> bool:
        return record_id in self._ids

    def keys(self) -> list[str]:
        return list(self._paths)

    def __contains__(self, path: str) -> bool:
        return normalize_path(path) in self._paths

    def __len__(self) -> int:
        return len(self._paths)


__all__ = ["PathIndex"]
