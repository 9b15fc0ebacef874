"""Stateful overlay client over a remote file store.

The client mirrors the remote path index, caches records lazily and
buffers every mutation in a pending change log that :meth:`OverlayClient.acommit`
sends as one batch. Reads see local mutations immediately; the remote sees
them only after a successful commit.

All shared state (index, cache, log) is guarded by a single
:class:`asyncio.Lock` that is never held across a remote call.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING, Any, Self

from remfs.kernel.domain.changes import AddChange, DeleteChange, FieldPatch
from remfs.kernel.domain.record import (
    FOLDER_TYPE,
    RecordField,
    content_size,
    new_file_record,
    new_folder_record,
)
from remfs.kernel.exceptions import (
    AlreadyExistsError,
    InvalidTypeError,
    NotFoundError,
    RemFSError,
    TypeConflictError,
    ValidationError,
)
from remfs.kernel.logging import get_logger
from remfs.kernel.utils.identifiers import new_id
from remfs.kernel.utils.paths import (
    ROOT,
    ancestors,
    clean_path,
    is_under,
    join_location,
    normalize_path,
    split_name,
    split_path,
)
from remfs.overlay.change_log import ChangeLog
from remfs.overlay.path_index import PathIndex
from remfs.overlay.record_cache import RecordCache

if TYPE_CHECKING:
    from collections.abc import Callable
    from types import TracebackType

    from remfs.kernel.domain.changes import PendingChange
    from remfs.kernel.domain.record import Record
    from remfs.kernel.ports.file_store import FileStore

logger = get_logger(__name__)


def _epoch_millis() -> int:
    return time.time_ns() // 1_000_000


class OverlayClient:
    """Path-addressed file operations with deferred commit.

    Parameters
    ----------
    store : FileStore
        Remote store the client reads from and commits to.
    clock : Callable[[], int] | None
        Returns the current time in epoch milliseconds; defaults to the
        wall clock.
    id_factory : Callable[[str | None], str]
        Draws a new record id for the acting principal.

    Examples
    --------
    Example usage::

        async with OverlayClient(RestFileStore.from_config(config.client)) as fs:
            await fs.acreate("/notes/today.md", "# Today")
            await fs.awrite("/notes/today.md", "# Today\\n- ship it")
            await fs.acommit()
    """

    def __init__(
        self,
        store: FileStore,
        clock: Callable[[], int] | None = None,
        id_factory: Callable[[str | None], str] = new_id,
    ) -> None:
        self._store = store
        self._clock = clock or _epoch_millis
        self._id_factory = id_factory
        self._lock = asyncio.Lock()
        self._commit_lock = asyncio.Lock()
        self._cache = RecordCache(store, self._lock)
        self._index = PathIndex(store, self._lock, on_load=self._cache.seed)
        self._log = ChangeLog()

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def principal(self) -> str | None:
        """Acting principal, known once the index is loaded."""
        return self._index.principal

    @property
    def pending_changes(self) -> list[PendingChange]:
        """Copy of the pending change log, oldest first."""
        return self._log.snapshot()

    @property
    def pending_count(self) -> int:
        return len(self._log)

    # ------------------------------------------------------------------
    # Helpers (callers hold the lock)
    # ------------------------------------------------------------------

    def _require(self, path: str) -> str:
        record_id = self._index.lookup(path)
        if record_id is None:
            raise NotFoundError("path", clean_path(path))
        return record_id

    def _uncached(self, paths: list[str]) -> list[str]:
        """Ids mapped at ``paths`` whose records are not cached yet."""
        missing = []
        for path in paths:
            record_id = self._index.lookup(path)
            if record_id is not None and record_id not in self._cache:
                missing.append(record_id)
        return missing

    def _fresh_id(self, taken: set[str]) -> str:
        while True:
            record_id = self._id_factory(self._index.principal)
            if (
                record_id not in taken
                and not self._cache.knows(record_id)
                and not self._index.contains_id(record_id)
            ):
                return record_id

    def _stage_ancestors(self, chain: list[str], now: int, taken: set[str]) -> list[Record]:
        """Validate ancestors and build folder records for the missing ones.

        Nothing is mutated here, so a TypeConflictError leaves state intact.
        """
        staged: list[Record] = []
        for ancestor in chain:
            record_id = self._index.lookup(ancestor)
            if record_id is not None:
                existing = self._cache.peek(record_id)
                if existing is not None and not existing.is_folder:
                    raise TypeConflictError(ancestor, "folder", "file")
                continue
            directory, base = split_path(ancestor)
            record_id = self._fresh_id(taken)
            taken.add(record_id)
            staged.append(
                new_folder_record(
                    record_id, base, join_location(self._index.principal, directory), now
                )
            )
        return staged

    def _apply_add(self, record: Record) -> None:
        self._index.insert(record.path, record.id)
        self._log.append(AddChange(record.copy()))
        self._cache.put(record)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def aread(self, path: str) -> Record:
        """Return a copy of the record at ``path``.

        Raises
        ------
        NotFoundError
            If the path is not in the index or its id is unknown remotely.
        RemoteUnavailableError
            If the index or the record could not be fetched.
        """
        await self._index.aload()
        while True:
            async with self._lock:
                record_id = self._require(path)
                record = self._cache.get(record_id)
                if record is not None:
                    return record
            await self._cache.aensure(record_id)

    async def aread_content(self, path: str) -> str:
        """Return the string content of the file at ``path``.

        Raises
        ------
        InvalidTypeError
            If the record is a folder or its data is not a string.
        """
        record = await self.aread(path)
        if record.is_folder:
            raise InvalidTypeError("type", "a file type", record.type)
        if not isinstance(record.data, str):
            raise InvalidTypeError("data", "str", record.data)
        return record.data

    async def astat_by_id(self, record_id: str) -> Record:
        """Return a copy of the record with ``record_id``, fetching it if needed."""
        await self._index.aload()
        while True:
            async with self._lock:
                record = self._cache.get(record_id)
                if record is not None:
                    return record
            await self._cache.aensure(record_id)

    async def aexists(self, path: str) -> bool:
        await self._index.aload()
        async with self._lock:
            return self._index.lookup(path) is not None

    async def alist_paths(self) -> list[str]:
        """Every index key, sorted."""
        await self._index.aload()
        async with self._lock:
            return sorted(self._index.keys())

    async def alist_children(self, path: str = ROOT) -> set[str]:
        """Names of the direct children below ``path``.

        Computed from index keys only, so implicit directories (a key
        ``/a/b/c.txt`` without a ``/a/b`` entry) are listed too. Names are
        normalized (lower-case). Returns an empty set when the index cannot
        be loaded.
        """
        try:
            await self._index.aload()
        except RemFSError as e:
            logger.warning("Cannot list children of {path}: {error}", path=path, error=e)
            return set()

        prefix = normalize_path(path)
        async with self._lock:
            keys = self._index.keys()

        children: set[str] = set()
        for key in keys:
            if is_under(key, prefix):
                rest = key[len(prefix) :].lstrip("/")
                children.add(rest.split("/", 1)[0])
        return children

    async def aprefetch(self, path: str = ROOT) -> int:
        """Fetch every uncached record at or below ``path`` in one request.

        Returns
        -------
        int
            Number of records requested from the remote.
        """
        await self._index.aload()
        prefix = normalize_path(path)
        async with self._lock:
            keys = [k for k in self._index.keys() if k == prefix or is_under(k, prefix)]
            missing = list(dict.fromkeys(self._uncached(keys)))
        if missing:
            logger.debug("Prefetching {count} record(s) under {path}", count=len(missing), path=prefix)
            await self._cache.aensure_many(missing)
        return len(missing)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    async def awrite(self, path: str, content: str) -> None:
        """Replace the content of an existing file.

        Raises
        ------
        NotFoundError
            If no record is mapped at ``path``; write never creates.
        TypeConflictError
            If the record is a folder.
        """
        if not isinstance(content, str):
            raise ValidationError("content", "must be a string", content)
        await self._index.aload()
        while True:
            async with self._lock:
                record_id = self._require(path)
                current = self._cache.peek(record_id)
                if current is not None:
                    if current.is_folder:
                        raise TypeConflictError(clean_path(path), "file", "folder")
                    now = self._clock()
                    size = content_size(content)
                    updated = current.copy()
                    updated.data = content
                    updated.edited = now
                    updated.size = size
                    self._cache.put(updated)
                    self._log.extend(
                        [
                            FieldPatch(record_id, RecordField.DATA, content),
                            FieldPatch(record_id, RecordField.EDITED, now),
                            FieldPatch(record_id, RecordField.SIZE, size),
                        ]
                    )
                    logger.debug("Wrote {size} byte(s) to {path}", size=size, path=path)
                    return
            await self._cache.aensure(record_id)

    async def acreate(self, path: str, content: str = "") -> str:
        """Create a file, creating missing ancestor folders first.

        Returns
        -------
        str
            Id of the new record.

        Raises
        ------
        AlreadyExistsError
            If ``path`` is already mapped.
        TypeConflictError
            If an ancestor is a file.
        """
        if not isinstance(content, str):
            raise ValidationError("content", "must be a string", content)
        cleaned = clean_path(path)
        directory, base = split_path(cleaned)
        if not base:
            raise ValidationError("path", "must name a file", path)
        name, type_ = split_name(base)
        if type_.lower() == FOLDER_TYPE:
            raise ValidationError("path", f"files cannot use the {FOLDER_TYPE} extension", path)
        chain = ancestors(cleaned)

        await self._index.aload()
        while True:
            async with self._lock:
                missing = self._uncached(chain)
                if not missing:
                    if self._index.lookup(cleaned) is not None:
                        raise AlreadyExistsError(cleaned)
                    now = self._clock()
                    taken: set[str] = set()
                    staged = self._stage_ancestors(chain, now, taken)
                    record = new_file_record(
                        self._fresh_id(taken),
                        name,
                        type_,
                        join_location(self._index.principal, directory),
                        content,
                        now,
                    )
                    for folder in staged:
                        self._apply_add(folder)
                    self._apply_add(record)
                    logger.debug(
                        "Created {path} with {count} new folder(s)", path=cleaned, count=len(staged)
                    )
                    return record.id
            await self._cache.aensure_many(missing)

    async def acreate_folder(self, path: str) -> str:
        """Create a folder and its missing ancestors.

        Returns the existing id when ``path`` is already a folder.

        Raises
        ------
        TypeConflictError
            If ``path`` or one of its ancestors is a file.
        """
        cleaned = clean_path(path)
        if cleaned == ROOT:
            raise ValidationError("path", "the root folder always exists", path)
        chain = [*ancestors(cleaned), cleaned]

        await self._index.aload()
        while True:
            async with self._lock:
                missing = self._uncached(chain)
                if not missing:
                    existing_id = self._index.lookup(cleaned)
                    if existing_id is not None:
                        existing = self._cache.peek(existing_id)
                        if existing is not None and not existing.is_folder:
                            raise TypeConflictError(cleaned, "folder", "file")
                        return existing_id
                    now = self._clock()
                    staged = self._stage_ancestors(chain, now, set())
                    for folder in staged:
                        self._apply_add(folder)
                    logger.debug("Created folder {path}", path=cleaned)
                    return staged[-1].id
            await self._cache.aensure_many(missing)

    async def aremove(self, path: str) -> None:
        """Remove the record at ``path``; children are left in place.

        Raises
        ------
        NotFoundError
            If nothing is mapped at ``path``.
        """
        await self._index.aload()
        async with self._lock:
            record_id = self._require(path)
            self._index.remove(path)
            self._cache.discard(record_id)
            self._log.append(DeleteChange(record_id))
        logger.debug("Removed {path}", path=path)

    async def arename(self, old_path: str, new_path: str) -> None:
        """Move a record to ``new_path``.

        Whatever was mapped at ``new_path`` is replaced in the index but
        stays cached. Index keys below a renamed folder are left as they were.

        Raises
        ------
        NotFoundError
            If nothing is mapped at ``old_path``.
        """
        cleaned = clean_path(new_path)
        directory, base = split_path(cleaned)
        if not base:
            raise ValidationError("new_path", "must name a file or folder", new_path)

        await self._index.aload()
        while True:
            async with self._lock:
                record_id = self._require(old_path)
                current = self._cache.peek(record_id)
                if current is not None:
                    if current.is_folder:
                        name, type_ = base, FOLDER_TYPE
                    else:
                        name, type_ = split_name(base)
                        if type_.lower() == FOLDER_TYPE:
                            raise ValidationError(
                                "new_path", f"files cannot use the {FOLDER_TYPE} extension", new_path
                            )
                    location = join_location(self._index.principal, directory)
                    now = self._clock()
                    updated = current.copy()
                    updated.type = type_
                    updated.name = name
                    updated.location = location
                    updated.edited = now
                    self._cache.put(updated)
                    self._index.rekey(old_path, cleaned)
                    self._log.extend(
                        [
                            FieldPatch(record_id, RecordField.TYPE, type_),
                            FieldPatch(record_id, RecordField.NAME, name),
                            FieldPatch(record_id, RecordField.LOCATION, location),
                            FieldPatch(record_id, RecordField.EDITED, now),
                        ]
                    )
                    logger.debug("Renamed {old} to {new}", old=old_path, new=cleaned)
                    return
            await self._cache.aensure(record_id)

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------

    async def acommit(self) -> Any:
        """Send every pending change to the remote as one batch.

        Returns the remote's payload, or None when nothing was pending (no
        request is made). On failure the drained changes go back in front of
        any change appended while the batch was in flight, and the error is
        re-raised.
        """
        async with self._commit_lock:
            async with self._lock:
                if self._log.is_empty():
                    return None
                changes = self._log.drain()

            logger.info("Committing {count} change(s)", count=len(changes))
            try:
                payload = await self._store.aapply_patches(changes)
            except BaseException as e:
                # no await before restore: nobody can observe the log without them
                self._log.restore(changes)
                logger.warning(
                    "Commit of {count} change(s) failed: {error}", count=len(changes), error=e
                )
                raise
            logger.info("Committed {count} change(s)", count=len(changes))
            return payload

    async def ainvalidate(self) -> None:
        """Drop the loaded index and every cached record.

        Waits for an in-flight commit to settle first, so a failed commit's
        changes are back in the log before the check.

        Raises
        ------
        ValidationError
            If changes are pending; commit them first.
        """
        async with self._commit_lock, self._lock:
            if not self._log.is_empty():
                raise ValidationError(
                    "pending_changes", "commit before invalidating", len(self._log)
                )
            self._index.invalidate()
            self._cache.clear()
        logger.debug("Invalidated index and cache")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def aclose(self) -> None:
        """Close the underlying store. Pending changes are not committed."""
        if not self._log.is_empty():
            logger.warning(
                "Closing with {count} uncommitted change(s)", count=len(self._log)
            )
        await self._store.aclose()

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()


__all__ = ["OverlayClient"]
