"""File store port definition.

The remote store is reachable only through three operations: fetch the
path index, fetch records by id, and apply an ordered batch of changes.
Everything the overlay client knows about the remote flows through this
port.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Sequence

    from remfs.kernel.domain.changes import PendingChange
    from remfs.kernel.domain.index import IndexSnapshot
    from remfs.kernel.domain.record import Record


@runtime_checkable
class FileStore(Protocol):
    """Port for a UUID-addressed hierarchical file store."""

    async def afetch_index(self) -> IndexSnapshot:
        """Fetch the remote path index.

        Returns
        -------
        IndexSnapshot
            Raw path → id mapping, the acting principal if known, and any
            records the remote shipped along with the index.

        Raises
        ------
        RemoteUnavailableError
            On transport failure, timeout or non-success status.
        InvalidResponseError
            If the payload cannot be decoded.
        """
        ...

    async def afetch_records(self, record_ids: Sequence[str]) -> dict[str, Record]:
        """Fetch one or more records by id in a single request.

        Parameters
        ----------
        record_ids : Sequence[str]
            Ids to fetch.

        Returns
        -------
        dict[str, Record]
            Records keyed by id. Ids unknown to the remote are absent.
        """
        ...

    async def aapply_patches(self, changes: Sequence[PendingChange]) -> Any:
        """Apply an ordered batch of changes atomically.

        Parameters
        ----------
        changes : Sequence[PendingChange]
            Changes in the order the remote must apply them.

        Returns
        -------
        Any
            Opaque success payload.

        Raises
        ------
        RemoteUnavailableError
            If the batch was not applied. There is no partial success.
        """
        ...

    async def aclose(self) -> None:
        """Release any held resources."""
        ...


__all__ = ["FileStore"]
