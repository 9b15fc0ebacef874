"""Result of the fetch-index remote operation."""

from __future__ import annotations

from dataclasses import dataclass, field

from remfs.kernel.domain.record import Record


@dataclass(slots=True)
class IndexSnapshot:
    """Remote path index as fetched once per client lifetime.

    Attributes
    ----------
    paths : dict[str, str]
        Raw (un-normalized) path to record id.
    principal : str | None
        Name of the acting principal, if the remote disclosed it.
    records : dict[str, Record]
        Full records shipped along with the index, keyed by id. Stores
        that only return ids leave this empty and the cache fills lazily.
    """

    paths: dict[str, str] = field(default_factory=dict)
    principal: str | None = None
    records: dict[str, Record] = field(default_factory=dict)


__all__ = ["IndexSnapshot"]
