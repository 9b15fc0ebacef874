"""In-memory FileStore implementation for testing and offline use."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from remfs.kernel.domain.changes import AddChange, DeleteChange, FieldPatch
from remfs.kernel.domain.index import IndexSnapshot
from remfs.kernel.domain.record import RecordField
from remfs.kernel.exceptions import RemoteUnavailableError

if TYPE_CHECKING:
    from collections.abc import Iterable, Sequence

    from remfs.kernel.domain.changes import PendingChange
    from remfs.kernel.domain.record import Record


@dataclass
class _FailurePlan:
    remaining: int = 0
    status_code: int | None = 503

    def take(self) -> bool:
        if self.remaining > 0:
            self.remaining -= 1
            return True
        return False


@dataclass
class StoreCalls:
    """Calls received by :class:`InMemoryFileStore`, for test assertions."""

    index: int = 0
    fetches: list[list[str]] = field(default_factory=list)
    batches: list[list[PendingChange]] = field(default_factory=list)


class InMemoryFileStore:
    """FileStore that keeps records in a dict and applies batches atomically.

    Batches are replayed in order against a copy of the state; the copy
    replaces the state only if every change applied. A field patch or
    delete addressing an unknown id fails the whole batch, as does an add
    reusing a known id.

    Parameters
    ----------
    records : Iterable[Record] | None
        Initial remote records.
    principal : str | None
        Principal reported by :meth:`afetch_index`.
    ship_records : bool
        If True, the index snapshot carries full records (as the REST index
        does); otherwise the client has to fetch them by id.
    delay : float
        Seconds every call sleeps before answering.

    Examples
    --------
    Basic usage::

        store = InMemoryFileStore([record], principal="alice")
        store.fail_next_applies(1)
        with pytest.raises(RemoteUnavailableError):
            await client.acommit()
    """

    def __init__(
        self,
        records: Iterable[Record] | None = None,
        principal: str | None = None,
        ship_records: bool = False,
        delay: float = 0.0,
    ) -> None:
        self.records: dict[str, Record] = {r.id: r.copy() for r in records or ()}
        self.principal = principal
        self.ship_records = ship_records
        self.delay = delay
        self.calls = StoreCalls()
        self.closed = False
        self._index_failures = _FailurePlan()
        self._fetch_failures = _FailurePlan()
        self._apply_failures = _FailurePlan()

    # ------------------------------------------------------------------
    # Failure injection
    # ------------------------------------------------------------------

    def fail_next_index(self, times: int = 1, status_code: int | None = 503) -> None:
        self._index_failures = _FailurePlan(times, status_code)

    def fail_next_fetches(self, times: int = 1, status_code: int | None = 503) -> None:
        self._fetch_failures = _FailurePlan(times, status_code)

    def fail_next_applies(self, times: int = 1, status_code: int | None = 503) -> None:
        self._apply_failures = _FailurePlan(times, status_code)

    # ------------------------------------------------------------------
    # FileStore
    # ------------------------------------------------------------------

    async def _await_turn(self, operation: str, plan: _FailurePlan) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if plan.take():
            raise RemoteUnavailableError(operation, "injected failure", plan.status_code)

    async def afetch_index(self) -> IndexSnapshot:
        self.calls.index += 1
        await self._await_turn("fetch_index", self._index_failures)
        snapshot = IndexSnapshot(principal=self.principal)
        for record in self.records.values():
            snapshot.paths[record.path] = record.id
            if self.ship_records:
                snapshot.records[record.id] = record.copy()
        return snapshot

    async def afetch_records(self, record_ids: Sequence[str]) -> dict[str, Record]:
        self.calls.fetches.append(list(record_ids))
        await self._await_turn("fetch_records", self._fetch_failures)
        return {rid: self.records[rid].copy() for rid in record_ids if rid in self.records}

    async def aapply_patches(self, changes: Sequence[PendingChange]) -> Any:
        self.calls.batches.append(list(changes))
        await self._await_turn("apply_patches", self._apply_failures)

        staged = {rid: record.copy() for rid, record in self.records.items()}
        for position, change in enumerate(changes):
            self._apply_one(staged, position, change)
        self.records = staged
        return {"applied": len(changes)}

    def _apply_one(self, staged: dict[str, Record], position: int, change: PendingChange) -> None:
        def reject(reason: str) -> RemoteUnavailableError:
            return RemoteUnavailableError("apply_patches", f"change {position}: {reason}", 400)

        match change:
            case AddChange(record=record):
                if record.id in staged:
                    raise reject(f"id {record.id!r} already exists")
                staged[record.id] = record.copy()
            case FieldPatch(record_id=rid, field=record_field, value=value):
                if rid not in staged:
                    raise reject(f"unknown id {rid!r}")
                if record_field is RecordField.ID:
                    raise reject("id is immutable")
                setattr(staged[rid], record_field.name.lower(), value)
            case DeleteChange(record_id=rid):
                if rid not in staged:
                    raise reject(f"unknown id {rid!r}")
                del staged[rid]

    async def aclose(self) -> None:
        self.closed = True


__all__ = ["InMemoryFileStore", "StoreCalls"]
