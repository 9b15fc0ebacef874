"""Configuration file for pytest containing fixtures shared by the remfs tests.

This module provides fixtures that can be used across multiple test files:
- make_record: factory for remote-rooted file and folder records
- seeded_store: in-memory store with a small tree under principal "alice"
- client: overlay client over ``seeded_store`` with a fake clock and
  sequential ids
"""

from __future__ import annotations

import itertools
from collections.abc import Callable

import pytest

from remfs.kernel.domain.record import FOLDER_TYPE, Record, content_size
from remfs.kernel.utils.paths import join_location
from remfs.overlay.client import OverlayClient
from remfs.stdlib.adapters.mock import InMemoryFileStore

PRINCIPAL = "alice"


class FakeClock:
    """Monotonic millisecond clock that ticks by one on every call."""

    def __init__(self, start: int = 1_700_000_000_000) -> None:
        self.now = start

    def __call__(self) -> int:
        self.now += 1
        return self.now


def sequential_ids(prefix: str = "new") -> Callable[[str | None], str]:
    counter = itertools.count(1)
    return lambda principal: f"{prefix}-{next(counter)}"


def _make_record(
    record_id: str,
    directory: str,
    base: str,
    content: str | None = None,
    *,
    principal: str | None = PRINCIPAL,
) -> Record:
    """Build a file record (or a folder record when ``content`` is None)."""
    location = join_location(principal, directory)
    if content is None:
        return Record(
            id=record_id,
            type=FOLDER_TYPE,
            name=base,
            location=location,
            data=[],
            created=1,
            edited=1,
        )
    name, dot, ext = base.rpartition(".")
    if not dot or not name:
        name, ext = base, ""
    else:
        ext = "." + ext
    return Record(
        id=record_id,
        type=ext,
        name=name,
        location=location,
        data=content,
        created=1,
        edited=1,
        size=content_size(content),
        reserved={4: None, 5: "owner:alice", 6: None, 7: 0, 10: "rev-1", 12: None},
    )


@pytest.fixture
def make_record() -> Callable[..., Record]:
    """Fixture providing the record factory."""
    return _make_record


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def seeded_store() -> InMemoryFileStore:
    """Store holding /Docs, /Docs/Readme.md, /Docs/notes.txt and /todo.txt."""
    return InMemoryFileStore(
        [
            _make_record("f-docs", "/", "Docs"),
            _make_record("r-readme", "/Docs", "Readme.md", "hello"),
            _make_record("r-notes", "/Docs", "notes.txt", "notes"),
            _make_record("r-todo", "/", "todo.txt", "- ship"),
        ],
        principal=PRINCIPAL,
    )


@pytest.fixture
def empty_store() -> InMemoryFileStore:
    return InMemoryFileStore(principal=PRINCIPAL)


@pytest.fixture
def client(seeded_store: InMemoryFileStore, clock: FakeClock) -> OverlayClient:
    return OverlayClient(seeded_store, clock=clock, id_factory=sequential_ids())


@pytest.fixture
def empty_client(empty_store: InMemoryFileStore, clock: FakeClock) -> OverlayClient:
    return OverlayClient(empty_store, clock=clock, id_factory=sequential_ids())
