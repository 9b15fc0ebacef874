"""Tests for the pending change log."""

from __future__ import annotations

from remfs.kernel.domain.changes import DeleteChange, FieldPatch
from remfs.kernel.domain.record import RecordField
from remfs.overlay.change_log import ChangeLog


def _patch(n: int) -> FieldPatch:
    return FieldPatch("id", RecordField.EDITED, n)


class TestChangeLog:
    def test_starts_empty(self) -> None:
        log = ChangeLog()
        assert log.is_empty()
        assert len(log) == 0

    def test_append_keeps_duplicates_in_order(self) -> None:
        log = ChangeLog()
        log.append(_patch(1))
        log.append(_patch(1))
        log.extend([_patch(2), DeleteChange("id")])
        assert log.snapshot() == [_patch(1), _patch(1), _patch(2), DeleteChange("id")]

    def test_drain_clears(self) -> None:
        log = ChangeLog()
        log.extend([_patch(1), _patch(2)])
        assert log.drain() == [_patch(1), _patch(2)]
        assert log.is_empty()

    def test_restore_prepends(self) -> None:
        log = ChangeLog()
        log.extend([_patch(1), _patch(2)])
        drained = log.drain()
        log.append(_patch(3))
        log.restore(drained)
        assert list(log) == [_patch(1), _patch(2), _patch(3)]

    def test_snapshot_is_a_copy(self) -> None:
        log = ChangeLog()
        log.append(_patch(1))
        log.snapshot().clear()
        assert len(log) == 1
