"""Tests for pending change variants and their wire form."""

from __future__ import annotations

from remfs.kernel.domain.changes import (
    AddChange,
    ChangeCommand,
    DeleteChange,
    FieldPatch,
    encode_changes,
)
from remfs.kernel.domain.record import RecordField, encode_record, new_file_record


class TestWireDescriptors:
    def test_add_carries_full_record(self) -> None:
        record = new_file_record("id-1", "c", ".txt", "/a/b", "hi", 5)
        payload = AddChange(record).to_wire().to_payload()
        assert payload == {"command": "UUIDa", "uuid": "id-1", "dta": encode_record(record)}

    def test_field_patch_uses_api_offset(self) -> None:
        payload = FieldPatch("id-1", RecordField.DATA, "new").to_wire().to_payload()
        assert payload == {"command": "UUIDr", "uuid": "id-1", "dta": "new", "idx": 4}

    def test_field_patch_keeps_empty_string(self) -> None:
        payload = FieldPatch("id-1", RecordField.DATA, "").to_wire().to_payload()
        assert payload["dta"] == ""

    def test_delete_carries_id_only(self) -> None:
        payload = DeleteChange("id-1").to_wire().to_payload()
        assert payload == {"command": "UUIDd", "uuid": "id-1"}

    def test_command_values(self) -> None:
        assert [c.value for c in ChangeCommand] == ["UUIDa", "UUIDr", "UUIDd"]


def test_encode_changes_keeps_order() -> None:
    record = new_file_record("id-1", "c", ".txt", "/", "", 1)
    body = encode_changes(
        [
            AddChange(record),
            FieldPatch("id-1", RecordField.EDITED, 2),
            DeleteChange("id-1"),
        ]
    )
    assert [u["command"] for u in body["updates"]] == ["UUIDa", "UUIDr", "UUIDd"]
    assert body["updates"][1]["idx"] == RecordField.EDITED.api_offset == 10
