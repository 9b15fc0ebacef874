"""Pending change variants and their wire descriptors.

A change log is replayed by the remote in submission order; later field
patches to the same ``(id, field)`` win. Changes are never coalesced
client-side.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

from pydantic import BaseModel

from remfs.kernel.domain.record import Record, RecordField, encode_record


class ChangeCommand(StrEnum):
    """Command tags understood by the apply-patch-batch endpoint."""

    ADD = "UUIDa"
    PATCH = "UUIDr"
    DELETE = "UUIDd"


class WireChange(BaseModel):
    """One entry of the ``updates`` array sent to the remote."""

    command: ChangeCommand
    uuid: str
    dta: Any = None
    idx: int | None = None

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"command": self.command.value, "uuid": self.uuid}
        if self.command is not ChangeCommand.DELETE:
            payload["dta"] = self.dta
        if self.idx is not None:
            payload["idx"] = self.idx
        return payload


@dataclass(frozen=True, slots=True)
class AddChange:
    """Create a record; carries the full record as of the local create."""

    record: Record

    @property
    def record_id(self) -> str:
        return self.record.id

    def to_wire(self) -> WireChange:
        return WireChange(
            command=ChangeCommand.ADD, uuid=self.record.id, dta=encode_record(self.record)
        )


@dataclass(frozen=True, slots=True)
class FieldPatch:
    """Replace one field of an existing record."""

    record_id: str
    field: RecordField
    value: Any

    def to_wire(self) -> WireChange:
        return WireChange(
            command=ChangeCommand.PATCH,
            uuid=self.record_id,
            dta=copy.deepcopy(self.value),
            idx=self.field.api_offset,
        )


@dataclass(frozen=True, slots=True)
class DeleteChange:
    """Delete a record by id."""

    record_id: str

    def to_wire(self) -> WireChange:
        return WireChange(command=ChangeCommand.DELETE, uuid=self.record_id)


PendingChange = AddChange | FieldPatch | DeleteChange


def encode_changes(changes: list[PendingChange]) -> dict[str, Any]:
    """Build the request body for one apply-patch-batch call."""
    return {"updates": [change.to_wire().to_payload() for change in changes]}


__all__ = [
    "AddChange",
    "ChangeCommand",
    "DeleteChange",
    "FieldPatch",
    "PendingChange",
    "WireChange",
    "encode_changes",
]
