"""File/folder record and its positional wire codec.

On the wire a record is a fixed-width array::

    [type, name, location, data, _, _, _, _, created, edited, _, size, _, id]

Slots marked ``_`` are reserved. They are kept verbatim in
:attr:`Record.reserved` and written back on encode, so a record that
round-trips through the client is unchanged apart from the fields the
client mutated.

Named slots are normalized on decode and so do not round-trip verbatim: a
null ``type``, ``name`` or ``location`` becomes ``""``, a null ``data``
becomes ``""``, and ``created``, ``edited`` and ``size`` are coerced with
``int()`` (null becomes 0, ``12.7`` becomes 12, ``"12"`` becomes 12).

Patch requests address fields 1-based (``api_offset``) while the array is
0-based (``array_offset``).
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any

from remfs.kernel.exceptions import InvalidResponseError
from remfs.kernel.utils.paths import normalize_path

RECORD_WIDTH = 14
FOLDER_TYPE = ".folder"


class RecordField(IntEnum):
    """Named record fields; the value is the 0-based array offset."""

    TYPE = 0
    NAME = 1
    LOCATION = 2
    DATA = 3
    CREATED = 8
    EDITED = 9
    SIZE = 11
    ID = 13

    @property
    def array_offset(self) -> int:
        return int(self.value)

    @property
    def api_offset(self) -> int:
        """1-based offset used by field patches."""
        return int(self.value) + 1

    @classmethod
    def from_api_offset(cls, offset: int) -> RecordField:
        return cls(offset - 1)


_NAMED_OFFSETS = frozenset(f.array_offset for f in RecordField)


@dataclass(slots=True)
class Record:
    """Named view of one file or folder record.

    Attributes
    ----------
    type : str
        File extension including the leading dot, or ``.folder``.
    name : str
        Base name without extension.
    location : str
        Parent directory, remote-rooted.
    data : str | list[Any]
        File content, or the child placeholder list of a folder.
    created, edited : int
        Epoch milliseconds.
    size : int
        Byte count of ``data``.
    id : str
        Immutable record id.
    reserved : dict[int, Any]
        Values of reserved array slots keyed by offset, kept as received.
    """

    id: str
    type: str = ""
    name: str = ""
    location: str = ""
    data: str | list[Any] = ""
    created: int = 0
    edited: int = 0
    size: int = 0
    reserved: dict[int, Any] = field(default_factory=dict)

    @property
    def is_folder(self) -> bool:
        return self.type == FOLDER_TYPE

    @property
    def path(self) -> str:
        """Index key derived from location, name and type."""
        base = self.name if self.is_folder else self.name + self.type
        return normalize_path(f"{self.location}/{base}")

    def get(self, record_field: RecordField) -> Any:
        return getattr(self, record_field.name.lower())

    def copy(self) -> Record:
        """Deep copy; callers may mutate it freely."""
        return copy.deepcopy(self)


def _as_str(array: list[Any], record_field: RecordField, operation: str) -> str:
    value = array[record_field.array_offset]
    if value is None:
        return ""
    if not isinstance(value, str):
        raise InvalidResponseError(
            operation, f"{record_field.name.lower()} must be a string, got {value!r}"
        )
    return value


def _as_int(array: list[Any], record_field: RecordField, operation: str) -> int:
    value = array[record_field.array_offset]
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int | float | str):
        raise InvalidResponseError(
            operation, f"{record_field.name.lower()} must be numeric, got {value!r}"
        )
    try:
        return int(value)
    except ValueError as e:
        raise InvalidResponseError(
            operation, f"{record_field.name.lower()} must be numeric, got {value!r}"
        ) from e


def decode_record(array: list[Any], operation: str = "fetch_records") -> Record:
    """Build a :class:`Record` from its positional wire array.

    Raises
    ------
    InvalidResponseError
        If the array is too short, has no string id, or a named field has
        the wrong shape.
    """
    if not isinstance(array, list) or len(array) < RECORD_WIDTH:
        raise InvalidResponseError(
            operation, f"record must be an array of at least {RECORD_WIDTH} slots"
        )
    record_id = array[RecordField.ID.array_offset]
    if not isinstance(record_id, str) or not record_id:
        raise InvalidResponseError(operation, f"record id must be a string, got {record_id!r}")

    data = array[RecordField.DATA.array_offset]
    if data is None:
        data = ""

    return Record(
        id=record_id,
        type=_as_str(array, RecordField.TYPE, operation),
        name=_as_str(array, RecordField.NAME, operation),
        location=_as_str(array, RecordField.LOCATION, operation),
        data=copy.deepcopy(data),
        created=_as_int(array, RecordField.CREATED, operation),
        edited=_as_int(array, RecordField.EDITED, operation),
        size=_as_int(array, RecordField.SIZE, operation),
        reserved={
            offset: copy.deepcopy(value)
            for offset, value in enumerate(array)
            if offset not in _NAMED_OFFSETS
        },
    )


def encode_record(record: Record) -> list[Any]:
    """Serialize a :class:`Record` to its positional wire array."""
    width = max(RECORD_WIDTH, max(record.reserved, default=-1) + 1)
    array: list[Any] = [None] * width
    for offset, value in record.reserved.items():
        array[offset] = copy.deepcopy(value)
    for record_field in RecordField:
        array[record_field.array_offset] = copy.deepcopy(record.get(record_field))
    return array


def content_size(content: str) -> int:
    """Byte count stored in the size field for string content."""
    return len(content.encode("utf-8"))


def new_file_record(
    record_id: str, name: str, type: str, location: str, content: str, now: int
) -> Record:
    return Record(
        id=record_id,
        type=type,
        name=name,
        location=location,
        data=content,
        created=now,
        edited=now,
        size=content_size(content),
    )


def new_folder_record(record_id: str, name: str, location: str, now: int) -> Record:
    return Record(
        id=record_id,
        type=FOLDER_TYPE,
        name=name,
        location=location,
        data=[],
        created=now,
        edited=now,
        size=0,
    )


__all__ = [
    "FOLDER_TYPE",
    "RECORD_WIDTH",
    "Record",
    "RecordField",
    "content_size",
    "decode_record",
    "encode_record",
    "new_file_record",
    "new_folder_record",
]
