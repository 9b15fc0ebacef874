"""Domain models: records, pending changes and index snapshots."""

from remfs.kernel.domain.changes import (
    AddChange,
    ChangeCommand,
    DeleteChange,
    FieldPatch,
    PendingChange,
    WireChange,
    encode_changes,
)
from remfs.kernel.domain.index import IndexSnapshot
from remfs.kernel.domain.record import (
    FOLDER_TYPE,
    RECORD_WIDTH,
    Record,
    RecordField,
    decode_record,
    encode_record,
)

__all__ = [
    "FOLDER_TYPE",
    "RECORD_WIDTH",
    "AddChange",
    "ChangeCommand",
    "DeleteChange",
    "FieldPatch",
    "IndexSnapshot",
    "PendingChange",
    "Record",
    "RecordField",
    "WireChange",
    "decode_record",
    "encode_changes",
    "encode_record",
]
