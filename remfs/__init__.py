"""remfs - stateful client for a remote, id-addressed hierarchical file store.

Mirrors the remote path index locally, caches records lazily and buffers
mutations until an explicit commit sends them as one batch.
"""

# Version is defined in pyproject.toml and read dynamically
try:
    from importlib.metadata import version

    __version__ = version("remfs")
except Exception:
    __version__ = "0.0.0.dev0"  # Fallback for development installs

from remfs.drivers.file_store.rest import RestFileStore
from remfs.kernel.config import load_config
from remfs.kernel.domain import Record, RecordField
from remfs.kernel.exceptions import (
    AlreadyExistsError,
    NotFoundError,
    RemFSError,
    RemoteUnavailableError,
    TypeConflictError,
)
from remfs.overlay.client import OverlayClient
from remfs.stdlib.adapters.mock import InMemoryFileStore

__all__ = [
    "__version__",
    "AlreadyExistsError",
    "InMemoryFileStore",
    "NotFoundError",
    "OverlayClient",
    "Record",
    "RecordField",
    "RemFSError",
    "RemoteUnavailableError",
    "RestFileStore",
    "TypeConflictError",
    "load_config",
]
