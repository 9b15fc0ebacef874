"""FileStore drivers."""

from remfs.drivers.file_store.rest import PatchResult, RestFileStore

__all__ = ["PatchResult", "RestFileStore"]
