"""Port interfaces."""

from remfs.kernel.ports.api_call import APICall
from remfs.kernel.ports.file_store import FileStore

__all__ = ["APICall", "FileStore"]
