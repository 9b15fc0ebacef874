"""Mock adapters for testing."""

from remfs.stdlib.adapters.mock.mock_file_store import InMemoryFileStore, StoreCalls

__all__ = ["InMemoryFileStore", "StoreCalls"]
