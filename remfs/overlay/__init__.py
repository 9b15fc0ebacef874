"""Client-side overlay: path index, record cache, change log and the client."""

from remfs.overlay.change_log import ChangeLog
from remfs.overlay.client import OverlayClient
from remfs.overlay.path_index import PathIndex
from remfs.overlay.record_cache import RecordCache

__all__ = ["ChangeLog", "OverlayClient", "PathIndex", "RecordCache"]
