"""Path normalization for the remote index key space.

Remote locations are rooted under a structural prefix that names the store
root and the principal's namespace, e.g.::

    origin/(c) users/alice/Documents/notes.txt

Index keys drop that prefix, collapse ``.``/``..``/repeated separators and
fold case, so the path above and ``/documents/NOTES.txt`` share the key
``/documents/notes.txt``. Two raw paths collapsing to one key is expected.

Examples
--------
>>> normalize_path("origin/(c) users/alice/Docs//a/../Notes.TXT")
'/docs/notes.txt'
>>> clean_path("/Docs/./Notes.TXT/")
'/Docs/Notes.TXT'
>>> split_name("report.final.md")
('report.final', '.md')
"""

from __future__ import annotations

import posixpath

ROOT = "/"
ROOT_SEGMENTS: tuple[str, ...] = ("origin", "(c) users")
"""Leading segments of a remote-rooted location; followed by the principal."""


def _segments(path: object) -> list[str]:
    if not isinstance(path, str):
        return []
    parts: list[str] = []
    for segment in path.replace("\\", "/").split("/"):
        if segment in ("", "."):
            continue
        if segment == "..":
            if parts:
                parts.pop()
            continue
        parts.append(segment)
    return parts


def _strip_root(parts: list[str]) -> list[str]:
    # Repeat so that normalize(normalize(x)) == normalize(x) for nested prefixes
    width = len(ROOT_SEGMENTS)
    while len(parts) >= width and tuple(p.lower() for p in parts[:width]) == ROOT_SEGMENTS:
        parts = parts[width + 1 :]
    return parts


def clean_path(path: object) -> str:
    """Canonicalize path structure while keeping the original case.

    Never fails: anything that is not a string cleans to ``/``.
    """
    parts = _strip_root(_segments(path))
    return ROOT + "/".join(parts)


def normalize_path(path: object) -> str:
    """Return the index key for a path (cleaned and lower-cased)."""
    return clean_path(path).lower()


def split_path(path: str) -> tuple[str, str]:
    """Split a cleaned path into ``(directory, base)``.

    >>> split_path("/a/b/c.txt")
    ('/a/b', 'c.txt')
    >>> split_path("/c.txt")
    ('/', 'c.txt')
    """
    cleaned = clean_path(path)
    directory, base = posixpath.split(cleaned)
    return directory or ROOT, base


def split_name(base: str) -> tuple[str, str]:
    """Split a base name into ``(name, type)`` where type keeps its dot."""
    name, ext = posixpath.splitext(base)
    return name, ext


def ancestors(path: str) -> list[str]:
    """Cleaned ancestor directories of a path, root-to-leaf, root excluded.

    >>> ancestors("/a/b/c.txt")
    ['/a', '/a/b']
    """
    parts = clean_path(path).strip("/").split("/")[:-1]
    return ["/" + "/".join(parts[: i + 1]) for i in range(len(parts))]


def join_location(principal: str | None, directory: str) -> str:
    """Build the remote-rooted location string for a directory.

    Without a known principal the cleaned directory itself is used.

    >>> join_location("alice", "/docs")
    'origin/(c) users/alice/docs'
    >>> join_location(None, "/docs")
    '/docs'
    """
    directory = clean_path(directory)
    if not principal:
        return directory
    root = "/".join((*ROOT_SEGMENTS, principal))
    return root if directory == ROOT else root + directory


def principal_from_location(location: object) -> str | None:
    """Extract the principal segment from a remote-rooted location, if any."""
    parts = _segments(location)
    width = len(ROOT_SEGMENTS)
    if len(parts) > width and tuple(p.lower() for p in parts[:width]) == ROOT_SEGMENTS:
        return parts[width]
    return None


def is_under(key: str, prefix: str) -> bool:
    """Whether normalized ``key`` lies strictly below normalized ``prefix``."""
    if prefix == ROOT:
        return key != ROOT
    return key.startswith(prefix + "/")


__all__ = [
    "ROOT",
    "ROOT_SEGMENTS",
    "ancestors",
    "clean_path",
    "is_under",
    "join_location",
    "normalize_path",
    "principal_from_location",
    "split_name",
    "split_path",
]
