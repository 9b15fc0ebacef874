"""Identifier generation for newly created records."""

from __future__ import annotations

import hashlib
import secrets
import time
import uuid

_RANDOM_BYTES = 16


def new_id(principal: str | None = None) -> str:
    """Return a fresh record id.

    The id is a SHA-256 digest over per-call random bytes, a nanosecond
    timestamp and the principal name, truncated to 128 bits and formatted
    as a UUID string.

    Parameters
    ----------
    principal : str | None
        Name of the acting principal; empty when unknown.

    Returns
    -------
    str
        Canonical UUID string, e.g. ``"3f0c2a9e-..."``.
    """
    hasher = hashlib.sha256()
    hasher.update(secrets.token_bytes(_RANDOM_BYTES))
    hasher.update(str(time.time_ns()).encode("ascii"))
    hasher.update((principal or "").encode("utf-8"))
    return str(uuid.UUID(bytes=hasher.digest()[:16]))


__all__ = ["new_id"]
