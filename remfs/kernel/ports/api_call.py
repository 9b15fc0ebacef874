"""Port interface for HTTP API calls."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class APICall(Protocol):
    """Port for making HTTP requests.

    Every method returns ``{"status_code": int, "headers": dict, "body": Any}``
    where ``body`` is parsed JSON when the response declares a JSON content
    type, else raw text.
    """

    async def aget(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make a GET request."""
        ...

    async def apost(
        self,
        url: str,
        json: dict[str, Any] | None = None,
        data: Any | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make a POST request."""
        ...

    async def aclose(self) -> None:
        """Release pooled connections."""
        ...


__all__ = ["APICall"]
