"""HTTP client driver using httpx.AsyncClient.

This driver implements the :class:`~remfs.kernel.ports.api_call.APICall`
protocol: async HTTP calls with connection pooling, a per-request timeout,
default query parameters (used for the store credential) and automatic JSON
parsing.
"""

from __future__ import annotations

from typing import Any

import httpx

from remfs.kernel.exceptions import HttpClientError
from remfs.kernel.logging import get_logger

logger = get_logger(__name__)


class HttpClientDriver:
    """APICall driver using httpx.AsyncClient.

    Parameters
    ----------
    base_url : str
        Optional base URL prefix for all requests.
    timeout : float
        Per-request timeout in seconds (default: 30.0). A request that
        exceeds it raises ``httpx.TimeoutException``.
    headers : dict[str, str] | None
        Default headers included in every request.
    params : dict[str, str] | None
        Default query parameters included in every request.
    raise_for_status : bool
        If True, raise :class:`HttpClientError` on non-2xx responses
        (default: True).

    Examples
    --------
    Basic usage::

        http = HttpClientDriver(
            base_url="https://files.example.com",
            params={"auth": token},
        )
        result = await http.aget("/files/index")
        print(result["body"])
    """

    def __init__(
        self,
        base_url: str = "",
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        params: dict[str, str] | None = None,
        raise_for_status: bool = True,
    ) -> None:
        self._base_url = base_url
        self._timeout = timeout
        self._default_headers = dict(headers) if headers else {}
        self._default_params = dict(params) if params else {}
        self._raise_for_status = raise_for_status
        self._client: httpx.AsyncClient | None = None
        # Hook for testing: inject a custom transport
        self._transport: httpx.AsyncBaseTransport | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Lazily create the httpx client on first use."""
        if self._client is None:
            kwargs: dict[str, Any] = {
                "base_url": self._base_url,
                "timeout": self._timeout,
                "headers": self._default_headers,
                "params": self._default_params,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    def _parse_response(self, response: httpx.Response) -> dict[str, Any]:
        """Parse an httpx response into ``{"status_code", "headers", "body"}``."""
        content_type = response.headers.get("content-type", "")
        if "application/json" in content_type:
            try:
                body = response.json()
            except ValueError:
                body = response.text
        else:
            body = response.text

        return {
            "status_code": response.status_code,
            "headers": dict(response.headers),
            "body": body,
        }

    def _check_status(self, result: dict[str, Any]) -> dict[str, Any]:
        """Raise HttpClientError if status is non-2xx and raise_for_status is enabled."""
        if self._raise_for_status:
            status = result["status_code"]
            if status < 200 or status >= 300:
                raise HttpClientError(
                    status_code=status,
                    body=result["body"],
                    message=f"HTTP {status}: {result['body']}",
                )
        return result

    async def aget(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        params: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make an async GET request.

        Returns
        -------
        dict[str, Any]
            ``{"status_code": int, "headers": dict, "body": Any}``
        """
        return await self.arequest("GET", url, headers=headers, params=params, **kwargs)

    async def apost(
        self,
        url: str,
        json: dict[str, Any] | None = None,
        data: Any | None = None,
        headers: dict[str, str] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make an async POST request.

        Returns
        -------
        dict[str, Any]
            ``{"status_code": int, "headers": dict, "body": Any}``
        """
        return await self.arequest("POST", url, json=json, data=data, headers=headers, **kwargs)

    async def arequest(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> dict[str, Any]:
        """Make a generic async HTTP request.

        Per-request ``params`` are merged over the default query parameters
        and per-request ``headers`` over the default headers.
        """
        if kwargs.get("headers"):
            kwargs["headers"] = {**self._default_headers, **kwargs["headers"]}
        else:
            kwargs.pop("headers", None)
        if kwargs.get("params"):
            kwargs["params"] = {**self._default_params, **kwargs["params"]}
        else:
            kwargs.pop("params", None)
        for key in ("json", "data"):
            if key in kwargs and kwargs[key] is None:
                del kwargs[key]

        client = self._get_client()
        logger.debug("HTTP {method} {url}", method=method, url=url)
        response = await client.request(method, url, **kwargs)
        result = self._parse_response(response)
        return self._check_status(result)

    async def aclose(self) -> None:
        """Close the underlying httpx client and release connection pool resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None


__all__ = ["HttpClientDriver", "HttpClientError"]
