"""httpx-backed APICall driver."""

from remfs.drivers.http_client.http_client import HttpClientDriver, HttpClientError

__all__ = ["HttpClientDriver", "HttpClientError"]
