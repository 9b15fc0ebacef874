"""REST-backed FileStore driver.

Speaks the store's three HTTP operations through an
:class:`~remfs.kernel.ports.api_call.APICall` driver:

- ``GET {index_endpoint}`` → JSON array of records, either flat (14 slots
  per record, concatenated) or a list of 14-slot arrays.
- ``POST {records_endpoint}`` with ``{"uuids": [...]}`` → ``{id: array}``.
- ``POST {update_endpoint}`` with ``{"updates": [...]}`` → ``{"payload": ...}``.

The credential travels as a query parameter on every request.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import httpx
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from remfs.drivers.http_client.http_client import HttpClientDriver
from remfs.kernel.domain.changes import encode_changes
from remfs.kernel.domain.index import IndexSnapshot
from remfs.kernel.domain.record import RECORD_WIDTH, decode_record
from remfs.kernel.exceptions import (
    ConfigurationError,
    HttpClientError,
    InvalidResponseError,
    RemoteUnavailableError,
)
from remfs.kernel.logging import get_logger
from remfs.kernel.utils.paths import principal_from_location

if TYPE_CHECKING:
    from collections.abc import Sequence

    from remfs.kernel.config.models import ClientConfig
    from remfs.kernel.domain.changes import PendingChange
    from remfs.kernel.domain.record import Record
    from remfs.kernel.ports.api_call import APICall

logger = get_logger(__name__)

_INDEX_ADAPTER: TypeAdapter[list[Any]] = TypeAdapter(list[Any])
_RECORDS_ADAPTER: TypeAdapter[dict[str, list[Any]]] = TypeAdapter(dict[str, list[Any]])


class PatchResult(BaseModel):
    """Success body of the apply-patch-batch endpoint."""

    payload: Any = None


def _split_entries(raw: list[Any]) -> list[list[Any]]:
    if raw and all(isinstance(item, list) for item in raw):
        return raw
    if len(raw) % RECORD_WIDTH:
        raise InvalidResponseError(
            "fetch_index", f"flat index length {len(raw)} is not a multiple of {RECORD_WIDTH}"
        )
    return [raw[i : i + RECORD_WIDTH] for i in range(0, len(raw), RECORD_WIDTH)]


class RestFileStore:
    """FileStore over the store's REST API.

    Parameters
    ----------
    http : APICall
        Driver used for requests; it must already carry the base URL and
        the credential query parameter (see :meth:`from_config`).
    principal : str | None
        Acting principal. When None it is inferred from the first
        remote-rooted location found in the index.
    index_endpoint, records_endpoint, update_endpoint : str
        Paths of the three remote operations.

    Examples
    --------
    Example usage::

        store = RestFileStore.from_config(config.client)
        snapshot = await store.afetch_index()
        await store.aclose()
    """

    def __init__(
        self,
        http: APICall,
        principal: str | None = None,
        index_endpoint: str = "/files/index",
        records_endpoint: str = "/files/records",
        update_endpoint: str = "/files/update",
    ) -> None:
        self._http = http
        self._principal = principal
        self._index_endpoint = index_endpoint
        self._records_endpoint = records_endpoint
        self._update_endpoint = update_endpoint

    @classmethod
    def from_config(cls, config: ClientConfig) -> RestFileStore:
        """Build a store and its HTTP driver from client settings.

        Raises
        ------
        ConfigurationError
            If base_url or token is missing
        """
        if not config.base_url:
            raise ConfigurationError("client", "base_url is required")
        if not config.token:
            raise ConfigurationError("client", "token is required")
        http = HttpClientDriver(
            base_url=config.base_url,
            timeout=config.timeout,
            params={config.auth_param: config.token},
        )
        return cls(
            http,
            principal=config.principal,
            index_endpoint=config.index_endpoint,
            records_endpoint=config.records_endpoint,
            update_endpoint=config.update_endpoint,
        )

    async def _acall(self, operation: str, method: str, url: str, **kwargs: Any) -> Any:
        """Run one request and map transport failures to store errors."""
        try:
            if method == "GET":
                result = await self._http.aget(url, **kwargs)
            else:
                result = await self._http.apost(url, **kwargs)
        except HttpClientError as e:
            raise RemoteUnavailableError(operation, str(e), status_code=e.status_code) from e
        except httpx.TimeoutException as e:
            raise RemoteUnavailableError(operation, f"timed out: {e!r}") from e
        except httpx.HTTPError as e:
            raise RemoteUnavailableError(operation, f"transport error: {e!r}") from e
        return result["body"]

    async def afetch_index(self) -> IndexSnapshot:
        """Fetch the index and decode every record it carries."""
        body = await self._acall("fetch_index", "GET", self._index_endpoint)
        try:
            raw = _INDEX_ADAPTER.validate_python(body)
        except PydanticValidationError as e:
            raise InvalidResponseError("fetch_index", "expected a JSON array") from e

        snapshot = IndexSnapshot(principal=self._principal)
        for entry in _split_entries(raw):
            record = decode_record(entry, "fetch_index")
            snapshot.paths[record.path] = record.id
            snapshot.records[record.id] = record
            if snapshot.principal is None:
                snapshot.principal = principal_from_location(record.location)

        logger.debug(
            "Fetched index with {count} entries (principal={principal})",
            count=len(snapshot.paths),
            principal=snapshot.principal,
        )
        return snapshot

    async def afetch_records(self, record_ids: Sequence[str]) -> dict[str, Record]:
        """Fetch records by id in one request; unknown ids are left out."""
        if not record_ids:
            return {}
        body = await self._acall(
            "fetch_records", "POST", self._records_endpoint, json={"uuids": list(record_ids)}
        )
        try:
            raw = _RECORDS_ADAPTER.validate_python(body)
        except PydanticValidationError as e:
            raise InvalidResponseError("fetch_records", "expected an object of arrays") from e

        records: dict[str, Record] = {}
        for record_id, array in raw.items():
            record = decode_record(array)
            if record.id != record_id:
                raise InvalidResponseError(
                    "fetch_records",
                    f"record keyed {record_id!r} carries id {record.id!r}",
                )
            records[record_id] = record
        return records

    async def aapply_patches(self, changes: Sequence[PendingChange]) -> Any:
        """Send one batch; any failure means nothing was applied."""
        body = await self._acall(
            "apply_patches", "POST", self._update_endpoint, json=encode_changes(list(changes))
        )
        try:
            result = PatchResult.model_validate(body)
        except PydanticValidationError as e:
            raise InvalidResponseError("apply_patches", "expected an object with 'payload'") from e
        logger.debug("Applied {count} change(s)", count=len(changes))
        return result.payload

    async def aclose(self) -> None:
        await self._http.aclose()


__all__ = ["PatchResult", "RestFileStore"]
