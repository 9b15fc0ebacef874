"""CLI helper utilities for remfs commands."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any, TypeVar

import typer
from rich.console import Console
from rich.markup import escape

from remfs.drivers.file_store.rest import RestFileStore
from remfs.kernel.config import get_default_config
from remfs.kernel.exceptions import RemFSError
from remfs.overlay.client import OverlayClient

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from remfs.kernel.config import RemFSConfig
    from remfs.kernel.ports.file_store import FileStore

console = Console()

T = TypeVar("T")


def build_store(config: RemFSConfig) -> FileStore:
    """Create the store the CLI talks to."""
    return RestFileStore.from_config(config.client)


def get_config(ctx: typer.Context) -> RemFSConfig:
    """Configuration loaded by the root callback, or defaults."""
    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    config = obj.get("config")
    return config if config is not None else get_default_config()


def run_with_client(
    ctx: typer.Context,
    operation: Callable[[OverlayClient], Awaitable[T]],
    *,
    commit: bool = False,
) -> T:
    """Run ``operation`` against a fresh client and close it afterwards.

    With ``commit=True`` pending changes are committed once the operation
    returns. Any remfs error is printed and turned into exit code 1.
    """
    config = get_config(ctx)

    async def _run() -> T:
        async with OverlayClient(build_store(config)) as client:
            result = await operation(client)
            if commit:
                await client.acommit()
            return result

    try:
        return asyncio.run(_run())
    except RemFSError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise typer.Exit(1) from e


def format_record(record: Any) -> dict[str, Any]:
    """Flatten a record into displayable fields."""
    return {
        "id": record.id,
        "path": record.path,
        "kind": "folder" if record.is_folder else "file",
        "name": record.name,
        "type": record.type,
        "location": record.location,
        "size": record.size,
        "created": record.created,
        "edited": record.edited,
    }
