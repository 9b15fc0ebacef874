"""Mutating commands: put, mkdir, rm, mv. Each commits before exiting."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import typer
from rich.markup import escape

from remfs.cli.utils import console, run_with_client

if TYPE_CHECKING:
    from remfs.overlay.client import OverlayClient


def put(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File to write or create"),
    content: str | None = typer.Argument(None, help="New content; read from stdin if omitted"),
    source: Path | None = typer.Option(None, "--file", "-f", help="Read content from a local file"),
) -> None:
    """Write a file, creating it (and missing folders) if needed."""
    if source is not None:
        if not source.exists():
            console.print(f"[red]✗[/red] File not found: {escape(str(source))}")
            raise typer.Exit(1)
        text = source.read_text(encoding="utf-8")
    elif content is not None:
        text = content
    else:
        text = typer.get_text_stream("stdin").read()

    async def _put(client: OverlayClient) -> bool:
        if await client.aexists(path):
            await client.awrite(path, text)
            return False
        await client.acreate(path, text)
        return True

    created = run_with_client(ctx, _put, commit=True)
    verb = "Created" if created else "Wrote"
    console.print(f"[green]✓[/green] {verb} {escape(path)}")


def mkdir(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="Folder to create"),
) -> None:
    """Create a folder and any missing parents."""
    record_id = run_with_client(ctx, lambda client: client.acreate_folder(path), commit=True)
    console.print(f"[green]✓[/green] {escape(path)} ({record_id})")


def rm(
    ctx: typer.Context,
    path: str = typer.Argument(..., help="File or folder to remove"),
) -> None:
    """Remove a record. Folders are not removed recursively."""
    run_with_client(ctx, lambda client: client.aremove(path), commit=True)
    console.print(f"[green]✓[/green] Removed {escape(path)}")


def mv(
    ctx: typer.Context,
    old_path: str = typer.Argument(..., help="Current path"),
    new_path: str = typer.Argument(..., help="New path"),
) -> None:
    """Rename or move a record."""
    run_with_client(ctx, lambda client: client.arename(old_path, new_path), commit=True)
    console.print(f"[green]✓[/green] Moved {escape(old_path)} to {escape(new_path)}")
