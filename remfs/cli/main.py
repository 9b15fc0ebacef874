"""remfs CLI - Main entrypoint."""

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from remfs import __version__
from remfs.cli.commands import edit_cmd, files_cmd
from remfs.kernel.config import load_config
from remfs.kernel.exceptions import RemFSError
from remfs.kernel.logging import configure_logging

# Create the main Typer app
app = typer.Typer(
    name="remfs",
    help="remfs - path-addressed client for a remote file store.",
    no_args_is_help=True,
    rich_markup_mode="rich",
    pretty_exceptions_enable=False,
)

console = Console()

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

app.command("ls")(files_cmd.list_children)
app.command("cat")(files_cmd.cat)
app.command("stat")(files_cmd.stat)
app.command("tree")(files_cmd.tree)
app.command("put")(edit_cmd.put)
app.command("mkdir")(edit_cmd.mkdir)
app.command("rm")(edit_cmd.rm)
app.command("mv")(edit_cmd.mv)


def _show_version(value: bool) -> None:
    if value:
        console.print(f"[bold blue]remfs[/bold blue] version [green]{__version__}[/green]")
        raise typer.Exit()


@app.callback()
def callback(
    ctx: typer.Context,
    *,
    config_path: Path | None = typer.Option(
        None, "--config", "-c", help="Config file (YAML 'kind: Config' or pyproject.toml)"
    ),
    log_level: str | None = typer.Option(
        None, "--log-level", help="Log level: debug|info|warning|error"
    ),
    version: bool = typer.Option(
        False,
        "--version",
        "-v",
        callback=_show_version,
        is_eager=True,
        help="Show version and exit",
    ),
) -> None:
    """remfs CLI.

    Global flags are parsed here and the loaded configuration is stored on
    `ctx.obj` for subcommands.
    """
    if ctx.obj is None:
        ctx.obj = {}

    try:
        config = load_config(config_path)
    except (FileNotFoundError, RemFSError) as e:
        console.print(f"[red]✗[/red] Cannot load configuration: {escape(str(e))}")
        raise typer.Exit(1) from e

    logging_config = config.logging
    level = (log_level or logging_config.level).upper()
    if level not in _LOG_LEVELS:
        console.print(f"[red]✗[/red] Unknown log level: {escape(level)}")
        raise typer.Exit(1)
    configure_logging(
        level=level,  # type: ignore[arg-type]
        format=logging_config.format,
        output_file=logging_config.output_file,
        use_color=logging_config.use_color,
        include_timestamp=logging_config.include_timestamp,
        force_reconfigure=True,
        enable_stdlib_bridge=logging_config.enable_stdlib_bridge,
    )
    ctx.obj["config"] = config


def main() -> None:
    """Main CLI entrypoint."""
    app()


if __name__ == "__main__":
    main()
