"""CLI entry point: `air plugins sync|view` and the `air sync` alias."""

from __future__ import annotations

import sys
from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape

from . import __version__
from .commands import sync_plugins, view_all_plugins, view_project_plugins
from .core.config import load_config
from .errors import AirError

err_console = Console(stderr=True, soft_wrap=True)

_path_option = click.option(
    "--path",
    "-p",
    "path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project directory (default: current directory)",
)


def _fail(error: Exception) -> None:
    err_console.print(f"[red]Error:[/red] {escape(str(error))}")
    sys.exit(1)


@click.group()
@click.version_option(__version__, prog_name="air")
def cli() -> None:
    """Automatic Claude Code plugin discovery for npm dependencies."""


@cli.group()
def plugins() -> None:
    """Manage Claude Code plugins."""


@plugins.command("sync")
@_path_option
@click.option("--quiet", "-q", is_flag=True, help="Suppress output (for npm hooks)")
@click.option("--no-cache", is_flag=True, help="Rescan dependencies, ignoring the cache")
def plugins_sync(path: Path | None, quiet: bool, no_cache: bool) -> None:
    """Discover and enable plugins from dependencies."""
    config = load_config()
    try:
        sync_plugins(config, (path or Path.cwd()).resolve(), quiet=quiet, no_cache=no_cache)
    except (AirError, OSError) as e:
        _fail(e)


@plugins.command("view")
@_path_option
@click.option("--all", "-a", "show_all", is_flag=True, help="Show all configured plugins")
@click.option("--no-cache", is_flag=True, help="Rescan dependencies, ignoring the cache")
def plugins_view(path: Path | None, show_all: bool, no_cache: bool) -> None:
    """Show plugins discovered in the project."""
    config = load_config()
    try:
        if show_all:
            view_all_plugins(config)
        else:
            view_project_plugins(config, (path or Path.cwd()).resolve(), no_cache=no_cache)
    except (AirError, OSError) as e:
        _fail(e)


cli.add_command(plugins_sync, name="sync")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
