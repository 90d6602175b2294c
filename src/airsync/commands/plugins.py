"""`air plugins sync` / `air plugins view` command bodies."""

from __future__ import annotations

from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from airsync.core.config import Config
from airsync.core.utils import plural, short_cwd
from airsync.plugins import (
    CacheManager,
    ChangeReport,
    PluginStatus,
    SettingsStore,
    get_plugin_states,
    list_configured_plugins,
)

console = Console()

STATUS_LABELS = {
    PluginStatus.ENABLED: "[green]✓ enabled[/green]",
    PluginStatus.DISABLED: "[yellow]⊗ disabled (by user)[/yellow]",
    PluginStatus.NOT_INSTALLED: "[dim]• not installed[/dim]",
}


def sync_plugins(
    config: Config,
    project: Path,
    quiet: bool = False,
    no_cache: bool = False,
) -> ChangeReport:
    """Discover providers in *project* and merge them into the settings file."""
    if not quiet:
        console.print("Scanning dependencies for Claude Code plugin marketplaces...")

    cache = CacheManager(config.cache_file_name)
    providers = cache.get_providers(project, no_cache=no_cache or not config.use_cache)
    total = sum(len(p.declaration.plugins) for p in providers)

    if not quiet:
        console.print(
            f"Found {plural(len(providers), 'marketplace')} with {plural(total, 'plugin')}\n"
        )

    store = SettingsStore(config.settings_path, config.max_backups)
    report = store.update(providers)

    if quiet or not providers:
        return report

    if report.added:
        console.print("New plugins discovered:")
        for name, origin in zip(report.added, report.added_from):
            console.print(
                f"  • [bold]{escape(name)}[/bold] "
                f"(from {escape(origin.package_name)} v{escape(origin.version)})"
            )
        console.print()

    if report.changed:
        console.print(f"Updated settings: {escape(short_cwd(config.settings_path))}")
        console.print(
            f"[green]✓[/green] {plural(len(report.added), 'plugin')} added, "
            f"{len(report.updated)} updated\n"
        )
        if report.added:
            console.print("  Restart Claude Code to load new plugins\n", style="dim")
    else:
        console.print("All plugins already enabled.\n")
    return report


def view_project_plugins(config: Config, project: Path, no_cache: bool = False) -> None:
    console.print(f"\nDiscovered Claude Code plugins in {escape(str(project))}\n")

    cache = CacheManager(config.cache_file_name)
    providers = cache.get_providers(project, no_cache=no_cache or not config.use_cache)
    if not providers:
        console.print("No Claude Code plugins found in dependencies.\n", style="dim")
        return

    settings = SettingsStore(config.settings_path, config.max_backups).read()
    states = get_plugin_states(providers, settings)

    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Plugin", style="bold")
    table.add_column("Marketplace")
    table.add_column("Version")
    table.add_column("Status")
    table.add_column("Description", style="dim")
    for state in states:
        table.add_row(
            escape(state.name),
            escape(state.marketplace),
            escape(state.version),
            STATUS_LABELS[state.status],
            escape(state.description),
        )
    console.print(table)

    counts = {status: 0 for status in PluginStatus}
    for state in states:
        counts[state.status] += 1
    console.print(
        f"\nSummary: {counts[PluginStatus.ENABLED]} enabled, "
        f"{counts[PluginStatus.DISABLED]} disabled, "
        f"{counts[PluginStatus.NOT_INSTALLED]} available"
    )
    if counts[PluginStatus.NOT_INSTALLED]:
        console.print(
            "\nRun `air sync` to enable new plugins, then restart Claude Code\n", style="yellow"
        )


def view_all_plugins(config: Config) -> None:
    console.print("\nAll Claude Code plugins\n")

    settings = SettingsStore(config.settings_path, config.max_backups).read()
    states = list_configured_plugins(settings)
    if not states:
        console.print("No plugins configured.\n", style="dim")
        return

    table = Table(show_edge=False, pad_edge=False)
    table.add_column("Plugin", style="bold")
    table.add_column("Source")
    table.add_column("Status")
    for state in states:
        table.add_row(escape(state.name), escape(state.source), STATUS_LABELS[state.status])
    console.print(table)

    enabled = sum(1 for s in states if s.status is PluginStatus.ENABLED)
    console.print(f"\nSummary: {enabled} enabled, {len(states) - enabled} disabled\n")
