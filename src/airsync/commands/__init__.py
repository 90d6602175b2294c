"""Commands: sync and view bodies used by the CLI."""

from .plugins import sync_plugins, view_all_plugins, view_project_plugins

__all__ = ["sync_plugins", "view_all_plugins", "view_project_plugins"]
