"""Plugins: dependency scanning, scan cache, settings reconciliation."""

from .cache import CacheManager
from .declaration import find_declaration, normalize_declaration, parse_declaration
from .models import (
    ChangeReport,
    Declaration,
    DeclarationShape,
    PluginProvider,
    PluginSpec,
    PluginState,
    PluginStatus,
)
from .naming import marketplace_key, plugin_key, split_plugin_key
from .reconcile import get_plugin_state, get_plugin_states, list_configured_plugins, reconcile
from .scanner import scan_dependencies
from .settings import SettingsStore, read_settings, update_settings

__all__ = [
    "CacheManager",
    "ChangeReport",
    "Declaration",
    "DeclarationShape",
    "PluginProvider",
    "PluginSpec",
    "PluginState",
    "PluginStatus",
    "SettingsStore",
    "find_declaration",
    "get_plugin_state",
    "get_plugin_states",
    "list_configured_plugins",
    "marketplace_key",
    "normalize_declaration",
    "parse_declaration",
    "plugin_key",
    "read_settings",
    "reconcile",
    "scan_dependencies",
    "split_plugin_key",
    "update_settings",
]
