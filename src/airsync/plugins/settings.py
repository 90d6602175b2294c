"""Settings store: read, repair, back up and atomically write settings.json.

Only ``plugins.enabled``, ``plugins.disabled`` and ``plugins.marketplaces`` are
owned here. Every other key in the document is carried through untouched.
"""

from __future__ import annotations

import copy
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from airsync.core.config import DEFAULT_MAX_BACKUPS
from airsync.core.utils import atomic_write_bytes, atomic_write_json, warn

from .models import ChangeReport, PluginProvider
from .reconcile import reconcile

_LIST_KEYS = ("enabled", "disabled")


def default_settings() -> dict:
    return {"plugins": {"enabled": [], "disabled": [], "marketplaces": {}}}


def _unique_strings(values: list) -> list[str]:
    seen: set[str] = set()
    result: list[str] = []
    for v in values:
        if isinstance(v, str) and v not in seen:
            seen.add(v)
            result.append(v)
    return result


def normalize_settings(data: dict) -> dict:
    """Return a copy of *data* with the plugins section backfilled and deduplicated."""
    settings = copy.deepcopy(data)
    section = settings.get("plugins")
    if not isinstance(section, dict):
        section = {}
        settings["plugins"] = section
    for key in _LIST_KEYS:
        value = section.get(key)
        section[key] = _unique_strings(value) if isinstance(value, list) else []
    if not isinstance(section.get("marketplaces"), dict):
        section["marketplaces"] = {}
    return settings


@dataclass
class LoadedSettings:
    data: dict
    # the document exactly as parsed from disk; None when absent or corrupted
    on_disk: Any = None


class SettingsStore:
    """Owns one settings file and its ``.bak`` rotation."""

    def __init__(self, path: Path | str, max_backups: int = DEFAULT_MAX_BACKUPS):
        self.path = Path(path)
        self.max_backups = max(1, max_backups)

    @property
    def backup_path(self) -> Path:
        return self.path.with_name(self.path.name + ".bak")

    def _backup_names(self) -> list[Path]:
        return [self.backup_path] + [
            self.path.with_name(f"{self.path.name}.bak.{i}") for i in range(1, self.max_backups)
        ]

    def backup(self, content: bytes | None = None) -> Path | None:
        """Rotate older backups and snapshot *content* (default: current file bytes)."""
        if content is None:
            try:
                content = self.path.read_bytes()
            except FileNotFoundError:
                return None

        names = self._backup_names()
        names[-1].unlink(missing_ok=True)
        for i in range(len(names) - 2, -1, -1):
            try:
                os.replace(names[i], names[i + 1])
            except FileNotFoundError:
                continue  # absent, or moved by a concurrent writer

        atomic_write_bytes(self.backup_path, content)
        return self.backup_path

    def load(self) -> LoadedSettings:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return LoadedSettings(data=default_settings())

        try:
            parsed = json.loads(raw.decode("utf-8"))
        except (json.JSONDecodeError, UnicodeDecodeError):
            parsed = None
        if not isinstance(parsed, dict):
            self.backup(raw)
            warn(f"malformed {self.path}, saved a copy to {self.backup_path} and using defaults")
            return LoadedSettings(data=default_settings())

        return LoadedSettings(data=normalize_settings(parsed), on_disk=parsed)

    def read(self) -> dict:
        return self.load().data

    def write(self, data: dict) -> None:
        self.backup()
        atomic_write_json(self.path, data)

    def update(self, providers: list[PluginProvider]) -> ChangeReport:
        """Merge *providers* into the settings file; write only if something changed."""
        loaded = self.load()
        result = reconcile(providers, loaded.data)
        if loaded.on_disk is None or result.settings != loaded.on_disk:
            self.write(result.settings)
            result.report.written = True
        return result.report


def read_settings(path: Path | str) -> dict:
    return SettingsStore(path).read()


def update_settings(
    path: Path | str,
    providers: list[PluginProvider],
    max_backups: int = DEFAULT_MAX_BACKUPS,
) -> ChangeReport:
    return SettingsStore(path, max_backups).update(providers)
