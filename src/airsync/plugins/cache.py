"""Scan cache keyed by package.json / package-lock.json mtimes."""

from __future__ import annotations

import json
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from airsync.core.config import CACHE_FILE_NAME
from airsync.core.utils import atomic_write_json, file_mtime_ms

from .declaration import normalize_declaration
from .models import PluginProvider
from .scanner import LOCKFILE_NAME, MANIFEST_NAME, scan_dependencies

Clock = Callable[[], datetime]
Scanner = Callable[[Path], list[PluginProvider]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def provider_from_dict(data: Any) -> PluginProvider:
    """Rebuild a provider from its cached form. Raises ValueError if malformed."""
    if not isinstance(data, dict):
        raise ValueError("cached provider is not an object")
    package_name = data.get("packageName")
    version = data.get("version")
    path = data.get("path")
    if not (isinstance(package_name, str) and package_name):
        raise ValueError("cached provider has no packageName")
    if not isinstance(version, str) or not isinstance(path, str):
        raise ValueError(f"cached provider {package_name} has invalid version/path")
    declaration = normalize_declaration(data.get("declaration"), package_name, quiet=True)
    return PluginProvider(
        package_name=package_name,
        version=version,
        path=path,
        declaration=declaration,
    )


class CacheManager:
    """Wraps the dependency scanner with a persisted, mtime-validated cache.

    The cache is never authoritative: any doubt about it leads to a rescan.
    """

    def __init__(
        self,
        cache_file_name: str = CACHE_FILE_NAME,
        scanner: Scanner = scan_dependencies,
        clock: Clock = _utcnow,
    ):
        self.cache_file_name = cache_file_name
        self.scanner = scanner
        self.clock = clock

    def cache_path(self, project: Path) -> Path:
        return project / self.cache_file_name

    @staticmethod
    def current_mtimes(project: Path) -> tuple[float, float]:
        return file_mtime_ms(project / MANIFEST_NAME), file_mtime_ms(project / LOCKFILE_NAME)

    def read(self, project: Path) -> dict | None:
        """Load the cache file; None when missing, unparsable, or mis-shaped."""
        path = self.cache_path(project)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except (FileNotFoundError, json.JSONDecodeError, UnicodeDecodeError):
            return None
        if not (
            isinstance(data, dict)
            and isinstance(data.get("scannedAt"), str)
            and isinstance(data.get("packageJsonMTime"), (int, float))
            and isinstance(data.get("packageLockMTime"), (int, float))
            and isinstance(data.get("providers"), list)
        ):
            return None
        return data

    def is_valid(self, cache: dict, project: Path) -> bool:
        manifest_mtime, lock_mtime = self.current_mtimes(project)
        return cache["packageJsonMTime"] == manifest_mtime and cache["packageLockMTime"] == lock_mtime

    def write(
        self,
        project: Path,
        providers: list[PluginProvider],
        mtimes: tuple[float, float] | None = None,
    ) -> dict:
        manifest_mtime, lock_mtime = mtimes or self.current_mtimes(project)
        data = {
            "scannedAt": self.clock().isoformat(),
            "packageJsonMTime": manifest_mtime,
            "packageLockMTime": lock_mtime,
            "providers": [p.to_dict() for p in providers],
        }
        atomic_write_json(self.cache_path(project), data)
        return data

    def invalidate(self, project: Path | str) -> None:
        self.cache_path(Path(project).resolve()).unlink(missing_ok=True)

    def get_providers(self, project: Path | str, no_cache: bool = False) -> list[PluginProvider]:
        """Return providers for *project*, from cache when it is still valid."""
        project = Path(project).resolve()

        if not no_cache:
            cache = self.read(project)
            if cache is not None and self.is_valid(cache, project):
                try:
                    return [provider_from_dict(p) for p in cache["providers"]]
                except ValueError:
                    pass  # treat like a corrupted cache and rescan

        # mtimes taken before scanning so edits made mid-scan invalidate the result
        mtimes = self.current_mtimes(project)
        providers = self.scanner(project)
        self.write(project, providers, mtimes)
        return providers
