"""Dependency scanner: find plugin providers among a project's direct dependencies."""

from __future__ import annotations

import json
from pathlib import Path

from airsync.core.utils import warn
from airsync.errors import DeclarationError, ManifestError

from .declaration import find_declaration, parse_declaration
from .models import UNKNOWN_VERSION, PluginProvider

MANIFEST_NAME = "package.json"
LOCKFILE_NAME = "package-lock.json"
NODE_MODULES = "node_modules"


def read_dependency_names(project: Path) -> list[str]:
    """Names from the manifest's ``dependencies`` map, in declaration order.

    A missing manifest yields ``[]``; an unparsable one raises ManifestError.
    """
    manifest = project / MANIFEST_NAME
    try:
        raw = manifest.read_bytes()
    except FileNotFoundError:
        return []
    try:
        data = json.loads(raw.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise ManifestError(f"failed to parse {manifest}: invalid JSON ({e})") from e
    if not isinstance(data, dict):
        raise ManifestError(f"failed to parse {manifest}: JSON root is not an object")

    deps = data.get("dependencies")
    if not isinstance(deps, dict):
        return []
    return [name for name in deps if isinstance(name, str) and name]


def resolve_package_dir(project: Path, name: str) -> Path | None:
    """Locate ``node_modules/<name>`` following symlinks; None if unavailable."""
    parts = name.split("/")
    if len(parts) > 2 or (len(parts) == 2 and not parts[0].startswith("@")):
        return None
    if any(p in ("", ".", "..") for p in parts):
        return None
    candidate = project.joinpath(NODE_MODULES, *parts)
    try:
        resolved = candidate.resolve(strict=True)
    except (OSError, RuntimeError):
        return None
    return resolved if resolved.is_dir() else None


def _read_package_meta(package_dir: Path, fallback_name: str) -> tuple[str, str]:
    name, version = fallback_name, UNKNOWN_VERSION
    meta_path = package_dir / MANIFEST_NAME
    if not meta_path.exists():
        return name, version
    try:
        meta = json.loads(meta_path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError, OSError) as e:
        warn(f"could not read {meta_path}: {e}")
        return name, version
    if isinstance(meta, dict):
        if isinstance(meta.get("name"), str) and meta["name"]:
            name = meta["name"]
        if isinstance(meta.get("version"), str) and meta["version"]:
            version = meta["version"]
    return name, version


def scan_package(package_dir: Path, dependency_name: str) -> PluginProvider | None:
    """Build a provider for one resolved package, or None if it declares nothing.

    Raises DeclarationError for a malformed declaration.
    """
    decl_path = find_declaration(package_dir)
    if decl_path is None:
        return None
    declaration = parse_declaration(decl_path)
    package_name, version = _read_package_meta(package_dir, dependency_name)
    return PluginProvider(
        package_name=package_name,
        version=version,
        path=str(package_dir),
        declaration=declaration,
    )


def scan_dependencies(project: Path | str) -> list[PluginProvider]:
    """Scan direct dependencies of *project* for plugin declarations.

    Providers come back in manifest order. Missing packages, packages without
    a declaration, and malformed declarations are skipped; only an unparsable
    project manifest is fatal.
    """
    project = Path(project).resolve()
    providers: list[PluginProvider] = []

    for name in read_dependency_names(project):
        package_dir = resolve_package_dir(project, name)
        if package_dir is None:
            continue
        try:
            provider = scan_package(package_dir, name)
        except (DeclarationError, OSError) as e:
            warn(f"skipping {name}: {e}")
            continue
        # the directory may have vanished while we were reading it
        if provider is None or not package_dir.is_dir():
            continue
        providers.append(provider)

    return providers
