"""Plugin declaration files: probing, validation, and normalization.

A package declares plugins in one of two shapes:

- ``.claude-plugin/marketplace.json``: ``{name, owner, plugins: [{name, source, ...}]}``
- ``.claude-plugin/plugin.json``: ``{name, version, description, source | skillPath}``

Both are resolved at parse time into a ``Declaration`` carrying a flat list of
``PluginSpec`` tuples, so merge logic never looks at the raw shape again.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from airsync.core.utils import warn
from airsync.errors import DeclarationError

from .models import UNKNOWN_VERSION, Declaration, DeclarationShape, PluginSpec

DECLARATION_DIR = ".claude-plugin"
DECLARATION_FILES = ("marketplace.json", "plugin.json")

_SINGLE_REQUIRED = ("name", "version", "description")


def find_declaration(package_dir: Path) -> Path | None:
    """Return the first declaration file present in *package_dir*."""
    for filename in DECLARATION_FILES:
        p = package_dir / DECLARATION_DIR / filename
        if p.is_file():
            return p
    return None


def source_to_string(source: Any) -> str:
    if isinstance(source, str):
        return source
    if isinstance(source, dict):
        kind = source.get("source", "")
        if kind == "github":
            ref = source.get("ref", "")
            return f"github:{source.get('repo', '')}" + (f"#{ref}" if ref else "")
        if kind == "url":
            return source.get("url", "")
    return json.dumps(source, separators=(",", ":"), sort_keys=True)


def detect_shape(data: dict) -> DeclarationShape:
    if isinstance(data.get("plugins"), list):
        return DeclarationShape.MARKETPLACE
    return DeclarationShape.SINGLE


def _is_filled(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def validate_declaration(data: Any) -> list[str]:
    """Return a list of problems with *data*; empty means valid."""
    errors: list[str] = []
    if not isinstance(data, dict):
        return ["declaration must be a JSON object"]

    if not _is_filled(data.get("name")):
        errors.append("missing required field 'name'")

    if detect_shape(data) is DeclarationShape.MARKETPLACE:
        owner = data.get("owner")
        if owner is not None and not isinstance(owner, (dict, str)):
            errors.append("'owner' must be an object")
        return errors

    if "plugins" in data:
        errors.append("'plugins' must be a list")
    for key in _SINGLE_REQUIRED[1:]:
        if not _is_filled(data.get(key)):
            errors.append(f"missing required field '{key}'")
    source = data.get("source")
    if not (_is_filled(source) or isinstance(source, dict) or _is_filled(data.get("skillPath"))):
        errors.append("missing required field 'source' or 'skillPath'")
    return errors


def _marketplace_specs(data: dict, origin: str, quiet: bool) -> list[PluginSpec]:
    specs: list[PluginSpec] = []
    for i, entry in enumerate(data["plugins"]):
        if not isinstance(entry, dict):
            if not quiet:
                warn(f"{origin}: plugins[{i}] is not an object, skipped")
            continue
        pname = entry.get("name", "")
        if not _is_filled(pname):
            if not quiet:
                warn(f"{origin}: plugins[{i}] has no name, skipped")
            continue
        specs.append(
            PluginSpec(
                name=pname,
                source=source_to_string(entry.get("source", "")),
                version=str(entry.get("version") or UNKNOWN_VERSION),
                description=str(entry.get("description") or ""),
            )
        )
    return specs


def normalize_declaration(
    data: Any, origin: str = "<declaration>", quiet: bool = False
) -> Declaration:
    """Validate *data* and flatten it into a Declaration.

    Raises DeclarationError when required fields are missing.
    """
    errors = validate_declaration(data)
    if errors:
        raise DeclarationError(origin, errors)

    shape = detect_shape(data)
    if shape is DeclarationShape.MARKETPLACE:
        plugins = _marketplace_specs(data, origin, quiet)
    else:
        source = data.get("source") or data.get("skillPath")
        plugins = [
            PluginSpec(
                name=data["name"],
                source=source_to_string(source),
                version=data["version"],
                description=data["description"],
            )
        ]

    owner = data.get("owner")
    if isinstance(owner, str):
        owner = {"name": owner}
    return Declaration(
        name=data["name"],
        shape=shape,
        plugins=plugins,
        raw=data,
        owner=owner or {},
    )


def parse_declaration(path: Path) -> Declaration:
    """Read and normalize a declaration file.

    Raises DeclarationError for malformed JSON or schema problems; OSError
    from reading propagates.
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise DeclarationError(path, [f"malformed JSON: {e}"]) from e
    return normalize_declaration(data, str(path))
