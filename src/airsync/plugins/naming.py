"""Marketplace and plugin key derivation from npm package names."""

from __future__ import annotations

import re

_SEPARATORS = re.compile(r"[\s._/]+")
_DASH_RUNS = re.compile(r"-{2,}")

MARKETPLACE_SUFFIX = "-marketplace"


def unscope(package_name: str) -> str:
    """Fold ``@scope/name`` into ``scope-name``; unscoped names pass through."""
    name = package_name.strip()
    if name.startswith("@") and "/" in name:
        scope, _, rest = name[1:].partition("/")
        return f"{scope}-{rest}"
    return name.lstrip("@")


def kebab_case(value: str) -> str:
    value = _SEPARATORS.sub("-", value).lower()
    value = _DASH_RUNS.sub("-", value)
    return value.strip("-")


def marketplace_key(package_name: str) -> str:
    """``@my-org/my-ai-plugin`` -> ``my-org-my-ai-plugin-marketplace``."""
    base = kebab_case(unscope(package_name))
    if not base:
        raise ValueError(f"cannot derive a marketplace key from {package_name!r}")
    return base + MARKETPLACE_SUFFIX


def plugin_key(plugin_name: str, marketplace: str) -> str:
    return f"{plugin_name}@{marketplace}"


def split_plugin_key(key: str) -> tuple[str, str]:
    """Split ``name@marketplace`` on the last ``@``."""
    if "@" not in key:
        return key, ""
    name, _, marketplace = key.rpartition("@")
    return name, marketplace
