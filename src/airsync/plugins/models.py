"""Plugin data models: PluginSpec, Declaration, PluginProvider, PluginState, ChangeReport."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .naming import marketplace_key

UNKNOWN_VERSION = "unknown"


class PluginStatus(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    NOT_INSTALLED = "not-installed"


class DeclarationShape(str, Enum):
    SINGLE = "single"  # .claude-plugin/plugin.json style
    MARKETPLACE = "marketplace"  # name + owner + plugins[]


@dataclass(frozen=True)
class PluginSpec:
    """One normalized (name, source, version, description) tuple."""

    name: str
    source: str
    version: str = UNKNOWN_VERSION
    description: str = ""


@dataclass
class Declaration:
    """A parsed plugin declaration, already flattened into PluginSpecs."""

    name: str
    shape: DeclarationShape
    plugins: list[PluginSpec] = field(default_factory=list)
    raw: dict[str, Any] = field(default_factory=dict)
    owner: dict[str, Any] = field(default_factory=dict)


@dataclass
class PluginProvider:
    """An npm dependency that ships a plugin declaration."""

    package_name: str
    version: str
    path: str
    declaration: Declaration

    @property
    def marketplace(self) -> str:
        return marketplace_key(self.package_name)

    def to_dict(self) -> dict[str, Any]:
        return {
            "packageName": self.package_name,
            "version": self.version,
            "path": self.path,
            "declaration": self.declaration.raw,
        }


@dataclass
class PluginState:
    """Display record for one declared or configured plugin."""

    name: str
    status: PluginStatus
    source: str
    version: str
    description: str
    marketplace: str


@dataclass
class ChangeReport:
    added: list[str] = field(default_factory=list)
    updated: list[str] = field(default_factory=list)
    written: bool = False
    # provider of each name in `added`, same order
    added_from: list[PluginProvider] = field(default_factory=list, repr=False, compare=False)

    @property
    def changed(self) -> bool:
        return bool(self.added or self.updated)
