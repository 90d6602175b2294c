"""Exception types raised by the discovery and settings pipeline."""

from __future__ import annotations


class AirError(Exception):
    """Base class for errors that should stop a command."""


class ManifestError(AirError, ValueError):
    """The project's package.json exists but cannot be parsed."""


class DeclarationError(AirError, ValueError):
    """A plugin declaration is malformed or misses required fields."""

    def __init__(self, path, errors: list[str]):
        self.path = path
        self.errors = list(errors)
        super().__init__(f"invalid plugin declaration at {path}: " + "; ".join(self.errors))
