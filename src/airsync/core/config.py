"""Configuration: env, paths, cache and backup settings."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

from dotenv import load_dotenv

from .utils import warn

CACHE_FILE_NAME = ".aircache.json"
SETTINGS_FILE_NAME = "settings.json"
DEFAULT_MAX_BACKUPS = 5

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class Config:
    claude_dir: Path = field(default_factory=lambda: Path.home() / ".claude")
    cache_file_name: str = CACHE_FILE_NAME
    max_backups: int = DEFAULT_MAX_BACKUPS
    use_cache: bool = True

    @property
    def settings_path(self) -> Path:
        return self.claude_dir / SETTINGS_FILE_NAME


def load_config(
    claude_dir: Path | str | None = None,
    use_cache: bool | None = None,
) -> Config:
    """Load config with priority: CLI args > env > .env > defaults."""
    load_dotenv()

    config = Config()

    if env_dir := os.getenv("AIR_CLAUDE_DIR"):
        config.claude_dir = Path(env_dir).expanduser()
    if os.getenv("AIR_NO_CACHE", "").strip().lower() in _TRUTHY:
        config.use_cache = False
    if env_backups := os.getenv("AIR_MAX_BACKUPS"):
        try:
            config.max_backups = max(0, int(env_backups))
        except ValueError:
            warn(f"ignoring AIR_MAX_BACKUPS={env_backups!r}: not an integer")

    if claude_dir is not None:
        config.claude_dir = Path(claude_dir).expanduser()
    if use_cache is not None:
        config.use_cache = use_cache

    return config
