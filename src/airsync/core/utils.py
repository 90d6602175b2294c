"""File helpers: atomic JSON writes, mtimes, warnings, path display."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape

err_console = Console(stderr=True, soft_wrap=True)


def warn(message: str) -> None:
    """Print a recoverable warning to stderr."""
    err_console.print(f"[yellow]warning:[/yellow] {escape(message)}")


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"


def atomic_write_bytes(path: Path, content: bytes) -> None:
    """Write *content* to a temp file beside *path*, then rename over it.

    Readers see either the old file or the new one, never a partial write.
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}-", suffix=".tmp")
    closed = False
    try:
        os.write(fd, content)
        os.fsync(fd)
        os.close(fd)
        closed = True
        os.replace(tmp_path, path)
    except BaseException:
        if not closed:
            os.close(fd)
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


def atomic_write_json(path: Path, data: Any) -> None:
    atomic_write_bytes(path, dump_json(data).encode("utf-8"))


def file_mtime_ms(path: Path) -> float:
    """mtime in milliseconds at nanosecond resolution; 0 when the file is absent."""
    try:
        return path.stat().st_mtime_ns / 1_000_000
    except FileNotFoundError:
        return 0


def plural(count: int, word: str) -> str:
    return f"{count} {word}" if count == 1 else f"{count} {word}s"


def short_cwd(p: Path) -> str:
    """Return path relative to home directory, using ~ prefix."""
    try:
        rel = p.relative_to(Path.home())
        return f"~/{rel}" if str(rel) != "." else "~"
    except ValueError:
        return str(p)
