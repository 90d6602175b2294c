"""Tests for utils: atomic writes, mtimes, plural, short_cwd."""

import json
import os
from pathlib import Path
from unittest.mock import patch

import pytest

from airsync.core.utils import (
    atomic_write_bytes,
    atomic_write_json,
    dump_json,
    file_mtime_ms,
    plural,
    short_cwd,
)


class TestAtomicWrite:
    def test_creates_parents(self, tmp_path):
        target = tmp_path / "a" / "b" / "file.json"
        atomic_write_json(target, {"x": 1})
        assert json.loads(target.read_text()) == {"x": 1}

    def test_replaces_existing(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("old")
        atomic_write_bytes(target, b"new")
        assert target.read_text() == "new"

    def test_no_temp_files_left(self, tmp_path):
        atomic_write_bytes(tmp_path / "file.txt", b"data")
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    def test_failure_keeps_original(self, tmp_path):
        target = tmp_path / "file.txt"
        target.write_text("original")
        with patch("airsync.core.utils.os.replace", side_effect=OSError("boom")):
            with pytest.raises(OSError, match="boom"):
                atomic_write_bytes(target, b"new")
        assert target.read_text() == "original"
        assert [p.name for p in tmp_path.iterdir()] == ["file.txt"]

    def test_dump_json_format(self):
        assert dump_json({"a": [1]}) == '{\n  "a": [\n    1\n  ]\n}\n'
        assert dump_json({"n": "café"}) == '{\n  "n": "café"\n}\n'


class TestFileMtime:
    def test_missing_is_zero(self, tmp_path):
        assert file_mtime_ms(tmp_path / "nope") == 0

    def test_milliseconds(self, tmp_path):
        f = tmp_path / "f"
        f.touch()
        os.utime(f, ns=(1_700_000_000_123_000_000, 1_700_000_000_123_000_000))
        assert file_mtime_ms(f) == 1_700_000_000_123.0


class TestPlural:
    def test_singular(self):
        assert plural(1, "plugin") == "1 plugin"

    def test_plural(self):
        assert plural(0, "plugin") == "0 plugins"
        assert plural(3, "marketplace") == "3 marketplaces"


class TestShortCwd:
    def test_home_itself(self):
        assert short_cwd(Path.home()) == "~"

    def test_under_home(self):
        assert short_cwd(Path.home() / "projects" / "x") == "~/projects/x"

    def test_outside_home(self, tmp_path):
        with patch("airsync.core.utils.Path.home", return_value=tmp_path / "home"):
            assert short_cwd(Path("/opt/thing")) == "/opt/thing"
