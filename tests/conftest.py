"""Shared fixtures: fake npm projects with plugin-declaring dependencies."""

import json
import os
from pathlib import Path

import pytest


def write_json(path: Path, data) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    return path


def set_mtime_ns(path: Path, ns: int) -> None:
    os.utime(path, ns=(ns, ns))


class Project:
    """A throwaway npm project rooted at *root*."""

    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    @property
    def node_modules(self) -> Path:
        return self.root / "node_modules"

    def manifest(self, dependencies: list[str] | dict | None = None, **extra) -> Path:
        data = {"name": self.root.name, "version": "1.0.0", **extra}
        if dependencies is not None:
            if isinstance(dependencies, list):
                dependencies = {name: "1.0.0" for name in dependencies}
            data["dependencies"] = dependencies
        return write_json(self.root / "package.json", data)

    def package(
        self,
        package_name: str,
        plugins: list[dict] | None = None,
        version: str = "1.0.0",
        single: dict | None = None,
    ) -> Path:
        """Create node_modules/<package_name> with a marketplace (or single plugin) declaration."""
        pkg_dir = self.node_modules.joinpath(*package_name.split("/"))
        write_json(pkg_dir / "package.json", {"name": package_name, "version": version})
        if single is not None:
            write_json(pkg_dir / ".claude-plugin" / "plugin.json", single)
        else:
            declaration = {
                "name": package_name.lstrip("@").replace("/", "-") + "-marketplace",
                "owner": {"name": "Test Owner"},
                "plugins": plugins if plugins is not None else [],
            }
            write_json(pkg_dir / ".claude-plugin" / "marketplace.json", declaration)
        return pkg_dir

    def plugin_package(
        self, package_name: str, plugin_name: str, version: str = "1.0.0", **fields
    ) -> Path:
        entry = {
            "name": plugin_name,
            "source": "./",
            "version": version,
            "description": f"{plugin_name} description",
            **fields,
        }
        return self.package(package_name, [entry], version=version)


@pytest.fixture
def project(tmp_path):
    return Project(tmp_path / "project")


@pytest.fixture
def make_project(tmp_path):
    def _make(name: str) -> Project:
        return Project(tmp_path / name)

    return _make


@pytest.fixture
def settings_path(tmp_path):
    return tmp_path / "home" / ".claude" / "settings.json"


@pytest.fixture
def read_json():
    def _read(path: Path):
        return json.loads(Path(path).read_text())

    return _read
