"""Concurrent syncs from separate processes against one settings file."""

import json
from concurrent.futures import ProcessPoolExecutor

from airsync.plugins.cache import CacheManager
from airsync.plugins.settings import update_settings

RUNS = 20


def _sync(project_root: str, settings_path: str) -> int:
    providers = CacheManager().get_providers(project_root)
    report = update_settings(settings_path, providers)
    return len(report.added)


def _projects(make_project):
    roots = []
    for i in range(3):
        project = make_project(f"proj-{i}")
        project.manifest(["shared-plugin", f"own-plugin-{i}"])
        project.plugin_package("shared-plugin", "Shared", version=f"{i}.0.0")
        project.plugin_package(f"own-plugin-{i}", f"Own{i}")
        roots.append(str(project.root))
    return roots


class TestConcurrentSync:
    def test_many_writers_keep_file_valid(self, make_project, settings_path):
        roots = _projects(make_project)
        settings_path.parent.mkdir(parents=True)

        with ProcessPoolExecutor(max_workers=8) as pool:
            futures = [
                pool.submit(_sync, roots[i % len(roots)], str(settings_path)) for i in range(RUNS)
            ]
            results = [f.result() for f in futures]

        assert len(results) == RUNS
        settings = json.loads(settings_path.read_text())
        enabled = settings["plugins"]["enabled"]
        disabled = settings["plugins"]["disabled"]
        assert isinstance(settings["plugins"]["marketplaces"], dict)
        assert len(set(enabled)) == len(enabled)
        assert len(set(disabled)) == len(disabled)
        assert "Shared@shared-plugin-marketplace" in enabled
        assert not list(settings_path.parent.glob("*.tmp"))

    def test_followup_sync_converges(self, make_project, settings_path):
        roots = _projects(make_project)
        settings_path.parent.mkdir(parents=True)

        with ProcessPoolExecutor(max_workers=4) as pool:
            list(pool.map(_sync, roots, [str(settings_path)] * len(roots)))
        for root in roots:
            _sync(root, str(settings_path))

        enabled = json.loads(settings_path.read_text())["plugins"]["enabled"]
        assert sorted(enabled) == sorted(
            ["Shared@shared-plugin-marketplace"]
            + [f"Own{i}@own-plugin-{i}-marketplace" for i in range(3)]
        )

    def test_disabled_survives_concurrent_syncs(self, make_project, settings_path):
        roots = _projects(make_project)
        settings_path.parent.mkdir(parents=True)
        settings_path.write_text(
            json.dumps(
                {
                    "plugins": {
                        "enabled": [],
                        "disabled": ["Shared@shared-plugin-marketplace"],
                        "marketplaces": {},
                    }
                }
            )
        )

        with ProcessPoolExecutor(max_workers=8) as pool:
            list(pool.map(_sync, roots * 4, [str(settings_path)] * (len(roots) * 4)))

        plugins = json.loads(settings_path.read_text())["plugins"]
        assert "Shared@shared-plugin-marketplace" not in plugins["enabled"]
        assert plugins["disabled"] == ["Shared@shared-plugin-marketplace"]
