"""Reconcile discovered providers with the plugins section of a settings document."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field

from .models import ChangeReport, PluginProvider, PluginState, PluginStatus
from .naming import plugin_key, split_plugin_key

SOURCE_TYPE = "directory"
NOT_FOUND = "(not found)"


@dataclass
class Reconciliation:
    settings: dict
    report: ChangeReport = field(default_factory=ChangeReport)


def _as_dict(value) -> dict:
    return value if isinstance(value, dict) else {}


def reconcile(providers: list[PluginProvider], settings: dict) -> Reconciliation:
    """Compute the next settings document for *providers*.

    *settings* must already be normalized (see ``settings.normalize_settings``)
    and is not modified. Rules:

    - every declared plugin gets ``marketplaces[key].plugins[name] = {version, source}``
    - keys in ``disabled`` keep their membership; metadata still tracks the latest scan
    - unknown keys go to the end of ``enabled`` and are reported as added
    - enabled keys whose version, source, or marketplace path moved are reported as updated
    """
    next_settings = copy.deepcopy(settings)
    section = next_settings["plugins"]
    enabled: list[str] = section["enabled"]
    disabled: list[str] = section["disabled"]
    marketplaces: dict = section["marketplaces"]

    # per marketplace key: (plugin records before this sync, source path before this sync)
    prior: dict[str, tuple[dict, object]] = {}

    # metadata first; providers sharing a key resolve last-wins
    for provider in providers:
        mkey = provider.marketplace
        entry = _as_dict(marketplaces.get(mkey))
        if mkey not in prior:
            old_source = _as_dict(entry.get("source"))
            prior[mkey] = (_as_dict(entry.get("plugins")), old_source.get("path"))
            entry["source"] = {**old_source, "type": SOURCE_TYPE, "path": provider.path}
            entry["plugins"] = {}
        else:
            entry["source"]["path"] = provider.path
        marketplaces[mkey] = entry

        old_plugins = prior[mkey][0]
        for spec in provider.declaration.plugins:
            old = old_plugins.get(spec.name)
            record = dict(old) if isinstance(old, dict) else {}
            record["version"] = spec.version
            record["source"] = spec.source
            entry["plugins"][spec.name] = record

    enabled_set = set(enabled)
    disabled_set = set(disabled)
    report = ChangeReport()
    seen: set[str] = set()

    for provider in providers:
        mkey = provider.marketplace
        entry = marketplaces[mkey]
        old_plugins, old_path = prior[mkey]
        moved = old_path != entry["source"]["path"]

        for spec in provider.declaration.plugins:
            key = plugin_key(spec.name, mkey)
            if key in seen:
                continue
            seen.add(key)

            if key in disabled_set:
                continue
            if key not in enabled_set:
                enabled.append(key)
                enabled_set.add(key)
                report.added.append(spec.name)
                report.added_from.append(provider)
                continue

            old = old_plugins.get(spec.name)
            new = entry["plugins"][spec.name]
            if (
                moved
                or not isinstance(old, dict)
                or old.get("version") != new["version"]
                or old.get("source") != new["source"]
            ):
                report.updated.append(spec.name)

    return Reconciliation(settings=next_settings, report=report)


def get_plugin_state(plugin_name: str, marketplace: str, settings: dict) -> PluginStatus:
    key = plugin_key(plugin_name, marketplace)
    section = _as_dict(settings.get("plugins"))
    if key in (section.get("enabled") or []):
        return PluginStatus.ENABLED
    if key in (section.get("disabled") or []):
        return PluginStatus.DISABLED
    return PluginStatus.NOT_INSTALLED


def get_plugin_states(providers: list[PluginProvider], settings: dict) -> list[PluginState]:
    """One PluginState per declared plugin, in provider then declaration order."""
    states: list[PluginState] = []
    for provider in providers:
        mkey = provider.marketplace
        for spec in provider.declaration.plugins:
            states.append(
                PluginState(
                    name=spec.name,
                    status=get_plugin_state(spec.name, mkey, settings),
                    source=spec.source,
                    version=spec.version,
                    description=spec.description,
                    marketplace=mkey,
                )
            )
    return states


def list_configured_plugins(settings: dict) -> list[PluginState]:
    """States for every key in ``enabled`` then ``disabled``, each key once."""
    section = _as_dict(settings.get("plugins"))
    enabled = set(section.get("enabled") or [])
    marketplaces = _as_dict(section.get("marketplaces"))

    states: list[PluginState] = []
    seen: set[str] = set()
    for key in [*(section.get("enabled") or []), *(section.get("disabled") or [])]:
        if not isinstance(key, str) or key in seen:
            continue
        seen.add(key)
        name, mkey = split_plugin_key(key)
        entry = _as_dict(marketplaces.get(mkey))
        record = _as_dict(_as_dict(entry.get("plugins")).get(name))
        states.append(
            PluginState(
                name=key,
                status=PluginStatus.ENABLED if key in enabled else PluginStatus.DISABLED,
                source=_as_dict(entry.get("source")).get("path") or NOT_FOUND,
                version=str(record.get("version", "")),
                description="",
                marketplace=mkey,
            )
        )
    return states
