"""Persistent localizer settings (``_settings.json``)."""

import json
import logging
import os
from dataclasses import dataclass, field

from . import whitelists
from .project_model import TranslateTarget

log = logging.getLogger(__name__)

# Settings file lives next to main.py
DEFAULT_SETTINGS_FILE = os.path.join(
    os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "_settings.json")


@dataclass
class LocalizerSettings:
    """Tunables for one translation run plus user additions to the whitelists."""
    min_split_length: int = 3        # Multi-line keys: only index lines longer than this
    split_person_names: bool = True  # Index <Name>/【Name】 pairs found in keys
    allow_caching: bool = True       # Cache fuzzy results back into the dictionary
    translate_plugins: bool = True   # Also patch js/plugins.js
    note_tags: tuple = whitelists.NOTE_TAGS
    plugin_array_whitelist: list = field(default_factory=list)
    plugin_object_whitelist: dict = field(default_factory=dict)
    plugins_js_whitelist: dict = field(default_factory=dict)

    # ── Merged tables ─────────────────────────────────────────────

    def array_whitelist(self) -> frozenset:
        return whitelists.PLUGIN_ARRAY_WHITELIST | frozenset(self.plugin_array_whitelist)

    def object_whitelist(self) -> dict:
        merged = dict(whitelists.PLUGIN_OBJECT_WHITELIST)
        for plugin, keys in self.plugin_object_whitelist.items():
            merged[plugin] = tuple(keys)
        return merged

    def plugins_whitelist(self) -> dict:
        """Built-in plugins.js table overlaid with user entries.

        A user entry is a list of field names and/or
        ``{"name": ..., "sub_targets": [...]}`` objects for array fields.
        """
        merged = dict(whitelists.PLUGINS_JS_WHITELIST)
        for plugin, raw_targets in self.plugins_js_whitelist.items():
            targets = []
            for raw in raw_targets:
                if isinstance(raw, str):
                    targets.append(TranslateTarget(raw))
                elif isinstance(raw, dict) and raw.get("name"):
                    subs = raw.get("sub_targets") or []
                    if subs:
                        targets.append(TranslateTarget.array(raw["name"], subs))
                    else:
                        targets.append(TranslateTarget(raw["name"]))
                else:
                    log.warning("Ignoring malformed plugins.js target for %s: %r",
                                plugin, raw)
            merged[plugin] = tuple(targets)
        return merged


def load_settings(path: str = DEFAULT_SETTINGS_FILE) -> LocalizerSettings:
    """Load settings from *path*; missing or unreadable files give defaults."""
    settings = LocalizerSettings()
    try:
        with open(path, "r", encoding="utf-8") as f:
            cfg = json.load(f)
    except FileNotFoundError:
        return settings  # No saved settings, use defaults
    except (json.JSONDecodeError, OSError) as exc:
        log.warning("Could not read settings from %s: %s", path, exc)
        return settings

    if not isinstance(cfg, dict):
        log.warning("Settings file %s is not a JSON object, using defaults", path)
        return settings

    if "min_split_length" in cfg:
        try:
            settings.min_split_length = int(cfg["min_split_length"])
        except (ValueError, TypeError):
            log.warning("Ignoring invalid min_split_length: %r", cfg["min_split_length"])
    if "split_person_names" in cfg:
        settings.split_person_names = bool(cfg["split_person_names"])
    if "allow_caching" in cfg:
        settings.allow_caching = bool(cfg["allow_caching"])
    if "translate_plugins" in cfg:
        settings.translate_plugins = bool(cfg["translate_plugins"])
    if "note_tags" in cfg and isinstance(cfg["note_tags"], list):
        settings.note_tags = tuple(cfg["note_tags"])
    if "plugin_array_whitelist" in cfg and isinstance(cfg["plugin_array_whitelist"], list):
        settings.plugin_array_whitelist = cfg["plugin_array_whitelist"]
    if "plugin_object_whitelist" in cfg and isinstance(cfg["plugin_object_whitelist"], dict):
        settings.plugin_object_whitelist = cfg["plugin_object_whitelist"]
    if "plugins_js_whitelist" in cfg and isinstance(cfg["plugins_js_whitelist"], dict):
        settings.plugins_js_whitelist = cfg["plugins_js_whitelist"]
    return settings


def save_settings(settings: LocalizerSettings, path: str = DEFAULT_SETTINGS_FILE):
    """Persist *settings* to *path*."""
    cfg = {
        "min_split_length": settings.min_split_length,
        "split_person_names": settings.split_person_names,
        "allow_caching": settings.allow_caching,
        "translate_plugins": settings.translate_plugins,
        "note_tags": list(settings.note_tags),
        "plugin_array_whitelist": settings.plugin_array_whitelist,
        "plugin_object_whitelist": settings.plugin_object_whitelist,
        "plugins_js_whitelist": settings.plugins_js_whitelist,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(cfg, f, ensure_ascii=False, indent=2)
