"""Data model for game data files and plugin translation targets."""

import os
from dataclasses import dataclass, field


class LocalizerError(Exception):
    """Base class for errors raised by the localizer."""


class DictionaryFormatError(LocalizerError):
    """The translation dictionary is not a flat JSON object of strings."""


class PluginsConfigError(LocalizerError):
    """plugins.js has no usable ``var $plugins = [...]`` literal."""


@dataclass
class GameDataFile:
    """One JSON file in the game's data/ folder."""
    path: str              # Absolute or project-relative path to the file
    is_done: bool = False  # Set once translation and write-back succeed

    @property
    def name(self) -> str:
        """File name without directories, e.g. "Map001.json"."""
        return os.path.basename(self.path)


@dataclass(frozen=True)
class TranslateTarget:
    """A translatable field of a plugin's parameter object in plugins.js.

    ``kind`` is "string" for a plain text parameter, or "array" when the
    parameter holds a JSON-encoded array of JSON-encoded objects, in which
    case only ``sub_targets`` fields of each object are translated.
    """
    name: str
    sub_targets: tuple = field(default_factory=tuple)
    kind: str = "string"   # "string" | "array"

    @classmethod
    def array(cls, name: str, sub_targets) -> "TranslateTarget":
        return cls(name=name, sub_targets=tuple(sub_targets), kind="array")

    @property
    def is_array(self) -> bool:
        return self.kind == "array"
