"""Translation dictionary with a by-length key index.

The dictionary is loaded once per translation run, enriched with single-line
and speaker-name fragments of multi-line entries, and then grows as the
matcher caches fuzzy results.
"""

import json
import logging
from collections import defaultdict

from . import PERSON_NAME_RE
from .project_model import DictionaryFormatError

log = logging.getLogger(__name__)


def load_dictionary_file(path: str) -> dict:
    """Read a flat ``{"original": "translation"}`` JSON file.

    Raises:
        DictionaryFormatError: if the file is not a JSON object of strings.
        OSError: if the file cannot be read.
    """
    with open(path, "r", encoding="utf-8-sig") as f:
        try:
            data = json.load(f)
        except UnicodeDecodeError as exc:
            raise DictionaryFormatError(f"{path}: not UTF-8 ({exc})") from exc
        except json.JSONDecodeError as exc:
            raise DictionaryFormatError(f"{path}: invalid JSON ({exc})") from exc

    if not isinstance(data, dict):
        raise DictionaryFormatError(
            f"{path}: expected a JSON object, got {type(data).__name__}")
    for key, value in data.items():
        if not isinstance(value, str):
            raise DictionaryFormatError(
                f"{path}: value for {key[:40]!r} is not a string")
    return data


def _captures(regex, text: str) -> list:
    """First non-empty capture group of every match (whole match if none)."""
    out = []
    for m in regex.finditer(text):
        groups = [g for g in m.groups() if g]
        out.append(groups[0] if groups else m.group(0))
    return out


class DictionaryIndex:
    """Session-scoped translation dictionary plus its length index.

    Invariants:
      - ``""`` always maps to ``""``.
      - every non-empty key appears exactly once in ``length_index``
        under its length.
      - ``translated`` holds every value, so already-translated text can be
        recognised and left alone.
    """

    def __init__(self, translations: dict, min_split_length: int = 3,
                 split_person_names: bool = True, person_name_re=PERSON_NAME_RE):
        self.translations: dict[str, str] = dict(translations)
        self.translations[""] = ""
        self.translated: set[str] = set(self.translations.values())
        self.translated.add("")
        self.min_split_length = min_split_length
        self._person_name_re = person_name_re

        self._split_lines()
        if split_person_names:
            self._split_person_names()

        self.length_index: dict[int, list[str]] = defaultdict(list)
        for key in self.translations:
            if key:
                self.length_index[len(key)].append(key)

        log.info("Dictionary ready: %d entries (%d loaded)",
                 len(self.translations), len(translations))

    def __contains__(self, key) -> bool:
        return key in self.translations

    def __getitem__(self, key: str) -> str:
        return self.translations[key]

    def __len__(self) -> int:
        return len(self.translations)

    def get(self, key: str, default=None):
        return self.translations.get(key, default)

    def add(self, key: str, value: str) -> bool:
        """Add a new entry and index it. Existing keys are left untouched.

        Returns True if the entry was added.
        """
        if key in self.translations:
            return False
        self.translations[key] = value
        self.translated.add(value)
        if key:
            self.length_index[len(key)].append(key)
        return True

    def lengths_below(self, limit: int) -> list:
        """Indexed key lengths shorter than *limit*, longest first."""
        return sorted((n for n in self.length_index if n < limit), reverse=True)

    # ── Enrichment ────────────────────────────────────────────────

    def _add_derived(self, key: str, value: str):
        if key not in self.translations:
            self.translations[key] = value
            self.translated.add(value)

    def _split_lines(self):
        """Index each line of multi-line entries whose line counts agree."""
        for key, value in list(self.translations.items()):
            if "\n" not in key:
                continue
            key_lines = key.split("\n")
            value_lines = value.split("\n")
            if len(key_lines) != len(value_lines):
                continue
            for k_line, v_line in zip(key_lines, value_lines):
                if not k_line or not v_line:
                    continue
                if len(k_line) <= self.min_split_length:
                    continue  # Skip very short lines
                self._add_derived(k_line, v_line)

    def _split_person_names(self):
        """Index <Name>/【Name】 pairs when key and value have the same count."""
        for key, value in list(self.translations.items()):
            key_names = _captures(self._person_name_re, key)
            if not key_names:
                continue
            value_names = _captures(self._person_name_re, value)
            if len(key_names) != len(value_names):
                continue
            for k_name, v_name in zip(key_names, value_names):
                if k_name and v_name:
                    self._add_derived(k_name, v_name)
