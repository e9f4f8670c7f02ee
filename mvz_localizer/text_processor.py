"""Dictionary-driven text matcher.

Translates arbitrary game strings against a DictionaryIndex, tier by tier:
exact match, per-line, trimmed, then escape-aware greedy substring
replacement.  Escape codes (\\V[1], \\C[2], \\{...}) are never touched.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional

from . import ESCAPE_RE, LEADING_SPACES_RE, PERSON_NAME_RE, TRAILING_SPACES_RE
from .dictionary_index import DictionaryIndex, load_dictionary_file
from .settings import LocalizerSettings

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatcherPatterns:
    """Regex tables the matcher works with; swap them to retarget engines."""
    escape: re.Pattern = ESCAPE_RE
    person_name: re.Pattern = PERSON_NAME_RE
    leading_spaces: re.Pattern = LEADING_SPACES_RE
    trailing_spaces: re.Pattern = TRAILING_SPACES_RE


class TranslatorSession:
    """One translation run: owns the dictionary, its index and the cache.

    Not thread-safe: caching mutates the dictionary, so use one session per
    thread and process files sequentially.
    """

    def __init__(self, translations: dict,
                 settings: Optional[LocalizerSettings] = None,
                 patterns: MatcherPatterns = MatcherPatterns()):
        self.settings = settings or LocalizerSettings()
        self.patterns = patterns
        self.index = DictionaryIndex(
            translations,
            min_split_length=self.settings.min_split_length,
            split_person_names=self.settings.split_person_names,
            person_name_re=patterns.person_name,
        )
        self.cached_count = 0

    @classmethod
    def from_file(cls, path: str, settings: Optional[LocalizerSettings] = None,
                  patterns: MatcherPatterns = MatcherPatterns()) -> "TranslatorSession":
        """Build a session from a translation JSON file.

        Raises DictionaryFormatError for malformed dictionaries.
        """
        return cls(load_dictionary_file(path), settings=settings, patterns=patterns)

    # ── Public API ────────────────────────────────────────────────

    def translate(self, text, preserve_leading_whitespace: bool = True,
                  max_replacements: Optional[int] = None,
                  allow_caching: Optional[bool] = None,
                  direct_match: bool = False):
        """Translate *text*, returning it unchanged when nothing applies.

        Args:
            text: Any value; only non-empty strings are translated.
            preserve_leading_whitespace: Match without leading whitespace and
                put it back afterwards.
            max_replacements: Stop substring replacement after this many keys
                (None = unlimited).  Comments use 1.
            allow_caching: Store fuzzy results in the dictionary
                (None = use the session setting).
            direct_match: Only exact/trimmed matches, no substring replacement.
        """
        if not isinstance(text, str) or not text:
            return text
        index = self.index
        if text in index.translated:
            return text
        if text in index:
            return index[text]
        if allow_caching is None:
            allow_caching = self.settings.allow_caching

        if "\n" in text:
            tokens = [m for m in self.patterns.escape.finditer(text)
                      if "\n" in m.group(0)]
            if tokens:
                # Escape tokens spanning lines stay whole; text around them
                # goes through the tiers on its own.
                parts = []
                pos = 0
                for m in tokens:
                    parts.append(self.translate(
                        text[pos:m.start()], preserve_leading_whitespace,
                        max_replacements, allow_caching, direct_match))
                    parts.append(m.group(0))
                    pos = m.end()
                parts.append(self.translate(
                    text[pos:], preserve_leading_whitespace,
                    max_replacements, allow_caching, direct_match))
                return "".join(parts)
            return "\n".join(
                self.translate(line, preserve_leading_whitespace,
                               max_replacements, allow_caching, direct_match)
                for line in text.split("\n")
            )

        leading = ""
        if preserve_leading_whitespace:
            m = self.patterns.leading_spaces.match(text)
            if m:
                leading = m.group(0)
                text = text[len(leading):]
                if not text or text in index.translated:
                    return leading + text
                if text in index:
                    return leading + index[text]

        m = self.patterns.trailing_spaces.search(text)
        if m and m.start() > 0:
            trimmed = text[:m.start()]
            if trimmed in index:
                return leading + index[trimmed] + m.group(0)

        if direct_match:
            return leading + text

        return leading + self._translate_segments(
            text, max_replacements, allow_caching)

    # ── Private ───────────────────────────────────────────────────

    def _translate_segments(self, text: str, max_replacements: Optional[int],
                            allow_caching: bool) -> str:
        """Translate literal runs between escape codes, keeping codes as-is."""
        parts = []
        pos = 0
        for m in self.patterns.escape.finditer(text):
            parts.append(self._translate_literal(
                text[pos:m.start()], max_replacements, allow_caching))
            parts.append(m.group(0))
            pos = m.end()
        parts.append(self._translate_literal(
            text[pos:], max_replacements, allow_caching))
        return "".join(parts)

    def _translate_literal(self, segment: str, max_replacements: Optional[int],
                           allow_caching: bool) -> str:
        """Greedy longest-key-first substring replacement on one segment."""
        if not segment:
            return segment
        index = self.index
        if segment in index:
            return index[segment]
        if segment in index.translated:
            return segment

        result = segment
        count = 0
        done = False
        for length in index.lengths_below(len(segment)):
            for key in index.length_index[length]:
                if key in result:
                    result = result.replace(key, index[key])
                    count += 1
                    if max_replacements is not None and count >= max_replacements:
                        done = True
                        break
            if done:
                break

        if result != segment:
            if allow_caching and index.add(segment, result):
                self.cached_count += 1
            else:
                index.translated.add(result)
        return result
