"""base_test.py - shared TestCase with a throwaway game folder."""

import json
import os
import shutil
import sys
import tempfile
import unittest
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))
from mvz_localizer.settings import LocalizerSettings
from mvz_localizer.text_processor import TranslatorSession


class BaseTestCase(unittest.TestCase):
    """Creates a temp dir per test and helpers to lay out a game in it."""

    def setUp(self):
        self.tmp = tempfile.mkdtemp(prefix="mvz_test_")

    def tearDown(self):
        shutil.rmtree(self.tmp, ignore_errors=True)

    @staticmethod
    def session(translations: dict, **settings) -> TranslatorSession:
        return TranslatorSession(translations, settings=LocalizerSettings(**settings))

    def path(self, *parts) -> str:
        return os.path.join(self.tmp, *parts)

    def write_json(self, data, *parts, encoding="utf-8") -> str:
        path = self.path(*parts)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding=encoding) as f:
            json.dump(data, f, ensure_ascii=False)
        return path

    def write_text(self, text: str, *parts, encoding="utf-8") -> str:
        path = self.path(*parts)
        os.makedirs(os.path.dirname(path), exist_ok=True)
        with open(path, "w", encoding=encoding) as f:
            f.write(text)
        return path

    def read_text(self, *parts) -> str:
        with open(self.path(*parts), "r", encoding="utf-8") as f:
            return f.read()

    def read_json(self, *parts):
        return json.loads(self.read_text(*parts))
