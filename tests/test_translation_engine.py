"""Background worker: a full pass over a game folder."""

import unittest

from PyQt6.QtCore import QCoreApplication, QEventLoop, QTimer

from base_test import BaseTestCase
from mvz_localizer.project_model import GameDataFile
from mvz_localizer.rpgmaker_mv import RPGMakerMVTranslator
from mvz_localizer.settings import LocalizerSettings
from mvz_localizer.translation_engine import TranslationEngine, TranslationWorker


class TestTranslationWorker(BaseTestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def setUp(self):
        super().setUp()
        self.dict_path = self.write_json(
            {"はい": "Yes", "購入": "Buy", "村": "Village"}, "translations.json")
        self.write_json([None, {"id": 1, "name": "村"}], "www", "data", "MapInfos.json")
        self.write_json({"events": [{"pages": [{"list": [
            {"code": 401, "parameters": ["はい"]}]}]}]}, "www", "data", "Map001.json")
        self.plugins_path = self.write_text(
            'var $plugins =\n[\n{"name":"YED_SkillShop","status":true,'
            '"description":"","parameters":{"Buy Command":"購入"}}\n];\n',
            "www", "js", "plugins.js")
        self.files = RPGMakerMVTranslator.list_game_data_files(self.tmp)

    def run_worker(self, worker):
        results, done, errors = [], [], []
        worker.finished.connect(results.append)
        worker.file_done.connect(done.append)
        worker.error.connect(lambda where, msg: errors.append(where))
        worker.run()
        return results, done, errors

    def test_full_pass(self):
        worker = TranslationWorker(self.dict_path, self.files, self.plugins_path)
        results, done, errors = self.run_worker(worker)

        self.assertEqual(results, [True])
        self.assertEqual(errors, [])
        self.assertEqual(done, ["Map001.json", "MapInfos.json", "plugins.js"])
        self.assertTrue(all(f.is_done for f in self.files))
        self.assertEqual(self.read_json("www", "data", "MapInfos.json")[1]["name"], "Village")
        self.assertIn('"Buy Command":"Buy"', self.read_text("www", "js", "plugins.js"))

    def test_plugins_skipped_by_setting(self):
        worker = TranslationWorker(self.dict_path, self.files, self.plugins_path,
                                   settings=LocalizerSettings(translate_plugins=False))
        results, done, _ = self.run_worker(worker)
        self.assertEqual(results, [True])
        self.assertNotIn("plugins.js", done)
        self.assertIn("購入", self.read_text("www", "js", "plugins.js"))

    def test_bad_dictionary(self):
        bad = self.write_text("[]", "bad.json")
        worker = TranslationWorker(bad, self.files, self.plugins_path)
        results, done, errors = self.run_worker(worker)
        self.assertEqual(results, [False])
        self.assertEqual(errors, [bad])
        self.assertEqual(done, [])
        self.assertFalse(any(f.is_done for f in self.files))

    def test_failed_file_reported(self):
        self.write_text("{broken", "www", "data", "Map001.json")
        worker = TranslationWorker(self.dict_path, self.files)
        results, done, errors = self.run_worker(worker)
        self.assertEqual(results, [False])
        self.assertEqual(errors, ["Map001.json"])
        self.assertEqual(done, ["MapInfos.json"])

    def test_non_utf8_dictionary(self):
        bad = self.write_json({"はい": "Yes"}, "sjis.json", encoding="shift_jis")
        worker = TranslationWorker(bad, self.files, self.plugins_path)
        results, done, errors = self.run_worker(worker)
        self.assertEqual(results, [False])
        self.assertEqual(errors, [bad])
        self.assertEqual(done, [])

    def test_non_utf8_plugins_js(self):
        path = self.write_text(
            'var $plugins =\n[\n{"name":"YED_SkillShop","status":true,'
            '"description":"","parameters":{"Buy Command":"購入"}}\n];\n',
            "www", "js", "plugins.js", encoding="shift_jis")
        worker = TranslationWorker(self.dict_path, [], path)
        results, done, errors = self.run_worker(worker)
        self.assertEqual(results, [False])
        self.assertEqual(errors, [path])
        self.assertEqual(done, [])

    def test_file_system_error_stops_pass(self):
        missing = GameDataFile(self.path("www", "data", "Map000.json"))
        worker = TranslationWorker(self.dict_path, [missing] + self.files,
                                   self.plugins_path)
        results, done, errors = self.run_worker(worker)
        self.assertEqual(results, [False])
        self.assertEqual(errors, ["Map000.json"])
        self.assertEqual(done, [])
        self.assertFalse(any(f.is_done for f in self.files))
        self.assertEqual(self.read_json("www", "data", "MapInfos.json")[1]["name"], "村")
        self.assertIn("購入", self.read_text("www", "js", "plugins.js"))

    def test_cancel_before_start(self):
        worker = TranslationWorker(self.dict_path, self.files, self.plugins_path)
        worker.cancel()
        results, done, _ = self.run_worker(worker)
        self.assertEqual(results, [False])
        self.assertEqual(done, [])


class TestTranslationEngine(BaseTestCase):

    @classmethod
    def setUpClass(cls):
        cls.app = QCoreApplication.instance() or QCoreApplication([])

    def run_engine(self, engine, dict_path, files, plugins_path=""):
        results, running, progress = [], [], []
        loop = QEventLoop()
        engine.finished.connect(results.append)
        engine.finished.connect(lambda ok: loop.quit())
        engine.running_changed.connect(running.append)
        engine.progress.connect(lambda cur, total, name: progress.append((cur, total, name)))
        QTimer.singleShot(10000, loop.quit)

        self.assertTrue(engine.translate_game(dict_path, files, plugins_path))
        self.assertFalse(engine.translate_game(dict_path, files))  # already running
        loop.exec()
        return results, running, progress

    def test_idle_engine(self):
        engine = TranslationEngine()
        self.assertFalse(engine.is_running)
        engine.cancel()  # no worker, nothing to do

    def test_background_pass(self):
        dict_path = self.write_json({"はい": "Yes"}, "translations.json")
        self.write_json([{"code": 401, "parameters": ["はい"]}], "data", "CommonEvents.json")
        files = RPGMakerMVTranslator.list_game_data_files(self.tmp)

        engine = TranslationEngine()
        results, running, progress = self.run_engine(engine, dict_path, files)

        self.assertEqual(results, [True])
        self.assertEqual(running, [True, False])
        self.assertEqual(progress, [(1, 1, "CommonEvents.json")])
        self.assertFalse(engine.is_running)
        self.assertEqual(self.read_json("data", "CommonEvents.json")[0]["parameters"], ["Yes"])

    def test_progress_total_without_plugins(self):
        dict_path = self.write_json({"はい": "Yes"}, "translations.json")
        self.write_json([{"code": 401, "parameters": ["はい"]}], "data", "CommonEvents.json")
        plugins_path = self.write_text("var $plugins =\n[];\n", "js", "plugins.js")
        files = RPGMakerMVTranslator.list_game_data_files(self.tmp)

        engine = TranslationEngine(LocalizerSettings(translate_plugins=False))
        results, _, progress = self.run_engine(engine, dict_path, files, plugins_path)

        self.assertEqual(results, [True])
        self.assertEqual(progress, [(1, 1, "CommonEvents.json")])


if __name__ == "__main__":
    unittest.main()
