"""Translation engine: runs a full localization pass with Qt threading."""

import logging
from typing import Optional

from PyQt6.QtCore import QObject, QThread, pyqtSignal

from .project_model import LocalizerError
from .rpgmaker_mv import RPGMakerMVTranslator
from .settings import LocalizerSettings
from .text_processor import TranslatorSession

log = logging.getLogger(__name__)


class TranslationWorker(QObject):
    """Worker that translates one game folder in a background thread.

    Builds its own TranslatorSession, so the dictionary and its cache are
    never shared with another thread.
    """

    file_done = pyqtSignal(str)             # file name
    item_processed = pyqtSignal(str)        # file name about to be translated
    finished = pyqtSignal(bool)             # overall success
    error = pyqtSignal(str, str)            # file/path, error_message

    def __init__(self, dictionary_path: str, files: list,
                 plugins_path: str = "",
                 settings: Optional[LocalizerSettings] = None):
        super().__init__()
        self.dictionary_path = dictionary_path
        self.files = files
        self.plugins_path = plugins_path
        self.settings = settings or LocalizerSettings()
        self._cancelled = False

    def cancel(self):
        """Stop before the next file; the file in progress still completes."""
        self._cancelled = True

    def run(self):
        """Translate all data files, then plugins.js.

        A file that cannot be parsed is reported and skipped.  A
        file-system error stops the pass; later files are left untouched.
        """
        try:
            session = TranslatorSession.from_file(self.dictionary_path, self.settings)
        except (LocalizerError, OSError) as e:
            self.error.emit(self.dictionary_path, str(e))
            self.finished.emit(False)
            return

        translator = RPGMakerMVTranslator(session)
        success = True
        current = ""
        try:
            for data_file in self.files:
                if self._cancelled:
                    success = False
                    break
                current = data_file.name
                self.item_processed.emit(current)
                if not translator.translate_one(data_file):
                    success = False
                    self.error.emit(current, "translation failed")
                    continue
                if data_file.is_done:
                    self.file_done.emit(current)

            if (not self._cancelled and self.plugins_path
                    and self.settings.translate_plugins):
                current = self.plugins_path
                self.item_processed.emit("plugins.js")
                if translator.translate_plugins_config(self.plugins_path):
                    self.file_done.emit("plugins.js")
                else:
                    success = False
                    self.error.emit(self.plugins_path, "no usable $plugins array")
        except OSError as e:
            log.error("Translation stopped at %s: %s", current, e)
            self.error.emit(current, str(e))
            success = False

        log.info("Translation pass %s (%d strings cached)",
                 "finished" if success else "failed", session.cached_count)
        self.finished.emit(success)


class TranslationEngine(QObject):
    """Runs one TranslationWorker at a time on its own QThread."""

    progress = pyqtSignal(int, int, str)    # current, total, current file
    file_done = pyqtSignal(str)
    running_changed = pyqtSignal(bool)
    finished = pyqtSignal(bool)
    error = pyqtSignal(str, str)

    def __init__(self, settings: Optional[LocalizerSettings] = None, parent=None):
        super().__init__(parent)
        self.settings = settings or LocalizerSettings()
        self._thread: Optional[QThread] = None
        self._worker: Optional[TranslationWorker] = None
        self._total = 0
        self._progress_count = 0

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.isRunning()

    def translate_game(self, dictionary_path: str, files: list,
                       plugins_path: str = "") -> bool:
        """Start a background pass. Returns False if one is already running."""
        if self.is_running:
            return False

        with_plugins = bool(plugins_path) and self.settings.translate_plugins
        self._total = len(files) + (1 if with_plugins else 0)
        self._progress_count = 0

        thread = QThread()
        worker = TranslationWorker(dictionary_path, files, plugins_path,
                                   settings=self.settings)
        worker.moveToThread(thread)

        thread.started.connect(worker.run)
        worker.item_processed.connect(self._on_item_processed)
        worker.file_done.connect(self.file_done.emit)
        worker.error.connect(self.error.emit)
        worker.finished.connect(self._on_worker_finished)

        self._thread = thread
        self._worker = worker
        self.running_changed.emit(True)
        thread.start()
        return True

    def cancel(self):
        """Cancel the running worker after its current file."""
        if self._worker is not None:
            self._worker.cancel()

    def _on_item_processed(self, name: str):
        self._progress_count += 1
        self.progress.emit(self._progress_count, self._total, name)

    def _on_worker_finished(self, success: bool):
        """Clean up the thread and relay the result."""
        if self._thread is not None:
            self._thread.quit()
            self._thread.wait()
        self._thread = None
        self._worker = None
        self.running_changed.emit(False)
        self.finished.emit(success)
