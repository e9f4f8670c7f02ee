"""RPG Maker MV/MZ Localizer: dictionary-based game translation.

Launch with: python main.py GAME_DIR translations.json
"""

import argparse
import logging
import sys

from PyQt6.QtCore import QCoreApplication

from mvz_localizer.rpgmaker_mv import RPGMakerMVTranslator
from mvz_localizer.settings import DEFAULT_SETTINGS_FILE, load_settings
from mvz_localizer.translation_engine import TranslationEngine

log = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Translate an RPG Maker MV/MZ game in place from a JSON dictionary.")
    parser.add_argument("game_dir", help="Game folder (contains data/ or www/data/)")
    parser.add_argument("dictionary", help="JSON file mapping original text to translation")
    parser.add_argument("--settings", default=DEFAULT_SETTINGS_FILE,
                        help="Settings JSON (default: _settings.json next to main.py)")
    parser.add_argument("--skip-plugins", action="store_true",
                        help="Do not touch js/plugins.js")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser.parse_args(argv)


def main(argv=None):
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    settings = load_settings(args.settings)
    if args.skip_plugins:
        settings.translate_plugins = False

    try:
        files = RPGMakerMVTranslator.list_game_data_files(args.game_dir)
    except FileNotFoundError as e:
        log.error("%s", e)
        return 1

    engine_version = RPGMakerMVTranslator.detect_engine(args.game_dir)
    log.info("Game: %s (%s), %d data files",
             args.game_dir, engine_version or "unknown", len(files))

    plugins_path = ""
    if settings.translate_plugins:
        plugins_path = RPGMakerMVTranslator.find_plugins_file(args.game_dir) or ""
        if plugins_path and RPGMakerMVTranslator.is_plugins_patched(plugins_path):
            log.error("%s already loads the runtime translation plugin, "
                      "refusing to translate twice", plugins_path)
            return 1

    app = QCoreApplication(sys.argv[:1])
    engine = TranslationEngine(settings)
    engine.progress.connect(
        lambda cur, total, name: log.info("[%d/%d] %s", cur, total, name))
    engine.error.connect(lambda where, msg: log.error("%s: %s", where, msg))
    engine.finished.connect(lambda ok: app.exit(0 if ok else 1))

    engine.translate_game(args.dictionary, files, plugins_path)
    return app.exec()


if __name__ == "__main__":
    sys.exit(main())
