"""RPG Maker MV/MZ JSON walkers and writers.

Decides, per data file shape, which string fields of the game's JSON data
and js/plugins.js are display text, translates them through a
TranslatorSession and writes the files back in place.
"""

import json
import logging
import os
import re
from typing import Optional

from . import NUMBER_TOKEN_RE
from . import whitelists
from .project_model import GameDataFile, PluginsConfigError
from .text_processor import TranslatorSession

log = logging.getLogger(__name__)

# RPG Maker event command codes that contain translatable text
CODE_SHOW_TEXT_HEADER = 101   # Show Text setup: params[4]=speaker name (MZ)
CODE_SHOW_CHOICES = 102       # Show Choices: parameters[0] is list of strings
CODE_COMMENT = 108            # Comment (first line): often plugin directives
CODE_CHANGE_NAME = 320        # Change Actor Name: params[0]=actorId, params[1]=name
CODE_CHANGE_NICKNAME = 324    # Change Actor Nickname: params[1]=nickname
CODE_CHANGE_PROFILE = 325     # Change Actor Profile: params[1]=profile
CODE_PLUGIN_COMMAND_MV = 356  # Plugin Command (MV): params[0]="COMMAND arg arg"
CODE_PLUGIN_COMMAND_MZ = 357  # Plugin Command (MZ): params[0]=pluginName, params[3]=args
CODE_SHOW_TEXT = 401          # Show Text line: parameters[0] is text
CODE_CHOICE_TEXT = 402        # When [choice]: parameters[1] is text
CODE_SCROLL_TEXT = 405        # Scroll Text line: parameters[0] is text

# Every string under "parameters" of these commands is display text
_DIALOG_CODES = frozenset({
    CODE_SHOW_CHOICES, CODE_SHOW_TEXT, CODE_CHOICE_TEXT, CODE_SCROLL_TEXT,
})
# Only parameters[1] is display text
_ACTOR_TEXT_CODES = frozenset({
    CODE_CHANGE_NAME, CODE_CHANGE_NICKNAME, CODE_CHANGE_PROFILE,
})
_SPEAKER_PARAM_INDEX = 4

# Game-object fields translated as a whole
_OBJECT_TEXT_FIELDS = ("name", "description", "profile", "nickname")

# Match the array assigned to $plugins, greedy so nested ] in
# JSON strings don't cause premature truncation
_PLUGINS_ARRAY_RE = re.compile(r'var\s+\$plugins\s*=\s*(\[.*\])\s*;?', re.DOTALL)

_COMPACT = (",", ":")


def _dumps(obj) -> str:
    """Serialize like RPG Maker: compact, non-ASCII kept."""
    return json.dumps(obj, ensure_ascii=False, separators=_COMPACT)


class RPGMakerMVTranslator:
    """Applies a TranslatorSession to RPG Maker MV/MZ data and plugins.js."""

    def __init__(self, session: TranslatorSession):
        self.session = session
        settings = session.settings
        self.array_whitelist = settings.array_whitelist()
        self.object_whitelist = settings.object_whitelist()
        self.plugins_whitelist = settings.plugins_whitelist()
        self._note_re = self._build_note_re(settings.note_tags)

    @staticmethod
    def _build_note_re(tags) -> Optional[re.Pattern]:
        """<Tag:content> for each configured note tag; group 2 is the content."""
        if not tags:
            return None
        alternatives = "|".join(re.escape(t) for t in tags)
        return re.compile(r'<(' + alternatives + r'):(.*?)>', re.DOTALL)

    # ── Data files ────────────────────────────────────────────────

    def translate_all(self, files: list, on_file_done=None) -> bool:
        """Translate every JSON game data file in place.

        A malformed file is logged and skipped; the rest are still
        translated.  File-system errors abort the batch.

        Args:
            files: GameDataFile descriptors.
            on_file_done: Optional callback(GameDataFile) after each write.

        Returns:
            True if every file was translated and written.
        """
        failed = False
        for data_file in files:
            try:
                ok = self.translate_one(data_file)
            except OSError as exc:
                log.error("Translation aborted at %s: %s", data_file.path, exc)
                return False
            if not ok:
                failed = True
                continue
            if on_file_done is not None and data_file.is_done:
                on_file_done(data_file)

        done = sum(1 for f in files if f.is_done)
        log.info("Translated %d/%d data files (%d strings cached)",
                 done, len(files), self.session.cached_count)
        return not failed

    def translate_one(self, data_file: GameDataFile) -> bool:
        """Translate one data file; non-JSON files are skipped.

        Returns False if the file content could not be parsed or walked.
        OSError propagates so callers can stop the batch.
        """
        if not data_file.path.lower().endswith(".json"):
            return True
        try:
            self.translate_file(data_file)
        except (ValueError, TypeError, RecursionError):
            # json.JSONDecodeError and UnicodeDecodeError are ValueErrors
            log.exception("Failed to translate %s", data_file.name)
            return False
        return True

    def translate_file(self, data_file: GameDataFile):
        """Read, translate and overwrite one data file, then mark it done."""
        with open(data_file.path, "r", encoding="utf-8-sig") as f:
            data = json.load(f)

        data = self.translate_data(data, data_file.name)

        with open(data_file.path, "w", encoding="utf-8") as f:
            f.write(_dumps(data))
        data_file.is_done = True

    def translate_data(self, data, filename: str):
        """Dispatch a parsed data file to the walker for its file name."""
        if filename == "System.json":
            return self.walk_whitelist(data, whitelists.SYSTEM_WHITELIST,
                                       blacklist=whitelists.SYSTEM_BLACKLIST)
        if filename in whitelists.DATA_OBJECT_FILES:
            return self.walk_game_objects(data)
        # CommonEvents.json, Map###.json, Troops.json and anything unknown:
        # the opcode-based scan only touches dialogue commands.
        return self.walk_game_events(data)

    # ── Walkers ───────────────────────────────────────────────────

    def walk_game_objects(self, node, is_text: bool = False):
        """Translate name/description/profile/nickname/message* and note tags."""
        if isinstance(node, dict):
            for key in list(node):
                value = node[key]
                if key in _OBJECT_TEXT_FIELDS or key.startswith("message"):
                    node[key] = self.walk_game_objects(value, True)
                elif key == "note" and isinstance(value, str):
                    node[key] = self._translate_note(value)
                else:
                    node[key] = self.walk_game_objects(value)
            return node
        if isinstance(node, list):
            for i, item in enumerate(node):
                node[i] = self.walk_game_objects(item, is_text)
            return node
        if isinstance(node, str) and is_text:
            return self.session.translate(node)
        return node

    def _translate_note(self, note: str) -> str:
        """Translate only the content of known <Tag:content> note tags."""
        if self._note_re is None:
            return note
        return self._note_re.sub(
            lambda m: f"<{m.group(1)}:{self.session.translate(m.group(2))}>",
            note,
        )

    def walk_game_events(self, node, in_text: bool = False,
                         max_replacements: Optional[int] = None,
                         preserve_leading_whitespace: bool = True,
                         allow_caching: Optional[bool] = None):
        """Translate dialogue, choices, comments and whitelisted plugin commands."""
        if isinstance(node, dict):
            code = node.get("code")
            if isinstance(code, int) and not isinstance(code, bool):
                self._translate_command(node, code)
            elif "displayName" in node:
                node["displayName"] = self.walk_game_events(node["displayName"], True)

            for key in list(node):
                node[key] = self.walk_game_events(node[key])
            return node
        if isinstance(node, list):
            for i, item in enumerate(node):
                node[i] = self.walk_game_events(
                    item, in_text, max_replacements,
                    preserve_leading_whitespace, allow_caching)
            return node
        if isinstance(node, str) and in_text:
            return self.session.translate(
                node, preserve_leading_whitespace=preserve_leading_whitespace,
                max_replacements=max_replacements, allow_caching=allow_caching)
        return node

    def _translate_command(self, command: dict, code: int):
        params = command.get("parameters")
        if params is None:
            return
        if code in _DIALOG_CODES:
            command["parameters"] = self.walk_game_events(params, True)
        elif code == CODE_COMMENT:
            # Comments double as plugin directives: one replacement at most,
            # and never cache the partial result.
            command["parameters"] = self.walk_game_events(
                params, True, max_replacements=1,
                preserve_leading_whitespace=False, allow_caching=False)
        elif code == CODE_PLUGIN_COMMAND_MV:
            self._translate_plugin_command_mv(params)
        elif code == CODE_PLUGIN_COMMAND_MZ:
            self._translate_plugin_command_mz(params)
        elif code == CODE_SHOW_TEXT_HEADER:
            self._translate_param(params, _SPEAKER_PARAM_INDEX)
        elif code in _ACTOR_TEXT_CODES:
            self._translate_param(params, 1)

    def _translate_param(self, params, idx: int):
        if isinstance(params, list) and len(params) > idx and isinstance(params[idx], str):
            params[idx] = self.session.translate(params[idx])

    def _translate_plugin_command_mv(self, params):
        """356: "KEYWORD arg arg": translate non-numeric args of whitelisted keywords."""
        if not isinstance(params, list):
            return
        for i, item in enumerate(params):
            if not isinstance(item, str):
                continue
            tokens = item.split(" ")
            if tokens[0] not in self.array_whitelist:
                continue
            for j in range(1, len(tokens)):
                if not NUMBER_TOKEN_RE.match(tokens[j]):
                    tokens[j] = self.session.translate(tokens[j])
            params[i] = " ".join(tokens)

    def _translate_plugin_command_mz(self, params):
        """357: translate whitelisted argument keys of whitelisted plugins."""
        if not isinstance(params, list) or not params:
            return
        plugin_name = params[0]
        if not isinstance(plugin_name, str):
            return
        keys = self.object_whitelist.get(plugin_name)
        if keys:
            self.walk_whitelist(params, keys)

    def walk_whitelist(self, node, whitelist, translate: bool = False,
                       blacklist=frozenset()):
        """Translate strings under whitelisted keys (inherited by children).

        A key in *blacklist* switches translation off for its whole subtree.
        """
        if isinstance(node, dict):
            for key in list(node):
                if key in blacklist:
                    continue
                child = translate or key in whitelist
                node[key] = self.walk_whitelist(node[key], whitelist, child, blacklist)
            return node
        if isinstance(node, list):
            for i, item in enumerate(node):
                node[i] = self.walk_whitelist(item, whitelist, translate, blacklist)
            return node
        if isinstance(node, str) and translate:
            return self.session.translate(node)
        return node

    # ── plugins.js ────────────────────────────────────────────────

    def translate_plugins_config(self, path: str) -> bool:
        """Translate whitelisted plugin parameters in js/plugins.js in place.

        Everything outside the ``$plugins`` array literal is preserved.

        Returns:
            True on success, False if the file is not UTF-8 or has no usable
            plugin array.

        Raises:
            OSError: if the file cannot be read or written.
        """
        try:
            with open(path, "r", encoding="utf-8-sig") as f:
                content = f.read()
        except UnicodeDecodeError as exc:
            log.warning("Skipping %s: not UTF-8 (%s)", path, exc)
            return False

        try:
            match, plugins = self._parse_plugins_js(content)
        except PluginsConfigError as exc:
            log.warning("Skipping %s: %s", path, exc)
            return False

        for plugin in plugins:
            if not isinstance(plugin, dict):
                continue
            name = plugin.get("name")
            targets = self.plugins_whitelist.get(name) if isinstance(name, str) else None
            if not targets:
                continue
            params = plugin.get("parameters")
            if not isinstance(params, dict):
                continue
            for target in targets:
                self._apply_target(params, target, name)

        start, end = match.span(1)
        with open(path, "w", encoding="utf-8") as f:
            f.write(content[:start] + self._format_plugins(plugins) + content[end:])
        return True

    @staticmethod
    def _parse_plugins_js(content: str):
        """Return (match, plugin list) for the ``var $plugins = [...]`` literal."""
        match = _PLUGINS_ARRAY_RE.search(content)
        if not match:
            raise PluginsConfigError("no 'var $plugins = [...]' assignment")
        try:
            plugins = json.loads(match.group(1))
        except json.JSONDecodeError as exc:
            raise PluginsConfigError(f"plugin array is not valid JSON ({exc})") from exc
        if not isinstance(plugins, list) or not plugins:
            raise PluginsConfigError("plugin array is empty")
        return match, plugins

    @staticmethod
    def _format_plugins(plugins: list) -> str:
        """One plugin per line, as the RPG Maker editor writes plugins.js."""
        return "[\n" + ",\n".join(_dumps(p) for p in plugins) + "\n]"

    def _apply_target(self, params: dict, target, plugin_name: str):
        if target.name not in params:
            return
        if not target.is_array:
            params[target.name] = self.walk_whitelist(
                params[target.name], (target.name,), True)
            return

        raw = params[target.name]
        try:
            items = json.loads(raw) if isinstance(raw, str) else None
        except json.JSONDecodeError:
            items = None
        if not isinstance(items, list):
            log.warning("%s/%s: not a JSON array, left untranslated",
                        plugin_name, target.name)
            return

        for i, item in enumerate(items):
            try:
                obj = json.loads(item)
            except (json.JSONDecodeError, TypeError) as exc:
                log.warning("%s/%s[%d]: skipped (%s)", plugin_name, target.name, i, exc)
                continue
            if not isinstance(obj, dict):
                continue
            items[i] = _dumps(self.walk_whitelist(obj, target.sub_targets))
        params[target.name] = _dumps(items)

    @staticmethod
    def is_plugins_patched(path: str) -> bool:
        """True if the runtime translation plugin is already in plugins.js."""
        with open(path, "r", encoding="utf-8-sig") as f:
            return whitelists.RUNTIME_PLUGIN_NAME in f.read()

    # ── Static helpers ────────────────────────────────────────────────

    @staticmethod
    def find_content_root(project_dir: str) -> Optional[str]:
        """Return the folder containing data/ and js/ (handles www/ layout).

        For distributed MV games the content lives under www/,
        for MZ (and MV editor projects) it's at the project root.
        """
        for base in (os.path.join(project_dir, "www"), project_dir):
            for name in ("data", "Data"):
                if os.path.isdir(os.path.join(base, name)):
                    return base
        return None

    @staticmethod
    def detect_engine(project_dir: str) -> Optional[str]:
        """Detect whether a project is RPG Maker MV or MZ.

        Returns ``"mv"`` (www/data layout), ``"mz"`` (data/ at the root),
        or ``None``.
        """
        if os.path.isdir(os.path.join(project_dir, "www", "data")):
            return "mv"
        if os.path.isdir(os.path.join(project_dir, "data")):
            return "mz"
        return None

    @classmethod
    def find_data_dir(cls, project_dir: str) -> Optional[str]:
        """Locate the data/ directory inside the project."""
        content_root = cls.find_content_root(project_dir)
        if content_root:
            for name in ("data", "Data"):
                d = os.path.join(content_root, name)
                if os.path.isdir(d):
                    return d
        return None

    @classmethod
    def find_plugins_file(cls, project_dir: str) -> Optional[str]:
        """Locate js/plugins.js in the project."""
        content_root = cls.find_content_root(project_dir) or project_dir
        path = os.path.join(content_root, "js", "plugins.js")
        return path if os.path.isfile(path) else None

    @classmethod
    def list_game_data_files(cls, project_dir: str) -> list:
        """GameDataFile for every top-level *.json in the data folder."""
        data_dir = cls.find_data_dir(project_dir)
        if not data_dir:
            raise FileNotFoundError(
                f"No 'data' folder found in {project_dir}. "
                "Please select an RPG Maker MV/MZ project folder."
            )
        return [
            GameDataFile(os.path.join(data_dir, name))
            for name in sorted(os.listdir(data_dir))
            if name.lower().endswith(".json")
            and os.path.isfile(os.path.join(data_dir, name))
        ]
