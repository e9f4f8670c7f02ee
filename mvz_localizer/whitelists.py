"""Whitelist/blacklist tables deciding which plugin and system fields are text.

Only the plugins and fields listed here are translated.  Everything else in
plugin commands and plugins.js is treated as internal identifiers, which
break games if translated.
"""

from .project_model import TranslateTarget

# MZ plugin commands (code 357): plugin name → translatable argument keys.
# e.g. {"code":357,"parameters":["DTextPicture","dText","文字列ピクチャ準備",
#       {"text":"ロレンチア\n","fontSize":"0"}]}
PLUGIN_OBJECT_WHITELIST: dict[str, tuple] = {
    "DTextPicture": ("text",),
    "TextPicture": ("text",),
    "LL_InfoPopupWIndow": ("messageText",),
    "BalloonInBattle": ("text",),
    "MNKR_CommonPopupCoreMZ": ("text",),
    "DestinationWindow": ("destination",),
    "TorigoyaMZ_NotifyMessage": ("message",),
    "DarkPlasma_CharacterText": ("text",),
    "LogWindow": ("text",),
}

# MV plugin commands (code 356): first space-delimited token of the command.
# e.g. {"code":356,"parameters":["D_TEXT こんだけ注目集めといて 12"]}
PLUGIN_ARRAY_WHITELIST: frozenset = frozenset({
    "D_TEXT",
    "ShowInfo",
    "PushGab",
    "addLog",
})

# js/plugins.js: plugin name → translatable parameters.
#   TranslateTarget("Buy Command")                        plain text field
#   TranslateTarget.array("baseItems", ["name"])          '["{\"name\":\"ステータス\",...}"]'
PLUGINS_JS_WHITELIST: dict[str, tuple] = {
    "TorigoyaMZ_CommonMenu": (
        TranslateTarget.array("baseItems", ["name"]),
    ),
    "LoadComSim": (TranslateTarget("loadtext"),),
    "OriginMenuStatus": (TranslateTarget("command_name"),),
    "BB_CustomSaveWindow": tuple(
        TranslateTarget(f"Item{i}title") for i in range(1, 7)
    ),
    "SceneGlossary": (
        TranslateTarget.array("GlossaryInfo", [
            "CategoryHelp", "GlossaryHelp", "ConfirmHelp", "UsingHelp",
        ]),
    ),
    "YED_SkillShop": (
        TranslateTarget("Buy Command"),
        TranslateTarget("Gold Cost Text"),
        TranslateTarget("Item Cost Text"),
        TranslateTarget("Cancel Command"),
    ),
}

# System.json: top-level keys whose subtrees hold display text.
SYSTEM_WHITELIST: frozenset = frozenset({
    "armorTypes", "currencyUnit", "elements", "equipTypes", "gameTitle",
    "skillTypes", "switches", "variables", "weaponTypes",
    "terms",  # basic, commands, params, messages
})

# System.json: keys never translated, even under a whitelisted key.
SYSTEM_BLACKLIST: frozenset = frozenset({"titleBgm", "title2Name"})

# Note-field tags whose content is display text: <SG説明:...>, <SGカテゴリ:...>
NOTE_TAGS: tuple = ("SG説明", "SGカテゴリ")

# Database files holding game objects (name/description/profile/...).
DATA_OBJECT_FILES: frozenset = frozenset({
    "Actors.json", "Armors.json", "Classes.json", "Enemies.json", "Items.json",
    "MapInfos.json", "Skills.json", "States.json", "Weapons.json",
})

# Runtime translation plugin; its presence in plugins.js means the game has
# already been set up for translation.
RUNTIME_PLUGIN_NAME = "JtJsonTranslationManager"
