# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Readers for configuration files players already have lying around.

AutoHotkey scripts give remaps; the game's options.txt and the
standardsettings.json used by speedrun setups give bindings and a few game
settings.
"""
from __future__ import annotations

import logging
import math
import re
import types
import typing

import msgspec

from .bindings import KeyBinding
from .keycodes import normalize
from .remaps import KeyRemap, Remapped

logger = logging.getLogger(__name__)

AUTOHOTKEY = "AutoHotkey"

AHK_KEY_NAMES = types.MappingProxyType(
    {
        **{chr(c): f"Key{chr(c).upper()}" for c in range(ord("a"), ord("z") + 1)},
        **{str(d): f"Digit{d}" for d in range(10)},
        **{f"f{n}": f"F{n}" for n in range(1, 13)},
        "lctrl": "ControlLeft",
        "rctrl": "ControlRight",
        "ctrl": "ControlLeft",
        "lshift": "ShiftLeft",
        "rshift": "ShiftRight",
        "shift": "ShiftLeft",
        "lalt": "AltLeft",
        "ralt": "AltRight",
        "alt": "AltLeft",
        "lwin": "MetaLeft",
        "rwin": "MetaRight",
        "space": "Space",
        "tab": "Tab",
        "enter": "Enter",
        "return": "Enter",
        "escape": "Escape",
        "esc": "Escape",
        "backspace": "Backspace",
        "bs": "Backspace",
        "delete": "Delete",
        "del": "Delete",
        "insert": "Insert",
        "ins": "Insert",
        "home": "Home",
        "end": "End",
        "pgup": "PageUp",
        "pageup": "PageUp",
        "pgdn": "PageDown",
        "pagedown": "PageDown",
        "up": "ArrowUp",
        "down": "ArrowDown",
        "left": "ArrowLeft",
        "right": "ArrowRight",
        "capslock": "CapsLock",
        "numlock": "NumLock",
        "scrolllock": "ScrollLock",
        "printscreen": "PrintScreen",
        "pause": "Pause",
        ";": "Semicolon",
        "'": "Quote",
        ",": "Comma",
        ".": "Period",
        "/": "Slash",
        "\\": "Backslash",
        "[": "BracketLeft",
        "]": "BracketRight",
        "-": "Minus",
        "=": "Equal",
        "`": "Backquote",
        **{f"numpad{d}": f"Numpad{d}" for d in range(10)},
        "numpadadd": "NumpadAdd",
        "numpadmult": "NumpadMultiply",
        "numpadsub": "NumpadSubtract",
        "numpaddiv": "NumpadDivide",
        "numpaddot": "NumpadDecimal",
        "numpadenter": "NumpadEnter",
        "lbutton": "Mouse0",
        "rbutton": "Mouse1",
        "mbutton": "Mouse2",
        "xbutton1": "Mouse3",
        "xbutton2": "Mouse4",
    }
)

_AHK_REMAP = re.compile(r"^([^:]+)::([^;\s]+)")
_AHK_TRAILING_COMMENT = re.compile(r";\s*(.+)$")


def ahk_key_to_key_code(name: str) -> str:
    name = name.strip()
    return AHK_KEY_NAMES.get(name.lower()) or normalize(name)


def parse_autohotkey_script(script: str) -> list[KeyRemap]:
    """Pull `source::target` remaps out of an AutoHotkey script.

    Anything after a `;` on a remap line is kept as the remap's notes. Comment
    lines, #directives and everything else that isn't a plain remap is skipped.
    """
    remaps = []
    for line in script.splitlines():
        line = line.strip()
        if not line or line.startswith((";", "#")):
            continue
        m = _AHK_REMAP.match(line)
        if not m:
            continue
        comment = _AHK_TRAILING_COMMENT.search(line)
        remaps.append(
            KeyRemap(
                source_key=ahk_key_to_key_code(m[1]),
                target=Remapped(ahk_key_to_key_code(m[2])),
                software=AUTOHOTKEY,
                notes=comment[1].strip() if comment else None,
            )
        )
    return remaps


# Game option names for each binding, as they appear in options.txt.
GAME_ACTION_NAMES = types.MappingProxyType(
    {
        "key_key.forward": "forward",
        "key_key.back": "back",
        "key_key.left": "left",
        "key_key.right": "right",
        "key_key.jump": "jump",
        "key_key.sneak": "sneak",
        "key_key.sprint": "sprint",
        "key_key.attack": "attack",
        "key_key.use": "use",
        "key_key.pickItem": "pickBlock",
        "key_key.drop": "drop",
        "key_key.inventory": "inventory",
        "key_key.swapOffhand": "swapHands",
        **{f"key_key.hotbar.{i}": f"hotbar{i}" for i in range(1, 10)},
        "key_key.togglePerspective": "togglePerspective",
        "key_key.fullscreen": "fullscreen",
        "key_key.chat": "chat",
        "key_key.command": "command",
    }
)


class GameSettings(msgspec.Struct, kw_only=True, omit_defaults=True, rename="camel"):
    toggle_sprint: typing.Optional[bool] = None
    toggle_sneak: typing.Optional[bool] = None
    auto_jump: typing.Optional[bool] = None
    fov: typing.Optional[int] = None
    gui_scale: typing.Optional[int] = None
    raw_input: typing.Optional[bool] = None
    mouse_sensitivity: typing.Optional[float] = None
    game_language: typing.Optional[str] = None


class ParsedGameSettings(msgspec.Struct, kw_only=True):
    keybindings: list[KeyBinding] = msgspec.field(default_factory=list)
    game_settings: GameSettings = msgspec.field(default_factory=GameSettings)


def _as_bool(value) -> bool:
    return value is True or value == "true"


def _as_float(value) -> typing.Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _as_int(value) -> typing.Optional[int]:
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def _fov_degrees(value) -> typing.Optional[int]:
    # The file stores fov as (degrees - 70) / 40.
    fov = _as_float(value)
    if fov is None or not math.isfinite(fov):
        return None
    return round(fov * 40 + 70)


def _apply_option(result: ParsedGameSettings, name: str, value) -> None:
    if name in GAME_ACTION_NAMES:
        if isinstance(value, str):
            action = GAME_ACTION_NAMES[name]
            result.keybindings.append(KeyBinding.from_wire(action, normalize(value.strip())))
        return

    settings = result.game_settings
    match name:
        case "toggleSprint":
            settings.toggle_sprint = _as_bool(value)
        case "toggleCrouch":
            settings.toggle_sneak = _as_bool(value)
        case "autoJump":
            settings.auto_jump = _as_bool(value)
        case "fov":
            settings.fov = _fov_degrees(value)
        case "guiScale":
            settings.gui_scale = _as_int(value)
        case "rawMouseInput":
            settings.raw_input = _as_bool(value)
        case "mouseSensitivity":
            settings.mouse_sensitivity = _as_float(value)
        case "lang":
            settings.game_language = str(value)


def parse_options_text(content: str) -> ParsedGameSettings:
    "Parse the game's options.txt (`name:value` per line)."
    result = ParsedGameSettings()
    for line in content.splitlines():
        name, sep, value = line.partition(":")
        if not name or not sep:
            continue
        _apply_option(result, name.strip(), value.strip())
    return result


def parse_standard_settings(content: typing.Union[str, bytes]) -> ParsedGameSettings:
    """Parse standardsettings.json; its options may be nested under "options".

    Unreadable JSON gives an empty result.
    """
    result = ParsedGameSettings()
    try:
        data = msgspec.json.decode(content)
    except msgspec.DecodeError:
        logger.warning("standardsettings content is not valid JSON")
        return result
    if not isinstance(data, dict):
        return result
    options = data.get("options") or data
    if not isinstance(options, dict):
        return result
    for name, value in options.items():
        _apply_option(result, name, value)
    return result


def parse_game_settings(content: str, filename: typing.Optional[str] = None) -> ParsedGameSettings:
    "Pick the parser from the file name if there is one, else from the content."
    if filename:
        if filename.endswith(".json") or "standardsettings" in filename:
            return parse_standard_settings(content)
        if filename.endswith(".txt"):
            return parse_options_text(content)
    if content.strip().startswith("{"):
        return parse_standard_settings(content)
    return parse_options_text(content)
