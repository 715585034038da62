# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.keymap.bindings import Bound
from keyfolio.keymap.parsers import (
    ahk_key_to_key_code,
    parse_autohotkey_script,
    parse_game_settings,
    parse_options_text,
    parse_standard_settings,
)
from keyfolio.keymap.remaps import Remapped

AHK_SCRIPT = """
#NoEnv
; swap some keys around
CapsLock::LCtrl
x::f ; crafting
XButton1::F13
not a remap line
"""

OPTIONS_TXT = """version:3465
autoJump:false
toggleCrouch:true
toggleSprint:false
fov:0.25
guiScale:3
rawMouseInput:true
mouseSensitivity:0.5
lang:ja_jp
key_key.forward:key.keyboard.w
key_key.swapOffhand:key.keyboard.f
key_key.attack:key.mouse.left
key_key.hotbar.1:key.keyboard.1
"""


@pytest.mark.parametrize(
    "name,expected",
    (("LCtrl", "ControlLeft"), ("x", "KeyX"), ("XButton2", "Mouse4"), ("  Space ", "Space"), ("Volume_Up", "Volume_Up")),
)
def test_ahk_key_names(name, expected):
    assert ahk_key_to_key_code(name) == expected


def test_parse_autohotkey_script():
    remaps = parse_autohotkey_script(AHK_SCRIPT)
    assert [(r.source_key, r.target) for r in remaps] == [
        ("CapsLock", Remapped("ControlLeft")),
        ("KeyX", Remapped("KeyF")),
        ("Mouse3", Remapped("F13")),
    ]
    assert remaps[1].notes == "crafting"
    assert remaps[0].notes is None
    assert {r.software for r in remaps} == {"AutoHotkey"}


def test_parse_options_text():
    parsed = parse_options_text(OPTIONS_TXT)
    assert {b.action: b.assignment for b in parsed.keybindings} == {
        "forward": Bound("KeyW"),
        "swapHands": Bound("KeyF"),
        "attack": Bound("Mouse0"),
        "hotbar1": Bound("Digit1"),
    }
    settings = parsed.game_settings
    assert settings.auto_jump is False
    assert settings.toggle_sneak is True
    assert settings.toggle_sprint is False
    assert settings.fov == 80
    assert settings.gui_scale == 3
    assert settings.raw_input is True
    assert settings.mouse_sensitivity == 0.5
    assert settings.game_language == "ja_jp"


def test_parse_standard_settings_nested_and_flat():
    nested = parse_standard_settings('{"options": {"key_key.jump": "key.keyboard.space", "fov": 0.0, "autoJump": true}}')
    flat = parse_standard_settings('{"key_key.jump": "key.keyboard.space", "fov": 0.0, "autoJump": true}')
    for parsed in (nested, flat):
        assert [(b.action, b.assignment) for b in parsed.keybindings] == [("jump", Bound("Space"))]
        assert parsed.game_settings.fov == 70
        assert parsed.game_settings.auto_jump is True


@pytest.mark.parametrize("content", ("{not json", "[1, 2, 3]", '"just a string"'))
def test_parse_standard_settings_bad_input(content):
    parsed = parse_standard_settings(content)
    assert parsed.keybindings == []
    assert parsed.game_settings.fov is None


def test_bad_numbers_are_skipped():
    parsed = parse_options_text("fov:nan\nguiScale:big\nmouseSensitivity:fast\n")
    assert parsed.game_settings.fov is None
    assert parsed.game_settings.gui_scale is None
    assert parsed.game_settings.mouse_sensitivity is None


@pytest.mark.parametrize(
    "filename,content",
    (
        ("options.txt", "key_key.jump:key.keyboard.space"),
        ("standardsettings.json", '{"key_key.jump": "key.keyboard.space"}'),
        (None, "key_key.jump:key.keyboard.space"),
        (None, '  {"key_key.jump": "key.keyboard.space"}'),
    ),
)
def test_parse_game_settings_detects_format(filename, content):
    parsed = parse_game_settings(content, filename)
    assert [b.action for b in parsed.keybindings] == ["jump"]
