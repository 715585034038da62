# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.commontypes import KeyboardLayout
from keyfolio.keymap.keycodes import (
    UNBOUND_KEY,
    get_label,
    is_controller_key,
    is_unbound,
    key_code_for_character,
    keys_equal,
    normalize,
    printable_character,
)


@pytest.mark.parametrize(
    "raw,expected",
    (
        ("key.keyboard.w", "KeyW"),
        ("KEYW", "KeyW"),
        ("keyw", "KeyW"),
        ("KeyW", "KeyW"),
        ("key.keyboard.1", "Digit1"),
        ("DIGIT1", "Digit1"),
        ("key.keyboard.f5", "F5"),
        ("f11", "F11"),
        ("key.keyboard.keypad.7", "Numpad7"),
        ("key.mouse.left", "Mouse0"),
        ("key.mouse.4", "Mouse3"),
        ("MOUSE1", "Mouse1"),
        ("key.keyboard.left.shift", "ShiftLeft"),
        ("CONTROLLEFT", "ControlLeft"),
        ("altright", "AltRight"),
        ("key.keyboard.space", "Space"),
        ("SPACE", "Space"),
        ("key.keyboard.grave.accent", "Backquote"),
        ("pagedown", "PageDown"),
        ("gamepadlb", "GamepadLB"),
        ("GAMEPADDPADUP", "GamepadDpadUp"),
        ("GamepadFoo", "GamepadFoo"),
        ("something else", "something else"),
        ("", ""),
        (UNBOUND_KEY, UNBOUND_KEY),
    ),
)
def test_normalize(raw: str, expected: str):
    assert normalize(raw) == expected


@pytest.mark.parametrize(
    "raw",
    ("key.keyboard.w", "KEYW", "key.mouse.right", "ShiftRight", "gamepadstart", "???", "", "key.keyboard.unknown"),
)
def test_normalize_is_idempotent(raw: str):
    once = normalize(raw)
    assert normalize(once) == once


def test_keys_equal():
    assert keys_equal("key.keyboard.e", "KEYE")
    assert not keys_equal("KeyE", "KeyR")


def test_unbound_and_controller_checks():
    assert is_unbound(UNBOUND_KEY)
    assert not is_unbound(None)
    assert not is_unbound("KeyW")
    assert is_controller_key("gamepada")
    assert not is_controller_key("Mouse0")


@pytest.mark.parametrize(
    "key_code,layout,expected",
    (
        (UNBOUND_KEY, None, "-"),
        ("KeyW", None, "W"),
        ("key.keyboard.w", None, "W"),
        ("Digit3", None, "3"),
        ("Numpad4", None, "Num4"),
        ("Mouse0", None, "Left Click"),
        ("Mouse7", None, "8th Mouse Button"),
        ("ControlLeft", None, "LCtrl"),
        ("Semicolon", KeyboardLayout.US, ";"),
        ("Semicolon", KeyboardLayout.JIS, ":"),
        ("Backquote", "jis_tkl", "半角"),
        ("Backquote", "nonsense", "`"),
        ("GamepadDpadUp", None, "D-Pad↑"),
        ("Mystery", None, "Mystery"),
    ),
)
def test_get_label(key_code, layout, expected):
    assert get_label(key_code, layout) == expected


@pytest.mark.parametrize(
    "key_code,expected",
    (
        ("KeyA", "a"),
        ("key.keyboard.x", "x"),
        ("Digit1", "1"),
        ("Space", "space"),
    ),
)
def test_printable_character(key_code, expected):
    assert printable_character(key_code) == expected


@pytest.mark.parametrize(
    "char,expected",
    (
        ("f", "KeyF"),
        ("F", "KeyF"),
        ("7", "Digit7"),
        ("!", "!"),
        ("あ", "あ"),
    ),
)
def test_key_code_for_character(char, expected):
    assert key_code_for_character(char) == expected
