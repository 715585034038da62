# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Canonical key identifiers.

Every key, mouse button and controller button is identified by a string in the
KeyboardEvent.code namespace ("KeyW", "Digit1", "ControlLeft"), extended with
"Mouse<n>" and "Gamepad<button>". Older data used the game's own dotted names
("key.keyboard.w", "key.mouse.left") or upper-cased spellings ("KEYW"); normalize()
maps all of those onto the canonical namespace and leaves anything it does not
recognize alone.
"""
import re
import types
import typing

from ..commontypes import KeyboardLayout
from ..util import ordinal

# Reserved for "this action deliberately has no key". Never a device identifier.
UNBOUND_KEY = "_UNBOUND"

LEGACY_SPECIAL_KEYS = types.MappingProxyType(
    {
        # mouse
        "key.mouse.left": "Mouse0",
        "key.mouse.right": "Mouse1",
        "key.mouse.middle": "Mouse2",
        "key.mouse.4": "Mouse3",
        "key.mouse.5": "Mouse4",
        # named keys
        "key.keyboard.space": "Space",
        "key.keyboard.left.control": "ControlLeft",
        "key.keyboard.right.control": "ControlRight",
        "key.keyboard.left.shift": "ShiftLeft",
        "key.keyboard.right.shift": "ShiftRight",
        "key.keyboard.left.alt": "AltLeft",
        "key.keyboard.right.alt": "AltRight",
        "key.keyboard.left.win": "MetaLeft",
        "key.keyboard.right.win": "MetaRight",
        "key.keyboard.tab": "Tab",
        "key.keyboard.caps.lock": "CapsLock",
        "key.keyboard.escape": "Escape",
        "key.keyboard.enter": "Enter",
        "key.keyboard.backspace": "Backspace",
        "key.keyboard.delete": "Delete",
        "key.keyboard.insert": "Insert",
        "key.keyboard.home": "Home",
        "key.keyboard.end": "End",
        "key.keyboard.page.up": "PageUp",
        "key.keyboard.page.down": "PageDown",
        "key.keyboard.up": "ArrowUp",
        "key.keyboard.down": "ArrowDown",
        "key.keyboard.left": "ArrowLeft",
        "key.keyboard.right": "ArrowRight",
        # punctuation
        "key.keyboard.slash": "Slash",
        "key.keyboard.backslash": "Backslash",
        "key.keyboard.minus": "Minus",
        "key.keyboard.equal": "Equal",
        "key.keyboard.left.bracket": "BracketLeft",
        "key.keyboard.right.bracket": "BracketRight",
        "key.keyboard.semicolon": "Semicolon",
        "key.keyboard.apostrophe": "Quote",
        "key.keyboard.comma": "Comma",
        "key.keyboard.period": "Period",
        "key.keyboard.grave.accent": "Backquote",
        # keypad operators
        "key.keyboard.keypad.enter": "NumpadEnter",
        "key.keyboard.keypad.add": "NumpadAdd",
        "key.keyboard.keypad.subtract": "NumpadSubtract",
        "key.keyboard.keypad.multiply": "NumpadMultiply",
        "key.keyboard.keypad.divide": "NumpadDivide",
        "key.keyboard.keypad.decimal": "NumpadDecimal",
        "key.keyboard.num.lock": "NumLock",
    }
)

# Canonical names that can't be recovered from their lower-cased form by a pattern.
CASEFOLDED_SPECIAL_KEYS = types.MappingProxyType(
    {
        "space": "Space",
        "tab": "Tab",
        "enter": "Enter",
        "escape": "Escape",
        "backspace": "Backspace",
        "delete": "Delete",
        "insert": "Insert",
        "home": "Home",
        "end": "End",
        "pageup": "PageUp",
        "pagedown": "PageDown",
        "capslock": "CapsLock",
        "numlock": "NumLock",
        "scrolllock": "ScrollLock",
        "printscreen": "PrintScreen",
        "pause": "Pause",
        "arrowup": "ArrowUp",
        "arrowdown": "ArrowDown",
        "arrowleft": "ArrowLeft",
        "arrowright": "ArrowRight",
        "slash": "Slash",
        "backslash": "Backslash",
        "minus": "Minus",
        "equal": "Equal",
        "bracketleft": "BracketLeft",
        "bracketright": "BracketRight",
        "semicolon": "Semicolon",
        "quote": "Quote",
        "comma": "Comma",
        "period": "Period",
        "backquote": "Backquote",
        "numpadenter": "NumpadEnter",
        "numpadadd": "NumpadAdd",
        "numpadsubtract": "NumpadSubtract",
        "numpadmultiply": "NumpadMultiply",
        "numpaddivide": "NumpadDivide",
        "numpaddecimal": "NumpadDecimal",
    }
)

GAMEPAD_BUTTONS = types.MappingProxyType(
    {
        "a": "A",
        "b": "B",
        "x": "X",
        "y": "Y",
        "lb": "LB",
        "rb": "RB",
        "lt": "LT",
        "rt": "RT",
        "l3": "L3",
        "r3": "R3",
        "dpadup": "DpadUp",
        "dpaddown": "DpadDown",
        "dpadleft": "DpadLeft",
        "dpadright": "DpadRight",
        "start": "Start",
        "select": "Select",
    }
)

KEY_CODE_LABELS = types.MappingProxyType(
    {
        "Mouse0": "Left Click",
        "Mouse1": "Right Click",
        "Mouse2": "Middle Click",
        "Mouse3": "Side 1",
        "Mouse4": "Side 2",
        "GamepadA": "A",
        "GamepadB": "B",
        "GamepadX": "X",
        "GamepadY": "Y",
        "GamepadLB": "LB",
        "GamepadRB": "RB",
        "GamepadLT": "LT",
        "GamepadRT": "RT",
        "GamepadL3": "L3",
        "GamepadR3": "R3",
        "GamepadDpadUp": "D-Pad↑",
        "GamepadDpadDown": "D-Pad↓",
        "GamepadDpadLeft": "D-Pad←",
        "GamepadDpadRight": "D-Pad→",
        "GamepadStart": "Start",
        "GamepadSelect": "Select",
        "Space": "Space",
        "ControlLeft": "LCtrl",
        "ControlRight": "RCtrl",
        "ShiftLeft": "LShift",
        "ShiftRight": "RShift",
        "AltLeft": "LAlt",
        "AltRight": "RAlt",
        "MetaLeft": "LWin",
        "MetaRight": "RWin",
        "Tab": "Tab",
        "CapsLock": "CapsLock",
        "Escape": "Esc",
        "Enter": "Enter",
        "Backspace": "BS",
        "Delete": "Delete",
        "Insert": "Insert",
        "Home": "Home",
        "End": "End",
        "PageUp": "PageUp",
        "PageDown": "PageDown",
        "ArrowUp": "↑",
        "ArrowDown": "↓",
        "ArrowLeft": "←",
        "ArrowRight": "→",
        "Slash": "/",
        "Minus": "-",
        "Equal": "=",
        "Comma": ",",
        "Period": ".",
        "NumpadEnter": "Num Enter",
        "NumpadAdd": "Num +",
        "NumpadSubtract": "Num -",
        "NumpadMultiply": "Num *",
        "NumpadDivide": "Num /",
        "NumpadDecimal": "Num .",
        "NumLock": "NumLock",
    }
)

# The two layouts print different glyphs on the same physical punctuation keys.
US_KEY_LABELS = types.MappingProxyType(
    {
        "Semicolon": ";",
        "Quote": "'",
        "BracketLeft": "[",
        "BracketRight": "]",
        "Backslash": "\\",
        "Backquote": "`",
    }
)

JIS_KEY_LABELS = types.MappingProxyType(
    {
        "Semicolon": ":",
        "Quote": "^",
        "BracketLeft": "@",
        "BracketRight": "[",
        "Backslash": "]",
        "Backquote": "半角",
    }
)

UNBOUND_LABEL = "-"

_LEGACY_LETTER = re.compile(r"^key\.keyboard\.([a-z])$", re.ASCII)
_LEGACY_DIGIT = re.compile(r"^key\.keyboard\.(\d)$", re.ASCII)
_LEGACY_FUNCTION = re.compile(r"^key\.keyboard\.f(\d+)$", re.ASCII)
_LEGACY_KEYPAD_DIGIT = re.compile(r"^key\.keyboard\.keypad\.(\d)$", re.ASCII)
_LETTER = re.compile(r"^key([a-z])$", re.ASCII)
_DIGIT = re.compile(r"^digit(\d)$", re.ASCII)
_NUMPAD_DIGIT = re.compile(r"^numpad(\d)$", re.ASCII)
_MODIFIER = re.compile(r"^(control|shift|alt|meta)(left|right)$", re.ASCII)
_MOUSE = re.compile(r"^mouse(\d)$", re.ASCII)
_GAMEPAD = re.compile(r"^gamepad(.+)$", re.ASCII)
_FUNCTION = re.compile(r"^f(\d+)$", re.ASCII)
_MOUSE_NUMBER = re.compile(r"^Mouse(\d+)$", re.ASCII)


def normalize(key_code: str) -> str:
    """Map any accepted spelling of a key onto its canonical identifier.

    normalize("key.keyboard.w") == "KeyW"
    normalize("KEYW") == "KeyW"
    normalize("CONTROLLEFT") == "ControlLeft"
    normalize("something else") == "something else"

    Never raises, and normalize(normalize(x)) == normalize(x).
    """
    lowered = key_code.lower()

    if lowered in LEGACY_SPECIAL_KEYS:
        return LEGACY_SPECIAL_KEYS[lowered]
    if m := _LEGACY_LETTER.match(lowered):
        return f"Key{m[1].upper()}"
    if m := _LEGACY_DIGIT.match(lowered):
        return f"Digit{m[1]}"
    if m := _LEGACY_FUNCTION.match(lowered):
        return f"F{m[1]}"
    if m := _LEGACY_KEYPAD_DIGIT.match(lowered):
        return f"Numpad{m[1]}"

    if lowered in CASEFOLDED_SPECIAL_KEYS:
        return CASEFOLDED_SPECIAL_KEYS[lowered]
    if m := _LETTER.match(lowered):
        return f"Key{m[1].upper()}"
    if m := _DIGIT.match(lowered):
        return f"Digit{m[1]}"
    if m := _NUMPAD_DIGIT.match(lowered):
        return f"Numpad{m[1]}"
    if m := _MODIFIER.match(lowered):
        return m[1].capitalize() + m[2].capitalize()
    if m := _MOUSE.match(lowered):
        return f"Mouse{m[1]}"
    if m := _GAMEPAD.match(lowered):
        # unknown buttons keep whatever casing they arrived with
        button = GAMEPAD_BUTTONS.get(m[1], key_code[len("gamepad") :])
        return f"Gamepad{button}"
    if m := _FUNCTION.match(lowered):
        return f"F{m[1]}"

    return key_code


def keys_equal(first: str, second: str) -> bool:
    return normalize(first) == normalize(second)


def is_unbound(key_code: typing.Optional[str]) -> bool:
    return key_code == UNBOUND_KEY


def is_controller_key(key_code: str) -> bool:
    return normalize(key_code).startswith("Gamepad")


def _layout_labels(layout: typing.Union[KeyboardLayout, str, None]):
    layout = KeyboardLayout.coerce(layout)
    if layout is not None and layout.is_jis:
        return JIS_KEY_LABELS
    return US_KEY_LABELS


def get_label(key_code: str, layout: typing.Union[KeyboardLayout, str, None] = None) -> str:
    "Human-readable label for any spelling of a key. Never raises."
    if is_unbound(key_code):
        return UNBOUND_LABEL

    normalized = normalize(key_code)

    layout_labels = _layout_labels(layout)
    if normalized in layout_labels:
        return layout_labels[normalized]
    if normalized in KEY_CODE_LABELS:
        return KEY_CODE_LABELS[normalized]

    if _LETTER.match(normalized.lower()):
        return normalized.removeprefix("Key")
    if _DIGIT.match(normalized.lower()):
        return normalized.removeprefix("Digit")
    if _NUMPAD_DIGIT.match(normalized.lower()):
        return "Num" + normalized.removeprefix("Numpad")

    if m := _MOUSE_NUMBER.match(normalized):
        return f"{ordinal(int(m[1]) + 1)} Mouse Button"

    return normalized


def printable_character(key_code: str) -> str:
    """The character a key types, lower-cased: "KeyA" -> "a", "Digit1" -> "1".

    Keys that don't type a single obvious character come back lower-cased whole.
    """
    normalized = normalize(key_code)
    if _LETTER.match(normalized.lower()):
        return normalized[-1].lower()
    if _DIGIT.match(normalized.lower()):
        return normalized[-1]
    return normalized.lower()


def key_code_for_character(char: str) -> str:
    "Best-guess physical key for a literal character; falls back to the character itself."
    if len(char) == 1 and char.isascii():
        if char.isalpha():
            return f"Key{char.upper()}"
        if char.isdigit():
            return f"Digit{char}"
    return char
