# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.keymap.remaps import (
    DISABLED,
    PENDING_TARGET,
    KeyRemap,
    PlannedKey,
    RemapKind,
    RemapLayer,
    Remapped,
    target_from_wire,
    target_to_wire,
)


@pytest.fixture
def layer():
    return RemapLayer(
        [
            KeyRemap.from_wire("KeyX", "KeyF"),
            KeyRemap.from_wire("key.keyboard.caps.lock", "ControlLeft"),
            KeyRemap.from_wire("KeyQ", None),
            KeyRemap.from_wire("KeyZ", ""),
            KeyRemap.from_wire("Mouse3", "F13"),
        ]
    )


@pytest.mark.parametrize(
    "wire,target",
    ((None, DISABLED), ("", PENDING_TARGET), ("KeyF", Remapped("KeyF"))),
)
def test_target_wire_forms(wire, target):
    assert target_from_wire(wire) == target
    assert target_to_wire(target) == wire


def test_reverse_character_plan(layer):
    assert layer.reverse_character_plan("f") == [PlannedKey("x", "KeyX", True)]
    assert layer.reverse_character_plan("F") == [PlannedKey("x", "KeyX", True)]


def test_reverse_plan_for_unremapped_characters(layer):
    assert layer.reverse_character_plan("a1") == [
        PlannedKey("a", "KeyA", False),
        PlannedKey("1", "Digit1", False),
    ]
    assert layer.reverse_character_plan("") == []


def test_forward(layer):
    assert layer.forward("KeyX") == "KeyF"
    assert layer.forward("KEYX") == "KeyF"
    assert layer.forward("CapsLock") == "ControlLeft"
    assert layer.forward("KeyQ") is DISABLED
    assert layer.forward("KeyZ") is None
    assert layer.forward("KeyW") is None


def test_is_disabled(layer):
    assert layer.is_disabled("key.keyboard.q")
    assert not layer.is_disabled("KeyX")
    assert not layer.is_disabled("KeyW")


@pytest.mark.parametrize(
    "source,kind",
    (
        ("KeyW", RemapKind.NONE),
        ("KeyX", RemapKind.KEYBOARD),
        ("CapsLock", RemapKind.KEYBOARD),
        ("KeyQ", RemapKind.DISABLED),
        ("Mouse3", RemapKind.KEYBOARD),
    ),
)
def test_remap_kind(layer, source, kind):
    assert layer.remap_kind(source) is kind


def test_special_targets():
    layer = RemapLayer([KeyRemap.from_wire("Mouse4", "MediaPlayPause")])
    assert layer.remap_kind("Mouse4") is RemapKind.SPECIAL


def test_later_remap_wins():
    layer = RemapLayer([KeyRemap.from_wire("KeyX", "KeyF"), KeyRemap.from_wire("KEYX", "KeyG")])
    assert layer.forward("KeyX") == "KeyG"


def test_as_dict_leaves_out_pending(layer):
    assert layer.as_dict() == {
        "KeyX": "KeyF",
        "key.keyboard.caps.lock": "ControlLeft",
        "KeyQ": None,
        "Mouse3": "F13",
    }
