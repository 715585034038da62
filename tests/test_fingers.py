# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.keymap.fingers import Finger, FingerAssignmentMap


def test_invalid_fingers_are_dropped():
    fingers = FingerAssignmentMap({"KeyW": ["left-ring", "left-toe"], "KeyQ": ["nope"], "KeyE": []})
    assert fingers.to_wire() == {"KeyW": ["left-ring"]}
    assert len(fingers) == 1


def test_lookup_falls_back_to_lower_case():
    fingers = FingerAssignmentMap({"keyw": ["left-ring"]})
    assert "KeyW" in fingers
    assert fingers["KeyW"] == (Finger.LEFT_RING,)
    assert fingers.finger_for("KeyW") is Finger.LEFT_RING
    assert fingers.finger_for("KeyP") is None
    with pytest.raises(KeyError):
        fingers["KeyP"]


def test_assign_returns_new_map():
    fingers = FingerAssignmentMap.defaults()
    changed = fingers.assign("KeyW", Finger.LEFT_MIDDLE)
    assert fingers.finger_for("KeyW") is Finger.LEFT_RING
    assert changed.finger_for("KeyW") is Finger.LEFT_MIDDLE
    cleared = changed.assign("KeyW")
    assert "KeyW" not in cleared


@pytest.mark.parametrize("data", (None, "", b"", "not json", "[1, 2", '{"KeyW": 3}'))
def test_unreadable_json_gives_empty_map(data):
    assert FingerAssignmentMap.from_json(data) == FingerAssignmentMap()


def test_json_keeps_assignments():
    fingers = FingerAssignmentMap({"Space": ["left-thumb"], "Mouse0": ["right-index", "right-middle"]})
    assert FingerAssignmentMap.from_json(fingers.to_json()) == fingers


def test_labels():
    assert Finger.LEFT_PINKY.label == "Left pinky"
    assert Finger.coerce("right-thumb") is Finger.RIGHT_THUMB
    assert Finger.coerce("thumb") is None
