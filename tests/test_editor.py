# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.commontypes import InputMode
from keyfolio.keymap.bindings import AWAITING_CAPTURE, UNBOUND, Bound, KeyBinding
from keyfolio.keymap.fingers import Finger, FingerAssignmentMap
from keyfolio.keymap.remaps import DISABLED, KeyRemap
from keyfolio.profile.doctypes import CopyTarget, DeviceConfig
from keyfolio.profile.editor import EditingBuffer

USER = "user-1"


@pytest.fixture
def buffer(store, db):
    store.onboard_user(USER)
    buffer = EditingBuffer()
    buffer.load(USER, db)
    return buffer


def test_fresh_buffer_has_no_user(db):
    buffer = EditingBuffer()
    assert not buffer.has_user
    buffer.set_binding("jump", "KeyJ")
    # nothing to save it to
    buffer.save(db)
    assert db.load_bindings(USER) == []


def test_changes_wait_for_save(buffer, db):
    buffer.set_binding("jump", "key.keyboard.j")
    assert buffer.unsaved_changes
    assert buffer.bindings.get("jump") == Bound("KeyJ")
    assert {b.action: b.assignment for b in db.load_bindings(USER)}["jump"] == Bound("Space")

    buffer.save(db)
    assert not buffer.unsaved_changes
    assert {b.action: b.assignment for b in db.load_bindings(USER)}["jump"] == Bound("KeyJ")


def test_unbind_and_capture_are_saved_as_unbound(buffer, db):
    buffer.unbind("sneak")
    buffer.set_binding("sprint", AWAITING_CAPTURE)
    buffer.save(db)
    saved = {b.action: b.assignment for b in db.load_bindings(USER)}
    assert saved["sneak"] == UNBOUND
    assert saved["sprint"] == UNBOUND


def test_remap_edits(buffer, db):
    buffer.set_remap("KEYX", "KeyF", software="AutoHotkey")
    buffer.set_remap("KeyQ", None)
    buffer.set_remap("KeyZ", "")
    assert buffer.remap_layer.forward("KeyX") == "KeyF"
    buffer.save(db)

    saved = {r.source_key: r for r in db.load_remaps(USER)}
    assert set(saved) == {"KeyX", "KeyQ"}
    assert saved["KeyQ"].target == DISABLED
    assert saved["KeyX"].software == "AutoHotkey"

    buffer.delete_remap("KeyQ")
    buffer.set_remap("KeyX", "KeyG")
    buffer.save(db)
    (remap,) = db.load_remaps(USER)
    assert (remap.source_key, remap.target_key, remap.id) == ("KeyX", "KeyG", saved["KeyX"].id)


def test_finger_edits(buffer, db):
    buffer.assign_finger("KeyW", Finger.LEFT_MIDDLE)
    buffer.save(db)
    assert db.load_finger_assignments(USER).finger_for("KeyW") is Finger.LEFT_MIDDLE
    # the device config row is shared and must survive
    assert db.load_device_config(USER) == DeviceConfig()


def test_merge_only_touches_known_actions(db):
    db.save_bindings(USER, [KeyBinding.from_wire("jump", "Space"), KeyBinding.from_wire("sneak", "ShiftLeft")])
    buffer = EditingBuffer()
    buffer.load(USER, db)
    buffer.merge_bindings(
        [
            KeyBinding.from_wire("jump", "KeyJ"),
            KeyBinding.from_wire("sneak", "ShiftLeft"),
            KeyBinding.from_wire("forward", "ArrowUp"),
        ]
    )
    assert buffer.bindings.get("jump") == Bound("KeyJ")
    assert buffer.bindings.get("forward") is None
    buffer.save(db)
    assert {b.action for b in db.load_bindings(USER)} == {"jump", "sneak"}


def test_copy_into_buffer(store, db, buffer):
    db.replace_remaps(USER, [KeyRemap.from_wire("CapsLock", "ControlLeft")])
    db.save_bindings(USER, [KeyBinding.from_wire("drop", "KeyG")])
    db.save_finger_assignments(USER, FingerAssignmentMap({"KeyG": ["left-index"]}))
    preset = store.save_current(USER, "Source")
    db.replace_remaps(USER, [KeyRemap.from_wire("KeyX", "KeyF")])

    buffer.load(USER, db)
    store.copy_into(buffer, preset, CopyTarget.REMAPS)
    assert [r.source_key for r in buffer.remaps] == ["CapsLock"]
    assert buffer.bindings.get("drop") == Bound("KeyG")
    buffer.save(db)
    assert [r.source_key for r in db.load_remaps(USER)] == ["CapsLock"]

    store.copy_into(buffer, preset, "fingers")
    assert buffer.fingers.finger_for("KeyG") is Finger.LEFT_INDEX
    # the preset's own data is untouched by edits made after copying
    buffer.assign_finger("KeyG", Finger.RIGHT_INDEX)
    assert preset.finger_assignments().finger_for("KeyG") is Finger.LEFT_INDEX


def test_copy_everything_then_edit_leaves_preset_alone(store, db):
    db.save_bindings(USER, [KeyBinding.from_wire("jump", "Space"), KeyBinding.from_wire("sneak", "ShiftLeft")])
    db.replace_remaps(USER, [KeyRemap.from_wire("KeyX", "KeyF")])
    preset = store.create_preset(
        USER,
        "Source",
        bindings=[
            KeyBinding.from_wire("jump", "KeyJ"),
            KeyBinding.from_wire("sneak", "ShiftLeft"),
            KeyBinding.from_wire("forward", "ArrowUp"),
        ],
        remaps=[KeyRemap.from_wire("CapsLock", "ControlLeft")],
        fingers=FingerAssignmentMap({"KeyG": ["left-index"]}),
    )
    original = (preset.keybindings_data, preset.remaps_data, preset.finger_assignments_data)

    buffer = EditingBuffer()
    buffer.load(USER, db)
    store.copy_into(buffer, preset, "all")
    assert buffer.bindings.get("jump") == Bound("KeyJ")
    assert buffer.bindings.get("forward") is None
    assert [r.source_key for r in buffer.remaps] == ["CapsLock"]
    assert buffer.fingers.finger_for("KeyG") is Finger.LEFT_INDEX

    buffer.set_binding("jump", "KeyK")
    buffer.set_remap("CapsLock", None)
    buffer.assign_finger("KeyG", Finger.RIGHT_INDEX)
    buffer.save(db)

    stored = db.load_preset(USER, preset.id)
    assert (stored.keybindings_data, stored.remaps_data, stored.finger_assignments_data) == original
    live = {b.action: b.assignment for b in db.load_bindings(USER)}
    assert live == {"jump": Bound("KeyK"), "sneak": Bound("ShiftLeft")}
    assert {r.source_key: r.target for r in db.load_remaps(USER)} == {"CapsLock": DISABLED}
    assert db.load_finger_assignments(USER).finger_for("KeyG") is Finger.RIGHT_INDEX


def test_controller_mode_follows_device_config(store, db):
    store.onboard_user(USER, DeviceConfig(input_mode="controller"))
    buffer = EditingBuffer()
    buffer.load(USER, db)
    assert buffer.mode is InputMode.CONTROLLER
    assert buffer.bindings.get("hotbarLeft") == Bound("GamepadLB")
