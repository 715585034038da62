# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.commontypes import InputMode
from keyfolio.keymap.bindings import (
    AWAITING_CAPTURE,
    UNBOUND,
    ActionCategory,
    BindingSet,
    Bound,
    KeyBinding,
    assignment_from_wire,
    assignment_to_wire,
    category_for,
    default_bindings,
    get_action_label,
    get_short_action_label,
)
from keyfolio.keymap.keycodes import UNBOUND_KEY


@pytest.mark.parametrize(
    "wire,expected",
    (
        (None, AWAITING_CAPTURE),
        ("", AWAITING_CAPTURE),
        (UNBOUND_KEY, UNBOUND),
        ("KeyW", Bound("KeyW")),
        ("key.keyboard.w", Bound("KeyW")),
    ),
)
def test_assignment_from_wire(wire, expected):
    assert assignment_from_wire(wire) == expected


def test_awaiting_capture_is_stored_as_unbound():
    assert assignment_to_wire(AWAITING_CAPTURE) == UNBOUND_KEY
    assert assignment_to_wire(UNBOUND) == UNBOUND_KEY
    assert assignment_to_wire(Bound("Space")) == "Space"


def test_from_wire_category_fallback():
    assert KeyBinding.from_wire("forward", "KeyW").category is ActionCategory.MOVEMENT
    assert KeyBinding.from_wire("forward", "KeyW", "combat").category is ActionCategory.COMBAT
    assert KeyBinding.from_wire("forward", "KeyW", "bogus").category is ActionCategory.MOVEMENT
    assert category_for("somethingNew") is ActionCategory.UI


def test_labels():
    assert get_action_label("pickBlock") == "Pick Block"
    assert get_short_action_label("hotbar3") == "HB3"
    assert get_short_action_label("jump") == "Jump"
    assert get_action_label("mystery") == "mystery"


def test_set_binding_does_not_steal_keys():
    bindings = default_bindings()
    bindings.set_binding("jump", "KeyW")
    assert bindings.get("jump") == Bound("KeyW")
    # forward keeps the key it already had
    assert bindings.get("forward") == Bound("KeyW")
    assert [b.action for b in bindings.bindings_for_key("key.keyboard.w")] == ["forward", "jump"]


def test_conflicts():
    bindings = default_bindings()
    assert bindings.conflicts() == {}
    bindings.set_binding("drop", "KeyE")
    conflicts = bindings.conflicts()
    assert list(conflicts) == ["KeyE"]
    assert {b.action for b in conflicts["KeyE"]} == {"drop", "inventory"}


def test_unbind_is_not_unconfigured():
    bindings = BindingSet([KeyBinding.from_wire("jump", "Space")])
    bindings.unbind("jump")
    assert bindings.get("jump") == UNBOUND
    assert bindings.binding("jump").key_code == UNBOUND_KEY
    assert not bindings.binding("jump").is_bound
    assert bindings.get("sneak") is None
    assert "sneak" not in bindings


def test_unbound_actions_never_conflict():
    bindings = BindingSet([KeyBinding.from_wire("jump", UNBOUND_KEY), KeyBinding.from_wire("sneak", UNBOUND_KEY)])
    assert bindings.conflicts() == {}


def test_iteration_follows_mode_vocabulary():
    bindings = BindingSet(
        [
            KeyBinding.from_wire("chat", "KeyT"),
            KeyBinding.from_wire("forward", "KeyW"),
            KeyBinding.from_wire("hotbarLeft", "GamepadLB"),
        ]
    )
    assert [b.action for b in bindings] == ["forward", "chat"]
    assert len(bindings) == 2
    assert len(bindings.all_bindings()) == 3

    controller = BindingSet(bindings.all_bindings(), mode=InputMode.CONTROLLER)
    assert [b.action for b in controller] == ["hotbarLeft", "chat"]


def test_copy_is_independent():
    original = default_bindings()
    copied = original.copy()
    copied.set_binding("forward", "ArrowUp")
    assert original.get("forward") == Bound("KeyW")
    assert copied.get("forward") == Bound("ArrowUp")


def test_controller_defaults():
    bindings = default_bindings(InputMode.CONTROLLER)
    assert bindings.get("jump") == Bound("GamepadA")
    assert bindings.get("forward") is None
    assert bindings.conflicts() == {}
