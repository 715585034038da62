# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections.abc
import enum
import logging
import types
import typing
import uuid

import msgspec

from ..commontypes import InputMode
from .keycodes import UNBOUND_KEY, normalize

logger = logging.getLogger(__name__)


class Bound(msgspec.Struct, frozen=True, tag=True):
    key_code: str


class Unbound(msgspec.Struct, frozen=True, tag=True):
    pass


# The editor is waiting for the user to press the key they want.
class AwaitingCapture(msgspec.Struct, frozen=True, tag=True):
    pass


UNBOUND = Unbound()
AWAITING_CAPTURE = AwaitingCapture()

KeyAssignment = typing.Union[Bound, Unbound, AwaitingCapture]


def assignment_from_wire(key_code: typing.Optional[str]) -> KeyAssignment:
    match key_code:
        case None | "":
            return AWAITING_CAPTURE
        case str() if key_code == UNBOUND_KEY:
            return UNBOUND
        case _:
            return Bound(normalize(key_code))


def assignment_to_wire(assignment: KeyAssignment) -> str:
    # Nothing half-captured reaches storage: it goes out as an explicit unbind.
    match assignment:
        case Bound(key_code=key_code):
            return key_code
        case _:
            return UNBOUND_KEY


class ActionCategory(enum.Enum):
    MOVEMENT = "movement"
    COMBAT = "combat"
    INVENTORY = "inventory"
    UI = "ui"


KEYBOARD_MOUSE_ACTIONS = (
    # movement
    "forward",
    "back",
    "left",
    "right",
    "jump",
    "sneak",
    "sprint",
    # combat
    "attack",
    "use",
    "pickBlock",
    "drop",
    # inventory
    "inventory",
    "swapHands",
    "hotbar1",
    "hotbar2",
    "hotbar3",
    "hotbar4",
    "hotbar5",
    "hotbar6",
    "hotbar7",
    "hotbar8",
    "hotbar9",
    # ui
    "togglePerspective",
    "fullscreen",
    "chat",
    "command",
    "toggleHud",
)

# Hotbar slots are stepped through with the bumpers rather than bound one by one.
CONTROLLER_ACTIONS = (
    "jump",
    "sneak",
    "sprint",
    "attack",
    "use",
    "pickBlock",
    "drop",
    "inventory",
    "swapHands",
    "hotbarLeft",
    "hotbarRight",
    "togglePerspective",
    "chat",
)

ACTION_CATEGORIES = types.MappingProxyType(
    {
        "forward": ActionCategory.MOVEMENT,
        "back": ActionCategory.MOVEMENT,
        "left": ActionCategory.MOVEMENT,
        "right": ActionCategory.MOVEMENT,
        "jump": ActionCategory.MOVEMENT,
        "sneak": ActionCategory.MOVEMENT,
        "sprint": ActionCategory.MOVEMENT,
        "attack": ActionCategory.COMBAT,
        "use": ActionCategory.COMBAT,
        "pickBlock": ActionCategory.COMBAT,
        "drop": ActionCategory.COMBAT,
        "inventory": ActionCategory.INVENTORY,
        "swapHands": ActionCategory.INVENTORY,
        **{f"hotbar{i}": ActionCategory.INVENTORY for i in range(1, 10)},
        "hotbarLeft": ActionCategory.INVENTORY,
        "hotbarRight": ActionCategory.INVENTORY,
        "togglePerspective": ActionCategory.UI,
        "fullscreen": ActionCategory.UI,
        "chat": ActionCategory.UI,
        "command": ActionCategory.UI,
        "toggleHud": ActionCategory.UI,
    }
)

ACTION_LABELS = types.MappingProxyType(
    {
        "forward": "Forward",
        "back": "Back",
        "left": "Left",
        "right": "Right",
        "jump": "Jump",
        "sneak": "Sneak",
        "sprint": "Sprint",
        "attack": "Attack",
        "use": "Use Item",
        "pickBlock": "Pick Block",
        "drop": "Drop",
        "inventory": "Inventory",
        "swapHands": "Swap Hands",
        **{f"hotbar{i}": f"Hotbar {i}" for i in range(1, 10)},
        "hotbarLeft": "Hotbar Left",
        "hotbarRight": "Hotbar Right",
        "togglePerspective": "Perspective",
        "fullscreen": "Fullscreen",
        "chat": "Chat",
        "command": "Command",
        "toggleHud": "Toggle HUD",
    }
)

SHORT_ACTION_LABELS = types.MappingProxyType(
    {
        "forward": "Fwd",
        "back": "Back",
        "left": "Left",
        "right": "Right",
        "pickBlock": "Pick",
        "inventory": "Inv",
        "swapHands": "OH",
        **{f"hotbar{i}": f"HB{i}" for i in range(1, 10)},
        "hotbarLeft": "HB←",
        "hotbarRight": "HB→",
        "togglePerspective": "F5",
        "fullscreen": "FS",
        "command": "Cmd",
        "toggleHud": "HUD",
    }
)


def actions_for_mode(mode: InputMode) -> tuple[str, ...]:
    return CONTROLLER_ACTIONS if mode is InputMode.CONTROLLER else KEYBOARD_MOUSE_ACTIONS


def category_for(action: str) -> ActionCategory:
    return ACTION_CATEGORIES.get(action, ActionCategory.UI)


def get_action_label(action: str) -> str:
    return ACTION_LABELS.get(action, action)


def get_short_action_label(action: str) -> str:
    return SHORT_ACTION_LABELS.get(action, get_action_label(action))


class KeyBinding(msgspec.Struct, kw_only=True, frozen=True):
    action: str
    assignment: KeyAssignment
    category: ActionCategory
    id: typing.Optional[uuid.UUID] = None

    @property
    def key_code(self) -> str:
        return assignment_to_wire(self.assignment)

    @property
    def is_bound(self):
        return isinstance(self.assignment, Bound)

    @classmethod
    def from_wire(cls, action: str, key_code: typing.Optional[str], category=None, id=None):
        try:
            category = ActionCategory(category)
        except ValueError:
            category = category_for(action)
        return cls(action=action, assignment=assignment_from_wire(key_code), category=category, id=id)


class BindingSet:
    """The action-to-key table for one user, seen through one input mode.

    Several actions may share a key; the editor warns about that (see conflicts())
    but nothing here prevents it. Assigning a key to one action leaves every other
    action on that key where it was.
    """

    def __init__(self, bindings: collections.abc.Iterable[KeyBinding] = (), mode: InputMode = InputMode.KEYBOARD_MOUSE):
        self.mode = mode
        self._by_action: dict[str, KeyBinding] = {}
        for binding in bindings:
            self._by_action[binding.action] = binding

    @property
    def vocabulary(self):
        return actions_for_mode(self.mode)

    def __iter__(self):
        for action in self.vocabulary:
            if action in self._by_action:
                yield self._by_action[action]

    def __len__(self):
        return sum(1 for _ in self)

    def __contains__(self, action: str):
        return action in self._by_action

    def all_bindings(self) -> list[KeyBinding]:
        "Every stored binding, including ones outside the current mode's vocabulary."
        return list(self._by_action.values())

    def get(self, action: str) -> typing.Optional[KeyAssignment]:
        "The action's assignment, or None if it has never been configured."
        binding = self._by_action.get(action)
        return None if binding is None else binding.assignment

    def binding(self, action: str) -> typing.Optional[KeyBinding]:
        return self._by_action.get(action)

    def bindings_for_key(self, key_code: str) -> list[KeyBinding]:
        wanted = normalize(key_code)
        return [b for b in self if isinstance(b.assignment, Bound) and b.assignment.key_code == wanted]

    def set_binding(self, action: str, key: typing.Union[str, KeyAssignment]) -> KeyBinding:
        assignment = assignment_from_wire(key) if isinstance(key, str) else key
        existing = self._by_action.get(action)
        if existing is None:
            binding = KeyBinding(action=action, assignment=assignment, category=category_for(action))
        else:
            binding = msgspec.structs.replace(existing, assignment=assignment)
        if isinstance(assignment, Bound):
            others = [b.action for b in self.bindings_for_key(assignment.key_code) if b.action != action]
            if others:
                logger.debug("%s now shares %s with %s", action, assignment.key_code, others)
        self._by_action[action] = binding
        return binding

    def unbind(self, action: str) -> KeyBinding:
        return self.set_binding(action, UNBOUND)

    def conflicts(self) -> dict[str, list[KeyBinding]]:
        "Keys bound to more than one action in the current mode."
        by_key: dict[str, list[KeyBinding]] = {}
        for binding in self:
            if isinstance(binding.assignment, Bound):
                by_key.setdefault(binding.assignment.key_code, []).append(binding)
        return {key: bindings for key, bindings in by_key.items() if len(bindings) > 1}

    def copy(self):
        return BindingSet(self._by_action.values(), mode=self.mode)


DEFAULT_KEYBINDINGS = types.MappingProxyType(
    {
        "forward": "KeyW",
        "back": "KeyS",
        "left": "KeyA",
        "right": "KeyD",
        "jump": "Space",
        "sneak": "ShiftLeft",
        "sprint": "ControlLeft",
        "attack": "Mouse0",
        "use": "Mouse1",
        "pickBlock": "Mouse2",
        "drop": "KeyQ",
        "inventory": "KeyE",
        "swapHands": "KeyF",
        **{f"hotbar{i}": f"Digit{i}" for i in range(1, 10)},
        "togglePerspective": "F5",
        "fullscreen": "F11",
        "chat": "KeyT",
        "command": "Slash",
        "toggleHud": "F1",
    }
)

# Movement is on the left stick, so forward/back/left/right have no button.
DEFAULT_CONTROLLER_KEYBINDINGS = types.MappingProxyType(
    {
        "jump": "GamepadA",
        "sneak": "GamepadB",
        "sprint": "GamepadL3",
        "attack": "GamepadRT",
        "use": "GamepadLT",
        "pickBlock": "GamepadR3",
        "drop": "GamepadDpadDown",
        "inventory": "GamepadY",
        "swapHands": "GamepadX",
        "hotbarLeft": "GamepadLB",
        "hotbarRight": "GamepadRB",
        "togglePerspective": "GamepadDpadUp",
        "chat": "GamepadDpadRight",
    }
)


def default_bindings(mode: InputMode = InputMode.KEYBOARD_MOUSE) -> BindingSet:
    defaults = DEFAULT_CONTROLLER_KEYBINDINGS if mode is InputMode.CONTROLLER else DEFAULT_KEYBINDINGS
    return BindingSet((KeyBinding.from_wire(action, key_code) for action, key_code in defaults.items()), mode=mode)
