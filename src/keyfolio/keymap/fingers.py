# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections.abc
import enum
import logging
import types
import typing

import msgspec

logger = logging.getLogger(__name__)


class Finger(enum.Enum):
    LEFT_PINKY = "left-pinky"
    LEFT_RING = "left-ring"
    LEFT_MIDDLE = "left-middle"
    LEFT_INDEX = "left-index"
    LEFT_THUMB = "left-thumb"
    RIGHT_THUMB = "right-thumb"
    RIGHT_INDEX = "right-index"
    RIGHT_MIDDLE = "right-middle"
    RIGHT_RING = "right-ring"
    RIGHT_PINKY = "right-pinky"

    @property
    def label(self):
        hand, digit = self.value.split("-")
        return f"{hand.capitalize()} {digit}"

    @classmethod
    def coerce(cls, value) -> typing.Optional[Finger]:
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


def _fingers_for(finger: Finger, *keys: str):
    return {key: (finger,) for key in keys}


# A typical WASD hand position, mouse in the right hand.
DEFAULT_FINGER_ASSIGNMENTS = types.MappingProxyType(
    {
        **_fingers_for(
            Finger.LEFT_PINKY,
            "Tab",
            "CapsLock",
            "ShiftLeft",
            "ControlLeft",
            "Backquote",
            "Digit1",
            "KeyQ",
            "KeyA",
            "KeyZ",
        ),
        **_fingers_for(Finger.LEFT_RING, "Digit2", "KeyW", "KeyS", "KeyX"),
        **_fingers_for(Finger.LEFT_MIDDLE, "Digit3", "KeyE", "KeyD", "KeyC"),
        **_fingers_for(Finger.LEFT_INDEX, "Digit4", "Digit5", "KeyR", "KeyT", "KeyF", "KeyG", "KeyV", "KeyB"),
        **_fingers_for(Finger.LEFT_THUMB, "Space", "AltLeft"),
        **_fingers_for(Finger.RIGHT_THUMB, "AltRight"),
        **_fingers_for(Finger.RIGHT_INDEX, "Digit6", "Digit7", "KeyY", "KeyU", "KeyH", "KeyJ", "KeyN", "KeyM"),
        **_fingers_for(Finger.RIGHT_MIDDLE, "Digit8", "KeyI", "KeyK", "Comma"),
        **_fingers_for(Finger.RIGHT_RING, "Digit9", "KeyO", "KeyL", "Period"),
        **_fingers_for(
            Finger.RIGHT_PINKY,
            "Digit0",
            "Minus",
            "Equal",
            "KeyP",
            "BracketLeft",
            "BracketRight",
            "Semicolon",
            "Quote",
            "Backslash",
            "Slash",
            "Enter",
            "ShiftRight",
            "Backspace",
        ),
        "Mouse0": (Finger.RIGHT_INDEX,),
        "Mouse1": (Finger.RIGHT_MIDDLE,),
        "Mouse2": (Finger.RIGHT_MIDDLE,),
        "Mouse3": (Finger.RIGHT_THUMB,),
        "Mouse4": (Finger.RIGHT_THUMB,),
    }
)


class FingerAssignmentMap(collections.abc.Mapping):
    """keyCode -> fingers used to press it.

    Each key holds a list so that chords can be described later; for now only the
    first finger is ever shown. Keys are stored as given. Lookups also try the
    lower-cased spelling, which older data used.
    """

    def __init__(self, assignments: typing.Optional[collections.abc.Mapping] = None):
        self._assignments: dict[str, tuple[Finger, ...]] = {}
        for key_code, fingers in (assignments or {}).items():
            valid = tuple(f for f in (Finger.coerce(x) for x in fingers) if f is not None)
            if valid:
                self._assignments[key_code] = valid

    @classmethod
    def defaults(cls):
        return cls(DEFAULT_FINGER_ASSIGNMENTS)

    def __getitem__(self, key_code: str) -> tuple[Finger, ...]:
        if key_code in self._assignments:
            return self._assignments[key_code]
        return self._assignments[key_code.lower()]

    def __iter__(self):
        return iter(self._assignments)

    def __len__(self):
        return len(self._assignments)

    def __contains__(self, key_code):
        return key_code in self._assignments or (isinstance(key_code, str) and key_code.lower() in self._assignments)

    def finger_for(self, key_code: str) -> typing.Optional[Finger]:
        fingers = self.get(key_code)
        return fingers[0] if fingers else None

    def assign(self, key_code: str, *fingers: Finger) -> FingerAssignmentMap:
        "A new map with key_code's fingers replaced; no fingers clears the key."
        updated = dict(self._assignments)
        updated.pop(key_code, None)
        if fingers:
            updated[key_code] = tuple(fingers)
        return FingerAssignmentMap(updated)

    def to_wire(self) -> dict[str, list[str]]:
        return {key_code: [f.value for f in fingers] for key_code, fingers in self._assignments.items()}

    def to_json(self) -> str:
        return msgspec.json.encode(self.to_wire()).decode("utf-8")

    @classmethod
    def from_json(cls, data: typing.Union[str, bytes, None]) -> FingerAssignmentMap:
        "Unknown finger tags are dropped; unreadable data gives an empty map."
        if not data:
            return cls()
        try:
            decoded = msgspec.json.decode(data, type=dict[str, list[str]])
        except msgspec.DecodeError:
            logger.warning("Ignoring unreadable finger assignments")
            return cls()
        return cls(decoded)

    def __eq__(self, other):
        if isinstance(other, FingerAssignmentMap):
            return self._assignments == other._assignments
        return NotImplemented

    def __repr__(self):
        return f"FingerAssignmentMap({self.to_wire()!r})"
