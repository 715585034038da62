# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Key remaps the player has configured outside the game.

A remap says "pressing source produces target". The remap is recorded here only
so that bindings and typing hints can be shown the way the player actually
experiences them; nothing in this package performs the remap.
"""
from __future__ import annotations

import collections.abc
import enum
import re
import typing
import uuid

import msgspec

from .keycodes import key_code_for_character, normalize, printable_character


class Remapped(msgspec.Struct, frozen=True, tag=True):
    key_code: str


# The key does nothing at all.
class Disabled(msgspec.Struct, frozen=True, tag=True):
    pass


class PendingTarget(msgspec.Struct, frozen=True, tag=True):
    pass


DISABLED = Disabled()
PENDING_TARGET = PendingTarget()

RemapTarget = typing.Union[Remapped, Disabled, PendingTarget]


def target_from_wire(target_key: typing.Optional[str]) -> RemapTarget:
    match target_key:
        case None:
            return DISABLED
        case "":
            return PENDING_TARGET
        case _:
            return Remapped(target_key)


def target_to_wire(target: RemapTarget) -> typing.Optional[str]:
    match target:
        case Remapped(key_code=key_code):
            return key_code
        case PendingTarget():
            return ""
        case _:
            return None


class RemapKind(enum.Enum):
    NONE = "none"
    KEYBOARD = "keyboard"
    SPECIAL = "special"
    DISABLED = "disabled"


_ORDINARY_KEY = re.compile(
    r"^(Key[A-Z]|Digit[0-9]|F[0-9]+|Numpad[0-9]|Arrow|Space|Tab|Enter|Escape|Backspace"
    r"|Delete|Insert|Home|End|PageUp|PageDown|Shift|Control|Alt|Meta|Caps)"
)


class KeyRemap(msgspec.Struct, kw_only=True, frozen=True):
    source_key: str
    target: RemapTarget
    software: typing.Optional[str] = None
    notes: typing.Optional[str] = None
    id: typing.Optional[uuid.UUID] = None

    @property
    def target_key(self) -> typing.Optional[str]:
        return target_to_wire(self.target)

    @classmethod
    def from_wire(cls, source_key: str, target_key: typing.Optional[str], software=None, notes=None, id=None):
        return cls(source_key=source_key, target=target_from_wire(target_key), software=software, notes=notes, id=id)


class PlannedKey(msgspec.Struct, frozen=True):
    char: str
    physical_key: str
    is_remapped: bool


class RemapLayer:
    """A read-only view over one user's remaps.

    Lookups are by normalized source key, so "key.keyboard.x", "KEYX" and "KeyX"
    all find the same row. When two rows share a source key the later one wins.
    """

    def __init__(self, remaps: collections.abc.Iterable[KeyRemap] = ()):
        self._remaps = tuple(remaps)
        self._by_source: dict[str, KeyRemap] = {}
        # printable character of the target -> source key
        self._reverse_index: dict[str, str] = {}
        for remap in self._remaps:
            self._by_source[normalize(remap.source_key)] = remap
            if isinstance(remap.target, Remapped):
                self._reverse_index[printable_character(remap.target.key_code)] = remap.source_key

    def __iter__(self):
        return iter(self._remaps)

    def __len__(self):
        return len(self._remaps)

    def get(self, source_key: str) -> typing.Optional[KeyRemap]:
        return self._by_source.get(normalize(source_key))

    def forward(self, source_key: str) -> typing.Union[str, Disabled, None]:
        """What pressing source_key produces.

        None when there is no remap for the key (or its target has not been
        chosen yet), DISABLED when the key is switched off, else the target key.
        """
        remap = self.get(source_key)
        if remap is None:
            return None
        match remap.target:
            case Remapped(key_code=key_code):
                return key_code
            case Disabled():
                return DISABLED
            case _:
                return None

    def is_disabled(self, source_key: str) -> bool:
        return self.forward(source_key) is DISABLED

    def remap_kind(self, source_key: str) -> RemapKind:
        remap = self.get(source_key)
        if remap is None:
            return RemapKind.NONE
        match remap.target:
            case Disabled():
                return RemapKind.DISABLED
            case Remapped(key_code=key_code) if not _ORDINARY_KEY.match(key_code):
                return RemapKind.SPECIAL
            case _:
                return RemapKind.KEYBOARD

    def reverse_character_plan(self, text: str) -> list[PlannedKey]:
        """Which physical key to press for each character of text.

        Remaps only record source -> target, so a character produced by a remap
        is traced back to the key whose target types it. Characters nobody remaps
        onto are assumed to be on their usual key.
        """
        plan = []
        for char in text:
            source_key = self._reverse_index.get(char.lower())
            if source_key:
                plan.append(PlannedKey(printable_character(source_key), source_key, True))
            else:
                plan.append(PlannedKey(char.lower(), key_code_for_character(char), False))
        return plan

    def as_dict(self) -> dict[str, typing.Optional[str]]:
        "Remaps as a plain source -> target mapping, disabled keys mapping to None."
        return {
            remap.source_key: remap.target_key for remap in self._remaps if not isinstance(remap.target, PendingTarget)
        }
