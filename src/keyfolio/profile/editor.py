# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import logging
import typing

import msgspec

from ..commontypes import InputMode
from ..keymap.bindings import UNBOUND, BindingSet, KeyAssignment, KeyBinding, assignment_from_wire
from ..keymap.fingers import Finger, FingerAssignmentMap
from ..keymap.keycodes import normalize
from ..keymap.remaps import KeyRemap, PendingTarget, RemapLayer, target_from_wire

if typing.TYPE_CHECKING:
    from ..db import KeyfolioDb
    import uuid


logger = logging.getLogger(__name__)


# The editor works on a copy of the live configuration. Changes pile up here
# (bindings keyed by action, remaps keyed by normalized source key, the finger
# map as a whole) and reach the database only when save() is called, all in one
# transaction. Two editors for the same user simply overwrite each other.
class EditingBuffer:
    def __init__(self):
        self.user_id: typing.Optional[str] = None
        self.mode = InputMode.KEYBOARD_MOUSE
        self._saved = BindingSet()
        self._pending_bindings: dict[str, KeyAssignment] = {}
        self._remaps: dict[str, KeyRemap] = {}
        self._deleted_remap_ids: set[uuid.UUID] = set()
        self._remaps_changed = False
        self._fingers = FingerAssignmentMap()
        self._fingers_changed = False
        self.unsaved_changes = False

    @property
    def has_user(self):
        return self.user_id is not None

    def load(self, user_id: str, db: KeyfolioDb):
        config = db.load_device_config(user_id)
        self.mode = config.mode if config is not None else InputMode.KEYBOARD_MOUSE
        self._saved = BindingSet(db.load_bindings(user_id), mode=self.mode)
        self._remaps = {normalize(r.source_key): r for r in db.load_remaps(user_id)}
        self._fingers = db.load_finger_assignments(user_id)
        self.user_id = user_id
        self._clear_pending()

    def _clear_pending(self):
        self._pending_bindings = {}
        self._deleted_remap_ids = set()
        self._remaps_changed = False
        self._fingers_changed = False
        self.unsaved_changes = False

    # bindings

    @property
    def bindings(self) -> BindingSet:
        "Saved bindings with the pending changes laid over them."
        merged = self._saved.copy()
        for action, assignment in self._pending_bindings.items():
            merged.set_binding(action, assignment)
        return merged

    def set_binding(self, action: str, key: typing.Union[str, KeyAssignment]):
        self._pending_bindings[action] = assignment_from_wire(key) if isinstance(key, str) else key
        self.unsaved_changes = True

    def unbind(self, action: str):
        self.set_binding(action, UNBOUND)

    def merge_bindings(self, bindings: typing.Iterable[KeyBinding]):
        "Take the keys of incoming bindings for actions the buffer already has, where they differ."
        current = self.bindings
        for incoming in bindings:
            existing = current.binding(incoming.action)
            if existing is not None and existing.key_code != incoming.key_code:
                self.set_binding(incoming.action, incoming.assignment)

    # remaps

    @property
    def remap_layer(self) -> RemapLayer:
        return RemapLayer(self._remaps.values())

    @property
    def remaps(self) -> list[KeyRemap]:
        return list(self._remaps.values())

    def set_remap(
        self,
        source_key: str,
        target_key: typing.Optional[str],
        software: typing.Optional[str] = None,
        notes: typing.Optional[str] = None,
    ):
        "target_key None disables the key; an empty string leaves the target to be chosen."
        key = normalize(source_key)
        existing = self._remaps.get(key)
        self._remaps[key] = KeyRemap(
            source_key=key,
            target=target_from_wire(target_key),
            software=software,
            notes=notes,
            id=None if existing is None else existing.id,
        )
        self._remaps_changed = True
        self.unsaved_changes = True

    def delete_remap(self, source_key: str):
        removed = self._remaps.pop(normalize(source_key), None)
        if removed is None:
            return
        if removed.id is not None:
            self._deleted_remap_ids.add(removed.id)
        self._remaps_changed = True
        self.unsaved_changes = True

    def replace_remaps(self, remaps: typing.Iterable[KeyRemap]):
        for remap in self._remaps.values():
            if remap.id is not None:
                self._deleted_remap_ids.add(remap.id)
        self._remaps = {normalize(r.source_key): msgspec.structs.replace(r, id=None) for r in remaps}
        self._remaps_changed = True
        self.unsaved_changes = True

    # fingers

    @property
    def fingers(self) -> FingerAssignmentMap:
        return self._fingers

    def assign_finger(self, key_code: str, *fingers: Finger):
        self._fingers = self._fingers.assign(key_code, *fingers)
        self._fingers_changed = True
        self.unsaved_changes = True

    def replace_fingers(self, fingers: FingerAssignmentMap):
        self._fingers = FingerAssignmentMap(fingers.to_wire())
        self._fingers_changed = True
        self.unsaved_changes = True

    def save(self, db: KeyfolioDb):
        if not self.has_user or not self.unsaved_changes:
            return
        merged = self.bindings
        bindings = [merged.binding(action) for action in self._pending_bindings]
        remaps = []
        if self._remaps_changed:
            remaps = [r for r in self._remaps.values() if not isinstance(r.target, PendingTarget)]
            skipped = len(self._remaps) - len(remaps)
            if skipped:
                logger.debug("Not saving %d remaps that have no target yet", skipped)
        db.save_edits(
            self.user_id,
            bindings=bindings,
            deleted_remap_ids=self._deleted_remap_ids,
            remaps=remaps,
            fingers=self._fingers if self._fingers_changed else None,
        )
        self._saved = BindingSet(db.load_bindings(self.user_id), mode=self.mode)
        self._remaps = {normalize(r.source_key): r for r in db.load_remaps(self.user_id)}
        self._clear_pending()
