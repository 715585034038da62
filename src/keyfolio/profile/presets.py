# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Presets: named, self-contained snapshots of a user's whole control setup.

A preset never points at live rows. Everything it holds was serialized to JSON
when it was made, so later edits to the live configuration (or to another
preset) cannot reach it. At most one preset per user is active; making one
active and recording that in the history happen in a single transaction.
"""
from __future__ import annotations

import datetime
import logging
import typing
import uuid

import msgspec

from ..db import KeyfolioDb
from ..keymap.bindings import KeyBinding, default_bindings
from ..keymap.fingers import FingerAssignmentMap
from ..keymap.remaps import KeyRemap, PendingTarget
from ..util import now
from .doctypes import (
    ChangeType,
    CopyTarget,
    DeviceConfig,
    HistoryEntry,
    ItemLayout,
    Preset,
    PresetBinding,
    PresetRemap,
    PresetSource,
    SearchCraft,
    encode_snapshot,
)

if typing.TYPE_CHECKING:
    from .editor import EditingBuffer

logger = logging.getLogger(__name__)

INITIAL_PRESET_NAMES = {
    PresetSource.IMPORT: "Import ({date})",
    PresetSource.ONBOARDING: "Initial setup ({date})",
}

PRESET_DESCRIPTIONS = {
    PresetSource.IMPORT: "Created automatically from imported settings",
    PresetSource.ONBOARDING: "Initial settings when the account was created",
}

HISTORY_DESCRIPTIONS = {
    PresetSource.MANUAL: 'Created preset "{name}"',
    PresetSource.IMPORT: 'Created preset "{name}" from import',
    PresetSource.ONBOARDING: 'Created preset "{name}" as initial setup',
}


def generate_name(source: typing.Union[PresetSource, str], today: typing.Optional[datetime.date] = None) -> str:
    source = PresetSource(source)
    if source not in INITIAL_PRESET_NAMES:
        raise ValueError(f"No generated name for {source.value} presets")
    if today is None:
        today = now().date()
    return INITIAL_PRESET_NAMES[source].format(date=today.strftime("%Y/%m/%d"))


def serialize_bindings(bindings: typing.Optional[typing.Iterable[KeyBinding]]) -> typing.Optional[str]:
    return encode_snapshot([PresetBinding.from_binding(b) for b in bindings or ()])


def serialize_remaps(remaps: typing.Optional[typing.Iterable[KeyRemap]]) -> typing.Optional[str]:
    return encode_snapshot([PresetRemap.from_remap(r) for r in remaps or () if not isinstance(r.target, PendingTarget)])


def serialize_device_config(config: typing.Optional[DeviceConfig]) -> typing.Optional[str]:
    if config is None:
        return None
    return msgspec.json.encode(config).decode("utf-8")


def serialize_fingers(fingers: typing.Optional[FingerAssignmentMap]) -> typing.Optional[str]:
    if not fingers:
        return None
    return fingers.to_json()


class PresetStore:
    def __init__(self, db: KeyfolioDb):
        self.db = db

    def create_preset(
        self,
        user_id: str,
        name: str,
        *,
        bindings: typing.Optional[typing.Iterable[KeyBinding]] = None,
        device_config: typing.Optional[DeviceConfig] = None,
        remaps: typing.Optional[typing.Iterable[KeyRemap]] = None,
        fingers: typing.Optional[FingerAssignmentMap] = None,
        item_layouts: typing.Optional[typing.Sequence[ItemLayout]] = None,
        search_crafts: typing.Optional[typing.Sequence[SearchCraft]] = None,
        source: typing.Union[PresetSource, str] = PresetSource.MANUAL,
        description: typing.Optional[str] = None,
        is_active: bool = False,
    ) -> Preset:
        """Snapshot the given collections into a new preset and log its creation.

        Empty or missing collections are stored as None rather than as empty JSON
        arrays, so "nothing recorded" stays distinguishable. If is_active, every
        other preset of the user is deactivated in the same transaction.
        """
        if not user_id:
            raise ValueError("A preset needs a user id")
        if not name or not name.strip():
            raise ValueError("A preset needs a name")
        source = PresetSource(source)
        timestamp = now()
        preset = Preset(
            id=uuid.uuid4(),
            user_id=user_id,
            name=name.strip(),
            description=description,
            is_active=is_active,
            keybindings_data=serialize_bindings(bindings),
            device_config_data=serialize_device_config(device_config),
            remaps_data=serialize_remaps(remaps),
            finger_assignments_data=serialize_fingers(fingers),
            item_layouts_data=encode_snapshot(item_layouts),
            search_crafts_data=encode_snapshot(search_crafts),
            created_at=timestamp,
            updated_at=timestamp,
        )
        history = HistoryEntry(
            id=uuid.uuid4(),
            user_id=user_id,
            change_type=ChangeType.PRESET_SWITCH,
            change_description=HISTORY_DESCRIPTIONS[source].format(name=preset.name),
            preset_id=preset.id,
            created_at=timestamp,
        )
        self.db.insert_preset(preset, history)
        return preset

    def snapshot_current(self, user_id: str, name: str, source=PresetSource.MANUAL, description=None) -> Preset:
        "Make an active preset out of whatever the user's live configuration is right now."
        return self.create_preset(
            user_id,
            name,
            bindings=self.db.load_bindings(user_id),
            device_config=self.db.load_device_config(user_id),
            remaps=self.db.load_remaps(user_id),
            fingers=self.db.load_finger_assignments(user_id),
            item_layouts=self.db.load_item_layouts(user_id),
            search_crafts=self.db.load_search_crafts(user_id),
            source=source,
            description=description,
            is_active=True,
        )

    def save_current(self, user_id: str, name: str, description: typing.Optional[str] = None) -> Preset:
        return self.snapshot_current(user_id, name, description=description)

    def create_initial_preset(self, user_id: str, source: typing.Union[PresetSource, str]) -> Preset:
        source = PresetSource(source)
        return self.snapshot_current(user_id, generate_name(source), source=source, description=PRESET_DESCRIPTIONS[source])

    def onboard_user(self, user_id: str, device_config: typing.Optional[DeviceConfig] = None) -> Preset:
        "Give a new user the default bindings and device config, and an initial preset of them."
        if device_config is None:
            device_config = DeviceConfig()
        self.db.save_bindings(user_id, default_bindings(device_config.mode).all_bindings())
        self.db.save_device_config(user_id, device_config)
        return self.create_initial_preset(user_id, PresetSource.ONBOARDING)

    def list_presets(self, user_id: str) -> list[Preset]:
        return self.db.list_presets(user_id)

    def active_preset(self, user_id: str) -> typing.Optional[Preset]:
        return self.db.active_preset(user_id)

    def history(self, user_id: str, limit: typing.Optional[int] = None) -> list[HistoryEntry]:
        return self.db.list_history(user_id, limit=limit)

    def copy_into(
        self,
        buffer: EditingBuffer,
        preset: Preset,
        which: typing.Union[CopyTarget, str] = CopyTarget.ALL,
    ) -> EditingBuffer:
        """Load part of a preset into an editing buffer. Nothing is written until the buffer is saved.

        Bindings are merged by action: only actions the buffer already knows are
        touched, and only when the key differs. Remaps and finger assignments
        replace the buffer's whole collection.
        """
        which = CopyTarget(which)
        if which in (CopyTarget.BINDINGS, CopyTarget.ALL):
            bindings = preset.bindings()
            if bindings is not None:
                buffer.merge_bindings(bindings)
        if which in (CopyTarget.REMAPS, CopyTarget.ALL):
            remaps = preset.remaps()
            if remaps is not None:
                buffer.replace_remaps(remaps)
        if which in (CopyTarget.FINGERS, CopyTarget.ALL):
            fingers = preset.finger_assignments()
            if fingers is not None:
                buffer.replace_fingers(fingers)
        return buffer

    def apply_preset(self, user_id: str, preset_id: uuid.UUID) -> Preset:
        """Write a preset back over the live configuration and make it the active one.

        Bindings are merged by action, remaps, item layouts and search crafts
        replace the live ones, and the device config is overwritten. Collections
        the preset has no data for are left as they are.
        """
        preset = self.db.load_preset(user_id, preset_id)
        previous = self.db.active_preset(user_id)
        history = HistoryEntry(
            id=uuid.uuid4(),
            user_id=user_id,
            change_type=ChangeType.PRESET_SWITCH,
            change_description=f'Switched to preset "{preset.name}"',
            previous_data=None if previous is None else _preset_summary(previous),
            new_data=_preset_summary(preset),
            preset_id=preset.id,
            created_at=now(),
        )
        self.db.apply_snapshot(
            user_id,
            preset.id,
            history,
            bindings=preset.bindings(),
            device_config=preset.device_config(),
            fingers_json=None if preset.finger_assignments_data is None else preset.finger_assignments().to_json(),
            remaps=preset.remaps(),
            item_layouts=preset.item_layouts(),
            search_crafts=preset.search_crafts(),
        )
        logger.info("%s switched to preset %s", user_id, preset.id)
        return self.db.load_preset(user_id, preset.id)


def _preset_summary(preset: Preset) -> str:
    return msgspec.json.encode({"presetId": str(preset.id), "name": preset.name}).decode("utf-8")
