# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import datetime
import enum
import logging
import typing
import uuid

import msgspec

from ..commontypes import InputMode, KeyboardLayout
from ..keymap.bindings import KeyBinding
from ..keymap.fingers import FingerAssignmentMap
from ..keymap.remaps import KeyRemap
from ..sensitivity import PointerScale, cursor_speed, distance_per_360

logger = logging.getLogger(__name__)


class PresetSource(enum.Enum):
    MANUAL = "manual"
    IMPORT = "import"
    ONBOARDING = "onboarding"


class ChangeType(enum.Enum):
    KEYBINDING = "keybinding"
    DEVICE = "device"
    GAME_SETTING = "game_setting"
    REMAP = "remap"
    PRESET_SWITCH = "preset_switch"


class CopyTarget(enum.Enum):
    BINDINGS = "bindings"
    REMAPS = "remaps"
    FINGERS = "fingers"
    ALL = "all"


# Snapshot records. These are what goes inside a preset's JSON columns, so their
# field names are the camelCase ones the stored data already uses.


class PresetBinding(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    action: str
    key_code: str
    category: str

    @classmethod
    def from_binding(cls, binding: KeyBinding):
        return cls(action=binding.action, key_code=binding.key_code, category=binding.category.value)

    def to_binding(self) -> KeyBinding:
        return KeyBinding.from_wire(self.action, self.key_code, self.category)


class PresetRemap(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    source_key: str
    target_key: typing.Optional[str]
    software: typing.Optional[str] = None
    notes: typing.Optional[str] = None

    @classmethod
    def from_remap(cls, remap: KeyRemap):
        return cls(source_key=remap.source_key, target_key=remap.target_key, software=remap.software, notes=remap.notes)

    def to_remap(self) -> KeyRemap:
        return KeyRemap.from_wire(self.source_key, self.target_key, software=self.software, notes=self.notes)


class DeviceConfig(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    keyboard_layout: typing.Optional[str] = KeyboardLayout.US.value
    keyboard_model: typing.Optional[str] = None
    mouse_dpi: typing.Optional[int] = None
    game_sensitivity: typing.Optional[float] = None
    windows_speed: typing.Optional[int] = None
    # takes precedence over windows_speed when set
    windows_speed_multiplier: typing.Optional[float] = None
    mouse_acceleration: typing.Optional[bool] = False
    raw_input: typing.Optional[bool] = True
    cm360: typing.Optional[float] = None
    mouse_model: typing.Optional[str] = None
    toggle_sprint: typing.Optional[bool] = None
    toggle_sneak: typing.Optional[bool] = None
    auto_jump: typing.Optional[bool] = None
    game_language: typing.Optional[str] = None
    fov: typing.Optional[int] = None
    gui_scale: typing.Optional[int] = None
    input_mode: str = InputMode.KEYBOARD_MOUSE.value
    notes: typing.Optional[str] = None

    @property
    def layout(self) -> typing.Optional[KeyboardLayout]:
        return KeyboardLayout.coerce(self.keyboard_layout)

    @property
    def mode(self) -> InputMode:
        try:
            return InputMode(self.input_mode)
        except ValueError:
            return InputMode.KEYBOARD_MOUSE

    def distance_per_360(self, scale: PointerScale = PointerScale.TWENTY):
        return distance_per_360(
            self.mouse_dpi,
            self.game_sensitivity,
            raw_input=self.raw_input,
            pointer_speed=self.windows_speed,
            custom_multiplier=self.windows_speed_multiplier,
            scale=scale,
        )

    def cursor_speed(self, scale: PointerScale = PointerScale.TWENTY):
        return cursor_speed(
            self.mouse_dpi,
            raw_input=self.raw_input,
            pointer_speed=self.windows_speed,
            custom_multiplier=self.windows_speed_multiplier,
            scale=scale,
        )

    def with_computed_cm360(self, scale: PointerScale = PointerScale.TWENTY):
        cm360 = self.distance_per_360(scale)
        return msgspec.structs.replace(self, cm360=None if cm360 is None else round(cm360, 2))

    def to_db_dict(self):
        return msgspec.structs.asdict(self)


class HotbarSlot(msgspec.Struct, frozen=True):
    slot: int
    items: list[str]


class ItemLayout(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    segment: str
    slots: list[HotbarSlot]
    offhand: list[str] = msgspec.field(default_factory=list)
    notes: typing.Optional[str] = None
    display_order: int = 0


class SearchCraft(msgspec.Struct, kw_only=True, frozen=True, rename="camel"):
    sequence: int
    items: list[str]
    keys: list[str]
    search_str: typing.Optional[str] = None
    comment: typing.Optional[str] = None


class CustomKey(msgspec.Struct, kw_only=True, frozen=True):
    key_code: str
    key_name: str
    category: str
    notes: typing.Optional[str] = None
    id: typing.Optional[uuid.UUID] = None


T = typing.TypeVar("T")


def encode_snapshot(items: typing.Optional[typing.Sequence]) -> typing.Optional[str]:
    "JSON for a collection, or None when there is nothing in it."
    if not items:
        return None
    return msgspec.json.encode(items).decode("utf-8")


def decode_snapshot(data: typing.Optional[str], typ: type[T]) -> typing.Optional[T]:
    "Decode a snapshot column; absent or unreadable data gives None."
    if data is None:
        return None
    try:
        return msgspec.json.decode(data, type=typ)
    except (msgspec.DecodeError, msgspec.ValidationError) as e:
        logger.warning("Ignoring unreadable %s snapshot: %s", typ, e)
        return None


class Preset(msgspec.Struct, kw_only=True, frozen=True):
    id: uuid.UUID
    user_id: str
    name: str
    description: typing.Optional[str] = None
    is_active: bool = False
    keybindings_data: typing.Optional[str] = None
    device_config_data: typing.Optional[str] = None
    remaps_data: typing.Optional[str] = None
    finger_assignments_data: typing.Optional[str] = None
    item_layouts_data: typing.Optional[str] = None
    search_crafts_data: typing.Optional[str] = None
    created_at: datetime.datetime
    updated_at: datetime.datetime

    def bindings(self) -> typing.Optional[list[KeyBinding]]:
        decoded = decode_snapshot(self.keybindings_data, list[PresetBinding])
        return None if decoded is None else [b.to_binding() for b in decoded]

    def remaps(self) -> typing.Optional[list[KeyRemap]]:
        decoded = decode_snapshot(self.remaps_data, list[PresetRemap])
        return None if decoded is None else [r.to_remap() for r in decoded]

    def device_config(self) -> typing.Optional[DeviceConfig]:
        return decode_snapshot(self.device_config_data, DeviceConfig)

    def finger_assignments(self) -> typing.Optional[FingerAssignmentMap]:
        if self.finger_assignments_data is None:
            return None
        return FingerAssignmentMap.from_json(self.finger_assignments_data)

    def item_layouts(self) -> typing.Optional[list[ItemLayout]]:
        return decode_snapshot(self.item_layouts_data, list[ItemLayout])

    def search_crafts(self) -> typing.Optional[list[SearchCraft]]:
        return decode_snapshot(self.search_crafts_data, list[SearchCraft])

    def to_db_dict(self):
        return msgspec.structs.asdict(self)


class HistoryEntry(msgspec.Struct, kw_only=True, frozen=True):
    id: uuid.UUID
    user_id: str
    change_type: ChangeType
    change_description: str
    previous_data: typing.Optional[str] = None
    new_data: typing.Optional[str] = None
    preset_id: typing.Optional[uuid.UUID] = None
    created_at: datetime.datetime

    def to_db_dict(self):
        return msgspec.structs.asdict(self)


class ImportResult(msgspec.Struct, kw_only=True):
    success: bool
    counts: dict[str, int] = msgspec.field(default_factory=dict)
    error: typing.Optional[str] = None
    preset_id: typing.Optional[uuid.UUID] = None
