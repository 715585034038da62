# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""One-shot import of a player's setup from the older hotkeys site.

The payload has independent optional sections. Each one is read and validated
on its own and then replaces the user's existing rows of that kind; a section
that can't be read is logged and counted as zero without stopping the others.
Afterwards an active onboarding preset is made from whatever the user's live
configuration has become.
"""
from __future__ import annotations

import logging
import types
import typing

import msgspec
import requests

from ..commontypes import KeyboardLayout, LegacyFetchError
from ..db import KeyfolioDb
from ..keymap.bindings import KeyBinding
from ..keymap.fingers import FingerAssignmentMap
from ..keymap.keycodes import normalize
from ..keymap.remaps import DISABLED, KeyRemap, Remapped
from ..util import blank_to_none
from .doctypes import CustomKey, DeviceConfig, HotbarSlot, ImportResult, ItemLayout, PresetSource, SearchCraft
from .presets import PresetStore

logger = logging.getLogger(__name__)

DISABLED_SENTINEL = "key.keyboard.disabled"

# Only the actions the old site knew about; it has no toggleHud.
LEGACY_ACTIONS = (
    "forward",
    "back",
    "left",
    "right",
    "jump",
    "sneak",
    "sprint",
    "attack",
    "use",
    "pickBlock",
    "drop",
    "inventory",
    "swapHands",
    *(f"hotbar{i}" for i in range(1, 10)),
    "togglePerspective",
    "fullscreen",
    "chat",
    "command",
)

# payload name -> DeviceConfig field
LEGACY_DEVICE_FIELDS = types.MappingProxyType(
    {
        "keyboardLayout": "keyboard_layout",
        "keyboardModel": "keyboard_model",
        "mouseModel": "mouse_model",
        "mouseDpi": "mouse_dpi",
        "gameSensitivity": "game_sensitivity",
        "windowsSpeed": "windows_speed",
        "cm360": "cm360",
        "toggleSprint": "toggle_sprint",
        "toggleSneak": "toggle_sneak",
        "autoJump": "auto_jump",
        "rawInput": "raw_input",
        "mouseAcceleration": "mouse_acceleration",
        "gameLanguage": "game_language",
        "notes": "notes",
    }
)

MOUSE_KEYWORDS = ("mouse", "マウス", "mb", "クリック", "チルト", "ホイール", "wheel", "click", "サイド", "side")

SECTIONS = (
    "keybindings",
    "settings",
    "custom_keys",
    "remaps",
    "finger_assignments",
    "item_layouts",
    "search_crafts",
)


def guess_custom_key_category(key_code: str, key_name: str) -> str:
    "Custom keys whose code or name mentions a mouse, click, wheel or side button are mouse keys."
    lowered_name = key_name.lower()
    lowered_code = key_code.lower()
    if any(keyword in lowered_name or keyword in lowered_code for keyword in MOUSE_KEYWORDS):
        return "mouse"
    return "keyboard"


def fetch_legacy_payload(api_url: str, player: str, timeout: float = 10.0) -> dict:
    url = f"{api_url.rstrip('/')}/api/player/{player}"
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        payload = response.json()
    except requests.RequestException as e:
        raise LegacyFetchError(f"Could not fetch legacy data for {player}: {e}") from e
    except ValueError as e:
        raise LegacyFetchError(f"Legacy data for {player} is not JSON") from e
    if not isinstance(payload, dict):
        raise LegacyFetchError(f"Legacy data for {player} is not an object")
    return payload


def _expect(value, typ, what):
    if not isinstance(value, typ):
        raise TypeError(f"{what} should be {typ.__name__}, not {type(value).__name__}")
    return value


def read_keybindings(settings: dict) -> typing.Optional[list[KeyBinding]]:
    "None when the settings carry no bindings at all."
    if not any(action in settings for action in LEGACY_ACTIONS):
        return None
    bindings = []
    for action in LEGACY_ACTIONS:
        raw = settings.get(action)
        if raw and isinstance(raw, str):
            bindings.append(KeyBinding.from_wire(action, normalize(raw)))
    return bindings


def _integral(value):
    # the old site sometimes wrote whole numbers as 800.0; float fields accept ints
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value


def read_device_settings(settings: dict) -> dict:
    present = {name: _integral(settings[name]) for name in LEGACY_DEVICE_FIELDS if name in settings}
    # validates the types; camelCase names are what DeviceConfig reads
    converted = msgspec.convert(present, type=DeviceConfig)
    values = {LEGACY_DEVICE_FIELDS[name]: getattr(converted, LEGACY_DEVICE_FIELDS[name]) for name in present}
    if "keyboard_layout" in values:
        layout = KeyboardLayout.coerce(values["keyboard_layout"])
        values["keyboard_layout"] = None if layout is None else layout.value
    return values


def read_custom_keys(entries) -> list[CustomKey]:
    custom_keys: dict[str, CustomKey] = {}
    for entry in _expect(entries, list, "customKeys"):
        if not isinstance(entry, dict):
            continue
        key_code, key_name = entry.get("keyCode"), entry.get("keyName")
        if not (key_code and key_name and isinstance(key_code, str) and isinstance(key_name, str)):
            continue
        key_code = normalize(key_code)
        custom_keys.setdefault(
            key_code,
            CustomKey(key_code=key_code, key_name=key_name, category=guess_custom_key_category(key_code, key_name)),
        )
    return list(custom_keys.values())


def read_remaps(remappings) -> list[KeyRemap]:
    remaps: dict[str, KeyRemap] = {}
    for source_raw, target_raw in _expect(remappings, dict, "remappings").items():
        if target_raw is not None:
            _expect(target_raw, str, f"remap target for {source_raw}")
        source_key = normalize(source_raw)
        if not target_raw or target_raw == DISABLED_SENTINEL:
            target = DISABLED
        else:
            target = Remapped(normalize(target_raw))
        remaps[source_key] = KeyRemap(source_key=source_key, target=target)
    return list(remaps.values())


def read_finger_assignments(assignments) -> FingerAssignmentMap:
    by_key: dict[str, list] = {}
    for key_code, fingers in _expect(assignments, dict, "fingerAssignments").items():
        if key_code and isinstance(key_code, str) and isinstance(fingers, list):
            # the first spelling of a key wins
            by_key.setdefault(normalize(key_code), fingers)
    return FingerAssignmentMap(by_key)


def _without_any(items) -> list[str]:
    if not isinstance(items, list):
        return []
    return [item for item in items if isinstance(item, str) and item != "any"]


def read_item_layouts(entries) -> list[ItemLayout]:
    layouts: dict[str, ItemLayout] = {}
    for entry in _expect(entries, list, "itemLayouts"):
        if not isinstance(entry, dict) or not isinstance(entry.get("segment"), str):
            continue
        segment = entry["segment"]
        if segment in layouts:
            continue
        slots = []
        for i in range(1, 10):
            items = _without_any(entry.get(f"slot{i}"))
            if items:
                slots.append(HotbarSlot(slot=i, items=items))
        layouts[segment] = ItemLayout(
            segment=segment,
            slots=slots,
            offhand=_without_any(entry.get("offhand")),
            notes=blank_to_none(entry.get("notes")) if isinstance(entry.get("notes"), str) else None,
            display_order=len(layouts),
        )
    return list(layouts.values())


def read_search_crafts(entries) -> list[SearchCraft]:
    crafts: dict[int, SearchCraft] = {}
    for entry in _expect(entries, list, "searchCrafts"):
        if not isinstance(entry, dict):
            continue
        sequence = entry.get("sequence")
        if not isinstance(sequence, int) or sequence in crafts:
            continue
        items = [entry[f"item{i}"] for i in range(1, 4) if entry.get(f"item{i}")]
        if not items:
            continue
        crafts[sequence] = SearchCraft(
            sequence=sequence,
            items=items,
            keys=[entry[f"key{i}"] for i in range(1, 5) if entry.get(f"key{i}")],
            search_str=entry.get("searchStr") or None,
            comment=entry.get("comment") or None,
        )
    return list(crafts.values())


class LegacyImporter:
    def __init__(self, db: KeyfolioDb, presets: typing.Optional[PresetStore] = None):
        self.db = db
        self.presets = presets if presets is not None else PresetStore(db)

    def import_from_api(self, user_id: str, api_url: str, player: str, timeout: float = 10.0) -> ImportResult:
        if not user_id:
            raise ValueError("An import needs a user id")
        try:
            payload = fetch_legacy_payload(api_url, player, timeout=timeout)
        except LegacyFetchError as e:
            logger.warning("Legacy import for %s aborted: %s", user_id, e)
            return ImportResult(success=False, counts=dict.fromkeys(SECTIONS, 0), error=str(e))
        return self.import_payload(user_id, payload)

    def import_payload(self, user_id: str, payload: dict) -> ImportResult:
        if not user_id:
            raise ValueError("An import needs a user id")
        if not isinstance(payload, dict):
            return ImportResult(success=False, counts=dict.fromkeys(SECTIONS, 0), error="Legacy data is not an object")

        settings = payload.get("settings")
        if not isinstance(settings, dict):
            settings = None

        counts = {}
        counts["keybindings"] = self._section("keybindings", user_id, self._import_keybindings, settings)
        counts["settings"] = self._section("settings", user_id, self._import_settings, settings)
        counts["custom_keys"] = self._section("custom_keys", user_id, self._import_custom_keys, payload.get("customKeys"))
        counts["remaps"] = self._section("remaps", user_id, self._import_remaps, payload.get("remappings"))
        counts["finger_assignments"] = self._section(
            "finger_assignments", user_id, self._import_fingers, None if settings is None else settings.get("fingerAssignments")
        )
        counts["item_layouts"] = self._section("item_layouts", user_id, self._import_item_layouts, payload.get("itemLayouts"))
        counts["search_crafts"] = self._section("search_crafts", user_id, self._import_search_crafts, payload.get("searchCrafts"))

        preset = self.presets.create_initial_preset(user_id, PresetSource.ONBOARDING)
        logger.info("Legacy import for %s finished: %s", user_id, counts)
        return ImportResult(success=True, counts=counts, preset_id=preset.id)

    def _section(self, name: str, user_id: str, importer, data) -> int:
        if not data:
            return 0
        try:
            count = importer(user_id, data)
        except Exception:
            logger.exception("Skipping legacy %s for %s", name, user_id)
            return 0
        logger.info("Imported %d legacy %s for %s", count, name, user_id)
        return count

    def _import_keybindings(self, user_id: str, settings: dict) -> int:
        bindings = read_keybindings(settings)
        if bindings is None:
            return 0
        return self.db.replace_bindings(user_id, bindings)

    def _import_settings(self, user_id: str, settings: dict) -> int:
        values = read_device_settings(settings)
        if not values:
            return 0
        self.db.update_device_config(user_id, values)
        return 1

    def _import_custom_keys(self, user_id: str, entries) -> int:
        return self.db.replace_custom_keys(user_id, read_custom_keys(entries))

    def _import_remaps(self, user_id: str, remappings) -> int:
        return self.db.replace_remaps(user_id, read_remaps(remappings))

    def _import_fingers(self, user_id: str, assignments) -> int:
        fingers = read_finger_assignments(assignments)
        if not fingers:
            return 0
        self.db.save_finger_assignments(user_id, fingers)
        return len(fingers)

    def _import_item_layouts(self, user_id: str, entries) -> int:
        return self.db.replace_item_layouts(user_id, read_item_layouts(entries))

    def _import_search_crafts(self, user_id: str, entries) -> int:
        return self.db.replace_search_crafts(user_id, read_search_crafts(entries))
