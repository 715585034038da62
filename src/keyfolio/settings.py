# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import dataclasses
import json
import pathlib
import typing

import cattrs

from .commontypes import KeyboardLayout
from .db import DEFAULT_MAX_STATEMENTS_PER_BATCH
from .sensitivity import PointerScale

LEGACY_TIMEOUT = 10.0

settings_converter = cattrs.Converter()
settings_converter.register_unstructure_hook(pathlib.Path, str)
settings_converter.register_structure_hook(pathlib.Path, lambda v, _: pathlib.Path(v))
# pointer scales are written as their notch count, 11 or 20
settings_converter.register_unstructure_hook(PointerScale, lambda ps: ps.value)
settings_converter.register_structure_hook(PointerScale, lambda v, _: PointerScale(int(v)))

def structure_keyboard_layout(v: str, typ: type[KeyboardLayout]):
    layout = KeyboardLayout.coerce(v)
    if layout is None:
        raise ValueError(f"Unexpected keyboard layout {v!r}")
    return layout

settings_converter.register_unstructure_hook(KeyboardLayout, lambda kl: kl.value)
settings_converter.register_structure_hook(KeyboardLayout, structure_keyboard_layout)


@dataclasses.dataclass(kw_only=True)
class Settings:
    _path: pathlib.Path
    db_path: pathlib.Path
    max_statements_per_batch: int = DEFAULT_MAX_STATEMENTS_PER_BATCH
    legacy_api_url: typing.Optional[str] = None
    legacy_timeout: float = LEGACY_TIMEOUT
    default_keyboard_layout: KeyboardLayout = KeyboardLayout.US
    pointer_scale: PointerScale = PointerScale.TWENTY
    log_level: str = "WARNING"

    def save(self, dest: typing.Optional[pathlib.Path] = None):
        if dest is None:
            dest = self._path
        raw = settings_converter.unstructure(self)
        del raw["_path"]
        with dest.open("w") as f:
            json.dump(raw, f, indent=2)

    @classmethod
    def load(cls, src: pathlib.Path):
        with src.open() as f:
            raw = json.load(f)
        raw["_path"] = src
        return settings_converter.structure(raw, cls)

    @classmethod
    def for_test(cls):
        return settings_converter.structure(
            {
                "_path": "test.settings.json",
                "db_path": ":memory:",
                "max_statements_per_batch": 3,
                "legacy_api_url": "http://legacy.invalid",
                "legacy_timeout": 1.0,
                "default_keyboard_layout": "US",
                "pointer_scale": 20,
                "log_level": "DEBUG",
            },
            cls,
        )

    @property
    def uses_memory_db(self):
        return str(self.db_path) == ":memory:"

