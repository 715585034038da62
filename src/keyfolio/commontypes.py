# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import enum


class KeyboardLayout(enum.Enum):
    US = "US"
    JIS = "JIS"
    US_TKL = "US_TKL"
    JIS_TKL = "JIS_TKL"

    @property
    def is_jis(self):
        return self in (KeyboardLayout.JIS, KeyboardLayout.JIS_TKL)

    @classmethod
    def coerce(cls, value):
        "Accepts the stored tag, a lower-cased tag, or None; unknown tags give None."
        if value is None or isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            return None


class InputMode(enum.Enum):
    KEYBOARD_MOUSE = "keyboard_mouse"
    CONTROLLER = "controller"


class KeyfolioError(Exception):
    pass


class PresetNotFoundError(KeyfolioError):
    def __init__(self, preset_id):
        self.preset_id = preset_id
        super().__init__(f"Preset {preset_id} not found")


class LegacyFetchError(KeyfolioError):
    pass
