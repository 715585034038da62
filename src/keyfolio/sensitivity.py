# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
"""Functions to turn raw mouse settings into comparable sensitivity figures.

The game maps its 0.0-1.0 sensitivity slider onto an optical factor of 0.6 * s + 0.2,
and turns the camera by factor**3 * 8 units per count. The constant 6096 folds
together the game's degrees-per-unit and 2.54 cm per inch.
"""
import enum
import math
import types
import typing

OPTICAL_SLOPE = 0.6
OPTICAL_OFFSET = 0.2
DISTANCE_CONSTANT = 6096
COUNTS_PER_UNIT = 8
PERCENT_SCALE = 200

# Windows pointer speed multipliers, as exposed by the registry's 20 notches.
POINTER_MULTIPLIERS_20 = types.MappingProxyType(
    {
        1: 0.03125,
        2: 0.0625,
        3: 0.125,
        4: 0.25,
        5: 0.375,
        6: 0.5,
        7: 0.625,
        8: 0.75,
        9: 0.875,
        10: 1.0,
        11: 1.25,
        12: 1.5,
        13: 1.75,
        14: 2.0,
        15: 2.25,
        16: 2.5,
        17: 2.75,
        18: 3.0,
        19: 3.25,
        20: 3.5,
    }
)

# The control panel slider's 11 positions; 6 is the neutral default. The two tables
# do not agree at any index past 2, so values stored against one scale must be read
# against the same scale.
POINTER_MULTIPLIERS_11 = types.MappingProxyType(
    {
        1: 0.03125,
        2: 0.0625,
        3: 0.25,
        4: 0.5,
        5: 0.75,
        6: 1.0,
        7: 1.5,
        8: 2.0,
        9: 2.5,
        10: 3.0,
        11: 3.5,
    }
)


class PointerScale(enum.Enum):
    ELEVEN = 11
    TWENTY = 20

    @property
    def multipliers(self):
        return POINTER_MULTIPLIERS_11 if self is PointerScale.ELEVEN else POINTER_MULTIPLIERS_20


def optical_factor(sensitivity: float) -> float:
    return OPTICAL_SLOPE * sensitivity + OPTICAL_OFFSET


def pointer_multiplier(
    pointer_speed: typing.Optional[int],
    custom_multiplier: typing.Optional[float] = None,
    scale: PointerScale = PointerScale.TWENTY,
) -> float:
    """Custom multiplier if positive, else the scale's entry for pointer_speed, else 1.0."""
    if custom_multiplier is not None and custom_multiplier > 0:
        return custom_multiplier
    if pointer_speed is None:
        return 1.0
    return scale.multipliers.get(pointer_speed, 1.0)


def distance_per_360(
    dpi: typing.Optional[float],
    sensitivity: typing.Optional[float],
    raw_input: typing.Optional[bool] = None,
    pointer_speed: typing.Optional[int] = None,
    custom_multiplier: typing.Optional[float] = None,
    scale: PointerScale = PointerScale.TWENTY,
) -> typing.Optional[float]:
    """Centimetres of mouse travel for a full turn, or None when dpi or sensitivity is missing.

    Raw input bypasses the OS pointer speed entirely.
    """
    if dpi is None or sensitivity is None:
        return None
    factor = optical_factor(sensitivity)
    divisor = dpi * COUNTS_PER_UNIT * factor**3
    if divisor <= 0:
        return None
    base = DISTANCE_CONSTANT / divisor / 2
    if raw_input is True:
        return base
    return base / pointer_multiplier(pointer_speed, custom_multiplier, scale)


def cursor_speed(
    dpi: typing.Optional[float],
    raw_input: typing.Optional[bool] = None,
    pointer_speed: typing.Optional[int] = None,
    custom_multiplier: typing.Optional[float] = None,
    scale: PointerScale = PointerScale.TWENTY,
) -> typing.Optional[int]:
    if dpi is None:
        return None
    if raw_input is True:
        return round(dpi)
    return round(dpi * pointer_multiplier(pointer_speed, custom_multiplier, scale))


def edpi(
    dpi: typing.Optional[float],
    sensitivity: typing.Optional[float],
    raw_input: typing.Optional[bool] = None,
    pointer_speed: typing.Optional[int] = None,
    custom_multiplier: typing.Optional[float] = None,
    scale: PointerScale = PointerScale.TWENTY,
) -> typing.Optional[float]:
    "dpi scaled by the optical factor and, without raw input, the pointer multiplier."
    if dpi is None or sensitivity is None:
        return None
    value = dpi * optical_factor(sensitivity)
    if raw_input is True:
        return value
    return value * pointer_multiplier(pointer_speed, custom_multiplier, scale)


def sensitivity_for_distance(
    cm360: typing.Optional[float],
    dpi: typing.Optional[float],
    raw_input: typing.Optional[bool] = None,
    pointer_speed: typing.Optional[int] = None,
    custom_multiplier: typing.Optional[float] = None,
    scale: PointerScale = PointerScale.TWENTY,
) -> typing.Optional[float]:
    """Inverse of distance_per_360: the slider value that gives cm360 at dpi.

    None if an input is missing or non-positive, or the answer falls outside 0.0-1.0.
    """
    if cm360 is None or dpi is None or cm360 <= 0 or dpi <= 0:
        return None
    base = cm360
    if raw_input is not True:
        base = cm360 * pointer_multiplier(pointer_speed, custom_multiplier, scale)
    factor = (DISTANCE_CONSTANT / (base * 2 * dpi * COUNTS_PER_UNIT)) ** (1 / 3)
    sensitivity = (factor - OPTICAL_OFFSET) / OPTICAL_SLOPE
    if not 0.0 <= sensitivity <= 1.0:
        return None
    return sensitivity


def cm360_to_formatted(value: typing.Optional[float]) -> str:
    if value is None or not math.isfinite(value):
        return "-"
    return f"{value:.2f} cm"


def sensitivity_fraction_to_percent(value: typing.Optional[float]) -> typing.Optional[int]:
    if value is None:
        return None
    return round(value * PERCENT_SCALE)


def percent_to_fraction(percent: typing.Optional[float]) -> typing.Optional[float]:
    if percent is None:
        return None
    return percent / PERCENT_SCALE
