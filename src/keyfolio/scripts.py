# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import argparse
import logging
import pathlib
import pprint
import sys

from .db import make_db, make_memory_db
from .profile.doctypes import DeviceConfig
from .profile.legacy import LegacyImporter
from .sensitivity import PointerScale, cm360_to_formatted
from .settings import Settings


def open_db(settings: Settings):
    if settings.uses_memory_db:
        return make_memory_db(settings.max_statements_per_batch)
    return make_db(settings.db_path, settings.max_statements_per_batch)


import_parser = argparse.ArgumentParser(description="Import a player's setup from the legacy hotkeys site.")
import_parser.add_argument("settings", type=pathlib.Path)
import_parser.add_argument("player")
import_parser.add_argument("user_id")


def import_legacy_cli():
    args = import_parser.parse_args()
    settings = Settings.load(args.settings)
    logging.basicConfig(level=settings.log_level)
    if settings.legacy_api_url is None:
        sys.exit(f"No legacy_api_url in {args.settings}")
    importer = LegacyImporter(open_db(settings))
    result = importer.import_from_api(args.user_id, settings.legacy_api_url, args.player, timeout=settings.legacy_timeout)
    if not result.success:
        sys.exit(f"Import failed: {result.error}")
    pprint.pprint(result.counts)
    print(f"Initial preset: {result.preset_id}")


sens_parser = argparse.ArgumentParser(description="Turn mouse settings into cm per full turn.")
sens_parser.add_argument("--dpi", type=int, required=True)
sens_parser.add_argument("--sens", type=float, required=True, help="in-game sensitivity, 0.0 to 1.0")
sens_parser.add_argument("--raw", action=argparse.BooleanOptionalAction, default=True, help="raw mouse input")
sens_parser.add_argument("--speed", type=int, help="Windows pointer speed notch")
sens_parser.add_argument("--multiplier", type=float, help="custom pointer multiplier, overrides --speed")
sens_parser.add_argument("--scale", type=int, choices=[s.value for s in PointerScale], default=PointerScale.TWENTY.value)


def sensitivity_cli():
    args = sens_parser.parse_args()
    logging.basicConfig(level=logging.WARNING)
    config = DeviceConfig(
        mouse_dpi=args.dpi,
        game_sensitivity=args.sens,
        raw_input=args.raw,
        windows_speed=args.speed,
        windows_speed_multiplier=args.multiplier,
    ).with_computed_cm360(PointerScale(args.scale))
    print(f"cm/360: {cm360_to_formatted(config.cm360)}")
    print(f"cursor speed: {config.cursor_speed(PointerScale(args.scale))}")
