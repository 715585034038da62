# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import json
import pathlib

import cattrs
import pytest

from keyfolio.commontypes import KeyboardLayout
from keyfolio.sensitivity import PointerScale
from keyfolio.settings import Settings


def test_for_test():
    settings = Settings.for_test()
    assert settings.uses_memory_db
    assert settings.max_statements_per_batch == 3
    assert settings.log_level == "DEBUG"
    assert settings.pointer_scale is PointerScale.TWENTY


def test_save_and_load(tmp_path: pathlib.Path):
    path = tmp_path / "settings.json"
    settings = Settings.for_test()
    settings.db_path = tmp_path / "keyfolio.db"
    settings.default_keyboard_layout = KeyboardLayout.JIS_TKL
    settings.pointer_scale = PointerScale.ELEVEN
    settings.save(path)

    raw = json.loads(path.read_text())
    assert raw["log_level"] == "DEBUG"
    assert raw["pointer_scale"] == 11
    assert "_path" not in raw

    loaded = Settings.load(path)
    assert loaded.db_path == tmp_path / "keyfolio.db"
    assert loaded.default_keyboard_layout is KeyboardLayout.JIS_TKL
    assert loaded.pointer_scale is PointerScale.ELEVEN
    assert loaded.log_level == "DEBUG"
    assert not loaded.uses_memory_db


def test_defaults(tmp_path: pathlib.Path):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"db_path": "keyfolio.db", "default_keyboard_layout": "jis"}))
    settings = Settings.load(path)
    assert settings.max_statements_per_batch == 50
    assert settings.legacy_api_url is None
    assert settings.default_keyboard_layout is KeyboardLayout.JIS
    assert settings.log_level == "WARNING"


@pytest.mark.parametrize(
    "field,value",
    (("default_keyboard_layout", "dvorak"), ("pointer_scale", 7)),
)
def test_bad_values(tmp_path: pathlib.Path, field, value):
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"db_path": "keyfolio.db", field: value}))
    with pytest.raises((ValueError, cattrs.BaseValidationError)):
        Settings.load(path)
