# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
import pytest

from keyfolio.db import make_memory_db
from keyfolio.profile.presets import PresetStore
from keyfolio.settings import Settings


@pytest.fixture
def settings():
    return Settings.for_test()


@pytest.fixture
def db(settings):
    return make_memory_db(settings.max_statements_per_batch)


@pytest.fixture
def store(db):
    return PresetStore(db)
