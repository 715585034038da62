#!/usr/bin/env python

# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later

# -*- encoding: utf-8 -*-

from glob import glob
from os.path import basename
from os.path import splitext

from setuptools import find_packages
from setuptools import setup


setup(
    name="keyfolio",
    version="0.0.0",
    license="GPL-3.0-or-later",
    description="Keybindings, remaps, mouse sensitivity and presets for block game players",
    long_description="Stores a player's control setup, converts mouse settings to cm/360 and snapshots it all into presets.",
    author="Rose Davidson",
    author_email="rose@metaclassical.com",
    packages=find_packages("src"),
    package_dir={"": "src"},
    py_modules=[splitext(basename(path))[0] for path in glob("src/*.py")],
    include_package_data=True,
    zip_safe=False,
    classifiers=[
        # complete classifier list: http://pypi.python.org/pypi?%3Aaction=list_classifiers
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: GNU General Public License v3 or later (GPLv3+)",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: Implementation :: CPython",
        "Topic :: Games/Entertainment",
    ],
    keywords=["keybindings", "mouse sensitivity", "presets"],
    python_requires=">=3.10",
    install_requires=[
        "cattrs>=22.1.0",
        "python-dateutil>=2.8.1",
        "requests>=2.28",
        "sqlalchemy>=2.0",
        "msgspec>=0.18",
    ],
    extras_require={
        "test": ["pytest>=6.2.4"],
    },
    entry_points={
        "console_scripts": [
            "keyfolio-import = keyfolio.scripts:import_legacy_cli",
            "keyfolio-sens = keyfolio.scripts:sensitivity_cli",
        ],
    },
)
