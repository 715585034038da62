# SPDX-FileCopyrightText: 2021 Rose Davidson <rose@metaclassical.com>
#
# SPDX-License-Identifier: GPL-3.0-or-later
from __future__ import annotations

import collections.abc
import datetime
import itertools
import typing

from dateutil.tz import tzlocal

V = typing.TypeVar("V")


def now():
    return datetime.datetime.now(tzlocal())


def chunked(items: collections.abc.Iterable[V], size: int) -> collections.abc.Iterator[list[V]]:
    "Split items into lists of at most size elements."
    if size < 1:
        raise ValueError(f"chunk size must be positive, not {size!r}")
    iterator = iter(items)
    while chunk := list(itertools.islice(iterator, size)):
        yield chunk


def blank_to_none(val: typing.Optional[str]):
    if val is None:
        return None
    val = val.strip()
    return val or None


def ordinal(n: int) -> str:
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"
