"""Shared fixtures: the sample configuration tree and the snapshots it resolves to."""

from __future__ import annotations

import copy
import re
from pathlib import Path

import pytest

RESOURCES = Path(__file__).parent / "resources"

PARAMS = {
    "default": {
        "foo": "bar",
        "hello": "world",
        "number": 6,
        "ary": [0, 1, 1, 2, 3, 5, 8, 13, 21],
        "obj": {"x": 1, "y": 2},
    },
    "testenv1": {
        "hello": "mondo",
        "obj": {"z": 3},
        "add": "me",
    },
    "testenv2": {
        "ary": [2, 4, 8, 16, 32, 64, 128, 256, 512, 1024],
        "first": "last",
    },
    "hostnames": {
        "testenv1": ["a--not-found", None],
        "testenv2": ["--not-found-2", re.compile(r"--still(.*?)notfound")],
    },
}

DEFAULT_EXPECT = {
    "foo": "bar",
    "hello": "world",
    "number": 6,
    "ary": [0, 1, 1, 2, 3, 5, 8, 13, 21],
    "obj": {"x": 1, "y": 2},
}

TESTENV1_EXPECT = {
    "foo": "bar",
    "hello": "mondo",
    "number": 6,
    "ary": [0, 1, 1, 2, 3, 5, 8, 13, 21],
    "obj": {"x": 1, "y": 2, "z": 3},
    "add": "me",
}

TESTENV2_EXPECT = {
    "foo": "bar",
    "hello": "world",
    "number": 6,
    "ary": [2, 4, 8, 16, 32, 64, 128, 256, 512, 1024],
    "obj": {"x": 1, "y": 2},
    "first": "last",
}

ADDENDUM_EXPECT = {**DEFAULT_EXPECT, "fruit": "pear"}


@pytest.fixture()
def params() -> dict:
    """Fresh copy of the sample tree so tests may tweak the hostname table."""

    return copy.deepcopy(PARAMS)


@pytest.fixture()
def resources() -> Path:
    return RESOURCES


@pytest.fixture()
def expected() -> dict[str, dict]:
    return copy.deepcopy(
        {
            "default": DEFAULT_EXPECT,
            "testenv1": TESTENV1_EXPECT,
            "testenv2": TESTENV2_EXPECT,
            "addendum": ADDENDUM_EXPECT,
        }
    )
