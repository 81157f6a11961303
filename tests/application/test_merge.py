from __future__ import annotations

import re

from hypothesis import given
from hypothesis import strategies as st

from smconfig.application.merge import deep_merge, merge_layers

SCALAR = st.one_of(st.booleans(), st.integers(), st.text(min_size=1, max_size=5), st.lists(st.integers(), max_size=3))
VALUE = st.recursive(
    SCALAR,
    lambda children: st.dictionaries(st.text(min_size=1, max_size=5), children, max_size=3),
    max_leaves=10,
)
MAPPING = st.dictionaries(st.text(min_size=1, max_size=5), VALUE, max_size=4)


def test_precedence_overwrites() -> None:
    layers = [
        ("default", {"feature": {"enabled": False}}, None),
        ("prod", {"feature": {"enabled": True}}, None),
        ("override", {"feature": {"level": "debug"}}, None),
    ]
    merged, meta = merge_layers(layers)
    assert merged["feature"] == {"enabled": True, "level": "debug"}
    assert meta["feature.enabled"]["layer"] == "prod"
    assert meta["feature.level"]["layer"] == "override"


def test_arrays_are_replaced_not_merged() -> None:
    merged = deep_merge({"ary": [0, 1, 1, 2, 3]}, {"ary": [9]})
    assert merged == {"ary": [9]}
    merged = deep_merge({"ary": [9]}, {"ary": [0, 1, 1, 2, 3]})
    assert merged == {"ary": [0, 1, 1, 2, 3]}


def test_mapping_replaces_scalar_and_scalar_replaces_mapping() -> None:
    assert deep_merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}
    assert deep_merge({"a": {"b": 2}}, {"a": 1}) == {"a": 1}


def test_empty_mapping_keeps_existing_branch() -> None:
    assert deep_merge({"db": {"host": "x"}}, {"db": {}}) == {"db": {"host": "x"}}
    assert deep_merge({}, {"db": {}}) == {"db": {}}
    assert deep_merge({"db": "off"}, {"db": {}}) == {"db": {}}


def test_none_overrides_value() -> None:
    assert deep_merge({"a": 1}, {"a": None}) == {"a": None}


def test_merge_does_not_alias_inputs() -> None:
    source = {"db": {"ports": [1, 2]}}
    merged = deep_merge(source)
    merged["db"]["ports"].append(3)
    assert source == {"db": {"ports": [1, 2]}}


def test_patterns_survive_merge() -> None:
    rule = re.compile("^db")
    merged = deep_merge({"hostnames": {"prod": ["a"]}}, {"hostnames": {"prod": [rule]}})
    assert merged["hostnames"]["prod"][0].pattern == "^db"


def test_provenance_cleared_when_branch_replaced() -> None:
    _, meta = merge_layers(
        [
            ("default", {"db": {"host": "x", "port": 1}}, None),
            ("override", {"db": "disabled"}, None),
        ]
    )
    assert set(meta) == {"db"}
    assert meta["db"]["layer"] == "override"


def test_merge_is_idempotent() -> None:
    layers = [
        ("default", {"db": {"host": "localhost", "ports": [5432]}}, None),
        ("override", {"db": {"host": "remote"}}, None),
    ]
    assert merge_layers(layers) == merge_layers(layers)


def _assert_contains(actual, expected):
    if isinstance(expected, dict):
        assert isinstance(actual, dict)
        for sub_key, sub_val in expected.items():
            assert sub_key in actual
            _assert_contains(actual[sub_key], sub_val)
    else:
        assert actual == expected


@given(MAPPING, MAPPING)
def test_last_layer_wins(lhs, rhs) -> None:
    merged = deep_merge(lhs, rhs)
    _assert_contains(merged, rhs)


@given(MAPPING, MAPPING)
def test_untouched_keys_survive(lhs, rhs) -> None:
    merged = deep_merge(lhs, rhs)
    for key, value in lhs.items():
        if key not in rhs:
            assert merged[key] == value


@given(MAPPING)
def test_merging_with_itself_is_identity(payload) -> None:
    assert deep_merge(payload, payload) == payload
