"""Structured file loader tests for JSON, YAML and Hjson sources."""

from __future__ import annotations

import re

import pytest

from smconfig.adapters.file_loaders.structured import (
    FILE_LOADERS,
    HjsonFileLoader,
    JSONFileLoader,
    YAMLFileLoader,
    load_config_file,
)
from smconfig.domain.errors import FileNotFound, ParseError, UnsupportedFormat, UnsupportedSourceFeature


@pytest.mark.parametrize("name", ["testconfig.json", "testconfig.yaml", "testconfig.hjson"])
def test_formats_load_the_same_layers(resources, params, name) -> None:
    """Every supported format yields the same environment layers."""

    loaded = load_config_file(str(resources / name))
    for layer in ("default", "testenv1", "testenv2"):
        assert loaded[layer] == params[layer]


def test_yaml_regexp_tag_becomes_pattern(resources) -> None:
    loaded = YAMLFileLoader().load(str(resources / "testconfig.yaml"))
    rule = loaded["hostnames"]["testenv2"][1]
    assert isinstance(rule, re.Pattern)
    assert rule.pattern == "--still(.*?)notfound"
    assert rule.flags & re.IGNORECASE
    assert rule.search("x--STILL-notfound")


def test_yaml_null_rule_is_kept(resources) -> None:
    loaded = YAMLFileLoader().load(str(resources / "testconfig.yaml"))
    assert loaded["hostnames"]["testenv1"] == ["a--not-found", None]


def test_yaml_regexp_flags_and_bare_pattern(tmp_path) -> None:
    path = tmp_path / "flags.yml"
    path.write_text("a: !!js/regexp /x.y/ms\nb: !!js/regexp plain\nc: !!js/regexp /z/gu\n", encoding="utf-8")
    loaded = load_config_file(str(path))
    assert loaded["a"].flags & re.MULTILINE and loaded["a"].flags & re.DOTALL
    assert loaded["b"].pattern == "plain"
    assert loaded["c"].pattern == "z"


def test_yaml_undefined_tag_loads_as_none(tmp_path) -> None:
    path = tmp_path / "undefined.yaml"
    path.write_text("default:\n  missing: !!js/undefined ''\n", encoding="utf-8")
    assert load_config_file(str(path)) == {"default": {"missing": None}}


def test_yaml_function_tag_is_rejected(resources) -> None:
    with pytest.raises(UnsupportedSourceFeature):
        load_config_file(str(resources / "function.yaml"))


def test_yaml_function_tag_is_a_parse_error(resources) -> None:
    with pytest.raises(ParseError):
        load_config_file(str(resources / "function.yaml"))


def test_invalid_regexp_is_parse_error(tmp_path) -> None:
    path = tmp_path / "bad.yaml"
    path.write_text("a: !!js/regexp /([/\n", encoding="utf-8")
    with pytest.raises(ParseError):
        load_config_file(str(path))


def test_empty_yaml_is_empty_mapping(tmp_path) -> None:
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert YAMLFileLoader().load(str(path)) == {}


def test_hjson_comments_and_unquoted_strings(tmp_path) -> None:
    path = tmp_path / "demo.hjson"
    path.write_text(
        "{\n  // comment\n  default: {\n    greeting: hello world\n    port: 80\n  }\n}\n",
        encoding="utf-8",
    )
    assert dict(HjsonFileLoader().load(str(path))) == {"default": {"greeting": "hello world", "port": 80}}


def test_uppercase_extension_is_accepted(tmp_path) -> None:
    path = tmp_path / "CONFIG.JSON"
    path.write_text('{"default": {"a": 1}}', encoding="utf-8")
    assert load_config_file(str(path)) == {"default": {"a": 1}}


def test_missing_file(tmp_path) -> None:
    with pytest.raises(FileNotFound, match="doesn't exist"):
        load_config_file(str(tmp_path / "missing.json"))


def test_missing_file_is_checked_before_extension(tmp_path) -> None:
    with pytest.raises(FileNotFound):
        load_config_file(str(tmp_path / "missing.txt"))


def test_unsupported_extension(resources) -> None:
    with pytest.raises(UnsupportedFormat, match="Invalid config file format"):
        load_config_file(str(resources / "invalid-format.txt"))


def test_file_without_extension(resources) -> None:
    with pytest.raises(UnsupportedFormat):
        load_config_file(str(resources / "env"))


def test_dotted_directory_does_not_count_as_extension(tmp_path) -> None:
    folder = tmp_path / "conf.json"
    folder.mkdir()
    target = folder / "settings"
    target.write_text("{}", encoding="utf-8")
    with pytest.raises(UnsupportedFormat):
        load_config_file(str(target))


@pytest.mark.parametrize(
    ("suffix", "content"),
    [
        ("json", "{not json"),
        ("yaml", "a: [unclosed"),
        ("hjson", "{\n  a: [1, 2\n"),
    ],
)
def test_invalid_content_is_parse_error(tmp_path, suffix, content) -> None:
    path = tmp_path / f"broken.{suffix}"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ParseError, match=re.escape(str(path))):
        load_config_file(str(path))


@pytest.mark.parametrize(("suffix", "content"), [("json", "[1, 2]"), ("yaml", "- a\n- b\n"), ("json", '"text"')])
def test_non_mapping_document_is_rejected(tmp_path, suffix, content) -> None:
    path = tmp_path / f"list.{suffix}"
    path.write_text(content, encoding="utf-8")
    with pytest.raises(ParseError, match="did not produce a mapping"):
        load_config_file(str(path))


def test_non_utf8_file_is_parse_error(tmp_path) -> None:
    path = tmp_path / "latin.json"
    path.write_bytes(b'{"a": "\xe9"}')
    with pytest.raises(ParseError):
        JSONFileLoader().load(str(path))


def test_registered_suffixes() -> None:
    assert sorted(FILE_LOADERS) == ["hjson", "json", "yaml", "yml"]
