"""Structured configuration file loaders.

Purpose
-------
Convert on-disk artifacts into Python mappings that the merge layer understands.
Adapters are small wrappers around ``json``/``yaml``/``hjson`` so error
handling and observability live in one place.

Contents
--------
* :class:`BaseFileLoader` – shared helpers for reading files and validating
  mapping outputs.
* :class:`JSONFileLoader` – strict JSON.
* :class:`YAMLFileLoader` – YAML via PyYAML's safe loader, extended with the
  ``!!js/regexp``, ``!!js/undefined`` and ``!!js/function`` tags.
* :class:`HjsonFileLoader` – Hjson via the ``hjson`` package.
* :func:`load_config_file` – suffix dispatch used by the composition root.

System Role
-----------
Invoked by :mod:`smconfig.core` for every :class:`~smconfig.domain.sources.FilePath`
source before the results are folded together.
"""

from __future__ import annotations

import json
import re
from pathlib import Path
from typing import Mapping

import hjson
import yaml

from ...domain.errors import FileNotFound, ParseError, UnsupportedFormat, UnsupportedSourceFeature
from ...observability import log_debug, log_error


class BaseFileLoader:
    """Common utilities shared by the structured file loaders."""

    format = "file"

    def _read(self, path: str) -> str:
        """Read *path* as UTF-8 text, raising :class:`FileNotFound` when missing.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile(delete=False)
        >>> _ = tmp.write(b'{"key": 1}')
        >>> tmp.close()
        >>> BaseFileLoader()._read(tmp.name)[:6]
        '{"key"'
        >>> Path(tmp.name).unlink()
        """

        file_path = Path(path)
        if not file_path.is_file():
            raise FileNotFound(f"Configuration file doesn't exist: {path}")
        try:
            payload = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            self._fail(path, exc)
        log_debug("config_file_read", layer="file", path=path, size=len(payload))
        return payload

    def _fail(self, path: str, exc: Exception) -> None:
        log_error("config_file_invalid", layer="file", path=path, format=self.format, error=str(exc))
        raise ParseError(f"Invalid {self.format.upper()} in {path}: {exc}") from exc

    def _ensure_mapping(self, data: object, *, path: str) -> Mapping[str, object]:
        """Ensure *data* behaves like a mapping, otherwise raise :class:`ParseError`.

        Examples
        --------
        >>> BaseFileLoader()._ensure_mapping({"key": 1}, path="demo")
        {'key': 1}
        >>> BaseFileLoader()._ensure_mapping(42, path="demo")
        Traceback (most recent call last):
        ...
        smconfig.domain.errors.ParseError: File demo did not produce a mapping
        """

        if not isinstance(data, Mapping):
            raise ParseError(f"File {path} did not produce a mapping")
        log_debug("config_file_loaded", layer="file", path=path, format=self.format)
        return data


class JSONFileLoader(BaseFileLoader):
    """Load JSON documents."""

    format = "json"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from JSON file at *path*.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', suffix='.json', delete=False, encoding='utf-8')
        >>> _ = tmp.write('{"default": {"enabled": true}}')
        >>> tmp.close()
        >>> JSONFileLoader().load(tmp.name)["default"]["enabled"]
        True
        >>> Path(tmp.name).unlink()
        """

        text = self._read(path)
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            self._fail(path, exc)
        return self._ensure_mapping(data, path=path)


class _ExtendedSafeLoader(yaml.SafeLoader):
    """Safe YAML loader that understands the ``!!js/*`` scalar tags."""


_JS_REGEXP = re.compile(r"/(?P<pattern>.*)/(?P<flags>[a-z]*)", re.DOTALL)
_JS_FLAGS = {"i": re.IGNORECASE, "m": re.MULTILINE, "s": re.DOTALL}


def _construct_regexp(loader: yaml.SafeLoader, node: yaml.Node) -> re.Pattern[str]:
    """Build a compiled pattern from ``/pattern/flags`` (or a bare pattern)."""

    source = str(loader.construct_scalar(node))  # type: ignore[arg-type]
    match = _JS_REGEXP.fullmatch(source)
    pattern, flags = (match.group("pattern"), match.group("flags")) if match else (source, "")
    compiled_flags = 0
    for flag in flags:
        compiled_flags |= _JS_FLAGS.get(flag, 0)
    try:
        return re.compile(pattern, compiled_flags)
    except re.error as exc:
        raise yaml.constructor.ConstructorError(
            None,
            None,
            f"invalid regular expression {source!r}: {exc}",
            node.start_mark,
        ) from exc


def _construct_undefined(loader: yaml.SafeLoader, node: yaml.Node) -> None:
    return None


def _construct_function(loader: yaml.SafeLoader, node: yaml.Node) -> None:
    raise UnsupportedSourceFeature(
        f"Function values are not supported in configuration (line {node.start_mark.line + 1})"
    )


_ExtendedSafeLoader.add_constructor("tag:yaml.org,2002:js/regexp", _construct_regexp)
_ExtendedSafeLoader.add_constructor("tag:yaml.org,2002:js/undefined", _construct_undefined)
_ExtendedSafeLoader.add_constructor("tag:yaml.org,2002:js/function", _construct_function)


class YAMLFileLoader(BaseFileLoader):
    """Load YAML documents, including regular-expression scalars."""

    format = "yaml"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from YAML file at *path*.

        An empty document loads as ``{}``.

        Raises
        ------
        UnsupportedSourceFeature
            When the document contains a ``!!js/function`` scalar.

        Examples
        --------
        >>> from tempfile import NamedTemporaryFile
        >>> tmp = NamedTemporaryFile('w', suffix='.yaml', delete=False, encoding='utf-8')
        >>> _ = tmp.write('hostnames:\\n  prod:\\n    - !!js/regexp /^db[0-9]+$/i\\n')
        >>> tmp.close()
        >>> YAMLFileLoader().load(tmp.name)["hostnames"]["prod"][0].pattern
        '^db[0-9]+$'
        >>> Path(tmp.name).unlink()
        """

        text = self._read(path)
        try:
            data = yaml.load(text, Loader=_ExtendedSafeLoader)  # noqa: S506 - SafeLoader subclass
        except UnsupportedSourceFeature as exc:
            log_error("config_file_invalid", layer="file", path=path, format=self.format, error=str(exc))
            raise
        except yaml.YAMLError as exc:
            self._fail(path, exc)
        if data is None:
            data = {}
        return self._ensure_mapping(data, path=path)


class HjsonFileLoader(BaseFileLoader):
    """Load Hjson documents."""

    format = "hjson"

    def load(self, path: str) -> Mapping[str, object]:
        """Return mapping extracted from the Hjson file at *path*."""

        text = self._read(path)
        try:
            data = hjson.loads(text)
        except hjson.HjsonDecodeError as exc:
            self._fail(path, exc)
        return self._ensure_mapping(data, path=path)


# Loaders keyed by the lower-cased suffix after the last dot.
FILE_LOADERS = {
    "json": JSONFileLoader(),
    "yaml": YAMLFileLoader(),
    "yml": YAMLFileLoader(),
    "hjson": HjsonFileLoader(),
}


def load_config_file(path: str) -> Mapping[str, object]:
    """Load *path* with the loader registered for its extension.

    Raises
    ------
    FileNotFound
        When *path* does not exist (checked before the extension).
    UnsupportedFormat
        When the extension is not ``json``, ``yml``, ``yaml`` or ``hjson``.
    ParseError
        When the parser rejects the content.

    Examples
    --------
    >>> load_config_file("settings.ini")
    Traceback (most recent call last):
    ...
    smconfig.domain.errors.FileNotFound: Configuration file doesn't exist: settings.ini
    """

    if not Path(path).is_file():
        log_error("config_file_missing", layer="file", path=path)
        raise FileNotFound(f"Configuration file doesn't exist: {path}")
    name = Path(path).name
    suffix = name.rsplit(".", 1)[-1].lower() if "." in name else ""
    loader = FILE_LOADERS.get(suffix)
    if loader is None:
        log_error("config_file_unsupported", layer="file", path=path, suffix=suffix)
        raise UnsupportedFormat(f"Invalid config file format: {path}")
    return loader.load(path)
