"""Domain-level configuration value objects.

Purpose
-------
Anchor the immutable :class:`Config` snapshot that carries the resolved
environment name, the merged configuration tree, and provenance. This module
belongs to the domain layer and contains no I/O.

Contents
--------
* :class:`SourceInfo` – typed metadata describing which layer supplied a key.
* :class:`Config` – read-only ``Mapping`` with clone-on-read accessors
  (:meth:`Config.all`, :meth:`Config.get`) and dotted-path traversal.
* :func:`_deepcopy_mapping` / :func:`_deepcopy_value` – helpers that clone nested
  data without relying on ``copy.deepcopy`` (which does not handle
  ``mappingproxy`` objects).
* :data:`EMPTY_CONFIG` – canonical empty instance.

System Role
-----------
Every call to :func:`smconfig.core.read_config` ends in a :class:`Config`. The
snapshot is built once and never mutated; every accessor hands out an
independent copy, so concurrent readers need no locking.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping as MappingABC
from collections.abc import Mapping
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Iterator, Mapping as MappingType, TypedDict, TypeVar, overload

from .errors import InvalidKey


class SourceInfo(TypedDict):
    """Describe the origin of a resolved configuration key.

    Attributes
    ----------
    layer:
        ``"default"``, the resolved environment name, or ``"override"``.
    path:
        Filesystem path that produced the key when one is known, ``None``
        otherwise.
    key:
        Fully qualified dotted key, for example ``"service.timeout"``.
    """

    layer: str
    path: str | None
    key: str


T = TypeVar("T")

#: Environment name used when nothing else selected one.
DEFAULT_ENVIRONMENT = "default"


@dataclass(frozen=True, slots=True)
class Config(MappingABC[str, Any]):
    """Immutable configuration snapshot returned to library consumers.

    Why
    ----
    Callers need a read-only structure that behaves like a dictionary, never
    exposes its internal storage, and can explain precedence outcomes.

    What
    ----
    Stores a private deep copy of the merged tree inside a ``MappingProxyType``
    and implements the :class:`Mapping` protocol over the top-level keys. Every
    value handed out is a fresh deep copy.

    Parameters
    ----------
    _data:
        Merged configuration tree. Copied and frozen during initialisation.
    _meta:
        Mapping from dotted keys to :class:`SourceInfo`.
    _environment:
        Name of the environment this snapshot was resolved for.

    Examples
    --------
    >>> cfg = Config(
    ...     {"service": {"timeout": 30, "endpoint": "https://api.demo"}},
    ...     {"service.timeout": {"layer": "prod", "path": None, "key": "service.timeout"}},
    ...     "prod",
    ... )
    >>> cfg.environment
    'prod'
    >>> cfg.get("service.timeout")
    30
    >>> cfg.origin("service.timeout")["layer"]
    'prod'
    """

    _data: Mapping[str, Any]
    _meta: Mapping[str, SourceInfo]
    _environment: str = DEFAULT_ENVIRONMENT

    def __post_init__(self) -> None:
        """Copy and freeze incoming mappings so later caller mutations cannot leak in."""

        object.__setattr__(self, "_data", _freeze_mapping(_deepcopy_mapping(self._data)))
        object.__setattr__(self, "_meta", _freeze_mapping(self._meta))
        object.__setattr__(self, "_environment", str(self._environment))

    @property
    def environment(self) -> str:
        """Name of the environment resolved at construction time."""

        return self._environment

    def __getitem__(self, key: str) -> Any:
        """Return a copy of the top-level value stored under *key*.

        Examples
        --------
        >>> cfg = Config({"feature": True}, {})
        >>> cfg["feature"]
        True
        """

        return _deepcopy_value(self._data[key])

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def all(self) -> dict[str, Any]:
        """Return a deep, independent copy of the whole configuration tree.

        Examples
        --------
        >>> cfg = Config({"service": {"timeout": 5}, "tags": ["a"]}, {})
        >>> clone = cfg.all()
        >>> clone["service"]["timeout"] = 10
        >>> clone["tags"].append("b")
        >>> cfg.all()
        {'service': {'timeout': 5}, 'tags': ['a']}
        """

        return _deepcopy_mapping(self._data)

    def to_json(self, *, indent: int | None = None) -> str:
        """Serialise the configuration to JSON.

        Compiled regular expressions are rendered as their pattern source.

        Examples
        --------
        >>> Config({"service": {"timeout": 5}}, {}).to_json()
        '{"service":{"timeout":5}}'
        """

        return json.dumps(self.all(), indent=indent, separators=(",", ":"), ensure_ascii=False, default=json_default)

    @overload
    def get(self, key: str, default: T) -> Any | T:  # type: ignore[override]
        ...

    @overload
    def get(self, key: str, default: None = ...) -> Any | None:  # type: ignore[override]
        ...

    def get(self, key: str, default: Any = None) -> Any:
        """Return a copy of the value at *key*, or ``default`` when it is absent.

        Keys containing ``.`` are walked segment by segment through nested
        mappings; other keys are looked up directly at the top level.

        Raises
        ------
        InvalidKey
            When *key* is not a string or is empty.

        Examples
        --------
        >>> cfg = Config({"service": {"timeout": 5}}, {})
        >>> cfg.get("service.timeout")
        5
        >>> cfg.get("service.missing", "fallback")
        'fallback'
        >>> cfg.get("")
        Traceback (most recent call last):
        ...
        smconfig.domain.errors.InvalidKey: Parameter key must be a non-empty string
        """

        if not isinstance(key, str) or not key:
            raise InvalidKey("Parameter key must be a non-empty string")
        if "." not in key:
            if key not in self._data:
                return default
            return _deepcopy_value(self._data[key])
        return _deepcopy_value(_resolve_dotted_path(self._data, key, default))

    def origin(self, key: str) -> SourceInfo | None:
        """Return provenance for *key* or ``None`` when no layer produced it.

        Examples
        --------
        >>> cfg = Config({"feature": True}, {"feature": {"layer": "override", "path": None, "key": "feature"}})
        >>> cfg.origin("feature")
        {'layer': 'override', 'path': None, 'key': 'feature'}
        >>> cfg.origin("missing") is None
        True
        """

        info = self._meta.get(key)
        return None if info is None else SourceInfo(**info)

    def provenance(self) -> dict[str, SourceInfo]:
        """Return a copy of the full provenance table keyed by dotted path."""

        return {key: SourceInfo(**info) for key, info in self._meta.items()}

    def with_overrides(self, overrides: Mapping[str, Any]) -> Config:
        """Produce a copy of the configuration with top-level *overrides* applied.

        Examples
        --------
        >>> base = Config({"feature": False}, {}, "prod")
        >>> changed = base.with_overrides({"feature": True})
        >>> changed.get("feature"), changed.environment, base.get("feature")
        (True, 'prod', False)
        """

        updated = dict(self._data)
        updated.update(overrides)
        return Config(updated, self._meta, self._environment)


def _freeze_mapping(mapping: Mapping[str, Any]) -> Mapping[str, Any]:
    """Return an immutable proxy around *mapping*."""

    return MappingProxyType(dict(mapping))


def _resolve_dotted_path(source: Mapping[str, Any], dotted: str, default: Any) -> Any:
    """Resolve *dotted* within *source*, returning *default* when any segment is missing.

    Numeric segments index into lists.

    Examples
    --------
    >>> _resolve_dotted_path({"hosts": [{"name": "a"}]}, "hosts.0.name", None)
    'a'
    >>> _resolve_dotted_path({"hosts": []}, "hosts.0", "none")
    'none'
    """

    current: Any = source
    for part in dotted.split("."):
        if isinstance(current, MappingABC):
            if part not in current:
                return default
            current = current[part]
        elif isinstance(current, (list, tuple)):
            if not (part.isascii() and part.isdecimal()) or int(part) >= len(current):
                return default
            current = current[int(part)]
        else:
            return default
    return current


def json_default(value: Any) -> Any:
    """``json.dumps`` hook rendering compiled patterns as their source."""

    if isinstance(value, re.Pattern):
        return value.pattern
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _deepcopy_mapping(mapping: MappingType[str, Any]) -> dict[str, Any]:
    """Recursively clone a mapping so callers receive a mutable copy.

    Examples
    --------
    >>> _deepcopy_mapping(MappingProxyType({"a": {"b": 1}}))
    {'a': {'b': 1}}
    """

    return {key: _deepcopy_value(value) for key, value in mapping.items()}


def _deepcopy_value(value: Any) -> Any:
    """Clone nested values while preserving container types where practical.

    Compiled patterns and other scalars are immutable and returned as-is.

    Examples
    --------
    >>> _deepcopy_value({"nested": [1, 2]})
    {'nested': [1, 2]}
    >>> _deepcopy_value(("a", "b"))
    ('a', 'b')
    """

    if isinstance(value, MappingABC):
        return _deepcopy_mapping(value)
    if isinstance(value, list):
        return [_deepcopy_value(item) for item in value]
    if isinstance(value, (set, tuple)):
        return type(value)(_deepcopy_value(item) for item in value)
    return value


EMPTY_CONFIG = Config(MappingProxyType({}), MappingProxyType({}))
"""Canonical empty configuration resolved for the ``default`` environment."""
