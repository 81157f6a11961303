"""Application-layer merge policy.

Purpose
-------
Convert a sequence of layer payloads into a single coherent configuration
mapping while tracking provenance. The module is free of I/O so the composition
root can use it both to fold sources together and to stack the ``default``,
environment, and override layers.

Contents
    - ``deep_merge``: fold any number of mappings into a fresh ``dict``.
    - ``merge_layers``: same fold, additionally returning provenance per dotted key.
    - ``_merge_mapping`` / ``_merge_branch`` / ``_set_scalar``: recursive stanzas
      that keep precedence logic readable.

Merge rules
-----------
* Mappings merge key by key, recursively.
* Every other value (scalars, lists, compiled patterns) replaces the earlier
  value wholesale; lists are never concatenated or merged element-wise.
* An empty mapping never erases an existing mapping; it only materialises an
  empty branch where nothing (or a scalar) was before.
* Incoming payloads are deep-copied, so the result never aliases a caller's data.
"""

from __future__ import annotations

from collections.abc import Mapping
from copy import deepcopy
from typing import Iterable

from ..domain.config import SourceInfo


def deep_merge(*payloads: Mapping[str, object]) -> dict[str, object]:
    """Merge *payloads* left to right and return a new nested ``dict``.

    Examples
    --------
    >>> deep_merge({"db": {"host": "a", "port": 1}, "tags": [1, 2]}, {"db": {"host": "b"}, "tags": [3]})
    {'db': {'host': 'b', 'port': 1}, 'tags': [3]}
    """

    merged: dict[str, object] = {}
    for payload in payloads:
        _merge_mapping(merged, None, payload, "", None, [])
    return merged


def merge_layers(
    layers: Iterable[tuple[str, Mapping[str, object], str | None]],
) -> tuple[dict[str, object], dict[str, SourceInfo]]:
    """Merge configuration *layers* honouring precedence and provenance.

    Parameters
    ----------
    layers:
        Iterable of ``(layer_name, mapping, source_path)`` tuples ordered from
        lowest to highest precedence.

    Returns
    -------
    tuple[dict[str, object], dict[str, SourceInfo]]
        ``(merged_data, provenance)`` where ``provenance`` maps dotted keys of
        leaf values to the layer that supplied them.

    Examples
    --------
    >>> merged, meta = merge_layers([
    ...     ("default", {"service": {"timeout": 5}}, None),
    ...     ("override", {"service": {"timeout": 10}}, None),
    ... ])
    >>> merged["service"]["timeout"], meta["service.timeout"]["layer"]
    (10, 'override')
    """

    merged: dict[str, object] = {}
    meta: dict[str, SourceInfo] = {}
    for layer_name, data, path in layers:
        _merge_mapping(merged, meta, data, layer_name, path, [])
    return merged, meta


def _merge_mapping(
    target: dict[str, object],
    meta: dict[str, SourceInfo] | None,
    incoming: Mapping[str, object],
    layer: str,
    path: str | None,
    segments: list[str],
) -> None:
    """Recursively merge ``incoming`` into ``target`` while recording provenance."""

    for key, value in incoming.items():
        dotted = ".".join([*segments, str(key)])
        if isinstance(value, Mapping):
            _merge_branch(target, meta, key, value, dotted, layer, path, segments)
        else:
            _set_scalar(target, meta, key, value, dotted, layer, path)


def _merge_branch(
    target: dict[str, object],
    meta: dict[str, SourceInfo] | None,
    key: str,
    value: Mapping[str, object],
    dotted: str,
    layer: str,
    path: str | None,
    segments: list[str],
) -> None:
    """Merge mapping ``value`` into ``target[key]`` and recurse."""

    existing = target.get(key)
    if not isinstance(existing, dict):
        _clear_branch(meta, dotted)
        existing = {}
        target[key] = existing
    _merge_mapping(existing, meta, value, layer, path, [*segments, str(key)])


def _set_scalar(
    target: dict[str, object],
    meta: dict[str, SourceInfo] | None,
    key: str,
    value: object,
    dotted: str,
    layer: str,
    path: str | None,
) -> None:
    """Assign a non-mapping value and update provenance for ``dotted``."""

    _clear_branch(meta, dotted)
    target[key] = deepcopy(value)
    if meta is not None:
        meta[dotted] = SourceInfo(layer=layer, path=path, key=dotted)


def _clear_branch(meta: dict[str, SourceInfo] | None, prefix: str) -> None:
    """Remove provenance entries that belong to *prefix* or its descendants."""

    if meta is None:
        return
    for meta_key in list(meta.keys()):
        if meta_key == prefix or meta_key.startswith(prefix + "."):
            meta.pop(meta_key, None)
