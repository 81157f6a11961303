"""Configuration source variants.

Purpose
-------
Give the three kinds of input accepted by :func:`smconfig.core.read_config`
explicit types so the composition root dispatches on a closed set of variants
instead of probing arbitrary objects.

Contents
--------
* :class:`InlineTree` – an in-memory configuration tree.
* :class:`FilePath` – a JSON/YAML/Hjson file to load.
* :class:`PriorInstance` – an already-resolved :class:`Config` reused as a base.
* :func:`as_source` / :func:`as_sources` – classify raw caller input.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Sequence, Union

from .config import Config
from .errors import InvalidArgument


@dataclass(frozen=True, slots=True)
class InlineTree:
    """Configuration tree supplied directly as a mapping."""

    tree: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class FilePath:
    """Configuration file whose extension selects the parser."""

    path: str


@dataclass(frozen=True, slots=True)
class PriorInstance:
    """Previously resolved configuration merged into the ``default`` layer."""

    config: Config


Source = Union[InlineTree, FilePath, PriorInstance]
RawSource = Union[Source, Mapping[str, Any], str, "os.PathLike[str]", Config]


def as_source(value: Any) -> Source:
    """Classify *value* as one of the :data:`Source` variants.

    Examples
    --------
    >>> as_source({"default": {}})
    InlineTree(tree={'default': {}})
    >>> as_source("settings.yaml")
    FilePath(path='settings.yaml')
    >>> as_source(42)
    Traceback (most recent call last):
    ...
    smconfig.domain.errors.InvalidArgument: Parameter sources must be mappings, paths or Config instances, got int
    """

    if isinstance(value, (InlineTree, FilePath, PriorInstance)):
        return value
    # Config is itself a Mapping, so it must be checked first.
    if isinstance(value, Config):
        return PriorInstance(value)
    if isinstance(value, Mapping):
        return InlineTree(value)
    if isinstance(value, (str, os.PathLike)):
        return FilePath(os.fspath(value))
    raise InvalidArgument(
        f"Parameter sources must be mappings, paths or Config instances, got {type(value).__name__}"
    )


def as_sources(sources: RawSource | Sequence[RawSource] | None) -> list[Source]:
    """Normalise *sources* into a list of variants, wrapping a bare single source.

    Raises
    ------
    InvalidArgument
        When *sources* is missing or any entry has an unsupported type.

    Examples
    --------
    >>> as_sources([{"default": {}}, "extra.json"])
    [InlineTree(tree={'default': {}}), FilePath(path='extra.json')]
    """

    if sources is None or (isinstance(sources, str) and not sources):
        raise InvalidArgument("Parameter sources must be set")
    if isinstance(sources, (list, tuple)):
        return [as_source(entry) for entry in sources]
    return [as_source(sources)]
