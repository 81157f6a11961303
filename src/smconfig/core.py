"""Composition root for ``smconfig``.

Purpose
-------
Provide the single entry point that folds configuration sources together,
resolves the active environment, harvests runtime overrides, and stacks the
resulting layers into an immutable :class:`~smconfig.domain.config.Config`.

Contents
--------
* :func:`read_config` – high-level API returning a :class:`Config` instance.
* :func:`collect_sources` – folds sources into the raw accumulator tree.
* :func:`_normalize_options` – validates the ``options`` mapping.

Precedence
----------
Sources merge left to right. The final snapshot stacks, from lowest to highest
precedence: the ``default`` layer, the layer named after the resolved
environment, and the overrides parsed from ``<NAME>``, ``<NAME>_<N>`` and
``<NAME>_FILE``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Sequence

from .adapters.env.default import DEFAULT_ENV_VAR_NAME, DefaultOverrideLoader
from .adapters.environment.default import DEFAULT_ENVIRONMENT_VARIABLE, DefaultEnvironmentResolver
from .adapters.file_loaders.structured import load_config_file
from .application.merge import deep_merge, merge_layers
from .domain.config import DEFAULT_ENVIRONMENT, Config
from .domain.errors import InvalidOptions, MissingDefaultLayer
from .domain.sources import FilePath, InlineTree, PriorInstance, RawSource, Source, as_sources
from .observability import log_debug, log_info, make_event

#: Top-level key holding the hostname-matching table; never a layer.
HOSTNAMES_KEY = "hostnames"

_KNOWN_OPTIONS = frozenset({"env_var_name", "environment_variable", "flatten"})


@dataclass(frozen=True, slots=True)
class Options:
    """Validated construction options."""

    env_var_name: str = DEFAULT_ENV_VAR_NAME
    environment_variable: str = DEFAULT_ENVIRONMENT_VARIABLE


def read_config(
    sources: RawSource | Sequence[RawSource],
    env: str | None = None,
    options: Mapping[str, Any] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
    hostname: str | None = None,
) -> Config:
    """Resolve *sources* for the current process and return the merged snapshot.

    Parameters
    ----------
    sources:
        A mapping, a JSON/YAML/Hjson file path, a previously resolved
        :class:`Config`, or a list mixing those. Later sources win.
    env:
        Force a specific environment name.
    options:
        Mapping with ``env_var_name`` (default ``"SMCONFIG"``) and
        ``environment_variable`` (default ``"APP_ENV"``).
    environ:
        Process-variable snapshot; defaults to :data:`os.environ`.
    hostname:
        Machine hostname; defaults to :func:`socket.gethostname`.

    Raises
    ------
    ConfigError
        Any subclass from :mod:`smconfig.domain.errors`; construction is
        all-or-nothing.

    Examples
    --------
    >>> cfg = read_config(
    ...     {"default": {"foo": "bar"}, "prod": {"foo": "override"}, "hostnames": {"prod": ["*.example.com"]}},
    ...     environ={},
    ...     hostname="db1.example.com",
    ... )
    >>> cfg.environment, cfg.get("foo")
    ('prod', 'override')
    >>> read_config({"default": {"foo": "bar"}}, environ={"SMCONFIG": "foo=fromenv"}).get("foo")
    'fromenv'
    """

    settings = _normalize_options(options)
    collected = collect_sources(as_sources(sources))

    default_layer = collected.get(DEFAULT_ENVIRONMENT)
    if not isinstance(default_layer, Mapping):
        raise MissingDefaultLayer("Cannot find default environment configuration in config parameter")
    if not settings.env_var_name:
        raise InvalidOptions("env_var_name option must not be empty")

    resolver = DefaultEnvironmentResolver(
        environ=environ,
        hostname=hostname,
        environment_variable=settings.environment_variable,
    )
    environment = resolver.resolve(env, collected.get(HOSTNAMES_KEY))
    environment_layer = _select_layer(collected, environment)

    override_loader = DefaultOverrideLoader(environ=environ)
    overrides = override_loader.load(settings.env_var_name)

    merged, meta = merge_layers(
        [
            (DEFAULT_ENVIRONMENT, default_layer, None),
            (environment, environment_layer, None),
            ("override", overrides, None),
        ]
    )
    log_info(
        "configuration_resolved",
        layer="final",
        path=None,
        environment=environment,
        rule=resolver.last_rule,
        keys=len(merged),
    )
    return Config(merged, meta, environment)


def collect_sources(sources: Sequence[Source]) -> dict[str, object]:
    """Fold *sources* left to right into one raw tree.

    A :class:`PriorInstance` contributes its resolved data under ``default``
    only; its own environment layering is already collapsed.

    Examples
    --------
    >>> base = read_config({"default": {"a": 1, "b": 1}}, environ={})
    >>> collect_sources([PriorInstance(base), InlineTree({"default": {"b": 2}, "dev": {"c": 3}})])
    {'default': {'a': 1, 'b': 2}, 'dev': {'c': 3}}
    """

    collected: dict[str, object] = {}
    for source in sources:
        payload, path = _materialize(source)
        collected = deep_merge(collected, payload)
        log_debug("source_merged", **make_event("source", path, {"kind": type(source).__name__}))
    return collected


def _materialize(source: Source) -> tuple[Mapping[str, object], str | None]:
    """Return the raw tree for one source and the path it came from."""

    if isinstance(source, InlineTree):
        return source.tree, None
    if isinstance(source, FilePath):
        return load_config_file(source.path), source.path
    if isinstance(source, PriorInstance):
        return {DEFAULT_ENVIRONMENT: source.config.all()}, None
    raise TypeError(f"Unhandled source variant {type(source).__name__}")  # pragma: no cover


def _select_layer(collected: Mapping[str, object], environment: str) -> Mapping[str, object]:
    """Return the layer named *environment*, or an empty mapping."""

    if environment == HOSTNAMES_KEY:
        return {}
    layer = collected.get(environment)
    return layer if isinstance(layer, Mapping) else {}


def _normalize_options(options: Mapping[str, Any] | None) -> Options:
    """Validate *options* and apply defaults.

    Examples
    --------
    >>> _normalize_options({"env_var_name": "CONF"})
    Options(env_var_name='CONF', environment_variable='APP_ENV')
    >>> _normalize_options("invalid")
    Traceback (most recent call last):
    ...
    smconfig.domain.errors.InvalidOptions: The options parameter must be a dictionary
    """

    if options is None:
        return Options()
    if not isinstance(options, Mapping):
        raise InvalidOptions("The options parameter must be a dictionary")
    unknown = sorted(str(key) for key in options if key not in _KNOWN_OPTIONS)
    if unknown:
        log_debug("options_ignored", layer="options", path=None, keys=unknown)
    env_var_name = options.get("env_var_name", DEFAULT_ENV_VAR_NAME)
    environment_variable = options.get("environment_variable", DEFAULT_ENVIRONMENT_VARIABLE)
    if not environment_variable:
        raise InvalidOptions("environment_variable option must not be empty")
    return Options(
        env_var_name="" if not env_var_name else str(env_var_name).strip(),
        environment_variable=str(environment_variable),
    )


__all__ = [
    "Options",
    "read_config",
    "collect_sources",
]
