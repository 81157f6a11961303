"""Public package surface for ``smconfig``.

Resolve layered, environment-aware configuration from mappings and
JSON/YAML/Hjson files, with runtime overrides taken from process environment
variables. :func:`read_config` is the entry point; it returns an immutable
:class:`Config` snapshot.
"""

from __future__ import annotations

from .adapters.env.parser import parse_env_var
from .adapters.environment.default import get_environment
from .adapters.file_loaders.structured import load_config_file
from .core import Options, read_config
from .domain.config import EMPTY_CONFIG, Config, SourceInfo
from .domain.errors import (
    ConfigError,
    FileNotFound,
    InvalidArgument,
    InvalidKey,
    InvalidOptions,
    MalformedInput,
    MissingDefaultLayer,
    OverrideFileEmpty,
    OverrideFileNotFound,
    ParseError,
    UnsupportedFormat,
    UnsupportedSourceFeature,
)
from .domain.sources import FilePath, InlineTree, PriorInstance
from .observability import bind_trace_id, get_logger

__all__ = [
    "Config",
    "ConfigError",
    "EMPTY_CONFIG",
    "FileNotFound",
    "FilePath",
    "InlineTree",
    "InvalidArgument",
    "InvalidKey",
    "InvalidOptions",
    "MalformedInput",
    "MissingDefaultLayer",
    "Options",
    "OverrideFileEmpty",
    "OverrideFileNotFound",
    "ParseError",
    "PriorInstance",
    "SourceInfo",
    "UnsupportedFormat",
    "UnsupportedSourceFeature",
    "bind_trace_id",
    "get_environment",
    "get_logger",
    "load_config_file",
    "parse_env_var",
    "read_config",
]
