"""Domain-level exception hierarchy.

Purpose
-------
Expose the stable error taxonomy shared by adapters, the composition root, and
consuming applications. The hierarchy lives in the domain layer so adapters can
raise it without importing anything from the outer layers.

Contents
--------
* :class:`ConfigError` – umbrella base class for all ``smconfig`` failures.
* :class:`InvalidArgument` / :class:`InvalidOptions` – caller passed unusable
  ``sources`` or ``options``.
* :class:`MissingDefaultLayer` – merged sources lack a ``default`` mapping.
* :class:`FileNotFound` / :class:`UnsupportedFormat` / :class:`ParseError` –
  configuration file problems.
* :class:`UnsupportedSourceFeature` – YAML constructs with no Python meaning.
* :class:`OverrideFileNotFound` / :class:`OverrideFileEmpty` – problems with the
  ``<NAME>_FILE`` indirection.
* :class:`MalformedInput` – override mini-language syntax errors.
* :class:`InvalidKey` – :meth:`Config.get` called with an unusable key.

System Role
-----------
Every failure aborts construction; nothing here is recoverable by retrying.
Callers catch :class:`ConfigError` to handle all library failures uniformly.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base type for all exceptions emitted by ``smconfig``."""


class InvalidArgument(ConfigError, TypeError):
    """Raised when ``sources`` (or another argument) has an unusable type or value."""


class InvalidOptions(InvalidArgument):
    """Raised when ``options`` is not a mapping or carries an invalid value.

    Typical Sources
    ---------------
    An empty ``env_var_name`` or a non-mapping ``options`` argument.
    """


class MissingDefaultLayer(ConfigError):
    """Raised when the merged sources lack a ``default`` key holding a mapping."""


class FileNotFound(ConfigError):
    """Raised when a configuration file does not exist."""


class UnsupportedFormat(ConfigError):
    """Raised when a configuration file extension has no registered loader."""


class ParseError(ConfigError):
    """Raised when a file cannot be parsed into a configuration mapping.

    Typical Sources
    ---------------
    :mod:`json`, :mod:`yaml`, and :mod:`hjson` decode errors, or documents whose
    top level is not a mapping.
    """


class UnsupportedSourceFeature(ParseError):
    """Raised when a source uses a construct that has no safe Python equivalent.

    Current Usage
    -------------
    YAML ``!!js/function`` scalars.
    """


class OverrideFileNotFound(FileNotFound):
    """Raised when ``<NAME>_FILE`` points to a path that does not exist."""


class OverrideFileEmpty(ConfigError):
    """Raised when the file referenced by ``<NAME>_FILE`` has no content."""


class MalformedInput(ConfigError, ValueError):
    """Raised when override text ends mid-key or inside an open quote."""


class InvalidKey(ConfigError, KeyError):
    """Raised when a lookup key is empty or not a string."""

    def __str__(self) -> str:
        # KeyError repr-quotes its message; keep the plain text.
        return str(self.args[0]) if self.args else ""
