"""Application-layer ports describing adapter responsibilities.

Purpose
-------
Define the structural contracts that adapters must satisfy so the composition
root can orchestrate behaviour without depending on concrete implementations.

Contents
--------
* :class:`FileLoader` – parses a structured configuration file.
* :class:`EnvironmentResolver` – picks the active environment name.
* :class:`OverrideLoader` – harvests runtime overrides from the process environment.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable


@runtime_checkable
class FileLoader(Protocol):
    """Parse a structured configuration file into a mapping."""

    def load(self, path: str) -> Mapping[str, object]:
        """Read *path* and return a mapping or raise ``ParseError``."""


@runtime_checkable
class EnvironmentResolver(Protocol):
    """Decide the environment name from explicit input and a hostname table.

    Why
    ----
    Hostname lookup and process variables are external signals; hiding them
    behind a port keeps the composition root testable.
    """

    def resolve(self, env: Any = None, hostnames: Any = None) -> str:
        """Return the environment name; never raises for malformed hostname rules."""


@runtime_checkable
class OverrideLoader(Protocol):
    """Translate override variables into a nested configuration mapping."""

    def load(self, name: str) -> Mapping[str, object]:
        """Return the merged overrides carried by *name*, ``name_<N>`` and ``name_FILE``."""
