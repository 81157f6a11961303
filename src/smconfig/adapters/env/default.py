"""Environment variable override adapter.

Purpose
-------
Harvest runtime overrides from the process environment. It implements the
:class:`smconfig.application.ports.OverrideLoader` port and forms the highest
precedence layer in ``smconfig``.

Key behaviours
--------------
* ``<NAME>`` and ``<NAME>_<digits>`` carry override text inline.
* ``<NAME>_FILE`` points to a file holding the same syntax (Docker secrets
  under ``/run/secrets`` are the typical use).
* Every value is decoded with :func:`smconfig.adapters.env.parser.parse_env_var`
  and deep-merged: ``<NAME>`` first, numbered variants in ascending order, the
  file last.
* Only key names are logged; values may be secrets.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Mapping

from ...application.merge import deep_merge
from ...domain.errors import InvalidOptions, MalformedInput, OverrideFileEmpty, OverrideFileNotFound
from ...observability import key_names, log_debug, log_error
from .parser import parse_env_var

#: Default name of the variable carrying inline overrides.
DEFAULT_ENV_VAR_NAME = "SMCONFIG"

FILE_SUFFIX = "_FILE"


class DefaultOverrideLoader:
    """Load override pairs from a snapshot of the process environment."""

    def __init__(self, *, environ: Mapping[str, str] | None = None) -> None:
        """Initialise the loader with a specific ``environ`` mapping for testability.

        Parameters
        ----------
        environ:
            Mapping to read from. Defaults to :data:`os.environ`.
        """

        self._environ = os.environ if environ is None else environ
        self.last_loaded_path: str | None = None

    def load(self, name: str = DEFAULT_ENV_VAR_NAME) -> dict[str, object]:
        """Return the merged overrides found under variable *name*.

        Raises
        ------
        InvalidOptions
            When *name* is empty.
        OverrideFileNotFound / OverrideFileEmpty
            When ``<name>_FILE`` is set but unusable.
        MalformedInput
            When any override text fails to parse or the file is not UTF-8.

        Examples
        --------
        >>> env = {'SMCONFIG': 'db.host=primary', 'SMCONFIG_2': 'db.port=5432', 'OTHER': 'x'}
        >>> DefaultOverrideLoader(environ=env).load('SMCONFIG')
        {'db': {'host': 'primary', 'port': 5432}}
        """

        if not name:
            raise InvalidOptions("env_var_name option must not be empty")
        self.last_loaded_path = None
        payloads = [parse_env_var(self._environ[key]) for key in inline_variables(self._environ, name)]
        file_key = name + FILE_SUFFIX
        if file_key in self._environ:
            payloads.append(self._load_file(self._environ[file_key]))
        collected = deep_merge(*payloads)
        log_debug("overrides_loaded", layer="override", path=self.last_loaded_path, keys=key_names(collected))
        return collected

    def _load_file(self, path: str) -> dict[str, object]:
        """Parse the override file at *path*."""

        file_path = Path(path)
        if not file_path.is_file():
            log_error("override_file_missing", layer="override", path=path)
            raise OverrideFileNotFound(f"Cannot read file with environment variables: file doesn't exist: {path}")
        try:
            content = file_path.read_text(encoding="utf-8")
        except UnicodeDecodeError as exc:
            log_error("override_file_invalid", layer="override", path=path, error=str(exc))
            raise MalformedInput(f"Cannot read file with environment variables: not valid UTF-8: {path}") from exc
        if not content:
            log_error("override_file_empty", layer="override", path=path)
            raise OverrideFileEmpty(f"Cannot read file with environment variables: file is empty: {path}")
        self.last_loaded_path = path
        data = parse_env_var(content)
        log_debug("override_file_loaded", layer="override", path=path, keys=key_names(data))
        return data


def inline_variables(environ: Mapping[str, str], name: str) -> list[str]:
    """Return the variables carrying inline overrides for *name*, in merge order.

    Examples
    --------
    >>> inline_variables({'CONF_10': '', 'CONF': '', 'CONF_2': '', 'CONF_FILE': '', 'CONFX': ''}, 'CONF')
    ['CONF', 'CONF_2', 'CONF_10']
    """

    pattern = re.compile(re.escape(name) + r"(?:_([0-9]+))?")
    ranked: list[tuple[int, str]] = []
    for key in environ:
        match = pattern.fullmatch(key)
        if match is None:
            continue
        suffix = match.group(1)
        ranked.append((-1 if suffix is None else int(suffix), key))
    return [key for _, key in sorted(ranked)]
